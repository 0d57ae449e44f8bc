# -*- coding: utf-8 -*-
#
# GPL License and Copyright Notice ============================================
#  This file is part of TESV Save Reader.
#
#  TESV Save Reader is free software: you can redistribute it and/or
#  modify it under the terms of the GNU General Public License
#  as published by the Free Software Foundation, either version 3
#  of the License, or (at your option) any later version.
#
#  TESV Save Reader is distributed in the hope that it will be useful,
#  but WITHOUT ANY WARRANTY; without even the implied warranty of
#  MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
#  GNU General Public License for more details.
#
#  You should have received a copy of the GNU General Public License
#  along with TESV Save Reader.  If not, see <https://www.gnu.org/licenses/>.
#
#  Based on Wrye Bash, copyright (C) 2005-2009 Wrye, 2010-2023 Wrye Bash Team
#  https://github.com/wrye-bash
#
# =============================================================================
"""Entry point for 'python -m tesv_save' and the tesv-save script."""
import sys

from . import barg
from .tesv_save import main

def run():
    sys.exit(main(barg.parse()))

if __name__ == '__main__':
    run()
