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
"""This module just stores some data that all modules have to be able to access
without worrying about circular imports. Decoded saves are never stored here -
each decode returns its own SaveFile."""

# no imports

AppVersion = '1.0'

# settings read from the ini in initialization.init_settings()
inisettings = {}
