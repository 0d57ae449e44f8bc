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
"""This module runs the save reader in console mode: it reads the settings,
decodes the save, prints it and exports its screenshot."""
import sys

from . import bass, bolt, initialization
from .bolt import deprint
from .bosh.save_headers import SaveLayout, decode_path
from .bosh.screenshots import export_screenshot
from .exception import ArgumentError, DecodeError

# Main ------------------------------------------------------------------------
def main(opts, out=None) -> int:
    """Decode the save specified by opts and report on it. Returns the exit
    code: 0 on success, 1 if the save could not be read or decoded and 2 if
    the options were invalid.

    :param opts: command line arguments, as returned by barg.parse
    :type opts: Namespace
    :param out: Stream to print the decoded save to. Defaults to stdout."""
    settings = initialization.init_settings(opts.ini_path)
    save_path = opts.save_path or settings['sSaveFile']
    try:
        layout = (SaveLayout.from_name(opts.layout) if opts.layout
                  else settings['sLayout'])
    except ArgumentError as e:
        deprint(f'{e}')
        return 2
    try:
        save_file = decode_path(save_path, layout)
    except DecodeError:
        deprint(f'Failed to decode {save_path}', traceback=True)
        return 1
    except OSError:
        deprint(f'Failed to read {save_path}', traceback=True)
        return 1
    if not opts.quiet:
        save_file.dump_to_log(bolt.LogFile(out or sys.stdout))
    if not opts.no_screenshot:
        shot_path = opts.screenshot_path or settings['sScreenshotFile']
        try:
            export_screenshot(save_file.screenshot, shot_path,
                              settings['iJpegQuality'])
        except (ArgumentError, OSError):
            deprint(f'Failed to export the screenshot of {save_path} to '
                    f'{shot_path}', traceback=True)
            return 1
    deprint(f'Decoded {save_path} (reader version {bass.AppVersion})')
    return 0
