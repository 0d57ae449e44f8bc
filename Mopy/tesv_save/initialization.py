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
"""Functions for initializing settings on boot. Reads the ini into
bass.inisettings, using the defaults below for anything missing or
invalid."""
from __future__ import annotations

import os
from configparser import ConfigParser, Error as _ConfigParserError

from . import bass, bolt
from .bolt import deprint
from .bosh.save_headers import SaveLayout
from .exception import ArgumentError

# Without an ini, TestSave.ess is read and its screenshot written to output.jpg
_ini_defaults = {
    'sSaveFile': 'TestSave.ess',
    'sScreenshotFile': 'output.jpg',
    'iJpegQuality': 100,
    'sPluginEncoding': '',
    'sLayout': SaveLayout.FULL,
}

def _get_ini_option(ini_parser, option_key) -> str | None:
    if not ini_parser:
        return None
    # get(section, key, fallback=default). section is case sensitive - key is
    # not
    return ini_parser.get('General', option_key, fallback=None)

def _ini_parser(ini_path):
    ini_parser = None
    if ini_path and os.path.exists(ini_path):
        ini_parser = ConfigParser()
        try:
            ini_parser.read(ini_path, encoding='utf-8')
        except (_ConfigParserError, UnicodeDecodeError):
            deprint(f'Failed to parse {ini_path}, using default settings',
                    traceback=True)
            return None
    return ini_parser

def _parse_option(option_key, ini_value):
    """Converts a raw ini value to the type of its default. The prefix of the
    key tells the type, as in bash.ini: s for strings, i for integers."""
    if option_key == 'sLayout':
        return SaveLayout.from_name(ini_value)
    if option_key.startswith('i'):
        return int(ini_value)
    return ini_value.strip()

def init_settings(ini_path=None) -> dict:
    """Fills bass.inisettings from the ini at ini_path (if it exists) and
    returns it. Also sets the preferred encoding for displaying strings."""
    ini_parser = _ini_parser(ini_path)
    bass.inisettings.clear()
    for option_key, default in _ini_defaults.items():
        if (ini_value := _get_ini_option(ini_parser, option_key)) is None:
            bass.inisettings[option_key] = default
            continue
        try:
            bass.inisettings[option_key] = _parse_option(option_key,
                                                         ini_value)
        except (ArgumentError, ValueError):
            deprint(f'Invalid value {ini_value!r} for {option_key} in '
                    f'{ini_path}, using {default!r} instead')
            bass.inisettings[option_key] = default
    bolt.pluginEncoding = bass.inisettings['sPluginEncoding'] or None
    return bass.inisettings
