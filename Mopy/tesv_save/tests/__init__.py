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
"""Helpers for building saves in memory, so that every test can spell out the
exact bytes it feeds to the decoder."""
import io

from ..bolt import pack_byte, pack_float, pack_int, pack_int64, pack_short, \
    pack_str16

# A header with every string empty and a 1x1 screenshot
header_defaults = {
    'version': 9,
    'save_number': 0,
    'player_name': b'',
    'player_level': 0,
    'player_location': b'',
    'game_date': b'',
    'player_race_eid': b'',
    'player_sex': 0,
    'player_cur_exp': 0.0,
    'player_lvl_up_exp': 0.0,
    'filetime_ticks': 0,
    'ss_width': 1,
    'ss_height': 1,
}

def pack_header(out, **header_overrides):
    """Writes a header to out, in on-disk order. Any field not specified
    comes from header_defaults."""
    hdr = {**header_defaults, **header_overrides}
    pack_int(out, hdr['version'])
    pack_int(out, hdr['save_number'])
    pack_str16(out, hdr['player_name'])
    pack_int(out, hdr['player_level'])
    pack_str16(out, hdr['player_location'])
    pack_str16(out, hdr['game_date'])
    pack_str16(out, hdr['player_race_eid'])
    pack_short(out, hdr['player_sex'])
    pack_float(out, hdr['player_cur_exp'])
    pack_float(out, hdr['player_lvl_up_exp'])
    pack_int64(out, hdr['filetime_ticks'])
    pack_int(out, hdr['ss_width'])
    pack_int(out, hdr['ss_height'])

def build_save(*, magic=b'TESV_SAVEGAME', header_size=0, pixels=None,
               header_only=False, form_version=0, plugin_info_size=0,
               plugins=(), location_table=(0,) * 10, unused=(0,) * 15,
               trailing=b'', **header_overrides) -> bytes:
    """Builds a complete save and returns its bytes. pixels defaults to a
    black screenshot of the size given in the header. With header_only, the
    save ends right after the screenshot."""
    out = io.BytesIO()
    out.write(magic)
    pack_int(out, header_size)
    pack_header(out, **header_overrides)
    if pixels is None:
        hdr = {**header_defaults, **header_overrides}
        pixels = bytes(3 * hdr['ss_width'] * hdr['ss_height'])
    out.write(pixels)
    if not header_only:
        pack_byte(out, form_version)
        pack_int(out, plugin_info_size)
        pack_byte(out, len(plugins))
        for plugin in plugins:
            pack_str16(out, plugin)
        for table_val in (*location_table, *unused):
            pack_int(out, table_val)
    out.write(trailing)
    return out.getvalue()

class RecordingIO(io.BytesIO):
    """BytesIO that remembers where and how much every read asked for."""
    def __init__(self, initial_bytes=b''):
        super(RecordingIO, self).__init__(initial_bytes)
        self.reads = []

    def read(self, size=-1):
        self.reads.append((self.tell(), size))
        return super(RecordingIO, self).read(size)
