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

"""Decoding of Skyrim (TESV) save files. A save is read in one pass, every
section starting exactly where the previous one stopped:

    magic, header size, header, screenshot, form version, plugin info size,
    plugin list, file location table

Only the file location table's offsets are extracted - the change forms and
global data tables it points at are not parsed here. Everything decoded is
returned as immutable records owned by the caller."""
from __future__ import annotations

import datetime
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import ClassVar

from ..bolt import display_str, filetime_to_datetime, filetime_to_unix_ns, \
    read_at, unpack_byte_at, unpack_bytes_at, unpack_float_at, \
    unpack_int64_at, unpack_int_at, unpack_short_at, unpack_str16_at
from ..exception import ArgumentError, FormatError, SizeOverflowError

# Largest byte count a save can declare for a section (sizes are u32s)
_MAX_SECTION_SIZE = 0xFFFFFFFF

# Layouts ---------------------------------------------------------------------
class SaveLayout(Enum):
    """Which sections of the save to decode. HEADER stops right after the
    screenshot, which is all that is needed to list saves; FULL goes on to
    read the plugin list and the file location table."""
    HEADER = 'header'
    FULL = 'full'

    @classmethod
    def from_name(cls, layout_name: str) -> SaveLayout:
        try:
            return cls(layout_name.strip().lower())
        except ValueError:
            raise ArgumentError(
                f'Unknown save layout {layout_name!r} - expected one of '
                f'{", ".join(l.value for l in cls)}') from None

# Header ----------------------------------------------------------------------
@dataclass(slots=True, frozen=True)
class Header:
    """The player and save metadata stored right after the header size."""
    version: int
    save_number: int
    player_name: bytes
    player_level: int
    player_location: bytes
    game_date: bytes
    player_race_eid: bytes
    player_sex: int
    player_cur_exp: float
    player_lvl_up_exp: float
    filetime_ticks: int
    ss_width: int
    ss_height: int

    # map fields to their unpackers - the order here *is* the on-disk order
    _unpackers: ClassVar[dict] = {
        'version':           unpack_int_at,
        'save_number':       unpack_int_at,
        'player_name':       unpack_str16_at,
        'player_level':      unpack_int_at,
        'player_location':   unpack_str16_at,
        'game_date':         unpack_str16_at,
        'player_race_eid':   unpack_str16_at,
        'player_sex':        unpack_short_at,
        'player_cur_exp':    unpack_float_at,
        'player_lvl_up_exp': unpack_float_at,
        'filetime_ticks':    unpack_int64_at,
        'ss_width':          unpack_int_at,
        'ss_height':         unpack_int_at,
    }

    @classmethod
    def load_header(cls, ins, offset: int) -> tuple[Header, int]:
        """Reads every header field in order, starting at offset. Returns the
        header and the offset right after its last field."""
        header_fields = {}
        for attr, _unpack in cls._unpackers.items():
            header_fields[attr], offset = _unpack(ins, offset,
                                                  f'header.{attr}')
        return cls(**header_fields), offset

    @property
    def play_seconds(self) -> int | None:
        """The in-game play time in seconds, parsed from game_date (format:
        hours.minutes.seconds). None if game_date does not follow it."""
        try:
            hours, minutes, seconds = [int(x) for x in
                                       self.game_date.split(b'.')]
        except ValueError:
            return None
        return hours * 60 * 60 + minutes * 60 + seconds

    @property
    def filetime(self) -> datetime.datetime | None:
        """When the save was made, as an aware UTC datetime truncated to
        microseconds. None if filetime_ticks lies past datetime.MAXYEAR."""
        try:
            return filetime_to_datetime(self.filetime_ticks)
        except OverflowError:
            return None

    @property
    def filetime_unix_ns(self) -> int:
        """When the save was made, in nanoseconds since the Unix epoch."""
        return filetime_to_unix_ns(self.filetime_ticks)

    def dump_to_log(self, log):
        log.setHeader('Save Header')
        log('=' * 40)
        log(f'  Version: {self.version}')
        log(f'  Save number: {self.save_number}')
        log(f'  Player name: {display_str(self.player_name)}')
        log(f'  Player level: {self.player_level}')
        log(f'  Player race: {display_str(self.player_race_eid)}')
        try:
            sex_str = ('Male', 'Female')[self.player_sex]
        except IndexError:
            sex_str = f'{self.player_sex} (unknown)'
        log(f'  Player sex: {sex_str}')
        log(f'  Experience: {self.player_cur_exp:.2f} / '
            f'{self.player_lvl_up_exp:.2f}')
        log(f'  Location: {display_str(self.player_location)}')
        game_date = display_str(self.game_date)
        if (play_secs := self.play_seconds) is not None:
            game_date += f' ({play_secs} seconds played)'
        log(f'  Game date: {game_date}')
        if (saved_on := self.filetime) is None:
            log(f'  Saved on: {self.filetime_ticks} ticks (out of range)')
        else:
            log(f'  Saved on: {saved_on.isoformat()}')
        log(f'  Screenshot size: {self.ss_width}x{self.ss_height}')

# Screenshot ------------------------------------------------------------------
@dataclass(slots=True, frozen=True)
class Screenshot:
    """The save's screenshot as raw RGB pixels. Rows are stored top to bottom
    with no padding, three bytes (red, green, blue) per pixel."""
    width: int
    height: int
    pixels: bytes

    bytes_per_pixel: ClassVar[int] = 3

    @classmethod
    def load_image_data(cls, ins, offset: int, width: int,
                        height: int) -> tuple[Screenshot, int]:
        """Reads a width x height screenshot starting at offset. Returns the
        screenshot and the offset right after its last pixel."""
        in_name = getattr(ins, 'name', None)
        # Neither the row size nor the total may exceed what a u32 can hold
        if (stride := cls.bytes_per_pixel * width) > _MAX_SECTION_SIZE:
            raise SizeOverflowError(in_name, 'screenshot', offset,
                f'Row size of a {width} pixel wide screenshot does not fit '
                f'in {_MAX_SECTION_SIZE} bytes')
        if (image_size := stride * height) > _MAX_SECTION_SIZE:
            raise SizeOverflowError(in_name, 'screenshot', offset,
                f'A {width}x{height} screenshot does not fit in '
                f'{_MAX_SECTION_SIZE} bytes')
        pixels, offset = unpack_bytes_at(ins, offset, image_size,
                                         'screenshot')
        return cls(width, height, pixels), offset

    @property
    def stride(self) -> int:
        """The number of bytes in one row of pixels."""
        return self.bytes_per_pixel * self.width

    def row(self, y: int) -> bytes:
        if not 0 <= y < self.height:
            raise IndexError(f'Row {y} out of range (height {self.height})')
        return self.pixels[y * self.stride:(y + 1) * self.stride]

    def pixel(self, x: int, y: int) -> tuple[int, int, int]:
        """Returns the (red, green, blue) values of the pixel at x, y, with
        0, 0 being the top left corner."""
        if not 0 <= x < self.width:
            raise IndexError(f'Column {x} out of range (width {self.width})')
        if not 0 <= y < self.height:
            raise IndexError(f'Row {y} out of range (height {self.height})')
        start = y * self.stride + x * self.bytes_per_pixel
        r, g, b = self.pixels[start:start + self.bytes_per_pixel]
        return r, g, b

    def __len__(self):
        return len(self.pixels)

# Plugins ---------------------------------------------------------------------
@dataclass(slots=True, frozen=True)
class PluginInfo:
    """The plugins that were active when the game was saved, in load
    order."""
    plugin_count: int
    plugins: tuple[bytes, ...]

    @classmethod
    def load_plugins(cls, ins, offset: int) -> tuple[PluginInfo, int]:
        plugin_count, offset = unpack_byte_at(ins, offset,
                                              'plugin_info.plugin_count')
        plugins = []
        append_plugin = plugins.append
        for plugin_index in range(plugin_count):
            plugin, offset = unpack_str16_at(ins, offset,
                f'plugin_info.plugins[{plugin_index}]')
            append_plugin(plugin)
        return cls(plugin_count, tuple(plugins)), offset

    def dump_to_log(self, log):
        log.setHeader('Plugins')
        log('=' * 40)
        log(f'  {self.plugin_count} active plugin(s)')
        for load_index, plugin in enumerate(self.plugins):
            log(f'  {load_index:02X} {display_str(plugin)}')

# File Location Table ---------------------------------------------------------
@dataclass(slots=True, frozen=True)
class FileLocationTable:
    """Offsets and counts of the sections that follow the plugin list. These
    are read positionally and never followed."""
    form_id_array_count_offset: int
    unknown_table3_offset: int
    global_data_table1_offset: int
    global_data_table2_offset: int
    change_forms_offset: int
    global_data_table3_offset: int
    global_data_table1_count: int
    global_data_table2_count: int
    global_data_table3_count: int
    change_form_count: int
    unused: tuple[int, ...]

    # reserved block after the named fields, always present in full
    num_unused: ClassVar[int] = 15

    @classmethod
    def load_table(cls, ins, offset: int) -> tuple[FileLocationTable, int]:
        table_fields = {}
        for fld in fields(cls):
            if fld.name == 'unused': continue
            table_fields[fld.name], offset = unpack_int_at(ins, offset,
                f'file_location_table.{fld.name}')
        unused = []
        for unused_index in range(cls.num_unused):
            val, offset = unpack_int_at(ins, offset,
                f'file_location_table.unused[{unused_index}]')
            unused.append(val)
        return cls(**table_fields, unused=tuple(unused)), offset

    def dump_to_log(self, log):
        log.setHeader('File Location Table')
        log('=' * 40)
        for fld in fields(self):
            if fld.name == 'unused': continue
            val = getattr(self, fld.name)
            log(f'  {fld.name}: 0x{val:08X} ({val})')
        log(f'  unused: {" ".join(f"{u:08X}" for u in self.unused)}')

# Save File -------------------------------------------------------------------
@dataclass(slots=True, frozen=True)
class SaveFile:
    """A decoded save. The sections past the screenshot are None when the
    save was decoded with SaveLayout.HEADER. header_size and
    plugin_info_size are kept as stored - nothing is checked against them."""
    magic: bytes
    header_size: int
    header: Header
    screenshot: Screenshot
    form_version: int | None = None
    plugin_info_size: int | None = None
    plugin_info: PluginInfo | None = None
    file_location_table: FileLocationTable | None = None
    # the offset right after the last byte that was decoded
    end_offset: int = field(kw_only=True)

    save_magic: ClassVar[bytes] = b'TESV_SAVEGAME'

    @property
    def layout(self) -> SaveLayout:
        return (SaveLayout.HEADER if self.file_location_table is None
                else SaveLayout.FULL)

    def dump_to_log(self, log):
        """Dumps a human-readable report of this save into the specified
        log.

        :param log: A bolt.Log instance to write to."""
        log.setHeader('Save File')
        log('=' * 40)
        log(f'  Magic: {self.magic.decode("ascii")}')
        log(f'  Header size: {self.header_size}')
        self.header.dump_to_log(log)
        log(f'  Screenshot data: {len(self.screenshot)} bytes')
        if self.layout is SaveLayout.FULL:
            log(f'  Form version: {self.form_version}')
            log(f'  Plugin info size: {self.plugin_info_size}')
            self.plugin_info.dump_to_log(log)
            self.file_location_table.dump_to_log(log)

def _check_magic(ins) -> tuple[bytes, int]:
    save_magic = SaveFile.save_magic
    magic = read_at(ins, 0, len(save_magic), 'magic')
    if magic != save_magic:
        raise FormatError(getattr(ins, 'name', None), 'magic', 0,
                          save_magic, magic)
    return magic, len(save_magic)

def decode(ins, layout: SaveLayout = SaveLayout.FULL) -> SaveFile:
    """Decodes the save in the seekable binary stream ins. The stream is
    neither closed nor rewound afterwards - its owner stays responsible for
    it. The first problem encountered is raised as a DecodeError subclass,
    so either a complete SaveFile is returned or nothing is.

    :param ins: A binary stream supporting seek and read.
    :param layout: Which sections to decode, see SaveLayout."""
    magic, offset = _check_magic(ins)
    header_size, offset = unpack_int_at(ins, offset, 'header_size')
    header, offset = Header.load_header(ins, offset)
    screenshot, offset = Screenshot.load_image_data(ins, offset,
        header.ss_width, header.ss_height)
    if layout is SaveLayout.HEADER:
        return SaveFile(magic, header_size, header, screenshot,
                        end_offset=offset)
    form_version, offset = unpack_byte_at(ins, offset, 'form_version')
    plugin_info_size, offset = unpack_int_at(ins, offset, 'plugin_info_size')
    plugin_info, offset = PluginInfo.load_plugins(ins, offset)
    location_table, offset = FileLocationTable.load_table(ins, offset)
    return SaveFile(magic, header_size, header, screenshot, form_version,
                    plugin_info_size, plugin_info, location_table,
                    end_offset=offset)

def decode_path(save_path, layout: SaveLayout = SaveLayout.FULL) -> SaveFile:
    """Opens the save at save_path, decodes it and closes it again."""
    with open(save_path, 'rb') as ins:
        return decode(ins, layout)
