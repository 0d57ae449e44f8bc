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
import datetime
import io

import pytest

from ..bolt import FILETIME_EPOCH, LogFile, cstrip, decoder, display_str, \
    filetime_to_datetime, filetime_to_unix_ns, log_to_string, read_at, \
    unpack_byte_at, unpack_float_at, unpack_int64_at, unpack_int_at, \
    unpack_short_at, unpack_str16_at
from ..exception import SeekError, ShortReadError

_utc = datetime.timezone.utc

class _Unseekable(io.BytesIO):
    def seek(self, *args):
        raise io.UnsupportedOperation('seek')

class TestReadAt(object):
    def test_read_at(self):
        """Tests reading from absolute offsets, regardless of the current
        position of the stream."""
        ins = io.BytesIO(b'\x00\x01\x02\x03\x04')
        assert read_at(ins, 2, 2, 'test') == b'\x02\x03'
        assert read_at(ins, 0, 1, 'test') == b'\x00'
        assert read_at(ins, 5, 0, 'test') == b''

    def test_read_at_short(self):
        """Tests that reading past the end raises a ShortReadError naming the
        field and offset."""
        ins = io.BytesIO(b'\x00\x01\x02')
        with pytest.raises(ShortReadError) as exc_info:
            read_at(ins, 1, 4, 'some_field')
        err = exc_info.value
        assert err.field_name == 'some_field'
        assert err.offset == 1
        assert err.expected_size == 4
        assert err.actual_size == 2
        assert 'some_field' in str(err)
        assert 'Unknown File' in str(err)

    def test_read_at_seek_errors(self):
        """Tests negative offsets, offsets past the end and unseekable
        sources."""
        with pytest.raises(SeekError) as exc_info:
            read_at(io.BytesIO(b'abc'), -1, 1, 'neg')
        assert exc_info.value.offset == -1
        with pytest.raises(SeekError) as exc_info:
            read_at(io.BytesIO(b'abc'), 4, 1, 'past')
        assert exc_info.value.max_pos == 3
        with pytest.raises(SeekError):
            read_at(_Unseekable(b'abc'), 0, 1, 'unseekable')

    def test_read_at_named_source(self, tmp_path):
        """Tests that errors mention the file they happened in."""
        test_file = tmp_path / 'short.ess'
        test_file.write_bytes(b'\x01')
        with open(test_file, 'rb') as ins:
            with pytest.raises(ShortReadError) as exc_info:
                read_at(ins, 0, 2, 'x')
        assert 'short.ess' in str(exc_info.value)

class TestUnpackers(object):
    def test_integers(self):
        """Tests that all integers are read as little-endian and that the
        returned offset points right after them."""
        ins = io.BytesIO(b'\x01\x02\x03\x04\x05\x06\x07\x08')
        assert unpack_byte_at(ins, 0, 'b') == (0x01, 1)
        assert unpack_short_at(ins, 0, 's') == (0x0201, 2)
        assert unpack_int_at(ins, 0, 'i') == (0x04030201, 4)
        assert unpack_int_at(ins, 4, 'i') == (0x08070605, 8)
        assert unpack_int64_at(ins, 0, 'q') == (0x0807060504030201, 8)

    def test_unsigned(self):
        ins = io.BytesIO(b'\xff' * 8)
        assert unpack_short_at(ins, 0, 's')[0] == 0xFFFF
        assert unpack_int_at(ins, 0, 'i')[0] == 0xFFFFFFFF
        assert unpack_int64_at(ins, 0, 'q')[0] == 0xFFFFFFFFFFFFFFFF

    def test_float(self):
        ins = io.BytesIO(b'\x00\x00\x48\x41\x00\x00\x80\xbf')
        assert unpack_float_at(ins, 0, 'f') == (12.5, 4)
        assert unpack_float_at(ins, 4, 'f') == (-1.0, 8)

    def test_truncated(self):
        with pytest.raises(ShortReadError):
            unpack_int_at(io.BytesIO(b'\x01\x02\x03'), 0, 'i')
        with pytest.raises(ShortReadError):
            unpack_int64_at(io.BytesIO(b'\x01' * 7), 0, 'q')

class TestUnpackStr16(object):
    def test_unpack_str16(self):
        """Tests the example from the format documentation."""
        ins = io.BytesIO(b'\x05\x00\x48\x65\x6c\x6c\x6f')
        assert unpack_str16_at(ins, 0, 'str') == (b'Hello', 7)
        assert display_str(unpack_str16_at(ins, 0, 'str')[0]) == 'Hello'

    def test_unpack_str16_empty(self):
        ins = io.BytesIO(b'\x00\x00')
        assert unpack_str16_at(ins, 0, 'str') == (b'', 2)

    def test_unpack_str16_raw_bytes(self):
        """Tests that the length counts bytes and that the bytes are returned
        as stored, even if they are not valid in any encoding."""
        raw = '警告'.encode('utf-8') + b'\xff'
        ins = io.BytesIO(bytes([len(raw), 0]) + raw + b'rest')
        assert unpack_str16_at(ins, 0, 'str') == (raw, 2 + len(raw))

    def test_unpack_str16_truncated(self):
        ins = io.BytesIO(b'\x05\x00Hell')
        with pytest.raises(ShortReadError) as exc_info:
            unpack_str16_at(ins, 0, 'str')
        assert exc_info.value.offset == 2
        assert exc_info.value.actual_size == 4
        with pytest.raises(ShortReadError) as exc_info:
            unpack_str16_at(io.BytesIO(b'\x05'), 0, 'str')
        assert exc_info.value.offset == 0

class TestFiletime(object):
    def test_epoch(self):
        assert FILETIME_EPOCH == datetime.datetime(1601, 1, 1, tzinfo=_utc)
        assert filetime_to_datetime(0) == FILETIME_EPOCH

    def test_unix_epoch(self):
        assert filetime_to_datetime(116444736000000000) == datetime.datetime(
            1970, 1, 1, tzinfo=_utc)

    def test_release_date(self):
        # 2011-11-11 00:00:00 UTC, Skyrim's release date
        ticks = 116444736000000000 + 1320969600 * 10_000_000
        assert filetime_to_datetime(ticks) == datetime.datetime(
            2011, 11, 11, tzinfo=_utc)
        assert filetime_to_unix_ns(ticks) == 1320969600 * 10**9

    def test_sub_microsecond_ticks(self):
        """A single tick is 100ns, which datetime can't represent."""
        assert filetime_to_datetime(9) == FILETIME_EPOCH
        assert filetime_to_datetime(10) == FILETIME_EPOCH + \
               datetime.timedelta(microseconds=1)

    def test_unix_ns_exact(self):
        """Every tick count converts exactly, down to the last 100ns."""
        assert filetime_to_unix_ns(116444736000000000) == 0
        assert filetime_to_unix_ns(116444736000000009) == 900
        assert filetime_to_unix_ns(0) == -11_644_473_600 * 10**9
        assert filetime_to_unix_ns(0xFFFFFFFFFFFFFFFF) == (
            0xFFFFFFFFFFFFFFFF - 116444736000000000) * 100

    def test_unrepresentable(self):
        with pytest.raises(OverflowError):
            filetime_to_datetime(0xFFFFFFFFFFFFFFFF)
