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
"""This module contains all custom exceptions for TESV Save Reader."""

# NO LOCAL IMPORTS! This has to be importable from any module/package.

class BoltError(Exception):
    """Generic error with a string message."""
    def __init__(self, message):
        super(BoltError, self).__init__(message)
        self.message = message
    def __str__(self):
        return self.message

# Code errors -----------------------------------------------------------------
class ArgumentError(BoltError):
    """Coding Error: Argument out of allowed range of values."""
    def __init__(self, message=u'Argument is out of allowed ranged of values.'):
        super(ArgumentError, self).__init__(message)

# File exceptions -------------------------------------------------------------
class FileError(BoltError):
    """An error that occurred while handling a file."""
    def __init__(self, in_name, message):
        super(FileError, self).__init__(message)
        self._in_name = (in_name and '%s' % in_name) or 'Unknown File'

    def __str__(self):
        return f'{self._in_name}: {self.message}'

# Save decoding errors --------------------------------------------------------
class DecodeError(FileError):
    """Save File Error: the save could not be decoded. Every subclass records
    the field that was being read and the absolute offset it was read at."""
    def __init__(self, in_name, field_name, offset, message):
        self.field_name = field_name
        self.offset = offset
        super(DecodeError, self).__init__(
            in_name, f'{field_name} (offset {offset}): {message}')

class FormatError(DecodeError):
    """The save does not start with the expected magic bytes."""
    def __init__(self, in_name, field_name, offset, expected, actual):
        self.expected = expected
        self.actual = actual
        super(FormatError, self).__init__(in_name, field_name, offset,
            f'Magic wrong: {actual!r} (expected {expected!r})')

class ShortReadError(DecodeError):
    """The source ended before a field could be fully read."""
    def __init__(self, in_name, field_name, offset, expected_size,
                 actual_size):
        self.expected_size = expected_size
        self.actual_size = actual_size
        super(ShortReadError, self).__init__(in_name, field_name, offset,
            f'Attempted to read {expected_size} byte(s), but only '
            f'{actual_size} were available')

class SizeOverflowError(DecodeError):
    """A size or value derived from the save can not be represented."""

class SeekError(DecodeError):
    """Attempt to position the cursor outside of the source."""
    def __init__(self, in_name, field_name, offset, max_pos=None):
        self.max_pos = max_pos
        if offset < 0:
            message = f'Attempted to seek before ({offset}) beginning of ' \
                      f'file/buffer.'
        elif max_pos is not None:
            message = f'Attempted to seek past ({offset}) end ({max_pos}) ' \
                      f'of file/buffer.'
        else:
            message = 'Source is not seekable.'
        super(SeekError, self).__init__(in_name, field_name, offset, message)
