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
from __future__ import annotations

import datetime
import io
import os
import struct
import sys
import traceback as _traceback

import chardet

from .exception import SeekError, ShortReadError

# Unicode ---------------------------------------------------------------------
#--decode unicode strings
#  Counted strings in saves carry no encoding information, so these are only
#  used when presenting them to the user. The decoded save keeps raw bytes.
encodingOrder = (
    u'ascii',    # Plain old ASCII (0-127)
    u'gbk',      # GBK (simplified Chinese + some)
    u'cp932',    # Japanese
    u'cp949',    # Korean
    u'cp1252',   # English (extended ASCII)
    u'utf8',
    u'cp500',
    u'UTF-16LE',
)

_encodingSwap = {
    # The encoding detector reports back some encodings that
    # are subsets of others.  Use the better encoding when
    # given the option
    # 'reported encoding':'actual encoding to use',
    u'GB2312': u'gbk',        # Simplified Chinese
    u'SHIFT_JIS': u'cp932',   # Japanese
    u'windows-1252': u'cp1252',
    u'windows-1251': u'cp1251',
    u'utf-8': u'utf8',
}

# Preferred encoding to use when decoding strings read from saves
# None = auto
# setting it tries the specified encoding first
pluginEncoding = None

# Encodings that we can't use because Python doesn't even support them
_blocked_encodings = {u'EUC-TW'}

def getbestencoding(bitstream):
    """Tries to detect the encoding a bitstream was saved in.  Uses Mozilla's
       detection library to find the best match (heuristics)"""
    if not bitstream:
        # Default to UTF-8 if the stream we're given is empty and hence no
        # inference can be made (chardet returns None, which breaks when passed
        # to decode())
        return 'utf8', 1.0
    result = chardet.detect(bitstream)
    encoding_, confidence = result[u'encoding'], result[u'confidence']
    encoding_ = _encodingSwap.get(encoding_,encoding_)
    return encoding_, confidence

def decoder(byte_str, encoding=None, avoidEncodings=()) -> str:
    """Decode a byte string to unicode, using heuristics on encoding."""
    if isinstance(byte_str, str) or byte_str is None: return byte_str
    # Try the user specified encoding first
    if encoding:
        if encoding == u'cp65001':
            encoding = u'utf-8'
        try: return str(byte_str, encoding)
        except (UnicodeDecodeError, LookupError): pass
    # Try to detect the encoding next
    encoding, confidence = getbestencoding(byte_str)
    if encoding and confidence >= 0.55 and (
            encoding not in avoidEncodings or confidence == 1.0) and (
            encoding not in _blocked_encodings):
        try: return str(byte_str, encoding)
        except (UnicodeDecodeError, LookupError): pass
    # If even that fails, fall back to the old method, trial and error
    for encoding in encodingOrder:
        try: return str(byte_str, encoding)
        except UnicodeDecodeError: pass
    raise UnicodeDecodeError(u'Text could not be decoded using any method')

def to_unix_newlines(s: str) -> str:
    """Replaces non-Unix newlines in the specified string with Unix newlines.
    Handles both CR-LF (Windows) and pure CR (macOS)."""
    return s.replace('\r\n', '\n').replace('\r', '\n')

def remove_newlines(s: str) -> str:
    """Removes all newlines (whether they are in LF, CR-LF or CR form) from the
    specified string."""
    return to_unix_newlines(s).replace('\n', '')

def cstrip(inString):
    """Convert c-string (null-terminated string) to python string."""
    zeroDex = inString.find(b'\x00')
    if zeroDex == -1:
        return inString
    else:
        return inString[:zeroDex]

def display_str(byte_str, encoding=None) -> str:
    """Decodes a counted string read from a save for display purposes."""
    return remove_newlines(decoder(cstrip(byte_str),
        encoding or pluginEncoding, avoidEncodings=(u'utf8', u'utf-8')))

# Structure wrappers ----------------------------------------------------------
# Every value in a save is little-endian, so all formats below are spelled
# out with an explicit '<' - never rely on the native byte order here.
class _StructsCache(dict):
    __slots__ = ()
    def __missing__(self, key):
        return self.setdefault(key, struct.Struct(key))

structs_cache = _StructsCache()

def read_at(ins, offset: int, size: int, field_name: str) -> bytes:
    """Reads exactly size bytes from the seekable stream ins, starting at the
    absolute offset. This is the only place that touches the stream - every
    unpack_*_at function below goes through here.

    :param ins: A binary stream supporting seek and read. Never closed here.
    :param offset: The absolute position to start reading at.
    :param size: The number of bytes that must be available.
    :param field_name: Name of the field being read, used in errors."""
    in_name = getattr(ins, 'name', None)
    if offset < 0:
        raise SeekError(in_name, field_name, offset)
    try:
        max_pos = ins.seek(0, os.SEEK_END)
        if offset > max_pos:
            raise SeekError(in_name, field_name, offset, max_pos)
        ins.seek(offset)
    except (OSError, ValueError) as e:
        raise SeekError(in_name, field_name, offset) from e
    buff = bytearray()
    try:
        # Unbuffered streams may return less than asked for before EOF
        while len(buff) < size:
            if not (chunk := ins.read(size - len(buff))):
                break
            buff += chunk
    except OSError as e:
        raise ShortReadError(in_name, field_name, offset, size,
                             len(buff)) from e
    if len(buff) != size:
        raise ShortReadError(in_name, field_name, offset, size, len(buff))
    return bytes(buff)

# Each unpacker returns the value it read and the offset right after it
def unpack_byte_at(ins, offset, field_name,
        __unpack=structs_cache[u'<B'].unpack) -> tuple[int, int]:
    return __unpack(read_at(ins, offset, 1, field_name))[0], offset + 1
def unpack_short_at(ins, offset, field_name,
        __unpack=structs_cache[u'<H'].unpack) -> tuple[int, int]:
    return __unpack(read_at(ins, offset, 2, field_name))[0], offset + 2
def unpack_int_at(ins, offset, field_name,
        __unpack=structs_cache[u'<I'].unpack) -> tuple[int, int]:
    return __unpack(read_at(ins, offset, 4, field_name))[0], offset + 4
def unpack_int64_at(ins, offset, field_name,
        __unpack=structs_cache[u'<Q'].unpack) -> tuple[int, int]:
    return __unpack(read_at(ins, offset, 8, field_name))[0], offset + 8
def unpack_float_at(ins, offset, field_name,
        __unpack=structs_cache[u'<f'].unpack) -> tuple[float, int]:
    return __unpack(read_at(ins, offset, 4, field_name))[0], offset + 4
def unpack_bytes_at(ins, offset, size, field_name) -> tuple[bytes, int]:
    return read_at(ins, offset, size, field_name), offset + size

def unpack_str16_at(ins, offset, field_name) -> tuple[bytes, int]:
    """Reads a counted string: a short holding the length, followed by that
    many raw bytes. Although the format calls these 'wstrings', the length is
    a byte count and the bytes are returned undecoded. Callers get bytes -
    use display_str for the text view."""
    str_len, str_offset = unpack_short_at(ins, offset, field_name)
    return unpack_bytes_at(ins, str_offset, str_len, field_name)

# FILETIME --------------------------------------------------------------------
# FILETIME counts 100ns intervals since 1601-01-01 UTC, which lies exactly
# 11644473600 seconds before the Unix epoch
_UNIX_EPOCH = datetime.datetime(1970, 1, 1, tzinfo=datetime.timezone.utc)
FILETIME_EPOCH = _UNIX_EPOCH + datetime.timedelta(seconds=-11_644_473_600)

def filetime_to_datetime(filetime_ticks: int) -> datetime.datetime:
    """Convert a Windows 64-bit FileTime to an aware (UTC) datetime. Saves
    keep the raw tick count, this is only a view of it: datetime only resolves
    microseconds, so the last tick digit is dropped. Raises OverflowError if
    the result lies past datetime.MAXYEAR."""
    return FILETIME_EPOCH + datetime.timedelta(
        microseconds=filetime_ticks // 10)

# Ticks between the FILETIME and Unix epochs
_UNIX_EPOCH_TICKS = 11_644_473_600 * 10_000_000

def filetime_to_unix_ns(filetime_ticks: int) -> int:
    """Nanoseconds since the Unix epoch, negative before 1970. Exact for every
    64-bit tick count."""
    return (filetime_ticks - _UNIX_EPOCH_TICKS) * 100

# Packers - the inverse of the above, used to build saves in memory
def pack_byte(out, val: int, __pack=structs_cache[u'<B'].pack):
    out.write(__pack(val))
def pack_short(out, val: int, __pack=structs_cache[u'<H'].pack):
    out.write(__pack(val))
def pack_int(out, value: int, __pack=structs_cache[u'<I'].pack):
    out.write(__pack(value))
def pack_int64(out, value: int, __pack=structs_cache[u'<Q'].pack):
    out.write(__pack(value))
def pack_float(out, val: float, __pack=structs_cache[u'<f'].pack):
    out.write(__pack(val))
def pack_str16(out, val: bytes):
    pack_short(out, len(val))
    out.write(val)

# Constants used for censoring the user's home directory (see below)
_USER_DIR = os.path.expanduser('~')
_CENSORED_DIR = os.path.join(os.path.split(_USER_DIR)[0], '*****')

def deprint(*args, traceback=False, trace=True, frame=1):
    """Prints message along with file and line location.
       Available keyword arguments:
       trace: (default True) - if a Truthy value, displays the module,
              line number, and function this was used from
       traceback: (default False) - if a Truthy value, prints any tracebacks
              for exceptions that have occurred.
       frame: (default 1) - With `trace`, determines the function caller's
              frame for getting the function name
    """
    if trace:
        # Warning: This may be CPython-only due to _getframe usage
        parent_frame = sys._getframe(frame)
        code_obj = parent_frame.f_code
        msg = f'{os.path.basename(code_obj.co_filename)} ' \
              f'{parent_frame.f_lineno:4d} {code_obj.co_name}: '
    else:
        msg = u''
    try:
        msg += ' '.join([f'{x}' for x in args]) # OK, even with unicode args
    except UnicodeError:
        # If the args failed to convert to unicode for some reason
        # we still want the message displayed any way we can
        for x in args:
            try:
                msg += f' {x}'
            except UnicodeError:
                msg += f' {x!r}'
    # Print to stdout by default, but change to stderr if we have an error
    target_stream = sys.stdout
    if traceback:
        target_stream = sys.stderr
        exc_fmt = _traceback.format_exc()
        msg += f'\n{exc_fmt}'
    # Censor the user's home directory
    msg = msg.replace(_USER_DIR, _CENSORED_DIR)
    print(msg, flush=True, file=target_stream)

# Log -------------------------------------------------------------------------
#------------------------------------------------------------------------------
class Log(object):
    """Log Callable. This is the abstract/null version. Useful version should
    override write functions.

    Log is divided into sections with headers. Header text is assigned (through
    setHeader), but isn't written until a message is written under it. I.e.,
    if no message are written under a given header, then the header itself is
    never written."""

    def __init__(self):
        """Initialize."""
        self.header = None
        self.prevHeader = None
        self.doFooter = True

    def setHeader(self,header,writeNow=False,doFooter=True):
        """Sets the header."""
        self.header = header
        if self.prevHeader:
            self.prevHeader += u'x'
        self.doFooter = doFooter
        if writeNow: self()

    def __call__(self,message=None,appendNewline=True):
        """Callable. Writes message, and if necessary, header and footer."""
        if self.header != self.prevHeader:
            if self.prevHeader and self.doFooter:
                self.writeFooter()
            if self.header:
                self.writeLogHeader(self.header)
            self.prevHeader = self.header
        if message: self.writeMessage(message,appendNewline)

    #--Abstract/null writing functions...
    def writeLogHeader(self, header):
        """Write header. Abstract/null version."""
        pass
    def writeFooter(self):
        """Write mess. Abstract/null version."""
        pass
    def writeMessage(self,message,appendNewline):
        """Write message to log. Abstract/null version."""
        pass

#------------------------------------------------------------------------------
class LogFile(Log):
    """Log that writes messages to file."""
    def __init__(self,out):
        self.out = out
        Log.__init__(self)

    def writeLogHeader(self, header):
        self.out.write(header+u'\n')

    def writeFooter(self):
        self.out.write(u'\n')

    def writeMessage(self,message,appendNewline):
        self.out.write(message)
        if appendNewline: self.out.write(u'\n')

def log_to_string(dump_func) -> str:
    """Runs dump_func against a fresh in-memory LogFile and returns what was
    written to it."""
    log = LogFile(io.StringIO())
    dump_func(log)
    return log.out.getvalue()
