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
"""Exports the screenshot stored in a save to an image file via Pillow."""
import os

from PIL import Image

from ..bolt import deprint
from ..exception import ArgumentError

_jpeg_exts = frozenset(('.jpg', '.jpeg'))

def screenshot_to_image(screenshot) -> Image.Image:
    """Wraps the RGB pixels of the specified screenshot in a Pillow image."""
    return Image.frombytes('RGB', (screenshot.width, screenshot.height),
                           screenshot.pixels)

def export_screenshot(screenshot, out_path, jpeg_quality=100):
    """Writes the specified screenshot to out_path. The image format is
    picked from the extension of out_path; JPEG output is written with the
    specified quality.

    :param screenshot: A save_headers.Screenshot.
    :param out_path: The file to write to. Overwritten if it exists.
    :param jpeg_quality: JPEG quality, between 1 and 100."""
    if not screenshot.width or not screenshot.height:
        raise ArgumentError('Save has no screenshot to export.')
    if not 1 <= jpeg_quality <= 100:
        raise ArgumentError(f'JPEG quality must be between 1 and 100, not '
                            f'{jpeg_quality}.')
    save_kwargs = {}
    if os.path.splitext(out_path)[1].lower() in _jpeg_exts:
        save_kwargs['quality'] = jpeg_quality
    try:
        screenshot_to_image(screenshot).save(out_path, **save_kwargs)
    except ValueError as e: # unknown extension
        raise ArgumentError(f'Can not export a screenshot to {out_path}: '
                            f'{e}') from e
    deprint(f'Exported {screenshot.width}x{screenshot.height} screenshot to '
            f'{out_path}')
