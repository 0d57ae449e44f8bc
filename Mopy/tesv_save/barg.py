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
"""This module parses the command line that was used to start the save
reader."""

import argparse

def parse(args=None):
    """Helper function to define commandline arguments"""
    parser = argparse.ArgumentParser(prog='tesv_save',
        description='Decodes a Skyrim (TESV) save, prints its contents and '
                    'exports its screenshot.')

    #### Groups ####
    def arg(group, dashed, descr, dest, action='store', dflt=None):
        group.add_argument(dashed, descr, dest=dest, action=action,
                           default='' if dflt is None else dflt,
                           help=h) # so we can wrap help but not too much

    parser.add_argument('save_path', nargs='?', default='',
                        help='The save to decode. Defaults to the sSaveFile '
                             'setting of the ini.')

    ### Settings Group ###
    settingsGroup = parser.add_argument_group('Settings Arguments',
        'Everything set here overrides the corresponding ini setting.')
    # ini #
    h = 'The ini to read settings from.'
    arg(settingsGroup, '-i', '--ini', dest='ini_path', dflt='tesv_save.ini')
    # layout #
    h = ("Which sections of the save to decode: 'header' (up to the "
         "screenshot) or 'full'.")
    arg(settingsGroup, '-l', '--layout', dest='layout')

    ### Output Group ###
    outputGroup = parser.add_argument_group('Output Arguments',
        'These arguments control what is written out after decoding.')
    # screenshot #
    h = ('Where to write the screenshot to. The extension picks the image '
         'format.')
    arg(outputGroup, '-s', '--screenshot', dest='screenshot_path')
    # no screenshot #
    h = 'Do not export the screenshot.'
    arg(outputGroup, '-n', '--no-screenshot', dest='no_screenshot',
        action='store_true', dflt=False)
    # quiet #
    h = 'Do not print the decoded save.'
    arg(outputGroup, '-q', '--quiet', dest='quiet', action='store_true',
        dflt=False)
    opts = parser.parse_args(args)
    if opts.no_screenshot and opts.screenshot_path:
        parser.error('You specified both --screenshot and --no-screenshot')
    return opts
