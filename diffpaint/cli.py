# -*- coding: utf-8 -*-
#
# Copyright (c) 2011 Roy Liu
# All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are met:
#
#   * Redistributions of source code must retain the above copyright notice,
#     this list of conditions and the following disclaimer.
#   * Redistributions in binary form must reproduce the above copyright notice,
#     this list of conditions and the following disclaimer in the documentation
#     and/or other materials provided with the distribution.
#   * Neither the name of the author nor the names of any contributors may be
#     used to endorse or promote products derived from this software without
#     specific prior written permission.
#
# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS"
# AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE
# IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE
# DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDERS OR CONTRIBUTORS BE LIABLE
# FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL
# DAMAGES (INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR
# SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER
# CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY,
# OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE
# OF THIS SOFTWARE, EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.

"""The command line entry point.

    git diff | diffpaint
    git config --global core.pager "diffpaint | less -R"
    diffpaint old.txt new.txt
"""

import difflib
import logging
import os
import shutil
import signal
import sys
from argparse import ArgumentParser

from . import __version__
from .config import Config
from .delta import DiffPainter
from .errors import OutputClosed
from .process import calling_process
from .process import start_determining_calling_process
from .style import FEATURES
from .style import THEMES

logger = logging.getLogger(__name__)

# As with diff(1): 0 for no differences, 1 for differences, 2 for trouble.
EXIT_SUCCESS = 0
EXIT_DIFFERENT = 1
EXIT_ERROR = 2

STYLE_OPTIONS = (
    "minus",
    "minus-emph",
    "plus",
    "plus-emph",
    "file",
    "hunk-header",
)


def create_parser():
    """Creates the argument parser.
    """

    parser = ArgumentParser(prog="diffpaint",
                            description="Recolorize unified diff output with syntax highlighting and intraline changes"
                                        " highlighted.")
    parser.add_argument("minus_file", nargs="?", metavar="MINUS_FILE",
                        help="diff this file against PLUS_FILE instead of reading a diff from standard input")
    parser.add_argument("plus_file", nargs="?", metavar="PLUS_FILE")
    parser.add_argument("-c", "--color", dest="color_mode", nargs="?", const="always", default="auto",
                        choices=["always", "auto", "never"],
                        help="the color mode, one of {always, auto, never}")
    parser.add_argument("-w", "--width", type=int, default=None,
                        help="the width to wrap lines at (0 disables wrapping; defaults to the terminal width)")
    parser.add_argument("--word-diff-mode", dest="tokenization", choices=["word", "char"], default=None,
                        help="whether intraline changes are computed over words or characters")
    parser.add_argument("--max-line-distance", type=float, default=None, metavar="G",
                        help="the normalized edit distance at or above which a removed and an added line are never"
                             " paired")
    parser.add_argument("--max-block-lines", type=int, default=None, metavar="N",
                        help="leave change blocks of more than N lines unpaired")
    parser.add_argument("--min-equal-length", type=int, default=None, metavar="N",
                        help="absorb unchanged stretches of fewer than N characters into the changes around them"
                             " (tweaks human readability)")
    parser.add_argument("--tabs", dest="tab_width", type=int, default=None, metavar="N",
                        help="expand tabs to N spaces (0 leaves them alone)")
    parser.add_argument("--theme", choices=sorted(THEMES), default=None,
                        help="the diff color theme")
    parser.add_argument("--syntax-theme", default=None, metavar="NAME",
                        help="the Pygments style used for syntax highlighting")
    parser.add_argument("--no-syntax", dest="syntax", action="store_const", const=False, default=None,
                        help="disable syntax highlighting")
    parser.add_argument("--features", default=None, metavar="NAMES",
                        help="space separated style features to enable, from {{{0}}}"
                             .format(", ".join(sorted(FEATURES))))
    parser.add_argument("-n", "--line-numbers", action="store_const", const=True, default=None,
                        help="show old and new line numbers")
    parser.add_argument("--no-markers", dest="keep_markers", action="store_const", const=False, default=None,
                        help="drop the leading +/- markers")

    for role in STYLE_OPTIONS:
        parser.add_argument("--{0}-style".format(role), dest="style_" + role.replace("-", "_"), default=None,
                            metavar="STYLE",
                            help="the style of {0} lines or regions, e.g. \"bold fg:red bg:#3f0001\""
                                 .format(role.replace("-", " ")))

    parser.add_argument("--show-config", action="store_true",
                        help="print the resolved configuration and exit")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="log debugging information to standard error")
    parser.add_argument("--version", action="version", version="%(prog)s " + __version__)

    return parser


def create_config(args, stdout):
    """Creates the configuration from parsed arguments.

    Args:
        args: The parsed arguments.
        stdout: The standard output.

    Returns:
        The Config.
    """

    if args.color_mode == "auto":
        color = stdout.isatty()
    else:
        color = args.color_mode == "always"

    width = args.width

    if width is None and "DIFFPAINT_WIDTH" not in os.environ:
        width = shutil.get_terminal_size((0, 0)).columns

    styles = {}

    for role in STYLE_OPTIONS:

        spec = getattr(args, "style_" + role.replace("-", "_"))

        if spec is not None:
            styles[role] = spec

    return Config.from_env(styles=styles,
                           width=width,
                           tokenization=args.tokenization,
                           max_line_distance=args.max_line_distance,
                           max_block_lines=args.max_block_lines,
                           min_equal_length=args.min_equal_length,
                           tab_width=args.tab_width,
                           theme=args.theme,
                           syntax_theme=args.syntax_theme,
                           syntax=args.syntax,
                           features=args.features,
                           line_numbers=args.line_numbers,
                           keep_markers=args.keep_markers,
                           color=color)


def diff_files(minus_file, plus_file):
    """Diffs two files.

    Args:
        minus_file: The old file.
        plus_file: The new file.

    Returns:
        A list of unified diff byte lines.
    """

    with open(minus_file, "rb") as f:
        lines1 = f.readlines()

    with open(plus_file, "rb") as f:
        lines2 = f.readlines()

    return list(difflib.diff_bytes(difflib.unified_diff, lines1, lines2,
                                   os.fsencode(minus_file), os.fsencode(plus_file)))


def close_stdout():
    """Points standard output at /dev/null, so that the interpreter's final flush of a broken pipe stays quiet.
    """

    devnull = os.open(os.devnull, os.O_WRONLY)
    os.dup2(devnull, sys.stdout.fileno())
    os.close(devnull)


def main(argv=None):
    """The main method body.

    Args:
        argv: The command line arguments; defaults to sys.argv[1:].

    Returns:
        The exit status.
    """

    # Start first: the calling process may exit soon after writing its output.
    start_determining_calling_process()

    args = create_parser().parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="diffpaint: %(levelname)s: %(message)s",
                        stream=sys.stderr)

    stdin = sys.stdin.buffer
    stdout = sys.stdout.buffer

    try:
        config = create_config(args, sys.stdout)
    except ValueError as e:
        sys.stderr.write("diffpaint: {0}\n".format(e))
        return EXIT_ERROR

    if args.show_config:
        sys.stdout.write("\n".join(config.describe(calling_process.get(timeout=0.1))) + "\n")
        return EXIT_SUCCESS

    if (args.minus_file is None) != (args.plus_file is None):
        sys.stderr.write("diffpaint: Please provide both MINUS_FILE and PLUS_FILE, or neither.\n")
        return EXIT_ERROR

    if args.minus_file is not None:

        try:
            lines = diff_files(args.minus_file, args.plus_file)
        except OSError as e:
            sys.stderr.write("diffpaint: {0}\n".format(e))
            return EXIT_ERROR

        status = EXIT_DIFFERENT if lines else EXIT_SUCCESS

    elif sys.stdin.isatty():
        sys.stderr.write("diffpaint: Please pipe a diff into diffpaint, e.g. \"git diff | diffpaint\", or give it two"
                         " files to compare.\n")
        return EXIT_ERROR

    else:
        (lines, status) = (stdin, EXIT_SUCCESS)

    painter = DiffPainter(config)

    # Leave ctrl-c to the pager, so that it is not orphaned.
    signal.signal(signal.SIGINT, signal.SIG_IGN)

    try:
        painter.run(lines, stdout)
    except OutputClosed:
        close_stdout()
        return EXIT_SUCCESS
    except OSError as e:
        sys.stderr.write("diffpaint: {0}\n".format(e))
        return EXIT_ERROR

    return status
