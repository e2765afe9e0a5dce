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

"""Syntax highlighting of diff lines with Pygments.

Pygments is consumed as a black box mapping a line and a language to styled character ranges: lexer tokens are looked up
in a Pygments style and turned into foreground and attribute Styles. Backgrounds are left to the diff layer.
"""

import logging
import os
from functools import lru_cache

from pygments.lexers import get_lexer_by_name
from pygments.lexers import get_lexer_for_filename
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

from .errors import StyleParseError
from .style import Color
from .style import Style

logger = logging.getLogger(__name__)

# File extensions whose Pygments filename detection is ambiguous or missing.
EXTENSION_MAP = {
    ".py": "python",
    ".pyi": "python",
    ".js": "javascript",
    ".mjs": "javascript",
    ".ts": "typescript",
    ".tsx": "tsx",
    ".jsx": "jsx",
    ".rb": "ruby",
    ".go": "go",
    ".rs": "rust",
    ".java": "java",
    ".c": "c",
    ".h": "c",
    ".cc": "cpp",
    ".cpp": "cpp",
    ".hpp": "cpp",
    ".cs": "csharp",
    ".php": "php",
    ".swift": "swift",
    ".kt": "kotlin",
    ".scala": "scala",
    ".sh": "bash",
    ".bash": "bash",
    ".zsh": "zsh",
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".toml": "toml",
    ".ini": "ini",
    ".cfg": "ini",
    ".xml": "xml",
    ".html": "html",
    ".css": "css",
    ".sql": "sql",
    ".md": "markdown",
    ".lua": "lua",
    ".pl": "perl",
}


@lru_cache(maxsize=64)
def lexer_for_filename(filename):
    """Gets a Pygments lexer for a file name.

    Args:
        filename: The path or name of the file.

    Returns:
        The lexer, or None if the language is unknown.
    """

    (_, ext) = os.path.splitext(filename)

    if ext.lower() in EXTENSION_MAP:

        try:
            return get_lexer_by_name(EXTENSION_MAP[ext.lower()])
        except ClassNotFound:
            pass

    try:
        return get_lexer_for_filename(filename)
    except ClassNotFound:
        return None


@lru_cache(maxsize=64)
def lexer_for_language(language):
    """Gets a Pygments lexer by language name or alias, or None.
    """

    try:
        return get_lexer_by_name(language)
    except ClassNotFound:
        return None


class SyntaxHighlighter(object):
    """Maps lines to syntax-highlighted character ranges.
    """

    def __init__(self, theme="monokai"):
        """Default constructor.

        Args:
            theme: The name of a Pygments style.

        Raises:
            StyleParseError: If there is no such Pygments style.
        """

        try:
            self.style_class = get_style_by_name(theme)
        except ClassNotFound:
            raise StyleParseError(theme, "unknown syntax theme")

        self.theme = theme
        self.token_styles = {}

    def token_style(self, token_type):
        """Converts the Pygments style of a token type into a Style.
        """

        style = self.token_styles.get(token_type)

        if style is None:

            definition = self.style_class.style_for_token(token_type)
            color = definition.get("color")

            if color and len(color) == 6:
                foreground = Color("rgb", tuple([int(color[i:(i + 2)], 16) for i in range(0, 6, 2)]))
            else:
                foreground = None

            attributes = [name for name in ("bold", "italic", "underline") if definition.get(name)]

            style = self.token_styles[token_type] = Style(foreground, None, attributes or None)

        return style

    def lexer(self, filename=None, language=None):
        """Gets the lexer for a language name or, failing that, a file name.
        """

        if language:
            return lexer_for_language(language)
        elif filename:
            return lexer_for_filename(filename)
        else:
            return None

    def spans(self, text, filename=None, language=None):
        """Highlights one line.

        Args:
            text: The line, without its line terminator.
            filename: The name of the file the line comes from.
            language: A Pygments language name, which takes precedence over the file name.

        Returns:
            A list of (start, end, Style) character ranges, empty if the language is unknown.
        """

        lexer = self.lexer(filename, language)

        if lexer is None or not text:
            return []

        spans = []

        for (index, token_type, value) in lexer.get_tokens_unprocessed(text):

            end = min(index + len(value), len(text))

            if index >= end:
                continue

            style = self.token_style(token_type)

            if not style.is_empty:
                spans.append((index, end, style))

        return spans
