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

"""The resolved configuration of a run.

Values come from DEFAULTS, overridden by DIFFPAINT_* environment variables (e.g. DIFFPAINT_MAX_LINE_DISTANCE=0.4),
overridden in turn by command line options.
"""

import logging
import os

from .edits import TOKENIZATION_MODES
from .style import ROLES
from .style import THEMES
from .style import resolve_roles

logger = logging.getLogger(__name__)

DEFAULTS = {
    # Physical line width; 0 disables wrapping.
    "width": 0,
    "tokenization": "word",
    # The dissimilarity threshold G: lines at least this far apart are never paired.
    "max_line_distance": 0.6,
    # Change blocks with more minus and plus lines than this are left unpaired.
    "max_block_lines": 256,
    # Interior equal regions shorter than this many characters are absorbed into the changes around them.
    "min_equal_length": 2,
    "tab_width": 4,
    "theme": "dark",
    "syntax": True,
    # None picks a syntax theme that goes with the theme.
    "syntax_theme": None,
    "features": "",
    "line_numbers": False,
    "keep_markers": True,
    "color": True,
}

SYNTAX_THEMES = {
    "dark": "monokai",
    "light": "default",
}

ENV_PREFIX = "DIFFPAINT_"


def parse_bool(value):
    """Parses a boolean environment value.
    """

    lowered = value.strip().lower()

    if lowered in ("1", "true", "yes", "on"):
        return True
    elif lowered in ("0", "false", "no", "off", ""):
        return False
    else:
        raise ValueError("not a boolean: \"{0}\"".format(value))


class Config(object):
    """Every tunable of the pipeline, plus per-role style overrides.
    """

    def __init__(self, styles=None, **options):
        """Default constructor.

        Args:
            styles: A mapping from roles (see style.ROLES) to specification strings customizing the theme.
            options: Values overriding DEFAULTS.

        Raises:
            ValueError: If an option is unknown or out of range.
        """

        for name in options:

            if name not in DEFAULTS:
                raise ValueError("Unknown option \"{0}\".".format(name))

        values = dict(DEFAULTS)
        values.update(options)

        for (name, value) in values.items():
            setattr(self, name, value)

        self.styles = dict(styles or {})

        self.validate()

    def validate(self):
        """Checks that values are in range.

        Raises:
            ValueError: If they are not.
        """

        if self.tokenization not in TOKENIZATION_MODES:
            raise ValueError("Invalid tokenization mode \"{0}\"; expected one of {1}."
                             .format(self.tokenization, ", ".join(TOKENIZATION_MODES)))

        if not 0.0 < self.max_line_distance <= 1.0:
            raise ValueError("The maximum line distance must be in (0, 1].")

        for name in ("width", "max_block_lines", "min_equal_length", "tab_width"):

            if getattr(self, name) < 0:
                raise ValueError("The {0} must not be negative.".format(name.replace("_", " ")))

        if self.theme not in THEMES:
            raise ValueError("Invalid theme \"{0}\"; expected one of {1}."
                             .format(self.theme, ", ".join(sorted(THEMES))))

        for role in self.styles:

            if role not in ROLES:
                raise ValueError("Invalid style role \"{0}\".".format(role))

    @classmethod
    def from_env(cls, environ=None, styles=None, **options):
        """Creates a configuration from DEFAULTS, the environment and explicit options, in increasing precedence.

        Args:
            environ: The environment; defaults to os.environ.
            styles: Per-role style overrides.
            options: Explicit option values; None entries are ignored.

        Returns:
            The Config.
        """

        environ = os.environ if environ is None else environ
        values = {}

        for (name, default) in DEFAULTS.items():

            key = ENV_PREFIX + name.upper()

            if key not in environ:
                continue

            try:
                values[name] = Config.convert(environ[key], default)
            except ValueError as e:
                logger.warning("Ignoring %s: %s", key, e)

        values.update([(name, value) for (name, value) in options.items() if value is not None])

        return cls(styles=styles, **values)

    @staticmethod
    def convert(value, default):
        """Converts an environment string to the type of a default value.
        """

        if isinstance(default, bool):
            return parse_bool(value)
        elif isinstance(default, int):
            return int(value)
        elif isinstance(default, float):
            return float(value)
        else:
            return value

    @property
    def effective_syntax_theme(self):
        return self.syntax_theme or SYNTAX_THEMES[self.theme]

    @property
    def feature_names(self):
        return self.features.replace(",", " ").split()

    def resolved_styles(self):
        """Resolves the style of every role.

        Returns:
            A mapping from roles to Styles.
        """
        return resolve_roles(self.theme, self.feature_names, self.styles)

    def describe(self, calling_process=None):
        """Renders the configuration for --show-config.

        Args:
            calling_process: The command line of the calling process, if known.

        Returns:
            A list of lines.
        """

        lines = []

        for name in sorted(DEFAULTS):

            value = getattr(self, name)

            if name == "syntax_theme":
                value = self.effective_syntax_theme

            lines.append("    {0:<20} = {1}".format(name.replace("_", "-"), value))

        for (role, style) in sorted(self.resolved_styles().items()):
            lines.append("    {0:<20} = {1}".format(role + "-style", "\"" + style.spec() + "\""))

        if calling_process:
            lines.append("    {0:<20} = {1}".format("calling-process", " ".join(calling_process)))

        return lines
