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

"""Styles: the style specification mini-language, layered style resolution and SGR escape rendering.

A style specification is a whitespace-separated sequence of tokens, read left to right, where later tokens override
earlier ones for the same field:

    "bold red"              bold, red foreground
    "fg:#ff8700 bg:52"      24-bit foreground, ANSI 256 background
    "ul bg:auto"            underlined, terminal default background
    "normal fg:none"        attributes explicitly cleared, foreground left unset

A bare color is a foreground; a second bare color is a background.
"""

import logging
import re
from collections import namedtuple

from .errors import StyleParseError

logger = logging.getLogger(__name__)

#----------------------------------------------------------------------------------------------------------------------#
# Colors.                                                                                                              #
#----------------------------------------------------------------------------------------------------------------------#

NAMED_COLORS = {
    "black": 0,
    "red": 1,
    "green": 2,
    "yellow": 3,
    "blue": 4,
    "magenta": 5,
    "purple": 5,
    "cyan": 6,
    "white": 7,
}

rgb_pattern = re.compile("^#(?:(?P<long>[0-9a-fA-F]{6})|(?P<short>[0-9a-fA-F]{3}))$")
index_pattern = re.compile("^[0-9]{1,3}$")


class Color(namedtuple("Color", ["kind", "value"])):
    """A terminal color. The kind is one of {"named", "ansi256", "rgb", "default"}; the value is respectively a palette
    index in [0, 16), an index in [0, 256), an (r, g, b) tuple, or None.
    """

    __slots__ = ()

    def sgr(self, background=False):
        """Renders the SGR parameters selecting this color.

        Args:
            background: Whether the color is used as a background.

        Returns:
            The SGR parameter string, e.g. "31" or "48;2;0;40;0".
        """

        if self.kind == "named":

            if self.value < 8:
                return str((40 if background else 30) + self.value)
            else:
                return str((100 if background else 90) + self.value - 8)

        elif self.kind == "ansi256":
            return "{0};5;{1}".format(48 if background else 38, self.value)
        elif self.kind == "rgb":
            return "{0};2;{1};{2};{3}".format(48 if background else 38, *self.value)
        elif self.kind == "default":
            return "49" if background else "39"
        else:
            assert False, "Invalid color kind."

    def spec(self):
        """Renders this color back into the mini-language.
        """

        if self.kind == "named":

            name = [name for (name, index) in NAMED_COLORS.items() if index == self.value % 8][0]

            return name if self.value < 8 else "bright-" + name

        elif self.kind == "ansi256":
            return str(self.value)
        elif self.kind == "rgb":
            return "#{0:02x}{1:02x}{2:02x}".format(*self.value)
        elif self.kind == "default":
            return "auto"
        else:
            assert False, "Invalid color kind."


DEFAULT_COLOR = Color("default", None)

# A marker for "none": the field is left unset.
UNSET = object()


def parse_color(token, spec=None):
    """Parses a color.

    Args:
        token: The color token.
        spec: The enclosing specification, for error messages.

    Returns:
        A Color, or UNSET for the literal "none".

    Raises:
        StyleParseError: If the token is not a color.
    """

    spec = token if spec is None else spec
    lowered = token.lower()

    if lowered == "none":
        return UNSET
    elif lowered == "auto":
        return DEFAULT_COLOR

    bright = False

    for prefix in ("bright-", "bright"):

        if lowered.startswith(prefix) and lowered[len(prefix):] in NAMED_COLORS:
            (lowered, bright) = (lowered[len(prefix):], True)
            break

    if lowered in NAMED_COLORS:
        return Color("named", NAMED_COLORS[lowered] + (8 if bright else 0))

    if index_pattern.search(lowered):

        index = int(lowered)

        if index > 255:
            raise StyleParseError(spec, "color index {0} is out of range".format(index))

        return Color("ansi256", index)

    m = rgb_pattern.search(lowered)

    if m:

        if m.group("long"):
            digits = m.group("long")
        else:
            digits = "".join([c * 2 for c in m.group("short")])

        return Color("rgb", tuple([int(digits[i:(i + 2)], 16) for i in range(0, 6, 2)]))

    raise StyleParseError(spec, "\"{0}\" is not a color".format(token))

#----------------------------------------------------------------------------------------------------------------------#
# Styles.                                                                                                              #
#----------------------------------------------------------------------------------------------------------------------#

# Attribute keywords and their canonical names.
ATTRIBUTE_ALIASES = {
    "bold": "bold",
    "dim": "dim",
    "faint": "dim",
    "italic": "italic",
    "underline": "underline",
    "ul": "underline",
    "blink": "blink",
    "reverse": "reverse",
    "hidden": "hidden",
    "strike": "strike",
    "strikethrough": "strike",
}

ATTRIBUTE_CODES = {
    "bold": 1,
    "dim": 2,
    "italic": 3,
    "underline": 4,
    "blink": 5,
    "reverse": 7,
    "hidden": 8,
    "strike": 9,
}

RESET = "\033[0m"


class Style(namedtuple("Style", ["foreground", "background", "attributes"])):
    """An immutable terminal style. Each field is None when unset; an empty attribute set means "explicitly cleared",
    which overrides attributes from lower layers.
    """

    __slots__ = ()

    def __new__(cls, foreground=None, background=None, attributes=None):

        if attributes is not None:
            attributes = frozenset(attributes)

        return super(Style, cls).__new__(cls, foreground, background, attributes)

    @property
    def is_empty(self):
        """Whether no field is set.
        """
        return self.foreground is None and self.background is None and self.attributes is None

    def codes(self):
        """Gets the SGR parameters of this style, attributes first.
        """

        codes = [str(ATTRIBUTE_CODES[name]) for name in sorted(self.attributes or (), key=ATTRIBUTE_CODES.get)]

        if self.foreground is not None:
            codes.append(self.foreground.sgr())

        if self.background is not None:
            codes.append(self.background.sgr(background=True))

        return codes

    def sgr(self):
        """Renders the escape sequence that switches a reset terminal to this style.

        Returns:
            The escape sequence, or the empty string if the style emits nothing.
        """

        codes = self.codes()

        return "\033[" + ";".join(codes) + "m" if codes else ""

    def spec(self):
        """Renders this style back into the mini-language.
        """

        tokens = sorted(self.attributes or (), key=ATTRIBUTE_CODES.get)

        if self.attributes is not None and not self.attributes:
            tokens.append("normal")

        if self.foreground is not None:
            tokens.append("fg:" + self.foreground.spec())

        if self.background is not None:
            tokens.append("bg:" + self.background.spec())

        return " ".join(tokens)


DEFAULT_STYLE = Style()


def parse_style(spec):
    """Parses a style specification.

    Args:
        spec: The specification string.

    Returns:
        The Style.

    Raises:
        StyleParseError: If the specification is malformed.
    """

    (foreground, background, attributes) = (None, None, None)
    nbare = 0

    for token in spec.split():

        lowered = token.lower()

        if lowered in ATTRIBUTE_ALIASES:
            attributes = (attributes or frozenset()) | frozenset([ATTRIBUTE_ALIASES[lowered]])
            continue
        elif lowered == "normal":
            attributes = frozenset()
            continue

        (role, sep, value) = token.partition(":")

        if sep:

            if not value:
                raise StyleParseError(spec, "\"{0}\" has no value".format(token))

            role = role.lower()

            if role == "fg":
                foreground = parse_color(value, spec)
            elif role == "bg":
                background = parse_color(value, spec)
            else:
                raise StyleParseError(spec, "unknown role \"{0}\"".format(role))

        else:

            if nbare == 0:
                foreground = parse_color(token, spec)
            elif nbare == 1:
                background = parse_color(token, spec)
            else:
                raise StyleParseError(spec, "too many colors")

            nbare += 1

    return Style(None if foreground is UNSET else foreground,
                 None if background is UNSET else background,
                 attributes)


def parse_style_or_default(spec, default=DEFAULT_STYLE, source="style"):
    """Parses a style specification, downgrading a malformed one to the given default with a warning.

    Args:
        spec: The specification string.
        default: The Style to use if the specification is malformed.
        source: The name of the option or theme entry the specification came from.

    Returns:
        The Style.
    """

    try:
        return parse_style(spec)
    except StyleParseError as e:
        logger.warning("Ignoring %s: %s", source, e)
        return default


def merge_styles(*layers):
    """Merges styles field by field. The last layer that explicitly sets a field wins; unset fields never overwrite.

    Args:
        layers: The styles, lowest precedence first. None entries are skipped.

    Returns:
        The merged Style.
    """

    (foreground, background, attributes) = (None, None, None)

    for layer in layers:

        if layer is None:
            continue

        if layer.foreground is not None:
            foreground = layer.foreground

        if layer.background is not None:
            background = layer.background

        if layer.attributes is not None:
            attributes = layer.attributes

    return Style(foreground, background, attributes)


def resolve_style(default, feature=None, theme=None):
    """Resolves a style from its three configuration layers.

    Args:
        default: The base default style.
        feature: The style contributed by enabled features.
        theme: The style of the active theme.

    Returns:
        The resolved Style.
    """
    return merge_styles(default, feature, theme)

#----------------------------------------------------------------------------------------------------------------------#
# Themes and features.                                                                                                 #
#----------------------------------------------------------------------------------------------------------------------#

ROLES = (
    "minus",
    "minus-emph",
    "minus-non-emph",
    "plus",
    "plus-emph",
    "plus-non-emph",
    "zero",
    "file",
    "hunk-header",
    "commit",
    "line-number",
)

ROLE_DEFAULTS = dict([(role, "") for role in ROLES])

THEMES = {
    "dark": {
        "minus": "bg:#3f0001",
        "minus-emph": "bg:#901011",
        "minus-non-emph": "bg:#3f0001",
        "plus": "bg:#002800",
        "plus-emph": "bg:#006000",
        "plus-non-emph": "bg:#002800",
        "zero": "",
        "file": "bold yellow",
        "hunk-header": "cyan",
        "commit": "yellow",
        "line-number": "fg:244",
    },
    "light": {
        "minus": "bg:#ffe0e0",
        "minus-emph": "bg:#ffc0c0",
        "minus-non-emph": "bg:#ffe0e0",
        "plus": "bg:#d0ffd0",
        "plus-emph": "bg:#a0efa0",
        "plus-non-emph": "bg:#d0ffd0",
        "zero": "",
        "file": "bold blue",
        "hunk-header": "fg:#005f87",
        "commit": "fg:#875f00",
        "line-number": "fg:246",
    },
}

FEATURES = {
    "underline-emph": {"minus-emph": "underline", "plus-emph": "underline"},
    "bold-headers": {"file": "bold", "hunk-header": "bold", "commit": "bold"},
    "dim-context": {"zero": "dim"},
}


def load_theme(name, overrides=None):
    """Loads a built-in theme as parsed styles, with per-role overrides folded into it.

    Args:
        name: The theme name.
        overrides: A mapping from roles to specification strings that customize the theme.

    Returns:
        A mapping from roles to Styles.

    Raises:
        StyleParseError: If there is no such theme.
    """

    if name not in THEMES:
        raise StyleParseError(name, "unknown theme; expected one of {0}".format(", ".join(sorted(THEMES))))

    styles = {}

    for (role, spec) in THEMES[name].items():
        styles[role] = parse_style_or_default(spec, source="theme {0} role {1}".format(name, role))

    for (role, spec) in (overrides or {}).items():

        if role not in ROLES:
            logger.warning("Ignoring style for unknown role \"%s\"", role)
            continue

        styles[role] = merge_styles(styles.get(role),
                                    parse_style_or_default(spec, source="--{0}-style".format(role)))

    return styles


def load_features(names):
    """Merges the styles of the given built-in features.

    Args:
        names: The feature names, in order of application.

    Returns:
        A mapping from roles to Styles.
    """

    styles = {}

    for name in names:

        if name not in FEATURES:
            logger.warning("Ignoring unknown feature \"%s\"", name)
            continue

        for (role, spec) in FEATURES[name].items():
            styles[role] = merge_styles(styles.get(role),
                                        parse_style_or_default(spec, source="feature {0}".format(name)))

    return styles


def resolve_roles(theme, features=(), overrides=None):
    """Resolves the style of every role from the default, feature and theme layers.

    Args:
        theme: The theme name.
        features: The enabled feature names.
        overrides: Per-role specification strings that customize the theme.

    Returns:
        A mapping from every role to its resolved Style.
    """

    theme_styles = load_theme(theme, overrides)
    feature_styles = load_features(features)

    return dict([(role, resolve_style(parse_style(ROLE_DEFAULTS[role]),
                                      feature_styles.get(role),
                                      theme_styles.get(role)))
                 for role in ROLES])
