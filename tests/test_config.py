"""Tests for configuration defaults, environment overrides and validation."""

import logging

import pytest

from diffpaint.config import DEFAULTS, Config, parse_bool
from diffpaint.style import Color


class TestConfig:

    def test_defaults(self):
        config = Config()

        assert config.max_line_distance == 0.6
        assert config.max_block_lines == 256
        assert config.tokenization == "word"
        assert config.effective_syntax_theme == "monokai"

    def test_unknown_option(self):
        with pytest.raises(ValueError):
            Config(colour=True)

    @pytest.mark.parametrize("options", [
        {"max_line_distance": 0.0},
        {"max_line_distance": 1.5},
        {"tokenization": "sentence"},
        {"width": -1},
        {"theme": "solarized"},
    ])
    def test_invalid_values(self, options):
        with pytest.raises(ValueError):
            Config(**options)

    def test_invalid_style_role(self):
        with pytest.raises(ValueError):
            Config(styles={"nonsense": "bold"})

    def test_features(self):
        assert Config(features="bold-headers, dim-context").feature_names == ["bold-headers", "dim-context"]

    def test_light_theme_syntax(self):
        assert Config(theme="light").effective_syntax_theme == "default"
        assert Config(theme="light", syntax_theme="vim").effective_syntax_theme == "vim"

    def test_style_overrides(self):
        styles = Config(styles={"plus": "bold"}).resolved_styles()

        assert styles["plus"].attributes == frozenset(["bold"])
        assert styles["plus"].background == Color("rgb", (0, 40, 0))


class TestFromEnv:

    def test_environment_overrides_defaults(self):
        config = Config.from_env({"DIFFPAINT_MAX_LINE_DISTANCE": "0.4", "DIFFPAINT_LINE_NUMBERS": "yes",
                                  "DIFFPAINT_TOKENIZATION": "char"})

        assert config.max_line_distance == 0.4
        assert config.line_numbers is True
        assert config.tokenization == "char"

    def test_options_override_environment(self):
        config = Config.from_env({"DIFFPAINT_WIDTH": "80"}, width=100)
        assert config.width == 100

    def test_none_options_are_ignored(self):
        config = Config.from_env({"DIFFPAINT_WIDTH": "80"}, width=None)
        assert config.width == 80

    def test_invalid_environment_value_is_ignored(self, caplog):
        with caplog.at_level(logging.WARNING, logger="diffpaint.config"):
            config = Config.from_env({"DIFFPAINT_MAX_BLOCK_LINES": "lots"})

        assert config.max_block_lines == DEFAULTS["max_block_lines"]
        assert "DIFFPAINT_MAX_BLOCK_LINES" in caplog.text

    def test_parse_bool(self):
        assert parse_bool("On") is True
        assert parse_bool("0") is False

        with pytest.raises(ValueError):
            parse_bool("maybe")


class TestDescribe:

    def test_lists_options_and_styles(self):
        lines = Config().describe(["git", "diff"])

        assert "    max-line-distance    = 0.6" in lines
        assert "    minus-emph-style     = \"bg:#901011\"" in lines
        assert lines[-1] == "    calling-process      = git diff"
