"""
Tests for render options, YAML config and variables loading.
"""

import pytest

from templater import ConfigError, RenderOptions, load_config, load_variables
from templater.config import CONFIG_ENV, normalize_value


class TestRenderOptions:

    def test_defaults(self):
        options = RenderOptions()
        assert options.trim_end_line is True
        assert options.squash == "on"
        assert options.max_depth == 100

    def test_from_dict_aliases(self):
        options = RenderOptions.from_dict({"trimEndLine": False, "maxDepth": 7})
        assert options == RenderOptions(trim_end_line=False, max_depth=7)

    def test_coerce(self):
        options = RenderOptions(squash="off")
        assert RenderOptions.coerce(options) is options
        assert RenderOptions.coerce(None) == RenderOptions()
        assert RenderOptions.coerce({"squash": "off"}) == options

    def test_unknown_key(self):
        with pytest.raises(ConfigError, match="unexpected option 'color'"):
            RenderOptions.from_dict({"color": "red"})

    def test_invalid_squash(self):
        with pytest.raises(ConfigError, match="^squash: expected 'on' or 'off'"):
            RenderOptions.from_dict({"squash": "yes"})

    def test_invalid_trim_end_line(self):
        with pytest.raises(ConfigError, match="trim_end_line: expected boolean"):
            RenderOptions.from_dict({"trim_end_line": "no"})

    @pytest.mark.parametrize("depth", [0, -1, "10", True])
    def test_invalid_max_depth(self, depth):
        with pytest.raises(ConfigError, match="max_depth"):
            RenderOptions.from_dict({"max_depth": depth})


class TestLoadConfig:

    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_config(tmp_path / "absent.yaml") == RenderOptions()

    def test_top_level_options(self, write_file):
        path = write_file("templater.yaml", "squash: off\ntrim_end_line: false\n")
        assert load_config(path) == RenderOptions(squash="off", trim_end_line=False)

    def test_options_section(self, write_file):
        path = write_file("templater.yaml", "options:\n  maxDepth: 12\n")
        assert load_config(path).max_depth == 12

    def test_empty_file(self, write_file):
        assert load_config(write_file("templater.yaml", "")) == RenderOptions()

    def test_not_a_mapping(self, write_file):
        with pytest.raises(ConfigError, match="must be a mapping"):
            load_config(write_file("templater.yaml", "- a\n- b\n"))

    def test_invalid_yaml(self, write_file):
        with pytest.raises(ConfigError, match="invalid YAML"):
            load_config(write_file("templater.yaml", "squash: [on\n"))

    def test_env_variable(self, write_file, monkeypatch):
        path = write_file("env.yaml", "squash: 'off'\n")
        monkeypatch.setenv(CONFIG_ENV, str(path))
        assert load_config().squash == "off"

    def test_no_env_variable(self, monkeypatch):
        monkeypatch.delenv(CONFIG_ENV, raising=False)
        assert load_config() == RenderOptions()


class TestLoadVariables:

    def test_yaml(self, write_file):
        path = write_file("vars.yaml", (
            "name: Bow\n"
            "damage:\n"
            "  from: 1\n"
            "  to: 6\n"
            "tags: [fire, ice]\n"
        ))
        assert load_variables(path) == {
            "name": "Bow",
            "damage": {"from": "1", "to": "6"},
            "tags": ["fire", "ice"],
        }

    def test_json(self, write_file):
        path = write_file("vars.json", '{"a": "1", "b": [true, null]}')
        assert load_variables(path) == {"a": "1", "b": ["true", ""]}

    def test_empty(self, write_file):
        assert load_variables(write_file("vars.yaml", "")) == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="variables file not found"):
            load_variables(tmp_path / "absent.yaml")

    def test_not_a_mapping(self, write_file):
        with pytest.raises(ConfigError, match="variables must be a mapping"):
            load_variables(write_file("vars.yaml", "just text\n"))


class TestNormalizeValue:

    def test_scalars(self):
        assert normalize_value(3) == "3"
        assert normalize_value(2.5) == "2.5"
        assert normalize_value(False) == "false"
        assert normalize_value(None) == ""

    def test_unsupported_type_reports_path(self):
        with pytest.raises(ConfigError, match=r"^a\.0: unsupported value type"):
            normalize_value({"a": [object()]})
