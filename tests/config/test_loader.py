"""Tests for configuration loading: bundled defaults, override files, environment."""

from pathlib import Path

import pytest
import yaml

from labor_config import CONFIG_PATH_ENV, DATABASE_URL_ENV, get_active_config
from labor_config.loader import compute_checksum, load_config, merge, parse_config
from labor_engines.types import ResidualPolicy


def _write_yaml(tmp_path: Path, data: dict, name: str = "override.yaml") -> Path:
    path = tmp_path / name
    path.write_text(yaml.safe_dump(data))
    return path


class TestLoadConfig:

    def test_bundled_defaults(self):
        config = load_config()

        assert config.database.url == "sqlite:///labor_tracker.db"
        assert config.database.echo is False
        assert config.logging.level == "INFO"
        assert config.parser.layout == "certified_payroll"
        assert config.reconciliation.residual_policy is ResidualPolicy.LAST
        assert len(config.checksum) == 64

    def test_override_file_layered(self, tmp_path):
        path = _write_yaml(
            tmp_path,
            {"reconciliation": {"residual_policy": "PROPORTIONAL"}, "logging": {"level": "debug"}},
        )

        config = load_config(override_path=path)

        assert config.reconciliation.residual_policy is ResidualPolicy.PROPORTIONAL
        assert config.logging.level == "DEBUG"
        # Untouched sections keep their defaults
        assert config.database.url == "sqlite:///labor_tracker.db"

    def test_database_url_wins(self, tmp_path):
        path = _write_yaml(tmp_path, {"database": {"url": "sqlite:///from_file.db"}})

        config = load_config(override_path=path, database_url="sqlite:///from_env.db")
        assert config.database.url == "sqlite:///from_env.db"

    def test_missing_override_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(override_path=tmp_path / "absent.yaml")

    def test_empty_override_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(override_path=path).parser.layout == "certified_payroll"

    def test_non_mapping_override(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError):
            load_config(override_path=path)

    def test_checksum_tracks_content(self, tmp_path):
        path = _write_yaml(tmp_path, {"database": {"echo": True}})
        assert load_config().checksum != load_config(override_path=path).checksum
        assert load_config().checksum == load_config().checksum


class TestParseConfig:
    """Invalid values are rejected."""

    def setup_method(self):
        self.base = {
            "database": {"url": "sqlite://"},
            "logging": {"level": "INFO"},
            "parser": {"layout": "certified_payroll"},
            "reconciliation": {"residual_policy": "last"},
        }

    def test_valid(self):
        assert parse_config(self.base).database.url == "sqlite://"

    @pytest.mark.parametrize(
        "section, key, value",
        [
            ("database", "url", ""),
            ("logging", "level", "CHATTY"),
            ("parser", "layout", "weekly_summary"),
            ("reconciliation", "residual_policy", "first"),
            ("database", "echo", "sometimes"),
        ],
    )
    def test_invalid_values(self, section, key, value):
        data = merge(self.base, {section: {key: value}})
        with pytest.raises(ValueError):
            parse_config(data)

    @pytest.mark.parametrize("raw, expected", [("yes", True), ("off", False), (True, True)])
    def test_echo_booleans(self, raw, expected):
        data = merge(self.base, {"database": {"echo": raw}})
        assert parse_config(data).database.echo is expected


class TestMerge:

    def test_nested(self):
        assert merge({"a": {"x": 1, "y": 2}, "b": 1}, {"a": {"y": 3}}) == {
            "a": {"x": 1, "y": 3},
            "b": 1,
        }

    def test_does_not_mutate_base(self):
        base = {"a": {"x": 1}}
        merge(base, {"a": {"x": 2}})
        assert base == {"a": {"x": 1}}

    def test_checksum_key_order_independent(self):
        assert compute_checksum({"a": 1, "b": 2}) == compute_checksum({"b": 2, "a": 1})


class TestGetActiveConfig:
    """Environment resolution."""

    def test_environment_file_and_url(self, tmp_path):
        path = _write_yaml(tmp_path, {"parser": {"layout": "certified_payroll"}, "logging": {"level": "WARNING"}})
        environ = {CONFIG_PATH_ENV: str(path), DATABASE_URL_ENV: "sqlite:///env.db"}

        config = get_active_config(environ=environ)

        assert config.logging.level == "WARNING"
        assert config.database.url == "sqlite:///env.db"

    def test_explicit_path_beats_environment(self, tmp_path):
        env_file = _write_yaml(tmp_path, {"logging": {"level": "WARNING"}}, "env.yaml")
        explicit = _write_yaml(tmp_path, {"logging": {"level": "ERROR"}}, "explicit.yaml")

        config = get_active_config(config_path=explicit, environ={CONFIG_PATH_ENV: str(env_file)})
        assert config.logging.level == "ERROR"

    def test_empty_environment_uses_defaults(self):
        assert get_active_config(environ={}).database.url == "sqlite:///labor_tracker.db"

    def test_config_trace_logged(self, captured_logs):
        get_active_config(environ={})

        traces = [r for r in captured_logs() if r["message"] == "LABOR_CONFIG_TRACE"]
        assert traces[0]["residual_policy"] == "last"
        assert traces[0]["layout"] == "certified_payroll"
