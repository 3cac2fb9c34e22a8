"""Tests for configuration management."""

from pathlib import Path

import pytest

from .lib import (
    EnvConfig,
    EnvVar,
    _find_repo_root,
    get_default_columns,
    get_environment,
    get_environment_info,
    get_log_level,
    get_storage_dir,
    get_storage_key,
    list_environment_variables,
)

# =============================================================================
# Tests for get_environment (main interface)
# =============================================================================


class TestGetEnvironment:
    """Tests for the unified get_environment interface."""

    @pytest.mark.unit
    def test_returns_default_when_not_set(self, monkeypatch):
        """Returns default value when env var is not set."""
        monkeypatch.delenv("FORMCANVAS_STORAGE_KEY", raising=False)
        assert get_environment(EnvVar.FORMCANVAS_STORAGE_KEY) == "form-builder-schema"

    @pytest.mark.unit
    def test_override_takes_priority(self, monkeypatch):
        """Override parameter takes highest priority."""
        monkeypatch.setenv("FORMCANVAS_DEFAULT_COLUMNS", "3")
        assert get_environment(EnvVar.FORMCANVAS_DEFAULT_COLUMNS, override=2) == 2

    @pytest.mark.unit
    def test_int_type_conversion(self, monkeypatch):
        """Integer type conversion from string."""
        monkeypatch.setenv("FORMCANVAS_DEFAULT_COLUMNS", "2")
        result = get_environment(EnvVar.FORMCANVAS_DEFAULT_COLUMNS)
        assert result == 2
        assert isinstance(result, int)

    @pytest.mark.unit
    def test_invalid_int_returns_default(self, monkeypatch):
        """Invalid integer value returns default."""
        monkeypatch.setenv("FORMCANVAS_DEFAULT_COLUMNS", "wide")
        assert get_environment(EnvVar.FORMCANVAS_DEFAULT_COLUMNS) == 1

    @pytest.mark.unit
    def test_empty_value_uses_default(self, monkeypatch):
        """An empty variable counts as unset."""
        monkeypatch.setenv("FORMCANVAS_ID_PREFIX", "")
        assert get_environment(EnvVar.FORMCANVAS_ID_PREFIX) is None

    @pytest.mark.unit
    def test_path_type_conversion(self, monkeypatch, tmp_path):
        """Path variables are returned as Path objects."""
        monkeypatch.setenv("FORMCANVAS_STORAGE_DIR", str(tmp_path))
        result = get_environment(EnvVar.FORMCANVAS_STORAGE_DIR)
        assert isinstance(result, Path)
        assert result == tmp_path

    @pytest.mark.unit
    def test_none_default_for_id_prefix(self, monkeypatch):
        """Id prefix defaults to None when not set."""
        monkeypatch.delenv("FORMCANVAS_ID_PREFIX", raising=False)
        assert get_environment(EnvVar.FORMCANVAS_ID_PREFIX) is None


class TestEnvConfigParse:
    """Tests for raw value conversion."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            pytest.param("true", True, id="true"),
            pytest.param("YES", True, id="yes-upper"),
            pytest.param("1", True, id="one"),
            pytest.param("false", False, id="false"),
            pytest.param(" off ", False, id="off-padded"),
            pytest.param("0", False, id="zero"),
            pytest.param("maybe", None, id="unrecognised"),
        ],
    )
    @pytest.mark.unit
    def test_bool_conversion(self, raw, expected):
        config = EnvConfig(name="FLAG", default=None, var_type=bool)
        assert config.parse(raw) is expected


class TestGetEnvironmentInfo:
    """Tests for environment variable metadata."""

    @pytest.mark.unit
    def test_returns_env_config(self):
        """Returns EnvConfig dataclass."""
        info = get_environment_info(EnvVar.FORMCANVAS_STORAGE_KEY)
        assert isinstance(info, EnvConfig)
        assert info.name == "FORMCANVAS_STORAGE_KEY"
        assert info.var_type is str
        assert info.category == "storage"


class TestListEnvironmentVariables:
    """Tests for listing environment variables."""

    @pytest.mark.unit
    def test_list_all(self):
        assert list_environment_variables() == list(EnvVar)

    @pytest.mark.unit
    def test_filter_by_category(self):
        storage = list_environment_variables("storage")
        assert EnvVar.FORMCANVAS_STORAGE_DIR in storage
        assert EnvVar.FORMCANVAS_LOG_LEVEL not in storage

    @pytest.mark.unit
    def test_unknown_category_is_empty(self):
        assert list_environment_variables("nope") == []


class TestConvenienceFunctions:
    """Tests for convenience helpers."""

    @pytest.mark.unit
    def test_storage_dir_override(self, tmp_path):
        assert get_storage_dir(tmp_path) == tmp_path

    @pytest.mark.unit
    def test_storage_dir_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("FORMCANVAS_STORAGE_DIR", str(tmp_path / "forms"))
        assert get_storage_dir() == tmp_path / "forms"

    @pytest.mark.unit
    def test_storage_dir_defaults_under_repo_root(self, monkeypatch, tmp_path):
        monkeypatch.delenv("FORMCANVAS_STORAGE_DIR", raising=False)
        (tmp_path / "pyproject.toml").write_text("")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)
        assert get_storage_dir() == tmp_path.resolve() / ".formcanvas"

    @pytest.mark.unit
    def test_storage_key_override(self):
        assert get_storage_key("draft") == "draft"

    @pytest.mark.unit
    def test_default_columns_clamped(self):
        assert get_default_columns(0) == 1
        assert get_default_columns(9) == 4
        assert get_default_columns(2) == 2

    @pytest.mark.unit
    def test_log_level_upper_cased(self, monkeypatch):
        monkeypatch.setenv("FORMCANVAS_LOG_LEVEL", "debug")
        assert get_log_level() == "DEBUG"


class TestFindRepoRoot:
    """Tests for repository root detection."""

    @pytest.mark.unit
    def test_finds_marker(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text("")
        child = tmp_path / "x"
        child.mkdir()
        assert _find_repo_root(child) == tmp_path.resolve()
