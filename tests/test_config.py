from pathlib import Path

import pytest

from arbiter.bind.config import (
    ArbiterConfig,
    load_arbiter_config,
    mock_config,
    mock_config_with_submodules,
)
from arbiter.errors import ArbiterError, ConfigError


def test_default_config():
    config = ArbiterConfig()
    assert config.bindings_path == Path("src")
    assert config.submodules is False
    assert config.ignore_interfaces is False


def test_mock_config():
    config = mock_config()
    assert config.bindings_path == Path("src") / "bindings"
    assert config.submodules is False
    assert config.ignore_interfaces is False


def test_mock_config_with_submodules():
    config = mock_config_with_submodules()
    assert config.bindings_path == Path("src")
    assert config.submodules is True
    assert config.ignore_interfaces is False


def test_load_reads_flags(tmp_path):
    path = tmp_path / "arbiter.toml"
    path.write_text("submodules = true\nignore_interfaces = false\n")
    config = load_arbiter_config(path)
    assert config.submodules is True
    assert config.ignore_interfaces is False


def test_load_defaults_when_keys_missing(tmp_path):
    path = tmp_path / "arbiter.toml"
    path.write_text("")
    config = load_arbiter_config(path)
    assert config.submodules is False
    assert config.ignore_interfaces is True
    assert config.bindings_path == Path("src") / "bindings"


def test_load_ignores_bindings_path_setting(tmp_path):
    path = tmp_path / "arbiter.toml"
    path.write_text('bindings_path = "elsewhere"\n')
    config = load_arbiter_config(path)
    assert config.bindings_path == Path("src") / "bindings"


def test_load_accepts_string_booleans(tmp_path):
    path = tmp_path / "arbiter.toml"
    path.write_text('submodules = "yes"\nignore_interfaces = "off"\n')
    config = load_arbiter_config(path)
    assert config.submodules is True
    assert config.ignore_interfaces is False


def test_load_falls_back_on_unusable_values(tmp_path):
    path = tmp_path / "arbiter.toml"
    path.write_text('submodules = "maybe"\nignore_interfaces = [1]\n')
    config = load_arbiter_config(path)
    assert config.submodules is False
    assert config.ignore_interfaces is True


def test_load_missing_file_raises(tmp_path):
    with pytest.raises(ConfigError):
        load_arbiter_config(tmp_path / "absent.toml")


def test_load_invalid_toml_raises(tmp_path):
    path = tmp_path / "arbiter.toml"
    path.write_text("submodules = = true\n")
    with pytest.raises(ArbiterError):
        load_arbiter_config(path)


def test_load_default_path_uses_cwd(tmp_path, monkeypatch):
    (tmp_path / "arbiter.toml").write_text("submodules = true\n")
    monkeypatch.chdir(tmp_path)
    assert load_arbiter_config().submodules is True