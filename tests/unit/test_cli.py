"""
Unit tests for the command-line entry point.
"""

import json
import os

import pytest

from fileserver.__main__ import build_parser, load_config, main
from fileserver.config import ConfigError


def parse(*argv):
    return build_parser().parse_args(list(argv))


def test_defaults_are_none():
    args = parse()
    assert args.config is None
    assert args.root is None
    assert args.port is None
    assert args.strict_paths is None


def test_log_level_case_insensitive():
    assert parse("--log-level", "debug").log_level == "DEBUG"


def test_root_flag(site, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config = load_config(parse("--root", str(site), "--port", "0", "--strict-paths"))

    assert config.root_directory == str(site)
    assert config.port == 0
    assert config.strict_paths is True


def test_relative_root_made_absolute(site, monkeypatch):
    monkeypatch.chdir(site.parent)
    config = load_config(parse("--root", site.name))
    assert config.root_directory == os.path.abspath(site.name)


def test_default_config_file(site, tmp_path, monkeypatch):
    (tmp_path / "config.json").write_text(json.dumps({
        "root_directory": str(site),
        "redirect_map": {"/old": "/new"},
    }))
    monkeypatch.chdir(tmp_path)

    config = load_config(parse("--port", "8081"))

    assert config.redirect_map == {"/old": "/new"}
    assert config.port == 8081


def test_flags_override_config_file(site, tmp_path, monkeypatch):
    other = tmp_path / "other"
    other.mkdir()
    path = tmp_path / "site.json"
    path.write_text(json.dumps({"root_directory": str(site), "port": 9000}))
    monkeypatch.chdir(tmp_path)

    config = load_config(parse("--config", str(path), "--root", str(other)))

    assert config.root_directory == str(other)
    assert config.port == 9000


def test_no_config_and_no_root(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(ConfigError, match="config.json"):
        load_config(parse())


def test_main_reports_config_error(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert main(["--root", str(tmp_path / "missing")]) == 2
    assert "Configuration error" in capsys.readouterr().err
