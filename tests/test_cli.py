import json
import subprocess
from pathlib import Path

import pytest

from arbiter.cli import build_parser, main

FORK_CONFIG = """\
provider = "http://localhost:8545"
block_number = 1
output_directory = "out"
output_filename = "fork.json"

[contracts]

[externally_owned_accounts]
"""


def _completed(cmd, code=0, out=b"", err=b""):
    return subprocess.CompletedProcess(cmd, code, stdout=out, stderr=err)


def test_parser_init_arguments():
    args = build_parser().parse_args(["init", "demo", "--no-git"])
    assert args.command == "init"
    assert args.simulation_name == "demo"
    assert args.no_git is True
    assert args.template is None


def test_parser_fork_defaults():
    args = build_parser().parse_args(["fork", "cfg.toml"])
    assert args.command == "fork"
    assert args.fork_config_path == "cfg.toml"
    assert args.overwrite is False


def test_no_command_prints_help(capsys):
    assert main([]) == 0
    out = capsys.readouterr().out
    assert "Ethereum Virtual Machine Logic Simulator" in out
    assert "fork" in out


def test_version(capsys):
    with pytest.raises(SystemExit) as info:
        main(["--version"])
    assert info.value.code == 0
    assert "0.4.13" in capsys.readouterr().out


def test_fork_missing_config(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert main(["fork", "missing.toml"]) == 1
    assert "Error with config parsing" in capsys.readouterr().err


def test_fork_writes_output(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "cfg.toml").write_text(FORK_CONFIG, encoding="utf-8")

    assert main(["fork", "cfg.toml"]) == 0

    data = json.loads((tmp_path / "out" / "fork.json").read_text(encoding="utf-8"))
    assert data == {"meta": {}, "raw": {}, "externally_owned_accounts": {}}
    out = capsys.readouterr().out
    assert "Forking..." in out
    assert "Wrote fork data to disk." in out


def test_fork_refuses_to_overwrite(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "cfg.toml").write_text(FORK_CONFIG, encoding="utf-8")
    (tmp_path / "out").mkdir()
    existing = tmp_path / "out" / "fork.json"
    existing.write_text("old", encoding="utf-8")

    assert main(["fork", "cfg.toml"]) == 1
    assert existing.read_text(encoding="utf-8") == "old"
    assert "already exists" in capsys.readouterr().err

    assert main(["fork", "cfg.toml", "--overwrite"]) == 0
    assert json.loads(existing.read_text(encoding="utf-8"))["raw"] == {}


def test_bind_reports_forge_failure(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(
        subprocess, "run", lambda cmd, *a, **k: _completed(cmd, 1, err=b"missing")
    )

    assert main(["bind"]) == 1
    captured = capsys.readouterr()
    assert "Generating bindings..." in captured.out
    assert "Command failed" in captured.err


def test_init_without_git(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)

    def fake_run(cmd, *args, **kwargs):
        cmd = [str(part) for part in cmd]
        if cmd[:2] == ["git", "clone"]:
            project = Path(cmd[3])
            project.mkdir()
            (project / ".git").mkdir()
            (project / "Cargo.toml").write_text(
                'name = "arbiter_template"\n', encoding="utf-8"
            )
        return _completed(cmd, out=b"ok")

    monkeypatch.setattr(subprocess, "run", fake_run)

    assert main(["init", "demo", "--template", "tpl", "--no-git"]) == 0
    assert not (tmp_path / "demo" / ".git").exists()
    assert (tmp_path / "demo" / "Cargo.toml").read_text(encoding="utf-8") == 'name = "demo"\n'
    assert "Initializing Arbiter project..." in capsys.readouterr().out