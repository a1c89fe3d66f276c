"""Tests for the command-line front end."""

import json
import os
import tempfile
from pathlib import Path

import pytest

from gitfinder import __version__
from gitfinder.cli import main
from gitfinder.errors import ExitCode, GitFinderError, GitNotFoundError


def _sample_tree(make_repo, root):
    make_repo(os.path.join(root, "A"), dates=["2020-01-01T12:00:00", "2020-05-05T12:00:00", "2021-06-15T12:00:00"])
    make_repo(os.path.join(root, "B"), dates=["2020-01-01T12:00:00"], origin="https://example.com/b.git")
    make_repo(os.path.join(root, "C", "target"), dates=["2020-01-01T12:00:00"])


def test_csv_output(make_repo, capsys):
    with tempfile.TemporaryDirectory() as tmp:
        _sample_tree(make_repo, tmp)
        code = main([tmp, "--skip", "target"])
        out = capsys.readouterr().out.splitlines()
        assert code == ExitCode.SUCCESS
        assert out == ["repository,oldest,newest,count", "A,20-01-01,21-06-15,3"]


def test_without_blocklist_nested_repo_is_reported(make_repo, capsys):
    with tempfile.TemporaryDirectory() as tmp:
        _sample_tree(make_repo, tmp)
        assert main([tmp]) == ExitCode.SUCCESS
        out = capsys.readouterr().out.splitlines()
        assert out[0] == "repository,oldest,newest,count"
        assert sorted(out[1:]) == ["A,20-01-01,21-06-15,3", "C/target,20-01-01,20-01-01,1"]


def test_skip_noise(make_repo, capsys):
    with tempfile.TemporaryDirectory() as tmp:
        _sample_tree(make_repo, tmp)
        main([tmp, "--skip-noise"])
        assert capsys.readouterr().out.splitlines()[1:] == ["A,20-01-01,21-06-15,3"]


def test_json_output(make_repo, capsys):
    with tempfile.TemporaryDirectory() as tmp:
        _sample_tree(make_repo, tmp)
        main([tmp, "--json", "--skip", "target"])
        data = json.loads(capsys.readouterr().out)
        assert data == [{"repository": "A", "oldest": "2020-01-01", "newest": "2021-06-15", "count": 3}]


def test_relative_path_is_resolved(make_repo, capsys, monkeypatch):
    with tempfile.TemporaryDirectory() as tmp:
        make_repo(os.path.join(tmp, "work", "proj"), dates=["2022-02-02T12:00:00"])
        monkeypatch.chdir(tmp)
        main(["work"])
        assert capsys.readouterr().out.splitlines()[1:] == ["proj,22-02-02,22-02-02,1"]


def test_stats_go_to_stderr(make_repo, capsys):
    with tempfile.TemporaryDirectory() as tmp:
        make_repo(os.path.join(tmp, "proj"), dates=["2022-02-02T12:00:00"])
        main([tmp, "--stats", "--max-open", "2", "--workers", "2"])
        captured = capsys.readouterr()
        assert "peak concurrent units" in captured.err
        assert "peak" not in captured.out


def test_missing_root(capsys):
    code = main(["/no/such/dir/anywhere"])
    captured = capsys.readouterr()
    assert code == ExitCode.INVALID_ARGS
    assert captured.out == ""
    assert "/no/such/dir/anywhere" in captured.err


def test_root_is_a_file(capsys):
    with tempfile.NamedTemporaryFile() as f:
        assert main([f.name]) == ExitCode.INVALID_ARGS
    assert "Not a directory" in capsys.readouterr().err


def test_missing_git(capsys, monkeypatch):
    monkeypatch.setattr("gitfinder.cli.shutil.which", lambda name: None)
    with tempfile.TemporaryDirectory() as tmp:
        assert main([tmp]) == ExitCode.GIT_ERROR


def test_bad_max_open():
    with pytest.raises(SystemExit) as exc:
        main([".", "--max-open", "0"])
    assert exc.value.code == 2


def test_version(capsys):
    with pytest.raises(SystemExit):
        main(["--version"])
    assert __version__ in capsys.readouterr().out


def test_default_is_current_dir(make_repo, capsys, monkeypatch):
    with tempfile.TemporaryDirectory() as tmp:
        make_repo(os.path.join(tmp, "here"), dates=["2022-02-02T12:00:00"])
        monkeypatch.chdir(Path(tmp))
        main([])
        assert capsys.readouterr().out.splitlines()[1:] == ["here,22-02-02,22-02-02,1"]


def test_errors_map_to_their_exit_code(capsys, monkeypatch):
    def _boom(args):
        raise GitFinderError("walk could not start", ExitCode.INVALID_ARGS)

    monkeypatch.setattr("gitfinder.cli.run", _boom)
    assert main(["."]) == ExitCode.INVALID_ARGS
    assert "walk could not start" in capsys.readouterr().err


def test_missing_git_message(capsys, monkeypatch):
    monkeypatch.setattr("gitfinder.cli.shutil.which", lambda name: None)
    with tempfile.TemporaryDirectory() as tmp:
        assert main([tmp]) == GitNotFoundError("x").code
    assert "git executable not found" in capsys.readouterr().err
