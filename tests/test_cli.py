"""
Tests for the ``aidigest`` command-line entry point.
"""

import pytest

from aidigest import __version__
from aidigest.cli import main

from conftest import make_tree, section_headers


def test_writes_digest_and_prints_summary(project, out_file, capsys):
    make_tree(project, {"src/app.js": "run();\n", "build/out.js": "x\n"})

    main(["--root", str(project), "--out", str(out_file), "--show-output-files"])

    out = capsys.readouterr().out
    assert "Total files included: 1" in out
    assert "- src/app.js" in out
    assert "Processed:" not in out
    assert section_headers(out_file.read_text(encoding="utf-8")) == ["src/app.js"]


def test_verbose_streams_progress(project, out_file, capsys):
    make_tree(project, {"a.txt": "a\n", "b.log": "b\n"})

    main(["--root", str(project), "--out", str(out_file), "-v", "-i", "*.log"])

    out = capsys.readouterr().out
    assert "[aidigest] Processed: a.txt" in out
    assert "[aidigest] Ignored: b.log" in out


def test_no_default_ignores_and_extra_config(project, out_file, tmp_path):
    make_tree(project, {"build/out.txt": "o\n", "notes.tmp": "n\n"})
    cfg = tmp_path / "patterns.txt"
    cfg.write_text("# scratch files\n*.tmp\n", encoding="utf-8")

    main([
        "--root", str(project),
        "--out", str(out_file),
        "--no-default-ignores",
        "--config", str(cfg),
    ])

    assert section_headers(out_file.read_text(encoding="utf-8")) == ["build/out.txt"]


def test_gitignore_flag(project, out_file):
    make_tree(project, {".gitignore": "*.cache\n", "a.txt": "a\n", "b.cache": "b\n"})

    main(["--root", str(project), "--out", str(out_file), "--gitignore"])

    assert section_headers(out_file.read_text(encoding="utf-8")) == ["a.txt"]


def test_missing_root_exits_with_error(tmp_path, out_file, capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--root", str(tmp_path / "nope"), "--out", str(out_file)])

    assert exc.value.code == 1
    assert "does not exist" in capsys.readouterr().err
    assert not out_file.exists()


def test_missing_config_file_exits_with_error(project, out_file, tmp_path, capsys):
    with pytest.raises(SystemExit) as exc:
        main([
            "--root", str(project),
            "--out", str(out_file),
            "--config", str(tmp_path / "missing.txt"),
        ])

    assert exc.value.code == 1
    assert "Config file" in capsys.readouterr().err


def test_version_flag(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--version"])

    assert exc.value.code == 0
    assert __version__ in capsys.readouterr().out
