"""Tests for the gophon command line."""

from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from gophon.cli import app

runner = CliRunner()


class TestIndexCommand:
    def test_reads_module_from_go_mod(self, make_tree, tmp_path: Path):
        root = make_tree({
            "go.mod": "module github.com/acme/app\n\ngo 1.22\n",
            "api": {"api.go": "package api\n\nfunc Serve() {}\n"},
        })
        dest = tmp_path / "out"
        result = runner.invoke(app, ["index", str(root), "--dest", str(dest)])
        assert result.exit_code == 0, result.output
        assert (dest / "api" / "func.Serve.goindex").read_text(encoding="utf-8") == (
            "package github.com/acme/app/api\n\nfunc Serve() {}\n"
        )

    def test_missing_module_fails(self, make_tree, tmp_path: Path):
        root = make_tree({"a.go": "package a\n"})
        result = runner.invoke(app, ["index", str(root), "--dest", str(tmp_path / "out")])
        assert result.exit_code == 1
        assert "go.mod" in result.output

    def test_load_error_exit_code(self, make_tree, tmp_path: Path):
        root = make_tree({"bad": {"bad.go": "package bad\n\nfunc ( {\n"}})
        result = runner.invoke(
            app, ["index", str(root), "--dest", str(tmp_path / "out"), "--base-module", "x.io/m"],
        )
        assert result.exit_code == 1
        assert "bad" in result.output


class TestScanCommand:
    def test_lists_packages(self, make_tree):
        root = make_tree({"lib": {"lib.go": "package lib\n\nconst A = 1\nvar B = 2\n"}})
        result = runner.invoke(app, ["scan", str(root), "--base-module", "x.io/m"])
        assert result.exit_code == 0, result.output
        assert "x.io/m/lib" in result.output
