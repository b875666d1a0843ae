"""Tests for loading a single Go package directory."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from gophon.errors import LoadError
from gophon.loader import (
    GoPackageLoader,
    canonical_package_path,
    directory_package_path,
    is_go_source,
)

BASE = "github.com/lonegunmanb/gophon/pkg"


class TestCanonicalPackagePath:
    def test_declared_name_replaces_last_segment(self):
        assert (
            canonical_package_path(BASE, "testharness/mismatched_dir", "different_pkg")
            == f"{BASE}/testharness/different_pkg"
        )

    def test_matching_name(self):
        assert canonical_package_path(BASE, "models/db", "db") == f"{BASE}/models/db"

    def test_root_package_is_module(self):
        assert canonical_package_path(BASE, "", "main") == BASE

    def test_empty_base(self):
        assert canonical_package_path("", "a/b", "c") == "a/c"

    def test_directory_package_path(self):
        assert directory_package_path(BASE, "") == BASE
        assert directory_package_path(BASE, "a/b") == f"{BASE}/a/b"


class TestGoSourceSelection:
    @pytest.mark.parametrize("name", ["a.go", "zz_generated.go", "main.go"])
    def test_selected(self, name: str):
        assert is_go_source(name)

    @pytest.mark.parametrize("name", ["a_test.go", "_skip.go", ".hidden.go", "README.md", "a.go.txt"])
    def test_excluded(self, name: str):
        assert not is_go_source(name)


class TestLoadPackage:
    def test_harness_package(self, make_tree, subjects_go: str):
        root = make_tree({
            "testharness": {
                "subjects.go": subjects_go,
                "subjects_test.go": "package testharness\n\nfunc TestX() {}\n",
                "sub_pkg": {"should_not_appear.go": "package sub_pkg\n\nvar Hidden = 1\n"},
            },
        })
        result = GoPackageLoader(str(root)).load_package("testharness", BASE)

        assert result.package_path == f"{BASE}/testharness"
        assert [os.path.basename(f.path) for f in result.files] == ["subjects.go"]
        assert all(f.package_path == f"{BASE}/testharness" for f in result.files)
        assert len(result.constants) == 2
        assert len(result.variables) == 2
        assert len(result.types) == 5
        assert len(result.functions) == 5
        assert "Hidden" not in {s.name for s in result.symbols()}
        assert "TestX" not in {s.name for s in result.functions}

    def test_file_paths_are_absolute_when_root_is(self, make_tree, subjects_go: str):
        root = make_tree({"testharness": {"subjects.go": subjects_go}})
        result = GoPackageLoader(str(root)).load_package("testharness", BASE)
        assert all(os.path.isabs(f.path) for f in result.files)

    def test_package_name_differs_from_directory(self, make_tree):
        root = make_tree({
            "testharness": {
                "mismatched_dir": {"example.go": "package different_pkg\n\nvar TestVariable = \"x\"\n"},
            },
        })
        result = GoPackageLoader(str(root)).load_package("testharness/mismatched_dir", BASE)

        expected = f"{BASE}/testharness/different_pkg"
        assert result.package_path == expected
        assert [v.name for v in result.variables] == ["TestVariable"]
        assert result.variables[0].package_path == expected
        assert [os.path.basename(f.path) for f in result.files] == ["example.go"]
        assert result.files[0].package_path == expected

    def test_root_package(self, make_tree):
        root = make_tree({"main.go": "package main\n\nfunc main() {}\n"})
        result = GoPackageLoader(str(root)).load_package("", BASE)
        assert result.package_path == BASE
        assert [f.name for f in result.functions] == ["main"]

    def test_directory_without_go_files_is_empty(self, make_tree):
        root = make_tree({"docs": {"README.md": "# Documentation"}})
        result = GoPackageLoader(str(root)).load_package("docs", BASE)
        assert result.is_empty
        assert result.package_path == f"{BASE}/docs"
        assert list(result.symbols()) == []

    def test_only_test_files_is_empty(self, make_tree):
        root = make_tree({"pkg": {"a_test.go": "package pkg\n"}})
        assert GoPackageLoader(str(root)).load_package("pkg", BASE).is_empty

    def test_ignored_build_constraint_skipped(self, make_tree):
        root = make_tree({
            "tools": {
                "lib.go": "package tools\n\nvar Version = \"1\"\n",
                "gen.go": "//go:build ignore\n\npackage main\n\nfunc main() {}\n",
            },
        })
        result = GoPackageLoader(str(root)).load_package("tools", BASE)
        assert [os.path.basename(f.path) for f in result.files] == ["lib.go"]
        assert [s.name for s in result.symbols()] == ["Version"]

    def test_multiple_files_sorted(self, make_tree):
        root = make_tree({
            "pkg": {
                "b.go": "package pkg\n\nfunc B() {}\n",
                "a.go": "package pkg\n\nimport \"fmt\"\n\nfunc A() { fmt.Println() }\n",
            },
        })
        result = GoPackageLoader(str(root)).load_package("pkg", BASE)
        assert [os.path.basename(f.path) for f in result.files] == ["a.go", "b.go"]
        by_name = {f.name: f for f in result.functions}
        assert by_name["A"].imports() == 'import "fmt"'
        assert by_name["B"].imports() == ""


class TestLoadErrors:
    def test_missing_directory(self, tmp_path: Path):
        with pytest.raises(LoadError) as excinfo:
            GoPackageLoader(str(tmp_path)).load_package("nope", BASE)
        assert excinfo.value.package_path == "nope"

    def test_syntax_error(self, make_tree):
        root = make_tree({"bad": {"bad.go": "package bad\n\nfunc broken( {\n"}})
        with pytest.raises(LoadError, match="syntax error"):
            GoPackageLoader(str(root)).load_package("bad", BASE)

    def test_conflicting_package_names(self, make_tree):
        root = make_tree({
            "mixed": {
                "a.go": "package a\n",
                "b.go": "package b\n",
            },
        })
        with pytest.raises(LoadError, match="multiple packages"):
            GoPackageLoader(str(root)).load_package("mixed", BASE)

    def test_missing_package_clause(self, make_tree):
        root = make_tree({"pkg": {"empty.go": ""}})
        with pytest.raises(LoadError, match="missing package clause"):
            GoPackageLoader(str(root)).load_package("pkg", BASE)
