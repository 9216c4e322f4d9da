"""Unit tests for pkgscaffold.utils.

Tests cover:
- npm package-name helpers (short name, scope detection, validation)
- JSON helpers (load_json, dump_json)
- ensure_dir and unique
- Verbose switch for print_debug
"""

from __future__ import annotations

import json

import pytest

from pkgscaffold import utils
from pkgscaffold.utils import (
    dump_json,
    ensure_dir,
    is_scoped,
    load_json,
    package_name_problems,
    package_short_name,
    unique,
)


class TestPackageNames:
    @pytest.mark.unit
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("my-lib", "my-lib"),
            ("@acme/ui", "ui"),
            ("@acme/ui-kit", "ui-kit"),
            ("", ""),
        ],
    )
    def test_short_name(self, name, expected):
        assert package_short_name(name) == expected

    @pytest.mark.unit
    def test_is_scoped(self):
        assert is_scoped("@acme/ui")
        assert not is_scoped("ui")
        assert not is_scoped("")

    @pytest.mark.unit
    @pytest.mark.parametrize("name", ["my-lib", "@acme/ui", "lib.js", "a_b", "x123"])
    def test_valid_names(self, name):
        assert package_name_problems(name) == []

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "name, fragment",
        [
            ("", "greater than zero"),
            ("My-Lib", "capital letters"),
            (".hidden", "period"),
            ("_private", "underscore"),
            ("node_modules", "not a valid package name"),
            ("my lib", "URL-friendly"),
            ("wow!", "special characters"),
            (" padded", "leading or trailing spaces"),
            ("a" * 215, "214"),
        ],
    )
    def test_invalid_names(self, name, fragment):
        problems = package_name_problems(name)
        assert any(fragment in problem for problem in problems)


class TestJsonHelpers:
    @pytest.mark.unit
    def test_dump_json_uses_two_spaces_and_trailing_newline(self):
        text = dump_json({"name": "x", "nested": {"a": 1}})
        assert text.endswith("}\n")
        assert '\n  "name": "x"' in text
        assert '\n    "a": 1' in text

    @pytest.mark.unit
    def test_dump_json_keeps_unicode(self):
        assert "café" in dump_json({"description": "café"})

    @pytest.mark.unit
    def test_load_json(self, tmp_path):
        path = tmp_path / "package.json"
        path.write_text(json.dumps({"name": "x"}), encoding="utf-8")
        assert load_json(path) == {"name": "x"}

    @pytest.mark.unit
    def test_load_json_wraps_non_object(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[1, 2]", encoding="utf-8")
        assert load_json(path) == {"_root": [1, 2]}

    @pytest.mark.unit
    def test_load_json_invalid(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{nope", encoding="utf-8")
        with pytest.raises(json.JSONDecodeError):
            load_json(path)


class TestMisc:
    @pytest.mark.unit
    def test_ensure_dir(self, tmp_path):
        target = tmp_path / "a" / "b"
        assert ensure_dir(target) == target
        assert target.is_dir()
        ensure_dir(target)

    @pytest.mark.unit
    def test_unique_keeps_first_seen_order(self):
        assert unique(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]

    @pytest.mark.unit
    def test_print_debug_respects_verbose(self, capsys):
        utils.set_verbose(False)
        utils.print_debug("hidden line")
        utils.set_verbose(True)
        assert utils.is_verbose()
        utils.print_debug("shown line")
        out = capsys.readouterr().out
        assert "hidden line" not in out
        assert "shown line" in out
