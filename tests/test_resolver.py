"""Tests for textual import resolution."""

import pytest

from clarity_cli.resolver import (
    ModuleResolver,
    extract_import_path,
    get_parent_folder,
    is_barrel_file,
    is_test_file,
    join_relative,
    normalize_path,
)


class TestExtractImportPath:
    """Tests for pulling the quoted path out of module text."""

    @pytest.mark.parametrize(
        "module_text,expected",
        [
            ('{ foo } from "./foo"', "./foo"),
            ("{ foo } from './foo'", "./foo"),
            ("* as utils from   \"../utils\"", "../utils"),
            ('"./styles.css"', "./styles.css"),
            ("'./polyfill'", "./polyfill"),
        ],
    )
    def test_accepted_shapes(self, module_text, expected):
        assert extract_import_path(module_text) == expected

    def test_unrecognized_text(self):
        assert extract_import_path("react") is None
        assert extract_import_path('require("./foo")') is None


class TestHelpers:
    def test_normalize_strips_prefix_and_one_extension(self):
        assert normalize_path("./src/a.ts") == "src/a"
        assert normalize_path("src/a.test.tsx") == "src/a.test"
        assert normalize_path("src/a.css") == "src/a.css"

    def test_join_relative_tolerates_popping_past_root(self):
        assert join_relative("src/cli", "../config") == "src/config"
        assert join_relative("src", "../../../x") == "x"
        assert join_relative("", "./a/./b") == "a/b"

    def test_is_test_file(self):
        assert is_test_file("src/a.test.ts")
        assert is_test_file("src/a.spec.js")
        assert is_test_file("src/__tests__/a.ts")
        assert not is_test_file("src/testing.ts")

    def test_barrel_and_parent(self):
        assert is_barrel_file("src/utils/index.tsx")
        assert not is_barrel_file("src/utils/index.css")
        assert get_parent_folder("src/utils/format.ts") == "utils"
        assert get_parent_folder("format.ts") == ""


class TestModuleResolver:
    """Tests for lookup precedence."""

    def test_relative_import(self):
        resolver = ModuleResolver(["src/a.ts", "src/b.ts"])
        assert resolver.resolve('{ b } from "./b"', "src/a.ts") == "src/b.ts"

    def test_parent_relative_import(self):
        resolver = ModuleResolver(["src/cli/run.ts", "src/config.ts"])
        assert resolver.resolve('x from "../config"', "src/cli/run.ts") == "src/config.ts"

    def test_absolute_import(self):
        resolver = ModuleResolver(["src/lib/db.ts"])
        assert resolver.resolve('db from "/src/lib/db"', "src/app.ts") == "src/lib/db.ts"

    def test_index_fallback(self):
        resolver = ModuleResolver(["src/app.ts", "src/utils/index.ts"])
        assert resolver.resolve('x from "./utils"', "src/app.ts") == "src/utils/index.ts"

    def test_relative_math_beats_basename(self):
        resolver = ModuleResolver(["a/foo.ts", "b/foo.ts", "b/bar.ts"])
        assert resolver.resolve('x from "./foo"', "b/bar.ts") == "b/foo.ts"

    def test_basename_fallback_prefers_first_file(self):
        resolver = ModuleResolver(["a/foo.ts", "b/foo.ts", "c/bar.ts"])
        assert resolver.resolve('x from "./foo"', "c/bar.ts") == "a/foo.ts"

    def test_external_package_ignored(self):
        resolver = ModuleResolver(["src/react.ts"])
        assert resolver.resolve('React from "react"', "src/app.ts") is None

    def test_self_import_suppressed(self):
        resolver = ModuleResolver(["src/a.ts"])
        assert resolver.resolve('x from "./a"', "src/a.ts") is None

    def test_miss_is_none(self):
        resolver = ModuleResolver(["src/a.ts"])
        assert resolver.resolve('"./styles.css"', "src/a.ts") is None
