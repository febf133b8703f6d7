# =============================================================================
# tests/test_api_index.py - Framework API Index Tests
# =============================================================================
# Tests for lib/api_index.py against the installed FastAPI / Pydantic.
#
# Run with: pytest tests/test_api_index.py -v
# =============================================================================

import pytest

from lib.api_index import (
    ApiIndex,
    installed_versions,
    normalize_reference,
    satisfies,
    split_symbols,
    version_tuple,
)
from linting import get_default_index


@pytest.fixture(scope="module")
def index():
    return get_default_index()


# =============================================================================
# Reference Normalization
# =============================================================================

class TestNormalizeReference:

    @pytest.mark.parametrize("text,expected", [
        ('@app.get("/items")', "app.get"),
        ("Depends()", "Depends"),
        ("Annotated[int, Query()]", "Annotated"),
        ("  fastapi.security.HTTPBearer  ", "fastapi.security.HTTPBearer"),
        ("BaseModel.", "BaseModel"),
    ])
    def test_normalize(self, text, expected):
        assert normalize_reference(text) == expected


class TestSplitSymbols:

    def test_slash_separated_spans(self):
        assert split_symbols("`@app.get()` / `@app.post()`") == ["app.get", "app.post"]

    def test_plain_text(self):
        assert split_symbols("Query, Path") == ["Query", "Path"]

    def test_or_separated(self):
        assert split_symbols("`Query` or `Path`") == ["Query", "Path"]

    def test_path_argument_is_not_split(self):
        assert split_symbols('`@app.get("/items/{item_id}")`') == ["app.get"]

    def test_empty_cell(self):
        assert split_symbols("") == []


# =============================================================================
# Versions
# =============================================================================

class TestVersions:

    @pytest.mark.parametrize("text,expected", [
        ("0.110.2rc1", (0, 110, 2)),
        ("v2.5", (2, 5)),
        ("2", (2,)),
        ("", ()),
    ])
    def test_version_tuple(self, text, expected):
        assert version_tuple(text) == expected

    @pytest.mark.parametrize("installed,stated,expected", [
        ("0.110.0", "0.110", True),
        ("0.115.4", "0.110", True),
        ("0.99.1", "0.100", False),
        ("2.5", "2.5.1", False),
        ("2.10.0", "2.9", True),
    ])
    def test_satisfies(self, installed, stated, expected):
        assert satisfies(installed, stated) is expected

    def test_installed_versions_skips_missing(self):
        versions = installed_versions(["fastapi", "refcard-no-such-distribution"])

        assert "fastapi" in versions
        assert "refcard-no-such-distribution" not in versions


# =============================================================================
# Resolution
# =============================================================================

class TestResolve:
    """Resolve against the installed framework."""

    def test_alias_method(self, index):
        symbol = index.resolve("@app.get()")

        assert symbol.found
        assert symbol.kind == "function"
        assert symbol.qualified_name == "fastapi.FastAPI.get"

    def test_bare_class(self, index):
        symbol = index.resolve("Depends()")

        assert symbol.found
        assert symbol.qualified_name == "fastapi.Depends"

    def test_qualified_class(self, index):
        symbol = index.resolve("fastapi.security.OAuth2PasswordBearer")

        assert symbol.found
        assert symbol.kind == "class"

    def test_module(self, index):
        assert index.resolve("fastapi.security").kind == "module"

    def test_unknown_name(self, index):
        symbol = index.resolve("FastApiRouterThing")

        assert not symbol.found
        assert symbol.verifiable
        assert symbol.kind == "unknown"

    def test_unknown_attribute(self, index):
        symbol = index.resolve("app.get_everything")

        assert not symbol.found
        assert symbol.qualified_name == "fastapi.FastAPI.get_everything"

    def test_settings_live_in_pydantic_settings(self, index):
        assert index.resolve("BaseSettings").qualified_name == "pydantic_settings.BaseSettings"

    def test_moved_pydantic_name_is_not_found(self, index):
        # pydantic 2 raises an import error for names moved to other packages
        assert not index.resolve("pydantic.BaseSettings").found

    def test_instance_attribute_from_init(self, index):
        symbol = index.resolve("app.dependency_overrides")

        assert symbol.found
        assert symbol.kind == "attribute"

    def test_constructor_attribute(self, index):
        assert index.resolve("UploadFile.filename").found

    def test_not_an_identifier(self, index):
        assert not index.resolve("1 + 1").found

    def test_results_are_cached(self, index):
        assert index.resolve("Query") is index.resolve("Query()")

    def test_to_dict(self, index):
        data = index.resolve("HTTPException").to_dict()

        assert data["found"] is True
        assert data["kind"] == "class"
        assert data["reference"] == "HTTPException"


class TestUnavailableFramework:

    def test_missing_package_is_unverifiable(self):
        index = ApiIndex(modules=["refcard_missing_pkg"], aliases={})

        symbol = index.resolve("Thing")
        assert not symbol.found
        assert not symbol.verifiable

        symbol = index.resolve("refcard_missing_pkg.Thing")
        assert not symbol.found
        assert not symbol.verifiable

        assert index.available_modules == []

    def test_modules_outside_roots_are_never_imported(self):
        index = ApiIndex(modules=["fastapi"], aliases={})

        assert index._import("os") is None
        assert not index.resolve("os.system").found


class TestResolveCache:

    def test_cache_is_bounded(self):
        index = ApiIndex(modules=["fastapi"], aliases={}, cache_size=8)

        for i in range(100):
            index.resolve(f"NoSuchName{i}")

        assert len(index._resolved) == 8
        assert "NoSuchName99" in index._resolved
        assert "NoSuchName0" not in index._resolved

    def test_recently_used_entries_survive(self):
        index = ApiIndex(modules=["fastapi"], aliases={}, cache_size=2)

        depends = index.resolve("Depends")
        index.resolve("NoSuchA")
        index.resolve("Depends")
        index.resolve("NoSuchB")

        assert index.resolve("Depends") is depends
        assert "NoSuchA" not in index._resolved

    def test_failed_submodule_imports_are_not_remembered(self):
        index = ApiIndex(modules=["fastapi"], aliases={})

        assert not index.resolve("fastapi.refcard_nosuchmodule.Thing").found
        assert "fastapi.refcard_nosuchmodule" not in index._imported
        assert index._imported["fastapi"] is not None


# =============================================================================
# Exports
# =============================================================================

class TestFindExport:

    @pytest.mark.parametrize("name,module", [
        ("Depends", "fastapi"),
        ("FastAPI", "fastapi"),
        ("BaseModel", "pydantic"),
        ("BaseSettings", "pydantic_settings"),
        ("JSONResponse", "fastapi.responses"),
        ("OAuth2PasswordBearer", "fastapi.security"),
    ])
    def test_exported(self, index, name, module):
        assert index.find_export(name) == module

    @pytest.mark.parametrize("name", ["json", "Item", "get_db"])
    def test_not_exported(self, index, name):
        assert index.find_export(name) is None
