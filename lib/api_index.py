# =============================================================================
# lib/api_index.py - Framework Public API Index
# =============================================================================
# Answers "does this name exist in the installed framework?" for the card
# linter. Lookups import framework modules with importlib and walk
# attributes; nothing from a card is ever executed.
#
# Only modules under the indexed packages (fastapi, pydantic, starlette,
# pydantic_settings by default) can be imported through a lookup.
#
# Usage:
#   index = ApiIndex()
#   index.resolve("@app.get()").found            # True
#   index.resolve("fastapi.security.OAuth2PasswordBearer").kind  # "class"
#   index.find_export("Depends")                 # "fastapi"
# =============================================================================

from __future__ import annotations

import ast
import importlib
import inspect
import logging
import re
import textwrap
import threading
from collections import OrderedDict
from dataclasses import dataclass
from functools import lru_cache
from importlib import metadata
from types import ModuleType
from typing import Any, Literal

logger = logging.getLogger(__name__)


# Package roots first: submodules re-import their names (fastapi.encoders
# imports BaseModel), and the first module that has a name wins
DEFAULT_MODULES = [
    "fastapi",
    "pydantic",
    "pydantic_settings",
    "fastapi.responses",
    "fastapi.security",
    "fastapi.middleware.cors",
    "fastapi.middleware.gzip",
    "fastapi.middleware.trustedhost",
    "fastapi.middleware.httpsredirect",
    "fastapi.staticfiles",
    "fastapi.testclient",
    "fastapi.encoders",
    "fastapi.exceptions",
    "fastapi.routing",
    "fastapi.concurrency",
    "starlette.requests",
    "starlette.responses",
    "starlette.middleware.base",
    "starlette.background",
]

# Resolved references kept per index (least recently used dropped first)
RESOLVE_CACHE_SIZE = 2048

# Conventional instance names used on cards -> the class they stand for
DEFAULT_ALIASES = {
    "app": "fastapi.FastAPI",
    "router": "fastapi.APIRouter",
    "request": "fastapi.Request",
    "response": "fastapi.Response",
    "websocket": "fastapi.WebSocket",
    "client": "fastapi.testclient.TestClient",
    "file": "fastapi.UploadFile",
    "background_tasks": "fastapi.BackgroundTasks",
    "model": "pydantic.BaseModel",
    "settings": "pydantic_settings.BaseSettings",
}

# Distributions whose installed versions are reported
FRAMEWORK_DISTRIBUTIONS = ["fastapi", "pydantic", "starlette", "pydantic-settings"]

SymbolKind = Literal["module", "class", "function", "attribute", "unknown"]

_SPLIT_RE = re.compile(r"\s*(?:/|,|\bor\b)\s*")
_SPAN_RE = re.compile(r"`([^`]+)`")
_IDENT_RE = re.compile(r"^[A-Za-z_][\w]*(\.[A-Za-z_][\w]*)*$")


# =============================================================================
# Types
# =============================================================================

@dataclass(frozen=True)
class ApiSymbol:
    """Result of resolving one reference."""
    reference: str
    qualified_name: str
    kind: SymbolKind
    found: bool
    verifiable: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "reference": self.reference,
            "qualified_name": self.qualified_name,
            "kind": self.kind,
            "found": self.found,
            "verifiable": self.verifiable,
        }


# =============================================================================
# Reference Normalization
# =============================================================================

def normalize_reference(text: str) -> str:
    """
    Reduce a card reference to a dotted name.

    Example:
        normalize_reference('@app.get("/items")')   # "app.get"
        normalize_reference("Depends()")            # "Depends"
        normalize_reference("Annotated[int, Query()]")  # "Annotated"
    """
    ref = text.strip().lstrip("@").strip()
    for stop in ("(", "[", " "):
        if stop in ref:
            ref = ref.split(stop, 1)[0]
    return ref.strip(".")


def split_symbols(cell: str) -> list[str]:
    """
    References listed in a Function/Class cell.

    Backtick spans are used when present, otherwise the raw text. Items may
    be separated by "/", "," or "or".

    Example:
        split_symbols("`@app.get()` / `@app.post()`")  # ["app.get", "app.post"]
        split_symbols("Query, Path")                   # ["Query", "Path"]
    """
    spans = _SPAN_RE.findall(cell)
    chunks = spans if spans else [cell]

    references = []
    for chunk in chunks:
        # Splitting on "/" would break path strings; drop call arguments first
        chunk = re.sub(r"\(.*?\)", "()", chunk)
        for part in _SPLIT_RE.split(chunk):
            ref = normalize_reference(part)
            if ref:
                references.append(ref)
    return references


# =============================================================================
# Versions
# =============================================================================

def version_tuple(text: str) -> tuple[int, ...]:
    """'0.110.2rc1' -> (0, 110, 2)"""
    parts = []
    for piece in text.strip().lstrip("v").split("."):
        match = re.match(r"\d+", piece)
        if not match:
            break
        parts.append(int(match.group()))
    return tuple(parts)


def satisfies(installed: str, stated: str) -> bool:
    """True when the installed version is at least the stated one."""
    have = version_tuple(installed)
    want = version_tuple(stated)
    width = max(len(have), len(want))
    return have + (0,) * (width - len(have)) >= want + (0,) * (width - len(want))


def installed_versions(distributions: list[str] | None = None) -> dict[str, str]:
    """Installed versions of the framework distributions that are present."""
    versions = {}
    for name in distributions or FRAMEWORK_DISTRIBUTIONS:
        try:
            versions[name] = metadata.version(name)
        except metadata.PackageNotFoundError:
            logger.debug(f"Distribution not installed: {name}")
    return versions


@lru_cache(maxsize=None)
def _init_attributes(cls: type) -> frozenset[str]:
    """Names assigned as `self.<name>` in the __init__ of a class or its bases."""
    names: set[str] = set()
    for klass in inspect.getmro(cls):
        init = klass.__dict__.get("__init__")
        if init is None:
            continue
        try:
            tree = ast.parse(textwrap.dedent(inspect.getsource(init)))
        except (OSError, TypeError, SyntaxError):
            continue
        for node in ast.walk(tree):
            if (
                isinstance(node, ast.Attribute)
                and isinstance(node.ctx, ast.Store)
                and isinstance(node.value, ast.Name)
                and node.value.id == "self"
            ):
                names.add(node.attr)
    return frozenset(names)


# =============================================================================
# Index
# =============================================================================

class ApiIndex:
    """
    Lookup table over the installed framework's public API.

    Imports are lazy and cached; a module that fails to import is remembered
    as missing and skipped afterwards.
    """

    def __init__(
        self,
        modules: list[str] | None = None,
        aliases: dict[str, str] | None = None,
        cache_size: int = RESOLVE_CACHE_SIZE,
    ):
        self.modules = list(modules or DEFAULT_MODULES)
        self.aliases = dict(DEFAULT_ALIASES if aliases is None else aliases)
        self.roots = {name.split(".")[0] for name in self.modules}
        self.roots.update(target.split(".")[0] for target in self.aliases.values())
        self._imported: dict[str, ModuleType | None] = {}
        self.cache_size = cache_size
        self._resolved: OrderedDict[str, ApiSymbol] = OrderedDict()
        self._resolved_lock = threading.Lock()
        self._exports: dict[str, str | None] = {}

    # -------------------------------------------------------------------------
    # Module loading
    # -------------------------------------------------------------------------

    def _import(self, name: str) -> ModuleType | None:
        if name.split(".")[0] not in self.roots:
            return None
        if name in self._imported:
            return self._imported[name]
        try:
            module = importlib.import_module(name)
        except Exception as e:
            # Optional extras (httpx for testclient, ...) surface as
            # ImportError or RuntimeError depending on the module
            logger.debug(f"Cannot import {name}: {e}")
            # Misses are only remembered for indexed modules; lookups can
            # name arbitrary submodules
            if name in self.modules or name in self.roots:
                self._imported[name] = None
            return None
        self._imported[name] = module
        return module

    @property
    def available_modules(self) -> list[str]:
        return [name for name in self.modules if self._import(name) is not None]

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    @staticmethod
    def _kind(obj: Any) -> SymbolKind:
        if inspect.ismodule(obj):
            return "module"
        if inspect.isclass(obj):
            return "class"
        if callable(obj):
            return "function"
        return "attribute"

    @staticmethod
    def _get_member(obj: Any, name: str) -> tuple[bool, Any]:
        """
        Attribute lookup that also accepts constructor-assigned instance
        attributes (e.g. UploadFile.filename).
        """
        try:
            return True, getattr(obj, name)
        except AttributeError:
            pass
        except Exception as e:
            # Moved names (pydantic.BaseSettings) raise ImportError subclasses
            logger.debug(f"Lookup of {name} failed: {e}")
            return False, None
        if inspect.isclass(obj):
            for klass in inspect.getmro(obj):
                if name in getattr(klass, "__annotations__", {}):
                    return True, None
            try:
                if name in inspect.signature(obj.__init__).parameters:
                    return True, None
            except (TypeError, ValueError):
                pass
            if name in _init_attributes(obj):
                return True, None
        return False, None

    def _walk(self, obj: Any, qualified: str, attrs: list[str], reference: str) -> ApiSymbol:
        for attr in attrs:
            found, value = self._get_member(obj, attr)
            qualified = f"{qualified}.{attr}"
            if not found:
                return ApiSymbol(reference, qualified, "unknown", found=False)
            if value is None and obj is not None:
                # Instance attribute: nothing further to inspect
                return ApiSymbol(reference, qualified, "attribute", found=True)
            obj = value
        return ApiSymbol(reference, qualified, self._kind(obj), found=True)

    def _resolve_qualified(self, dotted: str, reference: str) -> ApiSymbol | None:
        parts = dotted.split(".")
        if parts[0] not in self.roots:
            return None

        if self._import(parts[0]) is None:
            return ApiSymbol(reference, dotted, "unknown", found=False, verifiable=False)

        # Longest importable module prefix, then attributes
        for cut in range(len(parts), 0, -1):
            module_name = ".".join(parts[:cut])
            module = self._import(module_name)
            if module is not None:
                return self._walk(module, module_name, parts[cut:], reference)

        return ApiSymbol(reference, dotted, "unknown", found=False)

    def resolve(self, reference: str) -> ApiSymbol:
        """
        Resolve a card reference.

        Order: alias prefix (app., router., ...), fully-qualified dotted
        path, then each indexed module in turn for a bare name.
        """
        dotted = normalize_reference(reference)
        with self._resolved_lock:
            if dotted in self._resolved:
                self._resolved.move_to_end(dotted)
                return self._resolved[dotted]

        symbol = self._resolve(dotted, reference)
        with self._resolved_lock:
            self._resolved[dotted] = symbol
            while len(self._resolved) > self.cache_size:
                self._resolved.popitem(last=False)
        return symbol

    def _resolve(self, dotted: str, reference: str) -> ApiSymbol:
        if not dotted or not _IDENT_RE.match(dotted):
            return ApiSymbol(reference, dotted, "unknown", found=False)

        parts = dotted.split(".")

        if parts[0] in self.aliases:
            target = ".".join([self.aliases[parts[0]], *parts[1:]])
            symbol = self._resolve_qualified(target, reference)
            if symbol is not None:
                return symbol

        symbol = self._resolve_qualified(dotted, reference)
        if symbol is not None:
            return symbol

        any_available = False
        for module_name in self.modules:
            module = self._import(module_name)
            if module is None:
                continue
            any_available = True
            if self._get_member(module, parts[0])[0]:
                return self._walk(module, module_name, parts, reference)

        return ApiSymbol(
            reference, dotted, "unknown", found=False, verifiable=any_available
        )

    # -------------------------------------------------------------------------
    # Exports
    # -------------------------------------------------------------------------

    def _public_names(self, module: ModuleType) -> set[str]:
        exported = getattr(module, "__all__", None)
        if exported is not None:
            return set(exported)

        names = set()
        for name, value in vars(module).items():
            if name.startswith("_"):
                continue
            origin = value.__name__ if inspect.ismodule(value) else getattr(value, "__module__", None)
            if isinstance(origin, str) and origin.split(".")[0] not in self.roots:
                continue
            names.add(name)
        return names

    def find_export(self, name: str) -> str | None:
        """
        First indexed module that publicly exports `name`, or None.

        Example:
            index.find_export("Depends")     # "fastapi"
            index.find_export("BaseModel")   # "pydantic"
            index.find_export("json")        # None
        """
        if name not in self._exports:
            self._exports[name] = None
            for module_name in self.modules:
                module = self._import(module_name)
                if module is not None and name in self._public_names(module):
                    self._exports[name] = module_name
                    break
        return self._exports[name]
