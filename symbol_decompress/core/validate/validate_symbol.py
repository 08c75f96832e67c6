from __future__ import annotations

from collections import Counter
from typing import Any, Iterable, Optional, cast

from symbol_decompress.core.errors import SymbolValidationError
from symbol_decompress.core.model import (
    BASIC_TYPES,
    AbsolutePath,
    Array,
    BasicType,
    CrateId,
    Fn,
    GenericParam,
    Named,
    Node,
    Path,
    PathPrefix,
    PathSubst,
    PrefixSubst,
    RawPtrConst,
    RawPtrMut,
    Ref,
    RefMut,
    Symbol,
    TraitImpl,
    Tuple,
    Type,
    TypeSubst,
)


PREFIX_VARIANTS: set[str] = {"crate", "trait_impl", "node", "subst"}
PATH_VARIANTS: set[str] = {"path", "subst"}
TYPE_VARIANTS: set[str] = {
    "basic",
    "ref",
    "ref_mut",
    "ptr_const",
    "ptr_mut",
    "array",
    "tuple",
    "named",
    "fn",
    "generic_param",
    "subst",
}
ALLOWED_ABIS: set[str] = {"Rust", "C"}

_POINTER_BY_KEY = {
    "ref": Ref,
    "ref_mut": RefMut,
    "ptr_const": RawPtrConst,
    "ptr_mut": RawPtrMut,
}


def validate_symbol(doc: dict[str, Any]) -> tuple[Optional[Symbol], list[SymbolValidationError]]:
    """Validate a compressed-symbol document and build its tree.

    Returns (symbol, errors). Symbol is None when errors exist. Substitution
    ids are only checked for shape here; whether they resolve is up to the
    decompressor.
    """

    file = cast(Optional[str], doc.get("__file__"))
    builder = _TreeBuilder(file)

    schema_version = doc.get("schema_version")
    if not isinstance(schema_version, str) or not schema_version.strip():
        builder.error(
            "E_REQUIRED_FIELD",
            "schema_version is required and must be a non-empty string",
            "schema_version",
        )

    raw = doc.get("symbol")
    if not isinstance(raw, dict):
        builder.error("E_REQUIRED_FIELD", "symbol is required and must be an object", "symbol")
        return None, _sorted(builder.errors)

    symbol: Optional[Symbol] = None
    if "name" not in raw:
        builder.error("E_REQUIRED_FIELD", "name is required", "symbol.name")
    else:
        name = builder.abs_path(raw["name"], "symbol.name")
        crate = None
        if raw.get("instantiating_crate") is not None:
            crate = builder.path_prefix(raw["instantiating_crate"], "symbol.instantiating_crate")
        if name is not None:
            symbol = Symbol(name=name, instantiating_crate=crate)

    if builder.errors:
        return None, _sorted(builder.errors)
    return symbol, []


class _TreeBuilder:
    """Turns the single-key-mapping encoding into model nodes, collecting errors."""

    def __init__(self, file: Optional[str]) -> None:
        self.file = file
        self.errors: list[SymbolValidationError] = []

    def error(self, code: str, message: str, path: str) -> None:
        self.errors.append(
            SymbolValidationError(code=code, message=message, file=self.file, path=path)
        )

    def _variant(self, raw: Any, path: str, allowed: set[str]) -> Optional[tuple[str, Any]]:
        if not isinstance(raw, dict) or len(raw) != 1:
            self.error(
                "E_INVALID_TYPE",
                f"node must be a mapping with exactly one of {sorted(allowed)}",
                path,
            )
            return None
        key, value = next(iter(raw.items()))
        if key not in allowed:
            self.error(
                "E_UNKNOWN_VARIANT",
                f"unknown variant: {key} (choose one of: {', '.join(sorted(allowed))})",
                path,
            )
            return None
        return key, value

    def _subst_id(self, value: Any, path: str) -> Optional[int]:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            self.error("E_INVALID_TYPE", "subst must be a non-negative integer", path)
            return None
        return value

    def _fields(self, value: Any, path: str) -> Optional[dict[str, Any]]:
        if not isinstance(value, dict):
            self.error("E_INVALID_TYPE", "variant body must be an object", path)
            return None
        return value

    def _non_empty_str(self, value: Any, path: str, what: str) -> Optional[str]:
        if not isinstance(value, str) or not value.strip():
            self.error("E_REQUIRED_FIELD", f"{what} is required and must be a non-empty string", path)
            return None
        return value

    def path_prefix(self, raw: Any, path: str) -> Optional[PathPrefix]:
        variant = self._variant(raw, path, PREFIX_VARIANTS)
        if variant is None:
            return None
        key, value = variant
        here = f"{path}.{key}"

        if key == "subst":
            subst_id = self._subst_id(value, here)
            return None if subst_id is None else PrefixSubst(subst_id)

        body = self._fields(value, here)
        if body is None:
            return None

        if key == "crate":
            name = self._non_empty_str(body.get("name"), f"{here}.name", "name")
            # Unquoted YAML hex-free disambiguators load as ints.
            dis = body.get("dis", "")
            if isinstance(dis, int) and not isinstance(dis, bool) and dis >= 0:
                dis = str(dis)
            if not isinstance(dis, str):
                self.error("E_INVALID_TYPE", "dis must be a string or non-negative integer", f"{here}.dis")
                return None
            return None if name is None else CrateId(name=name, dis=dis)

        if key == "trait_impl":
            if "self_type" not in body:
                self.error("E_REQUIRED_FIELD", "self_type is required", f"{here}.self_type")
                return None
            self_type = self.type(body["self_type"], f"{here}.self_type")
            impled_trait = None
            if body.get("impled_trait") is not None:
                impled_trait = self.abs_path(body["impled_trait"], f"{here}.impled_trait")
                if impled_trait is None:
                    return None
            dis = body.get("dis", 0)
            if isinstance(dis, bool) or not isinstance(dis, int) or dis < 0:
                self.error("E_INVALID_TYPE", "dis must be a non-negative integer", f"{here}.dis")
                return None
            if self_type is None:
                return None
            return TraitImpl(self_type=self_type, impled_trait=impled_trait, dis=dis)

        # node
        if "prefix" not in body:
            self.error("E_REQUIRED_FIELD", "prefix is required", f"{here}.prefix")
            return None
        prefix = self.path_prefix(body["prefix"], f"{here}.prefix")
        ident = self._non_empty_str(body.get("ident"), f"{here}.ident", "ident")
        if prefix is None or ident is None:
            return None
        return Node(prefix=prefix, ident=ident)

    def abs_path(self, raw: Any, path: str) -> Optional[AbsolutePath]:
        variant = self._variant(raw, path, PATH_VARIANTS)
        if variant is None:
            return None
        key, value = variant
        here = f"{path}.{key}"

        if key == "subst":
            subst_id = self._subst_id(value, here)
            return None if subst_id is None else PathSubst(subst_id)

        body = self._fields(value, here)
        if body is None:
            return None
        if "name" not in body:
            self.error("E_REQUIRED_FIELD", "name is required", f"{here}.name")
            return None
        name = self.path_prefix(body["name"], f"{here}.name")
        args = self._type_list(body.get("args", []), f"{here}.args")
        if name is None or args is None:
            return None
        return Path(name=name, args=args)

    def _type_list(self, raw: Any, path: str) -> Optional[tuple[Type, ...]]:
        if not isinstance(raw, list):
            self.error("E_INVALID_TYPE", "must be an array of types", path)
            return None
        out: list[Type] = []
        ok = True
        for i, item in enumerate(raw):
            t = self.type(item, f"{path}[{i}]")
            if t is None:
                ok = False
            else:
                out.append(t)
        return tuple(out) if ok else None

    def type(self, raw: Any, path: str) -> Optional[Type]:
        variant = self._variant(raw, path, TYPE_VARIANTS)
        if variant is None:
            return None
        key, value = variant
        here = f"{path}.{key}"

        if key == "subst":
            subst_id = self._subst_id(value, here)
            return None if subst_id is None else TypeSubst(subst_id)

        if key == "basic":
            if not isinstance(value, str) or value not in BASIC_TYPES:
                self.error("E_INVALID_ENUM", f"basic must be one of {sorted(BASIC_TYPES)}", here)
                return None
            return BasicType(value)

        if key == "generic_param":
            name = self._non_empty_str(value, here, "generic_param")
            return None if name is None else GenericParam(name)

        if key in _POINTER_BY_KEY:
            inner = self.type(value, here)
            return None if inner is None else _POINTER_BY_KEY[key](inner)

        if key == "named":
            abs_path = self.abs_path(value, here)
            return None if abs_path is None else Named(abs_path)

        if key == "tuple":
            components = self._type_list(value, here)
            return None if components is None else Tuple(components)

        body = self._fields(value, here)
        if body is None:
            return None

        if key == "array":
            size = body.get("size")
            if size is not None and (isinstance(size, bool) or not isinstance(size, int) or size < 0):
                self.error("E_INVALID_TYPE", "size must be a non-negative integer", f"{here}.size")
                return None
            if "type" not in body:
                self.error("E_REQUIRED_FIELD", "type is required", f"{here}.type")
                return None
            inner = self.type(body["type"], f"{here}.type")
            return None if inner is None else Array(size=size, inner=inner)

        # fn
        is_unsafe = body.get("unsafe", False)
        if not isinstance(is_unsafe, bool):
            self.error("E_INVALID_TYPE", "unsafe must be a boolean", f"{here}.unsafe")
            return None
        abi = body.get("abi", "Rust")
        if not isinstance(abi, str) or abi not in ALLOWED_ABIS:
            self.error("E_INVALID_ENUM", f"abi must be one of {sorted(ALLOWED_ABIS)}", f"{here}.abi")
            return None
        params = self._type_list(body.get("params", []), f"{here}.params")
        return_type = None
        if body.get("return") is not None:
            return_type = self.type(body["return"], f"{here}.return")
            if return_type is None:
                return None
        if params is None:
            return None
        return Fn(is_unsafe=is_unsafe, abi=abi, return_type=return_type, params=params)


def summarize_symbol(symbol: Symbol) -> str:
    counts = count_nodes(symbol)
    ordered: list[str] = ["path_prefix", "abs_path", "type", "subst"]
    parts = [f"{k}={counts.get(k, 0)}" for k in ordered]
    total = sum(counts.get(k, 0) for k in ordered[:3])
    return f"OK: {total} nodes (" + ", ".join(parts) + ")"


def count_nodes(symbol: Symbol) -> Counter:
    """Count nodes per category; substitution references are counted under `subst`."""
    counts: Counter = Counter()
    _count_abs_path(symbol.name, counts)
    if symbol.instantiating_crate is not None:
        _count_prefix(symbol.instantiating_crate, counts)
    return counts


def _count_prefix(prefix: PathPrefix, counts: Counter) -> None:
    if isinstance(prefix, PrefixSubst):
        counts["subst"] += 1
        return
    counts["path_prefix"] += 1
    if isinstance(prefix, TraitImpl):
        _count_type(prefix.self_type, counts)
        if prefix.impled_trait is not None:
            _count_abs_path(prefix.impled_trait, counts)
    elif isinstance(prefix, Node):
        _count_prefix(prefix.prefix, counts)


def _count_abs_path(abs_path: AbsolutePath, counts: Counter) -> None:
    if isinstance(abs_path, PathSubst):
        counts["subst"] += 1
        return
    counts["abs_path"] += 1
    _count_prefix(abs_path.name, counts)
    for t in abs_path.args:
        _count_type(t, counts)


def _count_type(ty: Type, counts: Counter) -> None:
    if isinstance(ty, TypeSubst):
        counts["subst"] += 1
        return
    counts["type"] += 1
    if isinstance(ty, (Ref, RefMut, RawPtrConst, RawPtrMut, Array)):
        _count_type(ty.inner, counts)
    elif isinstance(ty, Tuple):
        for t in ty.components:
            _count_type(t, counts)
    elif isinstance(ty, Fn):
        for t in ty.params:
            _count_type(t, counts)
        if ty.return_type is not None:
            _count_type(ty.return_type, counts)
    elif isinstance(ty, Named):
        _count_abs_path(ty.path, counts)


def _sorted(errors: Iterable[SymbolValidationError]) -> list[SymbolValidationError]:
    return sorted(
        list(errors),
        key=lambda e: (
            e.file or "",
            e.path or "",
            e.code,
        ),
    )
