from __future__ import annotations

import pathlib
from typing import Any

import yaml

from symbol_decompress.core.model import (
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


SCHEMA_VERSION = "0.1.0"

_POINTER_KEYS: dict[type, str] = {
    Ref: "ref",
    RefMut: "ref_mut",
    RawPtrConst: "ptr_const",
    RawPtrMut: "ptr_mut",
}


def symbol_to_dict(symbol: Symbol) -> dict[str, Any]:
    """Encode a symbol tree in the same single-key-mapping form load_symbol reads.

    Shared nodes are written out once per occurrence.
    """
    body: dict[str, Any] = {"name": abs_path_to_dict(symbol.name)}
    if symbol.instantiating_crate is not None:
        body["instantiating_crate"] = path_prefix_to_dict(symbol.instantiating_crate)
    return {"schema_version": SCHEMA_VERSION, "symbol": body}


def path_prefix_to_dict(prefix: PathPrefix) -> dict[str, Any]:
    if isinstance(prefix, PrefixSubst):
        return {"subst": prefix.id}
    if isinstance(prefix, CrateId):
        return {"crate": {"name": prefix.name, "dis": prefix.dis}}
    if isinstance(prefix, TraitImpl):
        body: dict[str, Any] = {"self_type": type_to_dict(prefix.self_type)}
        if prefix.impled_trait is not None:
            body["impled_trait"] = abs_path_to_dict(prefix.impled_trait)
        body["dis"] = prefix.dis
        return {"trait_impl": body}
    if isinstance(prefix, Node):
        return {"node": {"prefix": path_prefix_to_dict(prefix.prefix), "ident": prefix.ident}}
    raise TypeError(f"not a path prefix: {prefix!r}")


def abs_path_to_dict(abs_path: AbsolutePath) -> dict[str, Any]:
    if isinstance(abs_path, PathSubst):
        return {"subst": abs_path.id}
    if isinstance(abs_path, Path):
        return {
            "path": {
                "name": path_prefix_to_dict(abs_path.name),
                "args": [type_to_dict(t) for t in abs_path.args],
            }
        }
    raise TypeError(f"not an absolute path: {abs_path!r}")


def type_to_dict(ty: Type) -> dict[str, Any]:
    if isinstance(ty, TypeSubst):
        return {"subst": ty.id}
    if isinstance(ty, BasicType):
        return {"basic": ty.kind}
    if isinstance(ty, GenericParam):
        return {"generic_param": ty.name}
    key = _POINTER_KEYS.get(type(ty))
    if key is not None:
        return {key: type_to_dict(ty.inner)}
    if isinstance(ty, Array):
        body: dict[str, Any] = {"type": type_to_dict(ty.inner)}
        if ty.size is not None:
            body["size"] = ty.size
        return {"array": body}
    if isinstance(ty, Tuple):
        return {"tuple": [type_to_dict(t) for t in ty.components]}
    if isinstance(ty, Named):
        return {"named": abs_path_to_dict(ty.path)}
    if isinstance(ty, Fn):
        fn_body: dict[str, Any] = {
            "unsafe": ty.is_unsafe,
            "abi": ty.abi,
            "params": [type_to_dict(t) for t in ty.params],
        }
        if ty.return_type is not None:
            fn_body["return"] = type_to_dict(ty.return_type)
        return {"fn": fn_body}
    raise TypeError(f"not a type: {ty!r}")


def dump_symbol_yaml(symbol: Symbol, path: str) -> None:
    p = pathlib.Path(path)
    if str(p.parent) not in (".", ""):
        p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as f:
        yaml.safe_dump(
            symbol_to_dict(symbol), f, sort_keys=False, default_flow_style=False, allow_unicode=True
        )
