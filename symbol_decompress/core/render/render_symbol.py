from __future__ import annotations

from typing import Any, Optional

from symbol_decompress.core.decompress.table import SubstitutionTable
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
    RawPtrConst,
    RawPtrMut,
    Ref,
    RefMut,
    Subst,
    Symbol,
    TraitImpl,
    Tuple,
    Type,
)
from symbol_decompress.core.render.render_config import DEFAULT_RENDER_OPTIONS


def render_symbol(symbol: Symbol, options: Optional[dict[str, Any]] = None) -> str:
    """Render a symbol as Rust-style text.

    Works on compressed trees too; unresolved substitutions print as
    `{subst#N}`.
    """
    r = _Renderer(options)
    out = r.abs_path(symbol.name)
    if r.verbose and symbol.instantiating_crate is not None:
        out += f" (in {r.path_prefix(symbol.instantiating_crate)})"
    return out


def render_abs_path(abs_path: AbsolutePath, options: Optional[dict[str, Any]] = None) -> str:
    return _Renderer(options).abs_path(abs_path)


def render_path_prefix(prefix: PathPrefix, options: Optional[dict[str, Any]] = None) -> str:
    return _Renderer(options).path_prefix(prefix)


def render_type(ty: Type, options: Optional[dict[str, Any]] = None) -> str:
    return _Renderer(options).type(ty)


def render_node(node: object, options: Optional[dict[str, Any]] = None) -> str:
    """Render any table entry, whatever its category."""
    r = _Renderer(options)
    if isinstance(node, (CrateId, TraitImpl, Node)):
        return r.path_prefix(node)
    if isinstance(node, Path):
        return r.abs_path(node)
    return r.type(node)


def debug_dictionary(
    table: SubstitutionTable, options: Optional[dict[str, Any]] = None
) -> list[tuple[int, str]]:
    """Return (id, rendered node) for every table entry, ordered by id."""
    return [(subst_id, render_node(node, options)) for subst_id, _, node in table.entries()]


def format_debug_dictionary(
    table: SubstitutionTable, options: Optional[dict[str, Any]] = None
) -> str:
    return "\n".join(f"subst {i}: {text}" for i, text in debug_dictionary(table, options))


class _Renderer:
    def __init__(self, options: Optional[dict[str, Any]]) -> None:
        opts = dict(DEFAULT_RENDER_OPTIONS)
        if options:
            opts.update(options)
        self.verbose = bool(opts["verbose"])
        self.turbofish = bool(opts["turbofish"])

    def path_prefix(self, prefix: PathPrefix) -> str:
        if isinstance(prefix, CrateId):
            if self.verbose and prefix.dis:
                return f"{prefix.name}[{prefix.dis}]"
            return prefix.name
        if isinstance(prefix, Node):
            return f"{self.path_prefix(prefix.prefix)}::{prefix.ident}"
        if isinstance(prefix, TraitImpl):
            out = "<" + self.type(prefix.self_type)
            if prefix.impled_trait is not None:
                out += " as " + self.abs_path(prefix.impled_trait)
            out += ">"
            if self.verbose:
                out += f"#{prefix.dis}"
            return out
        if isinstance(prefix, Subst):
            return _subst(prefix)
        raise TypeError(f"not a path prefix: {prefix!r}")

    def abs_path(self, abs_path: AbsolutePath) -> str:
        if isinstance(abs_path, Path):
            out = self.path_prefix(abs_path.name)
            if abs_path.args:
                if self.turbofish:
                    out += "::"
                out += "<" + self._list(abs_path.args) + ">"
            return out
        if isinstance(abs_path, Subst):
            return _subst(abs_path)
        raise TypeError(f"not an absolute path: {abs_path!r}")

    def type(self, ty: Type) -> str:
        if isinstance(ty, BasicType):
            return ty.kind
        if isinstance(ty, GenericParam):
            return ty.name
        if isinstance(ty, Ref):
            return "&" + self.type(ty.inner)
        if isinstance(ty, RefMut):
            return "&mut " + self.type(ty.inner)
        if isinstance(ty, RawPtrConst):
            return "*const " + self.type(ty.inner)
        if isinstance(ty, RawPtrMut):
            return "*mut " + self.type(ty.inner)
        if isinstance(ty, Array):
            if ty.size is None:
                return f"[{self.type(ty.inner)}]"
            return f"[{self.type(ty.inner)}; {ty.size}]"
        if isinstance(ty, Tuple):
            if len(ty.components) == 1:
                return f"({self.type(ty.components[0])},)"
            return f"({self._list(ty.components)})"
        if isinstance(ty, Named):
            return self.abs_path(ty.path)
        if isinstance(ty, Fn):
            out = ""
            if ty.is_unsafe:
                out += "unsafe "
            if ty.abi != "Rust":
                out += f'extern "{ty.abi}" '
            out += f"fn({self._list(ty.params)})"
            if ty.return_type is not None:
                out += " -> " + self.type(ty.return_type)
            return out
        if isinstance(ty, Subst):
            return _subst(ty)
        raise TypeError(f"not a type: {ty!r}")

    def _list(self, types: tuple[Type, ...]) -> str:
        return ", ".join(self.type(t) for t in types)


def _subst(s: Subst) -> str:
    return f"{{subst#{s.id}}}"
