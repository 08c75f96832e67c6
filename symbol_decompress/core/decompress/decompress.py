from __future__ import annotations

import logging
from typing import Optional

from symbol_decompress.core.decompress.table import SubstitutionTable
from symbol_decompress.core.errors import UnresolvedSubstitutionError
from symbol_decompress.core.model import (
    POINTER_TYPES,
    AbsolutePath,
    Array,
    BasicType,
    CrateId,
    Fn,
    GenericArgumentList,
    GenericParam,
    Named,
    Node,
    Path,
    PathPrefix,
    PathSubst,
    PrefixSubst,
    Symbol,
    TraitImpl,
    Tuple,
    Type,
    TypeSubst,
)

logger = logging.getLogger(__name__)


def decompress(symbol: Symbol) -> tuple[Symbol, SubstitutionTable]:
    """Expand every substitution in `symbol`.

    Returns the expanded symbol and the substitution table built while
    replaying the encoder's numbering. Each call uses a fresh table.

    Raises UnresolvedSubstitutionError when a substitution is referenced before
    it was defined; no partial result is produced in that case.
    """

    state = Decompressor()
    expanded = state.decompress_symbol(symbol)
    logger.debug("decompressed symbol, %d substitutions allocated", state.table.next_id)
    return expanded, state.table


def _all_same(new: tuple, old: tuple) -> bool:
    return all(a is b for a, b in zip(new, old))


class Decompressor:
    """Recursive expansion rules, one per grammar production.

    Every rule expands children first, then decides whether the result gets a
    table entry. The order of allocations must match the encoder exactly.
    """

    def __init__(self, table: Optional[SubstitutionTable] = None) -> None:
        self.table = table if table is not None else SubstitutionTable()

    def decompress_symbol(self, symbol: Symbol) -> Symbol:
        name = self.decompress_abs_path(symbol.name)
        crate = None
        if symbol.instantiating_crate is not None:
            crate = self.decompress_path_prefix(symbol.instantiating_crate)
        return Symbol(name=name, instantiating_crate=crate)

    def decompress_abs_path(self, abs_path: AbsolutePath) -> AbsolutePath:
        if isinstance(abs_path, Path):
            new_name = self.decompress_path_prefix(abs_path.name)
            new_args = self.decompress_generic_args(abs_path.args)

            if new_name is abs_path.name and _all_same(new_args, abs_path.args):
                expanded: AbsolutePath = abs_path
            else:
                expanded = Path(name=new_name, args=new_args)

            # A zero-arg path is addressed through its prefix's id.
            if abs_path.args:
                self.table.allocate(expanded, "abs_path")
            return expanded

        if isinstance(abs_path, PathSubst):
            hit = self.table.lookup_abs_path(abs_path.id)
            if hit is not None:
                return hit
            prefix = self.table.lookup_path_prefix(abs_path.id)
            if prefix is not None:
                return Path(name=prefix, args=())
            raise UnresolvedSubstitutionError.for_lookup(abs_path.id, "abs_path")

        raise TypeError(f"not an absolute path: {abs_path!r}")

    def decompress_path_prefix(self, prefix: PathPrefix) -> PathPrefix:
        if isinstance(prefix, PrefixSubst):
            # Revisits an existing entry; nothing is allocated.
            hit = self.table.lookup_path_prefix(prefix.id)
            if hit is None:
                raise UnresolvedSubstitutionError.for_lookup(prefix.id, "path_prefix")
            return hit

        expanded: PathPrefix
        if isinstance(prefix, CrateId):
            expanded = prefix
        elif isinstance(prefix, TraitImpl):
            self_type = self.decompress_type(prefix.self_type)
            impled_trait = None
            if prefix.impled_trait is not None:
                impled_trait = self.decompress_abs_path(prefix.impled_trait)
            expanded = TraitImpl(self_type=self_type, impled_trait=impled_trait, dis=prefix.dis)
        elif isinstance(prefix, Node):
            inner = self.decompress_path_prefix(prefix.prefix)
            if inner is prefix.prefix:
                expanded = prefix
            else:
                expanded = Node(prefix=inner, ident=prefix.ident)
        else:
            raise TypeError(f"not a path prefix: {prefix!r}")

        self.table.allocate(expanded, "path_prefix")
        return expanded

    def decompress_generic_args(self, args: GenericArgumentList) -> GenericArgumentList:
        return tuple(self.decompress_type(t) for t in args)

    def decompress_type(self, ty: Type) -> Type:
        if isinstance(ty, BasicType):
            return ty

        if isinstance(ty, Named):
            path = self.decompress_abs_path(ty.path)
            # Addressed via the id of its path, never a type-level id.
            return ty if path is ty.path else Named(path=path)

        if isinstance(ty, TypeSubst):
            return self._resolve_type_subst(ty.id)

        expanded: Type
        if isinstance(ty, POINTER_TYPES):
            inner = self.decompress_type(ty.inner)
            expanded = ty if inner is ty.inner else type(ty)(inner)
        elif isinstance(ty, Array):
            inner = self.decompress_type(ty.inner)
            expanded = ty if inner is ty.inner else Array(size=ty.size, inner=inner)
        elif isinstance(ty, Tuple):
            components = tuple(self.decompress_type(t) for t in ty.components)
            if _all_same(components, ty.components):
                expanded = ty
            else:
                expanded = Tuple(components=components)
        elif isinstance(ty, Fn):
            params = tuple(self.decompress_type(t) for t in ty.params)
            return_type = None
            if ty.return_type is not None:
                return_type = self.decompress_type(ty.return_type)
            if return_type is ty.return_type and _all_same(params, ty.params):
                expanded = ty
            else:
                expanded = Fn(
                    is_unsafe=ty.is_unsafe,
                    abi=ty.abi,
                    return_type=return_type,
                    params=params,
                )
        elif isinstance(ty, GenericParam):
            expanded = ty
        else:
            raise TypeError(f"not a type: {ty!r}")

        self.table.allocate(expanded, "type")
        return expanded

    def _resolve_type_subst(self, subst_id: int) -> Type:
        hit = self.table.lookup_type(subst_id)
        if hit is not None:
            return hit
        abs_path = self.table.lookup_abs_path(subst_id)
        if abs_path is not None:
            return Named(path=abs_path)
        prefix = self.table.lookup_path_prefix(subst_id)
        if prefix is not None:
            return Named(path=Path(name=prefix, args=()))
        raise UnresolvedSubstitutionError.for_lookup(subst_id, "type")
