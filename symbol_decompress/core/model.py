from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Union


Abi = Literal["Rust", "C"]

BASIC_TYPES: frozenset[str] = frozenset(
    {
        "bool",
        "char",
        "str",
        "()",
        "i8",
        "i16",
        "i32",
        "i64",
        "i128",
        "isize",
        "u8",
        "u16",
        "u32",
        "u64",
        "u128",
        "usize",
        "f32",
        "f64",
        "!",
        "...",
    }
)


# Nodes compare structurally (dataclass eq) but the decompressor relies on
# identity (`is`) to detect unchanged subtrees, so eq is never used for reuse.


@dataclass(frozen=True)
class Subst:
    id: int


# --- path prefixes -----------------------------------------------------------


@dataclass(frozen=True)
class CrateId:
    name: str
    dis: str = ""


@dataclass(frozen=True)
class TraitImpl:
    self_type: Type
    impled_trait: Optional[AbsolutePath]
    dis: int = 0


@dataclass(frozen=True)
class Node:
    prefix: PathPrefix
    ident: str


@dataclass(frozen=True)
class PrefixSubst(Subst):
    pass


PathPrefix = Union[CrateId, TraitImpl, Node, PrefixSubst]


# --- absolute paths ----------------------------------------------------------


GenericArgumentList = tuple["Type", ...]


@dataclass(frozen=True)
class Path:
    name: PathPrefix
    args: GenericArgumentList = ()


@dataclass(frozen=True)
class PathSubst(Subst):
    pass


AbsolutePath = Union[Path, PathSubst]


# --- types -------------------------------------------------------------------


@dataclass(frozen=True)
class BasicType:
    kind: str


@dataclass(frozen=True)
class Ref:
    inner: Type


@dataclass(frozen=True)
class RefMut:
    inner: Type


@dataclass(frozen=True)
class RawPtrConst:
    inner: Type


@dataclass(frozen=True)
class RawPtrMut:
    inner: Type


@dataclass(frozen=True)
class Array:
    size: Optional[int]
    inner: Type


@dataclass(frozen=True)
class Tuple:
    components: tuple[Type, ...]


@dataclass(frozen=True)
class Named:
    path: AbsolutePath


@dataclass(frozen=True)
class Fn:
    is_unsafe: bool
    abi: Abi
    return_type: Optional[Type]
    params: tuple[Type, ...]


@dataclass(frozen=True)
class GenericParam:
    name: str


@dataclass(frozen=True)
class TypeSubst(Subst):
    pass


Type = Union[
    BasicType,
    Ref,
    RefMut,
    RawPtrConst,
    RawPtrMut,
    Array,
    Tuple,
    Named,
    Fn,
    GenericParam,
    TypeSubst,
]

# Single-inner wrappers share one expansion rule.
POINTER_TYPES: tuple[type, ...] = (Ref, RefMut, RawPtrConst, RawPtrMut)


@dataclass(frozen=True)
class Symbol:
    name: AbsolutePath
    instantiating_crate: Optional[PathPrefix] = None
