from pathlib import Path

from symbol_decompress.core.decompress.decompress import decompress
from symbol_decompress.core.io.load_symbol import load_symbol
from symbol_decompress.core.model import (
    Array,
    BasicType,
    CrateId,
    Fn,
    GenericParam,
    Named,
    Node,
    Path as SymPath,
    PathSubst,
    RawPtrConst,
    RawPtrMut,
    Ref,
    RefMut,
    Symbol,
    TraitImpl,
    Tuple,
    TypeSubst,
)
from symbol_decompress.core.render.render_symbol import (
    debug_dictionary,
    format_debug_dictionary,
    render_path_prefix,
    render_symbol,
    render_type,
)
from symbol_decompress.core.validate.validate_symbol import validate_symbol

EXAMPLES = Path(__file__).resolve().parent.parent / "examples"


def _expand(name: str):
    symbol, errors = validate_symbol(load_symbol(str(EXAMPLES / name)))
    assert errors == []
    return decompress(symbol)


def test_render_types():
    u8 = BasicType("u8")
    assert render_type(Ref(u8)) == "&u8"
    assert render_type(RefMut(u8)) == "&mut u8"
    assert render_type(RawPtrConst(u8)) == "*const u8"
    assert render_type(RawPtrMut(u8)) == "*mut u8"
    assert render_type(Array(size=3, inner=u8)) == "[u8; 3]"
    assert render_type(Array(size=None, inner=u8)) == "[u8]"
    assert render_type(Tuple(())) == "()"
    assert render_type(Tuple((u8,))) == "(u8,)"
    assert render_type(Tuple((u8, GenericParam("T")))) == "(u8, T)"
    assert render_type(Fn(is_unsafe=False, abi="Rust", return_type=None, params=())) == "fn()"
    assert (
        render_type(Fn(is_unsafe=True, abi="C", return_type=u8, params=(u8, u8)))
        == 'unsafe extern "C" fn(u8, u8) -> u8'
    )


def test_render_compressed_nodes_shows_substitutions():
    assert render_type(Ref(TypeSubst(2))) == "&{subst#2}"
    assert render_type(Named(PathSubst(0))) == "{subst#0}"


def test_render_trait_impl():
    impl = TraitImpl(
        self_type=BasicType("u32"),
        impled_trait=SymPath(name=Node(prefix=CrateId(name="core"), ident="Debug"), args=()),
        dis=2,
    )
    assert render_path_prefix(impl) == "<u32 as core::Debug>"
    assert render_path_prefix(impl, {"verbose": True}) == "<u32 as core::Debug>#2"
    assert render_path_prefix(TraitImpl(self_type=GenericParam("T"), impled_trait=None, dis=0)) == "<T>"


def test_render_expanded_example():
    expanded, _ = _expand("basic-symbol.yaml")
    assert (
        render_symbol(expanded)
        == "<std::collections::HashMap<std::string::String, std::string::String>>::insert"
    )


def test_render_verbose_and_turbofish():
    expanded, _ = _expand("basic-symbol.yaml")
    assert render_symbol(expanded, {"verbose": True, "turbofish": True}) == (
        "<std[a1b2]::collections::HashMap::<std[a1b2]::string::String, "
        "std[a1b2]::string::String>>#0::insert (in mycrate[ff00])"
    )


def test_render_fn_example():
    expanded, _ = _expand("fn-symbol.json")
    assert render_symbol(expanded) == (
        'core::ptr::drop_in_place<unsafe extern "C" fn(&mut u8, &mut u8) -> [&mut u8; 4]>'
    )


def test_debug_dictionary_lists_every_id():
    _, table = _expand("basic-symbol.yaml")
    assert debug_dictionary(table) == [
        (0, "std"),
        (1, "std::collections"),
        (2, "std::collections::HashMap"),
        (3, "std::string"),
        (4, "std::string::String"),
        (5, "std::collections::HashMap<std::string::String, std::string::String>"),
        (6, "<std::collections::HashMap<std::string::String, std::string::String>>"),
        (7, "<std::collections::HashMap<std::string::String, std::string::String>>::insert"),
        (8, "mycrate"),
    ]


def test_format_debug_dictionary_for_types():
    _, table = _expand("fn-symbol.json")
    lines = format_debug_dictionary(table).splitlines()
    assert lines[3] == "subst 3: &mut u8"
    assert lines[4] == "subst 4: [&mut u8; 4]"
    assert lines[5] == 'subst 5: unsafe extern "C" fn(&mut u8, &mut u8) -> [&mut u8; 4]'
    assert len(lines) == 7


def test_render_symbol_without_crate_ignores_verbose_suffix():
    symbol = Symbol(name=SymPath(name=CrateId(name="a", dis="9"), args=()))
    assert render_symbol(symbol, {"verbose": True}) == "a[9]"
