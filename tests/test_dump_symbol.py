from pathlib import Path

import yaml

from symbol_decompress.core.decompress.decompress import decompress
from symbol_decompress.core.io.dump_symbol import dump_symbol_yaml, symbol_to_dict
from symbol_decompress.core.io.load_symbol import load_symbol
from symbol_decompress.core.model import BasicType, CrateId, Fn, GenericParam, Path as SymPath, Symbol
from symbol_decompress.core.validate.validate_symbol import validate_symbol

EXAMPLES = Path(__file__).resolve().parent.parent / "examples"


def test_symbol_to_dict_encodes_variants():
    symbol = Symbol(
        name=SymPath(
            name=CrateId(name="x", dis="1"),
            args=(Fn(is_unsafe=False, abi="Rust", return_type=None, params=(GenericParam("T"),)),),
        )
    )
    assert symbol_to_dict(symbol) == {
        "schema_version": "0.1.0",
        "symbol": {
            "name": {
                "path": {
                    "name": {"crate": {"name": "x", "dis": "1"}},
                    "args": [
                        {"fn": {"unsafe": False, "abi": "Rust", "params": [{"generic_param": "T"}]}}
                    ],
                }
            }
        },
    }


def test_dumped_expansion_has_no_substitutions_and_reloads(tmp_path: Path):
    symbol, _ = validate_symbol(load_symbol(str(EXAMPLES / "basic-symbol.yaml")))
    expanded, _ = decompress(symbol)

    out = tmp_path / "nested" / "expanded.yaml"
    dump_symbol_yaml(expanded, str(out))

    text = out.read_text(encoding="utf-8")
    assert "subst" not in text

    again, errors = validate_symbol(load_symbol(str(out)))
    assert errors == []
    assert again == expanded


def test_dump_keeps_basic_types_inline(tmp_path: Path):
    out = tmp_path / "s.yaml"
    dump_symbol_yaml(Symbol(name=SymPath(name=CrateId(name="a"), args=(BasicType("()"),))), str(out))
    data = yaml.safe_load(out.read_text(encoding="utf-8"))
    assert data["symbol"]["name"]["path"]["args"] == [{"basic": "()"}]
