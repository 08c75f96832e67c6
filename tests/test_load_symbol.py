from pathlib import Path

from symbol_decompress.core.errors import SymbolLoadError
from symbol_decompress.core.io.load_symbol import load_symbol

EXAMPLES = Path(__file__).resolve().parent.parent / "examples"


def test_load_yaml_success():
    doc = load_symbol(str(EXAMPLES / "basic-symbol.yaml"))
    assert doc["schema_version"] == "0.1.0"
    assert isinstance(doc["symbol"], dict)
    assert doc["__file__"].endswith("basic-symbol.yaml")


def test_load_json_success():
    doc = load_symbol(str(EXAMPLES / "fn-symbol.json"))
    assert "path" in doc["symbol"]["name"]


def test_load_missing_file():
    try:
        load_symbol(str(EXAMPLES / "does-not-exist.yaml"))
        assert False, "expected SymbolLoadError"
    except SymbolLoadError as e:
        assert e.code == "E_FILE_NOT_FOUND"


def test_load_unsupported_format(tmp_path):
    p = tmp_path / "symbol.txt"
    p.write_text("hello", encoding="utf-8")
    try:
        load_symbol(str(p))
        assert False, "expected SymbolLoadError"
    except SymbolLoadError as e:
        assert e.code == "E_UNSUPPORTED_FORMAT"


def test_load_bad_json(tmp_path):
    p = tmp_path / "symbol.json"
    p.write_text("{not json", encoding="utf-8")
    try:
        load_symbol(str(p))
        assert False, "expected SymbolLoadError"
    except SymbolLoadError as e:
        assert e.code == "E_JSON_PARSE"
        assert str(e).startswith(str(p))


def test_load_top_level_list(tmp_path):
    p = tmp_path / "symbol.yaml"
    p.write_text("- a\n- b\n", encoding="utf-8")
    try:
        load_symbol(str(p))
        assert False, "expected SymbolLoadError"
    except SymbolLoadError as e:
        assert e.code == "E_INVALID_TOP_LEVEL"


def test_load_yml_suffix_is_case_insensitive(tmp_path):
    p = tmp_path / "symbol.YML"
    p.write_text("schema_version: 0.1.0\nsymbol:\n  name: {subst: 0}\n", encoding="utf-8")
    doc = load_symbol(str(p))
    assert doc["symbol"] == {"name": {"subst": 0}}
    assert "instantiating_crate" not in doc


def test_load_bad_yaml(tmp_path):
    p = tmp_path / "symbol.yaml"
    p.write_text("symbol: [\n", encoding="utf-8")
    try:
        load_symbol(str(p))
        assert False, "expected SymbolLoadError"
    except SymbolLoadError as e:
        assert e.code == "E_YAML_PARSE"
