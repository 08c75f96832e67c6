from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import yaml

from symbol_decompress.core.errors import SymbolLoadError


# suffix -> (parser, error code for a parse failure)
_PARSERS: dict[str, tuple[Callable[[str], Any], str]] = {
    ".yaml": (yaml.safe_load, "E_YAML_PARSE"),
    ".yml": (yaml.safe_load, "E_YAML_PARSE"),
    ".json": (json.loads, "E_JSON_PARSE"),
}


def load_symbol(path: str) -> dict[str, Any]:
    """Read a compressed-symbol document from disk.

    A document is a mapping with a `schema_version` string and a `symbol`
    mapping whose `name` is an absolute-path node and whose optional
    `instantiating_crate` is a path-prefix node; every node is a single-key
    mapping naming its variant (`crate`, `node`, `path`, `subst`, ...).

    Only the file level is checked here. The returned dict carries the two
    top-level entries untouched plus `__file__`, so that validate_symbol can
    attach the file name to every shape error it reports.
    """

    p = Path(path)
    where = str(p)
    if not p.exists():
        raise SymbolLoadError(code="E_FILE_NOT_FOUND", message="file does not exist", file=where)

    parser = _PARSERS.get(p.suffix.lower())
    if parser is None:
        raise SymbolLoadError(
            code="E_UNSUPPORTED_FORMAT",
            message=f"supported formats are {', '.join(sorted(_PARSERS))}",
            file=where,
        )
    parse, parse_code = parser

    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:  # pragma: no cover
        raise SymbolLoadError(code="E_FILE_READ", message=str(e), file=where) from e

    try:
        data = parse(text)
    except (yaml.YAMLError, ValueError) as e:
        raise SymbolLoadError(code=parse_code, message=str(e), file=where) from e

    if not isinstance(data, dict):
        raise SymbolLoadError(
            code="E_INVALID_TOP_LEVEL",
            message="a symbol document must be a mapping with schema_version and symbol",
            file=where,
        )

    return {
        "schema_version": data.get("schema_version"),
        "symbol": data.get("symbol"),
        "__file__": where,
    }
