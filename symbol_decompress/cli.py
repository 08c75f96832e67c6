from __future__ import annotations

import json
import logging
from typing import Any, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from symbol_decompress.core.decompress.decompress import decompress
from symbol_decompress.core.decompress.table import SubstitutionTable
from symbol_decompress.core.errors import (
    SymbolError,
    SymbolLoadError,
    SymbolValidationError,
    UnresolvedSubstitutionError,
)
from symbol_decompress.core.io.dump_symbol import dump_symbol_yaml, symbol_to_dict
from symbol_decompress.core.io.load_symbol import load_symbol
from symbol_decompress.core.model import Symbol
from symbol_decompress.core.render.render_config import RenderConfigError, load_render_options
from symbol_decompress.core.render.render_symbol import debug_dictionary, render_symbol
from symbol_decompress.core.validate.validate_symbol import count_nodes, summarize_symbol, validate_symbol

app = typer.Typer(add_completion=False, no_args_is_help=True)
console = Console()


@app.callback()
def _callback(
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level for stderr"),
) -> None:
    """Symbol substitution decompressor CLI."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command("validate")
def validate(
    path: str = typer.Argument(..., help="Path to a compressed symbol file (.yaml/.yml/.json)"),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
) -> None:
    """Validate a compressed symbol document."""
    _check_format(format, "E_VALIDATE_UNKNOWN_FORMAT")

    def _emit_json(ok: bool, *, exit_code: int, errors: list[SymbolError], summary: dict | None) -> None:
        payload = {
            "tool": "symdecomp",
            "command": "validate",
            "ok": ok,
            "error_count": len(errors),
            "errors": [_to_item(e) for e in errors],
            "summary": summary,
        }
        typer.echo(json.dumps(payload, indent=2, sort_keys=True))
        raise typer.Exit(code=exit_code)

    try:
        doc = load_symbol(path)
    except SymbolLoadError as e:
        if format == "json":
            _emit_json(False, exit_code=1, errors=[e], summary=None)
        _print_errors([e])
        raise typer.Exit(code=1)

    symbol, errors = validate_symbol(doc)
    if errors or symbol is None:
        if format == "json":
            _emit_json(False, exit_code=2, errors=list(errors), summary=None)
        _print_errors(list(errors))
        raise typer.Exit(code=2)

    if format == "text":
        typer.echo(summarize_symbol(symbol))
        return

    counts = count_nodes(symbol)
    _emit_json(True, exit_code=0, errors=[], summary={k: int(v) for k, v in sorted(counts.items())})


@app.command("decompress")
def decompress_cmd(
    path: str = typer.Argument(..., help="Path to a compressed symbol file (.yaml/.yml/.json)"),
    out: Optional[str] = typer.Option(None, "--out", help="Write the expanded symbol as YAML"),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
    show_table: bool = typer.Option(False, "--show-table", help="Also print the substitution table"),
    verbose: Optional[bool] = typer.Option(
        None, "--verbose/--no-verbose", help="Show disambiguators and the instantiating crate"
    ),
    render_config: Optional[str] = typer.Option(
        None, "--render-config", help="Optional YAML file with render options"
    ),
) -> None:
    """Expand every substitution in a compressed symbol."""
    _check_format(format, "E_DECOMPRESS_UNKNOWN_FORMAT")
    options = _render_options(render_config, verbose)
    expanded, table = _load_and_decompress(path)

    rendered = render_symbol(expanded, options)
    if out is not None:
        dump_symbol_yaml(expanded, out)

    if format == "json":
        payload: dict[str, Any] = {
            "tool": "symdecomp",
            "command": "decompress",
            "ok": True,
            "rendered": rendered,
            "symbol": symbol_to_dict(expanded)["symbol"],
            "substitutions": [
                {"id": i, "text": text} for i, text in debug_dictionary(table, options)
            ],
        }
        typer.echo(json.dumps(payload, indent=2, sort_keys=True))
        return

    typer.echo(rendered)
    if show_table:
        for i, text in debug_dictionary(table, options):
            typer.echo(f"subst {i}: {text}")
    if out is not None:
        typer.echo(f"OK: wrote expanded symbol to {out}")


@app.command("table")
def table_cmd(
    path: str = typer.Argument(..., help="Path to a compressed symbol file (.yaml/.yml/.json)"),
    format: str = typer.Option("rich", "--format", help="Output format: rich|text"),
    verbose: Optional[bool] = typer.Option(None, "--verbose/--no-verbose"),
    render_config: Optional[str] = typer.Option(None, "--render-config"),
) -> None:
    """Print which expanded subtree each substitution id denotes."""
    if format not in ("rich", "text"):
        _print_errors(
            [
                SymbolValidationError(
                    code="E_TABLE_UNKNOWN_FORMAT",
                    message=f"unknown format: {format} (choose one of: rich, text)",
                    file=None,
                    path="format",
                )
            ]
        )
        raise typer.Exit(code=2)

    options = _render_options(render_config, verbose)
    _, table = _load_and_decompress(path)

    if format == "text":
        for i, text in debug_dictionary(table, options):
            typer.echo(f"subst {i}: {text}")
        return

    rt = Table(title=f"substitutions ({len(table)})")
    rt.add_column("Id", justify="right")
    rt.add_column("Category")
    rt.add_column("Denotes")
    rendered = dict(debug_dictionary(table, options))
    for subst_id, category, _ in table.entries():
        rt.add_row(str(subst_id), category, escape(rendered[subst_id]))
    console.print(rt)


def _load_and_decompress(path: str) -> tuple[Symbol, SubstitutionTable]:
    try:
        doc = load_symbol(path)
    except SymbolLoadError as e:
        _print_errors([e])
        raise typer.Exit(code=1)

    symbol, errors = validate_symbol(doc)
    if errors or symbol is None:
        _print_errors(list(errors))
        raise typer.Exit(code=2)

    try:
        return decompress(symbol)
    except UnresolvedSubstitutionError as e:
        _print_errors(
            [
                UnresolvedSubstitutionError(
                    code=e.code,
                    message=e.message,
                    file=doc.get("__file__"),
                    path="symbol",
                    subst_id=e.subst_id,
                    context=e.context,
                )
            ]
        )
        raise typer.Exit(code=3)


def _render_options(render_config: Optional[str], verbose: Optional[bool]) -> dict[str, bool]:
    try:
        return load_render_options(render_config, verbose=verbose)
    except FileNotFoundError:
        _print_errors(
            [
                SymbolLoadError(
                    code="E_RENDER_CONFIG_NOT_FOUND",
                    message=f"render config not found: {render_config}",
                    file=None,
                    path="render_config",
                )
            ]
        )
        raise typer.Exit(code=1)
    except RenderConfigError as e:
        _print_errors(
            [
                SymbolValidationError(
                    code="E_RENDER_CONFIG_INVALID",
                    message=str(e),
                    file=render_config,
                    path="render_config",
                )
            ]
        )
        raise typer.Exit(code=2)


def _check_format(format: str, code: str) -> None:
    if format not in ("text", "json"):
        err = SymbolValidationError(
            code=code,
            message=f"unknown format: {format} (choose one of: text, json)",
            file=None,
            path="format",
        )
        _print_errors([err])
        raise typer.Exit(code=2)


def _to_item(e: SymbolError) -> dict:
    source = "load" if isinstance(e, SymbolLoadError) else "validate"
    return {
        "code": e.code,
        "message": e.message,
        "file": e.file,
        "path": e.path,
        "severity": "error",
        "source": source,
    }


def _print_errors(errors: list[SymbolError]) -> None:
    errors_sorted = sorted(errors, key=lambda e: (e.file or "", e.path or "", e.code))
    for e in errors_sorted:
        typer.echo(str(e), err=True)


def main() -> None:
    app(prog_name="symdecomp")


cli = typer.main.get_command(app)

if __name__ == "__main__":
    main()
