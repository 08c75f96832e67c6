from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml


DEFAULT_RENDER_OPTIONS: dict[str, bool] = {
    # Show crate and impl disambiguators plus the instantiating crate.
    "verbose": False,
    # Write generic args as `path::<T>` instead of `path<T>`.
    "turbofish": False,
}

VERBOSE_ENV = "SYMBOL_DECOMPRESS_VERBOSE"


class RenderConfigError(ValueError):
    pass


def load_render_file(path: str | Path) -> dict[str, bool]:
    """Load render options from a YAML file.

    Format:
      verbose: true
      turbofish: false

    Unknown keys and non-boolean values are rejected.
    """
    p = Path(path)
    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise RenderConfigError(f"render config is not valid YAML: {e}") from e
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise RenderConfigError("render config must be a mapping of option -> bool")

    out: dict[str, bool] = {}
    for k, v in raw.items():
        if k not in DEFAULT_RENDER_OPTIONS:
            raise RenderConfigError(
                f"unknown render option '{k}' (choose from: {', '.join(sorted(DEFAULT_RENDER_OPTIONS))})"
            )
        if not isinstance(v, bool):
            raise RenderConfigError(f"render option '{k}' must be a boolean")
        out[k] = v
    return out


def merged_options(overrides: dict[str, Any] | None = None) -> dict[str, bool]:
    """Return DEFAULT_RENDER_OPTIONS with overrides applied; None values are skipped."""
    merged = dict(DEFAULT_RENDER_OPTIONS)
    if overrides:
        for k, v in overrides.items():
            if v is not None:
                merged[k] = bool(v)
    return merged


def _env_verbose() -> bool | None:
    raw = (os.getenv(VERBOSE_ENV, "") or "").strip().lower()
    if not raw:
        return None
    return raw in {"1", "true", "yes", "on"}


def load_render_options(render_file: str | None, *, verbose: bool | None = None) -> dict[str, bool]:
    """Resolve render options.

    Resolution order for `verbose`:
      1) explicit flag
      2) SYMBOL_DECOMPRESS_VERBOSE
      3) render file
      4) default
    """
    file_options = load_render_file(render_file) if render_file else {}
    options = merged_options(file_options)
    if verbose is None:
        verbose = _env_verbose()
    if verbose is not None:
        options["verbose"] = verbose
    return options
