from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SymbolError(Exception):
    """Base error envelope. The CLI prints these rather than raw tracebacks."""

    code: str
    message: str
    file: Optional[str] = None
    path: Optional[str] = None

    def __str__(self) -> str:
        parts: list[str] = []
        if self.file:
            parts.append(self.file)
        if self.path:
            parts.append(self.path)
        loc = ":".join(parts) if parts else "<symbol>"
        return f"{loc}: {self.code}: {self.message}"


class SymbolLoadError(SymbolError):
    pass


class SymbolValidationError(SymbolError):
    pass


@dataclass(frozen=True)
class UnresolvedSubstitutionError(SymbolError):
    """A substitution id was referenced before any table held it.

    Raised from the lookup site and never caught inside the decompressor: the
    input was not produced under the same numbering discipline, and there is
    no meaningful partial result.
    """

    subst_id: int = -1
    context: str = ""

    @classmethod
    def for_lookup(cls, subst_id: int, context: str) -> UnresolvedSubstitutionError:
        return cls(
            code="E_UNRESOLVED_SUBST",
            message=f"substitution {subst_id} is not defined (looked up as {context})",
            subst_id=subst_id,
            context=context,
        )
