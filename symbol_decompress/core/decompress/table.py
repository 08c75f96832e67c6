from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator, Literal, Optional, Union

from symbol_decompress.core.model import AbsolutePath, PathPrefix, Type

logger = logging.getLogger(__name__)


Category = Literal["path_prefix", "abs_path", "type"]

CATEGORIES: tuple[Category, ...] = ("path_prefix", "abs_path", "type")


@dataclass
class SubstitutionTable:
    """Per-run record of which expanded node each substitution id denotes.

    Ids come from one counter shared by the three categories, so an id lives in
    exactly one of the dicts. Entries are never removed or overwritten.
    """

    path_prefixes: dict[int, PathPrefix] = field(default_factory=dict)
    abs_paths: dict[int, AbsolutePath] = field(default_factory=dict)
    types: dict[int, Type] = field(default_factory=dict)
    next_id: int = 0

    def allocate(self, node: Union[PathPrefix, AbsolutePath, Type], category: Category) -> int:
        target = self._dict_for(category)
        subst_id = self.next_id
        self.next_id += 1
        target[subst_id] = node
        logger.debug("alloc subst %d -> %s %s", subst_id, category, type(node).__name__)
        return subst_id

    def _dict_for(self, category: Category) -> dict:
        if category == "path_prefix":
            return self.path_prefixes
        if category == "abs_path":
            return self.abs_paths
        if category == "type":
            return self.types
        raise ValueError(f"unknown substitution category: {category}")

    def lookup_path_prefix(self, subst_id: int) -> Optional[PathPrefix]:
        return self.path_prefixes.get(subst_id)

    def lookup_abs_path(self, subst_id: int) -> Optional[AbsolutePath]:
        return self.abs_paths.get(subst_id)

    def lookup_type(self, subst_id: int) -> Optional[Type]:
        return self.types.get(subst_id)

    def entries(self) -> Iterator[tuple[int, Category, object]]:
        """Yield (id, category, node) for every entry, ordered by id."""
        merged: list[tuple[int, Category, object]] = []
        for category in CATEGORIES:
            for subst_id, node in self._dict_for(category).items():
                merged.append((subst_id, category, node))
        merged.sort(key=lambda item: item[0])
        return iter(merged)

    def __len__(self) -> int:
        return len(self.path_prefixes) + len(self.abs_paths) + len(self.types)
