"""
Item Catalog: Question Bank Loader.

Loads the question bank from a JSON array (questions.json) into
immutable Items, keyed by id. The catalog is trusted input, so malformed
entries and duplicate ids fail loudly instead of being skipped.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator
from pathlib import Path

from loguru import logger
from pydantic import TypeAdapter

from strata.core.categories import Category
from strata.core.models import Item

_ITEMS_ADAPTER = TypeAdapter(list[Item])


class ItemCatalog:
    """Ordered, id-indexed collection of Items."""

    def __init__(self, items: Iterable[Item]):
        self._items: list[Item] = []
        self._by_id: dict[str, Item] = {}
        for item in items:
            if item.id in self._by_id:
                raise ValueError(f"Duplicate item id in catalog: {item.id}")
            self._items.append(item)
            self._by_id[item.id] = item

    @classmethod
    def from_records(cls, records: list[dict]) -> ItemCatalog:
        """
        Build a catalog from raw question dicts.

        Raises:
            ValidationError: If any record is malformed
            ValueError: If ids are not unique
        """
        return cls(_ITEMS_ADAPTER.validate_python(records))

    @classmethod
    def load(cls, path: Path) -> ItemCatalog:
        """Load a catalog from a JSON file."""
        with open(path, encoding="utf-8") as f:
            records = json.load(f)
        catalog = cls.from_records(records)
        logger.info(f"Loaded {len(catalog)} items from {path}")
        return catalog

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Item]:
        return iter(self._items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._by_id

    @property
    def items(self) -> list[Item]:
        return list(self._items)

    @property
    def by_id(self) -> dict[str, Item]:
        return dict(self._by_id)

    def get(self, item_id: str) -> Item | None:
        return self._by_id.get(item_id)

    def in_category(self, category: Category) -> list[Item]:
        return [item for item in self._items if item.category is category]

    def count_by_category(self) -> dict[Category, int]:
        counts: dict[Category, int] = {}
        for item in self._items:
            counts[item.category] = counts.get(item.category, 0) + 1
        return counts
