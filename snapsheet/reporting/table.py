"""In-memory table that collects one row per processed image."""
from __future__ import annotations

from typing import Iterator, List, Sequence, Tuple

from snapsheet.core.models import TableRow


class TableStore:
    """Ordered rows plus the fixed column set they conform to."""

    def __init__(self, columns: Sequence[str]) -> None:
        self.columns: Tuple[str, ...] = tuple(columns)
        self._rows: List[TableRow] = []

    @property
    def rows(self) -> Tuple[TableRow, ...]:
        return tuple(self._rows)

    def append(self, row: TableRow) -> None:
        self._rows.append(row)

    def clear(self) -> None:
        """Drop every row. There is no per-row deletion."""

        self._rows.clear()

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[TableRow]:
        return iter(tuple(self._rows))
