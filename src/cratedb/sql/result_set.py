from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence

import logging
import pandas

from cratedb.sql.types import Row

logger = logging.getLogger(__name__)


def build_column_index(cols: Sequence[Any]) -> Mapping[str, int]:
    """
    Map every column name to its 0-based position.

    Non-string entries keep their position but cannot be looked up by name.
    The mapping is read-only so it can be shared by all rows of a result.
    """
    index: Dict[str, int] = {}
    for position, name in enumerate(cols):
        if isinstance(name, str):
            index[name] = position
    return MappingProxyType(index)


class RowSet:
    """
    The rows returned by a single SQL statement.

    Rows are materialised lazily: the JSON arrays received from the server are
    kept as they are and wrapped into Row objects only while iterating. All rows
    reference the same read-only column index.
    """

    def __init__(
        self,
        duration: float,
        rows: List[List[Any]],
        column_index: Mapping[str, int],
        columns: Optional[List[Any]] = None,
        rowcount: Optional[int] = None,
    ):
        """
        Parameters:
            :param duration: Server-side execution time as reported in the response
            :param rows: The raw JSON rows
            :param column_index: Column name to position mapping, shared with every row
            :param columns: Column names in result order
            :param rowcount: The rowcount reported by the server, if any
        """
        self.duration = duration
        self._rows = rows
        self.column_index = column_index
        self.columns = (
            list(columns)
            if columns is not None
            else sorted(column_index, key=column_index.get)
        )
        self.rowcount = rowcount if rowcount is not None else len(rows)

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[Row]:
        for values in self._rows:
            yield Row(values, self.column_index)

    def __getitem__(self, position: int) -> Row:
        return Row(self._rows[position], self.column_index)

    def fetchall(self) -> List[Row]:
        return list(self)

    def to_pandas(self) -> pandas.DataFrame:
        """Return the rows as a pandas DataFrame with one column per result column."""
        return pandas.DataFrame.from_records(self._rows, columns=self.columns)

    def __repr__(self):
        return f"RowSet(columns={self.columns!r}, rows={len(self)}, duration={self.duration})"
