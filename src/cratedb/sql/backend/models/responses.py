"""
Response models for the CrateDB HTTP SQL endpoint.

A response body is one of three shapes:
- a result: {"cols": [...], "rows": [[...], ...], "rowcount": N, "duration": f}
- a bulk result: {"cols": [], "results": [{"rowcount": N}, ...], "duration": f}
- an error: {"error": {"message": "...", "code": 4045}}

The from_dict constructors raise ValueError for anything that does not match.
"""

from typing import Any, Dict, List, Optional
from dataclasses import dataclass


def _parse_duration(data: Dict[str, Any]) -> float:
    duration = data.get("duration")
    if isinstance(duration, bool) or not isinstance(duration, (int, float)):
        raise ValueError(f"Invalid duration: {duration!r}")
    return float(duration)


def _parse_rowcount(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Invalid rowcount: {value!r}")
    return value


@dataclass
class SqlResponse:
    """Representation of the response to a single SQL statement."""

    cols: List[Any]
    rows: List[List[Any]]
    duration: float
    rowcount: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SqlResponse":
        cols = data.get("cols")
        # DDL and DML statements are answered without "rows"
        rows = data.get("rows", [])
        if not isinstance(cols, list):
            raise ValueError("Missing column list")
        if not isinstance(rows, list) or not all(isinstance(r, list) for r in rows):
            raise ValueError("Malformed rows")

        rowcount = data.get("rowcount")
        return cls(
            cols=cols,
            rows=rows,
            duration=_parse_duration(data),
            rowcount=_parse_rowcount(rowcount) if rowcount is not None else None,
        )


@dataclass
class BulkSqlResponse:
    """Representation of the response to a bulk SQL statement."""

    rowcounts: List[int]
    duration: float

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BulkSqlResponse":
        results = data.get("results")
        if not isinstance(results, list):
            raise ValueError("Missing bulk results")

        rowcounts = []
        for result in results:
            if not isinstance(result, dict):
                raise ValueError(f"Malformed bulk result: {result!r}")
            rowcounts.append(_parse_rowcount(result.get("rowcount")))

        return cls(rowcounts=rowcounts, duration=_parse_duration(data))


@dataclass
class ErrorResponse:
    """Representation of an error reported by the SQL endpoint."""

    message: str
    code: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ErrorResponse":
        error = data.get("error")
        if not isinstance(error, dict):
            raise ValueError("Missing error object")

        message = error.get("message")
        code = error.get("code")
        if not isinstance(message, str):
            raise ValueError(f"Invalid error message: {message!r}")
        if isinstance(code, bool) or not isinstance(code, (int, str)):
            raise ValueError(f"Invalid error code: {code!r}")

        return cls(message=message, code=str(code))
