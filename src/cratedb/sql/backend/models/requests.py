"""
Request models for the CrateDB HTTP SQL endpoint.

These models define the JSON bodies POSTed to `{node}/_sql`.
"""

from typing import Any, Dict, List, Optional
from dataclasses import dataclass


@dataclass
class SqlRequest:
    """Representation of a request to execute a single SQL statement."""

    stmt: str
    args: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert the request to a dictionary for JSON serialization."""
        result: Dict[str, Any] = {"stmt": self.stmt}

        if self.args is not None:
            result["args"] = self.args

        return result


@dataclass
class BulkSqlRequest:
    """Representation of a request to execute one SQL statement once per parameter row."""

    stmt: str
    bulk_args: List[Any]

    def to_dict(self) -> Dict[str, Any]:
        """Convert the request to a dictionary for JSON serialization."""
        return {"stmt": self.stmt, "bulk_args": self.bulk_args}
