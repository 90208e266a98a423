"""
Models for the CrateDB HTTP SQL endpoint.

This package contains data models for SQL requests and responses.
"""

from cratedb.sql.backend.models.requests import (
    SqlRequest,
    BulkSqlRequest,
)

from cratedb.sql.backend.models.responses import (
    SqlResponse,
    BulkSqlResponse,
    ErrorResponse,
)

__all__ = [
    # Request models
    "SqlRequest",
    "BulkSqlRequest",
    # Response models
    "SqlResponse",
    "BulkSqlResponse",
    "ErrorResponse",
]
