from __future__ import annotations

import json
import logging
from typing import Any, List, Optional, Sequence, Tuple

from cratedb.sql.backend.backend_client import BackendClient
from cratedb.sql.backend.loadbalancing import EndpointSelector
from cratedb.sql.backend.models import (
    BulkSqlRequest,
    BulkSqlResponse,
    ErrorResponse,
    SqlRequest,
    SqlResponse,
)
from cratedb.sql.backend.types import EndpointType
from cratedb.sql.exc import ServerError
from cratedb.sql.result_set import RowSet, build_column_index
from cratedb.sql.utils import dumps_payload

logger = logging.getLogger(__name__)

INVALID_JSON_CODE = "500"


def _invalid_response(body: str) -> ServerError:
    return ServerError(f"Invalid JSON was returned: {body}", INVALID_JSON_CODE)


class QueryRunner:
    """
    Executes SQL statements against the `_sql` endpoint of a cluster.

    Every call picks an endpoint through the selector, so consecutive statements
    may be served by different nodes. Nothing is kept between calls.
    """

    def __init__(
        self,
        nodes: Sequence[str],
        backend: BackendClient,
        endpoint_selector: EndpointSelector,
    ):
        self.nodes = nodes
        self.backend = backend
        self.endpoint_selector = endpoint_selector

    def _execute(self, request) -> str:
        url = self.endpoint_selector.select(self.nodes, EndpointType.SQL)
        payload = dumps_payload(request.to_dict())
        logger.debug("Executing statement on %s: %s", url, request.stmt)
        return self.backend.execute(url, payload)

    def _decode(self, body: str, response_class):
        """
        Decode a response body into `response_class`, or raise the ServerError it
        carries. Bodies that are not JSON, or JSON of an unexpected shape, raise
        a ServerError with code "500" embedding the raw body.
        """
        try:
            data = json.loads(body)
        except ValueError:
            raise _invalid_response(body) from None

        if not isinstance(data, dict):
            raise _invalid_response(body)

        try:
            if "cols" in data:
                return response_class.from_dict(data)
            error = ErrorResponse.from_dict(data)
        except ValueError as e:
            logger.debug("Unexpected response shape: %s", e)
            raise _invalid_response(body) from None

        logger.debug("Server reported error %s: %s", error.code, error.message)
        raise ServerError(error.message, error.code)

    def query(
        self, sql: str, params: Optional[Any] = None
    ) -> Tuple[float, RowSet]:
        """
        Runs a query. Returns the duration and the results.

        Args:
            sql: The statement, with `?` or `$n` placeholders
            params: Optional JSON-serializable arguments, usually a list

        Raises:
            ServerError: if the server reported an error or the body could not be decoded
            TransportError: if the request failed below the protocol layer
            ProgrammingError: if `params` cannot be serialized

        Example:
            duration, rows = runner.query("select name from sys.nodes")
            for row in rows:
                print(row.as_string("name"))
        """
        body = self._execute(SqlRequest(stmt=sql, args=params))
        response = self._decode(body, SqlResponse)

        column_index = build_column_index(response.cols)
        rows = RowSet(
            response.duration,
            response.rows,
            column_index,
            columns=response.cols,
            rowcount=response.rowcount,
        )
        return response.duration, rows

    def bulk_query(self, sql: str, bulk_params: Any) -> Tuple[float, List[int]]:
        """
        Runs a statement once per entry of `bulk_params`. Returns the duration and
        the row count of every execution, in order.

        Raises:
            ServerError: if the server reported an error or the body could not be decoded
            TransportError: if the request failed below the protocol layer
            ProgrammingError: if `bulk_params` cannot be serialized
        """
        body = self._execute(BulkSqlRequest(stmt=sql, bulk_args=bulk_params))
        response = self._decode(body, BulkSqlResponse)
        return response.duration, response.rowcounts
