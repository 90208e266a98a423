import datetime
import decimal
import json
import uuid

import pytest

from cratedb.sql.backend.loadbalancing import RoundRobinEndpointSelector
from cratedb.sql.exc import ProgrammingError, ServerError, TransportError
from cratedb.sql.query_runner import QueryRunner

SELECT_RESPONSE = json.dumps(
    {
        "cols": ["id", "name"],
        "rows": [[1, "A"], [2, "B"]],
        "rowcount": 2,
        "duration": 0.206,
    }
)

BULK_RESPONSE = json.dumps(
    {
        "cols": [],
        "duration": 1.5,
        "results": [{"rowcount": 1}, {"rowcount": 2}, {"rowcount": 3}],
    }
)

READ_ONLY_ERROR = json.dumps(
    {
        "error": {
            "message": "ReadOnlyException[Only read operations are allowed on this node]",
            "code": 5000,
        }
    }
)


class TestQueryRunner:
    @pytest.fixture
    def runner(self, nodes, fake_backend):
        return QueryRunner(nodes, fake_backend, RoundRobinEndpointSelector())

    def test_query_returns_duration_and_rows(self, runner, fake_backend):
        fake_backend.responses = [SELECT_RESPONSE]

        duration, rows = runner.query("select id, name from t")

        assert duration == 0.206
        assert rows.duration == 0.206
        assert len(rows) == 2
        first = rows[0]
        assert first.as_string("name") == "A"
        assert first.as_int(0) == 1

    def test_query_sends_statement_and_args(self, runner, fake_backend):
        fake_backend.responses = [SELECT_RESPONSE]

        runner.query("select * from t where id = ?", [1])

        assert fake_backend.last_payload == {
            "stmt": "select * from t where id = ?",
            "args": [1],
        }

    def test_query_without_args_omits_them(self, runner, fake_backend):
        fake_backend.responses = [SELECT_RESPONSE]

        runner.query("select 1")

        assert fake_backend.last_payload == {"stmt": "select 1"}

    def test_query_serializes_non_json_parameter_types(self, runner, fake_backend):
        fake_backend.responses = [SELECT_RESPONSE]
        value = uuid.UUID("12345678-1234-5678-1234-567812345678")

        runner.query(
            "insert into t values (?, ?, ?)",
            [datetime.date(2024, 3, 1), decimal.Decimal("1.10"), value],
        )

        assert fake_backend.last_payload["args"] == [
            "2024-03-01",
            "1.10",
            "12345678-1234-5678-1234-567812345678",
        ]

    def test_unserializable_parameters(self, runner, fake_backend):
        with pytest.raises(ProgrammingError):
            runner.query("select ?", [object()])
        assert fake_backend.executed == []

    def test_requests_go_to_the_sql_endpoint(self, runner, fake_backend, nodes):
        fake_backend.responses = SELECT_RESPONSE

        runner.query("select 1")
        runner.query("select 1")

        urls = [url for url, _ in fake_backend.executed]
        assert urls == [f"{nodes[0]}_sql", f"{nodes[1]}_sql"]

    def test_bulk_query(self, runner, fake_backend):
        fake_backend.responses = [BULK_RESPONSE]

        duration, rowcounts = runner.bulk_query(
            "insert into t (a) values (?)", [[1], [2], [3]]
        )

        assert duration == 1.5
        assert rowcounts == [1, 2, 3]
        assert fake_backend.last_payload == {
            "stmt": "insert into t (a) values (?)",
            "bulk_args": [[1], [2], [3]],
        }

    def test_server_error(self, runner, fake_backend):
        fake_backend.responses = [READ_ONLY_ERROR]

        with pytest.raises(ServerError) as exc_info:
            runner.query("insert into t values (1)")

        error = exc_info.value
        assert error.code == "5000"
        assert error.message == (
            "ReadOnlyException[Only read operations are allowed on this node]"
        )
        assert str(error) == (
            "Error [Code 5000]: ReadOnlyException[Only read operations are "
            "allowed on this node]"
        )

    def test_server_error_with_string_code(self, runner, fake_backend):
        fake_backend.responses = [
            json.dumps({"error": {"message": "boom", "code": "4045"}})
        ]

        with pytest.raises(ServerError) as exc_info:
            runner.bulk_query("insert into t values (?)", [[1]])

        assert exc_info.value == ServerError("boom", "4045")

    def test_statement_without_result_rows(self, runner, fake_backend):
        fake_backend.responses = [
            json.dumps({"cols": [], "duration": 1.5, "rowcount": 1})
        ]

        duration, rows = runner.query("create table t (a int)")

        assert duration == 1.5
        assert len(rows) == 0
        assert rows.rowcount == 1
        assert rows.columns == []

    @pytest.mark.parametrize(
        "body",
        [
            "this is wrong my friend :{",
            "",
            "[1, 2, 3]",
            '"just a string"',
            '{"foo": "bar"}',
            '{"error": "not an object"}',
            '{"error": {"message": "no code"}}',
            '{"cols": "a", "rows": [], "duration": 1}',
            '{"cols": [], "rows": [1], "duration": 1}',
            '{"cols": [], "rows": []}',
        ],
    )
    def test_invalid_body(self, runner, fake_backend, body):
        fake_backend.responses = [body]

        with pytest.raises(ServerError) as exc_info:
            runner.query("select 1")

        assert exc_info.value == ServerError(
            f"Invalid JSON was returned: {body}", "500"
        )

    def test_invalid_body_example(self, runner, fake_backend):
        fake_backend.responses = ["this is wrong my friend :{"]

        with pytest.raises(ServerError) as exc_info:
            runner.query("select 1")

        assert exc_info.value.code == "500"
        assert exc_info.value.message == (
            "Invalid JSON was returned: this is wrong my friend :{"
        )

    def test_select_body_for_bulk_query_is_invalid(self, runner, fake_backend):
        fake_backend.responses = [SELECT_RESPONSE]

        with pytest.raises(ServerError) as exc_info:
            runner.bulk_query("insert into t values (?)", [[1]])

        assert exc_info.value.code == "500"

    def test_transport_errors_propagate(self, runner, fake_backend):
        fake_backend.transport_error = TransportError.from_transport(
            ConnectionRefusedError("refused")
        )

        with pytest.raises(TransportError) as exc_info:
            runner.query("select 1")

        assert exc_info.value is fake_backend.transport_error

    def test_no_nodes(self, fake_backend):
        runner = QueryRunner([], fake_backend, RoundRobinEndpointSelector())

        with pytest.raises(TransportError) as exc_info:
            runner.query("select 1")

        assert exc_info.value.message == "No URL specified"
