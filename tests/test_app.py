"""Test the HTTP routes of the calculator."""
import logging

from fastapi.testclient import TestClient
import pytest

from stack_calculator.common.logger import LOGGERS
from stack_calculator.server.app import create_app
from stack_calculator.server.service import CalculatorService


class ExplodingService(CalculatorService):
    """Service raising an unexpected exception on independent calculations."""

    def calculate(self, operation, arguments):
        raise RuntimeError("boom")


@pytest.fixture
def client(service: CalculatorService) -> TestClient:
    return TestClient(create_app(service))


@pytest.fixture
def restore_log_levels():
    """Put the service logger levels back after a test changes them."""
    levels = {name: named.level for name, named in LOGGERS.items()}
    yield
    for name, level in levels.items():
        LOGGERS[name].setLevel(level)


def test_health(client: TestClient) -> None:
    """The health route answers plain OK."""
    response = client.get("/calculator/health")
    assert response.status_code == 200
    assert response.text == "OK"


def test_independent_calculate(client: TestClient) -> None:
    """A valid independent calculation answers its result."""
    response = client.post("/calculator/independent/calculate", json={"operation": "Times", "arguments": [4, 5]})
    assert response.status_code == 200
    assert response.json() == {"result": 20}


@pytest.mark.parametrize("body,message", [
    ({"operation": "bogus", "arguments": [1, 2]}, "Error: unknown operation: bogus"),
    ({"operation": "plus", "arguments": [1]}, "Error: Not enough arguments to perform the operation plus"),
    ({"operation": "abs", "arguments": [1, 2]}, "Error: Too many arguments to perform the operation abs"),
    ({"operation": "divide", "arguments": [1, 0]}, "Error while performing operation Divide: division by 0"),
    ({"operation": "fact", "arguments": [-1]},
     "Error while performing operation Factorial: not supported for the negative number"),
    ({"arguments": [1]}, "Error: unknown operation: None"),
])
def test_independent_calculate_conflicts(client: TestClient, body: dict, message: str) -> None:
    """Domain errors answer 409 with an errorMessage."""
    response = client.post("/calculator/independent/calculate", json=body)
    assert response.status_code == 409
    assert response.json() == {"errorMessage": message}


def test_independent_calculate_rejects_out_of_range(client: TestClient) -> None:
    """Arguments outside the 32-bit range fail request validation."""
    response = client.post(
        "/calculator/independent/calculate", json={"operation": "plus", "arguments": [2 ** 31, 1]}
    )
    assert response.status_code == 422


def test_stack_flow(client: TestClient) -> None:
    """Push, operate, size and pop through the stack routes."""
    assert client.put("/calculator/stack/arguments", json={"arguments": [5, 10, 3]}).json() == {"result": 3}
    assert client.get("/calculator/stack/operate", params={"operation": "minus"}).json() == {"result": 7}
    assert client.get("/calculator/stack/size").json() == {"result": 1}
    assert client.delete("/calculator/stack/arguments", params={"count": 1}).json() == {"result": 0}


def test_stack_operate_errors(client: TestClient) -> None:
    """Unknown operations and stack underflow answer 409."""
    response = client.get("/calculator/stack/operate", params={"operation": "nope"})
    assert response.status_code == 409
    assert response.json() == {"errorMessage": "Error: unknown operation: nope"}

    response = client.get("/calculator/stack/operate", params={"operation": "plus"})
    assert response.status_code == 409
    assert response.json() == {
        "errorMessage": "Error: cannot implement operation plus. It requires 2 arguments and the stack has only 0 arguments"
    }


def test_stack_pop_too_many(client: TestClient) -> None:
    """Removing more values than stored answers 409 and keeps the stack."""
    client.put("/calculator/stack/arguments", json={"arguments": [1]})

    response = client.delete("/calculator/stack/arguments", params={"count": 2})

    assert response.status_code == 409
    assert response.json() == {"errorMessage": "Error: cannot remove 2 from the stack. It has only 1 arguments"}
    assert client.get("/calculator/stack/size").json() == {"result": 1}


@pytest.mark.parametrize("method", ["POSTGRES", "MONGO"])
def test_history(client: TestClient, method: str) -> None:
    """Both persistence methods return the same records, independent ones first."""
    client.put("/calculator/stack/arguments", json={"arguments": [2, 3]})
    client.get("/calculator/stack/operate", params={"operation": "pow"})
    client.post("/calculator/independent/calculate", json={"operation": "plus", "arguments": [1, 1]})

    response = client.get("/calculator/history", params={"persistenceMethod": method})

    assert response.status_code == 200
    assert response.json() == {
        "result": [
            {"id": 2, "flavor": "INDEPENDENT", "operation": "plus", "result": 2, "arguments": "[1,1]"},
            {"id": 1, "flavor": "STACK", "operation": "pow", "result": 8, "arguments": "[2,3]"},
        ]
    }

    stack_only = client.get("/calculator/history", params={"persistenceMethod": method, "flavor": "STACK"})
    assert [record["id"] for record in stack_only.json()["result"]] == [1]


def test_history_requires_persistence_method(client: TestClient) -> None:
    """The persistence method has no default."""
    assert client.get("/calculator/history").status_code == 422


def test_history_unknown_persistence_method(client: TestClient) -> None:
    """An unknown persistence method answers 409."""
    response = client.get("/calculator/history", params={"persistenceMethod": "CASSANDRA"})
    assert response.status_code == 409
    assert response.json() == {"errorMessage": "Error: unknown persistence method"}


def test_unexpected_error_answers_500(stack, history_store) -> None:
    """Exceptions escaping a route are turned into a 500 errorMessage."""
    client = TestClient(create_app(ExplodingService(stack, history_store)))

    response = client.post("/calculator/independent/calculate", json={"operation": "plus", "arguments": [1, 2]})

    assert response.status_code == 500
    assert response.json() == {"errorMessage": "Server encountered an unexpected error ! message: boom"}


def test_requests_are_logged(client: TestClient, caplog: pytest.LogCaptureFixture) -> None:
    """Every request is logged with its number, path and verb."""
    with caplog.at_level(logging.INFO, logger="request-logger"):
        client.get("/calculator/health")
        client.get("/calculator/stack/size")

    messages = [record.getMessage() for record in caplog.records if record.name == "request-logger"]
    assert messages == [
        "Incoming request | #1 | resource: /calculator/health | HTTP Verb GET",
        "Incoming request | #2 | resource: /calculator/stack/size | HTTP Verb GET",
    ]


def test_log_level_roundtrip(client: TestClient, restore_log_levels) -> None:
    """A logger level can be changed and read back."""
    response = client.put("/logs/level", params={"logger-name": "stack-logger", "logger-level": "DEBUG"})
    assert response.status_code == 200
    assert response.text == "DEBUG"

    assert client.get("/logs/level", params={"logger-name": "stack-logger"}).text == "DEBUG"


def test_log_level_errors(client: TestClient, restore_log_levels) -> None:
    """Unknown loggers answer 404, unsupported levels 400."""
    response = client.get("/logs/level", params={"logger-name": "nobody"})
    assert response.status_code == 404
    assert response.text == "Logger 'nobody' not found"

    response = client.put("/logs/level", params={"logger-name": "stack-logger", "logger-level": "TRACE"})
    assert response.status_code == 400
    assert response.text == "Invalid logger level"


@pytest.mark.parametrize("method", ["POSTGRES", "MONGO"])
def test_history_empty_flavor_means_no_filter(client: TestClient, method: str) -> None:
    """An empty flavor parameter returns every record, independent ones first."""
    client.put("/calculator/stack/arguments", json={"arguments": [4, 2]})
    client.get("/calculator/stack/operate", params={"operation": "divide"})
    client.post("/calculator/independent/calculate", json={"operation": "abs", "arguments": [-3]})

    response = client.get("/calculator/history", params={"persistenceMethod": method, "flavor": ""})

    assert response.status_code == 200
    assert [(record["flavor"], record["id"]) for record in response.json()["result"]] == [
        ("INDEPENDENT", 2),
        ("STACK", 1),
    ]


def test_history_unknown_flavor_matches_nothing(client: TestClient) -> None:
    """A flavor other than INDEPENDENT or STACK returns an empty history."""
    client.post("/calculator/independent/calculate", json={"operation": "plus", "arguments": [1, 2]})

    response = client.get("/calculator/history", params={"persistenceMethod": "MONGO", "flavor": "OTHER"})

    assert response.status_code == 200
    assert response.json() == {"result": []}


def test_independent_calculate_null_arguments(client: TestClient) -> None:
    """Null arguments are reported as missing arguments, not as a validation error."""
    response = client.post("/calculator/independent/calculate", json={"operation": "plus", "arguments": None})
    assert response.status_code == 409
    assert response.json() == {"errorMessage": "Error: Not enough arguments to perform the operation plus"}
