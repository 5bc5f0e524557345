"""HTTP transport of the calculator service."""
import itertools
import threading
import time
from typing import Annotated, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from stack_calculator.common.logger import get_level, request_logger, request_number, set_level, SETTABLE_LEVELS
from stack_calculator.common.models import ArgumentsRequest, CalculateRequest, HistoryOutcome, Outcome
from stack_calculator.common.settings import Settings
from stack_calculator.persistence.document import DocumentStore
from stack_calculator.persistence.history import HistoryStore
from stack_calculator.persistence.id_allocator import build_allocator
from stack_calculator.persistence.relational import RelationalStore
from stack_calculator.server.service import CalculatorService
from stack_calculator.server.stack import OperandStack


def build_service(settings: Settings) -> CalculatorService:
    """
    Wire the stores, the id allocator and a fresh operand stack.

    :param Settings settings: Service configuration

    :return: Service ready to be served
    :rtype: CalculatorService
    :raises PersistenceError: If the relational schema cannot be created
    """
    relational = RelationalStore.from_url(settings.postgres_url)
    relational.create_schema()
    document = DocumentStore.from_url(
        settings.mongo_url,
        settings.mongo_database,
        settings.mongo_collection,
        timeout_ms=settings.mongo_timeout_ms,
    )
    history = HistoryStore(relational, document, build_allocator(settings.id_strategy, relational))
    return CalculatorService(OperandStack(), history)


def _respond(outcome: Outcome | HistoryOutcome) -> JSONResponse:
    if outcome.ok:
        return JSONResponse({"result": _jsonable(outcome)})
    return JSONResponse({"errorMessage": outcome.error_message}, status_code=409)


def _jsonable(outcome: Outcome | HistoryOutcome):
    if isinstance(outcome, HistoryOutcome):
        return [record.model_dump(mode="json") for record in outcome.result]
    return outcome.result


def get_service(request: Request) -> CalculatorService:
    return request.app.state.service


ServiceDep = Annotated[CalculatorService, Depends(get_service)]


def create_app(service: CalculatorService) -> FastAPI:
    """
    Build the FastAPI application around one calculator service.

    :param CalculatorService service: Service owning the shared operand stack

    :return: Application with every calculator and log-level route
    :rtype: FastAPI
    """
    app = FastAPI(title="Stack calculator")
    app.state.service = service

    counter = itertools.count(1)
    counter_lock = threading.Lock()

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        with counter_lock:
            number = next(counter)
        token = request_number.set(number)
        start = time.perf_counter()
        request_logger.info(
            f"Incoming request | #{number} | resource: {request.url.path} | HTTP Verb {request.method}"
        )
        try:
            return await call_next(request)
        except Exception as exc:
            message = f"Server encountered an unexpected error ! message: {exc}"
            request_logger.error(message)
            return JSONResponse({"errorMessage": message}, status_code=500)
        finally:
            duration_ms = int((time.perf_counter() - start) * 1000)
            request_logger.debug(f"request #{number} duration: {duration_ms}ms")
            request_number.reset(token)

    @app.get("/calculator/health", response_class=PlainTextResponse)
    def health() -> str:
        return "OK"

    @app.post("/calculator/independent/calculate")
    def independent_calculate(body: CalculateRequest, calculator: ServiceDep) -> JSONResponse:
        return _respond(calculator.calculate(body.operation, body.arguments))

    @app.get("/calculator/stack/size")
    def stack_size(calculator: ServiceDep) -> JSONResponse:
        return _respond(calculator.size())

    @app.put("/calculator/stack/arguments")
    def stack_push(body: ArgumentsRequest, calculator: ServiceDep) -> JSONResponse:
        return _respond(calculator.push(body.arguments))

    @app.get("/calculator/stack/operate")
    def stack_operate(calculator: ServiceDep, operation: Optional[str] = None) -> JSONResponse:
        return _respond(calculator.operate(operation))

    @app.delete("/calculator/stack/arguments")
    def stack_pop(calculator: ServiceDep, count: int = 0) -> JSONResponse:
        return _respond(calculator.pop(count))

    @app.get("/calculator/history")
    def history(
        calculator: ServiceDep,
        persistence_method: Annotated[str, Query(alias="persistenceMethod")],
        flavor: Optional[str] = None,
    ) -> JSONResponse:
        return _respond(calculator.history(persistence_method, flavor))

    @app.get("/logs/level", response_class=PlainTextResponse)
    def read_log_level(logger_name: Annotated[Optional[str], Query(alias="logger-name")] = None):
        level = get_level(logger_name)
        if level is None:
            return PlainTextResponse(f"Logger '{logger_name}' not found", status_code=404)
        return PlainTextResponse(level)

    @app.put("/logs/level", response_class=PlainTextResponse)
    def update_log_level(
        logger_name: Annotated[Optional[str], Query(alias="logger-name")] = None,
        logger_level: Annotated[Optional[str], Query(alias="logger-level")] = None,
    ):
        if get_level(logger_name) is None:
            return PlainTextResponse(f"Logger '{logger_name}' not found", status_code=404)
        if logger_level not in SETTABLE_LEVELS:
            return PlainTextResponse("Invalid logger level", status_code=400)
        set_level(logger_name, logger_level)
        return PlainTextResponse(logger_level)

    return app
