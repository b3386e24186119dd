"""HTTP service exposing the calculator operations over POST (JSON body) and GET (query parameters)."""
from contextlib import asynccontextmanager
import json
from typing import Any, Callable, Optional

from fastapi import APIRouter, FastAPI, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from calculator_service.common.config import Settings, get_settings
from calculator_service.common.errors import CalculatorError
from calculator_service.common.logger import logger
from calculator_service.common.models import BinaryRequest, ErrorResponse, OperationResult, UnaryRequest
from calculator_service.common.operations import Operation
from calculator_service.common.validation import parse_operand
from calculator_service.server.service import OperationCall


API_PREFIX = "/api/v1"

# Documented response bodies, the handlers build their responses themselves
OPERATION_RESPONSES = {
    status.HTTP_200_OK: {"model": OperationResult},
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
}


class CalculatorJSONResponse(JSONResponse):
    """
    JSON response that keeps non-finite floats.

    Overflowing operations legitimately return ±inf, which the default renderer refuses;
    they are written as the ``Infinity``/``-Infinity``/``NaN`` tokens instead.
    """

    def render(self, content: Any) -> bytes:
        return json.dumps(
            content, ensure_ascii=False, allow_nan=True, separators=(",", ":")
        ).encode("utf-8")


def _respond(call: OperationCall) -> CalculatorJSONResponse:
    payload = call.run()
    status_code = status.HTTP_400_BAD_REQUEST if "error" in payload else status.HTTP_200_OK
    return CalculatorJSONResponse(status_code=status_code, content=payload)


def _post_handler(operation: Operation) -> Callable[..., CalculatorJSONResponse]:
    """Build the POST endpoint of an operation, reading operands from the JSON body."""
    if operation.is_unary:

        def handler(body: UnaryRequest) -> CalculatorJSONResponse:
            return _respond(OperationCall(operation=operation, a=body.a, method="POST"))

    else:

        def handler(body: BinaryRequest) -> CalculatorJSONResponse:
            return _respond(OperationCall(operation=operation, a=body.a, b=body.b, method="POST"))

    handler.__doc__ = f"Evaluate {operation.value} from a JSON body."
    return handler


def _get_handler(operation: Operation) -> Callable[..., CalculatorJSONResponse]:
    """Build the GET endpoint of an operation, reading operands from query parameters."""
    if operation.is_unary:

        def handler(a: Optional[str] = Query(default=None)) -> CalculatorJSONResponse:
            return _respond(
                OperationCall(operation=operation, a=parse_operand(a, "a"), method="GET")
            )

    else:

        def handler(
            a: Optional[str] = Query(default=None), b: Optional[str] = Query(default=None)
        ) -> CalculatorJSONResponse:
            # Parameters are checked in field order, a first
            first = parse_operand(a, "a")
            second = parse_operand(b, "b")
            return _respond(OperationCall(operation=operation, a=first, b=second, method="GET"))

    handler.__doc__ = f"Evaluate {operation.value} from query parameters."
    return handler


def build_router() -> APIRouter:
    """Register a POST and a GET route for every operation."""
    router = APIRouter(prefix=API_PREFIX, tags=["calculator"])
    for operation in Operation:
        router.add_api_route(
            f"/{operation.value}",
            _post_handler(operation),
            methods=["POST"],
            name=f"{operation.value}_post",
            responses=OPERATION_RESPONSES,
        )
        router.add_api_route(
            f"/{operation.value}",
            _get_handler(operation),
            methods=["GET"],
            name=f"{operation.value}_get",
            responses=OPERATION_RESPONSES,
        )
    return router


def _describe_validation_error(exc: RequestValidationError) -> str:
    """Flatten request validation errors into a single message."""
    messages = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error.get("loc", ()) if loc != "body")
        messages.append(f"{field}: {error['msg']}" if field else error["msg"])
    return "; ".join(messages) or "invalid request"


def register_error_handlers(app: FastAPI) -> None:
    """
    Map every failure to an ``{"error": message}`` body.

    Calculator rejections and malformed bodies are client errors (400). Anything else is
    a 500 whose message never carries internal details.
    """

    @app.exception_handler(CalculatorError)
    async def calculator_error_handler(request: Request, exc: CalculatorError):
        logger.warning(
            f"❌ Rejected {request.method} {request.url.path}: {exc}",
            extra={"method": request.method, "path": request.url.path, "error": str(exc)},
        )
        return CalculatorJSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(exc)}
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        message = _describe_validation_error(exc)
        logger.warning(
            f"❌ Invalid request body on {request.url.path}: {message}",
            extra={"method": request.method, "path": request.url.path, "error": message},
        )
        return CalculatorJSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content={"error": message}
        )

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        logger.error(f"💥 Unhandled exception on {request.url.path}: {exc}", exc_info=True)
        return CalculatorJSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "internal server error"},
        )


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🖥️ Calculator service started")
    yield
    logger.info("🖥️ Calculator service shutting down")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    :param Settings settings: Settings to use, defaults to the cached environment settings

    :return: Configured application
    :rtype: FastAPI
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Calculator Service",
        description="Arithmetic operations over POST (JSON body) and GET (query parameters).",
        version="1.0.0",
        lifespan=lifespan,
        default_response_class=CalculatorJSONResponse,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "Content-Type", "Accept", "Authorization"],
    )

    @app.get("/health", tags=["health"])
    def health_check():
        """Liveness probe."""
        return {"status": "ok"}

    app.include_router(build_router())
    register_error_handlers(app)
    return app
