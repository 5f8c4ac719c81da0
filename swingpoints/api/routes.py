from __future__ import annotations

import logging
import time
import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from swingpoints.config.settings import settings
from swingpoints.errors import ClientInputError
from swingpoints.internal_metrics import MetricsCollector
from swingpoints.providers.base import CandleProvider
from swingpoints.providers.mock_adapter import MockCandleProvider
from swingpoints.providers.upstox_adapter import UpstoxAdapter
from swingpoints.schemas.request import CalculateRequest
from swingpoints.schemas.swing_point import CalculateResponse, ErrorResponse, ProcessedCompanySchema
from swingpoints.services.swing_service import SwingService
from swingpoints.utils.instrument import normalize_company_name, normalize_instrument_key
from swingpoints.utils.validators import parse_date

logger = logging.getLogger(__name__)
router = APIRouter()

CALCULATE_PATH = "/api/swing-points/calculate"
FAILURE_MESSAGE = "Failed to calculate swing points"


def build_provider() -> CandleProvider:
    if settings.use_mock_provider:
        logger.warning("Using mock candle provider; responses are synthetic")
        return MockCandleProvider()
    return UpstoxAdapter()


metrics = MetricsCollector()
swing_service = SwingService.from_provider(build_provider(), metrics=metrics)


def error_response(message: str, status_code: int = 400) -> JSONResponse:
    return JSONResponse(ErrorResponse(error=message).model_dump(), status_code=status_code)


async def validation_exception_handler(_: Request, exc: RequestValidationError):
    parts = []
    for err in exc.errors():
        loc = ".".join(str(i) for i in err.get("loc", []) if i != "body")
        parts.append(f"{loc}: {err.get('msg', 'Invalid value')}" if loc else err.get("msg", "Invalid value"))
    return error_response("; ".join(parts) or "Invalid request body", status_code=400)


def create_app() -> FastAPI:
    app = FastAPI(title=settings.app_name, version=settings.app_version)

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request_id = request.headers.get("x-request-id", str(uuid.uuid4()))
        response = None
        start = time.perf_counter()
        try:
            response = await call_next(request)
            response.headers["x-request-id"] = request_id
            return response
        finally:
            latency_ms = round((time.perf_counter() - start) * 1000, 2)
            logger.info(
                "request_complete",
                extra={
                    "request_id": request_id,
                    "path": request.url.path,
                    "method": request.method,
                    "status_code": response.status_code if response else None,
                    "latency_ms": latency_ms,
                },
            )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.include_router(router)
    return app


@router.get("/")
def root():
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "endpoints": {"health": "/health", "metrics": "/metrics", "swingPoints": CALCULATE_PATH},
    }


@router.get("/health")
def health():
    return {"status": "ok", "service": settings.app_name, "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/metrics")
def all_metrics():
    return metrics.global_metrics()


@router.post(CALCULATE_PATH)
async def calculate(payload: CalculateRequest):
    logger.info(
        "swing_points_requested",
        extra={"instrument_key": payload.instrument_key, "company_name": payload.company_name, "from_date": payload.from_date},
    )

    try:
        instrument_key = normalize_instrument_key(payload.instrument_key)
        company_name = normalize_company_name(payload.company_name)
        from_date = parse_date(payload.from_date) if payload.from_date else None
    except (ClientInputError, ValueError) as exc:
        return error_response(str(exc), status_code=400)

    try:
        company = await swing_service.process(instrument_key, company_name, from_date, payload.selection())
    except ClientInputError as exc:
        return error_response(str(exc), status_code=400)
    except Exception:
        logger.error("Error calculating swing points", exc_info=True)
        return error_response(FAILURE_MESSAGE, status_code=500)

    data = ProcessedCompanySchema.from_domain(company) if company else None
    return JSONResponse(CalculateResponse(success=True, data=data).model_dump(by_alias=True))
