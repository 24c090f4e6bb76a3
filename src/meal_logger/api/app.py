"""FastAPI application factory."""

import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import TypeVar

import pydantic
from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from meal_logger.api.models import (
    CreateMealRequest,
    DeleteMealRequest,
    HealthProbeRequest,
    UpdateMealRequest,
)
from meal_logger.app_logging import configure_logging
from meal_logger.containers import AppContainer
from meal_logger.domain.errors import (
    ConfigurationError,
    MealLoggerError,
    ValidationError,
)
from meal_logger.domain.goals import NutritionGoals
from meal_logger.domain.meals import MealCreated, MealLog, drop_unknown_nutrients
from meal_logger.domain.stats import LogsReport

CORS_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]

_ModelT = TypeVar("_ModelT", bound=pydantic.BaseModel)


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=CORS_HEADERS,
    )

    @app.exception_handler(MealLoggerError)
    async def handle_app_error(request: Request, exc: MealLoggerError) -> JSONResponse:
        if isinstance(exc, ConfigurationError):
            logger.error("Configuration error: %s", exc.message)
            return JSONResponse(
                status_code=exc.status_code,
                content={"error": "Internal server error", "details": exc.message},
            )
        if exc.status_code >= 500:  # noqa: PLR2004
            logger.error(
                "%s on %s: %s", type(exc).__name__, request.url.path, exc.details
            )
        content: dict[str, object] = {"error": exc.message}
        if exc.details:
            content["details"] = exc.details
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail).capitalize()},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unexpected error", extra={"path": request.url.path})
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "details": str(exc)},
        )

    @app.get("/health")
    async def health() -> dict[str, object]:
        """Simple health check endpoint."""
        return {"ok": True, "timestamp": datetime.now(tz=UTC).isoformat()}

    @app.post("/health")
    async def health_probe(request: Request) -> JSONResponse:
        """Report how a submitted timestamp parses."""
        try:
            body = await _read_body(request, HealthProbeRequest)
        except ValidationError as exc:
            return JSONResponse(
                status_code=400, content={"ok": False, "error": exc.message}
            )
        received = body.timestamp
        parsed = _try_parse_timestamp(received) if received else datetime.now(tz=UTC)
        if parsed is None:
            return JSONResponse(
                status_code=400,
                content={"ok": False, "error": "Invalid timestamp format"},
            )
        return JSONResponse(
            content={
                "ok": True,
                "received": received,
                "parsed": parsed.isoformat(),
                "is_valid": True,
            }
        )

    @app.post("/log-meal")
    async def log_meal(request: Request) -> dict[str, object]:
        """Parse a meal description with AI and store the log."""
        state_container: AppContainer = request.app.state.container
        body = await _read_body(request, CreateMealRequest)
        if not body.text or not body.text.strip():
            raise ValidationError.for_field("text")
        meal_time = None
        if body.timestamp:
            meal_time = _try_parse_timestamp(body.timestamp)
            if meal_time is None:
                raise ValidationError("Invalid timestamp format")
        created = await state_container.meal_log_service.log_meal(
            body.text, meal_time=meal_time, meal_type=body.meal_type
        )
        return _meal_created_payload(created)

    @app.get("/get-logs")
    async def get_logs(  # noqa: PLR0913
        request: Request,
        range: str | None = None,  # noqa: A002
        from_: str | None = Query(default=None, alias="from"),
        to: str | None = None,
        tz: str | None = None,
        q: str | None = None,
    ) -> dict[str, object]:
        """Return logs of a window with today, daily and weekly aggregates."""
        state_container: AppContainer = request.app.state.container
        report = state_container.stats_service.get_logs(
            range_token=range,
            from_date=from_,
            to_date=to,
            timezone_name=tz,
            query=q,
        )
        return _logs_report_payload(report)

    @app.api_route("/update-meal", methods=["PUT", "POST"])
    async def update_meal(request: Request) -> dict[str, object]:
        """Merge a partial totals patch into a stored meal."""
        state_container: AppContainer = request.app.state.container
        body = await _read_body(request, UpdateMealRequest)
        if not body.id:
            raise ValidationError.for_field("id")
        if body.totals is None:
            raise ValidationError.for_field("totals")
        updated = state_container.meal_log_service.update_totals(
            body.id, body.totals.model_dump(exclude_none=True)
        )
        return {"ok": True, "data": _meal_log_payload(updated)}

    @app.api_route("/delete-meal", methods=["DELETE", "POST"])
    async def delete_meal(request: Request) -> dict[str, object]:
        """Delete a stored meal."""
        state_container: AppContainer = request.app.state.container
        body = await _read_body(request, DeleteMealRequest)
        if not body.id:
            raise ValidationError.for_field("id")
        state_container.meal_log_service.delete_meal(body.id)
        return {"ok": True, "id": body.id}

    @app.get("/goals")
    async def get_goals(request: Request) -> dict[str, object]:
        """Return the configured nutrition goals."""
        state_container: AppContainer = request.app.state.container
        return state_container.goals_service.get().model_dump(exclude_none=True)

    @app.put("/goals")
    async def put_goals(request: Request) -> dict[str, object]:
        """Replace the nutrition goals."""
        state_container: AppContainer = request.app.state.container
        goals = await _read_body(request, NutritionGoals)
        stored = state_container.goals_service.set(goals)
        return stored.model_dump(exclude_none=True)

    @app.get("/goals/progress")
    async def goals_progress(request: Request, tz: str | None = None) -> dict[str, object]:
        """Return today's totals joined against the goals."""
        state_container: AppContainer = request.app.state.container
        totals = state_container.stats_service.get_today(tz)
        goals_service = state_container.goals_service
        return {
            "today_totals": drop_unknown_nutrients(totals),
            "goals": goals_service.get().model_dump(exclude_none=True),
            "progress": goals_service.progress(totals),
        }

    return app


async def _read_body(request: Request, model: type[_ModelT]) -> _ModelT:
    """Decode a JSON body into a request model, raising ValidationError."""
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ValidationError("Invalid JSON body") from exc
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON body")
    try:
        return model.model_validate(payload)
    except pydantic.ValidationError as exc:
        errors = exc.errors()
        field = str(errors[0]["loc"][0]) if errors and errors[0]["loc"] else "body"
        raise ValidationError.for_field(field) from exc


def _try_parse_timestamp(value: str) -> datetime | None:
    """Parse an ISO-8601 timestamp; naive values are read as server local time."""
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.astimezone()
    return parsed


def _meal_created_payload(created: MealCreated) -> dict[str, object]:
    return {
        "ok": True,
        "id": created.id,
        "meal_time": created.meal_time.isoformat(),
        "totals": drop_unknown_nutrients(created.totals),
        "confidence": created.confidence,
        "assumptions": created.assumptions,
        "speech": created.speech,
    }


def _meal_log_payload(log: MealLog) -> dict[str, object]:
    return {
        "id": log.id,
        "created_at": log.created_at.isoformat() if log.created_at else None,
        "meal_time": log.meal_time.isoformat(),
        "raw_text": log.raw_text,
        "meal_type": log.meal_type,
        "totals": drop_unknown_nutrients(log.totals),
        "items": [drop_unknown_nutrients(item) for item in log.items],
        "confidence": log.confidence,
        "assumptions": log.assumptions,
    }


def _logs_report_payload(report: LogsReport) -> dict[str, object]:
    return {
        "logs": [_meal_log_payload(log) for log in report.logs],
        "today_totals": drop_unknown_nutrients(report.today_totals),
        "daily_totals": [drop_unknown_nutrients(day) for day in report.daily_totals],
        "last_7_avg": {
            "calories": report.last_7_avg.calories,
            "fiber_g": report.last_7_avg.fiber_g,
            "protein_g": report.last_7_avg.protein_g,
        },
    }
