"""FastAPI application and webhook endpoint."""

import json
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response, status
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from alertgram.config import Settings, get_settings
from alertgram.filters import build_rules, select_alerts
from alertgram.formatter import render_message
from alertgram.logging import setup_logging
from alertgram.metrics import ALERTS_RECEIVED, ALERTS_SUPPRESSED, MESSAGES_SENT
from alertgram.models.alerts import GrafanaWebhookPayload
from alertgram.models.delivery import DeliveryOutcome
from alertgram.telegram import TelegramClient

logger = structlog.get_logger(__name__)

BEARER_PREFIX = "Bearer "


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager."""
    settings: Settings = app.state.settings
    setup_logging(settings)
    logger.info(
        "Alertgram started",
        webhook_path=settings.webhook_path,
        destinations=len(settings.chat_ids),
    )
    yield
    logger.info("Alertgram shutting down")


def verify_webhook_token(request: Request) -> None:
    """
    Check the bearer token sent by Grafana.

    Raises:
        HTTPException: 401 if the header is missing or the token does not match
    """
    settings: Settings = request.app.state.settings
    auth_header = request.headers.get("Authorization", "")

    if not auth_header.startswith(BEARER_PREFIX):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="No token provided")

    if auth_header != f"{BEARER_PREFIX}{settings.webhook_token}":
        logger.warning("Rejected webhook call with invalid token")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")


def compose_response(outcomes: list[DeliveryOutcome]) -> JSONResponse:
    """Report every delivery outcome, failing the request if any delivery failed."""
    failed = [outcome for outcome in outcomes if outcome.failed]
    return JSONResponse(
        status_code=(
            status.HTTP_500_INTERNAL_SERVER_ERROR if failed else status.HTTP_200_OK
        ),
        content=[outcome.model_dump(mode="json") for outcome in outcomes],
    )


def create_app(
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Application settings, loaded from the environment if omitted
        transport: Optional httpx transport for outgoing Telegram calls
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Alertgram",
        description="Relay Grafana alert notifications to Telegram chats",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.telegram = TelegramClient(settings, transport=transport)

    @app.exception_handler(StarletteHTTPException)
    async def method_not_allowed(request: Request, exc: StarletteHTTPException) -> Response:
        """Answer 405 to any non-POST request that matched no route."""
        if exc.status_code == status.HTTP_404_NOT_FOUND and request.method != "POST":
            return JSONResponse(
                status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
                content={"detail": "Method Not Allowed"},
            )
        return await http_exception_handler(request, exc)

    @app.post(settings.webhook_path, dependencies=[Depends(verify_webhook_token)])
    async def webhook(
        request: Request,
        ignore_datasource_error: str | None = Query(None, alias="ignoreDataSourceError"),
    ) -> Response:
        """
        Receive a Grafana webhook notification and forward it to Telegram.

        The response lists one outcome per configured chat. It is a 500
        if any delivery failed, so Grafana records the notification as
        failed while still seeing which chats received it.
        """
        body = await request.body()
        logger.info("Received webhook payload", body=body.decode("utf-8", errors="replace"))

        try:
            payload = GrafanaWebhookPayload.model_validate_json(body)
        except ValidationError as e:
            logger.error("Failed to parse webhook payload", errors=e.error_count())
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error": "Invalid webhook payload",
                    "details": json.loads(e.json(include_url=False, include_input=False)),
                },
            )

        for alert in payload.alerts:
            ALERTS_RECEIVED.labels(status=alert.status).inc()

        alerts = select_alerts(payload.alerts, build_rules(ignore_datasource_error == "true"))
        suppressed = len(payload.alerts) - len(alerts)
        if suppressed:
            ALERTS_SUPPRESSED.inc(suppressed)

        log = logger.bind(
            status=payload.status,
            group_key=payload.group_key,
            alerts=len(payload.alerts),
            suppressed=suppressed,
        )

        if payload.alerts and not alerts:
            log.info("All alerts suppressed, nothing to send")
            return JSONResponse(
                status_code=status.HTTP_200_OK,
                content={
                    "status": "skipped",
                    "message": "All alerts were suppressed, nothing to send",
                },
            )

        message = render_message(payload, alerts)
        log.info("Sending message", message=message)

        telegram: TelegramClient = request.app.state.telegram
        outcomes = await telegram.broadcast(message, settings.chat_ids)

        for outcome in outcomes:
            MESSAGES_SENT.labels(outcome=outcome.status.value).inc()

        log.info(
            "Send message results",
            results=[outcome.model_dump(mode="json", exclude={"headers"}) for outcome in outcomes],
        )
        return compose_response(outcomes)

    @app.get("/health")
    async def health() -> dict[str, Any]:
        """Health check endpoint."""
        return {"status": "healthy", "destinations": len(settings.chat_ids)}

    if settings.metrics_enabled:

        @app.get(settings.metrics_path)
        async def metrics() -> Response:
            """Prometheus metrics endpoint."""
            return Response(
                content=generate_latest(),
                media_type=CONTENT_TYPE_LATEST,
            )

    return app
