"""FastAPI entrypoint for event ingestion, health, and metrics."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse

from influx_sink.config import Settings
from influx_sink.errors import PayloadTooLargeError, RequestError, StartupError
from influx_sink.mapping.paths import compile_mappings
from influx_sink.obs.logging import configure_logging
from influx_sink.obs.stats import SinkOutcome
from influx_sink.pipeline import EventProcessor, EventSink
from influx_sink.store import InfluxDbStore, StoreClient

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    store: StoreClient | None = None,
) -> FastAPI:
    """Build the app; mapping and config errors are raised here, not per request."""

    settings = settings or Settings.from_env()
    mappings = compile_mappings(settings.mappings)
    processor = EventProcessor(mappings, settings.influxdb.table)
    sink = EventSink(
        processor,
        store if store is not None else InfluxDbStore(settings.influxdb),
        max_payload_size=settings.service.max_json_payload_size,
    )

    app = FastAPI(title="Influx Sink", version="0.1.0")
    app.state.sink = sink

    @app.post("/")
    async def receive(request: Request) -> Response:
        body = await request.body()
        try:
            outcome, message = await run_in_threadpool(sink.handle_http, request.headers, body)
        except PayloadTooLargeError as exc:
            logger.warning("Rejected event: %s", exc.details)
            raise HTTPException(status_code=413, detail=exc.details) from exc
        except RequestError as exc:
            logger.warning("Rejected event: %s", exc.details)
            raise HTTPException(status_code=400, detail=exc.details) from exc

        if outcome is SinkOutcome.WRITTEN:
            return Response(status_code=202)
        if outcome is SinkOutcome.NOTHING_TO_WRITE:
            return Response(status_code=204)
        return PlainTextResponse(message or "", status_code=500)

    @app.get("/health")
    def health() -> dict[str, Any]:
        return {
            "status": "ok",
            "table": processor.table,
            "fields": sorted(processor.mappings.fields),
            "tags": sorted(processor.mappings.tags),
        }

    @app.get("/metrics")
    def metrics() -> dict[str, Any]:
        return sink.stats.summary()

    return app


def run() -> None:
    """Console entry point: load settings from the environment and serve."""

    import uvicorn

    try:
        settings = Settings.from_env()
        configure_logging(settings.service.log_level)
        app = create_app(settings)
    except StartupError as exc:
        logger.error("Error configuring service: %s", exc.details)
        raise SystemExit(1) from exc

    uvicorn.run(app, host=settings.service.host, port=settings.service.port)


if __name__ == "__main__":
    run()
