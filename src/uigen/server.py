"""
HTTP Server
FastAPI application exposing generation, preview and checkpoint history.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from fastapi import Body, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from injector import Injector
from pydantic import ValidationError

from uigen import __version__
from uigen.agents.models import Checkpoint, Iteration
from uigen.agents.orchestrator import Orchestrator
from uigen.core import Settings, configure_logging, create_container, get_logger, get_settings, init_tracer
from uigen.core.id import new_checkpoint_id, new_iteration_id
from uigen.handlers import GenerateHandler, INTENT_REQUIRED_ERROR
from uigen.models import ModelLoader
from uigen.monitoring import METRICS_CONTENT_TYPE, metrics_collector
from uigen.preview import PreviewExecutor, RenderOutcome
from uigen.storage import CheckpointStore

logger = get_logger(__name__)

SERVICE_NAME = "uigen-service"
VERSION = __version__


async def _json_body(request: Request) -> Any:
    """Decoded body, or None when it is not JSON."""
    try:
        return await request.json()
    except ValueError:
        return None


def _require_object(body: Any) -> dict[str, Any]:
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Request body must be a JSON object")
    return body


def _unprocessable(error: ValidationError) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail=error.errors(include_url=False, include_context=False, include_input=False),
    )


def _render_preview(code: str | None, props: dict[str, Any] | None) -> RenderOutcome:
    """Compile and render on a worker thread; a fresh executor per request."""
    executor = PreviewExecutor()
    executor.update(code)
    return executor.render(props)


def create_app(container: Injector | None = None) -> FastAPI:
    """Build the application around a dependency container."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        init_tracer(SERVICE_NAME)
        logger.info("service_ready", version=VERSION)
        yield
        ModelLoader.unload()
        app.state.container.get(CheckpointStore).close()
        logger.info("stopped")

    if container is None:
        container = create_container()

    app = FastAPI(title="UI Generation Service", version=VERSION, lifespan=lifespan)
    app.state.container = container
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def store() -> CheckpointStore:
        return container.get(CheckpointStore)

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    @app.post("/api/generate")
    async def generate(request: Request) -> JSONResponse:
        response = await container.get(GenerateHandler).handle(await _json_body(request))
        return JSONResponse(status_code=response.status, content=response.body)

    @app.post("/api/classify")
    async def classify(request: Request) -> JSONResponse:
        body = await _json_body(request)
        intent = body.get("userIntent") if isinstance(body, dict) else None
        if not isinstance(intent, str) or not intent.strip():
            return JSONResponse(status_code=400, content={"error": INTENT_REQUIRED_ERROR})
        decision = await container.get(Orchestrator).should_auto_checkpoint(intent)
        return JSONResponse(content=decision.to_wire())

    @app.post("/api/preview")
    async def preview(request: Request) -> dict[str, Any]:
        body = _require_object(await _json_body(request))
        code = body.get("code")
        if code is not None and not isinstance(code, str):
            raise HTTPException(status_code=400, detail="code must be a string")
        props = body.get("props")
        loop = asyncio.get_event_loop()
        outcome = await loop.run_in_executor(
            None, _render_preview, code, props if isinstance(props, dict) else None
        )
        metrics_collector.record_http_request("/api/preview", 200)
        return outcome.model_dump()

    # ------------------------------------------------------------------
    # Checkpoints (sync routes; FastAPI runs them in its threadpool)
    # ------------------------------------------------------------------

    @app.get("/api/checkpoints")
    def list_checkpoints() -> list[dict[str, Any]]:
        return [checkpoint.to_wire() for checkpoint in store().get_all_checkpoints()]

    @app.post("/api/checkpoints", status_code=201)
    def create_checkpoint(body: Any = Body(None)) -> dict[str, Any]:
        body = _require_object(body)
        try:
            checkpoint = Checkpoint.model_validate({**body, "id": body.get("id") or new_checkpoint_id()})
        except ValidationError as e:
            raise _unprocessable(e) from e
        store().create_checkpoint(checkpoint)
        return checkpoint.to_wire()

    @app.get("/api/checkpoints/marked")
    def marked_checkpoints() -> list[dict[str, Any]]:
        return [checkpoint.to_wire() for checkpoint in store().get_marked_checkpoints()]

    @app.get("/api/checkpoints/{checkpoint_id}")
    def get_checkpoint(checkpoint_id: str) -> dict[str, Any]:
        checkpoint = store().get_checkpoint(checkpoint_id)
        if checkpoint is None:
            raise HTTPException(status_code=404, detail="Checkpoint not found")
        return checkpoint.to_wire()

    @app.patch("/api/checkpoints/{checkpoint_id}")
    def update_checkpoint(checkpoint_id: str, body: Any = Body(None)) -> dict[str, Any]:
        body = _require_object(body)
        try:
            checkpoint = store().update_checkpoint(checkpoint_id, body)
        except ValidationError as e:
            raise _unprocessable(e) from e
        if checkpoint is None:
            raise HTTPException(status_code=404, detail="Checkpoint not found")
        return checkpoint.to_wire()

    @app.delete("/api/checkpoints/{checkpoint_id}", status_code=204)
    def delete_checkpoint(checkpoint_id: str) -> Response:
        if not store().delete_checkpoint(checkpoint_id):
            raise HTTPException(status_code=404, detail="Checkpoint not found")
        return Response(status_code=204)

    @app.get("/api/checkpoints/{checkpoint_id}/iterations")
    def list_iterations(checkpoint_id: str) -> list[dict[str, Any]]:
        return [iteration.to_wire() for iteration in store().get_iterations(checkpoint_id)]

    @app.post("/api/checkpoints/{checkpoint_id}/iterations", status_code=201)
    def create_iteration(checkpoint_id: str, body: Any = Body(None)) -> dict[str, Any]:
        body = _require_object(body)
        if store().get_checkpoint(checkpoint_id) is None:
            raise HTTPException(status_code=404, detail="Checkpoint not found")
        try:
            iteration = Iteration.model_validate({
                **body,
                "id": body.get("id") or new_iteration_id(),
                "parentCheckpointId": checkpoint_id,
            })
        except ValidationError as e:
            raise _unprocessable(e) from e
        store().create_iteration(iteration)
        return iteration.to_wire()

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    @app.get("/health")
    async def health() -> dict[str, Any]:
        settings = container.get(Settings)
        return {
            "status": "healthy",
            "service": SERVICE_NAME,
            "version": VERSION,
            "provider": settings.llm_provider,
            "model": settings.llm_model,
            "model_loaded": ModelLoader.is_loaded(),
        }

    @app.get("/metrics")
    async def metrics() -> Response:
        metrics_collector.update_uptime()
        return Response(content=metrics_collector.get_metrics(), media_type=METRICS_CONTENT_TYPE)

    return app


def run() -> None:
    """Entry point - serve with uvicorn."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level, settings.json_logs)
    logger.info("starting", host=settings.host, port=settings.port)
    uvicorn.run(create_app(), host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
