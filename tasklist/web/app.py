from __future__ import annotations

import asyncio
import uuid
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

import redis
from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from tasklist.config import AppConfig, load_config
from tasklist.observability import (
    configure_uvicorn_logging,
    get_json_logger,
    get_metrics,
    use_request_context,
)
from tasklist.sessions import InMemorySessionBackend, Session, SessionBackend, SessionManager
from tasklist.tasks.errors import InternalError, ValidationError
from tasklist.tasks.store import Clock, IdFactory, TaskListStore

from .intents import BadIntent, apply_intent, parse_intent

T = TypeVar("T")

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


def build_backend(config: AppConfig) -> SessionBackend:
    if config.session_backend == "redis":
        from tasklist.sessions.redis_backend import RedisSessionBackend

        return RedisSessionBackend(
            url=config.redis_url,
            key_prefix=config.session_key_prefix,
            ttl_seconds=config.session_ttl_seconds,
        )
    return InMemorySessionBackend(ttl_seconds=config.session_ttl_seconds)


def _page_context(store: TaskListStore, config: AppConfig, error: str | None) -> dict[str, Any]:
    return {
        "title": config.app_title,
        "tasks": store.sorted_view(),
        "stats": store.stats(),
        "editing_task_id": store.editing_task_id,
        "error": error,
    }


def create_app(
    config: AppConfig | None = None,
    *,
    backend: SessionBackend | None = None,
    clock: Clock | None = None,
    id_factory: IdFactory | None = None,
) -> FastAPI:
    cfg = config or load_config()
    app = FastAPI(title=cfg.app_title)
    # Configure uvicorn logging at app construction to avoid import-time side effects
    configure_uvicorn_logging()
    logger = get_json_logger("tasklist.web")
    metrics = get_metrics()
    templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
    if backend is None:
        backend = build_backend(cfg)
    sessions = SessionManager(backend, clock=clock, id_factory=id_factory)
    app.state.sessions = sessions
    app.state.config = cfg

    def _client_session_id(request: Request) -> str | None:
        sid = request.cookies.get(cfg.session_cookie_name) or ""
        return sid if 16 <= len(sid) <= 128 else None

    def _attach_cookie(response: Response, session: Session) -> Response:
        # Re-issued on every persisted request so the cookie slides with the TTL
        if session.saved:
            response.set_cookie(
                cfg.session_cookie_name,
                session.id,
                max_age=cfg.session_ttl_seconds,
                httponly=True,
                samesite="lax",
                secure=cfg.session_cookie_secure,
            )
        return response

    async def _with_session(
        sid: str | None, path: str, fn: Callable[[TaskListStore], T]
    ) -> tuple[T, Session]:
        def _run() -> tuple[T, Session]:
            with sessions.open(sid) as session:
                result = fn(session.store)
            return result, session

        try:
            return await asyncio.to_thread(_run)
        except redis.exceptions.RedisError as exc:
            logger.error(
                "session backend error",
                extra={
                    "event": "backend_error",
                    "path": path,
                    "attributes": {"error": str(exc)[:200]},
                },
            )
            metrics.increment("backend_errors", {"path": path})
            raise HTTPException(status_code=503, detail="session storage unavailable") from exc
        except InternalError as exc:
            logger.exception("task store failure", extra={"event": "internal_error", "path": path})
            raise HTTPException(status_code=500, detail="internal error") from exc

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/ready")
    async def ready() -> dict[str, str]:
        ok = await asyncio.to_thread(sessions.backend.ping)
        if not ok:
            logger.error(
                "session backend not ready", extra={"event": "backend_error", "path": "ready"}
            )
            metrics.increment("backend_errors", {"path": "ready"})
            raise HTTPException(status_code=503, detail="session storage not ready")
        return {"status": "ok"}

    @app.get("/metrics")
    async def metrics_snapshot() -> dict[str, Any]:
        return {"counters": metrics.snapshot()}

    @app.get("/")
    async def index(request: Request) -> Response:
        sid = _client_session_id(request)
        with use_request_context(str(uuid.uuid4()), sid):
            context, session = await _with_session(
                sid, "index", lambda s: _page_context(s, cfg, None)
            )
            response = templates.TemplateResponse(request, "index.html", context)
            return _attach_cookie(response, session)

    @app.post("/")
    async def mutate(request: Request) -> Response:
        sid = _client_session_id(request)
        with use_request_context(str(uuid.uuid4()), sid):
            form = await request.form()
            try:
                intent = parse_intent(form)
            except BadIntent as exc:
                logger.info(
                    "bad intent", extra={"event": "bad_intent", "attributes": {"error": str(exc)}}
                )
                raise HTTPException(status_code=400, detail=str(exc)) from exc

            def _apply(store: TaskListStore) -> dict[str, Any]:
                try:
                    apply_intent(store, intent)
                except ValidationError as exc:
                    # Edit mode is already cleared; render the page with the message
                    context = _page_context(store, cfg, str(exc))
                    context["status_code"] = 422
                    return context
                return {}

            result, session = await _with_session(sid, "mutate", _apply)
            if result:
                status_code = result.pop("status_code")
                logger.info(
                    "validation error",
                    extra={
                        "event": "validation_error",
                        "intent": intent.name,
                        "status": status_code,
                    },
                )
                metrics.increment("validation_errors", {"intent": intent.name})
                response = templates.TemplateResponse(
                    request, "index.html", result, status_code=status_code
                )
                return _attach_cookie(response, session)

            logger.info(
                "task mutation",
                extra={"event": "task_mutation", "intent": intent.name, "task_id": intent.task_id},
            )
            metrics.increment("task_mutations", {"intent": intent.name})
            redirect = RedirectResponse(url="/", status_code=303)
            return _attach_cookie(redirect, session)

    @app.get("/api/tasks")
    async def api_tasks(request: Request) -> Response:
        sid = _client_session_id(request)
        with use_request_context(str(uuid.uuid4()), sid):

            def _snapshot(store: TaskListStore) -> dict[str, Any]:
                return {
                    "tasks": [t.model_dump(mode="json") for t in store.sorted_view()],
                    "stats": store.stats().model_dump(),
                    "editing_task_id": store.editing_task_id,
                }

            body, session = await _with_session(sid, "api_tasks", _snapshot)
            return _attach_cookie(JSONResponse(body), session)

    return app


__all__ = ["build_backend", "create_app"]
