"""FastAPI application exposing the ephemera actions as a JSON API."""

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, File, Form, Request, Response, UploadFile
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import RequestResponseEndpoint

from . import __version__
from .application.services import ActionResult, ImageUpload, RequestContext
from .composition import create_container
from .config import config_path_from_env
from .container import Container
from .domain import NotAuthenticatedError
from .infrastructure.web import get_client_ip, security_headers
from .logging_setup import setup_logging_from_env

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    setup_logging_from_env()

    container: Container | None = getattr(app.state, "container", None)
    if container is None:
        container = create_container(config_path=config_path_from_env())
        app.state.container = container

    await container.start()
    logger.info("Ephemera server started")

    yield

    # Shutdown
    await container.stop()
    logger.info("Ephemera server stopped")


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_request_context(request: Request) -> RequestContext:
    """Client IP, user agent and the user behind the bearer token, if any."""
    container = get_container(request)

    token = None
    authorization = request.headers.get("authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        token = credentials.strip()

    return RequestContext(
        ip=get_client_ip(request.headers),
        user_agent=request.headers.get("user-agent"),
        user=container.auth_service.current_user(token),
        access_token=token,
    )


def to_response(result: ActionResult, status_code: int = 200) -> JSONResponse:
    """Map an action result to HTTP: 429 when limited, 400 on error."""
    if result.rate_limited:
        return JSONResponse(
            {"error": result.error},
            status_code=429,
            headers={"Retry-After": str(result.retry_after)},
        )
    if not result.ok:
        return JSONResponse({"error": result.error}, status_code=400)
    return JSONResponse({"data": jsonable_encoder(result.data)}, status_code=status_code)


def create_app(container: Container | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        container: Pre-wired container; built from EPHEMERA_CONFIG_PATH at startup if omitted.
    """
    app = FastAPI(
        title="Ephemera",
        description="Input hardening and rate limiting for the ephemera catalogue",
        version=__version__,
        lifespan=lifespan,
    )
    if container is not None:
        app.state.container = container

    @app.middleware("http")
    async def add_security_headers(
        request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        """Add security headers to every response."""
        response = await call_next(request)
        production = request.app.state.container.config.server.production
        for name, value in security_headers(production).items():
            response.headers[name] = value
        return response

    @app.exception_handler(NotAuthenticatedError)
    async def not_authenticated(request: Request, exc: NotAuthenticatedError):
        return JSONResponse({"error": exc.message}, status_code=401)

    @app.get("/health")
    def health(container: Container = Depends(get_container)):
        """Health check endpoint."""
        return {"status": "healthy", "rate_limit_entries": len(container.rate_limiter)}

    # Auth

    @app.post("/api/auth/signin")
    def sign_in(
        payload: dict[str, Any],
        ctx: RequestContext = Depends(get_request_context),
        container: Container = Depends(get_container),
    ):
        return to_response(container.auth_service.sign_in(payload, ctx))

    @app.post("/api/auth/signup")
    def sign_up(
        payload: dict[str, Any],
        ctx: RequestContext = Depends(get_request_context),
        container: Container = Depends(get_container),
    ):
        return to_response(container.auth_service.sign_up(payload, ctx), status_code=201)

    @app.post("/api/auth/signout")
    def sign_out(
        ctx: RequestContext = Depends(get_request_context),
        container: Container = Depends(get_container),
    ):
        return to_response(container.auth_service.sign_out(ctx))

    @app.get("/api/auth/me")
    def me(ctx: RequestContext = Depends(get_request_context)):
        if ctx.user is None:
            raise NotAuthenticatedError()
        return {"data": jsonable_encoder(ctx.user)}

    # Pages

    @app.post("/api/pages")
    async def create_page(
        title: str | None = Form(None),
        page_date: str | None = Form(None),
        caption: str | None = Form(None),
        visibility: str | None = Form(None),
        image: UploadFile | None = File(None),
        ctx: RequestContext = Depends(get_request_context),
        container: Container = Depends(get_container),
    ):
        upload = None
        if image is not None:
            upload = ImageUpload(
                filename=image.filename or "",
                content_type=image.content_type or "",
                # One byte past the limit is enough to reject it
                data=await image.read(container.config.uploads.max_file_size + 1),
            )
        form = {
            "title": title,
            "page_date": page_date,
            "caption": caption,
            "visibility": visibility,
        }
        result = await run_in_threadpool(container.page_service.create_page, form, upload, ctx)
        return to_response(result, status_code=201)

    @app.patch("/api/pages/{page_id}")
    def update_page(
        page_id: str,
        payload: dict[str, Any],
        ctx: RequestContext = Depends(get_request_context),
        container: Container = Depends(get_container),
    ):
        return to_response(container.page_service.update_page({**payload, "id": page_id}, ctx))

    @app.delete("/api/pages/{page_id}")
    def delete_page(
        page_id: str,
        ctx: RequestContext = Depends(get_request_context),
        container: Container = Depends(get_container),
    ):
        return to_response(container.page_service.delete_page(page_id, ctx))

    # Markers

    @app.post("/api/pages/{page_id}/markers")
    def create_marker(
        page_id: str,
        payload: dict[str, Any],
        ctx: RequestContext = Depends(get_request_context),
        container: Container = Depends(get_container),
    ):
        result = container.marker_service.create_marker({**payload, "page_id": page_id}, ctx)
        return to_response(result, status_code=201)

    @app.patch("/api/pages/{page_id}/markers/{marker_id}")
    def update_marker(
        page_id: str,
        marker_id: str,
        payload: dict[str, Any],
        ctx: RequestContext = Depends(get_request_context),
        container: Container = Depends(get_container),
    ):
        result = container.marker_service.update_marker(
            {**payload, "id": marker_id, "page_id": page_id}, ctx
        )
        return to_response(result)

    @app.delete("/api/pages/{page_id}/markers/{marker_id}")
    def delete_marker(
        page_id: str,
        marker_id: str,
        ctx: RequestContext = Depends(get_request_context),
        container: Container = Depends(get_container),
    ):
        return to_response(container.marker_service.delete_marker(marker_id, page_id, ctx))

    # Timelines

    @app.post("/api/timelines")
    def create_timeline(
        payload: dict[str, Any],
        ctx: RequestContext = Depends(get_request_context),
        container: Container = Depends(get_container),
    ):
        result = container.timeline_service.create_timeline(payload, ctx)
        return to_response(result, status_code=201)

    @app.patch("/api/timelines/{timeline_id}")
    def update_timeline(
        timeline_id: str,
        payload: dict[str, Any],
        ctx: RequestContext = Depends(get_request_context),
        container: Container = Depends(get_container),
    ):
        result = container.timeline_service.update_timeline({**payload, "id": timeline_id}, ctx)
        return to_response(result)

    @app.delete("/api/timelines/{timeline_id}")
    def delete_timeline(
        timeline_id: str,
        ctx: RequestContext = Depends(get_request_context),
        container: Container = Depends(get_container),
    ):
        return to_response(container.timeline_service.delete_timeline(timeline_id, ctx))

    @app.put("/api/pages/{page_id}/timelines")
    def assign_page_to_timelines(
        page_id: str,
        payload: dict[str, Any],
        ctx: RequestContext = Depends(get_request_context),
        container: Container = Depends(get_container),
    ):
        timeline_ids = payload.get("timeline_ids")
        if not isinstance(timeline_ids, list):
            return JSONResponse({"error": "timeline_ids must be a list"}, status_code=400)
        result = container.timeline_service.assign_page_to_timelines(page_id, timeline_ids, ctx)
        return to_response(result)

    @app.get("/api/pages/{page_id}/timelines")
    def get_timelines_for_page(
        page_id: str,
        ctx: RequestContext = Depends(get_request_context),
        container: Container = Depends(get_container),
    ):
        return to_response(container.timeline_service.get_timelines_for_page(page_id, ctx))

    return app
