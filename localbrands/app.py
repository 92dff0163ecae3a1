import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from localbrands.application import configure_project_repository
from localbrands.config import Settings, configure_logging
from localbrands.errors import PublishFailed
from localbrands.infrastructure import (
    AnalysisAdapter,
    JsonProjectRepository,
    JsonStore,
    configure_analysis_adapter,
    configure_hosting,
    configure_preferences_store,
)
from localbrands.infrastructure.analysis import UnconfiguredVisionClient
from localbrands.infrastructure.gemini import GeminiVisionClient
from localbrands.infrastructure.github import GitHubClient
from localbrands.infrastructure.hosting import UnconfiguredRepositoryHost, UnresolvedSiteHost
from localbrands.infrastructure.pages import GitHubPagesHost
from localbrands.routes import analyze, health, publish
from localbrands.workers.publish import PublishOrchestrator, configure_publish_orchestrator

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def error_response(message: str, status_code: int = 500) -> JSONResponse:
    return JSONResponse({"error": message, "success": False}, status_code=status_code)


def _configure_collaborators(settings: Settings) -> list:
    """Install analysis, hosting and storage collaborators; return clients to close."""

    clients: list = []
    if settings.gemini_api_key:
        vision = GeminiVisionClient(
            settings.gemini_api_key, model=settings.gemini_model, timeout=settings.call_timeout
        )
        clients.append(vision)
    else:
        logger.warning("GEMINI_API_KEY is not set; image analysis will return fallback content")
        vision = UnconfiguredVisionClient()
    configure_analysis_adapter(AnalysisAdapter(vision, timeout=settings.call_timeout))

    if settings.github_token:
        github = GitHubClient(settings.github_token, timeout=settings.call_timeout)
        clients.append(github)
        configure_hosting(github, GitHubPagesHost(github))
    else:
        logger.warning("GITHUB_TOKEN is not set; publishing will fail at the push step")
        configure_hosting(UnconfiguredRepositoryHost(), UnresolvedSiteHost())

    configure_publish_orchestrator(
        PublishOrchestrator(timeout=settings.call_timeout, pages_domain=settings.pages_domain)
    )
    store = JsonStore(settings.data_dir)
    configure_project_repository(JsonProjectRepository(store))
    configure_preferences_store(store)
    return clients


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)
    clients = _configure_collaborators(settings)

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        yield
        for client in clients:
            await client.aclose()

    app = FastAPI(title="Local Brands API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    # registered last so it runs first: every OPTIONS gets an empty 200
    @app.middleware("http")
    async def cors_and_errors(request: Request, call_next) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.exception("unhandled error on %s %s", request.method, request.url.path)
            response = error_response(str(exc) or "Internal server error", 500)
        response.headers.update(CORS_HEADERS)
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_error(_: Request, exc: StarletteHTTPException) -> JSONResponse:
        message = "Not found" if exc.status_code == 404 else str(exc.detail)
        return error_response(message, exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def invalid_body(_: Request, exc: RequestValidationError) -> JSONResponse:
        return error_response("Invalid request body", 400)

    @app.exception_handler(PublishFailed)
    async def publish_failed(_: Request, exc: PublishFailed) -> JSONResponse:
        return error_response(str(exc), 500)

    app.include_router(health.router, prefix="/api")
    app.include_router(analyze.router, prefix="/api")
    app.include_router(publish.router, prefix="/api")

    return app


app = create_app()
