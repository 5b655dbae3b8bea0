import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from noteful_backend.api.middleware import RequestLoggingMiddleware
from noteful_backend.api.routes import auth, folders, notes, tags, users
from noteful_backend.auth import TokenService
from noteful_backend.config import Settings
from noteful_backend.exceptions import LoginError, NotefulError
from noteful_database import StoreError
from noteful_database.db import make_engine, make_session_factory
from noteful_database.init_db import init_db

logger = logging.getLogger(__name__)

INTERNAL_ERROR = {"code": 500, "reason": "InternalError", "message": "Internal Server Error"}
REFERENCE_WORKERS = 4


def setup_logging(level: str) -> None:
    """Leaves the root logger alone when the host process already configured it."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)


def _validation_body(exc: RequestValidationError):
    error = exc.errors()[0]
    loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path", "header")]
    location = ".".join(loc) or None
    if error.get("type") == "missing" and location:
        message = f"Missing '{location}' in request body"
    else:
        message = error.get("msg", "Invalid request")
    body = {"code": 422, "reason": "ValidationError", "message": message}
    if location:
        body["location"] = location
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """Every error leaves as {"code", "reason", "message", "location"?}."""

    @app.exception_handler(LoginError)
    async def handle_login_error(request: Request, exc: LoginError):
        # the failing field is for diagnostics only
        logger.info("Login rejected at %s", exc.location)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(NotefulError)
    async def handle_noteful_error(request: Request, exc: NotefulError):
        if exc.context:
            logger.info("%s: %s | %s", exc.reason, exc.message, exc.context)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=422, content=_validation_body(exc))

    @app.exception_handler(StoreError)
    async def handle_store_error(request: Request, exc: StoreError):
        logger.error("Store error on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content=INTERNAL_ERROR)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content=INTERNAL_ERROR)


# PUBLIC_INTERFACE
def create_app(settings: Settings = None, engine=None) -> FastAPI:
    """
    Builds the application. Configuration is injected here and stored on
    app.state; nothing below reads the environment.
    """
    settings = settings or Settings.from_env()
    owns_engine = engine is None
    if owns_engine:
        engine = make_engine(settings.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.log_level)
        init_db(engine)
        app.state.reference_executor = ThreadPoolExecutor(
            max_workers=REFERENCE_WORKERS, thread_name_prefix="noteful-refs"
        )
        logger.info("Noteful API ready")
        yield
        app.state.reference_executor.shutdown(wait=True)
        del app.state.reference_executor
        if owns_engine:
            engine.dispose()

    app = FastAPI(
        title="Noteful Notes API",
        description="Notes organized by folders and tags, per authenticated user.",
        version="1.0.0",
        lifespan=lifespan,
        openapi_tags=[
            {"name": "Authentication", "description": "User registration, login, and tokens"},
            {"name": "Notes", "description": "Create, update, view, delete, search notes"},
            {"name": "Folders", "description": "Per-user folders"},
            {"name": "Tags", "description": "Per-user tags"},
        ],
    )
    app.state.settings = settings
    app.state.session_factory = make_session_factory(engine)
    app.state.token_service = TokenService.from_settings(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    register_exception_handlers(app)

    # Root Health Check
    @app.get("/", summary="Health Check", tags=["General"])
    def health_check():
        """Simple health check endpoint."""
        return {"message": "Healthy"}

    for module in (users, auth, notes, folders, tags):
        app.include_router(module.router)
    return app


app = create_app()
