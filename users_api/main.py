import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .routers import pages as pages_routes
from .routers import users as users_routes
from .store import UserStore

logger = logging.getLogger(__name__)

static_dir = Path(__file__).resolve().parent / "static"


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        {"error": str(exc.detail)},
        status_code=exc.status_code,
        headers=exc.headers,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # Path errors can only come from the id segment.
    if any(err.get("loc", ("",))[0] == "path" for err in exc.errors()):
        return _error("Invalid user ID", status.HTTP_400_BAD_REQUEST)
    return _error("Invalid request payload", status.HTTP_400_BAD_REQUEST)


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled application error", exc_info=exc)
    return _error("Internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR)


def create_app(store: UserStore, title: str = "Users API") -> FastAPI:
    """Build the application around an already connected ``store``.

    The store is closed when the application shuts down.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        logger.info("Shutting down, closing store")
        app.state.store.close()

    app = FastAPI(title=title, version=__version__, lifespan=lifespan)
    app.state.store = store

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(pages_routes.router)
    app.include_router(users_routes.router)
    app.mount("/static", StaticFiles(directory=static_dir), name="static")

    return app
