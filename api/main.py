import asyncio
import logging
from contextlib import asynccontextmanager

import asyncpg
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from auth import router as auth_router
from builds import router as builds_router
from businesses import router as businesses_router
from core import db, settings, uploads
from core.errors import ApiError, StoreError
from events import router as events_router
from follows import router as follows_router
from search import router as search_router
from users import router as users_router

API_PREFIX = "/api"

logging.basicConfig(
    level=settings.log_level(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Initialize the DB pool once per process.
    settings.uploads_dir().mkdir(parents=True, exist_ok=True)
    await db.init_pool()
    try:
        yield
    finally:
        await db.close_pool()


app = FastAPI(lifespan=lifespan)

# Allow the front-end dev server to call this API with cookies.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "code": code, "message": message},
    )


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    if isinstance(exc, StoreError):
        logger.error("store_error path=%s error=%s", request.url.path, exc.message)
    return _error_response(exc.status_code, exc.code, exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request.")
    if location:
        message = f"{location}: {message}"
    return _error_response(400, "VALIDATION_ERROR", message)


@app.exception_handler(asyncpg.PostgresError)
@app.exception_handler(asyncpg.InterfaceError)
@app.exception_handler(asyncio.TimeoutError)
async def store_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # Server-side, client-side (bad argument, dropped connection) and pool
    # timeouts all surface the same way. Full detail stays in the server log.
    logger.exception("unhandled_db_error path=%s", request.url.path, exc_info=exc)
    return _error_response(500, StoreError.code, StoreError.default_message)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error path=%s", request.url.path, exc_info=exc)
    return _error_response(500, StoreError.code, StoreError.default_message)


app.include_router(auth_router.router, prefix=API_PREFIX, tags=["auth"])
app.include_router(events_router.router, prefix=API_PREFIX, tags=["events"])
app.include_router(businesses_router.router, prefix=API_PREFIX, tags=["businesses"])
app.include_router(users_router.router, prefix=API_PREFIX, tags=["users"])
app.include_router(builds_router.router, prefix=API_PREFIX, tags=["builds"])
app.include_router(follows_router.router, prefix=API_PREFIX, tags=["follows"])
app.include_router(search_router.router, prefix=API_PREFIX, tags=["search"])

app.mount(
    uploads.UPLOADS_URL_PREFIX,
    StaticFiles(directory=settings.uploads_dir(), check_dir=False),
    name="uploads",
)


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/")
def root() -> dict:
    return {"message": "car-build community api"}
