import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .errors import AppError
from .migration_runner import run_migrations_once
from .responses import failure, success
from .routers import auth, events, tasks, timer

settings = get_settings()
logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.cors_origin],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    logger.warning("%s - %s - %s - %s", exc.status_code, exc.message, request.url.path, request.method)
    return failure(exc.message, exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(part) for part in error.get("loc", ())[1:]), "message": error.get("msg", "")}
        for error in exc.errors()
    ]
    logger.warning("400 - Validation Error - %s - %s", request.url.path, request.method)
    return failure("Validation Error", 400, errors)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("500 - %s - %s", request.url.path, request.method)
    return failure("Internal Server Error", 500)


@app.get("/health")
async def health():
    return success({"status": "ok"})


@app.on_event("startup")
async def ensure_schema() -> None:
    if not settings.run_migrations_on_startup:
        return
    try:
        run_migrations_once()
    except Exception:  # pragma: no cover - startup failures should surface
        logger.exception("Database migration failed")
        raise


app.include_router(auth.router, prefix=settings.api_prefix)
app.include_router(tasks.router, prefix=settings.api_prefix)
app.include_router(timer.router, prefix=f"{settings.api_prefix}/timer")
app.include_router(timer.router, prefix=f"{settings.api_prefix}/timers")
app.include_router(events.router, prefix=settings.api_prefix)
