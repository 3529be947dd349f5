from __future__ import annotations

from datetime import datetime, timezone
from time import monotonic

from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from taskboard.config import settings
from taskboard.db import create_tables
from taskboard.errors import AlreadyCompleted, AlreadyDeleted, NotFound, StatusLocked, TaskError
from taskboard.log import configure_logging
from taskboard.routers.tasks import router as tasks_router

configure_logging()

app = FastAPI(
  title="Taskboard API",
  version="0.1.0",
  docs_url="/docs" if settings.api_docs_enabled else None,
  redoc_url="/redoc" if settings.api_docs_enabled else None,
  openapi_url="/openapi.json" if settings.api_docs_enabled else None,
)


def error_status(exc: TaskError) -> tuple[int, str]:
  if isinstance(exc, NotFound):
    return 404, "Not Found"
  if isinstance(exc, AlreadyDeleted):
    # Repeated deletes are reported back, not treated as failures.
    return 200, "Success"
  if isinstance(exc, (AlreadyCompleted, StatusLocked)):
    return 400, "Business Rule Violation"
  return 400, "Invalid Request"


@app.exception_handler(TaskError)
async def _task_error_handler(_, exc: TaskError) -> JSONResponse:
  status_code, error = error_status(exc)
  if status_code >= 400:
    logger.warning("{} rejected: {} (field={}, value={})", exc.kind, exc.message, exc.field, exc.value)
  body = {
    "timestamp": datetime.now(timezone.utc).isoformat(),
    "status": status_code,
    "error": error,
    **exc.to_dict(),
  }
  return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


app.add_middleware(
  CORSMiddleware,
  allow_origins=settings.cors_origin_list(),
  allow_credentials=True,
  allow_methods=["*"],
  allow_headers=["*"],
)

app.include_router(tasks_router)


@app.middleware("http")
async def _request_log_middleware(request, call_next):
  start = monotonic()
  response = await call_next(request)
  elapsed_ms = (monotonic() - start) * 1000.0
  logger.info("{} {} -> {} in {:.1f}ms", request.method, request.url.path, response.status_code, elapsed_ms)
  response.headers.setdefault("X-Content-Type-Options", "nosniff")
  return response


@app.get("/health")
async def health() -> dict:
  return {"ok": True}


@app.get("/version")
async def version() -> dict:
  return {"version": settings.app_version, "buildSha": settings.build_sha}


@app.on_event("startup")
async def _startup() -> None:
  if settings.create_tables_on_start:
    await create_tables()
  logger.info("Taskboard API {} started", settings.app_version)
