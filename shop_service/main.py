# shop_service/main.py
import logging
import time
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from shop_service.config import settings
from shop_service.db.init_db import init_db, close_db
from shop_service.logging_config import setup_logging
from shop_service.responses import failure
from shop_service.routers import ALL_ROUTERS

logger = logging.getLogger("shop_service")


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.log_level)
    await init_db()
    logger.info("shop service started", extra={"api_prefix": settings.api_prefix})
    yield
    await close_db()


app = FastAPI(
    title="Shop Service",
    lifespan=lifespan,
    docs_url="/api-docs",
    openapi_url="/swagger/v1/swagger.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def access_log(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    logger.info("request handled", extra={
        "method": request.method,
        "path": request.url.path,
        "status": response.status_code,
        "duration_ms": round((time.perf_counter() - started) * 1000, 2),
    })
    return response


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    # маршрут не найден
    if exc.status_code == status.HTTP_404_NOT_FOUND and detail == "Not Found":
        detail = "Invalid Path"
    return failure(str(detail), exc.status_code, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    return failure("; ".join(messages), status.HTTP_400_BAD_REQUEST)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("unhandled error", extra={"method": request.method, "path": request.url.path})
    return failure("Internal Server Error", status.HTTP_500_INTERNAL_SERVER_ERROR)


for router in ALL_ROUTERS:
    app.include_router(router, prefix=settings.api_prefix)


def run():
    uvicorn.run("shop_service.main:app", host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
