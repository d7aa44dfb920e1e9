from contextlib import asynccontextmanager
import logging
import time

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse

from .api.v1.auth import router as auth_router
from .api.v1.appointments import router as appointments_router
from .api.v1.doctors import router as doctors_router
from .api.v1.patients import router as patients_router
from .api.v1.prescriptions import router as prescriptions_router
from .core.config import settings
from .core.database import init_db

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"
ROUTERS = (auth_router, doctors_router, appointments_router, patients_router, prescriptions_router)


@asynccontextmanager
async def lifespan(app: FastAPI):
    db_url = settings.get_database_url
    backend = "PostgreSQL" if db_url.startswith("postgresql") else db_url.split(":", 1)[0]
    logger.info(f"Starting {settings.APP_NAME} {settings.VERSION} on {backend}")

    try:
        init_db()
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise

    yield
    logger.info(f"Stopping {settings.APP_NAME}")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    description="Clinic appointment scheduling with availability and conflict checks",
    openapi_url=f"{API_PREFIX}/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

if not settings.TESTING:
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=["localhost", "127.0.0.1", "*.localhost"]
    )


@app.middleware("http")
async def log_request_timing(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed = time.perf_counter() - started
    response.headers["X-Process-Time"] = f"{elapsed:.4f}"
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} in {elapsed:.4f}s")
    return response


@app.exception_handler(404)
async def not_found_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=404,
        content={
            "error": "Not Found",
            "detail": getattr(exc, "detail", None) or "The requested resource was not found",
            "path": request.url.path
        }
    )


@app.exception_handler(500)
async def internal_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"error": "Internal Server Error", "detail": "An unexpected error occurred"}
    )


for router in ROUTERS:
    app.include_router(router, prefix=API_PREFIX)


@app.get("/health")
async def health_check():
    return {"status": "healthy", "timestamp": time.time(), "version": settings.VERSION}


@app.get("/")
async def root():
    return {"name": settings.APP_NAME, "version": settings.VERSION, "docs": app.docs_url, "health": "/health"}


@app.get(f"{API_PREFIX}/info")
async def api_info():
    """Mounted resource groups and their base paths."""
    endpoints = {router.prefix.strip("/"): f"{API_PREFIX}{router.prefix}" for router in ROUTERS}
    endpoints["openapi"] = app.openapi_url
    return {"name": settings.APP_NAME, "version": settings.VERSION, "endpoints": endpoints}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("clinic.main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
