"""
Freshman Service - FastAPI Application Entry Point.

This module:
1. Initializes the FastAPI app with CORS middleware
2. Sets up structured JSON logging
3. Implements request ID middleware (X-Request-ID header)
4. Renders domain errors as {"code", "message"} bodies
5. Registers the freshman and checking routers

Layout:
- routes/: API endpoint handlers
- models/: SQLAlchemy ORM models (students, identities, approvals)
- services/: account binding, relationship queries, approvals
- logging_config.py: Structured logging configuration
- database.py: Engine (shared connection pool) and sessions
"""

import time
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import DATABASE_URL, CORS_ALLOWED_ORIGINS, API_HOST, API_PORT
from app.logging_config import (
    setup_logging, get_logger, log_with_context,
    request_id_var, generate_request_id
)
from app.errors import ServiceError, InvalidRequest
from app.routes import freshman, checking
from app.database import create_tables

# Import all models so they are registered with Base.metadata
from app.models import Student, Identity, Approval  # noqa: F401

# ──────────────────────────────────────────────────────────────
# Initialize structured logging BEFORE anything else
# ──────────────────────────────────────────────────────────────
setup_logging()
logger = get_logger("http")
db_logger = get_logger("db")

# Auto-create tables for SQLite local development
if DATABASE_URL.startswith("sqlite"):
    logger.info("Using SQLite, creating tables directly")
    create_tables()

app = FastAPI(
    title="Freshman Service",
    description=(
        "Lets freshmen bind their admission record, look up dormitory and "
        "counselor, find classmates, roommates and people they may know, "
        "and lets administrators manage real-identity approvals."
    ),
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"]
)


# ──────────────────────────────────────────────────────────────
# Request ID Middleware
#
# Every request gets a UUID stored in a context variable (so all
# log entries carry it) and returned in the X-Request-ID header.
# ──────────────────────────────────────────────────────────────
@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    req_id = generate_request_id()
    request_id_var.set(req_id)
    start_time = time.time()

    # Query strings are not logged: they carry binding secrets.
    log_with_context(logger, "INFO",
        f"Request started: {request.method} {request.url.path}",
        context={"request_id": req_id},
        extra_data={
            "ip": request.client.host if request.client else "unknown",
            "user_agent": request.headers.get("user-agent", ""),
        })

    response = await call_next(request)

    duration_ms = (time.time() - start_time) * 1000
    response.headers["X-Request-ID"] = req_id

    log_with_context(logger, "INFO",
        f"Request completed: {request.method} {request.url.path} → {response.status_code}",
        context={"request_id": req_id},
        extra_data={
            "duration_ms": round(duration_ms, 2),
            "status_code": response.status_code
        })

    return response


# ──────────────────────────────────────────────────────────────
# Error handlers
# ──────────────────────────────────────────────────────────────
@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    log_with_context(logger, "INFO",
        f"Request rejected with code {exc.code}: {type(exc).__name__}",
        extra_data={"status_code": exc.status_code})
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    error = InvalidRequest()
    log_with_context(logger, "INFO",
        f"Request rejected with code {error.code}: invalid parameters",
        extra_data={"errors": exc.errors()})
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    # Framework errors (unknown route, wrong method) reuse the HTTP status as code.
    return JSONResponse(status_code=exc.status_code,
                        content={"code": exc.status_code, "message": str(exc.detail)},
                        headers=getattr(exc, "headers", None))


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    log_with_context(db_logger, "ERROR",
        f"Store failure on {request.method} {request.url.path}",
        exc_info=exc)
    return JSONResponse(status_code=500, content=ServiceError().to_dict())


app.include_router(freshman.router, tags=["Freshman"])
app.include_router(checking.router, tags=["Checking"])


@app.get("/health", tags=["Health"])
def health_check():
    """Health check endpoint for container health checks."""
    return {"status": "healthy", "service": "freshman-service", "version": "1.0.0"}


@app.get("/", tags=["Root"])
def root():
    """Root endpoint with API information."""
    return {
        "service": "Freshman Service",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "basic_info": "GET /freshman/{account}?secret=...",
            "update": "PUT /freshman/{account}",
            "roommates": "GET /freshman/{account}/roommate",
            "classmates": "GET /freshman/{account}/classmate",
            "familiar": "GET /freshman/{account}/familiar",
            "my_approval": "GET /checking/me",
            "approvals": "GET|POST /checking/approvals",
            "approval_search": "GET /checking/approvals/search",
            "approval": "GET|DELETE /checking/approvals/{id}"
        }
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host=API_HOST, port=API_PORT)
