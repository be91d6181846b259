"""
Student Course Registry - FastAPI Application Entry Point.

This is the main application module that:
1. Initializes the FastAPI app with CORS middleware
2. Sets up structured JSON logging
3. Implements request ID middleware (X-Request-ID header)
4. Maps domain errors to JSON error responses
5. Registers all API route handlers

The application follows a layered architecture:
- routes/: API endpoint handlers
- authz/: row-level policy layer (resolvers, policy table, enforcer)
- services/: unfiltered data access, never aware of authz
- models/: SQLAlchemy ORM models and row triggers
- logging_config.py: Structured logging configuration
- database.py: Database connection management
"""

import time
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from registry.logging_config import (
    setup_logging, get_logger, log_with_context,
    request_id_var, generate_request_id
)
from registry.routes import auth_hooks, courses, students, roles, profiles, dashboard
from registry.config import CORS_ORIGINS, DATABASE_URL
from registry.database import create_tables
from registry.errors import RegistryError

# Import all models so they (and their triggers) are registered with Base.metadata
import registry.models  # noqa: F401

# ──────────────────────────────────────────────────────────────
# Initialize structured logging BEFORE anything else
# ──────────────────────────────────────────────────────────────
setup_logging()
logger = get_logger("http")

if DATABASE_URL.startswith("sqlite"):
    logger.info("Using SQLite, creating tables directly")
    create_tables()

app = FastAPI(
    title="Student Course Registry",
    description=(
        "Tracks students, courses and enrollments. Administrators manage "
        "courses and students; students can read their own record. Access "
        "is decided per row by the policy layer."
    ),
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"]
)


# ──────────────────────────────────────────────────────────────
# Request ID Middleware
#
# Generates a unique UUID per incoming request and:
# 1. Stores it in a context variable (available to all log entries)
# 2. Returns it in the X-Request-ID response header
# 3. Logs request start/end with latency measurement
# ──────────────────────────────────────────────────────────────
@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    req_id = generate_request_id()
    request_id_var.set(req_id)

    start_time = time.time()

    log_with_context(logger, "INFO",
        f"Request started: {request.method} {request.url.path}",
        context={"request_id": req_id},
        extra_data={
            "ip": request.client.host if request.client else "unknown",
            "user_agent": request.headers.get("user-agent", ""),
            "query_params": dict(request.query_params)
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
# Domain errors → JSON
#
# Authorization denials, duplicates, provisioning failures etc. are raised
# as RegistryError subclasses; each knows its kind and status code.
# ──────────────────────────────────────────────────────────────
@app.exception_handler(RegistryError)
async def registry_error_handler(request: Request, exc: RegistryError):
    level = "WARNING" if exc.status_code < 500 else "ERROR"
    log_with_context(logger, level,
        f"{request.method} {request.url.path} failed: {exc.kind}",
        extra_data={"status_code": exc.status_code, "detail": exc.detail})
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


app.include_router(auth_hooks.router, tags=["Auth hooks"])
app.include_router(courses.router, tags=["Courses"])
app.include_router(students.router, tags=["Students"])
app.include_router(roles.router, tags=["Roles"])
app.include_router(profiles.router, tags=["Profiles"])
app.include_router(dashboard.router, tags=["Dashboard"])


@app.get("/health", tags=["Health"])
def health_check():
    """Health check endpoint for container health checks and monitoring."""
    return {"status": "healthy", "service": "course-registry-backend", "version": "1.0.0"}


@app.get("/", tags=["Root"])
def root():
    """Root endpoint with API information."""
    return {
        "service": "Student Course Registry",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "courses": "GET/POST /api/courses, GET/PUT/DELETE /api/courses/{id}",
            "students": "GET/POST /api/students, GET /api/students/me, GET/PUT/DELETE /api/students/{id}",
            "roles": "GET/POST /api/roles, GET /api/roles/me, PUT/DELETE /api/roles/{id}",
            "profiles": "GET/POST /api/profiles, GET/PUT /api/profiles/me, PUT /api/profiles/{user_id}",
            "dashboard": "GET /api/dashboard",
            "identity_created": "POST /api/auth/hooks/identity-created",
            "identity_deleted": "DELETE /api/auth/hooks/identities/{id}"
        }
    }
