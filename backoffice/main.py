# backoffice/main.py

import logging
import subprocess
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from backoffice.core import logging_config  # noqa: F401  configures logging on import
from backoffice.core.config import get_settings
from backoffice.core.enums import AppSection
from backoffice.core.exceptions import (
    AdminNotFoundError,
    AdminProvisioningError,
    BaseServiceError,
    DatabaseError,
    InvalidTransitionError,
    ListingConflictError,
    ListingNotFoundError,
    NotAuthenticatedError,
    NotAuthorizedError,
    ReferenceInUseError,
    ReferenceNotFoundError,
    ValidationError,
)
from backoffice.core.security import require_admin, require_section
from backoffice.routes import admin, auth, create_new, health, listings, pipeline, reports

logger = logging.getLogger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting Listing Back Office ({settings.ENVIRONMENT})")
    # Run migrations on startup
    if settings.RUN_MIGRATIONS:
        logger.info("Running database migrations...")
        result = subprocess.run(['alembic', 'upgrade', 'head'], capture_output=True, text=True)
        if result.returncode == 0:
            logger.info("Migrations completed successfully")
        else:
            logger.error(f"Migration failed: {result.stderr}")
    yield


app = FastAPI(
    title="Listing Back Office",
    debug=settings.DEBUG,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials="*" not in settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------

# Most specific first; the first isinstance match wins
ERROR_STATUS_CODES = [
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (ListingNotFoundError, status.HTTP_404_NOT_FOUND),
    (ReferenceNotFoundError, status.HTTP_404_NOT_FOUND),
    (AdminNotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidTransitionError, status.HTTP_409_CONFLICT),
    (ListingConflictError, status.HTTP_409_CONFLICT),
    (ReferenceInUseError, status.HTTP_409_CONFLICT),
    (AdminProvisioningError, status.HTTP_400_BAD_REQUEST),
    (NotAuthenticatedError, status.HTTP_401_UNAUTHORIZED),
    (NotAuthorizedError, status.HTTP_403_FORBIDDEN),
    (DatabaseError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]

# Where browsers are sent instead of receiving a 401/403 body
AUTH_REDIRECTS = {
    status.HTTP_401_UNAUTHORIZED: "/auth",
    status.HTTP_403_FORBIDDEN: "/unauthorized",
}


def wants_html(request: Request) -> bool:
    return "text/html" in (request.headers.get("accept") or "").lower()


def status_code_for(exc: BaseServiceError) -> int:
    for error_cls, code in ERROR_STATUS_CODES:
        if isinstance(exc, error_cls):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@app.exception_handler(BaseServiceError)
async def service_error_handler(request: Request, exc: BaseServiceError):
    code = status_code_for(exc)

    if code in AUTH_REDIRECTS and wants_html(request):
        return RedirectResponse(url=AUTH_REDIRECTS[code], status_code=status.HTTP_303_SEE_OTHER)

    if code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}", exc_info=exc)
        return JSONResponse(status_code=code, content={"detail": "The operation failed"})

    content = {"detail": str(exc)}
    if isinstance(exc, ReferenceInUseError):
        content["listing_count"] = exc.listing_count
    if isinstance(exc, InvalidTransitionError):
        content["current_status"] = exc.current.value
        content["target_status"] = exc.target.value

    headers = {"WWW-Authenticate": "Bearer"} if code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(status_code=code, content=content, headers=headers)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": jsonable_errors(exc)},
    )


def jsonable_errors(exc: RequestValidationError):
    # ctx can carry the raw exception object, which is not serialisable
    return [{k: v for k, v in error.items() if k in ("type", "loc", "msg")} for error in exc.errors()]


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": "Not Found", "path": request.url.path},
        )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

def section_gate(section: AppSection):
    return [Depends(require_admin), Depends(require_section(section))]


# Public
app.include_router(health.router)
app.include_router(auth.router)


@app.get("/unauthorized", tags=["auth"])
async def unauthorized():
    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN,
        content={"detail": "You do not have access to this section"},
    )


# Gated
app.include_router(reports.dashboard_router, dependencies=section_gate(AppSection.DASHBOARD))
app.include_router(create_new.router, dependencies=section_gate(AppSection.CREATE_NEW))
app.include_router(pipeline.cpv_router, dependencies=section_gate(AppSection.CPV))
app.include_router(pipeline.assign_router, dependencies=section_gate(AppSection.ASSIGN))
app.include_router(pipeline.worklist_router, dependencies=section_gate(AppSection.WORKLIST))
app.include_router(pipeline.nr_router, dependencies=section_gate(AppSection.NR))
app.include_router(pipeline.np_router, dependencies=section_gate(AppSection.NP))
app.include_router(pipeline.pr_router, dependencies=section_gate(AppSection.PR))
app.include_router(listings.router, dependencies=[Depends(require_admin)])
app.include_router(listings.deleted_router, dependencies=section_gate(AppSection.DELETED_LISTINGS))
app.include_router(reports.data_block_router, dependencies=section_gate(AppSection.DATA_BLOCK))
app.include_router(reports.trend_router, dependencies=section_gate(AppSection.TREND_ANALYSIS))
app.include_router(reports.draft_router, dependencies=section_gate(AppSection.DRAFT))
app.include_router(admin.router, dependencies=section_gate(AppSection.ADMIN_PRIVILEGES))
