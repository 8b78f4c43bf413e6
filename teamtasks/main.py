# teamtasks/main.py

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import os
import logging

from teamtasks.api.attachment import router as attachment_router
from teamtasks.api.auth import router as auth_router
from teamtasks.api.comment import router as comment_router
from teamtasks.api.project import router as project_router
from teamtasks.api.task import router as task_router
from teamtasks.api.team import router as team_router
from teamtasks.api.user import router as user_router

from teamtasks.core.settings import settings
from teamtasks.core.exceptions import AppError, NotAuthenticatedError, StorageError, TokenError
from teamtasks.database import engine
from teamtasks.dependencies import get_storage
from teamtasks.models.base import Base
from teamtasks.schemas.response import ErrorDetail, ErrorResponse
import teamtasks.models  # noqa: F401  registers every table on Base.metadata

# Logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("TaskHub.API")

app = FastAPI(
    title="TaskHub API",
    version="1.0.0",
    description="Teams, projects, tasks, comments and attachments with role-based access",
)

# Middlewares
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(auth_router)
app.include_router(user_router)
app.include_router(team_router)
app.include_router(project_router)
app.include_router(task_router)
app.include_router(comment_router)
app.include_router(attachment_router)

# Health check & root
@app.get("/", tags=["Health"])
def root():
    return {"status": "TaskHub API is running!"}

@app.get("/health", tags=["Health"])
def health():
    return {"ok": True}

@app.on_event("startup")
async def startup_event():
    logger.info("Starting TaskHub API")
    Base.metadata.create_all(bind=engine)
    if settings.STORAGE_AUTO_CREATE_BUCKET:
        try:
            get_storage().ensure_bucket()
        except StorageError:
            logger.error(f"Bucket '{settings.STORAGE_BUCKET}' is not available; uploads will fail")

@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Stopping TaskHub API")

# Exception handlers

def _error_response(status_code: int, code: str, message: str, headers=None) -> JSONResponse:
    body = ErrorResponse(error=ErrorDetail(code=code, message=message))
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True), headers=headers)

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if isinstance(exc, TokenError):
        logger.warning(f"Token rejected on {request.url.path}: {exc.reason}")
    elif exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.url.path}: {exc.message}")
    headers = None
    if isinstance(exc, (TokenError, NotAuthenticatedError)):
        headers = {"WWW-Authenticate": "Bearer"}
    return _error_response(exc.status_code, exc.code, exc.message, headers)

@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    # Raised by FastAPI itself, e.g. a missing bearer token
    code = "AUTHENTICATION_FAILED" if exc.status_code == 401 else "HTTP_ERROR"
    return _error_response(exc.status_code, code, str(exc.detail), getattr(exc, "headers", None))

@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return _error_response(500, "INTERNAL_ERROR", "An unexpected error occurred")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "teamtasks.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8000)),
        reload=settings.DEBUG,
    )
