from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import uvicorn
import logging

from app.core.config import settings
from app.core.database import db_manager
from app.core.dependencies import create_sql_text_resolver
from app.core.sql_text import SqlTextNotFoundError
from app.api.routes import users
from app.schemas.common import ProblemDetails

# Configure logging
logging.basicConfig(level=logging.DEBUG if settings.DEBUG else logging.INFO)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup - Build SQL text resolver first so a bad SQL setup never leaves a pool open
    app.state.sql_text = create_sql_text_resolver(settings)
    try:
        await db_manager.init_pool()
        logger.info(f"{settings.APP_NAME} started")
        yield
    finally:
        # Shutdown - Stop watching SQL files, then close database pool
        app.state.sql_text.close()
        await db_manager.close_pool()
        logger.info(f"{settings.APP_NAME} stopped")

# API docs only in development; OpenAPI JSON is served from /spec
app = FastAPI(
    title=settings.APP_NAME,
    description="FastAPI backend listing users with SQL text loaded from files or package data",
    version=settings.APP_VERSION,
    lifespan=lifespan,
    openapi_url="/spec" if settings.DEBUG else None,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url=None,
)

# CORS middleware for the frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET"],  # Only GET requests allowed
    allow_headers=["*"],
)

@app.exception_handler(SqlTextNotFoundError)
async def sql_text_not_found_handler(request: Request, exc: SqlTextNotFoundError):
    logger.error(f"SQL text lookup failed for {request.url.path}: {exc}")
    problem = ProblemDetails(
        title="Internal Server Error",
        status=500,
        detail=f"SQL text for '{exc.key}' was not found",
        instance=request.url.path,
    )
    return JSONResponse(
        status_code=500,
        content=problem.model_dump(exclude_none=True),
        media_type="application/problem+json",
    )

app.include_router(users.router, prefix="/api/test", tags=["users"])

@app.get("/")
async def root():
    return {"message": settings.APP_NAME, "version": settings.APP_VERSION}

@app.get("/health/")
async def health_check():
    return {"status": "healthy", "service": "users-api"}

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8001,
        reload=settings.DEBUG
    )
