import logging
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from config import Settings, get_settings
from database import build_engine, create_db_and_tables
from errors import InfrastructureError, TaskServiceError
from repository import TaskRepository
from routes import tasks
from utils import response

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[TaskRepository] = None,
) -> FastAPI:
    """
    Build the API application

    Args:
        settings: Environment settings, loaded from the environment if omitted
        repository: Task repository; built from the settings if omitted

    Returns:
        Configured FastAPI app
    """
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level)

    if repository is None:
        repository = TaskRepository(build_engine(settings))

    app = FastAPI(
        title="Task API",
        description="RESTful API for managing tasks",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.repository = repository

    # CORS configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(tasks.router, prefix="/api", tags=["tasks"])

    @app.exception_handler(TaskServiceError)
    async def handle_task_service_error(request: Request, exc: TaskServiceError):
        if isinstance(exc, InfrastructureError):
            logger.error(
                "%s %s failed: %s",
                request.method,
                request.url.path,
                exc.message,
                exc_info=exc.__cause__ or exc,
            )
        return response.error(exc.message, exc.status_code, exc.details)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return response.not_found()
        return response.error(str(exc.detail), exc.status_code)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return response.internal_error()

    @app.on_event("startup")
    def on_startup():
        """Create database tables on startup"""
        create_db_and_tables(app.state.repository.engine)

    @app.get("/")
    def read_root():
        """Root endpoint"""
        return {
            "message": "Task API is running",
            "version": "1.0.0",
            "docs": "/docs"
        }

    @app.get("/health")
    def health_check():
        """Health check endpoint"""
        return {"status": "healthy"}

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(create_app(), host="0.0.0.0", port=8000)
