"""
Zero Noise - Intelligence Pipeline API
"""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..config.settings import Settings, get_settings
from ..config.startup_validation import run_startup_validation
from ..intelligence.errors import PipelineError
from ..utils.logger import setup_logging
from .dependencies import get_app_settings
from .routers import pipeline

load_dotenv(override=True)

logger = logging.getLogger(__name__)


def error_body(message: str) -> dict:
    return {"success": False, "error": message}


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_file)
    run_startup_validation(settings)
    yield


def create_app() -> FastAPI:
    app = FastAPI(title="Zero Noise", version="1.0.0", lifespan=lifespan)

    @app.exception_handler(PipelineError)
    async def pipeline_error_handler(request: Request, exc: PipelineError):
        if exc.status_code >= 500:
            logger.error(f"{request.url.path} failed: {exc.message}")
        else:
            logger.warning(f"{request.url.path} rejected: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=error_body(exc.message))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "Invalid request body")
        detail = f"{location}: {message}" if location else message
        return JSONResponse(status_code=400, content=error_body(detail))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.url.path}")
        return JSONResponse(status_code=500, content=error_body("Internal server error"))

    # Include Routers
    app.include_router(pipeline.router, prefix="/pipeline")

    @app.get("/health")
    async def health(settings: Settings = Depends(get_app_settings)):
        validation = run_startup_validation(settings, log_summary=False)
        return {
            "status": "healthy" if validation.is_valid else "degraded",
            **validation.to_dict(),
        }

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run("zeronoise.app.main:app", host=settings.host, port=settings.port)
