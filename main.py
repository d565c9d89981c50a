# main.py
import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from db import init_db
from services.submission_store import ensure_data_storage
from settings import get_settings
from utils.logging_setup import setup_logging

# Import routers
from routers import health as health_router
from routers import submissions as submissions_router
from routers import applications as applications_router

logger = logging.getLogger(__name__)

settings = get_settings()

app = FastAPI(title=settings.app_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in settings.cors_origin.split(",") if origin.strip()] or ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def api_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"ok": False, "error": exc.detail})


@app.on_event("startup")
def bootstrap_storage():
    current = get_settings()
    setup_logging(current)
    ensure_data_storage(current)

    if init_db():
        logger.info("Database tables ready")
    else:
        logger.info("DATABASE_URL not set, storing submissions as local JSON in %s", current.data_dir)

    template_path = current.pdf_template_path
    if template_path and Path(template_path).is_file():
        logger.info("Fillable NoLimitCap PDF template found: %s", template_path)
    else:
        logger.warning(
            "Fillable NoLimitCap PDF template not found at %s. Using renderer fallback until template is added.",
            template_path,
        )


# Register routers
app.include_router(health_router.router)
app.include_router(submissions_router.router)
app.include_router(applications_router.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=settings.host, port=settings.port)
