from fastapi import FastAPI

from storage_helper.config.logger import configure_logging, get_logger
from storage_helper.config.settings import settings

from storage_helper.s3.router import router as objects_router

configure_logging(level=settings.logging.level, fmt=settings.logging.format)
logger = get_logger(__name__)

app = FastAPI(
    title=settings.title,
    description=settings.description,
    version=settings.version,
    debug=settings.debug,
)


@app.on_event("startup")
async def startup_event():
    logger.info("Starting %s v%s", settings.title, settings.version)


@app.get("/health", tags=["Main"])
async def root():
    return {"app": settings.title, "version": settings.version, "status": "running"}


app.include_router(objects_router)
