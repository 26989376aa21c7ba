# app/main.py
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, status
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles

from app.core.config import get_settings
from app.database import create_db_and_tables

# Import models so SQLModel metadata is populated before create_all()
from app.models import product as _product_models  # noqa: F401

# Routers
from app.routers.products import router as products_router

settings = get_settings()

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Verify DB connectivity and create tables.

    Shutdown:
      - No special cleanup needed for sync engine.
    """
    logger.info("Startup: connecting to database...")
    try:
        create_db_and_tables()
        logger.info("Startup: DB connection OK, tables verified.")
    except Exception as e:
        logger.error(f"Startup: DB connection FAILED: {e}")
        raise
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(products_router)

# Uploaded images, served as-is. The directory may not exist until the
# first upload, so it is not checked at startup.
app.mount(
    settings.IMAGE_URL_PREFIX,
    StaticFiles(directory=settings.IMAGE_DIR, check_dir=False),
    name="images",
)


@app.get("/", include_in_schema=False)
def root():
    return RedirectResponse(url="/products", status_code=status.HTTP_303_SEE_OTHER)


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "ok", "service": "product-catalog"}
