"""
API module for the image compression application.
"""
import os
import logging
import platform
import shutil
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import psutil
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from PIL import features as pil_features

from app import UPLOAD_DIR
from app.config import settings
from app.api.errors import register_exception_handlers
from app.api.images import router as images_router
from app.api.recommendations import router as recommendations_router
from app.storage.database import check_connection, init_db
from app.utils.metrics import get_cpu_mem

# Set up logging
logger = logging.getLogger(__name__)

STATIC_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "static")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create database tables on first start."""
    logger.info(f"Storing uploads in {UPLOAD_DIR}")
    init_db()
    yield


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="""
    API for compressing images with optional AI guidance:
    - Object detection raises quality for images with people, faces or text
    - Text generation recommends format and quality from a usage description

    Provides single and batch uploads, quality metrics and ZIP downloads.
    """,
    version=settings.APP_VERSION,
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers
app.include_router(images_router, prefix="/api")
app.include_router(recommendations_router, prefix="/api")


# Health check endpoints
@app.get("/api/health")
async def health_check():
    """Check if the API and its database are up."""
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": "Connected" if check_connection() else "Disconnected",
        "features": settings.features
    }


@app.get("/api/health/detailed")
async def detailed_health_check():
    """
    Provides detailed health information including system metrics and component status.
    """
    # System info
    system_info = {
        **get_cpu_mem(),
        "disk_usage": psutil.disk_usage('/').percent,
        "python_version": platform.python_version(),
        "platform": platform.platform()
    }

    # Check encoder support
    codec_status = {
        "jpeg": pil_features.check("jpg"),
        "webp": pil_features.check("webp"),
        "avif": pil_features.check("avif"),
        "png": pil_features.check("zlib")
    }

    # Check upload directory
    upload_status = {"path": UPLOAD_DIR, "exists": os.path.isdir(UPLOAD_DIR)}
    if upload_status["exists"]:
        test_file = os.path.join(UPLOAD_DIR, ".write_test")
        try:
            with open(test_file, 'w') as f:
                f.write("test")
            os.remove(test_file)
            upload_status["writable"] = True
        except OSError as e:
            upload_status["writable"] = False
            upload_status["write_error"] = str(e)

        upload_status["free_space_mb"] = round(shutil.disk_usage(UPLOAD_DIR).free / (1024 * 1024), 2)

    return {
        "status": "OK",
        "version": settings.APP_VERSION,
        "database": "Connected" if check_connection() else "Disconnected",
        "features": settings.features,
        "system": system_info,
        "codecs": codec_status,
        "upload_directory": upload_status,
        "timestamp": time.time()
    }


# Static files: stored images and the web client
app.mount("/uploads", StaticFiles(directory=UPLOAD_DIR), name="uploads")
app.mount("/", StaticFiles(directory=STATIC_DIR, html=True), name="client")
