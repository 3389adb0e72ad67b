"""
AI Image Compressor API Entry Point

This file serves as the main entry point for the application,
importing and running the FastAPI application defined in the app package.

Run with uvicorn:
    uvicorn main:app --reload
"""
import logging
import sys

from app.config import settings

# Configure logging based on environment variables
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Configure root logger
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format=LOG_FORMAT,
    stream=sys.stdout
)

# Set up logger
logger = logging.getLogger(__name__)

from app import app  # noqa: E402

# Check that required dependencies are installed
try:
    import PIL
    import numpy
    import skimage
    import psutil
    import httpx
    import openai
    import sqlalchemy
    logger.info("All required dependencies are available")
except ImportError as e:
    logger.critical(f"Missing required dependency: {str(e)}")
    logger.critical("Please install all dependencies: pip install -e .")
    sys.exit(1)

# Check that Pillow was built with the modern codecs
from PIL import features  # noqa: E402

for codec in ("webp", "avif"):
    if features.check(codec):
        logger.info(f"Pillow {codec} support is available")
    else:
        logger.warning(f"Pillow was built without {codec} support. {codec.upper()} output will fail.")

if not settings.HUGGING_FACE_API_KEY:
    logger.warning("HUGGING_FACE_API_KEY is not set. Region detection is disabled.")
if not settings.GEMINI_API_KEY:
    logger.warning("GEMINI_API_KEY is not set. AI recommendations will use defaults.")

# Entry point for running with uvicorn
if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting AI Image Compressor API on port {settings.PORT} with {settings.WORKERS} workers")

    uvicorn.run(
        "app:app",
        host="0.0.0.0",
        port=settings.PORT,
        workers=settings.WORKERS,
        reload=settings.DEBUG
    )
