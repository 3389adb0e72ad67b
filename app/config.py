"""
Application settings read from the environment.

A ``.env`` file in the working directory is loaded first, so local
development can keep API keys out of the shell.
"""
import os
from typing import List

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Runtime configuration for the compression service"""

    APP_NAME: str = "AI Image Compressor API"
    APP_VERSION: str = "2.0.0"

    # Server
    PORT: int = int(os.getenv("PORT", "8000"))
    WORKERS: int = int(os.getenv("WORKERS", "1"))
    DEBUG: bool = os.getenv("DEBUG", "").lower() in ("true", "1", "yes")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    CORS_ORIGINS: List[str] = [
        origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()
    ]

    # Storage
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./compressor.db")
    UPLOAD_DIR: str = os.path.abspath(os.getenv("UPLOAD_DIR", "uploads"))

    # Upload limits
    MAX_FILE_SIZE: int = int(os.getenv("MAX_FILE_SIZE", str(10 * 1024 * 1024)))
    MAX_FILES: int = int(os.getenv("MAX_FILES", "10"))

    # Object detection
    HUGGING_FACE_API_KEY: str = os.getenv("HUGGING_FACE_API_KEY", "")
    DETECTION_API_URL: str = os.getenv(
        "DETECTION_API_URL",
        "https://api-inference.huggingface.co/models/facebook/detr-resnet-50",
    )
    DETECTION_TIMEOUT: float = float(os.getenv("DETECTION_TIMEOUT", "30"))

    # Text generation (any OpenAI-compatible endpoint)
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    GENERATION_BASE_URL: str = os.getenv(
        "GENERATION_BASE_URL",
        "https://generativelanguage.googleapis.com/v1beta/openai/",
    )
    GENERATION_MODEL: str = os.getenv("GENERATION_MODEL", "gemini-2.0-flash")
    GENERATION_TIMEOUT: float = float(os.getenv("GENERATION_TIMEOUT", "30"))

    @property
    def features(self) -> dict:
        """Which optional AI integrations are configured."""
        return {
            "regionDetection": bool(self.HUGGING_FACE_API_KEY),
            "aiRecommendations": bool(self.GEMINI_API_KEY),
            "batchUpload": self.MAX_FILES > 1,
            "formats": ["webp", "jpeg", "png", "avif"],
        }


settings = Settings()
