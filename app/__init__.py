"""
AI Image Compressor API Application

This package implements a FastAPI application that compresses uploaded
images with Pillow, optionally guided by AI services:
- Object detection (salient regions raise the encode quality)
- Text generation (format and quality recommendations)

Features include:
- Single and batch uploads
- WebP, JPEG, PNG and AVIF output
- Quality metrics (PSNR, SSIM)
- Streamed ZIP download of compressed results
"""
import os

from app.config import settings

# Directory holding both original and compressed files
UPLOAD_DIR = settings.UPLOAD_DIR
os.makedirs(UPLOAD_DIR, exist_ok=True)

# Export the app instance
from app.api import app

__all__ = ['app', 'UPLOAD_DIR']
