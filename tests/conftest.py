import os
import shutil
import tempfile
from io import BytesIO

# Point storage at a scratch directory before the app reads its settings
TEST_DIR = tempfile.mkdtemp(prefix="compressor-tests-")
os.environ["UPLOAD_DIR"] = os.path.join(TEST_DIR, "uploads")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(TEST_DIR, 'test.db')}"
os.environ["HUGGING_FACE_API_KEY"] = ""
os.environ["GEMINI_API_KEY"] = ""

import pytest
from fastapi.testclient import TestClient
from PIL import Image, ImageDraw

from app import app, UPLOAD_DIR
from app.api.dependencies import get_detector, get_recommender
from app.storage.database import Base, engine


class FakeDetector:
    """Stands in for the detection API; returns whatever ``regions`` is set to."""

    def __init__(self):
        self.regions = []
        self.calls = 0

    async def detect(self, image_bytes):
        self.calls += 1
        return list(self.regions)


class FakeRecommender:
    """Stands in for the text-generation API with fixed answers."""

    def __init__(self):
        self.format_result = {"format": "avif", "reason": "Photographic content"}
        self.quality_result = {"quality": 60, "format": "jpeg", "context": "Social media sharing"}
        self.labels = None
        self.prompts = []

    async def recommend_format(self, labels):
        self.labels = labels
        return dict(self.format_result)

    async def recommend_quality(self, prompt):
        self.prompts.append(prompt)
        return dict(self.quality_result)


def make_image(size=(96, 64), mode="RGB", fmt="PNG") -> bytes:
    """Draw a small test picture with enough detail to compress."""
    image = Image.new(mode, size, (240, 240, 240, 255) if mode == "RGBA" else (240, 240, 240))
    draw = ImageDraw.Draw(image)
    width, height = size
    for x in range(0, width, 8):
        draw.line([(x, 0), (width - x, height)], fill=(x * 2 % 256, 90, 200 - x % 200), width=2)
    draw.ellipse([width // 4, height // 4, width // 2, height // 2], fill=(200, 40, 40))
    if mode == "RGBA":
        draw.rectangle([0, 0, width // 3, height // 3], fill=(0, 0, 0, 0))
    buffer = BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture(autouse=True)
def db_tables():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def clean_uploads():
    yield
    for name in os.listdir(UPLOAD_DIR):
        os.remove(os.path.join(UPLOAD_DIR, name))


@pytest.fixture
def detector():
    return FakeDetector()


@pytest.fixture
def recommender():
    return FakeRecommender()


@pytest.fixture
def client(detector, recommender):
    app.dependency_overrides[get_detector] = lambda: detector
    app.dependency_overrides[get_recommender] = lambda: recommender
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def png_bytes():
    return make_image()


def pytest_sessionfinish(session, exitstatus):
    shutil.rmtree(TEST_DIR, ignore_errors=True)
