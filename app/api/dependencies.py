"""
FastAPI dependencies shared by the route modules.
"""
from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from app.core.detection import RegionDetector
from app.core.recommendation import Recommender
from app.storage.blobs import BlobStore
from app.storage.database import get_db
from app.storage.records import RecordStore


def get_record_store(db: Session = Depends(get_db)) -> RecordStore:
    return RecordStore(db)


@lru_cache()
def get_blob_store() -> BlobStore:
    return BlobStore()


@lru_cache()
def get_detector() -> RegionDetector:
    return RegionDetector()


@lru_cache()
def get_recommender() -> Recommender:
    return Recommender()
