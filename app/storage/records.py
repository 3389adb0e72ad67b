"""
Compression record model and the store that creates and reads records.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import Column, DateTime, Float, Integer, JSON, String, Text
from sqlalchemy.orm import Session

from app.storage.database import Base
from app.utils.metrics import calculate_compression_ratio

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CompressionRecord(Base):
    __tablename__ = "compression_records"

    id = Column(String(32), primary_key=True, default=_new_id)
    original_name = Column(String(255), nullable=False)
    original_size = Column(Integer, nullable=False)
    compressed_size = Column(Integer, nullable=False)
    compression_ratio = Column(Float, nullable=False)
    original_path = Column(String(255), nullable=False)
    compressed_path = Column(String(255), nullable=False)
    detected_regions = Column(JSON, nullable=False, default=list)
    format = Column(String(8), nullable=False)
    quality = Column(Integer, nullable=False)
    ai_suggestion = Column(Text, nullable=True)
    prompt_used = Column(Text, nullable=True)
    psnr = Column(Float, nullable=True)
    ssim = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)

    def __repr__(self):
        return f"<CompressionRecord {self.id} - {self.original_name}>"


class RecordStore:
    """Create-and-read access to compression records.

    Records are immutable once created: there is no update or delete, and the
    compression ratio is always derived here from the two measured sizes.
    """

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        original_name: str,
        original_size: int,
        compressed_size: int,
        original_path: str,
        compressed_path: str,
        image_format: str,
        quality: int,
        detected_regions: Optional[List[Dict[str, Any]]] = None,
        ai_suggestion: Optional[str] = None,
        prompt_used: Optional[str] = None,
        psnr: Optional[float] = None,
        ssim: Optional[float] = None,
    ) -> CompressionRecord:
        record = CompressionRecord(
            original_name=original_name,
            original_size=original_size,
            compressed_size=compressed_size,
            compression_ratio=calculate_compression_ratio(original_size, compressed_size),
            original_path=original_path,
            compressed_path=compressed_path,
            detected_regions=list(detected_regions or []),
            format=image_format,
            quality=quality,
            ai_suggestion=ai_suggestion,
            prompt_used=prompt_used,
            psnr=psnr,
            ssim=ssim,
        )
        try:
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to store record for {original_name}: {e}")
            raise
        logger.info(f"Stored record {record.id} for {original_name}")
        return record

    def get(self, record_id: str) -> Optional[CompressionRecord]:
        return self.db.get(CompressionRecord, record_id)

    def get_many(self, record_ids: List[str]) -> List[CompressionRecord]:
        """Fetch records for the given ids, keeping the requested order and skipping unknown ids."""
        if not record_ids:
            return []
        found = {
            record.id: record
            for record in self.db.query(CompressionRecord).filter(CompressionRecord.id.in_(record_ids))
        }
        return [found[record_id] for record_id in record_ids if record_id in found]

    def recent(self, limit: int = 10) -> List[CompressionRecord]:
        return (
            self.db.query(CompressionRecord)
            .order_by(CompressionRecord.created_at.desc(), CompressionRecord.id.desc())
            .limit(limit)
            .all()
        )
