"""
Image upload, lookup and batch download endpoints.

Uploads are processed one file at a time: store the original, detect
regions, optionally ask for AI settings, compress, and record the result.
"""
import os
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import StreamingResponse

from app.config import settings
from app.api.dependencies import get_blob_store, get_detector, get_recommender, get_record_store
from app.api.errors import ProcessingError
from app.core.archive import archive_names, stream_zip
from app.core.compressor import (
    DEFAULT_FORMAT,
    DEFAULT_QUALITY,
    FILE_EXTENSIONS,
    ImageFormat,
    compress_image,
    parse_format
)
from app.core.detection import RegionDetector
from app.core.recommendation import Recommender
from app.models.compression import (
    BatchDownloadRequest,
    CompressionDetail,
    CompressionDetailResponse,
    CompressionResult,
    CompressionSummary,
    RecentCompressionsResponse,
    UploadResponse
)
from app.storage.blobs import BlobStore
from app.storage.records import CompressionRecord, RecordStore
from app.utils.file_handling import discard_on_error, read_image_upload

# Set up logging
logger = logging.getLogger(__name__)

# Create router
router = APIRouter(tags=["Images"])

RESPONSE_REGION_LIMIT = 5
RECENT_LIMIT = 10


def _summary(record: CompressionRecord) -> CompressionSummary:
    return CompressionSummary(
        id=record.id,
        original_name=record.original_name,
        original_size=record.original_size,
        compressed_size=record.compressed_size,
        compression_ratio=record.compression_ratio,
        format=record.format,
        created_at=record.created_at
    )


def _result(record: CompressionRecord, base_url: str, store: BlobStore) -> CompressionResult:
    return CompressionResult(
        **_summary(record).model_dump(),
        original_url=store.public_url(base_url, record.original_path),
        compressed_url=store.public_url(base_url, record.compressed_path),
        regions=list(record.detected_regions or [])[:RESPONSE_REGION_LIMIT],
        quality=record.quality,
        ai_suggestion=record.ai_suggestion,
        prompt_used=record.prompt_used,
        psnr=record.psnr,
        ssim=record.ssim
    )


async def process_image(
    filename: str,
    content: bytes,
    image_format: ImageFormat,
    quality: int,
    prompt: Optional[str],
    blobs: BlobStore,
    records: RecordStore,
    detector: RegionDetector,
    recommender: Recommender
) -> CompressionRecord:
    """
    Run one validated image through detection, recommendation and compression.

    Files written for this image are removed again if a later step fails.
    """
    with discard_on_error(blobs) as written:
        original_path = blobs.original_name(filename)
        blobs.save(original_path, content)
        written.append(original_path)

        logger.info(f"Detecting regions for {filename}...")
        regions = await detector.detect(content)

        ai_suggestion = None
        if prompt:
            recommendation = await recommender.recommend_quality(prompt)
            image_format = parse_format(recommendation["format"]) or DEFAULT_FORMAT
            quality = recommendation["quality"]
            ai_suggestion = recommendation["context"]

        compressed_path = blobs.compressed_name(
            original_path, FILE_EXTENSIONS[image_format], image_format.value
        )
        written.append(compressed_path)

        logger.info(f"Applying adaptive compression to {filename} ({image_format.value}, q={quality})...")
        result = await run_in_threadpool(
            compress_image,
            blobs.path(original_path),
            blobs.path(compressed_path),
            image_format,
            quality,
            regions
        )

        return records.create(
            original_name=filename,
            original_size=len(content),
            compressed_size=result["compressed_size"],
            original_path=original_path,
            compressed_path=compressed_path,
            image_format=result["format"],
            quality=result["quality"],
            detected_regions=regions,
            ai_suggestion=ai_suggestion,
            prompt_used=prompt,
            psnr=result["psnr"],
            ssim=result["ssim"]
        )


@router.post("/upload", response_model=UploadResponse)
async def upload_images(
    request: Request,
    images: List[UploadFile] = File(...),
    format: str = Form(DEFAULT_FORMAT.value),
    quality: int = Form(DEFAULT_QUALITY),
    prompt: Optional[str] = Form(None),
    blobs: BlobStore = Depends(get_blob_store),
    records: RecordStore = Depends(get_record_store),
    detector: RegionDetector = Depends(get_detector),
    recommender: Recommender = Depends(get_recommender)
):
    """
    Compress one or more uploaded images.

    - **images**: Up to 10 image files, 10MB each
    - **format**: Output format (webp, jpeg, png, avif), not checked when a prompt is given
    - **quality**: Output quality (0-100)
    - **prompt**: Optional description of the image's use; when given, AI
      recommended format and quality replace the two fields above

    Returns:
        A single result for one file, or a list of results for a batch
    """
    if not images:
        raise HTTPException(status_code=400, detail="No image file provided")
    if len(images) > settings.MAX_FILES:
        raise HTTPException(status_code=400, detail=f"Too many files (limit {settings.MAX_FILES})")

    prompt = prompt.strip() if prompt else None

    # With a prompt the recommendation replaces format and quality
    image_format = parse_format(format) or DEFAULT_FORMAT
    if not prompt:
        if parse_format(format) is None:
            raise HTTPException(status_code=400, detail=f"Unsupported format: {format}")
        if not 0 <= quality <= 100:
            raise HTTPException(status_code=400, detail="Quality must be between 0 and 100")

    # Validate every file before writing anything
    contents = [await read_image_upload(image) for image in images]

    created = []
    for image, content in zip(images, contents):
        filename = image.filename or "image"
        try:
            record = await process_image(
                filename, content, image_format, quality, prompt,
                blobs, records, detector, recommender
            )
        except Exception as e:
            logger.error(f"Upload error for {filename}: {e}", exc_info=True)
            raise ProcessingError("Failed to process image", details=str(e))
        created.append(_result(record, str(request.base_url), blobs))

    logger.info(f"Processed {len(created)} image(s)")
    return UploadResponse(data=created[0] if len(created) == 1 else created)


@router.get("/image/{image_id}", response_model=CompressionDetailResponse)
async def get_image(
    image_id: str,
    request: Request,
    blobs: BlobStore = Depends(get_blob_store),
    records: RecordStore = Depends(get_record_store)
):
    """Fetch a stored compression record with public URLs for both files."""
    record = records.get(image_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Image not found")

    result = _result(record, str(request.base_url), blobs)
    detail = CompressionDetail(
        **result.model_dump(),
        original_path=record.original_path,
        compressed_path=record.compressed_path,
        detected_regions=list(record.detected_regions or [])
    )
    return CompressionDetailResponse(data=detail)


@router.get("/recent", response_model=RecentCompressionsResponse)
async def recent_compressions(records: RecordStore = Depends(get_record_store)):
    """The 10 most recent compressions, newest first."""
    return RecentCompressionsResponse(data=[_summary(record) for record in records.recent(RECENT_LIMIT)])


@router.post("/download-batch")
async def download_batch(
    body: BatchDownloadRequest,
    blobs: BlobStore = Depends(get_blob_store),
    records: RecordStore = Depends(get_record_store)
):
    """
    Download compressed images as a ZIP archive.

    - **imageIds**: Record ids to include; unknown ids and files no longer on
      disk are skipped

    Returns:
        A streamed ZIP archive
    """
    if not body.image_ids:
        raise HTTPException(status_code=400, detail="No image ids provided")

    found = [record for record in records.get_many(body.image_ids) if blobs.exists(record.compressed_path)]
    logger.info(f"Batch download: {len(found)} of {len(body.image_ids)} requested file(s) available")

    names = archive_names(
        (
            f"compressed-{os.path.splitext(record.original_name)[0]}{os.path.splitext(record.compressed_path)[1]}",
            record.compressed_path
        )
        for record in found
    )
    entries = [(blobs.path(record.compressed_path), name) for record, name in zip(found, names)]

    return StreamingResponse(
        stream_zip(entries),
        media_type="application/zip",
        headers={"Content-Disposition": "attachment; filename=compressed-images.zip"}
    )
