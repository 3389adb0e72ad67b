"""
Client for a hosted object-detection model.

The image bytes are posted as-is to an inference endpoint which answers with
a JSON array of ``{"label", "score", "box"}`` detections. Detection is an
enhancement only: every failure is logged and reported as "no regions".
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from app.config import settings

logger = logging.getLogger(__name__)


class RegionDetector:
    """Detects salient regions in an image through an HTTP inference API."""

    def __init__(
        self,
        api_url: str = settings.DETECTION_API_URL,
        api_key: str = settings.HUGGING_FACE_API_KEY,
        timeout: float = settings.DETECTION_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.api_url = api_url
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    @property
    def is_available(self) -> bool:
        return bool(self.api_key and self.api_url)

    async def detect(self, image_bytes: bytes) -> List[Dict[str, Any]]:
        """
        Run object detection on raw image bytes.

        Returns:
            The detections exactly as returned by the API, or an empty list
            if the call fails for any reason
        """
        if not self.is_available:
            logger.warning("Region detection is not configured, skipping")
            return []

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/octet-stream",
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.api_url, content=image_bytes, headers=headers)
                response.raise_for_status()
                detections = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"AI region detection error: HTTP {e.response.status_code}")
            return []
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"AI region detection error: {e}")
            return []

        if not isinstance(detections, list):
            logger.error(f"AI region detection returned unexpected payload: {type(detections).__name__}")
            return []

        logger.info(f"Detected {len(detections)} region(s)")
        return detections


def region_labels(regions: List[Dict[str, Any]]) -> List[str]:
    """Distinct labels of the detected regions, in first-seen order."""
    labels = []
    for region in regions:
        label = region.get("label") if isinstance(region, dict) else None
        if isinstance(label, str) and label not in labels:
            labels.append(label)
    return labels
