"""
Image Downloads

Fetches image bytes from the generation endpoint's and the removal
endpoint's result URLs.
"""

from abc import ABC, abstractmethod
from typing import Optional

import httpx

from cutout.core.config import Settings
from cutout.core.exceptions import NetworkError
from cutout.core.logging import get_logger
from cutout.core.metrics import record_external_call

logger = get_logger(__name__)

SERVICE = "download"


class ImageDownloader(ABC):
    @abstractmethod
    def fetch(self, url: str) -> bytes:
        """
        Download an image.

        Raises:
            NetworkError: On transport failure or a non-2xx response
        """
        pass


class HttpImageDownloader(ImageDownloader):
    def __init__(self, config: Settings, transport: Optional[httpx.BaseTransport] = None):
        self.config = config
        self.transport = transport

    def fetch(self, url: str) -> bytes:
        try:
            with httpx.Client(
                timeout=self.config.DOWNLOAD_TIMEOUT_SECONDS,
                transport=self.transport,
                follow_redirects=True
            ) as client:
                response = client.get(url)
                response.raise_for_status()
                content = response.content
        except httpx.HTTPStatusError as e:
            record_external_call(SERVICE, status="error", http_status=e.response.status_code)
            raise NetworkError(
                f"Error fetching image {url}: HTTP {e.response.status_code}",
                service=SERVICE,
                http_status=e.response.status_code,
                public_message="Error downloading image"
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            record_external_call(SERVICE, status="error")
            raise NetworkError(
                f"Error fetching image {url}: {e}",
                service=SERVICE,
                public_message="Error downloading image"
            ) from e

        record_external_call(SERVICE, status="success", http_status=response.status_code)
        logger.info("image_downloaded", url=url, size=len(content))

        return content
