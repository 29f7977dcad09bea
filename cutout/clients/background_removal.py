"""
Background Removal Client (Freepik)

Submits a publicly reachable image URL to the removal endpoint and parses
the reply into a BackgroundRemovalResult.
"""

import json
from abc import ABC, abstractmethod
from typing import Optional

import httpx
from pydantic import ValidationError

from cutout.core.config import Settings
from cutout.core.exceptions import NetworkError, ParseError
from cutout.core.logging import get_logger
from cutout.core.metrics import record_external_call
from cutout.pipeline.schemas import BackgroundRemovalResult

logger = get_logger(__name__)

SERVICE = "freepik"


class BackgroundRemover(ABC):
    """Capability: remove the background of an image addressed by URL."""

    @abstractmethod
    def remove(self, image_url: str) -> str:
        """
        Submit an image URL for background removal.

        Returns:
            The raw response body

        Raises:
            ConfigError: If the API key is not configured
            NetworkError: On transport failure
        """
        pass


class FreepikClient(BackgroundRemover):
    def __init__(self, config: Settings, transport: Optional[httpx.BaseTransport] = None):
        self.config = config
        self.transport = transport

    def remove(self, image_url: str) -> str:
        api_key = self.config.require("FREEPIK_API_KEY")

        logger.info("background_removal_sending", image_url=image_url)

        try:
            with httpx.Client(
                timeout=self.config.REMOVAL_TIMEOUT_SECONDS,
                transport=self.transport
            ) as client:
                response = client.post(
                    self.config.FREEPIK_API_URL,
                    data={"image_url": image_url},
                    headers={"x-freepik-api-key": api_key}
                )
                body = response.text
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            record_external_call(SERVICE, status="error")
            raise NetworkError(
                f"Error sending request to Freepik: {e}",
                service=SERVICE,
                public_message="Error removing image background"
            ) from e

        record_external_call(
            SERVICE,
            status="success" if response.is_success else "error",
            http_status=response.status_code
        )
        logger.info(
            "background_removal_response_received",
            http_status=response.status_code,
            body_size=len(body)
        )

        return body


def parse_removal_result(text: str) -> BackgroundRemovalResult:
    """
    Parse the removal endpoint's reply.

    Raises:
        ParseError: If the reply is not a JSON object or carries no image URL
    """
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"Error unmarshalling freepik response: {e}", code=500) from e

    if not isinstance(payload, dict):
        raise ParseError("Freepik response is not a JSON object", code=500)

    try:
        result = BackgroundRemovalResult.model_validate(payload)
    except ValidationError as e:
        raise ParseError(f"Unexpected freepik response shape: {e}", code=500) from e

    if result.image_url is None:
        raise ParseError(
            "Freepik response carries no image URL",
            code=500,
            details={"fields": sorted(payload.keys())}
        )

    return result
