"""
Image Generation Client (Ideogram)

Builds the multipart form for the generation endpoint, sends it and parses
the JSON reply into a GenerationResult.
"""

import json
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

import httpx
from pydantic import ValidationError

from cutout.core.config import Settings
from cutout.core.exceptions import NetworkError, ParseError
from cutout.core.logging import get_logger
from cutout.core.metrics import record_external_call
from cutout.pipeline.schemas import GenerationRequest, GenerationResult

logger = get_logger(__name__)

SERVICE = "ideogram"


class Generator(ABC):
    """Capability: turn a GenerationRequest into the generation endpoint's raw reply."""

    @abstractmethod
    def generate(self, request: GenerationRequest) -> str:
        """
        Submit a generation request.

        Returns:
            The raw response body. Status codes are not interpreted.

        Raises:
            ConfigError: If the API key is not configured
            NetworkError: On connection failure or timeout
        """
        pass


def build_form_fields(request: GenerationRequest) -> List[Tuple[str, str]]:
    """
    Flatten a request into ordered multipart form fields.

    Resolution wins over aspect ratio; the two are never sent together.
    Palette members keep their input order and are indexed from 0.
    """
    fields = [("prompt", request.prompt)]

    if request.resolution is not None:
        fields.append(("resolution", request.resolution))
    elif request.aspect_ratio is not None:
        fields.append(("aspect_ratio", request.aspect_ratio))

    if request.num_images is not None:
        fields.append(("num_images", str(request.num_images)))

    if request.style_type is not None:
        fields.append(("style_type", request.style_type))

    if request.colour_palette is not None:
        for i, member in enumerate(request.colour_palette.members):
            prefix = f"colour_palette[members][{i}]"
            fields.append((f"{prefix}[color_hex]", member.color_hex))
            if member.color_weight is not None:
                fields.append((f"{prefix}[color_weight]", str(member.color_weight)))

    return fields


class IdeogramClient(Generator):
    """Ideogram v3 generate endpoint over httpx."""

    def __init__(self, config: Settings, transport: Optional[httpx.BaseTransport] = None):
        self.config = config
        self.transport = transport

    def generate(self, request: GenerationRequest) -> str:
        api_key = self.config.require("API_KEY")
        fields = build_form_fields(request)

        # (None, value) entries make httpx emit plain form-data fields
        files = [(name, (None, value)) for name, value in fields]
        headers = {"Api-Key": api_key}

        logger.info(
            "generation_request_sending",
            url=self.config.IDEOGRAM_API_URL,
            field_names=[name for name, _ in fields]
        )

        try:
            with httpx.Client(
                timeout=self.config.GENERATION_TIMEOUT_SECONDS,
                transport=self.transport
            ) as client:
                response = client.post(
                    self.config.IDEOGRAM_API_URL,
                    files=files,
                    headers=headers
                )
                body = response.text
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            record_external_call(SERVICE, status="error")
            raise NetworkError(
                f"Error sending request to Ideogram: {e}",
                service=SERVICE
            ) from e

        record_external_call(
            SERVICE,
            status="success" if response.is_success else "error",
            http_status=response.status_code
        )
        logger.info(
            "generation_response_received",
            http_status=response.status_code,
            body_size=len(body)
        )

        return body


def parse_generation_result(text: str) -> GenerationResult:
    """
    Parse the generation endpoint's reply.

    Raises:
        ParseError: If the reply is not a JSON object of the expected shape
    """
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"Error unmarshalling ideogram response: {e}", code=500) from e

    if not isinstance(payload, dict):
        raise ParseError("Ideogram response is not a JSON object", code=500)

    try:
        return GenerationResult.model_validate(payload)
    except ValidationError as e:
        raise ParseError(f"Unexpected ideogram response shape: {e}", code=500) from e
