"""
Request Decoder

Turns the raw inbound body into a GenerationRequest. Bodies relayed by
webhook callers (e.g. Zapier through a Lambda Function URL) arrive base64
encoded; direct callers send plain JSON.
"""

import base64
import binascii
import json
from typing import Union

from pydantic import ValidationError

from cutout.core.exceptions import DecodeError, ParseError
from cutout.core.logging import get_logger
from cutout.pipeline.schemas import GenerationRequest

logger = get_logger(__name__)


def decode_body(body: Union[str, bytes, None], is_base64_encoded: bool) -> bytes:
    """
    Return the body as bytes, base64-decoding it first when flagged.

    Raises:
        DecodeError: If the body is flagged as base64 but is not valid base64
    """
    if body is None:
        body = b""

    if not is_base64_encoded:
        return body.encode("utf-8") if isinstance(body, str) else body

    try:
        if isinstance(body, str):
            body = body.encode("ascii")
        # MIME-style line breaks are tolerated, any other stray byte is not
        body = body.replace(b"\r", b"").replace(b"\n", b"")
        return base64.b64decode(body, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Error decoding base64 body: {e}", stage="decode") from e


def parse_request(raw: bytes) -> GenerationRequest:
    """
    Parse decoded bytes as a JSON generation request.

    Raises:
        ParseError: If the bytes are not a JSON object of the expected shape

    A literal `null` body is read as an empty request.
    """
    try:
        payload = json.loads(raw)
    except ValueError as e:
        raise ParseError(f"Error unmarshalling request body: {e}", stage="decode") from e

    if payload is None:
        payload = {}

    if not isinstance(payload, dict):
        raise ParseError("Request body is not a JSON object", stage="decode")

    try:
        return GenerationRequest.model_validate(payload)
    except ValidationError as e:
        raise ParseError(f"Request body has unexpected field types: {e}", stage="decode") from e


def decode_request(body: Union[str, bytes, None], is_base64_encoded: bool) -> GenerationRequest:
    raw = decode_body(body, is_base64_encoded)
    logger.info("request_body_decoded", size=len(raw), base64=is_base64_encoded)
    return parse_request(raw)
