"""
Generate Endpoint - Full Pipeline

POST /api/v1/generate - Generate images, remove their backgrounds and store
them. The raw body is JSON, or base64-encoded JSON when the caller sends
`X-Body-Base64: true`.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Header, Request, Response
from fastapi.concurrency import run_in_threadpool

from cutout.api.dependencies import get_pipeline
from cutout.pipeline.handler import handle_invocation
from cutout.pipeline.orchestrator import ImagePipeline

router = APIRouter()

TRUE_VALUES = {"1", "true", "yes"}


@router.post("")
async def generate_images(
    request: Request,
    x_body_base64: Optional[str] = Header(default=None),
    pipeline: ImagePipeline = Depends(get_pipeline)
):
    """
    Run the generation pipeline for one request.

    Returns `{"image_urls": [...]}` on success, or a short plain-text
    message with status 400 (undecodable body) or 500 (downstream failure).
    """
    body = await request.body()
    is_base64 = (x_body_base64 or "").strip().lower() in TRUE_VALUES

    # The pipeline blocks on network I/O; keep it off the event loop
    result = await run_in_threadpool(handle_invocation, body, is_base64, pipeline)

    return Response(
        content=result.body,
        status_code=result.status_code,
        media_type=result.content_type
    )
