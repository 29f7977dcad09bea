"""
Invocation Handler

Transport-neutral entry point: takes the raw body and its base64 flag, runs
the pipeline and maps the outcome to a status code and a short body. Both
the Lambda handler and the FastAPI route delegate here.
"""

import time
import traceback
import uuid
from dataclasses import dataclass
from typing import Optional, Union

from cutout.core.exceptions import CutoutBaseException
from cutout.core.logging import LogContext, get_logger
from cutout.core.metrics import record_invocation
from cutout.pipeline.decoder import decode_request
from cutout.pipeline.orchestrator import ImagePipeline, assemble_response

logger = get_logger(__name__)

JSON_CONTENT_TYPE = "application/json"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"


@dataclass(frozen=True)
class InvocationResponse:
    status_code: int
    body: str
    content_type: str = TEXT_CONTENT_TYPE


def handle_invocation(
    body: Union[str, bytes, None],
    is_base64_encoded: bool,
    pipeline: ImagePipeline,
    request_id: Optional[str] = None
) -> InvocationResponse:
    """
    Run one invocation end to end.

    Never raises: pipeline errors become their status code and public
    message, anything unexpected becomes a 500.
    """
    request_id = request_id or str(uuid.uuid4())
    start = time.time()

    with LogContext(request_id=request_id):
        logger.info("invocation_received", base64=is_base64_encoded)

        try:
            request = decode_request(body, is_base64_encoded)
            urls = pipeline.run(request)
            response = InvocationResponse(
                status_code=200,
                body=assemble_response(urls),
                content_type=JSON_CONTENT_TYPE
            )
            logger.info("invocation_completed", image_count=len(urls))

        except CutoutBaseException as exc:
            log = logger.warning if exc.code < 500 else logger.error
            log(
                "invocation_failed",
                error=exc.message,
                error_type=type(exc).__name__,
                code=exc.code,
                failed_stage=exc.stage,
                details=exc.details
            )
            response = InvocationResponse(status_code=exc.code, body=exc.public_message)

        except Exception as exc:
            logger.error(
                "unhandled_exception",
                error=str(exc),
                error_type=type(exc).__name__,
                traceback=traceback.format_exc()
            )
            response = InvocationResponse(status_code=500, body="Internal Server Error")

        record_invocation(response.status_code, time.time() - start)
        return response
