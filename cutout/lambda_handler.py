"""
AWS Lambda entry point for Function URL invocations.

The Function URL delivers the body as a string and sets `isBase64Encoded`
when it had to encode it (webhook callers such as Zapier). The response
uses the Function URL payload format: statusCode, headers, body.
"""

from typing import Any, Dict

from cutout.api.dependencies import build_pipeline
from cutout.core.config import settings
from cutout.core.logging import setup_logging
from cutout.pipeline.handler import handle_invocation

setup_logging(
    log_level=settings.LOG_LEVEL,
    json_format=settings.LOG_FORMAT_JSON
)


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    result = handle_invocation(
        event.get("body"),
        bool(event.get("isBase64Encoded", False)),
        build_pipeline(settings),
        request_id=getattr(context, "aws_request_id", None)
    )

    return {
        "statusCode": result.status_code,
        "headers": {"Content-Type": result.content_type},
        "body": result.body,
    }
