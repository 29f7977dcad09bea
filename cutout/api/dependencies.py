"""
Pipeline Dependencies

Builds a fresh ImagePipeline per invocation from the process-wide settings.
Used by FastAPI Depends() and by the Lambda handler; tests override
get_pipeline to inject fakes.
"""

from cutout.clients.background_removal import FreepikClient
from cutout.clients.download import HttpImageDownloader
from cutout.clients.generation import IdeogramClient
from cutout.core.config import Settings, settings
from cutout.core.storage import get_object_store
from cutout.pipeline.orchestrator import ImagePipeline


def build_pipeline(config: Settings) -> ImagePipeline:
    """Wire the production clients for one invocation."""
    return ImagePipeline(
        generator=IdeogramClient(config),
        remover=FreepikClient(config),
        store=get_object_store(config),
        downloader=HttpImageDownloader(config),
    )


def get_pipeline() -> ImagePipeline:
    """Get a pipeline instance - ready for FastAPI Depends()."""
    return build_pipeline(settings)
