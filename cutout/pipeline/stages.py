"""
Pipeline Stage Implementations

Each stage is a separate function that can be called independently.
Stages never catch and continue: any failure propagates and aborts the
invocation.
"""

from contextlib import contextmanager

from cutout.clients.background_removal import BackgroundRemover, parse_removal_result
from cutout.clients.download import ImageDownloader
from cutout.clients.generation import Generator, parse_generation_result
from cutout.core.exceptions import CutoutBaseException
from cutout.core.logging import get_logger, stage_var, with_logging
from cutout.core.metrics import track_stage_latency, images_processed_total
from cutout.core.storage import ObjectStore
from cutout.pipeline.schemas import GeneratedImage, GenerationRequest, GenerationResult

logger = get_logger(__name__)


@contextmanager
def stage_context(stage: str):
    """Tag logs, latency and any pipeline error raised inside with the stage name."""
    token = stage_var.set(stage)
    try:
        with track_stage_latency(stage):
            yield
    except CutoutBaseException as e:
        if e.stage is None:
            e.stage = stage
        raise
    finally:
        stage_var.reset(token)


# =============================================================================
# Stage 1: Generation (Ideogram)
# =============================================================================

@with_logging("generation")
def run_generation_stage(generator: Generator, request: GenerationRequest) -> GenerationResult:
    """
    Submit the request and parse the reply into image descriptors.

    Raises:
        ConfigError, NetworkError, ParseError
    """
    with stage_context("generation"):
        raw = generator.generate(request)
        result = parse_generation_result(raw)

    logger.info("generation_parsed", image_count=len(result.data), created=result.created)
    return result


# =============================================================================
# Stage 2: Post-Processing (download, store, cut out, store again)
# =============================================================================

@with_logging("post_processing")
def process_generated_image(
    record: GeneratedImage,
    filename: str,
    downloader: ImageDownloader,
    store: ObjectStore,
    remover: BackgroundRemover
) -> str:
    """
    Run the download -> upload -> remove -> download -> upload sequence for
    one descriptor and return the final public URL.

    Both uploads use the same key, so the cut-out image replaces the
    generated one.
    """
    logger.info("image_processing_started", source_url=record.url, seed=record.seed)

    with stage_context("download_generated"):
        image_data = downloader.fetch(record.url)

    with stage_context("upload_generated"):
        stored = store.upload(image_data, filename, content_type="image/png")
    logger.info("generated_image_stored", url=stored.url)

    with stage_context("remove_background"):
        raw = remover.remove(stored.url)
        removal = parse_removal_result(raw)
    logger.info("background_removed", result_url=removal.image_url)

    with stage_context("download_processed"):
        processed = downloader.fetch(removal.image_url)

    with stage_context("upload_processed"):
        final = store.upload(processed, filename, content_type="image/png")
    logger.info("processed_image_stored", url=final.url)

    images_processed_total.inc()
    return final.url
