"""
Pipeline Orchestration

Runs generation, then post-processes every generated image strictly in
order, then assembles the outbound JSON. There is no partial success: the
first failure propagates and already-uploaded objects are left in place.
"""

import json
from typing import List

from cutout.clients.background_removal import BackgroundRemover
from cutout.clients.download import ImageDownloader
from cutout.clients.generation import Generator
from cutout.core.exceptions import CutoutBaseException
from cutout.core.logging import get_logger
from cutout.core.storage import ObjectStore
from cutout.pipeline.schemas import GenerationRequest, PipelineResponse
from cutout.pipeline.stages import process_generated_image, run_generation_stage

logger = get_logger(__name__)


class ImagePipeline:
    """
    Generation -> post-processing loop over the capabilities it is given.

    One instance serves one invocation; nothing is shared between requests.
    """

    def __init__(
        self,
        generator: Generator,
        remover: BackgroundRemover,
        store: ObjectStore,
        downloader: ImageDownloader
    ):
        self.generator = generator
        self.remover = remover
        self.store = store
        self.downloader = downloader

    def run(self, request: GenerationRequest) -> List[str]:
        """Return the final storage URLs in the order the images were generated."""
        result = run_generation_stage(self.generator, request)

        urls: List[str] = []
        for index, record in enumerate(result.data):
            logger.info("image_record_started", index=index, total=len(result.data))
            urls.append(
                process_generated_image(
                    record,
                    request.filename,
                    self.downloader,
                    self.store,
                    self.remover
                )
            )

        return urls


def assemble_response(urls: List[str]) -> str:
    """Serialize the final URLs as {"image_urls": [...]}."""
    try:
        return json.dumps(PipelineResponse(image_urls=urls).model_dump())
    except (TypeError, ValueError) as e:
        raise CutoutBaseException(
            f"Error marshaling response: {e}",
            stage="assemble",
            public_message="Error marshaling response"
        ) from e
