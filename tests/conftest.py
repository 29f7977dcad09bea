import json
from typing import AsyncGenerator, Dict, List, Optional, Tuple

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from cutout.clients.background_removal import BackgroundRemover
from cutout.clients.download import ImageDownloader
from cutout.clients.generation import Generator
from cutout.core.config import Settings
from cutout.core.exceptions import NetworkError, StorageError
from cutout.core.storage import ObjectStore, object_key, public_url
from cutout.pipeline.orchestrator import ImagePipeline
from cutout.pipeline.schemas import StoredImage

BUCKET = "test-bucket"
FOLDER = "cutouts"


def ideogram_reply(urls: List[str]) -> str:
    return json.dumps({
        "created": "2025-01-01T00:00:00Z",
        "data": [
            {
                "prompt": "A futuristic cityscape",
                "resolution": "1024x1024",
                "is_image_safe": True,
                "seed": 1000 + i,
                "url": url,
                "style_type": "REALISTIC",
            }
            for i, url in enumerate(urls)
        ],
    })


class FakeGenerator(Generator):
    def __init__(self, events: list, reply: str):
        self.events = events
        self.reply = reply
        self.requests = []

    def generate(self, request):
        self.events.append(("generate", request.prompt))
        self.requests.append(request)
        return self.reply


class FakeRemover(BackgroundRemover):
    """Answers each stored URL with a cut-out URL derived from the call count."""

    def __init__(self, events: list):
        self.events = events
        self.calls = 0
        self.fail_on: Optional[int] = None

    def remove(self, image_url):
        self.calls += 1
        self.events.append(("remove", image_url))
        if self.fail_on == self.calls:
            raise NetworkError(
                "connection reset",
                service="freepik",
                public_message="Error removing image background"
            )
        return json.dumps({"url": f"https://cdn.freepik.test/cutout-{self.calls}.png"})


class FakeDownloader(ImageDownloader):
    def __init__(self, events: list):
        self.events = events
        self.missing: set = set()

    def fetch(self, url):
        self.events.append(("download", url))
        if url in self.missing:
            raise NetworkError(
                f"Error fetching image {url}",
                service="download",
                public_message="Error downloading image"
            )
        return f"bytes:{url}".encode()


class FakeStore(ObjectStore):
    """In-memory store using the S3 key and URL layout."""

    def __init__(self, events: list):
        self.events = events
        self.objects: Dict[str, bytes] = {}
        self.uploads: List[Tuple[str, bytes, str]] = []
        self.fail = False

    def upload(self, file_data, filename, content_type="image/png"):
        key = object_key(FOLDER, filename)
        self.events.append(("upload", key))
        if self.fail:
            raise StorageError("AccessDenied")
        self.uploads.append((key, file_data, content_type))
        self.objects[key] = file_data
        return StoredImage(bucket=BUCKET, key=key, url=public_url(BUCKET, key))


@pytest.fixture
def config() -> Settings:
    return Settings(
        _env_file=None,
        API_KEY="test-api-key",
        FREEPIK_API_KEY="test-freepik-key",
        BUCKET_NAME=BUCKET,
        FOLDER_NAME=FOLDER,
        BUCKET_REGION="us-east-1",
    )


@pytest.fixture
def events() -> list:
    return []


@pytest.fixture
def generator(events) -> FakeGenerator:
    return FakeGenerator(events, ideogram_reply(["https://ideogram.test/img-0.png"]))


@pytest.fixture
def remover(events) -> FakeRemover:
    return FakeRemover(events)


@pytest.fixture
def downloader(events) -> FakeDownloader:
    return FakeDownloader(events)


@pytest.fixture
def store(events) -> FakeStore:
    return FakeStore(events)


@pytest.fixture
def pipeline(generator, remover, store, downloader) -> ImagePipeline:
    return ImagePipeline(
        generator=generator,
        remover=remover,
        store=store,
        downloader=downloader,
    )


@pytest_asyncio.fixture
async def client(pipeline) -> AsyncGenerator[AsyncClient, None]:
    from cutout.api.dependencies import get_pipeline
    from cutout.main import app

    app.dependency_overrides[get_pipeline] = lambda: pipeline
    try:
        async with app.router.lifespan_context(app):
            async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
                yield ac
    finally:
        app.dependency_overrides.clear()
