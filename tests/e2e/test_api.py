import base64
import json

import pytest

EXAMPLE_BODY = {
    "prompt": "A futuristic cityscape",
    "filename": "city",
    "resolution": "1024x1024",
    "num_images": 1,
}


@pytest.mark.asyncio
async def test_health_check(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_generate_plain_json(client):
    response = await client.post("/api/v1/generate", content=json.dumps(EXAMPLE_BODY))

    assert response.status_code == 200
    assert response.json() == {
        "image_urls": ["https://test-bucket.s3.amazonaws.com/cutouts/city.png"]
    }
    assert "X-Process-Time" in response.headers


@pytest.mark.asyncio
async def test_generate_base64_body(client):
    encoded = base64.b64encode(json.dumps(EXAMPLE_BODY).encode())

    response = await client.post(
        "/api/v1/generate",
        content=encoded,
        headers={"X-Body-Base64": "true"}
    )

    assert response.status_code == 200
    assert len(response.json()["image_urls"]) == 1


@pytest.mark.asyncio
async def test_generate_invalid_base64_is_plain_text_400(client):
    response = await client.post(
        "/api/v1/generate",
        content=b"***",
        headers={"X-Body-Base64": "1"}
    )

    assert response.status_code == 400
    assert response.text == "Bad Request: invalid base64"
    assert response.headers["content-type"].startswith("text/plain")


@pytest.mark.asyncio
async def test_generate_downstream_failure_is_plain_text_500(client, store):
    store.fail = True

    response = await client.post("/api/v1/generate", content=json.dumps(EXAMPLE_BODY))

    assert response.status_code == 500
    assert response.text == "Error uploading image to S3"


@pytest.mark.asyncio
async def test_metrics_exposes_pipeline_counters(client):
    await client.post("/api/v1/generate", content=json.dumps(EXAMPLE_BODY))

    response = await client.get("/api/v1/metrics")

    assert response.status_code == 200
    assert "cutout_invocations_total" in response.text
    assert "pipeline_latency_seconds" in response.text
