"""
Pytest configuration and fixtures.
"""

from io import BytesIO

import pytest
from PIL import Image
from fastapi.testclient import TestClient

from app.core.settings import Settings
from app.main import create_app
from app.workflow.machine import ImageWorkflow
from app.workflow.state import GeneratedImage, UploadedImage


class FakeCaptioner:
    """Returns a canned caption, or raises when `fail` is set."""

    name = "fake"

    def __init__(self, text="A red bicycle leaning on a brick wall, golden hour.", fail=False):
        self.text = text
        self.fail = fail
        self.calls = []

    async def caption(self, image, instruction):
        self.calls.append((image, instruction))
        if self.fail:
            raise RuntimeError("vision service unavailable")
        return self.text


class FakeSynthesizer:
    """Records one call per ratio; ratios listed in `fail_for` raise."""

    name = "fake"

    def __init__(self, fail_for=()):
        self.fail_for = set(fail_for)
        self.calls = []

    async def generate(self, prompt, aspect_ratio):
        self.calls.append((prompt, aspect_ratio))
        if aspect_ratio.value in self.fail_for:
            raise RuntimeError(f"imagen rejected {aspect_ratio.value}")
        return GeneratedImage(
            aspect_ratio=aspect_ratio,
            data=f"jpeg-{aspect_ratio.value}-{len(self.calls)}".encode(),
        )


def make_png(size=(32, 24), color=(200, 30, 30)) -> bytes:
    buf = BytesIO()
    Image.new("RGB", size, color=color).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def png_bytes():
    return make_png()


@pytest.fixture
def uploaded(png_bytes):
    return UploadedImage(data=png_bytes, mime_type="image/png", filename="bike.png", width=32, height=24)


@pytest.fixture
def captioner():
    return FakeCaptioner()


@pytest.fixture
def synthesizer():
    return FakeSynthesizer()


@pytest.fixture
def workflow(captioner, synthesizer):
    return ImageWorkflow(captioner, synthesizer, instruction="describe it")


@pytest.fixture
def test_settings():
    return Settings(_env_file=None, gemini_api_key=None, max_sessions=8, log_level="WARNING")


@pytest.fixture
def client(test_settings, captioner, synthesizer):
    """API test client wired to the fake backends."""
    return TestClient(create_app(test_settings, captioner=captioner, synthesizer=synthesizer))


@pytest.fixture
def session_id(client):
    return client.post("/api/v1/sessions").json()["session_id"]


@pytest.fixture
def anyio_backend():
    """The app runs on asyncio (uvicorn); pin the anyio test backend to it."""
    return "asyncio"
