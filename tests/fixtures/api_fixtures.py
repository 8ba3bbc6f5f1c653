import httpx
import pytest
from fastapi.testclient import TestClient

from image_scoring.config.settings import APIConfig, AppSettings
from image_scoring.evaluation.handler import EvaluationHandler, get_handler
from image_scoring.main import app


@pytest.fixture
def app_settings(dify_settings):
    return AppSettings(dify=dify_settings, api=APIConfig(max_image_size_mb=1, max_target_images=3))


@pytest.fixture
def evaluation_handler(app_settings, fake_dify):
    transport_client = httpx.AsyncClient(transport=httpx.MockTransport(fake_dify))
    return EvaluationHandler(app_settings=app_settings, http_client=transport_client)


@pytest.fixture
def test_client(evaluation_handler):
    """FastAPI test client wired to the fake Dify API"""
    app.dependency_overrides[get_handler] = lambda: evaluation_handler
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
