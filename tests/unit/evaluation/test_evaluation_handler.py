import base64

import pytest

from image_scoring.config.settings import AppSettings, DifySettings
from image_scoring.core.exceptions import ConfigurationError
from image_scoring.evaluation.handler import EvaluationHandler, get_handler
from image_scoring.evaluation.schema import ComparisonRequest, ComparisonResponse, EvaluationResponse


class TestEvaluationHandler:
    """Test evaluation handler functionality"""

    @pytest.mark.asyncio
    async def test_evaluate_pairwise(self, evaluation_handler, fake_dify, png_bytes, jpeg_bytes):
        response = await evaluation_handler.evaluate_pairwise(png_bytes, jpeg_bytes, "clarity")

        assert isinstance(response, EvaluationResponse)
        assert response.text.details.context == "clarity"
        assert len(fake_dify.calls_to("/files/upload")) == 2

    @pytest.mark.asyncio
    async def test_blank_context_is_dropped(self, evaluation_handler, fake_dify, png_bytes):
        response = await evaluation_handler.evaluate_pairwise(png_bytes, png_bytes, "")

        assert response.text.details.context is None
        assert "context" not in fake_dify.workflow_payloads[0]["inputs"]

    @pytest.mark.asyncio
    async def test_compare(self, evaluation_handler, encoded_images):
        request = ComparisonRequest(base_image=encoded_images[0], target_images=encoded_images[1:])

        response = await evaluation_handler.compare(request)

        assert isinstance(response, ComparisonResponse)
        assert [r.image_index for r in response.results] == [0, 1]

    @pytest.mark.asyncio
    async def test_compare_accepts_data_urls(self, evaluation_handler, fake_dify, encoded_images):
        data_urls = [f"data:image/png;base64,{image}" for image in encoded_images]

        await evaluation_handler.compare(ComparisonRequest(base_image=data_urls[0], target_images=data_urls[1:]))

        urls = [image["url"] for image in fake_dify.workflow_payloads[0]["inputs"]["image"]]
        assert urls == data_urls

    @pytest.mark.asyncio
    async def test_compare_rejects_too_many_targets(self, evaluation_handler, fake_dify, encoded_images):
        request = ComparisonRequest(base_image=encoded_images[0], target_images=encoded_images * 2)

        with pytest.raises(ValueError, match="Too many target images"):
            await evaluation_handler.compare(request)
        assert fake_dify.network_calls == 0

    @pytest.mark.asyncio
    async def test_compare_files_encodes_bytes(self, evaluation_handler, fake_dify, png_bytes, jpeg_bytes):
        response = await evaluation_handler.compare_files(png_bytes, [jpeg_bytes], "sharpness")

        assert len(response.results) == 1
        images = fake_dify.workflow_payloads[0]["inputs"]["image"]
        assert images[1]["url"] == "data:image/jpeg;base64," + base64.b64encode(jpeg_bytes).decode("ascii")

    def test_check_image_size(self, evaluation_handler):
        evaluation_handler.check_image_size(b"x" * 1024, "small.png")
        with pytest.raises(ValueError, match="exceeds the 1 MB limit"):
            evaluation_handler.check_image_size(b"x" * (1024 * 1024 + 1), "large.png")

    @pytest.mark.asyncio
    async def test_unconfigured_handler(self, png_bytes):
        handler = EvaluationHandler(app_settings=AppSettings(dify=DifySettings(api_key="")))
        with pytest.raises(ConfigurationError):
            await handler.evaluate_pairwise(png_bytes, png_bytes)

    def test_get_handler_is_singleton(self):
        assert get_handler() is get_handler()
