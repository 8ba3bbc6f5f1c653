import asyncio
import json

import httpx
import pytest
import pytest_asyncio

from image_scoring.config.settings import DifySettings

TEST_BASE_URL = "https://dify.test/v1"
TEST_API_KEY = "test-key"


class FakeDifyAPI:
    """
    In-memory stand-in for the Dify API, mounted through httpx.MockTransport.

    Records every request and tracks how many uploads are in flight at once.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.upload_count = 0
        self.in_flight_uploads = 0
        self.max_in_flight_uploads = 0
        self.cancelled_uploads = 0
        # upload number (1-based) -> (status, body text)
        self.upload_failures: dict[int, tuple[int, str]] = {}
        # upload number (1-based) -> seconds spent before answering
        self.upload_delays: dict[int, float] = {}
        self.upload_body_factory = lambda number: {"id": f"file-{number}"}
        self.workflow_status = 200
        self.workflow_body: str = json.dumps(
            {"workflow_run_id": "run-1", "data": {"status": "succeeded", "outputs": {}}}
        )

    @property
    def network_calls(self) -> int:
        return len(self.requests)

    def calls_to(self, suffix: str) -> list[httpx.Request]:
        return [request for request in self.requests if request.url.path.endswith(suffix)]

    @property
    def workflow_payloads(self) -> list[dict]:
        return [json.loads(request.content) for request in self.calls_to("/workflows/run")]

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/files/upload"):
            return await self._upload(request)
        if request.url.path.endswith("/workflows/run"):
            return httpx.Response(self.workflow_status, text=self.workflow_body)
        return httpx.Response(404, text="not found")

    async def _upload(self, request: httpx.Request) -> httpx.Response:
        self.upload_count += 1
        number = self.upload_count
        self.in_flight_uploads += 1
        self.max_in_flight_uploads = max(self.max_in_flight_uploads, self.in_flight_uploads)
        try:
            await asyncio.sleep(self.upload_delays.get(number, 0.01))
        except asyncio.CancelledError:
            self.cancelled_uploads += 1
            raise
        finally:
            self.in_flight_uploads -= 1

        if number in self.upload_failures:
            status_code, body = self.upload_failures[number]
            return httpx.Response(status_code, text=body)
        return httpx.Response(201, json=self.upload_body_factory(number))


@pytest.fixture
def fake_dify():
    return FakeDifyAPI()


@pytest.fixture
def dify_settings():
    return DifySettings(api_key=TEST_API_KEY, base_url=TEST_BASE_URL, user="web-user")


@pytest.fixture
def unconfigured_settings():
    return DifySettings(api_key="", base_url=TEST_BASE_URL)


@pytest_asyncio.fixture
async def http_client(fake_dify):
    async with httpx.AsyncClient(transport=httpx.MockTransport(fake_dify)) as client:
        yield client
