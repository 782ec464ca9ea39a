"""
Shared fixtures: a scripted fake of the Trackfusion API served through
httpx.MockTransport, and clients wired to it.
"""

import json

import httpx
import pytest

from trackfusion.api.client import TrackfusionClient
from trackfusion.config import ClientConfig

API_KEY = "tf_test_key"
BASE_URL = "https://api.example.com"


class FakeAPI:
    """Replays scripted responses and records every request it receives.

    Each entry is an httpx.Response or an exception to raise. The last entry
    repeats once the script runs out.
    """

    def __init__(self, *script):
        self.script = list(script)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        step = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        if isinstance(step, Exception):
            raise step
        return step

    @property
    def calls(self) -> int:
        return len(self.requests)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def url(self, index: int = -1) -> str:
        return str(self.requests[index].url)

    def body(self, index: int = -1):
        return json.loads(self.requests[index].content)


def json_response(data, status: int = 200) -> httpx.Response:
    return httpx.Response(status, json=data)


def make_client(api: FakeAPI, base_url: str = BASE_URL + "/", timeout_ms: int = 5000) -> TrackfusionClient:
    config = ClientConfig(api_key=API_KEY, base_url=base_url, timeout_ms=timeout_ms)
    return TrackfusionClient(config, transport=httpx.MockTransport(api), retry_delay=0)


@pytest.fixture
def api():
    """Fake API answering 200 with an empty object until scripted otherwise."""
    return FakeAPI(json_response({}))


@pytest.fixture
def client(api):
    return make_client(api)
