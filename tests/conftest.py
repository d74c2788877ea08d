from collections.abc import Callable
from typing import Any

import httpx
import pytest

from mediaflowz.config.settings import BunnyStorageZone, Settings
from mediaflowz.config.store import SettingsStore
from mediaflowz.events.bus import EventBus
from mediaflowz.upload.models import MediaFile

Reply = httpx.Response | Exception


class FakeProviderApi:
    """Stands in for a provider HTTP API behind httpx.MockTransport.

    Replies are served in order; the last one repeats. Exceptions are raised
    as transport failures.
    """

    def __init__(self, *replies: Reply) -> None:
        self.requests: list[httpx.Request] = []
        self._replies = list(replies) or [httpx.Response(200, json={})]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self._replies.pop(0) if len(self._replies) > 1 else self._replies[0]
        if isinstance(reply, Exception):
            raise reply
        return reply

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture()
def make_settings() -> Callable[..., Settings]:
    """Settings isolated from the developer's .env file, retrying without delay."""

    def _make(**overrides: Any) -> Settings:
        return Settings(_env_file=None, **{"http_retry_delay_seconds": 0, **overrides})

    return _make


@pytest.fixture()
def bus() -> EventBus:
    return EventBus()


@pytest.fixture()
def make_store(
    bus: EventBus,
    make_settings: Callable[..., Settings],
) -> Callable[..., SettingsStore]:
    def _make(**overrides: Any) -> SettingsStore:
        return SettingsStore(make_settings(**overrides), bus)

    return _make


@pytest.fixture()
def bunny_zones() -> list[BunnyStorageZone]:
    return [
        BunnyStorageZone(
            name="blog-zone",
            access_key="blog-key",
            pull_zone_url="https://blog.b-cdn.net",
            folders=["Blog"],
        ),
        BunnyStorageZone(
            name="main-zone",
            access_key="main-key",
            pull_zone_url="main.b-cdn.net/",
            folders=[],
        ),
    ]


@pytest.fixture()
def png_file() -> MediaFile:
    return MediaFile(content=b"\x89PNG\r\n", content_type="image/png", name="photo.png")


@pytest.fixture()
def mp4_file() -> MediaFile:
    return MediaFile(content=b"\x00\x00\x00\x18ftyp", content_type="video/mp4", name="clip.mp4")


@pytest.fixture()
def text_file() -> MediaFile:
    return MediaFile(content=b"hello", content_type="text/plain", name="notes.txt")


@pytest.fixture()
def fake_api() -> type[FakeProviderApi]:
    return FakeProviderApi
