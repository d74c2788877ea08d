from collections.abc import Callable

import httpx
import pytest

from mediaflowz.config.store import SettingsStore
from mediaflowz.errors.exceptions import ConfigError, NetworkError, UploadError
from mediaflowz.events.bus import EventBus
from mediaflowz.upload.cloudflare_images_adapter import CloudflareImagesAdapter
from mediaflowz.upload.models import MediaFile, UploadOptions

ENDPOINT = "https://api.cloudflare.com/client/v4/accounts/acct/images/v1"


def _ok(image_id: str = "img-1") -> httpx.Response:
    return httpx.Response(
        200,
        json={
            "success": True,
            "result": {
                "id": image_id,
                "variants": [f"https://imagedelivery.net/acct/{image_id}/public"],
                "metadata": {"width": 640, "height": 480, "type": "png"},
            },
        },
    )


@pytest.fixture()
def store(make_store: Callable[..., SettingsStore]) -> SettingsStore:
    return make_store(
        media_provider="cloudflare-images",
        cloudflare_account_id="acct",
        cloudflare_images_token="tok",
    )


class TestUpload:
    @pytest.mark.asyncio
    async def test_posts_multipart_file_with_bearer(
        self, store: SettingsStore, bus: EventBus, fake_api, png_file: MediaFile
    ) -> None:
        api = fake_api(_ok())
        adapter = CloudflareImagesAdapter(store, bus, api.client())

        result = await adapter.upload(png_file)

        request = api.last
        assert request.method == "POST"
        assert str(request.url) == ENDPOINT
        assert request.headers["Authorization"] == "Bearer tok"
        assert b'name="file"; filename="photo.png"' in request.content
        assert result.public_id == "img-1"
        assert result.url == "https://imagedelivery.net/acct/img-1/public"
        assert result.width == 640
        assert result.height == 480
        assert result.metadata["type"] == "image"

    @pytest.mark.asyncio
    async def test_requested_variant_and_metadata(
        self, store: SettingsStore, bus: EventBus, fake_api, png_file: MediaFile
    ) -> None:
        api = fake_api(_ok())
        adapter = CloudflareImagesAdapter(store, bus, api.client())

        result = await adapter.upload(
            png_file, UploadOptions(variant="thumb", metadata={"note": "Blog/a.md"})
        )

        assert result.url.endswith("/img-1/thumb")
        assert b'{"note": "Blog/a.md"}' in api.last.content

    @pytest.mark.asyncio
    async def test_custom_domain(
        self, make_store: Callable[..., SettingsStore], bus: EventBus, fake_api,
        png_file: MediaFile,
    ) -> None:
        store = make_store(
            cloudflare_account_id="acct",
            cloudflare_images_token="tok",
            cloudflare_custom_domain="https://img.example.com/",
        )
        adapter = CloudflareImagesAdapter(store, bus, fake_api(_ok()).client())

        result = await adapter.upload(png_file)

        assert result.url == "https://img.example.com/acct/img-1/public"

    @pytest.mark.asyncio
    async def test_unconfigured_raises_before_any_request(
        self, make_store: Callable[..., SettingsStore], bus: EventBus, fake_api,
        png_file: MediaFile,
    ) -> None:
        api = fake_api(_ok())
        adapter = CloudflareImagesAdapter(make_store(cloudflare_account_id="acct"), bus,
                                          api.client())

        with pytest.raises(ConfigError):
            await adapter.upload(png_file)
        assert api.requests == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "reply",
        [
            httpx.Response(200, json={"success": False, "errors": [{"message": "bad"}]}),
            httpx.Response(200, json={"success": True, "result": {}}),
            httpx.Response(200, text="<html>oops</html>"),
            httpx.Response(415, json={"errors": [{"message": "unsupported"}]}),
        ],
    )
    async def test_rejections_raise_upload_error(
        self, store: SettingsStore, bus: EventBus, fake_api, png_file: MediaFile,
        reply: httpx.Response,
    ) -> None:
        adapter = CloudflareImagesAdapter(store, bus, fake_api(reply).client())

        with pytest.raises(UploadError):
            await adapter.upload(png_file)

    @pytest.mark.asyncio
    async def test_transport_failure_raises_network_error(
        self, store: SettingsStore, bus: EventBus, fake_api, png_file: MediaFile
    ) -> None:
        api = fake_api(httpx.ConnectError("connection refused"))
        adapter = CloudflareImagesAdapter(store, bus, api.client())

        with pytest.raises(NetworkError):
            await adapter.upload(png_file)

        assert len(api.requests) == 3

    @pytest.mark.asyncio
    async def test_dropped_connection_is_retried(
        self, store: SettingsStore, bus: EventBus, fake_api, png_file: MediaFile
    ) -> None:
        api = fake_api(httpx.ConnectError("connection reset"), _ok())
        adapter = CloudflareImagesAdapter(store, bus, api.client())

        result = await adapter.upload(png_file)

        assert result.public_id == "img-1"
        assert [r.url for r in api.requests] == [httpx.URL(ENDPOINT)] * 2

    @pytest.mark.asyncio
    async def test_retries_follow_live_settings(
        self, store: SettingsStore, bus: EventBus, fake_api, png_file: MediaFile
    ) -> None:
        await store.update(http_retries=0)
        api = fake_api(httpx.ConnectError("connection refused"), _ok())
        adapter = CloudflareImagesAdapter(store, bus, api.client())

        with pytest.raises(NetworkError):
            await adapter.upload(png_file)

        assert len(api.requests) == 1


class TestDeleteAndUrl:
    @pytest.mark.asyncio
    async def test_delete(self, store: SettingsStore, bus: EventBus, fake_api) -> None:
        api = fake_api(httpx.Response(200, json={"success": True, "result": {}}))
        adapter = CloudflareImagesAdapter(store, bus, api.client())

        await adapter.delete("img-1")

        assert api.last.method == "DELETE"
        assert str(api.last.url) == f"{ENDPOINT}/img-1"

    @pytest.mark.asyncio
    async def test_delete_failure(self, store: SettingsStore, bus: EventBus, fake_api) -> None:
        api = fake_api(httpx.Response(404, json={"success": False, "errors": []}))
        adapter = CloudflareImagesAdapter(store, bus, api.client())

        with pytest.raises(UploadError):
            await adapter.delete("img-1")

    def test_get_url_defaults_to_public_variant(
        self, store: SettingsStore, bus: EventBus
    ) -> None:
        adapter = CloudflareImagesAdapter(store, bus)
        assert adapter.get_url("img-1") == "https://imagedelivery.net/acct/img-1/public"
        assert adapter.get_url("img-1", "avatar") == "https://imagedelivery.net/acct/img-1/avatar"


class TestIsConfigured:
    def test_requires_account_and_token(
        self, make_store: Callable[..., SettingsStore], bus: EventBus
    ) -> None:
        assert not CloudflareImagesAdapter(make_store(), bus).is_configured()
        assert not CloudflareImagesAdapter(
            make_store(cloudflare_images_token="tok"), bus
        ).is_configured()

    @pytest.mark.asyncio
    async def test_follows_settings_updates(self, store: SettingsStore, bus: EventBus) -> None:
        adapter = CloudflareImagesAdapter(store, bus)
        assert adapter.is_configured() is adapter.is_configured() is True

        await store.update(cloudflare_images_token="")

        assert adapter.is_configured() is False
