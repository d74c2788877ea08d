"""Cloudflare Images + Stream adapter.

Images and videos go to two different APIs, each with its own token. Either
token may be missing; that only disables the matching media kind.
"""

import json
from typing import Any

import httpx

from mediaflowz.config.settings import Settings
from mediaflowz.errors.exceptions import ConfigError, UploadError
from mediaflowz.logging.logger import Log
from mediaflowz.upload.base import BaseUploader
from mediaflowz.upload.http import ensure_success, parse_json, send, strip_scheme
from mediaflowz.upload.models import MediaFile, UploadOptions, UploadResult

IMAGE_DELIVERY_HOST = "imagedelivery.net"
DEFAULT_VARIANT = "public"
VIDEO_ID_PREFIX = "stream-"


def is_video_id(public_id: str) -> bool:
    return public_id.startswith(VIDEO_ID_PREFIX)


def stream_uid(public_id: str) -> str:
    return public_id[len(VIDEO_ID_PREFIX):] if is_video_id(public_id) else public_id


class CloudflareMediaAdapter(BaseUploader):
    """Routes images to Cloudflare Images and videos to Cloudflare Stream."""

    provider = "cloudflare"

    def is_configured(self) -> bool:
        settings = self.settings
        return bool(
            settings.cloudflare_account_id
            and (settings.cloudflare_images_token or settings.cloudflare_stream_token)
        )

    async def upload(
        self,
        file: MediaFile,
        options: UploadOptions | None = None,
    ) -> UploadResult:
        settings = self.settings
        if not settings.cloudflare_account_id:
            raise ConfigError("Cloudflare account id is required")
        options = options or UploadOptions()
        if file.is_video:
            if not settings.cloudflare_stream_token:
                raise ConfigError("Cloudflare Stream token is required for video uploads")
            return await self._upload_video(settings, file, options)
        if not settings.cloudflare_images_token:
            raise ConfigError("Cloudflare Images token is required for image uploads")
        return await self._upload_image(settings, file, options)

    async def _upload_image(
        self,
        settings: Settings,
        file: MediaFile,
        options: UploadOptions,
    ) -> UploadResult:
        data: dict[str, str] = {}
        if options.metadata:
            data["metadata"] = json.dumps(options.metadata)

        Log.info(f"Uploading image {file.name} to Cloudflare Images")
        response = await send(
            self._client,
            "POST",
            self._images_endpoint(settings),
            timeout=settings.http_timeout_seconds,
            provider="Cloudflare Images",
            retries=settings.http_retries,
            retry_delay=settings.http_retry_delay_seconds,
            headers={"Authorization": f"Bearer {settings.cloudflare_images_token}"},
            files={"file": (file.name, file.content, file.content_type)},
            data=data,
        )
        result = self._result(response, "Cloudflare Images")
        image_id = result.get("id")
        if not image_id:
            raise UploadError("Cloudflare Images response has no result.id")

        return UploadResult(
            url=self._image_url(settings, image_id, options.variant),
            public_id=image_id,
            metadata={
                "id": image_id,
                "type": "image",
                "variants": result.get("variants", []),
            },
        )

    async def _upload_video(
        self,
        settings: Settings,
        file: MediaFile,
        options: UploadOptions,
    ) -> UploadResult:
        data: dict[str, str] = {}
        if options.metadata:
            data["meta"] = json.dumps(options.metadata)

        Log.info(f"Uploading video {file.name} to Cloudflare Stream")
        response = await send(
            self._client,
            "POST",
            self._stream_endpoint(settings),
            timeout=settings.http_video_timeout_seconds,
            provider="Cloudflare Stream",
            retries=settings.http_retries,
            retry_delay=settings.http_retry_delay_seconds,
            headers={"Authorization": f"Bearer {settings.cloudflare_stream_token}"},
            files={"file": (file.name, file.content, file.content_type)},
            data=data,
        )
        result = self._result(response, "Cloudflare Stream")
        uid = result.get("uid")
        if not uid:
            raise UploadError("Cloudflare Stream response has no result.uid")

        playback = result.get("playback")
        if not isinstance(playback, dict):
            playback = {}
        public_id = f"{VIDEO_ID_PREFIX}{uid}"
        return UploadResult(
            url=playback.get("hls") or self._video_url(settings, uid),
            public_id=public_id,
            metadata={"id": uid, "type": "video", "playback": playback},
        )

    async def delete(self, public_id: str) -> None:
        settings = self.settings
        if not self.is_configured():
            raise ConfigError("Cloudflare account id and token are required")
        if is_video_id(public_id):
            url = f"{self._stream_endpoint(settings)}/{stream_uid(public_id)}"
            token = settings.cloudflare_stream_token
            provider = "Cloudflare Stream"
        else:
            url = f"{self._images_endpoint(settings)}/{public_id}"
            token = settings.cloudflare_images_token
            provider = "Cloudflare Images"
        if not token:
            raise ConfigError(f"{provider} token is required to delete {public_id}")

        response = await send(
            self._client,
            "DELETE",
            url,
            timeout=settings.http_timeout_seconds,
            provider=provider,
            retries=settings.http_retries,
            retry_delay=settings.http_retry_delay_seconds,
            headers={"Authorization": f"Bearer {token}", "Accept": "application/json"},
        )
        ensure_success(response, provider)
        # Stream answers a successful delete with an empty body.
        if response.content:
            payload = parse_json(response, provider)
            if payload.get("success") is False:
                raise UploadError(f"{provider} delete failed: {payload.get('errors')}")

    def get_url(self, public_id: str, transformation: str | None = None) -> str:
        settings = self.settings
        if is_video_id(public_id):
            return self._video_url(settings, stream_uid(public_id))
        return self._image_url(settings, public_id, transformation)

    @staticmethod
    def _result(response: httpx.Response, provider: str) -> dict[str, Any]:
        ensure_success(response, provider)
        payload = parse_json(response, provider)
        if payload.get("success") is False:
            raise UploadError(f"{provider} rejected the upload: {payload.get('errors')}")
        result = payload.get("result")
        if not isinstance(result, dict):
            raise UploadError(f"{provider} response has no result")
        return result

    @staticmethod
    def _images_endpoint(settings: Settings) -> str:
        base = settings.cloudflare_api_base_url.rstrip("/")
        return f"{base}/accounts/{settings.cloudflare_account_id}/images/v1"

    @staticmethod
    def _stream_endpoint(settings: Settings) -> str:
        base = settings.cloudflare_api_base_url.rstrip("/")
        return f"{base}/accounts/{settings.cloudflare_account_id}/stream"

    @staticmethod
    def _image_url(settings: Settings, image_id: str, variant: str | None) -> str:
        selected = variant or settings.cloudflare_default_variant or DEFAULT_VARIANT
        if settings.cloudflare_custom_domain:
            host = strip_scheme(settings.cloudflare_custom_domain)
            return f"https://{host}/{image_id}/{selected}"
        account_hash = settings.cloudflare_delivery_hash or settings.cloudflare_account_id
        return f"https://{IMAGE_DELIVERY_HOST}/{account_hash}/{image_id}/{selected}"

    @staticmethod
    def _video_url(settings: Settings, uid: str) -> str:
        code = settings.cloudflare_stream_customer_code or settings.cloudflare_account_id
        return f"https://customer-{code}.cloudflarestream.com/{uid}/manifest/video.m3u8"
