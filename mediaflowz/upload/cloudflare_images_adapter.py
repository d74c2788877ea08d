import json

from mediaflowz.config.settings import Settings
from mediaflowz.errors.exceptions import ConfigError, UploadError
from mediaflowz.logging.logger import Log
from mediaflowz.upload.base import BaseUploader
from mediaflowz.upload.http import ensure_success, parse_json, send, strip_scheme
from mediaflowz.upload.models import MediaFile, UploadOptions, UploadResult

DEFAULT_DELIVERY_HOST = "imagedelivery.net"
DEFAULT_VARIANT = "public"


class CloudflareImagesAdapter(BaseUploader):
    """Uploads images to Cloudflare Images and serves them by named variant."""

    provider = "cloudflare-images"

    def is_configured(self) -> bool:
        settings = self.settings
        return bool(settings.cloudflare_account_id and settings.cloudflare_images_token)

    async def upload(
        self,
        file: MediaFile,
        options: UploadOptions | None = None,
    ) -> UploadResult:
        settings = self.settings
        if not (settings.cloudflare_account_id and settings.cloudflare_images_token):
            raise ConfigError("Cloudflare Images account id and token are required")
        options = options or UploadOptions()

        data: dict[str, str] = {}
        if options.metadata:
            data["metadata"] = json.dumps(options.metadata)

        Log.info(f"Uploading {file.name} to Cloudflare Images")
        response = await send(
            self._client,
            "POST",
            self._endpoint(settings),
            timeout=settings.http_timeout_seconds,
            provider="Cloudflare Images",
            retries=settings.http_retries,
            retry_delay=settings.http_retry_delay_seconds,
            headers={"Authorization": f"Bearer {settings.cloudflare_images_token}"},
            files={"file": (file.name, file.content, file.content_type)},
            data=data,
        )
        ensure_success(response, "Cloudflare Images")
        payload = parse_json(response, "Cloudflare Images")
        if not payload.get("success"):
            raise UploadError(f"Cloudflare Images rejected the upload: {payload.get('errors')}")

        result = payload.get("result") or {}
        image_id = result.get("id") if isinstance(result, dict) else None
        if not image_id:
            raise UploadError("Cloudflare Images response has no result.id")

        image_meta = result.get("metadata")
        if not isinstance(image_meta, dict):
            image_meta = {}
        return UploadResult(
            url=self._image_url(settings, image_id, options.variant),
            public_id=image_id,
            width=image_meta.get("width"),
            height=image_meta.get("height"),
            format=image_meta.get("type"),
            metadata={
                "id": image_id,
                "type": "image",
                "variants": result.get("variants", []),
            },
        )

    async def delete(self, public_id: str) -> None:
        settings = self.settings
        if not self.is_configured():
            raise ConfigError("Cloudflare Images account id and token are required")
        response = await send(
            self._client,
            "DELETE",
            f"{self._endpoint(settings)}/{public_id}",
            timeout=settings.http_timeout_seconds,
            provider="Cloudflare Images",
            retries=settings.http_retries,
            retry_delay=settings.http_retry_delay_seconds,
            headers={"Authorization": f"Bearer {settings.cloudflare_images_token}"},
        )
        ensure_success(response, "Cloudflare Images")
        payload = parse_json(response, "Cloudflare Images")
        if not payload.get("success"):
            raise UploadError(f"Cloudflare Images delete failed: {payload.get('errors')}")

    def get_url(self, public_id: str, transformation: str | None = None) -> str:
        return self._image_url(self.settings, public_id, transformation)

    @staticmethod
    def _endpoint(settings: Settings) -> str:
        base = settings.cloudflare_api_base_url.rstrip("/")
        return f"{base}/accounts/{settings.cloudflare_account_id}/images/v1"

    @staticmethod
    def _image_url(settings: Settings, image_id: str, variant: str | None) -> str:
        host = strip_scheme(settings.cloudflare_custom_domain) or DEFAULT_DELIVERY_HOST
        selected = variant or settings.cloudflare_default_variant or DEFAULT_VARIANT
        return f"https://{host}/{settings.cloudflare_account_id}/{image_id}/{selected}"
