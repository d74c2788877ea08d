import time

from mediaflowz.config.settings import Settings
from mediaflowz.errors.exceptions import ConfigError, UploadError
from mediaflowz.logging.logger import Log
from mediaflowz.upload.base import BaseUploader
from mediaflowz.upload.http import ensure_success, parse_json, send
from mediaflowz.upload.models import MediaFile, UploadOptions, UploadResult
from mediaflowz.upload.signature import sign

API_BASE_URL = "https://api.cloudinary.com/v1_1"
DELIVERY_BASE_URL = "https://res.cloudinary.com"


class CloudinaryAdapter(BaseUploader):
    """Uploads through an unsigned preset, or signed with the API secret."""

    provider = "cloudinary"

    def is_configured(self) -> bool:
        settings = self.settings
        return bool(
            settings.cloudinary_cloud_name
            and settings.cloudinary_api_key
            and (settings.cloudinary_upload_preset or settings.cloudinary_api_secret)
        )

    async def upload(
        self,
        file: MediaFile,
        options: UploadOptions | None = None,
    ) -> UploadResult:
        settings = self.settings
        if not self.is_configured():
            raise ConfigError(
                "Cloudinary cloud name, API key and an upload preset or API secret are required"
            )
        options = options or UploadOptions()

        params: dict[str, str | int] = {"timestamp": int(time.time())}
        if options.folder:
            params["folder"] = options.folder
        if options.tags:
            params["tags"] = ",".join(options.tags)
        if options.transformation:
            params["transformation"] = options.transformation

        data: dict[str, str | int] = {**params, "api_key": settings.cloudinary_api_key}
        if settings.cloudinary_upload_preset:
            data["upload_preset"] = settings.cloudinary_upload_preset
        else:
            data["signature"] = sign(params, settings.cloudinary_api_secret)

        Log.info(f"Uploading {file.name} to Cloudinary cloud {settings.cloudinary_cloud_name}")
        response = await send(
            self._client,
            "POST",
            f"{API_BASE_URL}/{settings.cloudinary_cloud_name}/auto/upload",
            timeout=(
                settings.http_video_timeout_seconds
                if file.is_video
                else settings.http_timeout_seconds
            ),
            provider="Cloudinary",
            retries=settings.http_retries,
            retry_delay=settings.http_retry_delay_seconds,
            files={"file": (file.name, file.content, file.content_type)},
            data={key: str(value) for key, value in data.items()},
        )
        ensure_success(response, "Cloudinary")
        payload = parse_json(response, "Cloudinary")

        secure_url = payload.get("secure_url")
        public_id = payload.get("public_id")
        if not secure_url or not public_id:
            raise UploadError("Cloudinary response has no secure_url or public_id")

        Log.debug(f"Cloudinary stored {file.name} as {public_id}")
        return UploadResult(
            url=secure_url,
            public_id=public_id,
            width=payload.get("width"),
            height=payload.get("height"),
            format=payload.get("format"),
            metadata={
                "resource_type": payload.get("resource_type"),
                "version": payload.get("version"),
            },
        )

    async def delete(self, public_id: str) -> None:
        settings = self.settings
        if not (
            settings.cloudinary_cloud_name
            and settings.cloudinary_api_key
            and settings.cloudinary_api_secret
        ):
            raise ConfigError("Cloudinary API key and secret are required to delete media")

        params: dict[str, str | int] = {
            "public_id": public_id,
            "timestamp": int(time.time()),
        }
        data = {
            **params,
            "api_key": settings.cloudinary_api_key,
            "signature": sign(params, settings.cloudinary_api_secret),
        }
        response = await send(
            self._client,
            "POST",
            f"{API_BASE_URL}/{settings.cloudinary_cloud_name}/image/destroy",
            timeout=settings.http_timeout_seconds,
            provider="Cloudinary",
            retries=settings.http_retries,
            retry_delay=settings.http_retry_delay_seconds,
            data={key: str(value) for key, value in data.items()},
        )
        ensure_success(response, "Cloudinary")
        payload = parse_json(response, "Cloudinary")
        if payload.get("result") != "ok":
            raise UploadError(f"Cloudinary delete failed: {payload.get('result')}")

    def get_url(self, public_id: str, transformation: str | None = None) -> str:
        return self._delivery_url(self.settings, public_id, transformation)

    @staticmethod
    def _delivery_url(settings: Settings, public_id: str, transformation: str | None) -> str:
        base = f"{DELIVERY_BASE_URL}/{settings.cloudinary_cloud_name}/image/upload"
        if transformation:
            return f"{base}/{transformation}/{public_id}"
        return f"{base}/{public_id}"
