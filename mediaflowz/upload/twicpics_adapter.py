from mediaflowz.config.settings import Settings
from mediaflowz.errors.exceptions import ConfigError, UploadError
from mediaflowz.logging.logger import Log
from mediaflowz.upload.base import BaseUploader
from mediaflowz.upload.http import ensure_success, parse_json, send, strip_scheme
from mediaflowz.upload.models import MediaFile, UploadOptions, UploadResult


class TwicPicsAdapter(BaseUploader):
    """Uploads into a TwicPics domain; the stored path doubles as public_id."""

    provider = "twicpics"

    def is_configured(self) -> bool:
        settings = self.settings
        return bool(settings.twicpics_domain and settings.twicpics_api_key)

    async def upload(
        self,
        file: MediaFile,
        options: UploadOptions | None = None,
    ) -> UploadResult:
        settings = self.settings
        if not self.is_configured():
            raise ConfigError("TwicPics domain and API key are required")
        options = options or UploadOptions()

        data: dict[str, str] = {}
        if options.folder:
            data["path"] = options.folder.replace("\\", "/").strip("/")

        Log.info(f"Uploading {file.name} to TwicPics")
        response = await send(
            self._client,
            "POST",
            f"https://{self._host(settings)}/v1/upload",
            timeout=(
                settings.http_video_timeout_seconds
                if file.is_video
                else settings.http_timeout_seconds
            ),
            provider="TwicPics",
            retries=settings.http_retries,
            retry_delay=settings.http_retry_delay_seconds,
            headers={"Authorization": f"Bearer {settings.twicpics_api_key}"},
            files={"media": (file.name, file.content, file.content_type)},
            data=data,
        )
        ensure_success(response, "TwicPics")
        payload = parse_json(response, "TwicPics")
        path = payload.get("path")
        if not path:
            raise UploadError("TwicPics response has no path")
        path = str(path).lstrip("/")

        metadata = payload.get("metadata")
        if not isinstance(metadata, dict):
            metadata = {}
        return UploadResult(
            url=self._delivery_url(settings, path, options.transformation),
            public_id=path,
            width=metadata.get("width"),
            height=metadata.get("height"),
            format=metadata.get("format"),
            metadata={"type": "video" if file.is_video else "image", **metadata},
        )

    async def delete(self, public_id: str) -> None:
        settings = self.settings
        if not self.is_configured():
            raise ConfigError("TwicPics domain and API key are required")
        response = await send(
            self._client,
            "DELETE",
            f"https://{self._host(settings)}/v1/remove/{public_id.lstrip('/')}",
            timeout=settings.http_timeout_seconds,
            provider="TwicPics",
            retries=settings.http_retries,
            retry_delay=settings.http_retry_delay_seconds,
            headers={"Authorization": f"Bearer {settings.twicpics_api_key}"},
        )
        ensure_success(response, "TwicPics")

    def get_url(self, public_id: str, transformation: str | None = None) -> str:
        return self._delivery_url(self.settings, public_id, transformation)

    @staticmethod
    def _host(settings: Settings) -> str:
        return strip_scheme(settings.twicpics_domain)

    @classmethod
    def _delivery_url(cls, settings: Settings, path: str, transformation: str | None) -> str:
        path = path.lstrip("/")
        if transformation:
            return f"https://{cls._host(settings)}/{transformation.strip('/')}/{path}"
        return f"https://{cls._host(settings)}/{path}"
