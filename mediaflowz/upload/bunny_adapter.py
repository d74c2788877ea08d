"""Bunny.net storage zones fronted by pull-zone CDNs.

public_id is `{zone}/{path}`, so the owning zone is recoverable without any
network call for both URL generation and deletion.
"""

import time
from dataclasses import dataclass, field

import httpx

from mediaflowz.config.settings import Settings
from mediaflowz.config.store import SettingsStore
from mediaflowz.errors.exceptions import ConfigError, UploadError
from mediaflowz.events.bus import EventBus
from mediaflowz.events.models import EventName, SettingsUpdatedEvent
from mediaflowz.logging.logger import Log
from mediaflowz.upload.base import BaseUploader
from mediaflowz.upload.http import ensure_success, parse_json, send
from mediaflowz.upload.models import MediaFile, UploadOptions, UploadResult
from mediaflowz.upload.routing import (
    StorageZone,
    custom_cdn_for_path,
    default_zone,
    select_zone,
)

VIDEO_FOLDER = "videos"


@dataclass(frozen=True)
class ZoneTable:
    """Routing tables derived from one settings snapshot."""

    zones: tuple[StorageZone, ...] = ()
    default_zone_name: str = ""
    use_folder_mapping: bool = True
    custom_cdns: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ZoneTable":
        return cls(
            zones=tuple(
                StorageZone(
                    name=zone.name,
                    access_key=zone.access_key,
                    pull_zone_url=zone.pull_zone_url,
                    folders=tuple(zone.folders),
                )
                for zone in settings.bunny_storage_zones
            ),
            default_zone_name=settings.bunny_default_storage_zone,
            use_folder_mapping=settings.bunny_use_folder_mapping,
            custom_cdns=dict(settings.bunny_custom_cdns),
        )

    def zone_for_upload(self, routing_path: str | None) -> StorageZone:
        if self.use_folder_mapping:
            return select_zone(routing_path, self.zones, self.default_zone_name)
        return default_zone(self.zones, self.default_zone_name)

    def zone_named(self, name: str) -> StorageZone | None:
        for zone in self.zones:
            if zone.name == name:
                return zone
        return None


def split_public_id(public_id: str) -> tuple[str, str]:
    zone_name, _, path = public_id.partition("/")
    return zone_name, path


def with_scheme(url: str) -> str:
    url = url.rstrip("/")
    if url.startswith(("http://", "https://")):
        return url
    return f"https://{url}"


class BunnyAdapter(BaseUploader):
    """Uploads raw bytes into the storage zone selected by folder routing."""

    provider = "bunny"

    def __init__(
        self,
        store: SettingsStore,
        bus: EventBus,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(store, bus, client)
        self._table = ZoneTable.from_settings(store.settings)
        self._subscribe(EventName.SETTINGS_UPDATED, self._on_settings_updated)

    def _on_settings_updated(self, event: SettingsUpdatedEvent) -> None:
        self._table = ZoneTable.from_settings(event.settings)
        Log.info(
            f"Bunny zones reloaded: {len(self._table.zones)} zones, "
            f"{len(self._table.custom_cdns)} custom CDNs"
        )

    def is_configured(self) -> bool:
        zones = self.settings.bunny_storage_zones
        return bool(zones) and all(
            zone.name and zone.access_key and zone.pull_zone_url for zone in zones
        )

    async def upload(
        self,
        file: MediaFile,
        options: UploadOptions | None = None,
    ) -> UploadResult:
        settings = self.settings
        table = self._table
        if not self.is_configured():
            raise ConfigError("Bunny.net storage zones are not configured")
        options = options or UploadOptions()

        path = self._object_path(file, options)
        zone = table.zone_for_upload(file.source_path or path)
        public_id = f"{zone.name}/{path}"

        Log.info(f"Uploading {file.name} to Bunny zone {zone.name} as {path}")
        response = await send(
            self._client,
            "PUT",
            f"{settings.bunny_storage_host.rstrip('/')}/{public_id}",
            timeout=(
                settings.http_video_timeout_seconds
                if file.is_video
                else settings.http_timeout_seconds
            ),
            provider="Bunny.net",
            retries=settings.http_retries,
            retry_delay=settings.http_retry_delay_seconds,
            headers={"AccessKey": zone.access_key, "Content-Type": file.content_type},
            content=file.content,
        )
        self._ensure_stored(response)

        return UploadResult(
            url=self._url(table, public_id),
            public_id=public_id,
            metadata={
                "id": public_id,
                "type": "video" if file.is_video else "image",
                "path": path,
                "storage_zone": zone.name,
            },
        )

    async def delete(self, public_id: str) -> None:
        settings = self.settings
        table = self._table
        if not self.is_configured():
            raise ConfigError("Bunny.net storage zones are not configured")
        zone_name, _ = split_public_id(public_id)
        zone = table.zone_named(zone_name) or default_zone(
            table.zones, table.default_zone_name
        )
        response = await send(
            self._client,
            "DELETE",
            f"{settings.bunny_storage_host.rstrip('/')}/{public_id}",
            timeout=settings.http_timeout_seconds,
            provider="Bunny.net",
            retries=settings.http_retries,
            retry_delay=settings.http_retry_delay_seconds,
            headers={"AccessKey": zone.access_key},
        )
        self._ensure_stored(response)

    def get_url(self, public_id: str, transformation: str | None = None) -> str:
        return self._url(self._table, public_id)

    def _url(self, table: ZoneTable, public_id: str) -> str:
        zone_name, path = split_public_id(public_id)
        custom_cdn = custom_cdn_for_path(path, table.custom_cdns)
        if custom_cdn:
            return f"{with_scheme(custom_cdn)}/{path}"
        zone = table.zone_named(zone_name)
        if zone is None and table.zones:
            zone = default_zone(table.zones, table.default_zone_name)
        if zone is None:
            return f"{self.settings.bunny_storage_host.rstrip('/')}/{public_id}"
        return f"{with_scheme(zone.pull_zone_url)}/{path}"

    @staticmethod
    def _object_path(file: MediaFile, options: UploadOptions) -> str:
        if options.path:
            return options.path.replace("\\", "/").lstrip("/")
        name = f"{int(time.time() * 1000)}-{file.name}"
        folder = VIDEO_FOLDER if file.is_video else (options.folder or "")
        folder = folder.replace("\\", "/").strip("/")
        return f"{folder}/{name}" if folder else name

    @staticmethod
    def _ensure_stored(response: httpx.Response) -> None:
        ensure_success(response, "Bunny.net")
        if not response.content:
            return
        payload = parse_json(response, "Bunny.net")
        http_code = payload.get("HttpCode")
        if isinstance(http_code, int) and not 200 <= http_code < 300:
            raise UploadError(
                f"Bunny.net request failed ({http_code}): {payload.get('Message', 'unknown error')}"
            )
