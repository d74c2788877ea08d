from typing import ClassVar

import httpx

from mediaflowz.config.settings import Settings
from mediaflowz.config.store import SettingsStore
from mediaflowz.errors.exceptions import UnsupportedProviderError
from mediaflowz.events.bus import EventBus
from mediaflowz.logging.logger import Log
from mediaflowz.upload.base import BaseUploader
from mediaflowz.upload.bunny_adapter import BunnyAdapter
from mediaflowz.upload.cloudflare_images_adapter import CloudflareImagesAdapter
from mediaflowz.upload.cloudflare_media_adapter import CloudflareMediaAdapter
from mediaflowz.upload.cloudinary_adapter import CloudinaryAdapter
from mediaflowz.upload.twicpics_adapter import TwicPicsAdapter


class UploaderFactory:
    """Creates the uploader adapter for a provider id."""

    ADAPTERS: ClassVar[dict[str, type[BaseUploader]]] = {
        CloudflareImagesAdapter.provider: CloudflareImagesAdapter,
        CloudflareMediaAdapter.provider: CloudflareMediaAdapter,
        BunnyAdapter.provider: BunnyAdapter,
        CloudinaryAdapter.provider: CloudinaryAdapter,
        TwicPicsAdapter.provider: TwicPicsAdapter,
    }

    @classmethod
    def create(
        cls,
        provider: str,
        store: SettingsStore,
        bus: EventBus,
        client: httpx.AsyncClient | None = None,
    ) -> BaseUploader:
        adapter_cls = cls.ADAPTERS.get(provider.lower())
        if adapter_cls is None:
            raise UnsupportedProviderError(
                f"Unknown media provider '{provider}'. Choose from: {list(cls.ADAPTERS)}"
            )
        return adapter_cls(store, bus, client)


class ProviderSelector:
    """Keeps exactly one live adapter, matching the selected provider.

    Switching providers closes the previous adapter so its bus subscriptions
    do not outlive it.
    """

    def __init__(
        self,
        store: SettingsStore,
        bus: EventBus,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._store = store
        self._bus = bus
        self._client = client
        self._current: BaseUploader | None = None

    @property
    def current(self) -> BaseUploader | None:
        return self._current

    def get_service(self, settings: Settings | None = None) -> BaseUploader:
        """Return the adapter for settings.media_provider, creating it on first use or on a switch.

        Raises:
            UnsupportedProviderError: if the provider id is unknown. The
                current adapter is left untouched in that case.
        """
        settings = settings or self._store.settings
        provider = settings.media_provider.lower()
        if self._current is not None and self._current.provider == provider:
            return self._current

        adapter = UploaderFactory.create(provider, self._store, self._bus, self._client)
        if self._current is not None:
            Log.info(f"Switching media provider {self._current.provider} -> {provider}")
            self._current.close()
        else:
            Log.info(f"Using media provider {provider}")
        self._current = adapter
        return adapter

    def close(self) -> None:
        if self._current is not None:
            self._current.close()
            self._current = None
