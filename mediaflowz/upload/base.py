from abc import ABC, abstractmethod
from typing import ClassVar

import httpx

from mediaflowz.config.settings import Settings
from mediaflowz.config.store import SettingsStore
from mediaflowz.events.bus import EventBus, Listener, Subscription
from mediaflowz.events.models import EventName
from mediaflowz.upload.models import MediaFile, UploadOptions, UploadResult


class BaseUploader(ABC):
    """Contract for all media hosting provider adapters.

    Adapters read configuration from the SettingsStore on every call, never
    from a cached flag. Each upload works from the snapshot captured when it
    started, so concurrent uploads share no mutable state.
    """

    provider: ClassVar[str]

    def __init__(
        self,
        store: SettingsStore,
        bus: EventBus,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._store = store
        self._bus = bus
        self._client = client
        self._subscriptions: list[Subscription] = []

    @property
    def settings(self) -> Settings:
        return self._store.settings

    @abstractmethod
    async def upload(
        self,
        file: MediaFile,
        options: UploadOptions | None = None,
    ) -> UploadResult:
        """Upload one file.

        Raises:
            ConfigError: if the adapter is not configured for this media kind.
            NetworkError: if the provider could not be reached.
            UploadError: if the provider rejected the payload.
        """

    @abstractmethod
    async def delete(self, public_id: str) -> None:
        """Remove an uploaded asset. Best-effort.

        Raises:
            UploadError: if the provider answered with a failure.
        """

    @abstractmethod
    def get_url(self, public_id: str, transformation: str | None = None) -> str:
        """Delivery URL for a public_id, without any network call."""

    @abstractmethod
    def is_configured(self) -> bool:
        """True when the live settings allow at least one operation."""

    def close(self) -> None:
        """Dispose every event subscription this adapter holds."""
        for subscription in self._subscriptions:
            subscription.dispose()
        self._subscriptions.clear()

    def _subscribe(self, event: EventName, listener: Listener) -> None:
        self._subscriptions.append(self._bus.subscribe(event, listener))
