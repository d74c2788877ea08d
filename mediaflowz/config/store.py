from mediaflowz.config.settings import Settings
from mediaflowz.events.bus import EventBus
from mediaflowz.events.models import EventName, SettingsUpdatedEvent
from mediaflowz.logging.logger import Log


class SettingsStore:
    """Holds the current settings snapshot and announces replacements.

    Snapshots are never mutated in place: an update validates a new Settings
    object, so readers that captured the previous one keep a consistent view.
    """

    def __init__(self, settings: Settings, bus: EventBus) -> None:
        self._settings = settings
        self._bus = bus

    @property
    def settings(self) -> Settings:
        return self._settings

    async def update(self, **changes: object) -> Settings:
        """Validate a new snapshot with the given field changes and emit SETTINGS_UPDATED."""
        data = self._settings.model_dump()
        data.update(changes)
        self._settings = Settings(**data)
        Log.info(
            f"Settings updated: provider={self._settings.media_provider}, "
            f"changed={sorted(changes)}"
        )
        await self._bus.emit(
            EventName.SETTINGS_UPDATED, SettingsUpdatedEvent(settings=self._settings)
        )
        return self._settings

    async def replace(self, settings: Settings) -> None:
        """Swap in a full snapshot (e.g. loaded from disk) and emit SETTINGS_UPDATED."""
        self._settings = settings
        await self._bus.emit(
            EventName.SETTINGS_UPDATED, SettingsUpdatedEvent(settings=settings)
        )

    async def save(self) -> None:
        """Announce that the current snapshot was persisted by the host."""
        await self._bus.emit(
            EventName.SETTINGS_SAVED, SettingsUpdatedEvent(settings=self._settings)
        )
