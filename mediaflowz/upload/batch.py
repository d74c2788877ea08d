"""Batch lifecycle for pasted or dropped media.

configuration check -> filter -> parallel upload -> one event per file.
"""

import asyncio
import dataclasses
import time
from collections.abc import Iterable, Sequence

from mediaflowz.config.store import SettingsStore
from mediaflowz.errors.exceptions import UnsupportedProviderError
from mediaflowz.errors.models import ErrorType
from mediaflowz.errors.service import ErrorService
from mediaflowz.events.bus import EventBus, Subscription
from mediaflowz.events.models import (
    EventName,
    MediaBatchEvent,
    MediaUploadedEvent,
    MediaUploadErrorEvent,
    SettingsUpdatedEvent,
)
from mediaflowz.logging.logger import Log
from mediaflowz.upload.base import BaseUploader
from mediaflowz.upload.factory import ProviderSelector
from mediaflowz.upload.models import MediaFile, UploadOptions
from mediaflowz.upload.naming import generate_file_name, note_prefix, rename
from mediaflowz.upload.routing import is_in_folders

UNKNOWN_FILE = "unknown"

BatchOutcome = MediaUploadedEvent | MediaUploadErrorEvent


def uploadable_files(
    files: Iterable[MediaFile],
    ignored_folders: Sequence[str] = (),
    source_path: str | None = None,
) -> list[MediaFile]:
    """Media files whose originating document is outside every ignored folder.

    Files without their own source_path inherit the batch's one.
    """
    selected = []
    for file in files:
        if not file.is_media:
            Log.debug(f"Skipping non-media file {file.name} ({file.content_type})")
            continue
        if file.source_path is None and source_path is not None:
            file = dataclasses.replace(file, source_path=source_path)
        if file.source_path and is_in_folders(file.source_path, ignored_folders):
            Log.debug(f"Skipping {file.name}: {file.source_path} is in an ignored folder")
            continue
        selected.append(file)
    return selected


async def upload_batch(
    files: Iterable[MediaFile],
    uploader: BaseUploader,
    bus: EventBus,
    error_service: ErrorService,
    ignored_folders: Sequence[str] = (),
    source_path: str | None = None,
    options: UploadOptions | None = None,
) -> list[BatchOutcome]:
    """Upload a batch in parallel and emit one event per file.

    A failing file never affects its siblings. An unconfigured uploader turns
    any non-empty batch, even one with nothing left to upload after filtering,
    into a single config error for file "unknown".
    """
    files = list(files)
    if not files:
        return []

    if not uploader.is_configured():
        error = error_service.create_error(
            ErrorType.CONFIG, context={"provider": uploader.provider}
        )
        outcome = MediaUploadErrorEvent(error=error, file_name=UNKNOWN_FILE)
        await _report(outcome, bus, error_service)
        return [outcome]

    selected = uploadable_files(files, ignored_folders, source_path)
    if not selected:
        return []

    Log.info(f"Uploading {len(selected)} file(s)", provider=uploader.provider)
    outcomes = await asyncio.gather(
        *(_upload_one(file, uploader, bus, error_service, options) for file in selected)
    )
    return list(outcomes)


async def _upload_one(
    file: MediaFile,
    uploader: BaseUploader,
    bus: EventBus,
    error_service: ErrorService,
    options: UploadOptions | None,
) -> BatchOutcome:
    outcome: BatchOutcome
    try:
        result = await uploader.upload(file, options)
    except Exception as exc:
        error = error_service.classify(
            exc, {"file_name": file.name, "provider": uploader.provider}
        )
        outcome = MediaUploadErrorEvent(error=error, file_name=file.name)
    else:
        Log.info(f"Uploaded {file.name} -> {result.url}", provider=uploader.provider)
        outcome = MediaUploadedEvent(url=result.url, file_name=file.name, result=result)
    await _report(outcome, bus, error_service)
    return outcome


async def _report(outcome: BatchOutcome, bus: EventBus, error_service: ErrorService) -> None:
    if isinstance(outcome, MediaUploadErrorEvent):
        error_service.handle(outcome.error)
        await bus.emit(EventName.MEDIA_UPLOAD_ERROR, outcome)
    else:
        await bus.emit(EventName.MEDIA_UPLOADED, outcome)


def renamed_for_note(
    files: Sequence[MediaFile],
    source_path: str,
    prefix: str | None = None,
    timestamp: int | None = None,
) -> list[MediaFile]:
    """Rename each file to `{prefix}_{timestamp}.{ext}`, one millisecond apart."""
    prefix = prefix or note_prefix(source_path)
    if timestamp is None:
        timestamp = int(time.time() * 1000)
    return [
        rename(file, generate_file_name(file.name, prefix, timestamp + index))
        for index, file in enumerate(files)
    ]


class MediaUploadHandler:
    """Wires paste/drop events to the active uploader."""

    def __init__(
        self,
        store: SettingsStore,
        bus: EventBus,
        selector: ProviderSelector,
        error_service: ErrorService,
    ) -> None:
        self._store = store
        self._bus = bus
        self._selector = selector
        self._error_service = error_service
        self._subscriptions: list[Subscription] = [
            bus.subscribe(EventName.MEDIA_PASTED, self.handle_batch),
            bus.subscribe(EventName.MEDIA_DROPPED, self.handle_batch),
            bus.subscribe(EventName.SETTINGS_UPDATED, self._on_settings_updated),
        ]

    async def handle_batch(self, event: MediaBatchEvent) -> list[BatchOutcome]:
        if not event.files:
            return []
        settings = self._store.settings
        try:
            uploader = self._selector.get_service(settings)
        except UnsupportedProviderError as exc:
            error = self._error_service.classify(exc, {"provider": settings.media_provider})
            outcome = MediaUploadErrorEvent(error=error, file_name=UNKNOWN_FILE)
            await _report(outcome, self._bus, self._error_service)
            return [outcome]

        files = list(event.files)
        if settings.rename_with_note_prefix and event.source_path:
            files = renamed_for_note(files, event.source_path, event.name_prefix)

        return await upload_batch(
            files,
            uploader,
            self._bus,
            self._error_service,
            ignored_folders=settings.ignored_folders,
            source_path=event.source_path,
        )

    def _on_settings_updated(self, event: SettingsUpdatedEvent) -> None:
        try:
            self._selector.get_service(event.settings)
        except UnsupportedProviderError as exc:
            self._error_service.handle(
                self._error_service.classify(exc, {"provider": event.settings.media_provider})
            )

    def close(self) -> None:
        for subscription in self._subscriptions:
            subscription.dispose()
        self._subscriptions.clear()
