import argparse
import asyncio
import sys
from dataclasses import dataclass
from pathlib import Path

import httpx

from mediaflowz.config.settings import Settings
from mediaflowz.config.store import SettingsStore
from mediaflowz.editor.markdown import media_markdown
from mediaflowz.errors.service import ErrorService
from mediaflowz.events.bus import EventBus
from mediaflowz.events.models import EventName, MediaBatchEvent, MediaUploadedEvent
from mediaflowz.logging.logger import Log
from mediaflowz.upload.batch import MediaUploadHandler
from mediaflowz.upload.factory import ProviderSelector
from mediaflowz.upload.models import MediaFile


@dataclass
class App:
    """Every service of one running instance, wired together."""

    bus: EventBus
    store: SettingsStore
    error_service: ErrorService
    selector: ProviderSelector
    handler: MediaUploadHandler

    def close(self) -> None:
        self.handler.close()
        self.selector.close()


def build_app(
    settings: Settings,
    client: httpx.AsyncClient | None = None,
    error_service: ErrorService | None = None,
) -> App:
    """Build dependencies: bus -> settings store -> selector -> upload handler."""
    bus = EventBus()
    store = SettingsStore(settings, bus)
    error_service = error_service or ErrorService()
    selector = ProviderSelector(store, bus, client)
    handler = MediaUploadHandler(store, bus, selector, error_service)
    return App(
        bus=bus,
        store=store,
        error_service=error_service,
        selector=selector,
        handler=handler,
    )


async def upload_files(app: App, paths: list[Path], note: str | None) -> int:
    """Drop the files as one batch; return the number of failed uploads."""

    def print_markdown(event: MediaUploadedEvent) -> None:
        Log.info(media_markdown(event.url, event.file_name))

    files = [MediaFile.from_path(path, source_path=note) for path in paths]
    with app.bus.subscribe(EventName.MEDIA_UPLOADED, print_markdown):
        outcomes = await app.handler.handle_batch(
            MediaBatchEvent(files=files, source_path=note)
        )
    return sum(1 for outcome in outcomes if not isinstance(outcome, MediaUploadedEvent))


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="mediaflowz",
        description="Upload media files to the configured provider and print markdown references.",
    )
    parser.add_argument("files", nargs="+", type=Path, help="Image or video files to upload")
    parser.add_argument("--note", default=None,
                        help="Vault path of the note the files are pasted into")
    parser.add_argument("--provider", default=None,
                        help="Override MEDIA_PROVIDER for this run")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Entry point: load settings -> build services -> upload one batch."""
    args = parse_args(argv)
    settings = Settings(media_provider=args.provider) if args.provider else Settings()
    Log.configure(settings.log_level)

    app = build_app(settings)
    try:
        failures = asyncio.run(upload_files(app, args.files, args.note))
    finally:
        app.close()
    if failures:
        Log.error(f"{failures} upload(s) failed")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
