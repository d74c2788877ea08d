"""Path-prefix routing of vault paths to storage zones and delivery domains."""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from mediaflowz.errors.exceptions import ConfigError


@dataclass(frozen=True)
class StorageZone:
    """An object-storage zone with its own key and pull (delivery) URL."""

    name: str
    access_key: str
    pull_zone_url: str
    folders: tuple[str, ...] = field(default_factory=tuple)


def normalize_path(path: str) -> str:
    return path.replace("\\", "/")


def normalize_folder(folder: str) -> str:
    return normalize_path(folder).strip("/")


def matches_folder(path: str, folder: str) -> bool:
    """True if path is the folder itself or lies anywhere below it."""
    prefix = normalize_folder(folder)
    if not prefix:
        return False
    normalized = normalize_path(path)
    return normalized == prefix or normalized.startswith(prefix + "/")


def is_in_folders(path: str, folders: Iterable[str]) -> bool:
    return any(matches_folder(path, folder) for folder in folders)


def select_zone(
    file_path: str | None,
    zones: Sequence[StorageZone],
    default_zone_name: str | None = None,
) -> StorageZone:
    """Pick the zone that receives an upload.

    First zone (in configured order) owning a folder that prefixes file_path,
    else the zone named default_zone_name, else the first zone.

    Raises:
        ConfigError: if no zone is configured.
    """
    if not zones:
        raise ConfigError("No storage zone configured")
    if file_path:
        for zone in zones:
            if is_in_folders(file_path, zone.folders):
                return zone
    return default_zone(zones, default_zone_name)


def default_zone(
    zones: Sequence[StorageZone],
    default_zone_name: str | None = None,
) -> StorageZone:
    if not zones:
        raise ConfigError("No storage zone configured")
    if default_zone_name:
        for zone in zones:
            if zone.name == default_zone_name:
                return zone
    return zones[0]


def custom_cdn_for_path(path: str, custom_cdns: Mapping[str, str]) -> str | None:
    """Delivery domain mapped to the first folder prefix matching path, if any."""
    for folder, cdn_url in custom_cdns.items():
        if matches_folder(path, folder):
            return cdn_url
    return None
