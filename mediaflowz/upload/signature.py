import hashlib
from collections.abc import Mapping


def canonical_query(params: Mapping[str, object]) -> str:
    """Join params as key=value pairs, sorted by key, separated by '&'."""
    return "&".join(f"{key}={params[key]}" for key in sorted(params))


def sign(params: Mapping[str, object], secret: str) -> str:
    """SHA-1 hex digest of the canonical query string suffixed with the secret."""
    payload = canonical_query(params) + secret
    return hashlib.sha1(payload.encode("utf-8")).hexdigest()
