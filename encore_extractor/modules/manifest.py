"""Image manifest parsing and largest-layer selection.

``docker save`` writes a ``manifest.json`` whose first entry carries a
``LayerSources`` object mapping layer digests to layer descriptors::

    [{"LayerSources": {"sha256:aaa": {"size": 100, ...}, ...}, ...}]

The largest layer is the one holding the application, so it is the only
layer that gets extracted. ``json`` keeps object keys in document order,
which makes the tie-break (first entry wins) deterministic.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, Optional, Sequence, Union

from common.models import LayerEntry

from .config import ERROR_MESSAGES
from .exceptions import NoLayersFoundError, ParseError, wrap_exception

SHA256_PREFIX = "sha256:"
LAYER_SOURCES_KEY = "LayerSources"


def _declared_size(info: Any) -> Optional[int]:
    """Return the layer's ``size`` if it is a non-negative integer."""
    if not isinstance(info, dict):
        return None
    size = info.get("size")
    # bool은 int의 하위 클래스이므로 명시적으로 제외
    if isinstance(size, bool) or not isinstance(size, int) or size < 0:
        return None
    return size


def parse_layer_sources(manifest_bytes: Union[bytes, str]) -> List[LayerEntry]:
    """
    Decode a manifest document into an ordered list of layer entries.

    Args:
        manifest_bytes: Raw manifest content

    Returns:
        Entries of the first manifest item, in document order

    Raises:
        ParseError: If the document is not JSON or not a non-empty array of objects
        NoLayersFoundError: If ``LayerSources`` is absent, not an object, or empty
    """
    try:
        manifest = json.loads(manifest_bytes)
    except (ValueError, UnicodeDecodeError) as e:
        raise wrap_exception(ParseError, ERROR_MESSAGES["manifest_invalid_json"], e)

    if not isinstance(manifest, list):
        raise ParseError(ERROR_MESSAGES["manifest_not_array"])
    if not manifest:
        raise ParseError(ERROR_MESSAGES["manifest_empty"])
    if not isinstance(manifest[0], dict):
        raise ParseError(ERROR_MESSAGES["manifest_entry_invalid"])

    sources = manifest[0].get(LAYER_SOURCES_KEY)
    if not isinstance(sources, dict) or not sources:
        raise NoLayersFoundError(ERROR_MESSAGES["no_layer_sources"])

    return [LayerEntry(digest=digest, size=_declared_size(info)) for digest, info in sources.items()]


def find_largest_layer(entries: Sequence[LayerEntry]) -> LayerEntry:
    """
    Pick the entry with the strictly greatest size; the first one wins ties.

    Raises:
        NoLayersFoundError: If no entry declares a usable size
    """
    largest: Optional[LayerEntry] = None
    for entry in entries:
        if entry.size is None:
            continue
        if largest is None or entry.size > largest.size:
            largest = entry

    if largest is None:
        raise NoLayersFoundError(ERROR_MESSAGES["no_layer_sources"])
    return largest


def strip_digest_prefix(digest: str) -> str:
    """Remove a leading ``sha256:`` (case-sensitive) from ``digest``."""
    if digest.startswith(SHA256_PREFIX):
        return digest[len(SHA256_PREFIX):]
    return digest


def select_largest_layer(manifest_bytes: Union[bytes, str]) -> str:
    """
    Return the blob name of the largest layer described by ``manifest_bytes``.

    Example:
        >>> select_largest_layer(b'[{"LayerSources": {"sha256:aaa": {"size": 100}, '
        ...                      b'"sha256:bbb": {"size": 500}}}]')
        'bbb'
    """
    return strip_digest_prefix(find_largest_layer(parse_layer_sources(manifest_bytes)).digest)


def read_manifest(manifest_path: Path) -> List[LayerEntry]:
    """
    Read and parse ``manifest.json`` from an extracted image archive.

    Raises:
        ParseError: If the file cannot be read or decoded
        NoLayersFoundError: If the manifest lists no layer sources
    """
    try:
        content = manifest_path.read_bytes()
    except OSError as e:
        raise wrap_exception(
            ParseError,
            ERROR_MESSAGES["manifest_unreadable"].format(path=manifest_path),
            e,
        )
    return parse_layer_sources(content)
