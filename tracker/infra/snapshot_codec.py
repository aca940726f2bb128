"""
Snapshot Codec - The single JSON document holding all tracked state.

Two read paths with different failure rules:
- `deserialize` is used for the app's own storage. Missing or corrupt data
  means "first run": it returns the default snapshot.
- `parse_import` is used for user-selected files. Bad data raises
  FormatError so the caller can report it and keep its current state.
"""

import json
import logging
from datetime import datetime
from typing import Optional, Union

from pydantic import ValidationError

from tracker.domain.exceptions import FormatError
from tracker.domain.models import Snapshot

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = "1.0.0"


def default_snapshot() -> Snapshot:
    """Empty ledger, zeroed stats, Pomodoro off, stopwatch stopped"""
    return Snapshot(version=SNAPSHOT_VERSION)


def serialize(snapshot: Snapshot, pretty: bool = False) -> str:
    """
    Encode a snapshot as JSON with camelCase keys.

    `lastUpdated` and `version` are stamped on the output; the given
    snapshot is not modified.
    """
    stamped = snapshot.model_copy(update={
        "last_updated": datetime.now(),
        "version": SNAPSHOT_VERSION,
    })
    return stamped.model_dump_json(by_alias=True, indent=2 if pretty else None)


def _validate(blob: Union[str, bytes]) -> Snapshot:
    try:
        data = json.loads(blob)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise FormatError(f"Invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise FormatError("Expected a JSON object at the top level")

    # Documents written by older versions use null for "not set"
    data = {key: value for key, value in data.items() if value is not None}
    try:
        return Snapshot.model_validate(data)
    except ValidationError as e:
        raise FormatError(f"Invalid snapshot structure: {e.error_count()} error(s)\n{e}") from e


def deserialize(blob: Optional[Union[str, bytes]]) -> Snapshot:
    """
    Decode stored state, falling back to defaults on any problem.

    First run (no blob) and corrupted storage are treated the same way.
    """
    if not blob:
        return default_snapshot()
    try:
        return _validate(blob)
    except FormatError as e:
        logger.warning(f"Stored snapshot is unreadable, starting from defaults: {e}")
        return default_snapshot()


def parse_import(blob: Union[str, bytes]) -> Snapshot:
    """
    Decode a user-supplied document.

    Raises:
        FormatError: If the blob is empty, not JSON or not a snapshot
    """
    if not blob:
        raise FormatError("Import file is empty")
    snapshot = _validate(blob)
    # An object sharing no key with the snapshot is some other document
    if not snapshot.model_fields_set:
        raise FormatError("Document contains no tracker data")
    return snapshot
