"""
Module: storage.file_locking

Purpose:
    Cross-platform file locking for the JSON document store, so that two
    processes saving the same evaluation never interleave writes.
    Uses portalocker for Mac, Windows, and Linux compatibility.

Key Functions:
    - locked_file: Context manager for locked file access
    - locked_read_json: Read JSON under a shared lock
    - locked_write_json: Replace JSON contents under an exclusive lock
    - locked_read_modify_write_json: Read-modify-write JSON with lock

Dependencies:
    - portalocker: Cross-platform file locking

Used By:
    - storage.repository: Document and category persistence
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Generator

import portalocker

logger = logging.getLogger(__name__)


@contextmanager
def locked_file(
    path: Path,
    mode: str = 'r',
    lock_type: int = portalocker.LOCK_EX,
) -> Generator:
    """
    Context manager for cross-platform locked file access.

    Args:
        path: Path to file.
        mode: File open mode ('r', 'a+', etc.).
        lock_type: Lock type (LOCK_EX for exclusive, LOCK_SH for shared).

    Yields:
        Open file handle with lock held.

    Example:
        >>> with locked_file(path, 'r', portalocker.LOCK_SH) as f:
        ...     data = f.read()
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    # Ensure file exists for read modes
    if 'r' in mode and not path.exists():
        path.touch()

    with open(path, mode, encoding='utf-8') as f:
        portalocker.lock(f, lock_type)
        try:
            yield f
        finally:
            portalocker.unlock(f)


def locked_read_json(path: Path, default: Callable[[], Any] = dict) -> Any:
    """
    Read a JSON file under a shared lock.

    Args:
        path: Path to JSON file.
        default: Factory for the value returned when the file is missing or empty.

    Returns:
        Parsed JSON data.

    Raises:
        json.JSONDecodeError: If the file holds invalid JSON.
    """
    if not path.exists():
        return default()

    with locked_file(path, 'r', portalocker.LOCK_SH) as f:
        content = f.read()

    if not content.strip():
        return default()
    return json.loads(content)


def locked_write_json(path: Path, data: Any) -> None:
    """
    Replace a JSON file's contents under an exclusive lock.

    The file is truncated only once the lock is held, so concurrent readers
    never see a half-written file from this writer.

    Args:
        path: Path to JSON file.
        data: JSON-serializable data.
    """
    with locked_file(path, 'a+', portalocker.LOCK_EX) as f:
        f.seek(0)
        f.truncate()
        json.dump(data, f, indent=2, ensure_ascii=False)
        f.flush()

    logger.debug(f"Wrote {path.name}")


def locked_read_modify_write_json(
    path: Path,
    modifier: Callable[[Any], Any],
    default: Callable[[], Any] = dict,
) -> Any:
    """
    Read JSON, apply modifier, write back - all with exclusive lock.

    Args:
        path: Path to JSON file.
        modifier: Function that takes existing data, returns modified data.
        default: Factory for default data if file doesn't exist.

    Returns:
        The modified data that was written.

    Example:
        >>> def add_category(existing):
        ...     existing.append({"id": "1", "name": "Maths"})
        ...     return existing
        >>> locked_read_modify_write_json(categories_path, add_category, list)
    """
    with locked_file(path, 'a+', portalocker.LOCK_EX) as f:
        # Read existing
        f.seek(0)
        content = f.read()
        if content.strip():
            existing = json.loads(content)
        else:
            existing = default()

        # Modify
        modified = modifier(existing)

        # Write back
        f.seek(0)
        f.truncate()
        json.dump(modified, f, indent=2, ensure_ascii=False)
        f.flush()

        return modified
