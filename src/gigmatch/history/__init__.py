"""Listening-history sources.

A history source turns user-selected playlist ids into ListeningRecords.
"""

import json
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import TypeAdapter

from ..models import ListeningRecord


@runtime_checkable
class HistorySource(Protocol):
    """Protocol for listening-history providers."""

    @property
    def name(self) -> str:
        ...

    async def get_records(self, playlist_ids: list[str]) -> list[ListeningRecord]:
        """Records for all given playlists, in playlist order.

        A playlist that cannot be fetched contributes no records.
        """
        ...


_RECORDS = TypeAdapter(list[ListeningRecord])


def load_records_file(path: Path) -> list[ListeningRecord]:
    """Read records from a JSON file: a list of {"title", "channel_text"} objects.

    Raises:
        ValueError: If the file is not valid JSON or does not match the schema
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"{path} is not valid JSON: {e}") from e
    return _RECORDS.validate_python(data)


__all__ = ["HistorySource", "load_records_file"]
