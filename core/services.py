"""Service-layer functions for the core app.

Services in `core` coordinate Django request/session concerns with the pure
parsing and charting modules.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Final

from django.core.cache import BaseCache, caches

from analysis.dataset import DataFormatError, TabularDataset, normalize_table
from analysis.editor_state import EditorState, replace_dataset
from core.parsers.table_file import ImportIOError, read_table_file

logger = logging.getLogger(__name__)

IMPORT_TICKET_KEY: Final[str] = "charts_import_ticket"
IMPORT_TICKET_TIMEOUT: Final[int] = 10 * 60


@dataclass(frozen=True, slots=True)
class ImportResult:
    """Outcome of a dataset import.

    Attributes:
        state: Editor state after the import.
        dataset: Normalized dataset read from the file.
        committed: False when a newer import superseded this one.
    """

    state: EditorState
    dataset: TabularDataset
    committed: bool


class ImportCoordinator:
    """Track the newest dataset import for one editor session.

    Each import takes a ticket before its file is parsed; only the holder of
    the newest ticket may replace the dataset. Tickets live in the Django
    cache under the session key, so concurrent requests on one session (each
    holding its own session copy) see each other's tickets.
    """

    def __init__(self, session_key: str, *, cache: BaseCache | None = None) -> None:
        """Initialize for one session.

        Args:
            session_key: Key of the editor session the imports belong to.
            cache: Cache backend holding tickets; defaults to the default cache.
        """

        self._key = f"{IMPORT_TICKET_KEY}:{session_key}"
        self._cache = cache if cache is not None else caches["default"]

    def begin(self) -> str:
        """Start an import and return its ticket, superseding older imports."""

        ticket = uuid.uuid4().hex
        self._cache.set(self._key, ticket, timeout=IMPORT_TICKET_TIMEOUT)
        return ticket

    def is_current(self, ticket: str) -> bool:
        """Return True when `ticket` belongs to the newest import."""

        return self._cache.get(self._key) == ticket

    def commit(self, ticket: str, state: EditorState, dataset: TabularDataset) -> EditorState | None:
        """Replace the dataset when `ticket` is still current.

        Returns:
            The new EditorState, or None when the import was superseded.
        """

        if not self.is_current(ticket):
            logger.info("Discarding superseded import %s", ticket)
            return None
        self._cache.delete(self._key)
        return replace_dataset(state, dataset)


def read_dataset_file(filename: str, data: bytes) -> TabularDataset:
    """Read and normalize an uploaded table file.

    Args:
        filename: Original upload name.
        data: Raw file bytes.

    Returns:
        Normalized TabularDataset.

    Raises:
        ImportIOError: When the file cannot be read.
        DataFormatError: When the table has an invalid shape.
    """

    table = read_table_file(filename, data)
    return normalize_table(table.headers, table.rows)


def import_dataset_file(
    state: EditorState,
    *,
    filename: str,
    data: bytes,
    coordinator: ImportCoordinator,
) -> ImportResult:
    """Import a file into the editor, leaving `state` untouched on failure.

    Args:
        state: Current editor state.
        filename: Original upload name.
        data: Raw file bytes.
        coordinator: Import coordinator for the editor session.

    Returns:
        ImportResult describing the new state.

    Raises:
        ImportIOError: When the file cannot be read.
        DataFormatError: When the table has an invalid shape.
    """

    ticket = coordinator.begin()
    try:
        dataset = read_dataset_file(filename, data)
    except (ImportIOError, DataFormatError) as exc:
        logger.warning("Import of %r failed: %s", filename, exc)
        raise
    committed = coordinator.commit(ticket, state, dataset)
    if committed is None:
        return ImportResult(state=state, dataset=dataset, committed=False)
    logger.info(
        "Imported %r: %d rows, %d value columns", filename, len(dataset.labels), len(dataset.series)
    )
    return ImportResult(state=committed, dataset=dataset, committed=True)
