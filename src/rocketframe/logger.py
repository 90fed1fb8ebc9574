"""
CSV recording of change events.

A ``ChangeEventLogger`` is itself a change listener: register it on a
rocket's bus and every delivered event becomes one CSV row. Rows are held
in memory and written in batches of ``buffer_size``.
"""
from __future__ import annotations

import csv
from pathlib import Path
from typing import Any, TextIO

from rocketframe.components.events import ChangeType, ComponentChangeEvent

VALID_FIELDS = ("mod_id", "source", "source_id", "flags")


def _flag_names(flags: ChangeType) -> str:
    # BOTH is an alias of MASS|AERODYNAMIC and would duplicate them
    return "|".join(
        member.name for member in ChangeType
        if member is not ChangeType.BOTH and member in flags
    )


_EXTRACTORS = {
    "mod_id": lambda event: str(event.mod_id),
    "source": lambda event: event.source.name,
    "source_id": lambda event: event.source.id,
    "flags": lambda event: _flag_names(event.type),
}


class ChangeEventLogger:
    """
    Buffered CSV writer for :class:`ComponentChangeEvent` streams.

    Parameters
    ----------
    filepath : str | Path
        Destination CSV file. Missing parent directories are created.
    buffer_size : int
        Rows held in memory before they are written
    fields : list[str] | None
        Columns to record, in order. Default: all of ``VALID_FIELDS``
        ("mod_id" bus counter, "source" component name, "source_id"
        component id, "flags" change type names joined with "|").

    Examples
    --------
    >>> with ChangeEventLogger("events.csv") as recorder:
    ...     rocket.change_bus.add_listener(recorder)
    ...     rocket.get_child(0).name = "Booster"

    Without the ``with`` block the file is opened by the first event and
    :meth:`close` must be called to write the tail of the buffer.
    """

    def __init__(
        self,
        filepath: str | Path,
        buffer_size: int = 100,
        fields: list[str] | None = None,
    ) -> None:
        columns = list(VALID_FIELDS if fields is None else fields)
        unknown = [name for name in columns if name not in _EXTRACTORS]
        if unknown:
            raise ValueError(
                f"Unknown event fields {unknown}; choose from {list(VALID_FIELDS)}"
            )

        self.filepath = Path(filepath)
        self.buffer_size = max(1, int(buffer_size))
        self.fields = columns
        self.event_count = 0

        self._pending: list[list[str]] = []
        self._stream: TextIO | None = None
        self._csv: Any = None

        self.filepath.parent.mkdir(parents=True, exist_ok=True)

    def open(self) -> ChangeEventLogger:
        """Create (truncate) the file and write the header row."""
        if self._stream is None:
            self._stream = open(self.filepath, "w", newline="", encoding="utf-8")
            self._csv = csv.writer(self._stream)
            self._csv.writerow(self.fields)
            self._stream.flush()
        return self

    def __enter__(self) -> ChangeEventLogger:
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __call__(self, event: ComponentChangeEvent) -> None:
        self.log(event)

    def log(self, event: ComponentChangeEvent) -> None:
        """Queue one event as a row, writing the batch once it is full."""
        self.open()
        self._pending.append([_EXTRACTORS[name](event) for name in self.fields])
        self.event_count += 1
        if len(self._pending) >= self.buffer_size:
            self.flush()

    def flush(self) -> None:
        """Write queued rows to disk."""
        if self._stream is None or not self._pending:
            return
        self._csv.writerows(self._pending)
        self._stream.flush()
        self._pending = []

    def close(self) -> None:
        """Write what is left and release the file. Safe to call twice."""
        self.flush()
        if self._stream is not None:
            self._stream.close()
        self._stream = None
        self._csv = None
