"""
breakpoints.py
---------------
Ordered threshold lookup tables.

Every banded mapping in the engine (tenure → sub-score, score → tier,
LTV:CAC → recommendation, k-factor → interpretation) is a BreakpointTable
built from config.yaml. Rows are scanned top-down and the first row whose
threshold the value meets (>=) wins, so boundary values always land in the
higher band.
"""

from typing import Any, Generic, Iterable, List, Sequence, Tuple, TypeVar


T = TypeVar("T")


class BreakpointTable(Generic[T]):
    """
    Maps a numeric value to an output via descending (threshold, output) rows.

    Built once at init. Thread-safe for reads.
    """

    def __init__(self, rows: Iterable[Sequence[Any]], default: T):
        self._rows: List[Tuple[float, T]] = sorted(
            ((float(threshold), output) for threshold, output in rows),
            key=lambda row: row[0],
            reverse=True,
        )
        self.default = default

    @classmethod
    def from_config(cls, block: dict) -> "BreakpointTable":
        """Builds a table from a {thresholds: [[t, v], ...], default: v} config block."""
        return cls(block["thresholds"], block["default"])

    def lookup(self, value: float) -> T:
        """Returns the output of the first row with value >= threshold, else the default."""
        for threshold, output in self._rows:
            if value >= threshold:
                return output
        return self.default

    @property
    def rows(self) -> List[Tuple[float, T]]:
        return list(self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    def __repr__(self) -> str:
        return f"BreakpointTable(rows={self._rows}, default={self.default!r})"
