"""Abstract base classes for dependency injection."""

from abc import ABC, abstractmethod

from .models import AttemptRecord


class HistoryStore(ABC):
    """Append-only log of answer attempts."""

    @abstractmethod
    def append(self, record: AttemptRecord) -> bool:
        """Persist one record. Invalid records are rejected and logged.
        Returns True if the record was stored."""
        pass

    @abstractmethod
    def read_all(self) -> list[AttemptRecord]:
        """Return all records in insertion order. Corrupt storage yields []."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove all records."""
        pass


class DrawingOracle(ABC):
    """Judges a freehand drawing of a symbol."""

    @abstractmethod
    def evaluate(self, target_symbol: str, user_raster) -> dict:
        """Compare a drawing with the target symbol.
        Returns {'pass': bool, 'score': float}."""
        pass
