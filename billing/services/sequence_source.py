from abc import ABC, abstractmethod
import random
import time

from sqlalchemy.orm import Session

from ..config import settings
from .counters import next_value


class SequenceSource(ABC):
    @abstractmethod
    def next_suffix(
        self, db: Session, owner_id: int, invoice_type: str, year: int
    ) -> str:
        raise NotImplementedError


class CounterSequenceSource(SequenceSource):
    def next_suffix(
        self, db: Session, owner_id: int, invoice_type: str, year: int
    ) -> str:
        value = next_value(db, f"invoice:{owner_id}:{invoice_type}:{year}")
        return f"{value:05d}"


class TimestampSequenceSource(SequenceSource):
    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def next_suffix(
        self, db: Session, owner_id: int, invoice_type: str, year: int
    ) -> str:
        millis = str(time.time_ns() // 1_000_000)[-6:]
        return f"{millis}{self._rng.randrange(1000):03d}"


def get_sequence_source() -> SequenceSource:
    if settings.invoice_number_strategy == "timestamp":
        return TimestampSequenceSource()
    return CounterSequenceSource()
