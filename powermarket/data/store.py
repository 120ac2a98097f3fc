import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from powermarket.data.models import Observation, StoreStatus, TimeRange
from powermarket.data.sources import normalize_rows, read_rows
from powermarket.exceptions import SourceUnreadable

logger = logging.getLogger(__name__)


class ObservationStore:
    """In-memory, chronologically ordered market observations.

    Content is an immutable tuple that is swapped in whole on each load, so
    readers always see either the previous or the new snapshot. Loads are
    serialized by a lock; reads take no lock.
    """

    def __init__(self, observations: Optional[Iterable[Observation]] = None):
        self._lock = threading.Lock()
        self._observations: Tuple[Observation, ...] = ()
        self._loaded = False
        if observations is not None:
            self._publish(tuple(observations))

    def _publish(self, observations: Tuple[Observation, ...]):
        self._observations = observations
        self._loaded = True

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def __len__(self) -> int:
        return len(self._observations)

    def snapshot(self) -> Tuple[Observation, ...]:
        return self._observations

    def load(self, sources: Sequence) -> bool:
        """Replace the store content with the observations of ``sources``.

        Sources are read in order and concatenated. A missing or unreadable
        source is logged and skipped. Returns False (keeping the previous
        content) only when an unexpected error aborts the load.
        """
        with self._lock:
            try:
                collected: List[Observation] = []
                for source in sources:
                    path = Path(source)
                    try:
                        rows = read_rows(path)
                    except FileNotFoundError:
                        logger.warning(f"[Store] Source not found, skipping: {path}")
                        continue
                    except SourceUnreadable as e:
                        logger.error(f"[Store] {e}; skipping")
                        continue

                    observations = normalize_rows(rows)
                    logger.info(
                        f"[Store] Loaded {len(observations)} records from {path.name} "
                        f"({len(rows) - len(observations)} rows dropped)"
                    )
                    collected.extend(observations)
            except Exception:
                logger.exception("[Store] Load failed, keeping previous content")
                return False

            self._publish(tuple(collected))
            logger.info(f"[Store] Load complete: {len(collected)} records in total")
            return True

    def load_rows(self, rows: Iterable[Dict[str, Any]]) -> int:
        """Replace the store content from raw rows already read by a caller."""
        with self._lock:
            observations = tuple(normalize_rows(rows))
            self._publish(observations)
        logger.info(f"[Store] Loaded {len(observations)} records from rows")
        return len(observations)

    def recent_window(self, n: int) -> List[Observation]:
        if n <= 0:
            return []
        observations = self._observations
        return list(observations[-n:])

    def filter_by_range(self, start: Optional[datetime], end: Optional[datetime] = None) -> List[Observation]:
        """Observations with ``start <= timestamp < end``; a None bound is open."""
        return [
            obs for obs in self._observations
            if (start is None or obs.timestamp >= start) and (end is None or obs.timestamp < end)
        ]

    def status(self) -> StoreStatus:
        observations = self._observations
        if not observations:
            return StoreStatus(count=0)

        monthly: Dict[str, int] = {}
        for obs in observations:
            key = obs.timestamp.strftime("%Y-%m")
            monthly[key] = monthly.get(key, 0) + 1

        timestamps = [obs.timestamp for obs in observations]
        return StoreStatus(
            count=len(observations),
            min_timestamp=min(timestamps),
            max_timestamp=max(timestamps),
            time_range=TimeRange(start=observations[0].timestamp, end=observations[-1].timestamp),
            monthly_distribution=monthly,
        )
