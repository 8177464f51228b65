"""
Service Registry Mirror

In-memory copy of the registry's service instances and the single source of
truth for rendering. Statistics are recomputed on every mutation.

Mutations are serialized by a lock but otherwise apply in the order callers
finish: a replace_all() from a refresh that was in flight will overwrite any
update applied while it was waiting (last writer wins).
"""

import logging
import threading
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional

from dashboard.models import ServiceInstance, Statistics
from dashboard.stats import compute_statistics

logger = logging.getLogger(__name__)


class ServiceMirror:
    def __init__(self, instances: Optional[Iterable[ServiceInstance]] = None, clock: Callable[[], datetime] = datetime.now):
        self._lock = threading.RLock()
        self._clock = clock
        self._instances: List[ServiceInstance] = list(instances or [])
        self._statistics = compute_statistics(self._instances, self._clock())

    def _changed(self):
        self._statistics = compute_statistics(self._instances, self._clock())

    # -------------------------------------------------
    # Mutations
    # -------------------------------------------------

    def replace_all(self, instances: Iterable[ServiceInstance]):
        with self._lock:
            self._instances = list(instances)
            self._changed()
            logger.debug(f"Mirror replaced: {len(self._instances)} instances")

    def insert(self, instance: ServiceInstance):
        """Append a record. Callers pass server-issued records, so ids are unique."""
        with self._lock:
            self._instances.append(instance)
            self._changed()

    def update_by_id(self, service_id: int, patch: Dict[str, Any]) -> bool:
        """
        Merge patch (snake_case field names) into the matching record.

        Returns False without error if the record is gone, e.g. removed by a
        deregister that finished first.
        """
        with self._lock:
            for index, instance in enumerate(self._instances):
                if instance.id == service_id:
                    self._instances[index] = instance.model_copy(update=patch)
                    self._changed()
                    return True
            logger.debug(f"update_by_id: service {service_id} not in mirror")
            return False

    def remove_by_id(self, service_id: int) -> bool:
        with self._lock:
            remaining = [s for s in self._instances if s.id != service_id]
            if len(remaining) == len(self._instances):
                return False
            self._instances = remaining
            self._changed()
            return True

    # -------------------------------------------------
    # Reads
    # -------------------------------------------------

    def instances(self) -> List[ServiceInstance]:
        with self._lock:
            return list(self._instances)

    def get(self, service_id: int) -> Optional[ServiceInstance]:
        with self._lock:
            for instance in self._instances:
                if instance.id == service_id:
                    return instance
            return None

    def instance_count(self, service_name: str) -> int:
        with self._lock:
            return sum(1 for s in self._instances if s.service_name == service_name)

    @property
    def statistics(self) -> Statistics:
        with self._lock:
            return self._statistics

    def __len__(self) -> int:
        with self._lock:
            return len(self._instances)
