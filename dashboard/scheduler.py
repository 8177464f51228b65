"""
Auto-Refresh Scheduler

Background thread that re-reads the registry every interval while auto
refresh is on. One refresh runs immediately on start; after that one per
interval. At most one thread is alive at a time.
"""

import logging
import threading
from typing import Callable, Optional

from dashboard.models import SchedulerState

logger = logging.getLogger(__name__)


class AutoRefreshScheduler:
    """
    Periodically invokes a refresh callable on a daemon thread.
    """
    
    def __init__(self, refresh: Callable[[], object], interval_ms: int = 5000):
        """
        Initialize scheduler.
        
        Args:
            refresh: Called once per tick; exceptions are logged and the loop continues
            interval_ms: Tick interval in milliseconds (must be positive)
        """
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {interval_ms}")
        
        self._refresh = refresh
        self.interval_ms = interval_ms
        self.tick_count = 0
        
        self._lock = threading.Lock()
        self._stop_event: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None
    
    @property
    def state(self) -> SchedulerState:
        with self._lock:
            return SchedulerState.RUNNING if self._thread is not None else SchedulerState.STOPPED
    
    @property
    def running(self) -> bool:
        return self.state is SchedulerState.RUNNING
    
    def start(self) -> bool:
        """Start ticking. Returns False (and does nothing) if already running."""
        with self._lock:
            if self._thread is not None:
                logger.warning("Auto refresh already running")
                return False
            
            stop_event = threading.Event()
            thread = threading.Thread(
                target=self._run,
                args=(stop_event,),
                name="auto-refresh",
                daemon=True,
            )
            self._stop_event = stop_event
            self._thread = thread
            thread.start()
        
        logger.info(f"Auto refresh started (interval={self.interval_ms}ms)")
        return True
    
    def stop(self) -> bool:
        """
        Stop ticking. Returns False if not running.
        
        Waits for an in-flight tick to finish, so no refresh starts after this returns.
        """
        with self._lock:
            if self._thread is None:
                return False
            stop_event, thread = self._stop_event, self._thread
            self._stop_event = None
            self._thread = None
            stop_event.set()
        
        if thread is not threading.current_thread():
            thread.join(timeout=max(5.0, self.interval_ms / 1000.0))
        
        logger.info("Auto refresh stopped")
        return True
    
    def _run(self, stop_event: threading.Event):
        """Main loop (runs in background thread)"""
        interval = self.interval_ms / 1000.0
        self._tick(stop_event)
        while not stop_event.wait(interval):
            self._tick(stop_event)
    
    def _tick(self, stop_event: threading.Event):
        if stop_event.is_set():
            return
        self.tick_count += 1
        try:
            self._refresh()
        except Exception as e:
            logger.error(f"Auto refresh tick failed: {e}", exc_info=True)
