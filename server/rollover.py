"""Background ticker that notices when the calendar day rolls over."""
import logging
import threading

import tracker
import tracker_config

logger = logging.getLogger(__name__)


class RolloverTicker:
    """Call ``on_tick`` every ``interval`` seconds on a daemon thread.

    ``on_tick`` defaults to ``tracker.tick_all``, which re-derives today in
    the fixed zone for every open tracker and reloads the ones whose day
    changed. ``stop()`` must be called on teardown so no tick runs against
    state that is being disposed of.
    """

    def __init__(self, interval=None, on_tick=None):
        self.interval = interval if interval is not None else tracker_config.TICK_SECONDS
        self.on_tick = on_tick or tracker.tick_all
        self._stop = threading.Event()
        self._thread = None

    @property
    def running(self):
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name='rollover-ticker', daemon=True)
        self._thread.start()
        logger.info(f"Rollover ticker started, interval {self.interval}s")

    def stop(self, timeout=5):
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info("Rollover ticker stopped")

    def _run(self):
        while not self._stop.wait(self.interval):
            try:
                self.on_tick()
            except Exception:
                # keep ticking; the next interval gets another chance
                logger.exception("Rollover tick failed")
