from typing import Any, Callable, List, Tuple


class SocketIOScheduler:
    """Runs match timers as Socket.IO background tasks.

    Callbacks are responsible for checking whether they are still current;
    the scheduler never cancels anything.
    """

    def __init__(self, socketio, logger=None):
        self._socketio = socketio
        self._logger = logger

    def call_later(self, delay_ms: int, callback: Callable[..., Any], *args) -> None:
        def _worker():
            self._socketio.sleep(max(0, delay_ms) / 1000.0)
            try:
                callback(*args)
            except Exception as exc:
                if self._logger is not None:
                    self._logger.exception(f"[timer-error] callback={getattr(callback, '__name__', callback)} error={exc}")

        self._socketio.start_background_task(_worker)

    def start_ticker(self, interval_ms: int, tick: Callable[..., bool], *args) -> None:
        def _worker():
            while True:
                self._socketio.sleep(max(1, interval_ms) / 1000.0)
                try:
                    if not tick(*args):
                        return
                except Exception as exc:
                    if self._logger is not None:
                        self._logger.exception(f"[ticker-error] error={exc}")
                    return

        self._socketio.start_background_task(_worker)


class ManualScheduler:
    """Collects timers so they can be fired on demand.

    Used when the app runs in TESTING mode, where background timers would
    make flows nondeterministic.
    """

    def __init__(self):
        self.delayed: List[Tuple[int, Callable[..., Any], tuple]] = []
        self.tickers: List[Tuple[int, Callable[..., bool], tuple]] = []

    def call_later(self, delay_ms: int, callback: Callable[..., Any], *args) -> None:
        self.delayed.append((delay_ms, callback, args))

    def start_ticker(self, interval_ms: int, tick: Callable[..., bool], *args) -> None:
        self.tickers.append((interval_ms, tick, args))

    def run_delayed(self) -> int:
        """Fire every pending delayed callback, including ones they schedule."""
        fired = 0
        while self.delayed:
            _, callback, args = self.delayed.pop(0)
            callback(*args)
            fired += 1
        return fired

    def run_ticks(self, count: int) -> int:
        """Fire up to ``count`` ticks on each live ticker. Returns ticks fired."""
        fired = 0
        for _ in range(count):
            if not self.tickers:
                break
            current = list(self.tickers)
            alive = []
            for interval_ms, tick, args in current:
                fired += 1
                if tick(*args):
                    alive.append((interval_ms, tick, args))
            # Tickers started while this pass ran
            self.tickers = alive + self.tickers[len(current):]
        return fired


def scheduler_for(app, socketio):
    if app.config.get('TESTING') and not app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
        return ManualScheduler()
    return SocketIOScheduler(socketio, logger=app.logger)
