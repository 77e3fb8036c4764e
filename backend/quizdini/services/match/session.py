import logging
import threading
from dataclasses import replace
from typing import Any, Callable, Dict, Optional

from . import engine
from .engine import MatchState, Phase


logger = logging.getLogger(__name__)

Emitter = Callable[[str, Dict[str, Any]], None]
Reporter = Callable[[Dict[str, Any]], None]


class MatchSession:
    """Drives one match engine for one connected player.

    Events are applied strictly in arrival order. After each event the new
    snapshot is compared with the previous one and the differences become
    side effects: snapshots pushed through ``emit``, timer ticks and settle
    delays handed to ``scheduler``, and the final results handed to
    ``reporter`` once per completed session.

    Delayed callbacks carry the session generation (and the settle token);
    callbacks from an earlier generation, or arriving after ``teardown``,
    are dropped.
    """

    def __init__(
        self,
        definition: Dict[str, Any],
        *,
        emit: Emitter,
        scheduler=None,
        reporter: Optional[Reporter] = None,
        interval_ms: int = engine.DEFAULT_INTERVAL_MS,
        enter_delay_ms: int = 500,
        round_settle_ms: int = 500,
        game_over_settle_ms: int = 1000,
        rng=None,
    ):
        self.state: MatchState = engine.new_session(definition, interval_ms=interval_ms)
        self._emit = emit
        self.scheduler = scheduler
        self._reporter = reporter
        self._enter_delay_ms = enter_delay_ms
        self._round_settle_ms = round_settle_ms
        self._game_over_settle_ms = game_over_settle_ms
        self._rng = rng
        self._lock = threading.RLock()
        self._closed = False
        self._reported_generation = 0

    @property
    def closed(self) -> bool:
        return self._closed

    # ---- player events ----

    def start(self) -> None:
        self._apply(lambda s: engine.start(s, self._rng))

    def play_again(self) -> None:
        self._apply(lambda s: engine.to_splash(s, self._rng))

    def board_entered(self) -> None:
        self._apply(engine.enter)

    def drop(self, term_id: str, definition_id: str) -> Optional[bool]:
        with self._lock:
            if self._closed:
                return None
            before = self.state
            self.state, outcome = engine.drop(before, term_id, definition_id)
            if outcome is not None:
                self._emit('drop_result', {
                    'matched': outcome,
                    'term_id': term_id,
                    'definition_id': definition_id,
                })
            self._after(before, self.state)
            return outcome

    def tile_exited(self, tile_id: str, role: str) -> None:
        self._apply(lambda s: engine.exit_tile(s, tile_id, role, self._rng))

    # ---- scheduled events ----

    def tick(self, generation: int) -> bool:
        """Advance the countdown. Returns False once the ticker should stop."""
        with self._lock:
            if self._closed or generation != self.state.generation or not self.state.timer_active:
                return False
            self._apply(engine.timer_tick)
            return self.state.timer_active

    def settle(self, generation: int, token: int) -> None:
        with self._lock:
            if self._closed or generation != self.state.generation:
                logger.debug(f"[settle-stale] match={self.state.match_id} generation={generation} token={token}")
                return
            self._apply(lambda s: engine.settle(s, token, self._rng))

    def auto_enter(self, generation: int, round_no: int) -> None:
        with self._lock:
            if self._closed or generation != self.state.generation or round_no != self.state.round_no:
                return
            self._apply(engine.enter)

    def teardown(self) -> None:
        with self._lock:
            self._closed = True
            logger.info(f"[session-teardown] match={self.state.match_id} generation={self.state.generation}")

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return engine.snapshot(self.state)

    # ---- internals ----

    def _apply(self, transition: Callable[[MatchState], MatchState]) -> None:
        with self._lock:
            if self._closed:
                return
            before = self.state
            self.state = transition(before)
            self._after(before, self.state)

    def _after(self, before: MatchState, after: MatchState) -> None:
        if after is before:
            return

        # Countdown-only changes get a lightweight event
        if replace(before, remaining_ms=after.remaining_ms) == after:
            self._emit('timer', {'remaining': after.remaining_ms / 1000.0})
            return

        self._emit('state_update', engine.snapshot(after))

        if after.generation != before.generation:
            logger.info(f"[session-start] match={after.match_id} generation={after.generation}")

        new_round = after.phase is Phase.DEALING and (
            after.round_no != before.round_no or after.generation != before.generation
        )
        if new_round:
            self._schedule(self._enter_delay_ms, self.auto_enter, after.generation, after.round_no)

        if after.timer_active and not before.timer_active and self.scheduler is not None:
            self.scheduler.start_ticker(after.interval_ms, self.tick, after.generation)

        if after.pending is not None and after.pending != before.pending:
            if after.pending.kind == 'deal':
                delay = self._round_settle_ms
                logger.info(f"[round-cleared] match={after.match_id} round={after.round_no}")
            else:
                delay = self._game_over_settle_ms
                logger.info(f"[time-expired] match={after.match_id} score={after.score}")
            self._schedule(delay, self.settle, after.generation, after.pending.token)

        if after.phase is Phase.GAME_OVER and before.phase is not Phase.GAME_OVER:
            self._emit('game_over', after.results or engine.results(after))
            self._report(after)

    def _schedule(self, delay_ms: int, callback, *args) -> None:
        if self.scheduler is not None:
            self.scheduler.call_later(delay_ms, callback, *args)

    def _report(self, state: MatchState) -> None:
        if self._reporter is None or self._reported_generation == state.generation:
            return
        self._reported_generation = state.generation
        try:
            self._reporter(state.results or engine.results(state))
        except Exception as exc:
            # Telemetry is best effort; the game-over screen must not depend on it
            logger.warning(f"[report-failed] match={state.match_id} error={exc}")
