"""Match engine: the state machine behind one play session of a match game.

Every operation takes the previous ``MatchState`` snapshot and returns a new
one; nothing is mutated in place. Operations called in the wrong phase, or
with ids that are not on the board, return the snapshot unchanged.

Lifecycle:
    splash -> dealing -> playing -> round_clearing -> dealing -> ...
    ... -> time_expired -> game_over -> (to_splash) -> dealing
"""
from __future__ import annotations

import random
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple


PALETTE = (
    'red',
    'orange',
    'yellow',
    'lime',
    'green',
    'cyan',
    'blue',
    'purple',
    'magenta',
    'navy',
    'gray',
    'teal',
)

TERM = 'term'
DEFINITION = 'definition'

DEFAULT_COLOR_SCHEME = 'mono'
DEFAULT_DURATION = 180  # seconds
DEFAULT_ITEMS_PER_BOARD = 9
DEFAULT_INTERVAL_MS = 100


class Phase(str, Enum):
    SPLASH = 'splash'
    DEALING = 'dealing'
    PLAYING = 'playing'
    ROUND_CLEARING = 'round_clearing'
    TIME_EXPIRED = 'time_expired'
    GAME_OVER = 'game_over'


@dataclass(frozen=True)
class Pair:
    pair_id: str
    term: str
    definition: str


@dataclass(frozen=True)
class Tile:
    tile_id: str
    pair_id: str
    role: str
    text: str
    color: str = ''
    visible: bool = True
    matched: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.tile_id,
            'pair_id': self.pair_id,
            'role': self.role,
            'text': self.text,
            'color': self.color,
            'visible': self.visible,
            'matched': self.matched,
        }


@dataclass(frozen=True)
class Options:
    color_scheme: str = DEFAULT_COLOR_SCHEME
    duration: int = DEFAULT_DURATION
    items_per_board: int = DEFAULT_ITEMS_PER_BOARD


@dataclass(frozen=True)
class PendingAction:
    """A delayed transition waiting for its settle delay to elapse."""

    kind: str  # 'deal' or 'game_over'
    token: int


@dataclass(frozen=True)
class MatchState:
    match_id: str
    title: str
    author: str
    instructions: str
    options: Options
    deck: Tuple[Pair, ...]
    interval_ms: int = DEFAULT_INTERVAL_MS
    phase: Phase = Phase.SPLASH
    generation: int = 0
    round_no: int = 0
    terms: Tuple[Tile, ...] = ()
    definitions: Tuple[Tile, ...] = ()
    unmatched: int = 0
    correct: int = 0
    incorrect: int = 0
    score: int = 0
    playing: bool = False
    time_expired: bool = False
    timer_active: bool = False
    remaining_ms: int = 0
    pending: Optional[PendingAction] = None
    seq: int = 0
    # pair_id -> (hits, misses); replaced wholesale on every update
    tally: Dict[str, Tuple[int, int]] = field(default_factory=dict)
    results: Optional[Dict[str, Any]] = None


def _new_id() -> str:
    return uuid.uuid4().hex


def _find(tiles: Iterable[Tile], tile_id: str) -> Optional[Tile]:
    for tile in tiles:
        if tile.tile_id == tile_id:
            return tile
    return None


def _parse_options(raw: Optional[Dict[str, Any]]) -> Options:
    raw = raw or {}
    scheme = str(raw.get('colorScheme') or DEFAULT_COLOR_SCHEME).lower()
    try:
        duration = int(raw.get('duration', DEFAULT_DURATION))
    except (TypeError, ValueError):
        duration = DEFAULT_DURATION
    try:
        items_per_board = int(raw.get('itemsPerBoard', DEFAULT_ITEMS_PER_BOARD))
    except (TypeError, ValueError):
        items_per_board = DEFAULT_ITEMS_PER_BOARD
    return Options(
        color_scheme=scheme,
        duration=max(duration, 1),
        items_per_board=max(items_per_board, 1),
    )


def new_session(definition: Dict[str, Any], interval_ms: int = DEFAULT_INTERVAL_MS) -> MatchState:
    """Build the splash state for a match definition.

    Pair ids are assigned here, once per session. Stored documents may carry
    the pair list under ``matches`` instead of ``pairs``.
    """
    raw_pairs = definition.get('pairs')
    if raw_pairs is None:
        raw_pairs = definition.get('matches')
    if not raw_pairs:
        raise ValueError('Match definition has no pairs')
    deck = tuple(
        Pair(pair_id=_new_id(), term=str(p.get('term', '')), definition=str(p.get('definition', '')))
        for p in raw_pairs
    )
    options = _parse_options(definition.get('options'))
    return MatchState(
        match_id=str(definition.get('id') or ''),
        title=definition.get('title') or '',
        author=definition.get('author') or '',
        instructions=definition.get('instructions') or '',
        options=options,
        deck=deck,
        interval_ms=max(int(interval_ms), 1),
        remaining_ms=options.duration * 1000,
    )


def assign_colors(count: int, color_scheme: str, rng=None) -> List[str]:
    """Pick one color tag per term tile.

    ``rainbow`` draws from the palette without replacement; once the palette
    runs dry it is refilled and drawn again. Any other scheme yields empty tags.
    """
    if color_scheme != 'rainbow':
        return [''] * count
    rng = rng or random
    colors: List[str] = []
    pool: List[str] = []
    while len(colors) < count:
        if not pool:
            pool = list(PALETTE)
        colors.append(pool.pop(rng.randrange(len(pool))))
    return colors


def deal(state: MatchState, rng=None) -> MatchState:
    """Deal a fresh round from the full deck."""
    if state.phase not in (Phase.DEALING, Phase.ROUND_CLEARING):
        return state
    rng = rng or random
    shuffled = list(state.deck)
    rng.shuffle(shuffled)
    selected = shuffled[:min(state.options.items_per_board, len(shuffled))]
    colors = assign_colors(len(selected), state.options.color_scheme, rng)

    terms = [
        Tile(tile_id=_new_id(), pair_id=p.pair_id, role=TERM, text=p.term, color=color)
        for p, color in zip(selected, colors)
    ]
    definitions = [
        Tile(tile_id=_new_id(), pair_id=p.pair_id, role=DEFINITION, text=p.definition)
        for p in selected
    ]
    # Columns are shuffled independently
    rng.shuffle(terms)
    rng.shuffle(definitions)

    return replace(
        state,
        phase=Phase.DEALING,
        round_no=state.round_no + 1,
        terms=tuple(terms),
        definitions=tuple(definitions),
        unmatched=len(selected),
        pending=None,
    )


def start(state: MatchState, rng=None) -> MatchState:
    """Begin a new session from the splash screen."""
    if state.phase is not Phase.SPLASH:
        return state
    fresh = replace(
        state,
        phase=Phase.DEALING,
        generation=state.generation + 1,
        round_no=0,
        terms=(),
        definitions=(),
        unmatched=0,
        correct=0,
        incorrect=0,
        score=0,
        playing=False,
        time_expired=False,
        timer_active=False,
        remaining_ms=state.options.duration * 1000,
        pending=None,
        tally={},
        results=None,
    )
    return deal(fresh, rng)


def enter(state: MatchState) -> MatchState:
    """The dealt board has finished entering; tiles become interactive.

    The countdown starts the first time a board enters in a session.
    """
    if state.phase is not Phase.DEALING:
        return state
    if state.timer_active:
        return replace(state, phase=Phase.PLAYING, playing=True)
    return replace(
        state,
        phase=Phase.PLAYING,
        playing=True,
        timer_active=True,
        remaining_ms=state.options.duration * 1000,
    )


def _tally(tally: Dict[str, Tuple[int, int]], pair_id: str, hit: bool) -> Dict[str, Tuple[int, int]]:
    hits, misses = tally.get(pair_id, (0, 0))
    if hit:
        hits += 1
    else:
        misses += 1
    updated = dict(tally)
    updated[pair_id] = (hits, misses)
    return updated


def drop(state: MatchState, term_tile_id: str, definition_tile_id: str) -> Tuple[MatchState, Optional[bool]]:
    """Resolve a term tile released onto a definition tile.

    Returns the new state and the outcome: ``True`` for a match, ``False``
    for a miss, ``None`` when the drop was ignored.
    """
    if state.phase is not Phase.PLAYING or not state.playing:
        return state, None
    term = _find(state.terms, term_tile_id)
    definition = _find(state.definitions, definition_tile_id)
    if term is None or definition is None or term.matched or definition.matched:
        return state, None

    matched = term.pair_id == definition.pair_id
    tally = _tally(state.tally, term.pair_id, matched)

    if not matched:
        return replace(
            state,
            incorrect=state.incorrect + 1,
            score=max(state.score - 1, 0),
            tally=tally,
        ), False

    terms = tuple(
        replace(t, visible=False, matched=True) if t.tile_id == term.tile_id else t
        for t in state.terms
    )
    definitions = tuple(
        replace(d, visible=False, matched=True) if d.tile_id == definition.tile_id else d
        for d in state.definitions
    )
    return replace(
        state,
        correct=state.correct + 1,
        score=state.score + 1,
        unmatched=state.unmatched - 1,
        terms=terms,
        definitions=definitions,
        tally=tally,
    ), True


def exit_tile(state: MatchState, tile_id: str, role: str, rng=None) -> MatchState:
    """Remove a hidden tile once its exit animation has finished.

    The remaining tiles of that role are reshuffled. Emptying both columns
    while playing clears the round and queues the next deal.
    """
    if role == TERM:
        tiles = state.terms
    elif role == DEFINITION:
        tiles = state.definitions
    else:
        return state
    tile = _find(tiles, tile_id)
    if tile is None or tile.visible:
        return state

    rng = rng or random
    remaining = [t for t in tiles if t.tile_id != tile_id]
    rng.shuffle(remaining)
    if role == TERM:
        updated = replace(state, terms=tuple(remaining))
    else:
        updated = replace(state, definitions=tuple(remaining))

    if updated.phase is Phase.PLAYING and not updated.terms and not updated.definitions:
        seq = state.seq + 1
        return replace(
            updated,
            phase=Phase.ROUND_CLEARING,
            pending=PendingAction(kind='deal', token=seq),
            seq=seq,
        )
    return updated


def timer_tick(state: MatchState) -> MatchState:
    if not state.timer_active:
        return state
    remaining = max(state.remaining_ms - state.interval_ms, 0)
    if remaining > 0:
        return replace(state, remaining_ms=remaining)
    seq = state.seq + 1
    return replace(
        state,
        phase=Phase.TIME_EXPIRED,
        remaining_ms=0,
        timer_active=False,
        playing=False,
        time_expired=True,
        pending=PendingAction(kind='game_over', token=seq),
        seq=seq,
    )


def settle(state: MatchState, token: int, rng=None) -> MatchState:
    """Run the pending delayed transition if ``token`` still refers to it."""
    pending = state.pending
    if pending is None or pending.token != token:
        return state
    if pending.kind == 'deal' and state.phase is Phase.ROUND_CLEARING:
        return deal(state, rng)
    if pending.kind == 'game_over' and state.phase is Phase.TIME_EXPIRED:
        over = replace(state, phase=Phase.GAME_OVER, pending=None)
        return replace(over, results=results(over))
    return state


def to_splash(state: MatchState, rng=None) -> MatchState:
    """Play again: back through the splash screen into a fresh session."""
    if state.phase not in (Phase.GAME_OVER, Phase.SPLASH):
        return state
    return start(replace(state, phase=Phase.SPLASH), rng)


def results(state: MatchState) -> Dict[str, Any]:
    terms_by_pair = {p.pair_id: p.term for p in state.deck}
    pairs = [
        {'pair_id': pair_id, 'term': terms_by_pair.get(pair_id, ''), 'hits': hits, 'misses': misses}
        for pair_id, (hits, misses) in state.tally.items()
    ]
    return {
        'correct': state.correct,
        'incorrect': state.incorrect,
        'score': state.score,
        'pairs': pairs,
    }


def snapshot(state: MatchState) -> Dict[str, Any]:
    """Serialize a state for the presentation layer."""
    return {
        'match_id': state.match_id,
        'phase': state.phase.value,
        'round': state.round_no,
        'correct': state.correct,
        'incorrect': state.incorrect,
        'score': state.score,
        'unmatched': state.unmatched,
        'playing': state.playing,
        'time_expired': state.time_expired,
        'remaining': state.remaining_ms / 1000.0,
        'duration': state.options.duration,
        'items_per_board': state.options.items_per_board,
        'terms': [t.to_dict() for t in state.terms],
        'definitions': [d.to_dict() for d in state.definitions],
        'results': state.results,
    }
