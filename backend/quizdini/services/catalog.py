from typing import Any, Dict, Optional

from flask import current_app

from quizdini.models import Match


def cache_key(match_id: str) -> str:
    return f"m-{match_id}"


def get_match_cache():
    """Return the app's match cache, or None when caching is disabled."""
    return current_app.extensions.get('match_cache')


def fetch_match(match_id: str) -> Optional[Dict[str, Any]]:
    """Load a match definition, reading through the cache.

    Returns None when no match has this id. Misses are not cached, so a
    match created later is found on the next request.
    """
    cache = get_match_cache()
    key = cache_key(match_id)
    if cache is not None:
        cached = cache.get(key)
        if cached:
            current_app.logger.debug(f"[match-cache-hit] id={match_id}")
            return cached

    match = Match.query.filter_by(match_id=match_id).first()
    if not match:
        current_app.logger.info(f"[match-not-found] id={match_id}")
        return None

    definition = match.to_definition()
    if cache is not None:
        cache.set(key, definition)
        current_app.logger.debug(f"[match-cache-set] id={match_id}")
    return definition
