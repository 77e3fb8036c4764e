from typing import Any, Dict, Optional

from quizdini import db
from quizdini.models import Ping

MATCH_GAME_TYPE = 'M'


def normalize_ip(ip_address: Optional[str]) -> Optional[str]:
    """Strip the IPv4-mapped IPv6 prefix, e.g. '::ffff:10.0.0.1' -> '10.0.0.1'."""
    if not ip_address:
        return None
    return ip_address.replace('::ffff:', '')


def record_ping(game_id: str, game_type: str, results: Any, ip_address: Optional[str] = None) -> Ping:
    ping = Ping(
        ip_address=normalize_ip(ip_address),
        game_id=game_id,
        game_type=game_type or MATCH_GAME_TYPE,
        results=results,
    )
    db.session.add(ping)
    db.session.commit()
    return ping


def make_reporter(app, match_id: str, ip_address: Optional[str] = None):
    """Build a session reporter that stores final results as a ping.

    The reporter may run from a background timer, so it pushes its own app
    context. Failures are logged and swallowed: telemetry is best effort.
    """

    def _report(results: Dict[str, Any]) -> None:
        with app.app_context():
            try:
                ping = record_ping(match_id, MATCH_GAME_TYPE, results, ip_address)
                app.logger.info(f"[ping] game={match_id} id={ping.id} score={results.get('score')}")
            except Exception as exc:
                db.session.rollback()
                app.logger.warning(f"[ping-failed] game={match_id} error={exc}")

    return _report
