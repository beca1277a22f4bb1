import itertools
import threading

from authority import db, socketio
from authority.models import User

# Held from commit to seq draw so a higher seq never carries an older board
_snapshot_lock = threading.RLock()
_seq_counter = itertools.count(1)


def next_seq() -> int:
    with _snapshot_lock:
        return next(_seq_counter)


def ranked_leaderboard() -> list:
    """Every user ordered by score, ties broken by username.

    Ranks are positions, so they are unique even for equal scores.
    """
    users = User.query.order_by(User.score.desc(), User.username.asc()).all()
    return [
        {'username': u.username, 'score': u.score, 'rank': position}
        for position, u in enumerate(users, start=1)
    ]


def current_snapshot() -> dict:
    with _snapshot_lock:
        return {'leaderboard': ranked_leaderboard(), 'seq': next_seq()}


def rank_of(user: User) -> int:
    for entry in ranked_leaderboard():
        if entry['username'] == user.username:
            return entry['rank']
    raise LookupError(user.username)


def parse_increment(value) -> int:
    """Accept a wheel label: a non-negative integer, sent as a string."""
    if isinstance(value, bool):
        raise ValueError('increment must be a wheel label')
    increment = int(value)
    if increment < 0:
        raise ValueError('increment must not be negative')
    return increment


def apply_increment(user: User, increment: int) -> dict:
    """Add to the user's score and broadcast the resulting snapshot.

    Returns the same `{leaderboard, seq}` payload that was broadcast.
    """
    with _snapshot_lock:
        db.session.refresh(user)
        user.score = (user.score or 0) + increment
        db.session.add(user)
        db.session.commit()
        payload = current_snapshot()
    socketio.emit('leaderboard-update', payload)
    return payload
