from flask_socketio import emit
from authority import socketio
from authority.services.scoring import current_snapshot


def handle_connect():
    emit('connected', {'message': 'Connected'})


def handle_leaderboard_request(data=None):
    # Late joiners can ask for the current snapshot instead of waiting for a change
    emit('leaderboard-update', current_snapshot())


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on the default namespace, which is
    where clients subscribe to leaderboard broadcasts."""
    socketio.on_event('connect', handle_connect, namespace='/')
    socketio.on_event('leaderboard', handle_leaderboard_request, namespace='/')
