from flask_socketio import join_room, leave_room, emit

from karaoke_roulette import get_controller, socketio
from karaoke_roulette.services.playback import parse_media_url

NAMESPACE = '/ws'
SESSION_ROOM = 'session'


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})
    emit('state_update', get_controller().snapshot())


def handle_join_session(data=None):
    join_room(SESSION_ROOM)
    emit('joined', {'room': SESSION_ROOM})
    emit('state_update', get_controller().snapshot())


def handle_leave_session(data=None):
    leave_room(SESSION_ROOM)
    emit('left', {'room': SESSION_ROOM})


def handle_ping(data):
    emit('pong', data or {})


def broadcast_session_event(event, payload):
    """Forward a controller event to the clients that joined the session room.

    A playback request is resolved here so clients get the embeddable id;
    URLs without a recognizable video produce no playback event.
    """
    if event == 'playback_requested':
        parsed = parse_media_url(payload.get('media_url'))
        if parsed is None:
            return
        payload = dict(payload, **parsed.to_dict())
        event = 'playback'
    socketio.emit(event, payload, to=SESSION_ROOM, namespace=NAMESPACE)


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('join_session', handle_join_session, namespace=NAMESPACE)
    socketio.on_event('leave_session', handle_leave_session, namespace=NAMESPACE)
    socketio.on_event('ping', handle_ping, namespace=NAMESPACE)

    if testing:
        # Test-only mirror on default namespace
        socketio.on_event('connect', handle_connect, namespace='/')
        socketio.on_event('join_session', handle_join_session, namespace='/')
        socketio.on_event('leave_session', handle_leave_session, namespace='/')
        socketio.on_event('ping', handle_ping, namespace='/')
