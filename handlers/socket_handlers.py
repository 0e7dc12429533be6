"""
Socket.IO Event Handlers for RF Online.

Pure routing layer that delegates to the room coordinator and the relay
router. Contains no business logic - only payload normalisation, event
routing and response formatting.
"""

import functools
import logging
from flask import request
from flask_socketio import emit

from lobby.errors import JoinError
from utils.constants import MAX_PLAYER_NAME_LENGTH, MESSAGES, RELAY_EVENTS
from utils.helpers import clean_text, payload_dict

logger = logging.getLogger(__name__)

FRIEND_NOTIFICATIONS = {
    'accept_friend_request': 'friend_request_accepted',
    'decline_friend_request': 'friend_request_declined',
    'remove_friend': 'friend_removed'
}

def register_socket_handlers(socketio, room_manager, relay_router, access_guard=None):
    """
    Register all Socket.IO event handlers.

    Args:
        socketio: SocketIO instance
        room_manager: Room coordinator
        relay_router: Gameplay relay
        access_guard: Optional object with ``is_allowed(sid, action)``;
            messages it rejects are dropped
    """
    connections = room_manager.connection_manager

    def guarded(event):
        """Consult the access guard before running a handler."""
        def decorator(handler):
            @functools.wraps(handler)
            def wrapper(*args):
                if access_guard is not None and not access_guard.is_allowed(request.sid, event):
                    return None
                return handler(*args)
            return wrapper
        return decorator

    def on(event):
        def decorator(handler):
            socketio.on_event(event, guarded(event)(handler))
            return handler
        return decorator

    def friend_names(data):
        """(sender, recipient) of a friend payload; sender falls back to the session name."""
        session = connections.get_session(request.sid)
        sender = clean_text(data.get('from'), MAX_PLAYER_NAME_LENGTH) or (session.player_name if session else None)
        recipient = clean_text(data.get('to'), MAX_PLAYER_NAME_LENGTH)
        return sender, recipient

    @socketio.on_error_default
    def default_error_handler(e):
        """Dispatch boundary: log the fault and keep the connection alive."""
        event = getattr(request, 'event', None) or {}
        logger.error(f"SocketIO error on {event.get('message')}: {e}")
        emit('server_error', {'message': MESSAGES['SERVER_ERROR']})

    @socketio.on('connect')
    def handle_connect(auth=None):
        """Handle client connection."""
        session = room_manager.connect(request.sid)
        logger.info(f"Player {session.player_id} connected ({request.sid})")
        emit('connected', {'playerId': session.player_id, 'message': 'Connected to server successfully'})

    @socketio.on('disconnect')
    def handle_disconnect(reason=None):
        """Handle client disconnection; runs the same path as leave_room."""
        logger.info(f"Client disconnected: {request.sid}")
        room_manager.disconnect(request.sid)
        if access_guard is not None and hasattr(access_guard, 'forget'):
            access_guard.forget(request.sid)

    # ---- Rooms ----

    @on('create_room')
    def handle_create_room(data=None):
        room_manager.create_room(request.sid, payload_dict(data))

    @on('get_rooms')
    def handle_get_rooms(data=None):
        emit('rooms_list', room_manager.room_list_payload())

    @on('join_room')
    def handle_join_room(data=None):
        data = payload_dict(data)
        try:
            room_manager.join_room(
                request.sid,
                data.get('roomId'),
                password=data.get('password'),
                player_name=data.get('playerName')
            )
        except JoinError as e:
            logger.info(f"Join rejected for {request.sid}: {e.code}")
            emit('join_error', e.to_dict())

    @on('toggle_ready')
    def handle_toggle_ready(data=None):
        room_manager.toggle_ready(request.sid)

    @on('leave_room')
    def handle_leave_room(data=None):
        room_manager.leave(request.sid)

    # ---- Match ----

    @on('game_end')
    def handle_game_end(data=None):
        room_manager.end_match(request.sid, payload_dict(data).get('players'))

    @on('half_time')
    def handle_half_time(data=None):
        room_manager.half_time_start(request.sid, payload_dict(data))

    @on('half_time_ready')
    def handle_half_time_ready(data=None):
        room_manager.half_time_ready(request.sid)

    @on('second_half_start')
    def handle_second_half_start(data=None):
        room_manager.second_half_start(request.sid)

    # ---- Relay ----

    def make_relay_handler(event):
        def handle_relay(data=None):
            relay_router.relay(request.sid, event, data)
        handle_relay.__name__ = f"handle_{event}"
        return handle_relay

    for relay_event in RELAY_EVENTS:
        on(relay_event)(make_relay_handler(relay_event))

    @on('time_sync')
    def handle_time_sync(data=None):
        relay_router.time_sync(request.sid, data)

    @on('goal_update')
    def handle_goal_update(data=None):
        relay_router.goal_update(request.sid, data)

    @on('start_replay')
    def handle_start_replay(data=None):
        relay_router.start_replay(request.sid, data)

    @on('send_emoji')
    def handle_send_emoji(data=None):
        relay_router.send_emoji(request.sid, data)

    # ---- Leaderboard ----

    @on('get_leaderboard')
    def handle_get_leaderboard(data=None):
        emit('leaderboard_data', room_manager.leaderboard_payload())

    @on('offline_match_result')
    def handle_offline_match_result(data=None):
        entry = room_manager.record_offline_result(request.sid, payload_dict(data))
        if entry:
            emit('offline_result_recorded', {'entry': entry.to_dict()})

    # ---- Friends ----

    @on('send_friend_request')
    def handle_send_friend_request(data=None):
        sender, recipient = friend_names(payload_dict(data))
        if not sender or not recipient or sender == recipient:
            return
        emit('friend_request_sent', room_manager.send_friend_request(sender, recipient))

    def make_friend_handler(event, outbound):
        def handle_friend_notification(data=None):
            data = payload_dict(data)
            sender, recipient = friend_names(data)
            if not sender or not recipient:
                return
            extra = {'requestId': data['requestId']} if data.get('requestId') else None
            room_manager.notify_friend(outbound, sender, recipient, extra)
        handle_friend_notification.__name__ = f"handle_{event}"
        return handle_friend_notification

    for friend_event, outbound_event in FRIEND_NOTIFICATIONS.items():
        on(friend_event)(make_friend_handler(friend_event, outbound_event))

    @on('send_game_invite')
    def handle_send_game_invite(data=None):
        data = payload_dict(data)
        sender, recipient = friend_names(data)
        if not sender or not recipient:
            return
        room_id = data.get('roomId')
        room = room_manager.get_room(room_id) if isinstance(room_id, str) else None
        room = room or room_manager.get_room_for_session(request.sid)
        room_manager.notify_friend('game_invite_received', sender, recipient, {
            'roomId': room.id if room else None,
            'roomName': room.name if room else None
        })

    @on('get_online_friends')
    def handle_get_online_friends(data=None):
        friends = payload_dict(data).get('friends')
        names = [name for name in friends if isinstance(name, str)] if isinstance(friends, list) else []
        emit('online_friends', {'online': room_manager.online_friends(names)})

    logger.info("Socket.IO handlers registered successfully")
