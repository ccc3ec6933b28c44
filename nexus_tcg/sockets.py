# nexus_tcg/sockets.py
"""
Optional push channel. Watchers of a room are told its new version after
every committed change and then fetch their own view with ``getState``;
room state itself is never broadcast, so hands stay private.
"""
from flask_socketio import emit, join_room, leave_room

ROOM_CHANNEL = "nexus-{}"


def channel_for(payload) -> str:
    raw = payload.get("roomId", "") if isinstance(payload, dict) else payload
    room_id = str(raw or "").strip().upper()
    return ROOM_CHANNEL.format(room_id) if room_id else ""


def make_notifier(socketio):
    def notify(room_id: str, version: int) -> None:
        socketio.emit(
            "nexus_room_updated",
            {"roomId": room_id, "version": version},
            to=ROOM_CHANNEL.format(room_id),
        )
    return notify


def register_nexus_socket_handlers(socketio):
    @socketio.on("nexus_watch")
    def nexus_watch(payload):
        channel = channel_for(payload)
        if not channel:
            emit("nexus_system", "Missing roomId.")
            return
        join_room(channel)
        emit("nexus_system", "Watching room.")

    @socketio.on("nexus_unwatch")
    def nexus_unwatch(payload):
        channel = channel_for(payload)
        if channel:
            leave_room(channel)
