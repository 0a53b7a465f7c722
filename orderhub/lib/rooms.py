import threading

from orderhub.lib.logger import log_socket_message


class RoomRegistry:
    """Room name -> live connection ids.

    The lock only guards membership changes; fan-out iterates over a snapshot
    so emitting to one room never holds up joins, leaves or other broadcasts.
    ``emitter`` is called as ``emitter(event, payload, to=connection_id)``.
    """

    def __init__(self, emitter=None):
        self._rooms = {}
        self._memberships = {}
        self._lock = threading.Lock()
        self._emitter = emitter

    def join(self, connection_id, room):
        with self._lock:
            self._rooms.setdefault(room, set()).add(connection_id)
            self._memberships.setdefault(connection_id, set()).add(room)

    def leave_all(self, connection_id):
        with self._lock:
            rooms = self._memberships.pop(connection_id, set())
            for room in rooms:
                members = self._rooms.get(room)
                if members is None:
                    continue
                members.discard(connection_id)
                if not members:
                    del self._rooms[room]
        return rooms

    def members(self, room):
        with self._lock:
            return set(self._rooms.get(room, ()))

    def rooms_of(self, connection_id):
        with self._lock:
            return set(self._memberships.get(connection_id, ()))

    def emit_to_rooms(self, event, payload, rooms):
        """Emit once to every connection sitting in at least one of ``rooms``."""
        with self._lock:
            targets = set()
            for room in rooms:
                targets.update(self._rooms.get(room, ()))

        if self._emitter is None:
            return 0

        delivered = 0
        for connection_id in targets:
            try:
                self._emitter(event, payload, to=connection_id)
                delivered += 1
            except Exception as e:
                log_socket_message(
                    f"Failed to emit {event} to {connection_id}: {e}", level="WARNING"
                )
        return delivered

    def emit_to_connection(self, event, payload, connection_id):
        if self._emitter is not None:
            self._emitter(event, payload, to=connection_id)
