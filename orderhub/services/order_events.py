"""
Room-scoped fan-out of order events.

``OrderEventBus`` decides *who* hears about an order, a publisher decides *how*
the event reaches the socket process:

- ``LocalPublisher`` writes straight into the in-process ``RoomRegistry``
  (single process deployments, tests).
- ``RedisPublisher`` pushes a JSON envelope on a Redis channel; the socket
  process subscribes to it (see ``orderhub.socket_sub``) and replays the
  envelope into its own registry.
"""
import json

import const
from orderhub.lib.identity import (
    AdminIdentity,
    CustomerIdentity,
    PartnerIdentity,
    ServicePartnerIdentity,
    resolve_user_id,
)
from orderhub.lib.logger import log_socket_message

ENVELOPE_BROADCAST = "broadcast"
ENVELOPE_JOIN = "join"
ENVELOPE_SEND = "send"


def user_room(user_id):
    return f"{const.USER_ROOM_PREFIX}{user_id}"


def category_room(category):
    return f"{const.CATEGORY_ROOM_PREFIX}{category}"


class LocalPublisher:

    def __init__(self, registry):
        self.registry = registry

    def publish(self, event, payload, rooms):
        return self.registry.emit_to_rooms(event, payload, rooms)

    def join(self, connection_id, rooms):
        for room in rooms:
            self.registry.join(connection_id, room)

    def send(self, event, payload, connection_id):
        self.registry.emit_to_connection(event, payload, connection_id)


class RedisPublisher:

    def __init__(self, redis, channel):
        self.redis = redis
        self.channel = channel

    def _push(self, envelope):
        self.redis.publish(self.channel, json.dumps(envelope))

    def publish(self, event, payload, rooms):
        self._push(
            {
                "type": ENVELOPE_BROADCAST,
                "event": event,
                "payload": payload,
                "rooms": sorted(rooms),
            }
        )

    def join(self, connection_id, rooms):
        self._push(
            {"type": ENVELOPE_JOIN, "connection": connection_id, "rooms": list(rooms)}
        )

    def send(self, event, payload, connection_id):
        self._push(
            {
                "type": ENVELOPE_SEND,
                "event": event,
                "payload": payload,
                "connection": connection_id,
            }
        )


def replay_envelope(registry, raw):
    """Apply an envelope produced by ``RedisPublisher`` to ``registry``."""
    envelope = json.loads(raw)
    kind = envelope.get("type")
    if kind == ENVELOPE_BROADCAST:
        return registry.emit_to_rooms(
            envelope["event"], envelope.get("payload"), envelope.get("rooms", [])
        )
    if kind == ENVELOPE_JOIN:
        for room in envelope.get("rooms", []):
            registry.join(envelope["connection"], room)
        return 0
    if kind == ENVELOPE_SEND:
        registry.emit_to_connection(
            envelope["event"], envelope.get("payload"), envelope["connection"]
        )
        return 1
    log_socket_message(f"Ignoring unknown envelope type {kind!r}", level="WARNING")
    return 0


class OrderEventBus:

    def __init__(self, registry, publisher=None):
        self.registry = registry
        self.publisher = publisher or LocalPublisher(registry)

    @staticmethod
    def rooms_for_identity(identity):
        if isinstance(identity, CustomerIdentity):
            return [user_room(identity.id)]
        if isinstance(identity, AdminIdentity):
            return [const.ADMIN_ROOM]
        if isinstance(identity, PartnerIdentity):
            if str(identity.role).lower() == "rider":
                return [const.RIDER_ROOM]
            return [const.PARTNER_ROOM]
        if isinstance(identity, ServicePartnerIdentity):
            if identity.category:
                return [category_room(identity.category)]
            return []
        return []

    def join_rooms_for_identity(self, connection_id, identity):
        rooms = self.rooms_for_identity(identity)
        if rooms:
            self.publisher.join(connection_id, rooms)
        log_socket_message(f"Connection {connection_id} joined {rooms}")
        return rooms

    def leave_all(self, connection_id):
        return self.registry.leave_all(connection_id)

    @staticmethod
    def broadcast_rooms(owner=None, category=None):
        rooms = {const.ADMIN_ROOM, const.PARTNER_ROOM, const.RIDER_ROOM}
        owner_id = resolve_user_id(owner)
        if owner_id:
            rooms.add(user_room(owner_id))
        if category:
            rooms.add(category_room(category))
        return rooms

    def publish(self, event, payload, rooms):
        rooms = set(rooms)
        try:
            self.publisher.publish(event, payload, rooms)
        except Exception as e:
            # Delivery is best effort, the write that triggered it already happened
            log_socket_message(f"Failed to publish {event} to {sorted(rooms)}: {e}", "ERROR")
        return rooms

    def broadcast(self, event, payload, owner=None, category=None):
        return self.publish(event, payload, self.broadcast_rooms(owner, category))

    def send_snapshot(self, connection_id, orders):
        payload = [order.serialize() for order in orders]
        self.publisher.send(const.EVENT_ORDERS_INIT, payload, connection_id)
        return payload
