import threading

from flask import request

import const
from orderhub.errors.exceptions import ApiError
from orderhub.extensions import (
    get_location_relay,
    get_order_events,
    get_order_lifecycle,
    redis_client,
    socketio,
)
from orderhub.lib.logger import log_socket_message
from orderhub.services.auth import AuthService
from orderhub.services.order_events import replay_envelope


def process_redis_message(registry, message):
    try:
        delivered = replay_envelope(registry, message)
        log_socket_message(f"Replayed order event to {delivered} connection(s)", "DEBUG")
        return delivered
    except (ValueError, KeyError, TypeError) as e:
        log_socket_message(f"Error processing Redis message: {e}", "ERROR")
        return 0


def start_redis_subscriber(app):
    """
    Listen on REDIS_ORDER_EVENTS_CHANNEL and replay what API processes publish
    into this process' room registry.
    """

    def redis_listener():
        with app.app_context():
            channel = app.config["REDIS_ORDER_EVENTS_CHANNEL"]
            registry = app.extensions["room_registry"]

            pubsub = redis_client.pubsub()
            pubsub.subscribe(channel)
            log_socket_message(f"Started Redis subscriber on channel '{channel}'")
            for item in pubsub.listen():
                if item.get("type") != "message":
                    continue
                data = item.get("data")
                if isinstance(data, bytes):
                    data = data.decode("utf-8")
                process_redis_message(registry, data)

    thread = threading.Thread(target=redis_listener)
    thread.daemon = True
    thread.start()
    return thread


@socketio.on("connect")
def handle_connect(auth=None):
    token = (auth or {}).get("token") or request.args.get("token")
    try:
        identity = AuthService.identity_from_token(token)
    except ApiError as e:
        log_socket_message(f"Socket auth error for {request.sid}: {e.message}", "WARNING")
        return False

    rooms, orders = get_order_lifecycle().join_and_snapshot(request.sid, identity)
    log_socket_message(
        f"Connection {request.sid} ({identity.role}) in {rooms}, sent {len(orders)} orders"
    )
    return True


@socketio.on(const.EVENT_RIDER_LOCATION)
def handle_rider_location(data):
    data = data or {}
    get_location_relay().report_location(
        request.sid, data.get("orderId"), data.get("latitude"), data.get("longitude")
    )


@socketio.on("disconnect")
def handle_disconnect(*args):
    rooms = get_order_events().leave_all(request.sid)
    log_socket_message(f"Client disconnected: {request.sid}, left {sorted(rooms)}")

