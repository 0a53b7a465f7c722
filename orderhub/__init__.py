# coding: utf8
from logging import DEBUG

from werkzeug.exceptions import default_exceptions

from .errors.handler import api_error_handler

from flask import Flask
from flask_cors import CORS
from .extensions import (
    init_mongoengine,
    jwt,
    redis_client,
    socketio,
)
from .errors.exceptions import ApiError, Unauthorized
from .lib.rooms import RoomRegistry
from .services.location_relay import LocationRelay
from .services.order_events import LocalPublisher, OrderEventBus, RedisPublisher
from .services.order_lifecycle import OrderLifecycle
from .third_parties.geocoder import NominatimGeocoder
from .third_parties.razorpay import RazorpayClient


def create_app(config_app, socket_process=False):
    app = Flask(__name__)
    app.config.from_object(config_app)

    CORS(app, resources={r"/*": {"origins": app.config.get("CORS_SCHEME") or "*"}})
    __init_app(app)
    __init_order_services(app, socket_process)
    __config_logging(app)
    __register_blueprint(app)
    __config_error_handlers(app)

    return app


def __config_logging(app):
    app.logger.setLevel(DEBUG)
    app.logger.info("Start flask...")


def __register_blueprint(app):
    from orderhub.api import bp as api_bp

    app.register_blueprint(api_bp)


def __init_app(app):
    init_mongoengine(app)
    redis_client.init_app(app)
    jwt.init_app(app)
    socketio.init_app(app, async_mode=app.config.get("SOCKETIO_ASYNC_MODE", "gevent"))
    from orderhub import socket_sub  # noqa: F401

    app.logger.info("Initial app...")


def __init_order_services(app, socket_process=False):
    """The socket process always fans out locally, it is the Redis subscriber."""
    registry = RoomRegistry(
        emitter=lambda event, payload, to: socketio.emit(event, payload, to=to)
    )
    if app.config.get("ORDER_EVENTS_TRANSPORT") == "redis" and not socket_process:
        publisher = RedisPublisher(redis_client, app.config["REDIS_ORDER_EVENTS_CHANNEL"])
    else:
        publisher = LocalPublisher(registry)

    events = OrderEventBus(registry, publisher)
    app.extensions["room_registry"] = registry
    app.extensions["order_events"] = events
    app.extensions["payment_gateway"] = RazorpayClient.from_config(app.config)
    app.extensions["order_lifecycle"] = OrderLifecycle.from_config(
        app.config, events, payment_gateway=app.extensions["payment_gateway"]
    )
    app.extensions["location_relay"] = LocationRelay(events)
    app.extensions["geocoder"] = NominatimGeocoder.from_config(app.config)


def __config_error_handlers(app):
    for exp in default_exceptions:
        app.register_error_handler(exp, api_error_handler)
    app.register_error_handler(ApiError, api_error_handler)
    app.register_error_handler(Exception, api_error_handler)

    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return api_error_handler(Unauthorized("The token has expired"))

    @jwt.invalid_token_loader
    def invalid_token_callback(reason):
        return api_error_handler(Unauthorized("Invalid token"))

    @jwt.unauthorized_loader
    def unauthorized_callback(reason):
        return api_error_handler(Unauthorized("Missing Authorization Header"))
