# coding: utf8
from flask import current_app
from flask_redis import FlaskRedis
from flask_jwt_extended import JWTManager
from flask_socketio import SocketIO
from mongoengine import connect


redis_client = FlaskRedis()

jwt = JWTManager()
socketio = SocketIO(async_mode="gevent", cors_allowed_origins="*")


def mongo_uri_from_config(config):
    if config.get("MONGODB_URI"):
        return config["MONGODB_URI"]

    db_name = config["MONGODB_DB"]
    host = config["MONGODB_HOST"]
    port = config["MONGODB_PORT"]
    username = config["MONGODB_USERNAME"]
    password = config["MONGODB_PASSWORD"]

    if username and password:
        return f"mongodb://{username}:{password}@{host}:{port}/{db_name}"
    return f"mongodb://{host}:{port}/{db_name}"


def init_mongoengine(app):
    if not app.config.get("MONGODB_CONNECT", True):
        return
    connect(host=mongo_uri_from_config(app.config))


def get_order_events():
    return current_app.extensions["order_events"]


def get_order_lifecycle():
    return current_app.extensions["order_lifecycle"]


def get_location_relay():
    return current_app.extensions["location_relay"]


def get_geocoder():
    return current_app.extensions["geocoder"]
