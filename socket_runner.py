# coding: utf8
from gevent import monkey

monkey.patch_all()

import os

from dotenv import load_dotenv

load_dotenv(override=False)

from orderhub import create_app  # noqa
from orderhub.config import configs as config  # noqa
from orderhub.extensions import socketio  # noqa
from orderhub.lib.logger import log_socket_message  # noqa
from orderhub.socket_sub import start_redis_subscriber  # noqa


def build_socket_app():
    config_name = os.environ.get("FLASK_CONFIG") or "develop"
    app = create_app(config[config_name], socket_process=True)
    if app.config.get("ORDER_EVENTS_TRANSPORT") == "redis":
        start_redis_subscriber(app)
    log_socket_message("Start Socket...")
    return app


if __name__ == "__main__":
    application = build_socket_app()
    SOCKET_PORT = os.environ.get("SOCKET_PORT") or 5001
    socketio.run(application, host="0.0.0.0", port=int(SOCKET_PORT))
