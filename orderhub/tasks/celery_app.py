import os
from celery import Celery
from dotenv import load_dotenv
from flask import Flask

from orderhub.extensions import init_mongoengine, redis_client

load_dotenv(override=False)

from orderhub.config import configs  # noqa

import const  # noqa

config_name = os.environ.get("FLASK_CONFIG") or "develop"
config_app = configs[config_name]


celery_app = Celery(
    "worker",
    broker=config_app.CELERY_BROKER_URL,
    backend=config_app.CELERY_RESULT_BACKEND,
)

celery_app.conf.task_routes = {
    "remove_expired_coupons": {"queue": "coupons"},
}

celery_app.conf.beat_schedule = {
    "remove-expired-coupons": {
        "task": "remove_expired_coupons",
        "schedule": float(const.COUPON_CLEANUP_INTERVAL_SECONDS),
    },
}


celery_app.autodiscover_tasks(["orderhub.tasks"], related_name="coupon_tasks")


def make_celery_app():
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_app)

    redis_client.init_app(flask_app)
    init_mongoengine(flask_app)

    return flask_app
