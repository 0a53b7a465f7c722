# coding: utf8
import os


class Config(object):
    SECRET_KEY = os.environ.get("SECRET_KEY") or "<your secret key>"

    REDIS_URL = os.environ.get("REDIS_URL") or "redis://localhost:6379/0"

    MONGODB_DB = os.environ.get("MONGODB_DB") or "orderhub"
    MONGODB_HOST = os.environ.get("MONGODB_HOST") or "localhost"
    MONGODB_PORT = int(os.environ.get("MONGODB_PORT") or "27017")
    MONGODB_USERNAME = os.environ.get("MONGODB_USERNAME") or ""
    MONGODB_PASSWORD = os.environ.get("MONGODB_PASSWORD") or ""
    MONGODB_URI = os.environ.get("MONGODB_URI") or ""
    MONGODB_CONNECT = True

    SOCKETIO_ASYNC_MODE = os.environ.get("SOCKETIO_ASYNC_MODE") or "gevent"
    CORS_SCHEME = os.environ.get("CORS_SCHEME") or "*"

    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY") or "secret"
    JWT_ACCESS_TOKEN_EXPIRES = False  # timedelta(days=7)

    CELERY_BROKER_URL = (
        os.environ.get("CELERY_BROKER_URL") or "redis://localhost:6379/0"
    )
    CELERY_RESULT_BACKEND = (
        os.environ.get("CELERY_RESULT_BACKEND") or "redis://localhost:6379/0"
    )

    RAZORPAY_KEY_ID = os.environ.get("RAZORPAY_KEY_ID") or ""
    RAZORPAY_KEY_SECRET = os.environ.get("RAZORPAY_KEY_SECRET") or ""
    RAZORPAY_API_URL = (
        os.environ.get("RAZORPAY_API_URL") or "https://api.razorpay.com/v1"
    )
    RAZORPAY_CURRENCY = os.environ.get("RAZORPAY_CURRENCY") or "INR"

    GEOCODER_BASE_URL = (
        os.environ.get("GEOCODER_BASE_URL") or "https://nominatim.openstreetmap.org"
    )
    GEOCODER_USER_AGENT = os.environ.get("GEOCODER_USER_AGENT") or "OrderHub/1.0"

    DEFAULT_DELIVERY_FEE = float(os.environ.get("DEFAULT_DELIVERY_FEE") or 15)
    DEFAULT_TAX_RATE = float(os.environ.get("DEFAULT_TAX_RATE") or 0.03)

    # "local" fans out in-process, "redis" goes through the socket process
    ORDER_EVENTS_TRANSPORT = os.environ.get("ORDER_EVENTS_TRANSPORT") or "local"
    REDIS_ORDER_EVENTS_CHANNEL = (
        os.environ.get("REDIS_ORDER_EVENTS_CHANNEL") or "orderhub:order-events"
    )

    PROPAGATE_EXCEPTIONS = os.environ.get("FLASK_CONFIG") == "production"
    ERROR_404_HELP = False


class TestingConfig(Config):
    TESTING = True
    MONGODB_DB = "orderhub_test"
    MONGODB_CONNECT = False
    SOCKETIO_ASYNC_MODE = "threading"
    JWT_SECRET_KEY = "testing-secret"
    RAZORPAY_KEY_ID = "rzp_test_key"
    RAZORPAY_KEY_SECRET = "rzp_test_secret"
    ORDER_EVENTS_TRANSPORT = "local"


class DevelopmentConfig(Config):
    DEBUG = True


class ProductionConfig(Config):
    DEBUG = False
    TESTING = False


configs = {
    "develop": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}
