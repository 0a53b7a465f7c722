# ================== LOGURU LOGGER CONFIG =====================
import sys
import os
from loguru import logger

os.makedirs("logs", exist_ok=True)

log_format = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[component]}</cyan> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)

logger.remove()
logger.add(sys.stderr, colorize=True, format=log_format, level="INFO")
logger.add(
    "logs/orderhub_service.json",
    rotation="100 MB",
    retention="10 days",
    compression="zip",
    serialize=True,
    level="DEBUG",
    enqueue=True,
    catch=True,
)
configured_logger = logger.patch(
    lambda record: record["extra"].setdefault("component", "API")
)


def log_socket_message(message, level="INFO"):
    configured_logger.bind(component="SOCKET").log(level, message)


def log_payment_message(message, level="INFO"):
    configured_logger.bind(component="PAYMENT").log(level, message)


def log_order_message(message, level="INFO"):
    configured_logger.bind(component="ORDER").log(level, message)


# ================== EXPORT LOGGER =====================
log = configured_logger
logger = configured_logger
