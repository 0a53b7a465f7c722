# coding: utf8
from flask import jsonify
from werkzeug.exceptions import HTTPException

from orderhub.errors.exceptions import ApiError
from orderhub.lib.logger import logger


def render_api_error(error):
    return error.to_dict(), error.status


def api_error_handler(error):
    if isinstance(error, ApiError):
        body, status = render_api_error(error)
        return jsonify(body), status

    if isinstance(error, HTTPException):
        return (
            jsonify(
                {
                    "code": error.code,
                    "kind": error.name,
                    "message": error.description,
                    "data": {},
                }
            ),
            error.code,
        )

    logger.opt(exception=error).error(f"Unhandled exception: {error}")
    return (
        jsonify(
            {
                "code": 500,
                "kind": "InternalServerError",
                "message": "Internal Server Error",
                "data": {},
            }
        ),
        500,
    )
