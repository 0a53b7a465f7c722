# coding: utf8


class ApiError(Exception):
    """Base class of every failure surfaced to a caller.

    ``kind`` is stable and safe to match on client side, ``message`` is meant
    for humans, ``status`` is the HTTP status used when rendered by the API.
    """

    kind = "ApiError"
    status = 500
    code = 500

    def __init__(self, message="", payload=None):
        super().__init__(message)
        self.message = message or self.kind
        # not named "data": flask-restx would render that attribute as the body
        self.payload = payload or {}

    def to_dict(self):
        return {
            "code": self.code,
            "kind": self.kind,
            "message": self.message,
            "data": self.payload,
        }


class ValidationError(ApiError):
    kind = "ValidationError"
    status = 400
    code = 400


class Unauthorized(ApiError):
    kind = "Unauthorized"
    status = 401
    code = 401


class AuthorizationError(ApiError):
    kind = "AuthorizationError"
    status = 403
    code = 403


class NotFoundError(ApiError):
    kind = "NotFoundError"
    status = 404
    code = 404


class ConflictError(ApiError):
    kind = "ConflictError"
    status = 409
    code = 409


class PaymentVerificationError(ApiError):
    kind = "PaymentVerificationError"
    status = 400
    code = 400


class PaymentGatewayError(ApiError):
    kind = "PaymentGatewayError"
    status = 502
    code = 502
