# coding: utf8
from functools import wraps

from flask import request
from jsonschema import FormatChecker, validate
from jsonschema.exceptions import ValidationError as SchemaError

from orderhub.errors.exceptions import AuthorizationError, ValidationError
from orderhub.services.auth import AuthService


def required_identity(*identity_types):
    """Authenticate the request and restrict it to the given identity kinds."""

    def wrapper(fn):
        @wraps(fn)
        def decorator(*args, **kwargs):
            identity = AuthService.load_current_identity()
            if identity_types and not isinstance(identity, identity_types):
                raise AuthorizationError("You are not allowed to access this resource")
            return fn(*args, **kwargs)

        return decorator

    return wrapper


def parameters(**schema):
    def decorated(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            req_args = request.args.to_dict()
            if request.method in ("POST", "PUT", "PATCH", "DELETE") and request.is_json:
                body = request.get_json(silent=True)
                if body is not None and not isinstance(body, dict):
                    raise ValidationError("Request body must be a JSON object")
                req_args.update(body or {})

            properties = schema.get("properties", {})
            req_args = {k: v for k, v in req_args.items() if k in properties}

            for field in schema.get("required", []):
                if field not in req_args or req_args[field] in (None, ""):
                    field_name = properties.get(field, {}).get("name", field)
                    raise ValidationError(f"{field_name} is required")

            try:
                validate(instance=req_args, schema=schema, format_checker=FormatChecker())
            except SchemaError as exp:
                path = list(exp.absolute_path)
                field = path[0] if path else None
                valid_values = properties.get(field, {}).get("enum", [])
                message = (
                    f"Field '{field}' is not valid." if field else "Request parameters are invalid."
                )
                if valid_values:
                    message += f" Valid values: {', '.join(map(str, valid_values))}."
                raise ValidationError(message, payload={"field": field})

            new_args = args + (req_args,)
            return func(*new_args, **kwargs)

        return wrapper

    return decorated
