# coding: utf8
from flask import Blueprint
from flask_restx import Api
from mongoengine.errors import ValidationError as DocumentValidationError

from orderhub.errors.exceptions import ApiError, ValidationError
from orderhub.errors.handler import render_api_error

from orderhub.api.order import ns as order_ns
from orderhub.api.payment import ns as payment_ns
from orderhub.api.user_order import ns as user_order_ns
from orderhub.api.partner_order import ns as partner_order_ns
from orderhub.api.service_partner import ns as service_partner_ns
from orderhub.api.coupon import ns as coupon_ns
from orderhub.api.rating import ns as rating_ns
from orderhub.api.search import ns as search_ns
from orderhub.api.geocode import ns as geocode_ns

bp = Blueprint("api", __name__, url_prefix="/api/v1")

api = Api(bp, version="1.0", title="OrderHub API", description="OrderHub API", doc="/docs/")


@api.errorhandler(ApiError)
def handle_api_error(error):
    return render_api_error(error)


@api.errorhandler(DocumentValidationError)
def handle_document_validation_error(error):
    return render_api_error(ValidationError(str(error)))


api.add_namespace(ns=order_ns)
api.add_namespace(ns=payment_ns)
api.add_namespace(ns=user_order_ns)
api.add_namespace(ns=partner_order_ns)
api.add_namespace(ns=service_partner_ns)
api.add_namespace(ns=coupon_ns)
api.add_namespace(ns=rating_ns)
api.add_namespace(ns=search_ns)
api.add_namespace(ns=geocode_ns)
