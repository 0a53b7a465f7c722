# coding: utf8
from flask import request
from flask_restx import Namespace, Resource

from orderhub.decorators import parameters, required_identity
from orderhub.enums.order import ORDER_STATUSES
from orderhub.extensions import get_order_lifecycle
from orderhub.lib.identity import AdminIdentity, CustomerIdentity
from orderhub.lib.response import Response
from orderhub.services.auth import AuthService
from orderhub.services.rating import RatingService

ns = Namespace(name="orders", description="Order API")

ORDER_SCHEMA = dict(
    type="object",
    properties={
        "items": {"type": "array", "minItems": 1, "items": {"type": "object"}},
        "pricing": {"type": "object"},
        "payment": {"type": "object"},
        "delivery": {"type": "object"},
        "addressId": {"type": ["string", "null"]},
        "address": {"type": ["object", "null"]},
        "addressOverrides": {"type": ["object", "null"]},
        "couponCode": {"type": ["string", "null"]},
        "category": {"type": ["string", "null"]},
        "fulfillmentType": {"type": ["string", "null"]},
    },
    required=["items"],
)


def serialize_orders(orders):
    return [order.serialize() for order in orders]


@ns.route("")
class APIOrders(Resource):

    @required_identity(CustomerIdentity, AdminIdentity)
    @parameters(**ORDER_SCHEMA)
    def post(self, args):
        identity = AuthService.get_current_identity()
        order = get_order_lifecycle().place_order(identity, args)
        return Response(
            data={"order": order.serialize()}, message="Order created", status=201
        ).to_dict()

    @required_identity()
    def get(self):
        identity = AuthService.get_current_identity()
        lifecycle = get_order_lifecycle()
        socket_id = request.args.get("socket_id") or request.headers.get("X-Socket-Id")
        if socket_id:
            _, orders = lifecycle.join_and_snapshot(socket_id, identity)
        else:
            orders = list(lifecycle.orders_for_identity(identity))
        return Response(data={"orders": serialize_orders(orders)}).to_dict()


@ns.route("/<string:order_ref>/status")
class APIOrderStatus(Resource):

    @required_identity()
    @parameters(
        type="object",
        properties={"status": {"type": "string", "enum": ORDER_STATUSES}},
        required=["status"],
    )
    def patch(self, args, order_ref):
        identity = AuthService.get_current_identity()
        order = get_order_lifecycle().change_order_status(identity, order_ref, args["status"])
        return Response(data={"order": order.serialize()}).to_dict()


@ns.route("/<string:order_ref>/rate")
class APIRateOrder(Resource):

    @required_identity(CustomerIdentity, AdminIdentity)
    @parameters(
        type="object",
        properties={
            "order_rating": {"type": "object"},
            "rider_rating": {"type": "object"},
        },
        required=["order_rating", "rider_rating"],
    )
    def post(self, args, order_ref):
        identity = AuthService.get_current_identity()
        order_rating, rider_rating = RatingService.rate_order(
            identity.id, order_ref, args["order_rating"], args["rider_rating"]
        )
        return Response(
            message="Ratings submitted successfully",
            data={
                "order_rating": order_rating.to_json(),
                "rider_rating": rider_rating.to_json(),
            },
            status=201,
        ).to_dict()


@ns.route("/<string:order_ref>/rating-status")
class APIOrderRatingStatus(Resource):

    @required_identity(CustomerIdentity, AdminIdentity)
    def get(self, order_ref):
        identity = AuthService.get_current_identity()
        return Response(data=RatingService.rating_status(identity.id, order_ref)).to_dict()
