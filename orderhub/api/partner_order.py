# coding: utf8
from flask_restx import Namespace, Resource

from orderhub.decorators import parameters, required_identity
from orderhub.enums.order import ORDER_STATUSES
from orderhub.extensions import get_order_lifecycle
from orderhub.lib.identity import PartnerIdentity
from orderhub.lib.response import Response
from orderhub.services.auth import AuthService
from orderhub.services.order_lifecycle import PARTNER_PAYMENT_STATUSES

ns = Namespace(name="partner", description="Delivery partner order API")


@ns.route("/orders")
class APIPartnerOrders(Resource):

    @required_identity(PartnerIdentity)
    def get(self):
        identity = AuthService.get_current_identity()
        orders = get_order_lifecycle().orders_for_identity(identity)
        return Response(data={"orders": [order.serialize() for order in orders]}).to_dict()


@ns.route("/orders/<string:order_ref>/status")
class APIPartnerOrderStatus(Resource):

    @required_identity(PartnerIdentity)
    @parameters(
        type="object",
        properties={"status": {"type": "string", "enum": ORDER_STATUSES}},
        required=["status"],
    )
    def patch(self, args, order_ref):
        identity = AuthService.get_current_identity()
        order = get_order_lifecycle().change_order_status(identity, order_ref, args["status"])
        return Response(data={"order": order.serialize()}).to_dict()


@ns.route("/orders/<string:order_ref>/payment-status")
class APIPartnerPaymentStatus(Resource):

    @required_identity(PartnerIdentity)
    @parameters(
        type="object",
        properties={"paymentStatus": {"type": "string", "enum": PARTNER_PAYMENT_STATUSES}},
        required=["paymentStatus"],
    )
    def patch(self, args, order_ref):
        identity = AuthService.get_current_identity()
        order = get_order_lifecycle().update_payment_status(
            identity, order_ref, args["paymentStatus"]
        )
        return Response(data={"order": order.serialize()}).to_dict()
