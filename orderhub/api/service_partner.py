# coding: utf8
from flask_restx import Namespace, Resource

from orderhub.decorators import parameters, required_identity
from orderhub.extensions import get_order_lifecycle
from orderhub.lib.identity import ServicePartnerIdentity
from orderhub.lib.response import Response
from orderhub.services.auth import AuthService
from orderhub.services.order_status import SERVICE_PARTNER_ALLOWED_STATUSES

ns = Namespace(name="service-partner", description="Service partner order API")


@ns.route("/orders")
class APIServicePartnerOrders(Resource):

    @required_identity(ServicePartnerIdentity)
    def get(self):
        identity = AuthService.get_current_identity()
        orders = get_order_lifecycle().orders_for_identity(identity)
        return Response(
            data={
                "partnerCategory": identity.category,
                "orders": [order.serialize() for order in orders],
            }
        ).to_dict()


@ns.route("/order-stats")
class APIServicePartnerStats(Resource):

    @required_identity(ServicePartnerIdentity)
    def get(self):
        identity = AuthService.get_current_identity()
        stats = get_order_lifecycle().service_partner_stats(identity)
        return Response(data={"stats": stats}).to_dict()


@ns.route("/payments")
class APIServicePartnerPayments(Resource):

    @required_identity(ServicePartnerIdentity)
    def get(self):
        identity = AuthService.get_current_identity()
        return Response(data=get_order_lifecycle().service_partner_payments(identity)).to_dict()


@ns.route("/orders/<string:order_ref>/status")
class APIServicePartnerOrderStatus(Resource):

    @required_identity(ServicePartnerIdentity)
    @parameters(
        type="object",
        properties={"status": {"type": "string", "enum": SERVICE_PARTNER_ALLOWED_STATUSES}},
        required=["status"],
    )
    def patch(self, args, order_ref):
        identity = AuthService.get_current_identity()
        order = get_order_lifecycle().service_partner_update_status(
            identity, order_ref, args["status"]
        )
        return Response(
            data={"order": order.serialize()},
            message=f"Order {args['status'].lower()} successfully",
        ).to_dict()
