# coding: utf8
from flask_restx import Namespace, Resource

from orderhub.decorators import parameters, required_identity
from orderhub.extensions import get_order_lifecycle
from orderhub.lib.identity import AdminIdentity, CustomerIdentity
from orderhub.lib.query_mongo import select_with_pagination_mongo
from orderhub.lib.response import Response
from orderhub.services.auth import AuthService
from orderhub.services.order import OrderService

ns = Namespace(name="user", description="Customer order API")


@ns.route("/orders")
class APIUserOrders(Resource):

    @required_identity(CustomerIdentity, AdminIdentity)
    @parameters(
        type="object",
        properties={"page": {"type": "string"}, "per_page": {"type": "string"}},
    )
    def get(self, args):
        identity = AuthService.get_current_identity()
        result = select_with_pagination_mongo(
            OrderService.list_for_customer(identity.id),
            args.get("page"),
            args.get("per_page"),
        )
        return Response(
            data={
                "orders": [order.serialize() for order in result["items"]],
                "total": result["total"],
                "page": result["page"],
                "per_page": result["per_page"],
                "pages": result["pages"],
            }
        ).to_dict()


@ns.route("/orders/<string:order_ref>/cancel")
class APIUserCancelOrder(Resource):

    @required_identity(CustomerIdentity, AdminIdentity)
    def post(self, order_ref):
        identity = AuthService.get_current_identity()
        order = get_order_lifecycle().cancel_customer_order(identity, order_ref)
        return Response(data={"order": order.serialize()}, message="Order cancelled").to_dict()
