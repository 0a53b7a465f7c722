# coding: utf8
from flask_restx import Namespace, Resource

from orderhub.api.order import ORDER_SCHEMA
from orderhub.decorators import parameters, required_identity
from orderhub.extensions import get_order_lifecycle
from orderhub.lib.identity import AdminIdentity, CustomerIdentity
from orderhub.lib.response import Response
from orderhub.services.auth import AuthService

ns = Namespace(name="payments", description="Payment API")


@ns.route("/create")
class APICreatePaymentOrder(Resource):

    @required_identity(CustomerIdentity, AdminIdentity)
    @parameters(**ORDER_SCHEMA)
    def post(self, args):
        identity = AuthService.get_current_identity()
        result = get_order_lifecycle().initiate_payment_order(identity, args)
        return Response(data=result, message="Order created", status=201).to_dict()


@ns.route("/verify")
class APIVerifyPayment(Resource):

    @required_identity(CustomerIdentity, AdminIdentity)
    @parameters(
        type="object",
        properties={
            "razorpay_order_id": {"type": "string"},
            "razorpay_payment_id": {"type": "string"},
            "razorpay_signature": {"type": "string"},
        },
        required=["razorpay_order_id", "razorpay_payment_id", "razorpay_signature"],
    )
    def post(self, args):
        identity = AuthService.get_current_identity()
        order = get_order_lifecycle().verify_online_payment(identity, args)
        return Response(data={"order": order.serialize()}, message="Payment verified").to_dict()
