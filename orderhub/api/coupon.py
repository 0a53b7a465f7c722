# coding: utf8
from flask_restx import Namespace, Resource

from orderhub.decorators import parameters, required_identity
from orderhub.lib.identity import AdminIdentity, CustomerIdentity
from orderhub.lib.response import Response
from orderhub.services.auth import AuthService
from orderhub.services.coupon import CouponService

ns = Namespace(name="coupons", description="Coupon API")


@ns.route("/eligible")
class APIEligibleCoupon(Resource):

    @required_identity(CustomerIdentity, AdminIdentity)
    def get(self):
        identity = AuthService.get_current_identity()
        code = CouponService.get_eligible_coupon(identity.id)
        return Response(data={"coupon": code}).to_dict()


@ns.route("/apply")
class APIApplyCoupon(Resource):

    @required_identity(CustomerIdentity, AdminIdentity)
    @parameters(
        type="object",
        properties={"code": {"type": "string", "name": "Coupon code"}},
        required=["code"],
    )
    def post(self, args):
        identity = AuthService.get_current_identity()
        coupon = CouponService.apply_coupon(identity.id, args["code"])
        return Response(data=coupon, message="Coupon applied").to_dict()
