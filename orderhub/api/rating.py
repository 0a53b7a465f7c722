# coding: utf8
from flask_restx import Namespace, Resource

from orderhub.decorators import required_identity
from orderhub.errors.exceptions import AuthorizationError
from orderhub.lib.identity import AdminIdentity, CustomerIdentity, PartnerIdentity
from orderhub.lib.response import Response
from orderhub.services.auth import AuthService
from orderhub.services.rating import RatingService

ns = Namespace(name="ratings", description="Rating API")


@ns.route("")
class APIAllRatings(Resource):

    @required_identity(AdminIdentity)
    def get(self):
        return Response(data=RatingService.all_ratings()).to_dict()


@ns.route("/users/<string:user_id>")
class APIUserRatings(Resource):

    @required_identity(CustomerIdentity, AdminIdentity)
    def get(self, user_id):
        identity = AuthService.get_current_identity()
        if identity.id != user_id:
            raise AuthorizationError("You can only view your own ratings")
        return Response(data=RatingService.ratings_for_user(user_id)).to_dict()


@ns.route("/partners/<string:partner_id>")
class APIPartnerRatings(Resource):

    @required_identity(PartnerIdentity, AdminIdentity)
    def get(self, partner_id):
        identity = AuthService.get_current_identity()
        if isinstance(identity, PartnerIdentity) and identity.id != partner_id:
            raise AuthorizationError("You can only view your own ratings")
        return Response(data=RatingService.ratings_for_rider(partner_id)).to_dict()
