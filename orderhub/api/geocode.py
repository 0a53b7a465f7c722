# coding: utf8
from flask_restx import Namespace, Resource

from orderhub.decorators import parameters
from orderhub.errors.exceptions import NotFoundError, ValidationError
from orderhub.extensions import get_geocoder
from orderhub.lib.response import Response

ns = Namespace(name="geocode", description="Geocoding API")


@ns.route("/forward")
class APIForwardGeocode(Resource):

    @parameters(
        type="object",
        properties={"address": {"type": "string", "name": "Address"}},
        required=["address"],
    )
    def get(self, args):
        coordinates = get_geocoder().forward(args["address"])
        if not coordinates:
            raise NotFoundError("Address not found")
        return Response(data=coordinates).to_dict()


@ns.route("/reverse")
class APIReverseGeocode(Resource):

    @parameters(
        type="object",
        properties={"lat": {"type": "string"}, "lng": {"type": "string"}},
        required=["lat", "lng"],
    )
    def get(self, args):
        try:
            latitude, longitude = float(args["lat"]), float(args["lng"])
        except ValueError:
            raise ValidationError("Latitude and longitude are required")
        address = get_geocoder().reverse(latitude, longitude)
        if not address:
            raise NotFoundError("Address not found")
        return Response(data={"address": address}).to_dict()
