# coding: utf8
from flask_restx import Namespace, Resource

from orderhub.decorators import parameters
from orderhub.lib.response import Response
from orderhub.services.search import SearchService

ns = Namespace(name="search", description="Product search API")


@ns.route("")
class APISearch(Resource):

    @parameters(
        type="object",
        properties={
            "q": {"type": "string", "name": "Search query"},
            "limit": {"type": "string"},
            "skip": {"type": "string"},
        },
        required=["q"],
    )
    def get(self, args):
        result = SearchService.search(args["q"], args.get("limit"), args.get("skip"))
        return Response(data=result, message=result["message"]).to_dict()


@ns.route("/suggestions")
class APISearchSuggestions(Resource):

    @parameters(type="object", properties={"q": {"type": "string"}})
    def get(self, args):
        suggestions = SearchService.suggestions(args.get("q", ""))
        return Response(data={"suggestions": suggestions}).to_dict()


@ns.route("/trending")
class APISearchTrending(Resource):

    @parameters(type="object", properties={"limit": {"type": "string"}})
    def get(self, args):
        return Response(data=SearchService.trending(args.get("limit"))).to_dict()


@ns.route("/advanced")
class APIAdvancedSearch(Resource):

    @parameters(
        type="object",
        properties={
            "q": {"type": "string"},
            "category": {"type": "string"},
            "minPrice": {"type": "string"},
            "maxPrice": {"type": "string"},
            "limit": {"type": "string"},
            "skip": {"type": "string"},
        },
    )
    def get(self, args):
        result = SearchService.advanced_search(
            query=args.get("q"),
            category=args.get("category"),
            min_price=args.get("minPrice"),
            max_price=args.get("maxPrice"),
            limit=args.get("limit"),
            skip=args.get("skip"),
        )
        return Response(data=result).to_dict()
