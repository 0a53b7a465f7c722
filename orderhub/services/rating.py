from bson import ObjectId
from mongoengine.errors import NotUniqueError

import const
from orderhub.enums.order import OrderStatus
from orderhub.errors.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from orderhub.lib.identity import resolve_user_id
from orderhub.lib.logger import logger
from orderhub.models.partner import Partner
from orderhub.models.rating import OrderRating, RiderRating
from orderhub.services.order import OrderService


def parse_rating(payload, label):
    rating = (payload or {}).get("rating")
    if (
        isinstance(rating, bool)
        or not isinstance(rating, (int, float))
        or rating < const.MIN_RATING
        or rating > const.MAX_RATING
    ):
        raise ValidationError(
            f"Invalid {label} rating. Must be between {const.MIN_RATING} and {const.MAX_RATING}."
        )
    return int(round(rating)), (payload.get("review_text") or "")


class RatingService:

    @staticmethod
    def find_partner(partner_id):
        if not partner_id or not ObjectId.is_valid(str(partner_id)):
            return None
        return Partner.objects(pk=str(partner_id)).first()

    @staticmethod
    def find_owned_order(user_id, order_ref):
        order = OrderService.find_by_public_or_internal_id(order_ref)
        if not order:
            raise NotFoundError("Order not found")
        if order.user_id != resolve_user_id(user_id):
            raise AuthorizationError("You can only rate your own orders")
        return order

    @staticmethod
    def rate_order(user_id, order_ref, order_rating, rider_rating):
        user_id = resolve_user_id(user_id)
        order_score, order_review = parse_rating(order_rating, "order")
        rider_score, rider_review = parse_rating(rider_rating, "rider")

        order = RatingService.find_owned_order(user_id, order_ref)
        if order.status != OrderStatus.DELIVERED.value:
            raise ValidationError("You can only rate delivered orders")

        order_key = str(order.pk)
        if OrderRating.objects(order=order_key, user=user_id).first():
            raise ConflictError("You have already rated this order")

        rider_id = order.latest_partner_id()
        if not rider_id:
            raise ValidationError("No rider found for this order")
        rider = RatingService.find_partner(rider_id)
        if not rider:
            raise NotFoundError("Rider not found")

        new_order_rating = OrderRating(
            order=order_key, user=user_id, rating=order_score, review_text=order_review
        )
        try:
            new_order_rating.save()
        except NotUniqueError:
            raise ConflictError("You have already rated this order")

        new_rider_rating = RiderRating(
            order=order_key,
            rider=str(rider.pk),
            user=user_id,
            rating=rider_score,
            review_text=rider_review,
        )
        try:
            new_rider_rating.save()
        except Exception as e:
            # both ratings exist or neither does
            new_order_rating.delete()
            if isinstance(e, NotUniqueError):
                raise ConflictError("You have already rated this order")
            raise

        RatingService.refresh_average_rating(rider)
        logger.info(f"User {user_id} rated order {order.order_id}")
        return new_order_rating, new_rider_rating

    @staticmethod
    def refresh_average_rating(rider):
        scores = [rating.rating for rating in RiderRating.objects(rider=str(rider.pk))]
        average = sum(scores) / len(scores) if scores else 0
        rider.average_rating = round(average, 1)
        rider.save()
        return rider.average_rating

    @staticmethod
    def rating_status(user_id, order_ref):
        user_id = resolve_user_id(user_id)
        order = OrderService.find_by_public_or_internal_id(order_ref)
        if not order:
            raise NotFoundError("Order not found")
        if order.user_id != user_id:
            raise AuthorizationError(
                "You can only check rating status for your own orders"
            )

        order_key = str(order.pk)
        order_rating = OrderRating.objects(order=order_key, user=user_id).first()
        ratings = None
        if order_rating:
            rider_rating = RiderRating.objects(order=order_key, user=user_id).first()
            ratings = {
                "order_rating": order_rating.to_json(),
                "rider_rating": rider_rating.to_json() if rider_rating else None,
            }
        return {
            "orderId": order.order_id,
            "status": order.status,
            "can_rate": order.status == OrderStatus.DELIVERED.value,
            "has_rated": order_rating is not None,
            "ratings": ratings,
        }

    @staticmethod
    def ratings_for_user(user_id):
        user_id = resolve_user_id(user_id)
        return {
            "order_ratings": [
                r.to_json() for r in OrderRating.objects(user=user_id).order_by("-created_at")
            ],
            "rider_ratings": [
                r.to_json() for r in RiderRating.objects(user=user_id).order_by("-created_at")
            ],
        }

    @staticmethod
    def ratings_for_rider(partner_id):
        rider = RatingService.find_partner(partner_id)
        if not rider:
            raise NotFoundError("Rider not found")
        ratings = RiderRating.objects(rider=str(rider.pk)).order_by("-created_at")
        return {
            "average_rating": rider.average_rating,
            "total_ratings": ratings.count(),
            "rider_ratings": [r.to_json() for r in ratings],
        }

    @staticmethod
    def all_ratings():
        return {
            "order_ratings": [
                r.to_json() for r in OrderRating.objects().order_by("-created_at")
            ],
            "rider_ratings": [
                r.to_json() for r in RiderRating.objects().order_by("-created_at")
            ],
        }
