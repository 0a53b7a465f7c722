import pytest

from orderhub.errors.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from orderhub.lib.identity import AdminIdentity, CustomerIdentity, PartnerIdentity
from orderhub.models.partner import Partner
from orderhub.models.rating import OrderRating, RiderRating
from orderhub.services.rating import RatingService


@pytest.fixture
def placed(lifecycle, customer, make_payload):
    return lifecycle.place_order(CustomerIdentity(id=str(customer.pk)), make_payload())


@pytest.fixture
def delivered(lifecycle, placed, rider):
    identity = PartnerIdentity(id=str(rider.pk), role="rider")
    lifecycle.change_order_status(identity, placed.order_id, "OutForDelivery")
    return lifecycle.change_order_status(identity, placed.order_id, "Delivered")


def test_rate_delivered_order(delivered, customer, rider):
    order_rating, rider_rating = RatingService.rate_order(
        customer.pk, delivered.order_id, {"rating": 5, "review_text": "Fast"}, {"rating": 4}
    )

    assert order_rating.rating == 5
    assert order_rating.review_text == "Fast"
    assert rider_rating.rider == str(rider.pk)
    assert Partner.objects.get(pk=rider.pk).average_rating == 4.0


def test_average_rating_rounds_to_one_decimal(lifecycle, customer, rider, make_payload):
    identity = PartnerIdentity(id=str(rider.pk), role="rider")
    for score in (5, 4, 4):
        order = lifecycle.place_order(CustomerIdentity(id=str(customer.pk)), make_payload())
        lifecycle.change_order_status(identity, order.order_id, "Delivered")
        RatingService.rate_order(customer.pk, order.order_id, {"rating": 5}, {"rating": score})

    assert Partner.objects.get(pk=rider.pk).average_rating == 4.3


def test_only_delivered_orders_can_be_rated(placed, customer):
    with pytest.raises(ValidationError):
        RatingService.rate_order(customer.pk, placed.order_id, {"rating": 5}, {"rating": 5})


def test_duplicate_rating_conflicts(delivered, customer):
    RatingService.rate_order(customer.pk, delivered.order_id, {"rating": 5}, {"rating": 5})
    with pytest.raises(ConflictError):
        RatingService.rate_order(customer.pk, delivered.order_id, {"rating": 1}, {"rating": 1})
    assert OrderRating.objects.count() == 1
    assert RiderRating.objects.count() == 1


@pytest.mark.parametrize("score", [0, 6, "5", True, None])
def test_invalid_scores(delivered, customer, score):
    with pytest.raises(ValidationError):
        RatingService.rate_order(customer.pk, delivered.order_id, {"rating": score}, {"rating": 5})


def test_only_owner_can_rate(delivered, other_customer):
    with pytest.raises(AuthorizationError):
        RatingService.rate_order(other_customer.pk, delivered.order_id, {"rating": 5}, {"rating": 5})
    with pytest.raises(NotFoundError):
        RatingService.rate_order(other_customer.pk, "ORDMISSING", {"rating": 5}, {"rating": 5})


def test_order_without_rider_cannot_be_rated(lifecycle, placed, customer):
    lifecycle.change_order_status(
        AdminIdentity(id="a1"), placed.order_id, "Delivered"
    )
    with pytest.raises(ValidationError):
        RatingService.rate_order(customer.pk, placed.order_id, {"rating": 5}, {"rating": 5})


def test_rating_status(delivered, customer):
    status = RatingService.rating_status(customer.pk, delivered.order_id)
    assert status["can_rate"] is True
    assert status["has_rated"] is False
    assert status["ratings"] is None

    RatingService.rate_order(customer.pk, delivered.order_id, {"rating": 5}, {"rating": 3})
    status = RatingService.rating_status(customer.pk, delivered.order_id)
    assert status["has_rated"] is True
    assert status["ratings"]["rider_rating"]["rating"] == 3


def test_rating_listings(delivered, customer, rider):
    RatingService.rate_order(customer.pk, delivered.order_id, {"rating": 5}, {"rating": 3})

    assert len(RatingService.ratings_for_user(customer.pk)["order_ratings"]) == 1
    rider_view = RatingService.ratings_for_rider(str(rider.pk))
    assert rider_view["total_ratings"] == 1
    assert rider_view["average_rating"] == 3.0
    assert len(RatingService.all_ratings()["rider_ratings"]) == 1

    with pytest.raises(NotFoundError):
        RatingService.ratings_for_rider("5f0000000000000000000009")
