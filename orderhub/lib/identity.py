"""
Who is acting on an order.

``Identity`` is resolved once from a caller credential (HTTP request or socket
handshake) and then used for room assignment and authorization. ``Actor`` is
what gets stamped on a status history entry.
"""
from dataclasses import dataclass
from typing import Optional, Union

from bson import ObjectId


@dataclass(frozen=True)
class CustomerIdentity:
    id: str
    role: str = "customer"


@dataclass(frozen=True)
class AdminIdentity:
    id: str
    role: str = "admin"


@dataclass(frozen=True)
class PartnerIdentity:
    id: str
    role: str = "rider"


@dataclass(frozen=True)
class ServicePartnerIdentity:
    id: str
    category: Optional[str] = None
    role: str = "servicePartner"


Identity = Union[CustomerIdentity, AdminIdentity, PartnerIdentity, ServicePartnerIdentity]


@dataclass(frozen=True)
class UserActor:
    id: str
    role: str


@dataclass(frozen=True)
class PartnerActor:
    id: str
    role: str


Actor = Union[UserActor, PartnerActor]


def actor_for_identity(identity):
    if isinstance(identity, (PartnerIdentity, ServicePartnerIdentity)):
        return PartnerActor(id=identity.id, role=identity.role)
    return UserActor(id=identity.id, role=identity.role)


def resolve_user_id(value):
    """Normalize an owner reference to its string form.

    Accepts a raw string, an ObjectId, a mapping or an object carrying
    ``id``/``_id``/``user_id``, or anything stringifiable. Returns None when
    nothing usable is given.
    """
    if value is None or value == "":
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        for key in ("_id", "id", "user_id"):
            if value.get(key):
                return resolve_user_id(value[key])
        return None
    for attr in ("pk", "id", "user_id"):
        nested = getattr(value, attr, None)
        if nested is not None and nested is not value:
            return resolve_user_id(nested)
    return str(value)
