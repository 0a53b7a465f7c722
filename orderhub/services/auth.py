from bson import ObjectId
from flask import g
from flask_jwt_extended import (
    create_access_token,
    decode_token,
    get_jwt,
    get_jwt_identity,
    verify_jwt_in_request,
)

from orderhub.errors.exceptions import NotFoundError, Unauthorized
from orderhub.lib.identity import (
    AdminIdentity,
    CustomerIdentity,
    PartnerIdentity,
    ServicePartnerIdentity,
)
from orderhub.lib.logger import logger
from orderhub.models.partner import Partner, ServicePartner
from orderhub.models.user import User

KIND_USER = "user"
KIND_ADMIN = "admin"
KIND_PARTNER = "partner"
KIND_SERVICE_PARTNER = "service_partner"


def find_by_id(model, object_id):
    if not object_id or not ObjectId.is_valid(str(object_id)):
        return None
    return model.objects(pk=str(object_id)).first()


class AuthService:

    @staticmethod
    def create_token(kind, subject, **claims):
        claims["kind"] = kind
        return create_access_token(identity=str(subject), additional_claims=claims)

    @staticmethod
    def identity_from_claims(subject, claims):
        """Resolve a token subject plus claims into an ``Identity``.

        Roles and categories come from the stored account, never from the
        token, so a demoted partner loses access on the next request.
        """
        kind = (claims or {}).get("kind", KIND_USER)
        if not subject:
            raise Unauthorized("Unauthorized")

        if kind == KIND_ADMIN:
            return AdminIdentity(id=str(subject))

        if kind == KIND_USER:
            user = find_by_id(User, subject)
            if not user:
                raise NotFoundError("User not found")
            if user.role == "admin":
                return AdminIdentity(id=str(user.pk))
            return CustomerIdentity(id=str(user.pk))

        if kind == KIND_PARTNER:
            partner = find_by_id(Partner, subject)
            if not partner or not partner.is_active:
                raise NotFoundError("Partner not found")
            return PartnerIdentity(id=str(partner.pk), role=partner.role)

        if kind == KIND_SERVICE_PARTNER:
            partner = find_by_id(ServicePartner, subject)
            if not partner or not partner.is_active:
                raise NotFoundError("Partner not found")
            return ServicePartnerIdentity(id=str(partner.pk), category=partner.category)

        raise Unauthorized("Unsupported token")

    @staticmethod
    def identity_from_token(token):
        """Used by the socket handshake, where there is no request context to verify."""
        if not token:
            raise Unauthorized("Missing token")
        if token.startswith("Bearer "):
            token = token[len("Bearer "):]
        try:
            claims = decode_token(token)
        except Exception as e:
            logger.warning(f"Rejected socket token: {e}")
            raise Unauthorized("Unauthorized")
        return AuthService.identity_from_claims(claims.get("sub"), claims)

    @staticmethod
    def load_current_identity():
        try:
            verify_jwt_in_request()
        except Exception:
            raise Unauthorized("Unauthorized")
        identity = AuthService.identity_from_claims(get_jwt_identity(), get_jwt())
        g.identity = identity
        return identity

    @staticmethod
    def get_current_identity():
        identity = g.get("identity")
        if identity is None:
            identity = AuthService.load_current_identity()
        return identity
