import logging
from functools import wraps
from typing import Dict, Optional

from flask import current_app, g, jsonify, request
from flask_jwt_extended import (
    create_access_token,
    decode_token,
    set_access_cookies,
    unset_jwt_cookies,
)
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from .errors import BadRequest, Unauthorized
from .utils import normalize_email

logger = logging.getLogger(__name__)

UNAUTHORIZED_MESSAGE = "unauthorized access"
FORBIDDEN_MESSAGE = "Forbidden access!"

# Claims managed by the token library itself; never copied from a request body.
RESERVED_CLAIMS = {
    "sub",
    "exp",
    "iat",
    "nbf",
    "jti",
    "iss",
    "aud",
    "type",
    "fresh",
    "csrf",
}


def claim_from_payload(payload: Dict[str, object]) -> Dict[str, object]:
    claim = {
        key: value for key, value in payload.items() if key not in RESERVED_CLAIMS
    }
    claim["email"] = payload.get("sub")
    return claim


def current_claim() -> Dict[str, object]:
    """Identity claim verified by ``CredentialService.required`` for this request."""
    return g.claim


class CredentialService:
    """Issues and verifies the signed session token kept in the ``token`` cookie."""

    def issue(self, claim) -> str:
        if not isinstance(claim, dict):
            raise BadRequest("An identity claim is required.")
        email = normalize_email(claim.get("email"))
        if not email:
            raise BadRequest("An email is required to issue a token.")

        additional_claims = {
            key: value
            for key, value in claim.items()
            if key != "email" and key not in RESERVED_CLAIMS
        }
        return create_access_token(identity=email, additional_claims=additional_claims)

    def verify(self, token: Optional[str]) -> Dict[str, object]:
        if not token:
            raise Unauthorized(UNAUTHORIZED_MESSAGE)
        try:
            payload = decode_token(token)
        except (PyJWTError, JWTExtendedException) as exc:
            logger.info("Rejected session token: %s", exc)
            raise Unauthorized(UNAUTHORIZED_MESSAGE)
        return claim_from_payload(payload)

    def required(self, view):
        """Reject the request with 401 unless the ``token`` cookie verifies."""

        @wraps(view)
        def wrapper(*args, **kwargs):
            token = request.cookies.get(current_app.config["JWT_ACCESS_COOKIE_NAME"])
            g.claim = self.verify(token)
            return view(*args, **kwargs)

        return wrapper

    def attach(self, response, token: str):
        set_access_cookies(response, token)
        return response

    def clear(self, response):
        unset_jwt_cookies(response)
        return response


class AuthorizationGate:
    """Role checks against the stored user record.

    ``require_role`` returns ``(user, None)`` when access is allowed and
    ``(None, response)`` otherwise, for the route to return as-is.
    """

    def __init__(self, store):
        self.users = store.users

    def require_role(self, claim: Optional[Dict[str, object]], role: str):
        email = normalize_email((claim or {}).get("email"))
        user_document = self.users.find_one({"email": email}) if email else None

        if not user_document or user_document.get("role") != role:
            return None, (jsonify({"message": FORBIDDEN_MESSAGE}), 403)

        return user_document, None

    def require_seller(self, claim):
        return self.require_role(claim, "seller")

    def require_admin(self, claim):
        return self.require_role(claim, "admin")

