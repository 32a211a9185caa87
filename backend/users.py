import time
from typing import Dict, Optional

from pymongo.errors import DuplicateKeyError

from .errors import BadRequest, NotFound
from .utils import normalize_email

ALLOWED_USER_ROLES = {"customer", "seller", "admin"}
SELLER_REQUEST_PENDING_MESSAGE = (
    "You have already requested to become a seller, "
    "Wait for the admin to accept the request."
)


class UserDirectory:
    def __init__(self, store):
        self.users = store.users

    def upsert(self, email: str, profile: Optional[Dict[str, object]] = None):
        """Return the stored user, or insert a new customer record.

        Returns ``(existing_document, None)`` when the email is known and
        ``(None, insert_result)`` after creating the record.
        """
        normalized_email = normalize_email(email)
        if not normalized_email:
            raise BadRequest("A valid email is required.")

        if profile is not None and not isinstance(profile, dict):
            raise BadRequest("User profile must be a JSON object.")

        existing = self.users.find_one({"email": normalized_email})
        if existing:
            return existing, None

        document = {
            key: value
            for key, value in (profile or {}).items()
            if key not in {"_id", "role", "status", "timestamp"}
        }
        document.update(
            {
                "email": normalized_email,
                "role": "customer",
                "timestamp": int(time.time() * 1000),
            }
        )
        try:
            return None, self.users.insert_one(document)
        except DuplicateKeyError:
            # a concurrent first contact created the record after our lookup
            return self.users.find_one({"email": normalized_email}), None

    def request_seller(self, email: str):
        normalized_email = normalize_email(email)
        query = {"email": normalized_email}
        user_document = self.users.find_one(query)
        if not user_document or user_document.get("status") == "Requested":
            raise BadRequest(SELLER_REQUEST_PENDING_MESSAGE, as_text=True)

        return self.users.update_one(query, {"$set": {"status": "Requested"}})

    def get_role(self, email: str) -> Optional[str]:
        user_document = self.users.find_one({"email": normalize_email(email)})
        return user_document.get("role") if user_document else None

    def list_users_except(self, email: str):
        return list(self.users.find({"email": {"$ne": normalize_email(email)}}))

    def update_role(self, email: str, role) -> object:
        desired_role = str(role or "").strip().lower()
        if desired_role not in ALLOWED_USER_ROLES:
            raise BadRequest("Role must be 'customer', 'seller', or 'admin'.")

        normalized_email = normalize_email(email)
        if not self.users.find_one({"email": normalized_email}):
            raise NotFound("User not found.")

        return self.users.update_one(
            {"email": normalized_email},
            {"$set": {"role": desired_role, "status": "Verified"}},
        )
