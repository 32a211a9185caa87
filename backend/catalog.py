from typing import Dict

from .errors import BadRequest, Forbidden, NotFound
from .utils import normalize_email, safe_float, safe_int, to_object_id

PLANT_FIELDS = ("name", "category", "description", "image")


class Catalog:
    """Plant listings and their stock counters."""

    def __init__(self, store):
        self.plants = store.plants

    def list_plants(self):
        return list(self.plants.find())

    def get_plant(self, plant_id):
        plant_document = self.plants.find_one({"_id": to_object_id(plant_id, "plant")})
        if not plant_document:
            raise NotFound("Plant not found.")
        return plant_document

    def create_plant(self, payload: Dict[str, object], seller_document: Dict[str, object]):
        payload = payload or {}
        name = str(payload.get("name") or "").strip()
        if not name:
            raise BadRequest("A plant name is required.")

        price_value = safe_float(payload.get("price"))
        if price_value is None or price_value < 0:
            raise BadRequest("Price must be a non-negative number.")

        quantity_value = safe_int(payload.get("quantity"))
        if quantity_value is None or quantity_value < 0:
            raise BadRequest("Quantity must be a non-negative whole number.")

        plant_document = {
            field: str(payload.get(field) or "").strip() for field in PLANT_FIELDS
        }
        plant_document.update(
            {
                "name": name,
                "price": round(price_value, 2),
                "quantity": quantity_value,
                "seller": {
                    "email": normalize_email(seller_document.get("email")),
                    "name": seller_document.get("name") or "",
                    "image": seller_document.get("image") or "",
                },
            }
        )
        return self.plants.insert_one(plant_document)

    def seller_plants(self, seller_email: str):
        return list(self.plants.find({"seller.email": normalize_email(seller_email)}))

    def delete_plant(self, plant_id, seller_email: str):
        plant_document = self.get_plant(plant_id)
        owner_email = normalize_email((plant_document.get("seller") or {}).get("email"))
        if owner_email != normalize_email(seller_email):
            raise Forbidden("You do not have permission to delete this plant.")

        return self.plants.delete_one({"_id": plant_document["_id"]})

    def adjust_quantity(self, plant_id, delta, direction=None):
        """Apply ``+delta`` for ``direction == "increase"``, ``-delta`` otherwise.

        Single ``$inc``; there is no floor at zero.
        """
        amount = safe_int(delta)
        if amount is None:
            raise BadRequest("quantityToUpdate must be a whole number.")
        if direction != "increase":
            amount = -amount

        return self.plants.update_one(
            {"_id": to_object_id(plant_id, "plant")},
            {"$inc": {"quantity": amount}},
        )
