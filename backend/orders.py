import logging
from typing import Dict

from .errors import BadRequest, Conflict, NotFound
from .utils import normalize_email, safe_float, safe_int, to_object_id

logger = logging.getLogger(__name__)

INITIAL_STATUS = "Pending"
DELIVERED_STATUS = "Delivered"
DELIVERED_CANCEL_MESSAGE = "Can't cancel once the product is delivered!"


class OrderWorkflow:
    """Order placement, cancellation and seller status updates.

    Cancelling does not restock the plant; the client restores stock with a
    separate quantity adjustment, so the two steps are not atomic.
    """

    def __init__(self, store, catalog, notifier):
        self.orders = store.orders
        self.plants = store.plants
        self.catalog = catalog
        self.notifier = notifier

    def normalize_order(self, payload: Dict[str, object]) -> Dict[str, object]:
        if not isinstance(payload, dict):
            raise BadRequest("Order details are required.")

        plant_id = str(payload.get("plantId") or "").strip()
        plant_object_id = to_object_id(plant_id, "plant")
        if not self.plants.find_one({"_id": plant_object_id}):
            raise NotFound("Plant not found.")

        quantity = safe_int(payload.get("quantity"))
        if quantity is None or quantity < 1:
            raise BadRequest("Quantity must be a positive whole number.")

        price = safe_float(payload.get("price"))
        if price is None or price < 0:
            raise BadRequest("Price must be a non-negative number.")

        customer = payload.get("customer")
        customer = dict(customer) if isinstance(customer, dict) else {}
        customer["email"] = normalize_email(customer.get("email"))
        if not customer["email"]:
            raise BadRequest("A customer email is required.")

        order = {key: value for key, value in payload.items() if key != "_id"}
        order.update(
            {
                "customer": customer,
                "seller": normalize_email(payload.get("seller")),
                "plantId": plant_id,
                "quantity": quantity,
                "price": round(price, 2),
                "status": INITIAL_STATUS,
            }
        )
        return order

    def place_order(self, payload: Dict[str, object]):
        order = self.normalize_order(payload)
        result = self.orders.insert_one(order)

        if result.inserted_id:
            try:
                self.notifier.notify_order_placed(order, result.inserted_id)
            except Exception:
                logger.exception("Unable to dispatch notifications for order %s", result.inserted_id)

        return result

    def adjust_plant_quantity(self, plant_id, delta, direction=None):
        return self.catalog.adjust_quantity(plant_id, delta, direction)

    def cancel_order(self, order_id):
        query = {"_id": to_object_id(order_id, "order")}
        order_document = self.orders.find_one(query)
        if not order_document:
            raise NotFound("Order not found.")
        if order_document.get("status") == DELIVERED_STATUS:
            raise Conflict(DELIVERED_CANCEL_MESSAGE)

        return self.orders.delete_one(query)

    def set_order_status(self, order_id, status):
        status_value = str(status or "").strip()
        if not status_value:
            raise BadRequest("A status is required.")

        return self.orders.update_one(
            {"_id": to_object_id(order_id, "order")},
            {"$set": {"status": status_value}},
        )
