from unittest.mock import MagicMock

import pytest
from bson import ObjectId

from backend.errors import BadRequest, Conflict, NotFound
from backend.orders import DELIVERED_CANCEL_MESSAGE, OrderWorkflow
from backend.store import MarketStore


def order_payload(plant, **overrides):
    payload = {
        "customer": {"email": "a@x.com", "name": "Ann"},
        "seller": "b@x.com",
        "plantId": str(plant["_id"]),
        "quantity": 2,
        "price": 20,
    }
    payload.update(overrides)
    return payload


class TestOrderWorkflow:
    @pytest.fixture(autouse=True)
    def setup_workflow(self, database):
        self.database = database
        self.catalog = MagicMock()
        self.notifier = MagicMock()
        self.workflow = OrderWorkflow(MarketStore(database), self.catalog, self.notifier)

    def test_place_order_defaults_to_pending(self, plant):
        result = self.workflow.place_order(order_payload(plant))

        stored = self.database.orders.find_one({"_id": result.inserted_id})
        assert stored["status"] == "Pending"
        assert stored["plantId"] == str(plant["_id"])
        assert stored["quantity"] == 2

    def test_place_order_ignores_client_status(self, plant):
        result = self.workflow.place_order(order_payload(plant, status="Delivered"))

        stored = self.database.orders.find_one({"_id": result.inserted_id})
        assert stored["status"] == "Pending"

    def test_place_order_notifies_customer_and_seller(self, plant):
        result = self.workflow.place_order(order_payload(plant))

        self.notifier.notify_order_placed.assert_called_once()
        order, order_id = self.notifier.notify_order_placed.call_args[0]
        assert order_id == result.inserted_id
        assert order["customer"]["email"] == "a@x.com"
        assert order["seller"] == "b@x.com"

    def test_place_order_survives_notification_failure(self, plant):
        self.notifier.notify_order_placed.side_effect = RuntimeError("mail is down")

        result = self.workflow.place_order(order_payload(plant))

        assert self.database.orders.count_documents({"_id": result.inserted_id}) == 1

    def test_place_order_requires_existing_plant(self, plant):
        with pytest.raises(NotFound):
            self.workflow.place_order(order_payload(plant, plantId=str(ObjectId())))

        self.notifier.notify_order_placed.assert_not_called()

    def test_place_order_rejects_zero_quantity(self, plant):
        with pytest.raises(BadRequest):
            self.workflow.place_order(order_payload(plant, quantity=0))

    def test_place_order_requires_customer_email(self, plant):
        with pytest.raises(BadRequest):
            self.workflow.place_order(order_payload(plant, customer={"name": "Ann"}))

    def test_adjust_quantity_delegates_to_catalog(self):
        self.workflow.adjust_plant_quantity("abc", 3, "increase")

        self.catalog.adjust_quantity.assert_called_once_with("abc", 3, "increase")

    @pytest.mark.parametrize("status", ["Pending", "Processing", "Shipped"])
    def test_cancel_deletes_undelivered_order(self, status):
        order_id = self.database.orders.insert_one({"status": status}).inserted_id

        result = self.workflow.cancel_order(str(order_id))

        assert result.deleted_count == 1
        assert self.database.orders.count_documents({}) == 0

    def test_cancel_delivered_order_conflicts(self):
        order_id = self.database.orders.insert_one({"status": "Delivered"}).inserted_id

        with pytest.raises(Conflict) as excinfo:
            self.workflow.cancel_order(str(order_id))

        assert excinfo.value.message == DELIVERED_CANCEL_MESSAGE
        assert self.database.orders.count_documents({"_id": order_id}) == 1

    def test_cancel_missing_order(self):
        with pytest.raises(NotFound):
            self.workflow.cancel_order(str(ObjectId()))

    def test_cancel_does_not_restock(self, plant):
        result = self.workflow.place_order(order_payload(plant))

        self.workflow.cancel_order(str(result.inserted_id))

        self.catalog.adjust_quantity.assert_not_called()
        assert self.database.plants.find_one({"_id": plant["_id"]})["quantity"] == 10

    def test_set_status_is_unconditional(self):
        order_id = self.database.orders.insert_one({"status": "Delivered"}).inserted_id

        self.workflow.set_order_status(str(order_id), "Pending")

        assert self.database.orders.find_one({"_id": order_id})["status"] == "Pending"


def test_post_order_returns_inserted_id(client, database, login, notifier, plant):
    login("a@x.com")

    response = client.post("/orders", json=order_payload(plant))

    assert response.status_code == 200
    body = response.get_json()
    assert body["acknowledged"] is True
    assert database.orders.find_one({"_id": ObjectId(body["insertedId"])})
    notifier.notify_order_placed.assert_called_once()


def test_customer_cannot_place_delivered_order(client, database, login, plant):
    login("a@x.com")

    placed = client.post("/orders", json=order_payload(plant, status="Delivered"))
    order_id = placed.get_json()["insertedId"]

    assert database.orders.find_one({"_id": ObjectId(order_id)})["status"] == "Pending"

    cancelled = client.delete(f"/orders/delete/{order_id}")

    assert cancelled.get_json() == {"acknowledged": True, "deletedCount": 1}


def test_set_status_rejects_non_object_body(client, database, login):
    order_id = database.orders.insert_one({"status": "Pending"}).inserted_id
    login("b@x.com", role="seller")

    response = client.patch(f"/orders/{order_id}", json=["Delivered"])

    assert response.status_code == 400
    assert database.orders.find_one({"_id": order_id})["status"] == "Pending"


def test_post_order_succeeds_when_notifier_fails(client, database, login, notifier, plant):
    notifier.notify_order_placed.side_effect = RuntimeError("mail is down")
    login("a@x.com")

    response = client.post("/orders", json=order_payload(plant))

    assert response.status_code == 200
    assert database.orders.count_documents({}) == 1


def test_post_order_requires_token(client, database, plant):
    response = client.post("/orders", json=order_payload(plant))

    assert response.status_code == 401
    assert database.orders.count_documents({}) == 0


def test_delete_delivered_order_is_conflict(client, database, login):
    order_id = database.orders.insert_one(
        {"customer": {"email": "a@x.com"}, "status": "Delivered"}
    ).inserted_id
    login("a@x.com")

    response = client.delete(f"/orders/delete/{order_id}")

    assert response.status_code == 409
    assert response.mimetype == "text/plain"
    assert response.get_data(as_text=True) == DELIVERED_CANCEL_MESSAGE
    assert database.orders.count_documents({}) == 1


def test_delete_pending_order(client, database, login):
    order_id = database.orders.insert_one(
        {"customer": {"email": "a@x.com"}, "status": "Pending"}
    ).inserted_id
    login("a@x.com")

    response = client.delete(f"/orders/delete/{order_id}")

    assert response.get_json() == {"acknowledged": True, "deletedCount": 1}


def test_seller_sets_order_status(client, database, login):
    order_id = database.orders.insert_one({"status": "Pending"}).inserted_id
    login("b@x.com", role="seller")

    response = client.patch(f"/orders/{order_id}", json={"status": "Delivered"})

    assert response.get_json()["modifiedCount"] == 1
    assert database.orders.find_one({"_id": order_id})["status"] == "Delivered"


def test_customer_cannot_set_order_status(client, database, login):
    order_id = database.orders.insert_one({"status": "Pending"}).inserted_id
    login("a@x.com", role="customer")

    response = client.patch(f"/orders/{order_id}", json={"status": "Delivered"})

    assert response.status_code == 403
    assert database.orders.find_one({"_id": order_id})["status"] == "Pending"
