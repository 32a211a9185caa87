from flask import jsonify, request

from .auth import current_claim
from .errors import BadRequest
from .serializers import (
    serialize_delete_result,
    serialize_document,
    serialize_documents,
    serialize_insert_result,
    serialize_update_result,
)


def json_object():
    """Request body as a dict; an absent body reads as empty."""
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise BadRequest("Request body must be a JSON object.")
    return payload


def register_routes(app, credentials, gate, users, catalog, workflow, reports):
    @app.route("/")
    def index():
        return "Hello from plantNet Server.."

    @app.route("/health")
    def health():
        return {"status": "ok"}, 200

    # --- Public ---

    @app.route("/jwt", methods=["POST"])
    def issue_token():
        claim = json_object()
        token = credentials.issue(claim)
        return credentials.attach(jsonify({"success": True}), token)

    @app.route("/logout", methods=["GET"])
    def logout():
        return credentials.clear(jsonify({"success": True}))

    @app.route("/plants", methods=["GET"])
    def list_plants():
        return jsonify(serialize_documents(catalog.list_plants()))

    @app.route("/plants/<plant_id>", methods=["GET"])
    def get_plant(plant_id: str):
        return jsonify(serialize_document(catalog.get_plant(plant_id)))

    @app.route("/users/<email>", methods=["POST"])
    def save_user(email: str):
        profile = json_object()
        existing, result = users.upsert(email, profile)
        if existing:
            return jsonify(serialize_document(existing))
        return jsonify(serialize_insert_result(result))

    @app.route("/users/role/<email>", methods=["GET"])
    def get_user_role(email: str):
        return jsonify({"role": users.get_role(email)})

    # --- Authenticated ---

    @app.route("/orders", methods=["POST"])
    @credentials.required
    def place_order():
        payload = json_object()
        result = workflow.place_order(payload)
        app.logger.info(
            "Order %s placed by %s", result.inserted_id, current_claim().get("email")
        )
        return jsonify(serialize_insert_result(result))

    @app.route("/customer-orders/<email>", methods=["GET"])
    @credentials.required
    def customer_orders(email: str):
        return jsonify(serialize_documents(reports.customer_orders(email)))

    @app.route("/orders/delete/<order_id>", methods=["DELETE"])
    @credentials.required
    def cancel_order(order_id: str):
        result = workflow.cancel_order(order_id)
        app.logger.info(
            "Order %s cancelled by %s", order_id, current_claim().get("email")
        )
        return jsonify(serialize_delete_result(result))

    @app.route("/plants/quantity/<plant_id>", methods=["PATCH"])
    @credentials.required
    def update_plant_quantity(plant_id: str):
        payload = json_object()
        result = workflow.adjust_plant_quantity(
            plant_id, payload.get("quantityToUpdate"), payload.get("status")
        )
        return jsonify(serialize_update_result(result))

    @app.route("/users/<email>", methods=["PATCH"])
    @credentials.required
    def request_seller_status(email: str):
        result = users.request_seller(email)
        return jsonify(serialize_update_result(result))

    # --- Seller ---

    @app.route("/plants", methods=["POST"])
    @credentials.required
    def create_plant():
        seller, permission_error = gate.require_seller(current_claim())
        if permission_error:
            return permission_error

        payload = json_object()
        result = catalog.create_plant(payload, seller)
        app.logger.info("Plant %s listed by %s", result.inserted_id, seller.get("email"))
        return jsonify(serialize_insert_result(result))

    @app.route("/seller-plants", methods=["GET"])
    @credentials.required
    def seller_plants():
        seller, permission_error = gate.require_seller(current_claim())
        if permission_error:
            return permission_error

        return jsonify(serialize_documents(catalog.seller_plants(seller.get("email"))))

    @app.route("/plants/<plant_id>", methods=["DELETE"])
    @credentials.required
    def delete_plant(plant_id: str):
        seller, permission_error = gate.require_seller(current_claim())
        if permission_error:
            return permission_error

        result = catalog.delete_plant(plant_id, seller.get("email"))
        return jsonify(serialize_delete_result(result))

    @app.route("/seller-orders/<email>", methods=["GET"])
    @credentials.required
    def seller_orders(email: str):
        _, permission_error = gate.require_seller(current_claim())
        if permission_error:
            return permission_error

        return jsonify(serialize_documents(reports.seller_orders(email)))

    @app.route("/orders/<order_id>", methods=["PATCH"])
    @credentials.required
    def update_order_status(order_id: str):
        _, permission_error = gate.require_seller(current_claim())
        if permission_error:
            return permission_error

        payload = json_object()
        result = workflow.set_order_status(order_id, payload.get("status"))
        return jsonify(serialize_update_result(result))

    # --- Admin ---

    @app.route("/all-users/<email>", methods=["GET"])
    @credentials.required
    def list_users(email: str):
        _, admin_error = gate.require_admin(current_claim())
        if admin_error:
            return admin_error

        return jsonify(serialize_documents(users.list_users_except(email)))

    @app.route("/user/role/<email>", methods=["PATCH"])
    @credentials.required
    def update_user_role(email: str):
        admin_user, admin_error = gate.require_admin(current_claim())
        if admin_error:
            return admin_error

        payload = json_object()
        result = users.update_role(email, payload.get("role"))
        app.logger.info(
            "Role of %s set to %s by %s", email, payload.get("role"), admin_user.get("email")
        )
        return jsonify(serialize_update_result(result))

    @app.route("/admin-stat", methods=["GET"])
    @credentials.required
    def admin_stat():
        _, admin_error = gate.require_admin(current_claim())
        if admin_error:
            return admin_error

        return jsonify(serialize_document(reports.admin_stats()))
