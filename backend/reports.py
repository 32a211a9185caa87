from typing import Dict, List

from .utils import normalize_email


def plant_join_stages(copied_fields: Dict[str, str]) -> List[Dict[str, object]]:
    """Join each order to its plant and copy the given plant fields onto it."""
    return [
        {"$addFields": {"plantId": {"$toObjectId": "$plantId"}}},
        {
            "$lookup": {
                "from": "plants",
                "localField": "plantId",
                "foreignField": "_id",
                "as": "plants",
            }
        },
        # orders whose plant is gone drop out here
        {"$unwind": "$plants"},
        {"$addFields": copied_fields},
        {"$project": {"plants": 0}},
    ]


CHART_PIPELINE = [
    {"$sort": {"_id": -1}},
    {
        "$addFields": {
            "_id": {
                "$dateToString": {"format": "%Y-%m-%d", "date": {"$toDate": "$_id"}}
            },
            "quantity": {"$sum": "$quantity"},
            "price": {"$sum": "$price"},
        }
    },
    {
        "$group": {
            "_id": "$_id",
            "quantity": {"$sum": "$quantity"},
            "price": {"$sum": "$price"},
            "order": {"$sum": 1},
        }
    },
    {"$project": {"_id": 0, "date": "$_id", "quantity": 1, "order": 1, "price": 1}},
]

TOTALS_PIPELINE = [
    {
        "$group": {
            "_id": None,
            "totalRevenue": {"$sum": "$price"},
            "totalOrders": {"$sum": 1},
        }
    },
    {"$project": {"_id": 0}},
]


class ReportingEngine:
    def __init__(self, store):
        self.users = store.users
        self.plants = store.plants
        self.orders = store.orders

    def customer_orders(self, email: str):
        pipeline = [{"$match": {"customer.email": normalize_email(email)}}]
        pipeline += plant_join_stages(
            {
                "name": "$plants.name",
                "category": "$plants.category",
                "image": "$plants.image",
            }
        )
        return list(self.orders.aggregate(pipeline))

    def seller_orders(self, seller_email: str):
        pipeline = [{"$match": {"seller": normalize_email(seller_email)}}]
        pipeline += plant_join_stages({"name": "$plants.name"})
        return list(self.orders.aggregate(pipeline))

    def admin_stats(self) -> Dict[str, object]:
        total_users = self.users.estimated_document_count()
        total_plants = self.plants.estimated_document_count()

        # Only the first date bucket is read; the rest of the series is not returned.
        chart_data = next(iter(self.orders.aggregate(CHART_PIPELINE)), None)
        order_totals = next(iter(self.orders.aggregate(TOTALS_PIPELINE)), None) or {}

        return {
            "totalUsers": total_users,
            "totalPlants": total_plants,
            "totalRevenue": order_totals.get("totalRevenue", 0),
            "totalOrders": order_totals.get("totalOrders", 0),
            "chartData": chart_data,
        }
