import logging

from pymongo import ASCENDING
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)


class MarketStore:
    """Handle on the plantNet database.

    Built once by the application factory and passed to every service, so
    tests can hand in an in-memory database instead of a live server.
    """

    def __init__(self, database):
        self.database = database
        self.users = database.users
        self.plants = database.plants
        self.orders = database.orders

    def ensure_indexes(self):
        try:
            self.users.create_index([("email", ASCENDING)], unique=True)
            self.plants.create_index([("seller.email", ASCENDING)])
            self.orders.create_index([("customer.email", ASCENDING)])
            self.orders.create_index([("seller", ASCENDING)])
        except PyMongoError as exc:
            logger.warning("Unable to ensure indexes: %s", exc)

