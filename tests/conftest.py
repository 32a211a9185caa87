from unittest.mock import MagicMock

import mongomock
import pytest

from backend import create_app

TEST_CONFIG = {
    "TESTING": True,
    "APP_ENV": "development",
    "JWT_SECRET_KEY": "plantnet-test-secret-0123456789abcdef",
    "TRUSTED_PROXY_HOPS": 0,
    "RESEND_API_KEY": "",
}


@pytest.fixture
def database():
    return mongomock.MongoClient().plantNetDB


@pytest.fixture
def notifier():
    return MagicMock()


@pytest.fixture
def app(database, notifier):
    return create_app(TEST_CONFIG, database=database, notifier=notifier)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login(client, database):
    """Sign in as ``email``; a stored role creates the user record first."""

    def _login(email, role=None, **profile):
        if role:
            database.users.insert_one({"email": email, "role": role, **profile})
        response = client.post("/jwt", json={"email": email})
        assert response.status_code == 200
        return response

    return _login


@pytest.fixture
def plant(database):
    result = database.plants.insert_one(
        {
            "name": "Monstera",
            "category": "Indoor",
            "image": "https://img.example/monstera.jpg",
            "price": 20,
            "quantity": 10,
            "seller": {"email": "b@x.com", "name": "Bea"},
        }
    )
    return database.plants.find_one({"_id": result.inserted_id})
