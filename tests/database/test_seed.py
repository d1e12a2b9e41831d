"""Seeding of the default users."""
from config.business_config import BusinessConfig, OpticStoreConfig
from database import seed_defaults
from database.schemas import UserCreate


class TwoUserConfig(BusinessConfig):

    def get_store_name(self):
        return "Test Store"

    def get_default_users(self):
        return [
            {"username": "boss", "password": "pw", "role": "admin", "name": "Boss"},
            {"username": "clerk", "password": "pw", "name": "Clerk"},
        ]


def test_seed_creates_admin(storage):
    created = seed_defaults(storage, OpticStoreConfig())
    assert len(created) == 1
    admin = storage.users.find_by("username", created[0].username)
    assert admin is not None
    assert admin.role == "admin"


def test_seed_is_idempotent(storage):
    seed_defaults(storage, TwoUserConfig())
    assert seed_defaults(storage, TwoUserConfig()) == []
    assert len(storage.users.list()) == 2


def test_seed_keeps_existing_user(storage):
    storage.users.create(UserCreate(username="boss", password="mine", name="Me"))
    created = seed_defaults(storage, TwoUserConfig())
    assert [u.username for u in created] == ["clerk"]
    assert storage.users.find_by("username", "boss").password == "mine"
