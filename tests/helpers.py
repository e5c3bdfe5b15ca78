"""Shared fixtures for database-backed and HTTP tests."""

import unittest
from typing import Any

from fastapi.testclient import TestClient
from sqlalchemy import select

from civreg.core.database import SessionLocal, engine
from civreg.core.security import create_access_token, hash_password
from civreg.core.storage import InMemoryObjectStore, get_object_store
from civreg.main import app
from civreg.models import Base, Branch, Role, User

ROLE_NAMES = ("SystemAdmin", "Admin", "Manager", "Staff", "Viewer", "User")
PASSWORD = "secret1"


class DatabaseTestCase(unittest.TestCase):
    """Fresh schema per test with the default roles and one branch seeded."""

    def setUp(self) -> None:
        Base.metadata.create_all(bind=engine)
        self.session = SessionLocal()
        self.session.add_all([Role(name=name, is_active=True) for name in ROLE_NAMES])
        self.session.add(Branch(name="nbtc", is_active=True))
        self.session.commit()

    def tearDown(self) -> None:
        self.session.close()
        Base.metadata.drop_all(bind=engine)

    def role(self, name: str) -> Role:
        return self.session.scalars(select(Role).where(Role.name == name)).one()

    def make_user(self, username: str, *role_names: str, is_active: bool = True) -> User:
        user = User(
            username=username,
            full_name=username.title(),
            password_hash=hash_password(PASSWORD),
            is_active=is_active,
            roles=[self.role(name) for name in role_names],
        )
        self.session.add(user)
        self.session.commit()
        return user


class ApiTestCase(DatabaseTestCase):
    """DatabaseTestCase plus a TestClient wired to a private in-memory object store."""

    def setUp(self) -> None:
        super().setUp()
        self.store = InMemoryObjectStore()
        app.dependency_overrides[get_object_store] = lambda: self.store
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()
        self.client.close()
        super().tearDown()

    def headers_for(self, user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    def admin_headers(self) -> dict[str, str]:
        return self.headers_for(self.make_user("root_admin", "Admin"))

    def assert_envelope(self, response: Any, status_code: int, code: str) -> dict[str, Any]:
        self.assertEqual(response.status_code, status_code, response.text)
        body = response.json()
        self.assertEqual(body["code"], code)
        return body
