"""End-to-end tests for resource endpoints, including multipart uploads."""

import asyncio
import json
from unittest import mock

from sqlalchemy import func, select

from civreg.core.config import get_settings, settings
from civreg.core.storage import InMemoryObjectStore, ObjectStoreError, get_object_store
from civreg.main import app
from civreg.models import HeroSlider, Role
from helpers import ApiTestCase


class FailingDeleteStore(InMemoryObjectStore):
    def delete(self, bucket: str, key: str) -> None:
        raise ObjectStoreError("access denied")


DETAILS = json.dumps([
    {"statement": "Bring the birth certificate", "list": ["original", "copy"]},
    {"statement": "Visit the office", "list": []},
])


class TestContentEndpoints(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.headers = self.admin_headers()

    def create(self) -> dict:
        resp = self.client.post(
            "/api/content",
            data={"title": "Birth registration", "description": "Steps", "sort": "2", "details": DETAILS},
            files=[
                ("images_0", ("front side.png", b"\x89PNG front", "image/png")),
                ("images_1", ("office-map.jpg", b"\xff\xd8 map", "image/jpeg")),
            ],
            headers=self.headers,
        )
        return self.assert_envelope(resp, 201, "Created")["data"]

    def test_create_then_delete_removes_every_object(self) -> None:
        data = self.create()
        self.assertEqual(data["sort"], 2)
        self.assertEqual([d["list"] for d in data["details"]], [["original", "copy"], []])
        self.assertEqual(data["createdBy"]["username"], "root_admin")
        keys = [key for _, key in self.store.keys()]
        self.assertEqual(len(keys), 2)
        self.assertTrue(any(key.endswith("-front-side.png") for key in keys))

        resp = self.client.delete(f"/api/content/{data['id']}", headers=self.headers)
        self.assert_envelope(resp, 200, "OK")
        self.assertEqual(list(self.store.keys()), [])

        listing = self.client.get("/api/content", headers=self.headers)
        ids = [item["id"] for item in self.assert_envelope(listing, 200, "OK")["data"]["items"]]
        self.assertNotIn(data["id"], ids)
        self.assert_envelope(self.client.get(f"/api/content/{data['id']}", headers=self.headers), 404, "NotFound")

    def test_image_route_streams_bytes_without_auth(self) -> None:
        data = self.create()
        detail = data["details"][0]
        image = detail["images"][0]
        resp = self.client.get(f"/api/content/{data['id']}/details/{detail['id']}/images/{image['id']}")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.content, b"\x89PNG front")
        self.assertEqual(resp.headers["content-type"], "image/png")
        self.assertIn("inline", resp.headers["content-disposition"])

    def test_details_must_be_json(self) -> None:
        resp = self.client.post(
            "/api/content",
            data={"title": "Broken", "details": "[not json"},
            headers=self.headers,
        )
        self.assert_envelope(resp, 400, "BadRequest")

    def test_missing_title_uses_validation_envelope(self) -> None:
        resp = self.client.post("/api/content", data={"details": DETAILS}, headers=self.headers)
        self.assert_envelope(resp, 400, "ValidationError")

    def test_viewer_cannot_create(self) -> None:
        viewer = self.make_user("vic", "Viewer")
        resp = self.client.post(
            "/api/content",
            data={"title": "Nope", "details": DETAILS},
            headers=self.headers_for(viewer),
        )
        self.assert_envelope(resp, 403, "Forbidden")


class TestHeroSliderEndpoints(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.headers = self.admin_headers()

    def create(self, content_type: str = "image/png"):
        return self.client.post(
            "/api/hero-slider",
            data={"title": "Welcome", "subtitle": "Civil registry"},
            files={"image": ("slide.png", b"slide-bytes", content_type)},
            headers=self.headers,
        )

    def slider_count(self) -> int:
        return self.session.scalar(select(func.count()).select_from(HeroSlider))

    def test_create_list_and_fetch_image(self) -> None:
        data = self.assert_envelope(self.create(), 201, "Created")["data"]
        self.assertEqual(data["imageUrl"], f"/api/hero-slider/{data['id']}")
        self.assertEqual(data["image"]["originalName"], "slide.png")
        self.assertTrue(data["image"]["filename"].startswith("hero-slider/"))

        listing = self.assert_envelope(self.client.get("/api/hero-slider", headers=self.headers), 200, "OK")
        self.assertEqual(listing["data"]["total"], 1)

        resp = self.client.get(data["imageUrl"], headers=self.headers)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.content, b"slide-bytes")

    def test_bad_mime_type_stores_nothing(self) -> None:
        self.assert_envelope(self.create("text/plain"), 400, "BadRequest")
        self.assertEqual(list(self.store.keys()), [])
        self.assertEqual(self.slider_count(), 0)

    def test_oversized_image_stores_nothing(self) -> None:
        limit = get_settings().MAX_UPLOAD_BYTES
        resp = self.client.post(
            "/api/hero-slider",
            data={"title": "Welcome"},
            files={"image": ("huge.png", b"\0" * (limit + 1024), "image/png")},
            headers=self.headers,
        )
        body = self.assert_envelope(resp, 400, "BadRequest")
        self.assertIn("MB limit", body["message"])
        self.assertEqual(list(self.store.keys()), [])
        self.assertEqual(self.slider_count(), 0)

    def test_delete_removes_object_and_row(self) -> None:
        data = self.assert_envelope(self.create(), 201, "Created")["data"]
        resp = self.client.delete(f"/api/hero-slider/{data['id']}", headers=self.headers)
        self.assert_envelope(resp, 200, "OK")
        self.assertEqual(list(self.store.keys()), [])
        self.assertEqual(self.slider_count(), 0)

    def test_failed_object_delete_keeps_the_row(self) -> None:
        data = self.assert_envelope(self.create(), 201, "Created")["data"]
        failing = FailingDeleteStore()
        for bucket, key in self.store.keys():
            failing.put(bucket, key, b"slide-bytes", "image/png")
        app.dependency_overrides[get_object_store] = lambda: failing

        resp = self.client.delete(f"/api/hero-slider/{data['id']}", headers=self.headers)
        body = self.assert_envelope(resp, 500, "ServerError")
        self.assertEqual(len(body["error"]["failedKeys"]), 1)
        self.assertEqual(self.slider_count(), 1)


class TestEventEndpoints(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.staff = self.headers_for(self.make_user("sam", "Staff"))

    def create(self, **overrides):
        body = {
            "title": "Registration day",
            "dateFrom": "2025-03-10",
            "dateTo": "2025-03-11",
            "timeFrom": "08:00",
            "timeTo": "16:00",
            "contactPerson": {"name": "Dara", "phone": "012 345 678", "email": ""},
        }
        body.update(overrides)
        return self.client.post("/api/event", json=body, headers=self.staff)

    def test_cancel_keeps_event_listed(self) -> None:
        data = self.assert_envelope(self.create(), 201, "Created")["data"]
        self.assertIsNone(data["contactPerson"]["email"])
        self.assert_envelope(self.client.delete(f"/api/event/{data['id']}", headers=self.staff), 200, "OK")
        listing = self.assert_envelope(self.client.get("/api/event", headers=self.staff), 200, "OK")
        self.assertEqual([item["isCanceled"] for item in listing["data"]["items"]], [True])

    def test_reversed_dates_are_rejected(self) -> None:
        resp = self.create(dateFrom="2025-03-12")
        self.assert_envelope(resp, 400, "ValidationError")

    def test_viewer_may_read_but_not_list(self) -> None:
        data = self.assert_envelope(self.create(), 201, "Created")["data"]
        viewer = self.headers_for(self.make_user("vic", "Viewer"))
        self.assert_envelope(self.client.get(f"/api/event/{data['id']}", headers=viewer), 200, "OK")
        self.assert_envelope(self.client.get("/api/event", headers=viewer), 403, "Forbidden")


class TestUserEndpoints(ApiTestCase):
    def test_register_with_info_and_list(self) -> None:
        headers = self.admin_headers()
        resp = self.client.post(
            "/api/user/register-with-info",
            json={
                "username": "ann_sok",
                "password": "secret12",
                "fullName": "Ann Sok",
                "roleId": [self.role("Staff").id],
                "userInfo": {
                    "firstName": "Ann",
                    "lastName": "Sok",
                    "gender": "F",
                    "dateOfBirth": "1990-05-17",
                    "maritalStatus": "Single",
                    "phoneNumber": "012 345 678",
                    "identifications": [{"cardType": "passport", "cardCode": "P100"}],
                },
            },
            headers=headers,
        )
        data = self.assert_envelope(resp, 201, "Created")["data"]
        self.assertTrue(data["token"])
        info_id = data["user"]["userInfoId"]["id"]

        listing = self.client.get("/api/user", params={"cardType": "passport"}, headers=headers)
        page = self.assert_envelope(listing, 200, "OK")["data"]
        self.assertEqual([user["username"] for user in page["users"]], ["ann_sok"])

        detail = self.client.get(f"/api/user/{info_id}", headers=headers)
        self.assertEqual(self.assert_envelope(detail, 200, "OK")["data"]["user"]["username"], "ann_sok")

    def test_unknown_route_uses_error_envelope(self) -> None:
        resp = self.client.get("/api/nowhere")
        self.assert_envelope(resp, 404, "NotFound")


class TestHealth(ApiTestCase):
    def test_health(self) -> None:
        resp = self.client.get("/api/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"status": "ok", "environment": "test", "database": "connected"})


class TestRequestDeadline(ApiTestCase):
    def test_slow_request_times_out(self) -> None:
        async def slow_store() -> InMemoryObjectStore:
            await asyncio.sleep(0.5)
            return self.store

        app.dependency_overrides[get_object_store] = slow_store
        with mock.patch.object(settings, "REQUEST_TIMEOUT_SEC", 0.1):
            resp = self.client.get("/api/hero-slider", headers=self.admin_headers())
        self.assertEqual(resp.status_code, 504)
        self.assertEqual(resp.json(), {"code": "Timeout", "message": "Request timed out"})

    def test_fast_request_is_unaffected(self) -> None:
        with mock.patch.object(settings, "REQUEST_TIMEOUT_SEC", 5.0):
            resp = self.client.get("/api/hero-slider", headers=self.admin_headers())
        self.assert_envelope(resp, 200, "OK")


class TestRoleEndpoints(ApiTestCase):
    def test_roles_filtered_by_linked_action(self) -> None:
        root = self.headers_for(self.make_user("root", "SystemAdmin"))
        action = self.client.post(
            "/api/action", json={"name": "publish_content", "description": "Publish pages"}, headers=root
        )
        action_id = self.assert_envelope(action, 201, "Created")["data"]["id"]

        role = self.client.post(
            "/api/role", json={"name": "Publisher", "actions": [action_id]}, headers=root
        )
        created = self.assert_envelope(role, 201, "Created")["data"]
        self.assertEqual([a["name"] for a in created["actions"]], ["publish_content"])

        listing = self.client.get("/api/role", params={"actionId": str(action_id)}, headers=root)
        names = [item["name"] for item in self.assert_envelope(listing, 200, "OK")["data"]["items"]]
        self.assertEqual(names, ["Publisher"])

    def test_unknown_action_id_is_rejected(self) -> None:
        resp = self.client.post(
            "/api/role", json={"name": "Publisher", "actions": [999]}, headers=self.admin_headers()
        )
        self.assert_envelope(resp, 400, "BadRequest")
        self.assertEqual(self.role_count("Publisher"), 0)

    def role_count(self, name: str) -> int:
        return self.session.scalar(select(func.count()).select_from(Role).where(Role.name == name))
