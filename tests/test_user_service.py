"""Database tests for users, personal information and their uniqueness rules."""

from datetime import date

from sqlalchemy import func, select

from civreg.core.errors import DuplicateError, ValidationError
from civreg.models import Identification, User, UserInfo
from civreg.schemas.user import IdentificationIn, UserCreateWithInfo, UserInfoCreate, UserInfoUpdate
from civreg.services.users import UserInfoService, UserService
from helpers import DatabaseTestCase


def person(first_name: str, *pairs: tuple[str, str], email: str | None = None, gender: str = "F") -> UserInfoCreate:
    return UserInfoCreate(
        first_name=first_name,
        last_name="Sok",
        gender=gender,
        date_of_birth=date(1990, 5, 17),
        marital_status="Single",
        email=email,
        identifications=[IdentificationIn(card_type=t, card_code=c) for t, c in pairs],
    )


class TestUserInfoService(DatabaseTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.service = UserInfoService(self.session)

    def count(self, model: type) -> int:
        return self.session.scalar(select(func.count()).select_from(model))

    def test_identification_pair_is_unique_across_records(self) -> None:
        self.service.create(person("Ann", ("passport", "P100")))
        with self.assertRaises(DuplicateError) as ctx:
            self.service.create(person("Bea", ("passport", "P100")))
        self.assertIn("Duplicate identification", ctx.exception.message)
        self.assertEqual(self.count(UserInfo), 1)

    def test_different_pairs_are_accepted(self) -> None:
        self.service.create(person("Ann", ("passport", "P100")))
        self.service.create(person("Bea", ("passport", "P200")))
        self.service.create(person("Cam", ("national_id", "P100")))
        self.assertEqual(self.count(Identification), 3)

    def test_repeated_pair_in_one_payload_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            person("Ann", ("passport", "P1"), ("passport", "P1"))

    def test_email_is_unique(self) -> None:
        self.service.create(person("Ann", email="ann@example.com"))
        with self.assertRaises(DuplicateError):
            self.service.create(person("Bea", email="ann@example.com"))

    def test_update_may_keep_own_identification(self) -> None:
        info = self.service.create(person("Ann", ("passport", "P100")))
        patch = UserInfoUpdate(
            occupation="Teacher",
            identifications=[
                IdentificationIn(card_type="passport", card_code="P100"),
                IdentificationIn(card_type="birth_cert", card_code="B7"),
            ],
        )
        updated = self.service.update(info.id, patch)
        self.assertEqual(updated.occupation, "Teacher")
        self.assertEqual(
            {(i.card_type, i.card_code) for i in updated.identifications},
            {("passport", "P100"), ("birth_cert", "B7")},
        )

    def test_update_cannot_take_another_records_identification(self) -> None:
        self.service.create(person("Ann", ("passport", "P100")))
        other = self.service.create(person("Bea", ("passport", "P200")))
        patch = UserInfoUpdate(identifications=[IdentificationIn(card_type="passport", card_code="P100")])
        with self.assertRaises(DuplicateError):
            self.service.update(other.id, patch)

    def test_soft_deleted_records_are_hidden(self) -> None:
        info = self.service.create(person("Ann"))
        self.service.delete(info.id)
        page = self.service.list(self.service.build_query({}))
        self.assertEqual(page.total, 0)
        self.assertTrue(self.session.get(UserInfo, info.id).deleted)

    def test_sort_direction(self) -> None:
        for name in ("Ann", "Bea", "Cam"):
            self.service.create(person(name))

        def names(sort: str | None) -> list[str]:
            params = {"sort": sort} if sort else {}
            return [item["firstName"] for item in self.service.list(self.service.build_query(params)).items]

        self.assertEqual(names("createdAt:asc"), ["Ann", "Bea", "Cam"])
        self.assertEqual(names("createdAt:desc"), ["Cam", "Bea", "Ann"])
        self.assertEqual(names(None), ["Cam", "Bea", "Ann"])

    def test_filters_and_search(self) -> None:
        self.service.create(person("Ann", ("passport", "P100"), gender="F"))
        self.service.create(person("Bob", ("national_id", "N555"), gender="M"))

        def names(params: dict[str, str]) -> list[str]:
            return sorted(item["firstName"] for item in self.service.list(self.service.build_query(params)).items)

        self.assertEqual(names({"gender": "M"}), ["Bob"])
        self.assertEqual(names({"search": "an"}), ["Ann"])
        self.assertEqual(names({"cardType": "passport"}), ["Ann"])
        self.assertEqual(names({"idSearch": "n55"}), ["Bob"])
        self.assertEqual(names({"gender": "", "search": ""}), ["Ann", "Bob"])

    def test_select_keeps_requested_fields_and_id(self) -> None:
        self.service.create(person("Ann"))
        item = self.service.list(self.service.build_query({"select": "firstName"})).items[0]
        self.assertEqual(set(item), {"id", "firstName"})

    def test_pagination(self) -> None:
        for name in ("Ann", "Bea", "Cam"):
            self.service.create(person(name))
        page = self.service.list(self.service.build_query({"page": "2", "limit": "2"}))
        self.assertEqual(page.total, 3)
        self.assertEqual(len(page.items), 1)
        self.assertEqual(page.as_dict()["totalPages"], 2)


class TestCreateWithInfo(DatabaseTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.service = UserService(self.session)

    def payload(self, username: str, *pairs: tuple[str, str]) -> UserCreateWithInfo:
        return UserCreateWithInfo(
            username=username,
            password="secret12",
            full_name="Ann Sok",
            role_id=[self.role("Staff").id],
            user_info=person("Ann", *pairs),
        )

    def count(self, model: type) -> int:
        return self.session.scalar(select(func.count()).select_from(model))

    def test_creates_linked_user_and_info(self) -> None:
        data = self.service.create_with_info(self.payload("ann_sok", ("passport", "P1")))
        self.assertTrue(data["token"])
        self.assertEqual(data["user"]["username"], "ann_sok")
        self.assertEqual(data["user"]["userInfoId"]["firstName"], "Ann")
        self.assertEqual([role["name"] for role in data["user"]["roleId"]], ["Staff"])
        user = self.session.scalars(select(User).where(User.username == "ann_sok")).one()
        self.assertIsNotNone(user.user_info_id)

    def test_duplicate_identification_writes_nothing(self) -> None:
        self.service.create_with_info(self.payload("ann_sok", ("passport", "P1")))
        with self.assertRaises(DuplicateError):
            self.service.create_with_info(self.payload("bea_sok", ("passport", "P1")))
        self.assertEqual(self.count(User), 1)
        self.assertEqual(self.count(UserInfo), 1)

    def test_duplicate_username_writes_no_info(self) -> None:
        self.service.create_with_info(self.payload("ann_sok", ("passport", "P1")))
        with self.assertRaises(DuplicateError):
            self.service.create_with_info(self.payload("ann_sok", ("passport", "P2")))
        self.assertEqual(self.count(UserInfo), 1)

    def test_unknown_role_writes_nothing(self) -> None:
        payload = self.payload("ann_sok", ("passport", "P1"))
        payload.role_id = [9999]
        with self.assertRaises(ValidationError):
            self.service.create_with_info(payload)
        self.assertEqual(self.count(User), 0)
        self.assertEqual(self.count(UserInfo), 0)
