"""
User accounts and personal-information (UserInfo) records.

A UserInfo may exist alone or be linked to exactly one User. Creating a user
together with its UserInfo is a single transaction. Identification pairs
(cardType, cardCode) are unique across all records.
"""

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel
from sqlalchemy import and_, or_, select

from civreg.core.errors import DuplicateError
from civreg.core.security import hash_password
from civreg.models import Identification, Role, User, UserInfo
from civreg.schemas.branch import BranchRead
from civreg.schemas.role import RoleRead
from civreg.schemas.user import (
    IdentificationIn,
    UserCreateWithInfo,
    UserInfoCreate,
    UserInfoRead,
    UserRead,
)
from civreg.services import auth as auth_service
from civreg.services.query_filter import FieldMap, ListQuery, Related
from civreg.services.resource import HardDelete, Relation, ResourceService, SoftDelete

logger = logging.getLogger(__name__)

IDENTIFICATION_FIELDS = ("identifications.cardType", "identifications.cardCode")


def _dump(schema: type[BaseModel], obj: Any) -> dict[str, Any]:
    return schema.model_validate(obj).model_dump(by_alias=True, mode="json")


def _dump_user_info(info: UserInfo) -> dict[str, Any]:
    return _dump(UserInfoRead, info)


def _dump_user(user: User) -> dict[str, Any]:
    return _dump(UserRead, user)


def _pairs(identifications: list[IdentificationIn]) -> list[tuple[str, str]]:
    return [(item.card_type, item.card_code) for item in identifications]


def with_person_filters(query: ListQuery) -> ListQuery:
    """Filters shared by the user and user-info lists (field names as in UserInfo)."""
    return (
        query.with_equals("gender", query.param("gender"))
        .with_equals("maritalStatus", query.param("maritalStatus"))
        .with_equals("identifications.cardType", query.param("cardType"))
        .with_equals("identifications.cardCode", query.param("cardCode"))
        .with_text_search(IDENTIFICATION_FIELDS, query.param("idSearch"))
        .with_date_range("createdAt", query.param("startDate"), query.param("endDate"))
    )


class UserInfoService(ResourceService[UserInfo]):
    model = UserInfo
    label = "User info"
    read_schema = UserInfoRead
    delete_policy = SoftDelete("deleted", True)
    relations = {"user": Relation("user", _dump_user)}
    search_fields = ("firstName", "lastName", "phoneNumber", "email")

    def fields(self) -> FieldMap:
        return {
            **super().fields(),
            "firstName": UserInfo.first_name,
            "lastName": UserInfo.last_name,
            "gender": UserInfo.gender,
            "maritalStatus": UserInfo.marital_status,
            "dateOfBirth": UserInfo.date_of_birth,
            "occupation": UserInfo.occupation,
            "phoneNumber": UserInfo.phone_number,
            "email": UserInfo.email,
            "identifications.cardType": Related(
                UserInfo.identifications, Identification.card_type, many=True
            ),
            "identifications.cardCode": Related(
                UserInfo.identifications, Identification.card_code, many=True
            ),
        }

    def build_query(self, params: Mapping[str, str]) -> ListQuery:
        return with_person_filters(super().build_query(params))

    def check_unique(self, payload: BaseModel, exclude_id: int | None = None) -> None:
        email = getattr(payload, "email", None)
        if email and self.exists_where(UserInfo.email == email, exclude_id=exclude_id):
            raise DuplicateError("Email already exists", error={"email": email})
        identifications = getattr(payload, "identifications", None)
        if identifications:
            self.check_identifications(_pairs(identifications), exclude_id)

    def check_identifications(self, pairs: list[tuple[str, str]], exclude_id: int | None) -> None:
        """Raise DuplicateError when another record already holds one of the pairs."""
        stmt = select(Identification.card_type, Identification.card_code).where(
            or_(*(
                and_(Identification.card_type == card_type, Identification.card_code == card_code)
                for card_type, card_code in pairs
            ))
        )
        if exclude_id is not None:
            stmt = stmt.where(Identification.user_info_id != exclude_id)
        with self.store_errors("check"):
            taken = self.session.execute(stmt.limit(1)).first()
        if taken is not None:
            raise DuplicateError(
                "Duplicate identification: this cardType and cardCode already exist",
                error={"cardType": taken.card_type, "cardCode": taken.card_code},
            )

    def values_for_create(self, payload: UserInfoCreate, actor_id: int | None) -> dict[str, Any]:
        values = payload.model_dump(exclude={"identifications"})
        values["phone_number"] = values["phone_number"] or ""
        values["identifications"] = [
            Identification(card_type=card_type, card_code=card_code)
            for card_type, card_code in _pairs(payload.identifications)
        ]
        return values

    def apply_patch(self, obj: UserInfo, patch: BaseModel, actor_id: int | None) -> None:
        values = patch.model_dump(exclude_unset=True, exclude={"identifications"})
        if "phone_number" in values and values["phone_number"] is None:
            values["phone_number"] = ""
        self.assign(obj, values)
        identifications = getattr(patch, "identifications", None)
        if identifications is not None:
            self._replace_identifications(obj, _pairs(identifications))

    def _replace_identifications(self, obj: UserInfo, pairs: list[tuple[str, str]]) -> None:
        # Keep rows whose pair survives so the unique constraint never sees a
        # delete and re-insert of the same pair within one flush.
        wanted = set(pairs)
        kept = [
            ident for ident in obj.identifications if (ident.card_type, ident.card_code) in wanted
        ]
        present = {(ident.card_type, ident.card_code) for ident in kept}
        obj.identifications = kept + [
            Identification(card_type=card_type, card_code=card_code)
            for card_type, card_code in pairs
            if (card_type, card_code) not in present
        ]

    def new_record(self, payload: UserInfoCreate) -> UserInfo:
        """Validate and stage a UserInfo without committing."""
        self.check_unique(payload)
        info = UserInfo(**self.values_for_create(payload, None))
        self.session.add(info)
        return info


class UserService(ResourceService[User]):
    model = User
    label = "User"
    read_schema = UserRead
    delete_policy = HardDelete()
    relations = {
        "roleId": Relation("roles", lambda role: _dump(RoleRead, role), many=True),
        "branchId": Relation("branch", lambda branch: _dump(BranchRead, branch), id_attr="branch_id"),
        "userInfoId": Relation("user_info", _dump_user_info, id_attr="user_info_id"),
    }
    default_populate = ("roleId", "branchId", "userInfoId")
    search_fields = ("firstName", "lastName", "phoneNumber", "email")

    def fields(self) -> FieldMap:
        def info(column: Any) -> Related:
            return Related(User.user_info, column)

        return {
            **super().fields(),
            "username": User.username,
            "fullName": User.full_name,
            "isActive": User.is_active,
            "branchId": User.branch_id,
            "roleId": Related(User.roles, Role.id, many=True),
            "firstName": info(UserInfo.first_name),
            "lastName": info(UserInfo.last_name),
            "phoneNumber": info(UserInfo.phone_number),
            "email": info(UserInfo.email),
            "gender": info(UserInfo.gender),
            "maritalStatus": info(UserInfo.marital_status),
            "identifications.cardType": info(
                Related(UserInfo.identifications, Identification.card_type, many=True)
            ),
            "identifications.cardCode": info(
                Related(UserInfo.identifications, Identification.card_code, many=True)
            ),
        }

    def build_query(self, params: Mapping[str, str]) -> ListQuery:
        query = with_person_filters(super().build_query(params))
        return query.with_int("branchId", query.param("branchId")).with_flag(
            "isActive", query.param("isActive")
        )

    def create(self, payload: BaseModel, actor_id: int | None = None) -> User:
        with self.store_errors("create"):
            user = auth_service.new_user(self.session, payload)
            self.session.commit()
            self.session.refresh(user)
        logger.info("User created", extra={"entity_id": user.id, "actor_id": actor_id})
        return user

    def create_with_info(self, payload: UserCreateWithInfo, actor_id: int | None = None) -> dict[str, Any]:
        """Create the UserInfo and the User referencing it in one transaction, then issue tokens."""
        info_service = UserInfoService(self.session, self.settings)
        with self.store_errors("create"):
            if auth_service.username_taken(self.session, payload.username):
                raise DuplicateError("User already exists")
            info = info_service.new_record(payload.user_info)
            self.session.flush()
            user = auth_service.new_user(self.session, payload, user_info_id=info.id)
            self.session.flush()
            access, _ = auth_service.issue_tokens(self.session, user, self.settings)
            self.session.commit()
            self.session.refresh(user)
        logger.info(
            "User created with user info",
            extra={"entity_id": user.id, "user_info_id": info.id, "actor_id": actor_id},
        )
        return {"user": self.serialize(user, ("roleId", "userInfoId")), "token": access}

    def apply_patch(self, obj: User, patch: BaseModel, actor_id: int | None) -> None:
        values = patch.model_dump(exclude_unset=True)
        role_ids = values.pop("role_id", None)
        password = values.pop("password", None)
        if "branch_id" in values:
            auth_service.check_branch(self.session, values["branch_id"])
        self.assign(obj, values)
        if role_ids is not None:
            obj.roles = auth_service.resolve_roles(self.session, role_ids)
        if password is not None:
            obj.password_hash = hash_password(password)
