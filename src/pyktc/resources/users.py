"""User directory resource."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, ClassVar

from pydantic import BaseModel

from pyktc.filters import UserFilters, contains_text, is_constrained, yes_no_matches
from pyktc.models.common import MutationKind, StatusChange, utcnow
from pyktc.models.station import AccountStatus, PasswordReset
from pyktc.models.user import User, UserForm, UserRole, UserStats, UserUpdate
from pyktc.resources._base import Resource, Route, unique_id
from pyktc.validation import missing_fields, password_feedback


class UsersResource(Resource[User, UserFilters, UserStats]):
    name = "users"
    label = "user"
    error_code = "USER"
    fetch_error_code = "FETCH_USERS_ERROR"

    entity_type = User
    filters_type = UserFilters
    stats_type = UserStats

    list_route = Route("GET", "/user/list")
    routes: ClassVar = {
        MutationKind.CREATE: Route("POST", "/user/adduser"),
        MutationKind.UPDATE: Route("PUT", "/users/{id}/update"),
        MutationKind.DELETE: Route("DELETE", "/users/{id}/delete"),
        MutationKind.STATUS_CHANGE: Route("PUT", "/users/{id}/update"),
        MutationKind.RESET_PASSWORD: Route("POST", "/users/{id}/reset-password"),
    }
    payload_types: ClassVar = {
        MutationKind.CREATE: UserForm,
        MutationKind.UPDATE: UserUpdate,
        MutationKind.STATUS_CHANGE: StatusChange,
        MutationKind.RESET_PASSWORD: PasswordReset,
    }

    def matches(self, entity: User, filters: UserFilters) -> bool:
        if is_constrained(filters.status) and entity.status.value != filters.status.upper():
            return False
        if is_constrained(filters.role) and entity.role.value != filters.role.casefold():
            return False
        if is_constrained(filters.assignment_status) and not yes_no_matches(
            "YES" if filters.assignment_status.upper() == "ASSIGNED" else "NO", entity.is_assigned
        ):
            return False
        if is_constrained(filters.needs_password_reset) and not yes_no_matches(
            filters.needs_password_reset, entity.must_change_password
        ):
            return False
        if is_constrained(filters.search, free_text=True) and not contains_text(
            filters.search, entity.username, entity.email, entity.full_name, entity.phone
        ):
            return False
        return True

    def validate(self, kind: MutationKind, form: BaseModel | None) -> dict[str, str]:
        if isinstance(form, UserForm):
            errors = missing_fields(form, "username", "email", "password", "phone")
            if "password" not in errors:
                feedback = password_feedback(form.password)
                if feedback:
                    errors["password"] = "; ".join(feedback)
            return errors
        if isinstance(form, PasswordReset):
            reset_errors: dict[str, str] = {}
            feedback = password_feedback(form.new_password)
            if feedback:
                reset_errors["new_password"] = "; ".join(feedback)
            if form.new_password != form.confirm_password:
                reset_errors["confirm_password"] = "New password and confirmation do not match"
            return reset_errors
        if isinstance(form, StatusChange) and AccountStatus(form.status) is AccountStatus.UNKNOWN:
            return {"status": f"Unknown account status: {form.status}"}
        return {}

    def request_body(
        self,
        kind: MutationKind,
        form: BaseModel | None,
        target_id: str | None,
        actor: str,
    ) -> dict[str, Any] | None:
        if isinstance(form, UserForm):
            # The backend takes the create form exactly as entered.
            return form.to_wire()
        if isinstance(form, UserUpdate):
            return {**form.to_wire(), "updatedBy": actor}
        if isinstance(form, StatusChange):
            body: dict[str, Any] = {"status": AccountStatus(form.status).value, "updatedBy": actor}
            if form.reason:
                body["reason"] = form.reason
            return body
        if isinstance(form, PasswordReset):
            return {**form.to_wire(), "userId": target_id, "requestedBy": actor}
        return None

    def build_created(self, form: UserForm, existing: Sequence[User], actor: str) -> User:
        first_name, _, rest = form.username.partition(" ")
        first_name = first_name or form.username
        last_name = rest or "User"
        return User(
            id=unique_id("user", (u.id for u in existing)),
            username=form.username,
            email=form.email,
            phone=form.phone,
            role=UserRole(form.role),
            status=AccountStatus.ACTIVE if form.is_active else AccountStatus.INACTIVE,
            first_name=first_name,
            last_name=last_name,
            full_name=f"{first_name} {last_name}",
            password_changed=True,
            account_locked=not form.is_non_locked,
            created_by=actor,
            created_at=utcnow(),
        )

    def apply_update(self, entity: User, form: UserUpdate, actor: str) -> User:
        changes = form.model_dump(exclude_none=True, exclude={"raw"})
        if "role" in changes:
            changes["role"] = UserRole(changes["role"])
        first = changes.get("first_name", entity.first_name)
        last = changes.get("last_name", entity.last_name)
        if "first_name" in changes or "last_name" in changes:
            changes["full_name"] = f"{first} {last}".strip()
        return entity.model_copy(update={**changes, **_modified(actor)})

    def apply_status(self, entity: User, change: StatusChange, actor: str) -> User:
        return entity.model_copy(update={"status": AccountStatus(change.status), **_modified(actor)})

    def apply_password_reset(self, entity: User, form: PasswordReset, actor: str) -> User:
        return entity.model_copy(
            update={
                "password_changed": True,
                "must_change_password": form.must_change_password,
                **_modified(actor),
            }
        )


def _modified(actor: str) -> dict[str, Any]:
    return {"last_modified_by": actor, "last_modified_at": utcnow()}
