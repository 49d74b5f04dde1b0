from __future__ import annotations

import uuid

import pytest

from app.services.permission.permission_service import PermissionService
from tests.factories import make_role, make_user


@pytest.fixture()
def office_reader(db, catalog):
    role = make_role(db, "READER", ["office:read", "profile:read"])
    return make_user(db, "reader", role)


@pytest.fixture()
def office_manager_only(db, catalog):
    role = make_role(db, "OFFICE MANAGERS", ["office:manage"])
    return make_user(db, "om", role)


def test_unknown_user_is_reported_not_raised(db, catalog) -> None:
    result = PermissionService.check_permission(db, uuid.uuid4(), "office:read")
    assert not result.allowed
    assert result.error == "User not found"

    assert PermissionService.check_permission(db, "not-a-uuid", "office:read").error == "User not found"


def test_inactive_user_is_denied(db, catalog) -> None:
    role = make_role(db, "READER", ["office:read"])
    user = make_user(db, "sleepy", role, is_active=False)

    result = PermissionService.check_permission(db, user.id, "office:read")
    assert not result.allowed
    assert result.error == "User is inactive"


def test_user_without_role_is_denied(db, catalog) -> None:
    user = make_user(db, "nobody")
    result = PermissionService.check_permission(db, user.id, "office:read")
    assert result.error == "User has no role assigned"


def test_single_permission_check(db, office_reader) -> None:
    granted = PermissionService.check_permission(db, office_reader.id, "office:read")
    assert granted.allowed
    assert granted.role_name == "READER"

    denied = PermissionService.check_permission(db, office_reader.id, "role:create")
    assert not denied.allowed
    assert denied.error == "Permission 'role:create' required"


def test_any_permission_uses_or_semantics(db, office_reader, office_manager_only) -> None:
    names = ["office:read", "office:manage"]
    assert PermissionService.check_any_permission(db, office_reader.id, names).allowed
    assert PermissionService.check_any_permission(db, office_manager_only.id, names).allowed

    result = PermissionService.check_any_permission(db, office_reader.id, ["role:read", "role:create"])
    assert not result.allowed
    assert result.error == "At least one of these permissions required: role:read, role:create"


def test_all_permissions_reports_first_missing(db, office_reader) -> None:
    assert PermissionService.check_all_permissions(db, office_reader.id, ["office:read", "profile:read"]).allowed

    result = PermissionService.check_all_permissions(db, office_reader.id, ["office:read", "office:manage"])
    assert result.error == "Permission 'office:manage' required"


def test_unknown_permission_name_is_denied(db, office_reader) -> None:
    result = PermissionService.check_permission(db, office_reader.id, "office:teleport")
    assert not result.allowed
    assert "Unknown permission" in result.error


# ============================================================================
# check_action
# ============================================================================

def test_check_action_without_user_is_unauthorized(db, catalog) -> None:
    decision = PermissionService.check_action(None, "GET", "/api/permission")
    assert (decision.allowed, decision.status_code, decision.message) == (False, 401, "Unauthorized")


def test_check_action_public_route_needs_no_user(db, catalog) -> None:
    assert PermissionService.check_action(None, "GET", "/api/guest/data").allowed


def test_check_action_or_list_on_wildcard_route(db, office_manager_only) -> None:
    decision = PermissionService.check_action(office_manager_only, "GET", "/api/office")
    assert decision.allowed

    decision = PermissionService.check_action(office_manager_only, "GET", "/api/office/123/stats")
    assert decision.status_code == 403
    assert decision.message == "Permission 'office:read' required"


def test_check_action_inactive_user_is_forbidden(db, catalog) -> None:
    role = make_role(db, "READER", ["office:read"])
    user = make_user(db, "sleepy", role, is_active=False)

    decision = PermissionService.check_action(user, "GET", "/api/office/1")
    assert decision.status_code == 403
    assert decision.message == "User is inactive"
    assert not decision.allowed


def test_unmatched_route_policy(db, office_reader) -> None:
    assert PermissionService.check_action(office_reader, "GET", "/api/unlisted", "authenticated").allowed
    assert PermissionService.check_action(None, "GET", "/api/unlisted", "authenticated").status_code == 401
    assert PermissionService.check_action(None, "GET", "/api/unlisted", "public").allowed


# ============================================================================
# Pages and menus
# ============================================================================

def test_page_guard_denial_message(db, catalog) -> None:
    role = make_role(db, "customer", ["dashboard:customer"])
    user = make_user(db, "citizen", role)

    assert PermissionService.check_page_permission(user, "").allowed

    result = PermissionService.check_page_permission(user, "applyservice")
    assert not result.allowed
    assert result.error == "Permission required: request:create"
    assert result.permission == "request:create"


def test_unlisted_page_is_allowed(db, office_reader) -> None:
    assert PermissionService.check_page_permission(office_reader, "somewhere/else").allowed


def test_filter_menu_keeps_group_structure(db, catalog) -> None:
    role = make_role(db, "manager", ["dashboard:manager", "office:read"])
    user = make_user(db, "boss", role)

    groups = [
        [
            {"key": "overview", "url": ""},
            {"key": "services", "url": "services"},
        ],
        [
            {"key": "configuration", "url": "configuration/office"},
            {"key": "help", "url": "help"},
            {"key": "roles", "url": "roles", "permission": ["role:read", "office:read"]},
            {"key": "staff", "url": "staff", "permission": "staff:read"},
        ],
    ]

    filtered = PermissionService.filter_menu(db, user.id, user.role_name, groups)

    assert [[i["key"] for i in g] for g in filtered] == [
        ["overview"],
        ["configuration", "help", "roles"],
    ]


def test_filter_menu_is_empty_for_inactive_user(db, catalog) -> None:
    role = make_role(db, "manager", ["dashboard:manager"])
    user = make_user(db, "gone", role, is_active=False)

    groups = PermissionService.default_menu("manager")
    assert PermissionService.filter_menu(db, user.id, "manager", groups) == []
    assert PermissionService.filter_menu(db, uuid.uuid4(), "manager", groups) == []


def test_user_with_permissions(db, office_reader) -> None:
    user, permissions = PermissionService.get_user_with_permissions(db, office_reader.id)
    assert user.id == office_reader.id
    assert {p.value for p in permissions} == {"office:read", "profile:read"}

    missing, none = PermissionService.get_user_with_permissions(db, uuid.uuid4())
    assert missing is None
    assert none == frozenset()


def test_authorize_named_permissions(db, office_reader) -> None:
    assert PermissionService.authorize_permissions(office_reader, "office:read").allowed
    assert PermissionService.authorize_permissions(office_reader, ["role:read", "office:read"]).allowed

    denied = PermissionService.authorize_permissions(office_reader, "role:read")
    assert (denied.status_code, denied.message) == (403, "Permission 'role:read' required")

    assert PermissionService.authorize_permissions(office_reader, None).allowed
    assert PermissionService.authorize_permissions(None, None).status_code == 401
