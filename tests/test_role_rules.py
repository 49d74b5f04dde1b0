from __future__ import annotations

from app.core.page_permissions import get_page_permission, permissions_for_role_type
from app.core.permissions import ALL_PERMISSIONS, Permission
from app.core.role_rules import (
    expected_permissions,
    is_admin_role,
    is_manager_role,
    is_reserved_role_name,
    role_type,
    widen_if_admin,
)


def test_admin_role_is_widened_to_whole_catalog() -> None:
    final = widen_if_admin("Administrator", ["b"], ["a", "b", "c"])
    assert final == ["a", "b", "c"]


def test_admin_role_keeps_ids_outside_catalog_listing() -> None:
    assert widen_if_admin("ADMIN", ["z"], ["a"]) == ["a", "z"]


def test_other_roles_keep_exact_request_without_duplicates() -> None:
    assert widen_if_admin("CLERK", ["b", "a", "b"], ["a", "b", "c"]) == ["b", "a"]
    assert widen_if_admin(None, [], ["a"]) == []


def test_role_name_classification_is_case_insensitive() -> None:
    assert is_admin_role(" Admin ")
    assert is_manager_role("OFFICE_MANAGER")
    assert is_reserved_role_name("Office Manager")
    assert is_reserved_role_name("officemanager")
    assert not is_reserved_role_name("CLERK")


def test_role_type_maps_custom_roles_to_staff() -> None:
    assert role_type("administrator") == "admin"
    assert role_type("manager") == "manager"
    assert role_type("Customer") == "customer"
    assert role_type("CLERK") == "staff"
    assert role_type(None) is None


def test_expected_permissions_follow_enforced_tables() -> None:
    assert expected_permissions("admin") == ALL_PERMISSIONS
    assert expected_permissions("office_manager") == permissions_for_role_type("manager")
    assert Permission.OFFICE_CONFIGURE in expected_permissions("manager")
    assert Permission.DASHBOARD_CUSTOMER in expected_permissions("customer")
    assert expected_permissions("CLERK") == frozenset()


def test_page_lookup_prefers_exact_then_bracket_patterns() -> None:
    assert get_page_permission("admin", "/roles/create/") == "role:create"
    assert get_page_permission("admin", "roles/123/edit") == "role:update"
    assert get_page_permission("manager", "services/abc") == "service:read"
    assert get_page_permission("manager", "services/add") == "service:create"
    assert get_page_permission("customer", "unlisted/page") is None
