from __future__ import annotations

import pytest

from app.core.permissions import ALL_PERMISSIONS, Permission, to_permission
from app.core.route_permissions import (
    API_PERMISSIONS,
    ROUTE_PERMISSIONS,
    RoutePattern,
    RoutePermissionTable,
    RouteRequirement,
    Wildcard,
    get_required_permission,
)


def test_exact_key_wins_over_earlier_wildcard_pattern() -> None:
    table = RoutePermissionTable({
        "GET /api/items/[id]": "office:read",
        "GET /api/items/special": "office:update",
    })

    assert table.lookup("GET", "/api/items/special").requirement.spec == "office:update"

    match = table.lookup("GET", "/api/items/42")
    assert match.requirement.spec == "office:read"
    assert match.params == {"id": "42"}


def test_first_matching_pattern_in_declaration_order_wins() -> None:
    table = RoutePermissionTable({
        "GET /api/a/[x]/b": "office:read",
        "GET /api/a/[y]/[z]": "office:update",
    })

    assert table.lookup("GET", "/api/a/1/b").requirement.spec == "office:read"
    assert table.lookup("GET", "/api/a/1/c").requirement.spec == "office:update"


def test_lookup_ignores_query_string_trailing_slash_and_method_case() -> None:
    match = ROUTE_PERMISSIONS.lookup("get", "/api/office/abc/availability/?date=2025-01-06")
    assert match is not None
    assert match.requirement.spec == "office:read"
    assert match.params == {"officeId": "abc"}


def test_wildcard_matches_exactly_one_segment() -> None:
    assert ROUTE_PERMISSIONS.lookup("GET", "/api/office/abc/def/availability") is None
    assert ROUTE_PERMISSIONS.lookup("GET", "/api/office//availability") is None


def test_unknown_route_and_unknown_method_have_no_match() -> None:
    assert ROUTE_PERMISSIONS.lookup("GET", "/api/does-not-exist") is None
    assert ROUTE_PERMISSIONS.lookup("TRACE", "/api/permission") is None
    assert get_required_permission("GET", "/api/does-not-exist") is None


def test_get_required_permission_resolves_concrete_paths() -> None:
    assert get_required_permission("PUT", "/api/office/7/availability") == "office:configure"
    assert get_required_permission("POST", "/api/role/9/permissions/assign-full") == "role:assign-permissions"
    assert get_required_permission("GET", "/api/office") == ["office:read", "office:manage"]


def test_null_spec_is_public_route() -> None:
    match = ROUTE_PERMISSIONS.lookup("GET", "/api/guest/data")
    assert match.requirement.public
    assert match.requirement.is_satisfied_by(frozenset())


def test_list_spec_is_satisfied_by_any_member() -> None:
    requirement = RouteRequirement.from_spec(["office:read", "office:manage"])

    assert requirement.is_satisfied_by(frozenset({Permission.OFFICE_MANAGE}))
    assert requirement.is_satisfied_by(frozenset({Permission.OFFICE_READ, Permission.USER_READ}))
    assert not requirement.is_satisfied_by(frozenset({Permission.USER_READ}))
    assert not requirement.is_satisfied_by(frozenset())


def test_empty_permission_list_is_rejected() -> None:
    with pytest.raises(ValueError):
        RouteRequirement.from_spec([])


def test_table_rejects_names_outside_catalog() -> None:
    with pytest.raises(ValueError, match="Unknown permission 'office:teleport'"):
        RoutePermissionTable({"GET /api/x": "office:teleport"})


def test_pattern_parse_builds_segment_ast() -> None:
    pattern = RoutePattern.parse("get /api/role/[roleId]/permissions")

    assert pattern.method == "GET"
    assert pattern.has_wildcards
    assert pattern.segments[2] == Wildcard("roleId")
    assert pattern.match(("api", "role", "r1", "permissions")) == {"roleId": "r1"}
    assert pattern.match(("api", "role", "r1")) is None


def test_every_table_entry_is_loaded_and_in_catalog() -> None:
    assert len(ROUTE_PERMISSIONS) == len(API_PERMISSIONS)
    assert ROUTE_PERMISSIONS.permissions() <= ALL_PERMISSIONS


def test_to_permission_rejects_unknown_names() -> None:
    assert to_permission(" office:read ") is Permission.OFFICE_READ
    with pytest.raises(ValueError):
        to_permission("nope:nope")
