from __future__ import annotations

import pytest

from app.api.dependencies import create_access_token
from tests.factories import PASSWORD, auth_headers, make_office, make_role, make_user


@pytest.fixture()
def office(db, catalog):
    return make_office(db, "North")


@pytest.fixture()
def admin(db, catalog):
    role = make_role(db, "admin", [name for name in catalog])
    return make_user(db, "root", role)


@pytest.fixture()
def manager(db, office, catalog):
    role = make_role(db, "manager", [
        "profile:read", "office:read", "office:configure", "role:create", "role:read", "dashboard:manager",
    ])
    return make_user(db, "boss", role, office=office)


# ============================================================================
# Authentication
# ============================================================================

def test_register_then_login(client, catalog) -> None:
    response = client.post("/api/auth/register", json={
        "username": "Citizen",
        "password": PASSWORD,
        "fullName": "Jane Citizen",
    })
    assert response.status_code == 201
    assert response.json()["details"]["role"] == "customer"

    response = client.post("/api/auth/login", json={"username": "citizen", "password": PASSWORD})
    assert response.status_code == 200
    token = response.json()["access_token"]

    me = client.get("/api/user/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["username"] == "citizen"
    assert "dashboard:customer" in me.json()["permissions"]


def test_register_duplicate_username(client, catalog) -> None:
    body = {"username": "citizen", "password": PASSWORD}
    assert client.post("/api/auth/register", json=body).status_code == 201
    response = client.post("/api/auth/register", json=body)
    assert response.status_code == 400
    assert response.json()["detail"] == "Username already registered"


def test_login_with_wrong_password(client, admin) -> None:
    response = client.post("/api/auth/login", json={"username": "root", "password": "nope"})
    assert response.status_code == 401


def test_validation_errors_are_bad_requests(client, catalog) -> None:
    response = client.post("/api/auth/register", json={"username": "citizen", "password": "short"})
    assert response.status_code == 400


# ============================================================================
# Route guard
# ============================================================================

def test_guarded_route_without_token_is_unauthorized(client, catalog) -> None:
    response = client.get("/api/permission")
    assert response.status_code == 401
    assert response.json()["detail"] == "Unauthorized"


def test_invalid_token_is_unauthorized(client, catalog) -> None:
    response = client.get("/api/permission", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_token_for_deleted_user_is_unauthorized(client, catalog) -> None:
    token = create_access_token({"sub": "00000000-0000-0000-0000-000000000000"})
    response = client.get("/api/permission", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["detail"] == "User not found"


def test_missing_permission_is_forbidden_with_name(client, manager) -> None:
    response = client.get("/api/permission", headers=auth_headers(manager))
    assert response.status_code == 403
    assert response.json()["detail"] == "Permission 'permission:read' required"


def test_inactive_user_is_forbidden(client, db, catalog) -> None:
    user = make_user(db, "sleepy", make_role(db, "READER", ["profile:read"]), is_active=False)
    response = client.get("/api/user/me", headers=auth_headers(user))
    assert response.status_code == 403
    assert response.json()["detail"] == "User is inactive"


def test_admin_lists_permission_catalog(client, admin, catalog) -> None:
    response = client.get("/api/permission", headers=auth_headers(admin))
    assert response.status_code == 200
    assert response.json()["total"] == len(catalog)


# ============================================================================
# User access
# ============================================================================

def test_check_page(client, manager) -> None:
    allowed = client.get("/api/user/permissions/check-page", params={"path": "configuration/avaibility"},
                         headers=auth_headers(manager))
    assert allowed.json()["allowed"] is True

    denied = client.get("/api/user/permissions/check-page", params={"path": "staff/add"},
                        headers=auth_headers(manager))
    assert denied.status_code == 200
    assert denied.json()["allowed"] is False
    assert denied.json()["error"] == "Permission required: staff:create"


def test_menu_is_filtered(client, manager) -> None:
    response = client.get("/api/user/menu", headers=auth_headers(manager))
    assert response.status_code == 200
    keys = [item["key"] for group in response.json()["menu"] for item in group]
    assert keys == ["overview", "configuration", "availability"]


def test_check_action_endpoint(client, manager) -> None:
    response = client.post("/api/user/check-action", json={"method": "DELETE", "path": "/api/role/42"},
                           headers=auth_headers(manager))
    assert response.status_code == 200
    body = response.json()
    assert body["allowed"] is False
    assert body["statusCode"] == 403
    assert body["required"] == "role:delete"


# ============================================================================
# Roles
# ============================================================================

def test_manager_creates_custom_role(client, manager, office, catalog) -> None:
    response = client.post("/api/customRole", headers=auth_headers(manager), json={
        "name": "clerk",
        "officeId": str(office.id),
        "permissionIds": [str(catalog["request:read"].id)],
    })
    assert response.status_code == 201
    assert response.json()["role"]["name"] == "CLERK"

    listing = client.get("/api/customRole", headers=auth_headers(manager))
    assert [r["name"] for r in listing.json()["roles"]] == ["CLERK"]


def test_manager_reserved_role_is_forbidden(client, manager, office) -> None:
    response = client.post("/api/customRole", headers=auth_headers(manager),
                           json={"name": "Manager", "officeId": str(office.id)})
    assert response.status_code == 403
    assert response.json()["detail"] == "Manager and Admin roles can only be created by administrators"


def test_admin_role_assignment_is_widened(client, db, admin, catalog) -> None:
    response = client.post(
        f"/api/role/{admin.role_id}/permissions",
        headers=auth_headers(admin),
        json={"permissionIds": [str(catalog["office:read"].id)]},
    )
    assert response.status_code == 200
    assert response.json()["assignedCount"] == len(catalog)

    detail = client.get(f"/api/role/{admin.role_id}/permissions", headers=auth_headers(admin)).json()
    assert detail["hasFullPermissions"] is True


def test_assign_full_and_rename(client, db, admin, office) -> None:
    clerk = make_role(db, "CLERK", office=office)
    staff = make_role(db, "staff")

    response = client.post(f"/api/role/{staff.id}/permissions/assign-full", headers=auth_headers(admin))
    assert response.status_code == 200
    assert response.json()["assignedCount"] > 0

    response = client.patch(f"/api/role/{clerk.id}", headers=auth_headers(admin), json={"name": "teller"})
    assert response.status_code == 200
    assert response.json()["role"]["name"] == "TELLER"


# ============================================================================
# Availability
# ============================================================================

def test_availability_config_and_slots(client, manager, office) -> None:
    headers = auth_headers(manager)

    config = client.get(f"/api/office/{office.id}/availability", headers=headers)
    assert config.status_code == 200
    assert config.json()["config"]["slotDuration"] == 30

    slots = client.get(f"/api/office/{office.id}/availability", params={"date": "2025-01-06"}, headers=headers)
    assert len(slots.json()["availableSlots"]) == 16

    starts = client.get(f"/api/office/{office.id}/availability/slots", params={"date": "2025-01-06"},
                        headers=headers)
    assert starts.json()["totalSlots"] == 16


def test_manager_updates_own_office_availability(client, manager, office) -> None:
    response = client.put(f"/api/office/{office.id}/availability", headers=auth_headers(manager), json={
        "slotDuration": 60,
        "dateOverrides": {"2025-01-06": {"start": "10:00", "end": "12:00", "available": True}},
    })
    assert response.status_code == 200
    assert response.json()["config"]["slotDuration"] == 60

    slots = client.get(f"/api/office/{office.id}/availability", params={"date": "2025-01-06"},
                       headers=auth_headers(manager))
    assert [s["start"] for s in slots.json()["availableSlots"]] == ["10:00", "11:00"]


def test_manager_cannot_update_other_office(client, db, manager, catalog) -> None:
    elsewhere = make_office(db, "South")
    response = client.put(f"/api/office/{elsewhere.id}/availability", headers=auth_headers(manager),
                          json={"slotDuration": 60})
    assert response.status_code == 403


def test_availability_update_rejects_bad_time(client, manager, office) -> None:
    response = client.put(f"/api/office/{office.id}/availability", headers=auth_headers(manager), json={
        "defaultSchedule": {"1": {"start": "9am", "end": "17:00", "available": True}},
    })
    assert response.status_code == 400


def test_health(client) -> None:
    assert client.get("/health").json()["status"] == "healthy"


def test_manager_cannot_escalate_through_permission_assignment(client, db, office, catalog) -> None:
    role = make_role(db, "manager", ["role:assign-permissions", "dashboard:manager"])
    boss = make_user(db, "assigner", role, office=office)
    elsewhere = make_role(db, "CLERK", ["request:read"], office=make_office(db, "Other"))

    response = client.post(f"/api/role/{elsewhere.id}/permissions", headers=auth_headers(boss),
                           json={"permissionIds": []})
    assert response.status_code == 403

    every_id = [str(p.id) for p in catalog.values()]
    response = client.post(f"/api/role/{role.id}/permissions", headers=auth_headers(boss),
                           json={"permissionIds": every_id})
    assert response.status_code == 403

    response = client.post(f"/api/role/{role.id}/permissions/assign-full", headers=auth_headers(boss))
    assert response.status_code == 403


def test_client_menu_is_filtered_for_user(client, manager) -> None:
    response = client.post("/api/user/menu/filter", headers=auth_headers(manager), json={"menu": [
        [{"key": "availability", "url": "configuration/avaibility"}, {"key": "help", "url": "help"}],
        [{"key": "hiring", "url": "staff/add", "permission": "staff:create"}],
    ]})

    assert response.status_code == 200
    menu = response.json()["menu"]
    assert [[item["key"] for item in group] for group in menu] == [["availability", "help"], []]


def test_client_menu_filter_requires_login(client, catalog) -> None:
    response = client.post("/api/user/menu/filter", json={"menu": []})
    assert response.status_code == 401
