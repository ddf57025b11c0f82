from types import SimpleNamespace

import pytest

from matterdesk.roles import (
    RouteAccess,
    UserRole,
    get_default_route_for_role,
    get_privileged_base_path,
    get_role_label,
    has_privileged_access,
    is_owner_role,
    is_role_allowed,
    matches_role,
    normalize_role,
    resolve_privileged_path,
    resolve_route_access,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("  Admin ", "admin"),
        ("Super Admin", "owner"),
        ("super-administrator", "owner"),
        ("superadmin", "owner"),
        ("Client Portal", "client_portal"),
        (None, ""),
        (UserRole.MEMBER, "member"),
    ],
)
def test_normalize_role(raw, expected):
    assert normalize_role(raw) == expected


def test_normalize_role_passes_other_types_through():
    assert normalize_role(42) == 42


def test_matches_role_accepts_suffixed_variants():
    assert matches_role("admin_finance", "admin")
    assert matches_role("client-portal", UserRole.CLIENT)
    assert matches_role("Owner", "owner")
    assert not matches_role("administrator", "admin")
    assert not matches_role("", "admin")
    assert not matches_role("admin", "")


def test_labels_and_privileges():
    assert get_role_label("super_admin") == "Owner"
    assert get_role_label("member") == "Member"
    assert get_role_label("intern") == ""
    assert has_privileged_access("admin")
    assert has_privileged_access("superadmin")
    assert not has_privileged_access("member")
    assert is_owner_role("Super Administrator")
    assert not is_owner_role("admin")


def test_is_role_allowed_with_empty_allow_list():
    assert is_role_allowed("client", None)
    assert is_role_allowed("client", [])
    assert is_role_allowed("client", ["admin", "client"])
    assert not is_role_allowed("client", ["admin"])


def test_privileged_paths_are_rewritten_for_owners():
    assert get_privileged_base_path("owner") == "/owner"
    assert get_privileged_base_path("admin") == "/admin"
    assert resolve_privileged_path("/admin/invoices", "super_admin") == "/owner/invoices"
    assert resolve_privileged_path("/admin/invoices", "admin") == "/admin/invoices"
    assert resolve_privileged_path("/user/tasks", "owner") == "/user/tasks"
    assert resolve_privileged_path(None, "owner") is None


@pytest.mark.parametrize(
    "role, route",
    [
        ("owner", "/owner/dashboard"),
        ("admin", "/admin/dashboard"),
        ("client", "/client/home"),
        ("member", "/user/dashboard"),
        (None, "/user/dashboard"),
    ],
)
def test_default_route_for_role(role, route):
    assert get_default_route_for_role(role) == route


def test_resolve_route_access():
    assert resolve_route_access(None, ["admin"], loading=True) == RouteAccess.LOADING
    assert resolve_route_access(None, ["admin"]) == RouteAccess.LOGIN
    assert resolve_route_access({"role": "member"}, ["admin"]) == RouteAccess.UNAUTHORIZED
    assert resolve_route_access(SimpleNamespace(role="admin_ops"), ["admin"]) == RouteAccess.ALLOWED
    assert resolve_route_access({"role": "client"}) == RouteAccess.ALLOWED
