from unittest.mock import patch

import pytest

from workdesk.database.models.user import User

MANAGER_PERMS = ["user_manage_permissions", "role_manage_permissions"]


@pytest.fixture
def target(make_user):
    return make_user(type="member", id="member-1", created_by="user-1", permissions=["dashboard_view"])


@pytest.fixture
def as_company(client, login, make_user, target):
    """Signed-in company owner; find_by_id answers for both the owner and `target`."""
    owner = make_user(type="company", id="user-1", permissions=MANAGER_PERMS)
    headers = login(owner)
    users = {"user-1": owner, "member-1": target}
    with patch.object(User, "find_by_id", side_effect=lambda user_id, include_deleted=False: users.get(user_id)):
        yield headers


class TestCatalogue:

    def test_lists_permissions_and_roles(self, client, login, make_user):
        headers = login(make_user())
        results = client.get("/api/permissions", headers=headers).get_json()["data"]["results"]
        assert "invoice_view_any" in results["permissions"]
        assert results["roles"] == ["company", "manager", "member", "client"]


class TestUserPermissions:

    def test_get(self, client, as_company):
        with patch("workdesk.routes.permissions.UserPermission.get_user_permissions", return_value=["note_view_any"]):
            response = client.get("/api/users/member-1/permissions", headers=as_company)
        assert response.status_code == 200
        results = response.get_json()["data"]["results"]
        assert results["direct_permissions"] == ["note_view_any"]
        assert results["permissions"] == ["dashboard_view"]

    def test_other_company_user_is_hidden(self, client, as_company, target):
        target.created_by = "someone-else"
        response = client.get("/api/users/member-1/permissions", headers=as_company)
        assert response.status_code == 404

    def test_put_replaces_direct_grants(self, client, as_company):
        with patch("workdesk.routes.permissions.UserPermission.sync_permissions", return_value=2) as sync, \
                patch("workdesk.routes.permissions.UserPermission.get_user_permissions", return_value=[]):
            response = client.put("/api/users/member-1/permissions", headers=as_company,
                                  json={"permissions": ["note_view_any", "task_view_any"]})
        assert response.status_code == 200
        sync.assert_called_once_with("member-1", ["note_view_any", "task_view_any"], "user-1")

    def test_put_rejects_unknown_permission(self, client, as_company):
        response = client.put("/api/users/member-1/permissions", headers=as_company,
                              json={"permissions": ["launch_rockets"]})
        assert response.status_code == 400

    def test_grant_duplicate_is_conflict(self, client, as_company):
        with patch("workdesk.routes.permissions.UserPermission.grant_permission",
                   side_effect=ValueError("Permission already granted")):
            response = client.post("/api/users/member-1/permissions/grant", headers=as_company,
                                   json={"permission": "note_view_any"})
        assert response.status_code == 409

    def test_revoke_not_granted(self, client, as_company):
        with patch("workdesk.routes.permissions.UserPermission.revoke_permission", return_value=False):
            response = client.post("/api/users/member-1/permissions/revoke", headers=as_company,
                                   json={"permission": "note_view_any"})
        assert response.status_code == 404

    def test_requires_manage_permission(self, client, login, make_user):
        headers = login(make_user(permissions=["dashboard_view"]))
        assert client.get("/api/users/member-1/permissions", headers=headers).status_code == 403


class TestRolePermissions:

    def test_get_role(self, client, as_company):
        with patch("workdesk.routes.permissions.RolePermission.get_role_permissions", return_value=["dashboard_view"]):
            response = client.get("/api/roles/member/permissions", headers=as_company)
        assert response.status_code == 200
        assert response.get_json()["data"]["results"] == {"role": "member", "permissions": ["dashboard_view"]}

    def test_unknown_role(self, client, as_company):
        assert client.get("/api/roles/pirate/permissions", headers=as_company).status_code == 404

    def test_put_role(self, client, login, make_user):
        headers = login(make_user(type="superadmin", id="admin-1", permissions=MANAGER_PERMS))
        with patch("workdesk.routes.permissions.RolePermission.sync_permissions", return_value=1) as sync, \
                patch("workdesk.routes.permissions.RolePermission.get_role_permissions", return_value=["invoice_view_any"]):
            response = client.put("/api/roles/client/permissions", headers=headers,
                                  json={"permissions": ["invoice_view_any"]})
        assert response.status_code == 200
        sync.assert_called_once_with("client", ["invoice_view_any"])

    def test_company_cannot_replace_shared_role(self, client, as_company):
        with patch("workdesk.routes.permissions.RolePermission.sync_permissions") as sync:
            response = client.put("/api/roles/client/permissions", headers=as_company,
                                  json={"permissions": ["invoice_view_any"]})
        assert response.status_code == 403
        sync.assert_not_called()
