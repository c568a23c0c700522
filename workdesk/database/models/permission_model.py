from .base_model import BaseModel
from workdesk.database.db_manager import DBManager
from typing import List


def _check_known(permission: str):
    from workdesk.utils.permissions import PERMISSIONS
    if permission not in PERMISSIONS:
        raise ValueError(f"Invalid permission: {permission}")


class UserPermission(BaseModel):
    _table_name = 'user_permissions'

    @classmethod
    def grant_permission(cls, user_id: str, permission: str, granted_by: str) -> str:
        """Grant a permission to a user"""
        _check_known(permission)
        if permission in cls.get_user_permissions(user_id):
            raise ValueError(f"Permission already granted: {permission}")
        return cls.create({
            'user_id': user_id,
            'permission': permission,
            'granted_by': granted_by
        })

    @classmethod
    def revoke_permission(cls, user_id: str, permission: str) -> bool:
        """Revoke a permission from a user (soft delete)"""
        query = f"""
            UPDATE {cls._table_name}
            SET deleted_at = NOW()
            WHERE user_id = %s AND permission = %s AND deleted_at IS NULL
        """
        return DBManager.execute_write_query(query, (user_id, permission)) > 0

    @classmethod
    def get_user_permissions(cls, user_id: str) -> List[str]:
        query = f"""
            SELECT permission
            FROM {cls._table_name}
            WHERE user_id = %s AND deleted_at IS NULL
        """
        rows = DBManager.execute_query(query, (user_id,), fetch='all')
        return [row['permission'] for row in rows] if rows else []

    @classmethod
    def sync_permissions(cls, user_id: str, permissions: List[str], granted_by: str) -> int:
        """
        Replace all user permissions with a new set.
        Every name is checked before anything is written.
        """
        for permission in permissions:
            _check_known(permission)

        query = f"""
            UPDATE {cls._table_name}
            SET deleted_at = NOW()
            WHERE user_id = %s AND deleted_at IS NULL
        """
        DBManager.execute_write_query(query, (user_id,))

        for permission in dict.fromkeys(permissions):
            cls.create({'user_id': user_id, 'permission': permission, 'granted_by': granted_by})
        return len(dict.fromkeys(permissions))


class RolePermission(BaseModel):
    _table_name = 'role_permissions'
    _soft_delete = False

    @classmethod
    def get_role_permissions(cls, role: str) -> List[str]:
        query = f"SELECT permission FROM {cls._table_name} WHERE role = %s ORDER BY permission"
        rows = DBManager.execute_query(query, (role,), fetch='all')
        return [row['permission'] for row in rows] if rows else []

    @classmethod
    def sync_permissions(cls, role: str, permissions: List[str]) -> int:
        for permission in permissions:
            _check_known(permission)

        DBManager.execute_write_query(f"DELETE FROM {cls._table_name} WHERE role = %s", (role,))
        unique = list(dict.fromkeys(permissions))
        if unique:
            from uuid6 import uuid7
            query = f"INSERT INTO {cls._table_name} (id, role, permission) VALUES (%s, %s, %s)"
            DBManager.execute_bulk_write_query(query, [(str(uuid7()), role, p) for p in unique])
        return len(unique)
