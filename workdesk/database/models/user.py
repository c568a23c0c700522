from werkzeug.security import generate_password_hash, check_password_hash
from .base_model import BaseModel
from workdesk.database.db_manager import DBManager

USER_TYPES = ('superadmin', 'company', 'manager', 'member', 'client')


class User(BaseModel):
    _table_name = 'users'
    _allowed_fields = {'name', 'email', 'password_hash', 'type', 'created_by', 'lang', 'is_active'}

    def __init__(self, id, name, email, password_hash, type='member', created_by=None, lang='en', **kwargs):
        self.id = id
        self.name = name
        self.email = email
        self.password_hash = password_hash
        self.type = type
        self.created_by = created_by
        self.lang = lang
        # Absorb any extra columns from the row
        super().__init__(**kwargs)

    @property
    def is_superadmin(self):
        return self.type == 'superadmin'

    @property
    def company_id(self):
        """Id of the company account that owns this user's settings."""
        if self.type in ('superadmin', 'company'):
            return self.id
        return self.created_by

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'type': self.type,
            'lang': self.lang,
            'created_by': self.created_by,
        }

    @classmethod
    def create(cls, data):
        if data.get('type', 'member') not in USER_TYPES:
            raise ValueError(f"Invalid user type: {data.get('type')}")
        row = {
            'name': data['name'],
            'email': data['email'],
            'password_hash': generate_password_hash(data['password'], method='scrypt'),
            'type': data.get('type', 'member'),
            'created_by': data.get('created_by'),
            'lang': data.get('lang', 'en'),
        }
        return super().create(row)

    @classmethod
    def find_by_email(cls, email, include_deleted=False):
        base_query = cls._get_base_query(include_deleted)
        clause = "AND" if not include_deleted else "WHERE"
        result = DBManager.execute_query(f'{base_query} {clause} email = %s', (email,), fetch='one')
        return cls.from_row(result)

    @classmethod
    def count_all(cls):
        return cls.count_where("", ())

    def get_permissions(self):
        """
        Effective permission set: the role's permissions plus the ones granted
        to the user directly. Superadmins hold every permission.
        """
        from workdesk.utils.permissions import PERMISSIONS
        if self.is_superadmin:
            return list(PERMISSIONS.keys())

        from workdesk.database.models.permission_model import RolePermission, UserPermission
        granted = RolePermission.get_role_permissions(self.type)
        for permission in UserPermission.get_user_permissions(str(self.id)):
            if permission not in granted:
                granted.append(permission)
        return granted

    def has_permission(self, permission: str) -> bool:
        from workdesk.utils.authorization import has_permission
        return has_permission(self.get_permissions(), permission)
