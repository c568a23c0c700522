from .base_model import BaseModel
from workdesk.database.db_manager import DBManager

DEFAULT_PREFERENCES = {
    'sidebar_expanded': True,
    'language': 'en',
    'layout_direction': 'ltr',
    'theme': 'light',
}


class UIPreference(BaseModel):
    _table_name = 'ui_preferences'
    _soft_delete = False

    @classmethod
    def get_for_user(cls, user_id):
        query = f"SELECT name, value FROM {cls._table_name} WHERE user_id = %s"
        rows = DBManager.execute_query(query, (user_id,), fetch='all') or []
        prefs = dict(DEFAULT_PREFERENCES)
        for row in rows:
            if row['name'] == 'sidebar_expanded':
                prefs[row['name']] = row['value'] == '1'
            else:
                prefs[row['name']] = row['value']
        return prefs

    @classmethod
    def save_for_user(cls, user_id, values):
        from uuid6 import uuid7
        query = f"""
            INSERT INTO {cls._table_name} (id, user_id, name, value)
            VALUES (%s, %s, %s, %s)
            ON DUPLICATE KEY UPDATE value = VALUES(value), updated_at = NOW()
        """
        params = []
        for name, value in values.items():
            if isinstance(value, bool):
                value = '1' if value else '0'
            params.append((str(uuid7()), user_id, name, value))
        if params:
            DBManager.execute_bulk_write_query(query, params)
        return cls.get_for_user(user_id)
