import json

from uuid6 import uuid7

from .base_model import BaseModel
from workdesk.database.db_manager import DBManager


class ActivityLog(BaseModel):
    """
    Append-only audit trail. Rows come from project imports and gateway webhooks
    and are never edited.
    """
    _table_name = 'activity_logs'
    _soft_delete = False

    @classmethod
    def create_log(cls, action, entity_type, entity_id=None, details=None, user_id=None, ip_address=None):
        """user_id is None for system actions such as gateway webhooks."""
        log_id = str(uuid7())
        details_json = json.dumps(details, default=str) if details else None

        DBManager.execute_write_query(
            f"INSERT INTO {cls._table_name} "
            "(id, user_id, action, entity_type, entity_id, details, ip_address) "
            "VALUES (%s, %s, %s, %s, %s, %s, %s)",
            (log_id, user_id, action, entity_type, entity_id, details_json, ip_address)
        )
        return log_id
