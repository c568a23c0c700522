from .base_model import BaseModel
from workdesk.database.db_manager import DBManager
from typing import Dict


class Setting(BaseModel):
    """Key/value settings owned by a company account."""
    _table_name = 'settings'
    _soft_delete = False

    @classmethod
    def get_all(cls, company_id) -> Dict[str, str]:
        if not company_id:
            return {}
        query = f"SELECT name, value FROM {cls._table_name} WHERE created_by = %s"
        rows = DBManager.execute_query(query, (company_id,), fetch='all')
        return {row['name']: row['value'] for row in rows} if rows else {}

    @classmethod
    def set_many(cls, company_id, values: Dict[str, str]) -> int:
        from uuid6 import uuid7
        query = f"""
            INSERT INTO {cls._table_name} (id, created_by, name, value)
            VALUES (%s, %s, %s, %s)
            ON DUPLICATE KEY UPDATE value = VALUES(value), updated_at = NOW()
        """
        params = [(str(uuid7()), company_id, name, None if value is None else str(value)) for name, value in values.items()]
        return DBManager.execute_bulk_write_query(query, params) if params else 0


class PaymentSetting(Setting):
    """Gateway switches and credentials (`is_<id>_enabled`, `<id>_public_key`, ...)."""
    _table_name = 'payment_settings'
