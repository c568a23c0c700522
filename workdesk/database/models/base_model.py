from typing import Any, Dict, List, Optional, Type, TypeVar
from uuid6 import uuid7
from workdesk.database.db_manager import DBManager
from datetime import datetime, timezone

T = TypeVar("T", bound="BaseModel")


class BaseModel:
    _table_name: Optional[str] = None
    _allowed_fields: set[str] = set()
    _soft_delete: bool = True

    def __init__(self, **kwargs: Any) -> None:
        for key, value in kwargs.items():
            if key in ('created_at', 'updated_at', 'deleted_at') and isinstance(value, str):
                try:
                    value = datetime.fromisoformat(value)
                except ValueError:
                    pass
            setattr(self, key, value)

    @classmethod
    def from_row(cls: Type[T], row: Optional[Dict[str, Any]]) -> Optional[T]:
        return cls(**row) if row else None

    @classmethod
    def _get_base_query(cls, include_deleted: bool = False) -> str:
        query = f"SELECT * FROM {cls._table_name}"
        if cls._soft_delete and not include_deleted:
            query += " WHERE deleted_at IS NULL"
        return query

    @classmethod
    def _filter_fields(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        if not cls._allowed_fields:
            return dict(data)
        return {k: v for k, v in data.items() if k in cls._allowed_fields or k == "id"}

    @classmethod
    def create(cls, data: Dict[str, Any]) -> str:
        if not cls._table_name:
            raise ValueError("Model must define _table_name")
        data.setdefault("id", str(uuid7()))
        row = cls._filter_fields(data)
        row.setdefault("created_at", datetime.now(timezone.utc))
        columns = ", ".join(row.keys())
        placeholders = ", ".join(["%s"] * len(row))
        query = f"INSERT INTO {cls._table_name} ({columns}) VALUES ({placeholders})"
        try:
            DBManager.execute_write_query(query, tuple(row.values()))
        except Exception as e:
            raise ValueError(f"Failed to create record in {cls._table_name}: {e}")
        return data["id"]

    @classmethod
    def update(cls, record_id: str, data: Dict[str, Any]) -> bool:
        if not cls._table_name:
            raise ValueError("Model must define _table_name")
        changes = {k: v for k, v in cls._filter_fields(data).items() if k not in ("id", "created_at")}
        if not changes:
            return True
        changes["updated_at"] = datetime.now(timezone.utc)
        set_clause = ", ".join([f"{k} = %s" for k in changes.keys()])
        query = f"UPDATE {cls._table_name} SET {set_clause} WHERE id = %s"
        try:
            return DBManager.execute_write_query(query, tuple(list(changes.values()) + [record_id])) > 0
        except Exception as e:
            raise ValueError(f"Failed to update record in {cls._table_name}: {e}")

    @classmethod
    def find_by_id(cls: Type[T], id: str, include_deleted: bool = False) -> Optional[T]:
        base = cls._get_base_query(include_deleted)
        clause = "AND" if "WHERE" in base else "WHERE"
        row = DBManager.execute_query(f"{base} {clause} id = %s", (id,), fetch='one')
        return cls.from_row(row)

    @classmethod
    def _bulk_update(cls, ids: List[str], set_fields: Dict[str, Any], only_active: bool = False,
                     owner_id: Optional[str] = None) -> int:
        if not cls._table_name or not ids:
            return 0
        placeholders = ", ".join(["%s"] * len(ids))
        set_clause = ", ".join([f"{k} = %s" for k in set_fields.keys()])
        params = list(set_fields.values()) + list(ids)
        condition = ""
        if only_active:
            condition = " AND deleted_at IS NULL"
        if owner_id is not None:
            condition += " AND created_by = %s"
            params.append(owner_id)
        query = f"UPDATE {cls._table_name} SET {set_clause} WHERE id IN ({placeholders}){condition}"
        return DBManager.execute_write_query(query, tuple(params))

    @classmethod
    def bulk_soft_delete(cls, ids: List[str], owner_id: Optional[str] = None) -> int:
        return cls._bulk_update(ids, {"deleted_at": datetime.now(timezone.utc)}, only_active=True, owner_id=owner_id)

    @classmethod
    def count_where(cls, where_sql: str, params: tuple) -> int:
        row = DBManager.execute_query(f"SELECT COUNT(*) AS total FROM {cls._table_name} {where_sql}", params, fetch='one') or {}
        return int(row.get("total", 0))
