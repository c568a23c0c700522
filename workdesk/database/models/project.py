from .base_model import BaseModel
from workdesk.database.db_manager import DBManager
from datetime import date
from decimal import Decimal

PROJECT_STATUSES = ('planning', 'active', 'on_hold', 'completed', 'cancelled')
PROJECT_PRIORITIES = ('low', 'medium', 'high', 'urgent')


class Project(BaseModel):
    _table_name = 'projects'
    _allowed_fields = {
        'title', 'description', 'status', 'priority', 'start_date', 'deadline', 'budget',
        'progress', 'created_by', 'is_public',
    }

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        for key in ('start_date', 'deadline'):
            value = getattr(self, key, None)
            if value and isinstance(value, str):
                try:
                    setattr(self, key, date.fromisoformat(value[:10]))
                except ValueError:
                    pass

    def to_dict(self):
        budget = getattr(self, 'budget', None)
        return {
            'id': self.id,
            'title': self.title,
            'description': getattr(self, 'description', None),
            'status': self.status,
            'priority': getattr(self, 'priority', None),
            'start_date': self.start_date.isoformat() if getattr(self, 'start_date', None) else None,
            'deadline': self.deadline.isoformat() if getattr(self, 'deadline', None) else None,
            'budget': float(Decimal(budget)) if budget is not None else None,
            'progress': getattr(self, 'progress', 0),
        }

    @classmethod
    def list_filtered(cls, company_id, filters, offset=0, limit=12):
        where = ["deleted_at IS NULL", "created_by = %s"]
        params = [company_id]

        if filters.get('status'):
            where.append("status = %s")
            params.append(filters['status'])
        if filters.get('search'):
            like_q = f"%{filters['search']}%"
            where.append("(title LIKE %s OR description LIKE %s)")
            params.extend([like_q, like_q])

        where_sql = " WHERE " + " AND ".join(where)
        query = f"SELECT * FROM {cls._table_name} {where_sql} ORDER BY created_at DESC LIMIT %s OFFSET %s"
        rows = DBManager.execute_query(query, tuple(params + [limit, offset]), fetch='all')
        projects = [cls.from_row(row) for row in rows] if rows else []
        return projects, cls.count_where(where_sql, tuple(params))

    @classmethod
    def find_by_title(cls, company_id, title):
        query = f"{cls._get_base_query()} AND created_by = %s AND title = %s"
        return cls.from_row(DBManager.execute_query(query, (company_id, title), fetch='one'))
