from .base_model import BaseModel
from workdesk.database.db_manager import DBManager
from datetime import date

TIMESHEET_STATUSES = ('draft', 'submitted', 'approved', 'rejected')


class Timesheet(BaseModel):
    _table_name = 'timesheets'
    _allowed_fields = {'user_id', 'project_id', 'created_by', 'start_date', 'end_date', 'total_hours', 'status', 'notes'}

    def to_dict(self):
        def _iso(value):
            return value.isoformat() if isinstance(value, date) else value

        return {
            'id': self.id,
            'user_id': self.user_id,
            'user_name': getattr(self, 'user_name', None),
            'project_id': getattr(self, 'project_id', None),
            'project_title': getattr(self, 'project_title', None),
            'start_date': _iso(self.start_date),
            'end_date': _iso(self.end_date),
            'total_hours': float(self.total_hours or 0),
            'status': self.status,
            'notes': getattr(self, 'notes', None),
        }

    @classmethod
    def list_filtered(cls, company_id, filters, offset=0, limit=15, user_id=None):
        """
        `user_id` restricts the list to one member's own sheets; the
        `user_id` filter is only honoured when it is not set.
        """
        where = ["t.deleted_at IS NULL", "t.created_by = %s"]
        params = [company_id]

        owner = user_id or filters.get('user_id')
        if owner:
            where.append("t.user_id = %s")
            params.append(owner)
        if filters.get('status'):
            where.append("t.status = %s")
            params.append(filters['status'])
        if filters.get('project_id'):
            where.append("t.project_id = %s")
            params.append(filters['project_id'])
        if filters.get('start_date'):
            where.append("t.end_date >= %s")
            params.append(filters['start_date'])
        if filters.get('end_date'):
            where.append("t.start_date <= %s")
            params.append(filters['end_date'])
        if filters.get('search'):
            like_q = f"%{filters['search']}%"
            where.append("(t.notes LIKE %s OR u.name LIKE %s)")
            params.extend([like_q, like_q])

        where_sql = " WHERE " + " AND ".join(where)
        joins = f"""
            FROM {cls._table_name} t
            JOIN users u ON t.user_id = u.id
            LEFT JOIN projects p ON t.project_id = p.id
        """
        query = f"""
            SELECT t.*, u.name AS user_name, p.title AS project_title
            {joins}
            {where_sql}
            ORDER BY t.start_date DESC
            LIMIT %s OFFSET %s
        """
        rows = DBManager.execute_query(query, tuple(params + [limit, offset]), fetch='all')
        sheets = [cls.from_row(row) for row in rows] if rows else []

        count_result = DBManager.execute_query(f"SELECT COUNT(*) AS total {joins} {where_sql}", tuple(params), fetch='one')
        return sheets, (count_result['total'] if count_result else 0)
