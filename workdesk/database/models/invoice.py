from .base_model import BaseModel
from workdesk.database.db_manager import DBManager
from datetime import datetime, date
from decimal import Decimal
import secrets

INVOICE_STATUSES = ('draft', 'sent', 'viewed', 'partial_paid', 'paid', 'overdue', 'cancelled')

# Older rows were written with the long spelling
PARTIAL_PAID_ALIASES = ('partial_paid', 'partially_paid')


class Invoice(BaseModel):
    _table_name = 'invoices'
    _allowed_fields = {
        'invoice_number', 'title', 'project_id', 'client_id', 'created_by', 'invoice_date',
        'due_date', 'total_amount', 'paid_amount', 'status', 'payment_token', 'paid_at',
    }

    def __init__(self, **kwargs):
        super().__init__()
        for key, value in kwargs.items():
            if key in ('total_amount', 'paid_amount') and value is not None:
                value = Decimal(value)
            elif key in ('due_date', 'invoice_date') and value and isinstance(value, str):
                try:
                    value = date.fromisoformat(value[:10])
                except ValueError:
                    pass
            elif key in ('created_at', 'updated_at', 'paid_at') and value and isinstance(value, str):
                try:
                    value = datetime.fromisoformat(value.replace(' ', 'T'))
                except ValueError:
                    pass
            setattr(self, key, value)

    @property
    def remaining_amount(self) -> Decimal:
        total = getattr(self, 'total_amount', None) or Decimal(0)
        paid = getattr(self, 'paid_amount', None) or Decimal(0)
        return max(total - paid, Decimal(0)).quantize(Decimal('0.01'))

    def to_dict(self):
        return {
            "id": self.id,
            "invoice_number": self.invoice_number,
            "title": getattr(self, 'title', None),
            "project_id": getattr(self, 'project_id', None),
            "project_title": getattr(self, 'project_title', None),
            "client_id": getattr(self, 'client_id', None),
            "client_name": getattr(self, 'client_name', None),
            "invoice_date": self.invoice_date.isoformat() if getattr(self, 'invoice_date', None) else None,
            "due_date": self.due_date.isoformat() if getattr(self, 'due_date', None) else None,
            "total_amount": float(self.total_amount or 0),
            "paid_amount": float(getattr(self, 'paid_amount', None) or 0),
            "remaining_amount": float(self.remaining_amount),
            "status": self.status,
            "payment_token": getattr(self, 'payment_token', None),
            "created_at": self.created_at.isoformat() if getattr(self, 'created_at', None) else None,
        }

    @classmethod
    def create_invoice(cls, data):
        data.setdefault('payment_token', secrets.token_urlsafe(32))
        data.setdefault('status', 'draft')
        data.setdefault('paid_amount', Decimal('0.00'))
        return super().create(data)

    @classmethod
    def find_by_token(cls, token):
        query = f"""
            SELECT i.*, u.name AS client_name, p.title AS project_title
            FROM {cls._table_name} i
            LEFT JOIN users u ON i.client_id = u.id
            LEFT JOIN projects p ON i.project_id = p.id
            WHERE i.payment_token = %s AND i.deleted_at IS NULL
        """
        row = DBManager.execute_query(query, (token,), fetch='one')
        return cls.from_row(row)

    @classmethod
    def list_filtered(cls, company_id, filters, offset=0, limit=12, client_id=None):
        """
        Invoices owned by `company_id` matching the list-page filters.
        Returns (invoices, total).
        """
        where = ["i.deleted_at IS NULL", "i.created_by = %s"]
        params = [company_id]

        if client_id:
            where.append("i.client_id = %s")
            params.append(client_id)

        status = filters.get('status')
        if status in PARTIAL_PAID_ALIASES:
            where.append("i.status IN (%s, %s)")
            params.extend(PARTIAL_PAID_ALIASES)
        elif status:
            where.append("i.status = %s")
            params.append(status)

        if filters.get('project_id'):
            where.append("i.project_id = %s")
            params.append(filters['project_id'])
        if filters.get('client_id'):
            where.append("i.client_id = %s")
            params.append(filters['client_id'])
        if filters.get('search'):
            like_q = f"%{filters['search']}%"
            where.append("(i.invoice_number LIKE %s OR i.title LIKE %s OR p.title LIKE %s)")
            params.extend([like_q, like_q, like_q])

        where_sql = " WHERE " + " AND ".join(where)
        query = f"""
            SELECT i.*, u.name AS client_name, p.title AS project_title
            FROM {cls._table_name} i
            LEFT JOIN users u ON i.client_id = u.id
            LEFT JOIN projects p ON i.project_id = p.id
            {where_sql}
            ORDER BY i.created_at DESC
            LIMIT %s OFFSET %s
        """
        rows = DBManager.execute_query(query, tuple(params + [limit, offset]), fetch='all')
        invoices = [cls.from_row(row) for row in rows] if rows else []

        count_query = f"""
            SELECT COUNT(*) AS total
            FROM {cls._table_name} i
            LEFT JOIN projects p ON i.project_id = p.id
            {where_sql}
        """
        count_result = DBManager.execute_query(count_query, tuple(params), fetch='one')
        total = count_result['total'] if count_result else 0
        return invoices, total

    @classmethod
    def apply_payment_totals(cls, invoice_id, total_paid):
        """
        Store the paid total and move the status to paid / partial_paid.
        Returns the new status, or None when the invoice does not exist.
        """
        invoice = cls.find_by_id(invoice_id)
        if not invoice:
            return None

        total_paid = Decimal(total_paid).quantize(Decimal('0.01'))
        changes = {'paid_amount': total_paid}
        if total_paid >= invoice.total_amount:
            changes['status'] = 'paid'
            changes['paid_at'] = datetime.now()
        elif total_paid > 0:
            changes['status'] = 'partial_paid'
        cls.update(invoice_id, changes)
        return changes.get('status', invoice.status)

    @classmethod
    def mark_overdue(cls, today=None):
        """Flag unpaid invoices whose due date has passed. Returns the number updated."""
        today = today or date.today()
        query = f"""
            UPDATE {cls._table_name}
            SET status = 'overdue', updated_at = NOW()
            WHERE deleted_at IS NULL
              AND due_date < %s
              AND status NOT IN ('draft', 'paid', 'cancelled', 'overdue')
        """
        return DBManager.execute_write_query(query, (today,))
