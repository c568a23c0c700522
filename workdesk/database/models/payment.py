from .base_model import BaseModel
from workdesk.database.db_manager import DBManager
from decimal import Decimal
from datetime import datetime


class Payment(BaseModel):
    _table_name = 'payments'
    _allowed_fields = {'invoice_id', 'amount', 'payment_method', 'transaction_id', 'payment_date', 'created_by'}

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        if getattr(self, 'amount', None) is not None:
            self.amount = Decimal(self.amount)
        if isinstance(getattr(self, 'payment_date', None), str):
            try:
                self.payment_date = datetime.fromisoformat(self.payment_date.replace(' ', 'T'))
            except ValueError:
                pass

    def to_dict(self):
        return {
            'id': self.id,
            'invoice_id': self.invoice_id,
            'amount': float(self.amount),
            'payment_method': self.payment_method,
            'transaction_id': self.transaction_id,
            'payment_date': self.payment_date.isoformat() if isinstance(self.payment_date, datetime) else None,
        }

    @classmethod
    def record_payment(cls, data):
        data.setdefault('payment_date', datetime.now())
        return super().create(data)

    @classmethod
    def find_by_transaction_id(cls, transaction_id):
        query = f"SELECT * FROM {cls._table_name} WHERE transaction_id = %s LIMIT 1"
        row = DBManager.execute_query(query, (transaction_id,), fetch='one')
        return cls.from_row(row) if row else None

    @classmethod
    def find_by_invoice_id(cls, invoice_id):
        query = f"SELECT * FROM {cls._table_name} WHERE invoice_id = %s AND deleted_at IS NULL ORDER BY payment_date DESC"
        rows = DBManager.execute_query(query, (invoice_id,), fetch='all')
        return [cls.from_row(row) for row in rows] if rows else []

    @classmethod
    def get_total_paid(cls, invoice_id):
        query = f"SELECT COALESCE(SUM(amount), 0) as total FROM {cls._table_name} WHERE invoice_id = %s AND deleted_at IS NULL"
        result = DBManager.execute_query(query, (invoice_id,), fetch='one')
        return Decimal(result['total']) if result else Decimal(0)
