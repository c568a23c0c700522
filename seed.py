import os
from datetime import date, timedelta
from decimal import Decimal

from dotenv import load_dotenv
load_dotenv()

from workdesk.database.base import get_db_connection
from workdesk.database.models.invoice import Invoice
from workdesk.database.models.permission_model import RolePermission
from workdesk.database.models.project import Project
from workdesk.database.models.setting import PaymentSetting, Setting
from workdesk.database.models.user import User
from workdesk.utils.db_init import SCHEMA_PATH, _schema_statements
from workdesk.utils.permissions import DEFAULT_ROLE_PERMISSIONS

# --- Development accounts ---
SUPERADMIN_EMAIL = "superadmin@example.com"
COMPANY_EMAIL = "company@example.com"
CLIENT_EMAIL = "client@example.com"
DEFAULT_PASSWORD = os.getenv("SEED_PASSWORD", "password")


def _create_tables_from_schema(conn):
    print(f"Reading database schema from: {SCHEMA_PATH}")
    with open(SCHEMA_PATH, 'r') as f:
        statements = _schema_statements(f.read())
    with conn.cursor() as cursor:
        for statement in statements:
            cursor.execute(statement)
    conn.commit()
    print(f"{len(statements)} schema statements executed.")


def _seed_roles():
    for role, permissions in DEFAULT_ROLE_PERMISSIONS.items():
        RolePermission.sync_permissions(role, permissions)
        print(f"Role '{role}': {len(permissions)} permissions")


def _seed_accounts():
    User.create({'name': 'Super Admin', 'email': SUPERADMIN_EMAIL, 'password': DEFAULT_PASSWORD, 'type': 'superadmin'})
    company_id = User.create({'name': 'Acme Studio', 'email': COMPANY_EMAIL, 'password': DEFAULT_PASSWORD, 'type': 'company'})
    client_id = User.create({'name': 'Jane Client', 'email': CLIENT_EMAIL, 'password': DEFAULT_PASSWORD,
                             'type': 'client', 'created_by': company_id})
    return company_id, client_id


def _seed_company_data(company_id, client_id):
    Setting.set_many(company_id, {
        'app_name': 'Acme Workdesk',
        'company_name': 'Acme Studio',
        'currency': 'USD',
        'currency_symbol': '$',
        'is_zoom_meeting_test': '0',
        'is_google_meeting_test': '0',
    })
    PaymentSetting.set_many(company_id, {
        'currency': 'USD',
        'is_bank_enabled': '1',
        'bank_detail': 'Acme Bank, IBAN XX00 0000 0000',
        'is_stripe_enabled': '1',
        'stripe_key': 'pk_test_placeholder',
        'stripe_secret': 'sk_test_placeholder',
        'is_mollie_enabled': '1',
        'mollie_api_key': 'test_placeholder',
    })

    project_id = Project.create({
        'title': 'Website redesign',
        'description': 'Marketing site refresh',
        'status': 'active',
        'priority': 'high',
        'start_date': date.today(),
        'deadline': date.today() + timedelta(days=60),
        'budget': Decimal('12000.00'),
        'created_by': company_id,
    })
    Invoice.create_invoice({
        'invoice_number': 'INV-0001',
        'title': 'Design phase',
        'project_id': project_id,
        'client_id': client_id,
        'created_by': company_id,
        'invoice_date': date.today(),
        'due_date': date.today() + timedelta(days=14),
        'total_amount': Decimal('2500.00'),
        'status': 'sent',
    })


def initialize_database():
    """Drops the database, recreates it, creates tables and seeds development data."""
    db_name = os.getenv("DB_NAME", "workdesk_portal")

    conn_server = get_db_connection(db_required=False)
    try:
        with conn_server.cursor() as cursor:
            print(f"Dropping database `{db_name}` if it exists...")
            cursor.execute(f"DROP DATABASE IF EXISTS `{db_name}`")
            cursor.execute(f"CREATE DATABASE `{db_name}`")
    finally:
        conn_server.close()

    conn_db = get_db_connection(db_required=True)
    try:
        _create_tables_from_schema(conn_db)
    finally:
        conn_db.close()

    _seed_roles()
    company_id, client_id = _seed_accounts()
    _seed_company_data(company_id, client_id)

    print("=" * 50)
    print("Seed complete. Accounts (password: %s):" % DEFAULT_PASSWORD)
    for email in (SUPERADMIN_EMAIL, COMPANY_EMAIL, CLIENT_EMAIL):
        print(f"  {email}")
    print("=" * 50)


if __name__ == "__main__":
    initialize_database()
