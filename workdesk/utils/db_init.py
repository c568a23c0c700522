import logging
import os

from workdesk.database.db_manager import DBManager
from workdesk.database.models.user import User

logger = logging.getLogger(__name__)

SCHEMA_PATH = os.path.join(os.path.dirname(os.path.dirname(__file__)), 'database', 'schemas', 'schema.sql')


def _schema_statements(schema_sql):
    """Split the DDL into statements, dropping comments and any DROP TABLE."""
    lines = [line for line in schema_sql.split('\n') if not line.strip().startswith('--')]
    statements = [s.strip() for s in '\n'.join(lines).split(';') if s.strip()]
    return [s for s in statements if not s.upper().startswith('DROP TABLE')]


def init_db():
    """
    Initialize database:
    1. Create the database and tables (if not exist)
    2. Create the superadmin account if no users exist
    """
    logger.info("Initializing database")

    try:
        from workdesk.database.config import Config
        from workdesk.database.base import get_db_connection

        db_name = Config.get_db_config(db_required=True).get('database')
        if db_name:
            conn = get_db_connection(db_required=False)
            try:
                with conn.cursor() as cursor:
                    cursor.execute(f"CREATE DATABASE IF NOT EXISTS {db_name}")
            finally:
                conn.close()
            logger.info("Database '%s' verified", db_name)

        if not os.path.exists(SCHEMA_PATH):
            logger.warning("Schema file not found at %s", SCHEMA_PATH)
            return

        with open(SCHEMA_PATH, 'r') as f:
            statements = _schema_statements(f.read())

        connection = DBManager.get_connection()
        try:
            with connection.cursor() as cursor:
                for statement in statements:
                    try:
                        cursor.execute(statement)
                    except Exception as e:
                        logger.warning("Error executing schema statement: %s", e)
            connection.commit()
        finally:
            connection.close()
        logger.info("Tables verified (%d statements)", len(statements))

        if User.count_all() == 0:
            admin_email = os.getenv('ADMIN_EMAIL', 'superadmin@example.com')
            User.create({
                'name': 'Super Admin',
                'email': admin_email,
                'password': os.getenv('ADMIN_PASSWORD', 'password'),
                'type': 'superadmin',
            })
            logger.info("Superadmin created: %s", admin_email)

    except Exception as e:
        logger.error("Error initializing database: %s", e)
