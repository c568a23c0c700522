import os
import pymysql.cursors
from dotenv import load_dotenv

load_dotenv()


class Config:
    """
    Connection settings for the portal database, read from the environment.
    """

    MYSQL_CONFIG = {
        "host": os.getenv("DB_HOST", "localhost"),
        "port": int(os.getenv("DB_PORT", "3306")),
        "user": os.getenv("DB_USER", "root"),
        "password": os.getenv("DB_PASSWORD", "root"),
        "database": os.getenv("DB_NAME", "workdesk_portal"),
        "charset": "utf8mb4",
        "cursorclass": pymysql.cursors.DictCursor,
    }

    @staticmethod
    def get_db_config(db_required=True):
        """
        Return a copy of the connection settings.
        With db_required=False the database name is dropped, which is what
        CREATE/DROP DATABASE statements need.
        """
        config = Config.MYSQL_CONFIG.copy()
        if not db_required:
            config.pop("database", None)
        return config
