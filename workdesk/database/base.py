import pymysql
from workdesk.database.config import Config


def get_db_connection(db_required=True):
    """
    Open a PyMySQL connection using the central Config.

    Args:
        db_required (bool): connect to the server only (no schema selected)
                            when False.
    """
    return pymysql.connect(**Config.get_db_config(db_required=db_required))
