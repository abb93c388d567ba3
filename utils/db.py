# utils/db.py
"""
Database Access for the KPI Dashboard

Read-only transport for the department row store:
- One SQLAlchemy engine per process, created lazily under a lock
- Pool options taken from the app settings (DB_POOL_SIZE, DB_POOL_RECYCLE)
- Health check used by the landing page
- Engine reset after connection faults so the next read gets a fresh pool

The period engine never touches this module; only DashboardDataStore does.
"""

import logging
import threading
from typing import Any, Dict, Mapping, Optional, Tuple
from urllib.parse import quote_plus

import pandas as pd
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from .config import config

logger = logging.getLogger(__name__)

_engine: Optional[Engine] = None
_engine_lock = threading.Lock()


# ==================== ENGINE ====================

def build_db_url(db_config: Mapping[str, Any]) -> str:
    """SQLAlchemy URL for a DatabaseConfig dict; the password is URL-encoded."""
    driver = db_config.get("driver", "mysql+pymysql")
    credentials = f"{db_config['user']}:{quote_plus(str(db_config['password']))}"
    location = f"{db_config['host']}:{db_config['port']}/{db_config['database']}"
    return f"{driver}://{credentials}@{location}"


def engine_options(app_settings: Mapping[str, Any]) -> Dict[str, Any]:
    """Pool keyword arguments for create_engine()."""
    return {
        'pool_size': app_settings.get("DB_POOL_SIZE", 5),
        'pool_recycle': app_settings.get("DB_POOL_RECYCLE", 3600),
        'max_overflow': 10,
        'pool_timeout': 30,
        'pool_pre_ping': True,
    }


def get_db_engine() -> Engine:
    """Process-wide engine, built on first use."""
    global _engine

    if _engine is None:
        with _engine_lock:
            if _engine is None:
                _engine = _build_engine()
    return _engine


def _build_engine() -> Engine:
    db_config = config.get_db_config()
    if not (db_config["host"] and db_config["user"]):
        raise ValueError(
            "Database is not configured: set DB_HOST / DB_USER (.env) or [DB_CONFIG] (secrets)"
        )

    options = engine_options(config.app_config)
    logger.info(
        f"🔌 Connecting to {db_config['host']}:{db_config['port']}/{db_config['database']} "
        f"as {db_config['user']} (pool_size={options['pool_size']})"
    )
    return create_engine(build_db_url(db_config), **options)


def reset_db_engine() -> bool:
    """
    Dispose the engine so the next query reconnects.

    Returns:
        True if an engine existed and was disposed
    """
    global _engine

    with _engine_lock:
        engine, _engine = _engine, None

    if engine is None:
        return False

    engine.dispose()
    logger.info("🔄 Database engine disposed - next read reconnects")
    return True


# ==================== HEALTH & QUERIES ====================

def check_db_connection() -> Tuple[bool, Optional[str]]:
    """
    Ping the database.

    Returns:
        (ok, message) - message is None when the ping succeeds
    """
    try:
        with get_db_engine().connect() as conn:
            conn.execute(text("SELECT 1"))
        return True, None
    except ValueError as e:
        logger.warning(f"Database check skipped: {e}")
        return False, str(e)
    except OperationalError as e:
        logger.error(f"❌ Database unreachable: {e}")
        return False, "Cannot connect to database. Please check your network/VPN connection."
    except SQLAlchemyError as e:
        logger.error(f"❌ Database error: {e}")
        return False, f"Database error: {e}"


def execute_query_df(query: str, params: Optional[Dict[str, Any]] = None) -> pd.DataFrame:
    """Run a SELECT and return the rows as a DataFrame."""
    return pd.read_sql(text(query), get_db_engine(), params=params or {})


__all__ = [
    'get_db_engine',
    'build_db_url',
    'engine_options',
    'check_db_connection',
    'reset_db_engine',
    'execute_query_df',
]
