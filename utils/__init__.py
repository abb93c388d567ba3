# utils/__init__.py
"""
Shared Utilities Package for Streamlit Apps

This package contains common utilities shared across all pages:
- config: Configuration management (local + Streamlit Cloud)
- db: Database connection management with pooling
- kpi_dashboard: Period selection engine and dashboard components

Usage:
    # Import specific modules
    from utils.db import get_db_engine, execute_query_df
    from utils.config import config

    # Or import commonly used items directly
    from utils import config, check_db_connection
"""

# Configuration
from .config import (
    config,
    Config,
    IS_RUNNING_ON_CLOUD,
    DB_CONFIG,
    APP_CONFIG,
)

# Database
from .db import (
    get_db_engine,
    check_db_connection,
    reset_db_engine,
    execute_query_df,
)

__all__ = [
    # Config
    'config',
    'Config',
    'IS_RUNNING_ON_CLOUD',
    'DB_CONFIG',
    'APP_CONFIG',

    # Database
    'get_db_engine',
    'check_db_connection',
    'reset_db_engine',
    'execute_query_df',
]

__version__ = '1.0.0'
