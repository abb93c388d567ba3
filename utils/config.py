# utils/config.py
"""
Centralized Configuration Management

Version: 2.0.0
Features:
- Support both local (.env) and Streamlit Cloud (secrets.toml)
- Singleton pattern for efficiency
- Live reporting period + financial year calendar supplied at startup
- Type-safe getters with defaults
- Environment detection
"""

import os
import json
import logging
from pathlib import Path
from dotenv import load_dotenv
from typing import Dict, Any, List, Optional
from dataclasses import dataclass

from .kpi_dashboard.constants import (
    FINANCIAL_YEAR_QUARTERS,
    DEFAULT_LIVE_MONTH,
    DEFAULT_LIVE_QUARTER,
    DEFAULT_LIVE_YEAR,
    CACHE_TTL_SECONDS,
)

# Initialize logger
logger = logging.getLogger(__name__)


def is_running_on_streamlit_cloud() -> bool:
    """Detect if running on Streamlit Cloud"""
    try:
        import streamlit as st
        return hasattr(st, 'secrets') and len(st.secrets) > 0
    except Exception:
        return False


@dataclass
class DatabaseConfig:
    """Database configuration container"""
    host: str
    port: int
    user: str
    password: str
    database: str
    driver: str = "mysql+pymysql"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'host': self.host,
            'port': self.port,
            'user': self.user,
            'password': self.password,
            'database': self.database,
            'driver': self.driver,
        }

    def is_configured(self) -> bool:
        return bool(self.host and self.user and self.password)


@dataclass
class LivePeriodConfig:
    """Reporting period the business currently treats as 'now'"""
    month: str = DEFAULT_LIVE_MONTH
    quarter: str = DEFAULT_LIVE_QUARTER
    year: str = DEFAULT_LIVE_YEAR
    default_quarter: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'month': self.month,
            'quarter': self.quarter,
            'year': self.year,
            'default_quarter': self.default_quarter,
        }


def load_calendar_tables(path: str) -> Dict[str, Dict[str, List[str]]]:
    """
    Load quarter tables from a JSON file.

    Expected shape (key order = canonical quarter order):
        {"FY2026": {"Q4": ["January", "February", "March"], "Q1": [...]}}
    """
    with open(path, "r") as f:
        tables = json.load(f)

    if not isinstance(tables, dict) or not all(isinstance(v, dict) for v in tables.values()):
        raise ValueError(f"Calendar file {path} must map financial years to quarter tables")

    return tables


class Config:
    """
    Centralized configuration management

    Usage:
        from utils.config import config

        # Get database config
        db_config = config.get_db_config()

        # Live period and calendar
        live = config.get_live_period_config()
        tables = config.get_calendar_tables()

        # Get app settings
        ttl = config.get_app_setting("CACHE_TTL_SECONDS", 300)

        # Check feature flags
        if config.is_feature_enabled("DEBUG_MODE"):
            ...
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self.is_cloud = is_running_on_streamlit_cloud()
        self._load_config()
        self._initialized = True

    def _load_config(self):
        """Load configuration based on environment"""
        if self.is_cloud:
            self._load_cloud_config()
        else:
            self._load_local_config()

        self._load_app_config()
        self._log_config_status()

    def _load_cloud_config(self):
        """Load configuration from Streamlit Cloud secrets"""
        import streamlit as st

        # Database
        db_secrets = st.secrets.get("DB_CONFIG", {})
        self._db_config = DatabaseConfig(
            host=db_secrets.get("host", ""),
            port=int(db_secrets.get("port", 3306)),
            user=db_secrets.get("user", ""),
            password=db_secrets.get("password", ""),
            database=db_secrets.get("database", "kpi_dashboard"),
            driver=db_secrets.get("driver", "mysql+pymysql"),
        )

        # Live period
        live_secrets = st.secrets.get("LIVE_PERIOD", {})
        self._live_period = LivePeriodConfig(
            month=live_secrets.get("month", DEFAULT_LIVE_MONTH),
            quarter=live_secrets.get("quarter", DEFAULT_LIVE_QUARTER),
            year=live_secrets.get("year", DEFAULT_LIVE_YEAR),
            default_quarter=live_secrets.get("default_quarter"),
        )

        # Calendar
        calendar_secrets = st.secrets.get("CALENDAR", {})
        if calendar_secrets:
            self._calendar_tables = {
                year: {quarter: list(months) for quarter, months in quarters.items()}
                for year, quarters in calendar_secrets.items()
            }
        else:
            self._calendar_tables = FINANCIAL_YEAR_QUARTERS

        logger.info("☁️ Running in STREAMLIT CLOUD")

    def _load_local_config(self):
        """Load configuration from local .env file"""
        # Find and load .env file
        env_paths = [
            Path.cwd() / ".env",
            Path(__file__).parent.parent / ".env",
        ]

        for env_path in env_paths:
            if env_path.exists():
                load_dotenv(env_path)
                logger.info(f"Loaded .env from: {env_path}")
                break

        # Database
        self._db_config = DatabaseConfig(
            host=os.getenv("DB_HOST", ""),
            port=int(os.getenv("DB_PORT", "3306")),
            user=os.getenv("DB_USER", ""),
            password=os.getenv("DB_PASSWORD", ""),
            database=os.getenv("DB_NAME", os.getenv("DB_DATABASE", "kpi_dashboard")),
            driver=os.getenv("DB_DRIVER", "mysql+pymysql"),
        )

        # The period selector works without a database; queries fail later instead
        if not self._db_config.is_configured():
            logger.warning("Missing database configuration - dashboard data will be unavailable")

        # Live period
        self._live_period = LivePeriodConfig(
            month=os.getenv("LIVE_MONTH", DEFAULT_LIVE_MONTH),
            quarter=os.getenv("LIVE_QUARTER", DEFAULT_LIVE_QUARTER),
            year=os.getenv("LIVE_YEAR", DEFAULT_LIVE_YEAR),
            default_quarter=os.getenv("DEFAULT_QUARTER") or None,
        )

        # Calendar
        calendar_path = os.getenv("CALENDAR_CONFIG_PATH")
        if calendar_path:
            self._calendar_tables = load_calendar_tables(calendar_path)
            logger.info(f"Loaded calendar from: {calendar_path}")
        else:
            self._calendar_tables = FINANCIAL_YEAR_QUARTERS

        logger.info("💻 Running in LOCAL environment")

    def _load_app_config(self):
        """Load application-specific settings"""
        self._app_config = {
            # Database pool
            "DB_POOL_SIZE": int(os.getenv("DB_POOL_SIZE", "5")),
            "DB_POOL_RECYCLE": int(os.getenv("DB_POOL_RECYCLE", "3600")),

            # Cache
            "CACHE_TTL_SECONDS": int(os.getenv("CACHE_TTL_SECONDS", str(CACHE_TTL_SECONDS))),

            # Feature flags
            "ENABLE_YOY_COMPARISON": os.getenv("ENABLE_YOY_COMPARISON", "true").lower() == "true",
            "ENABLE_DEBUG_MODE": os.getenv("ENABLE_DEBUG_MODE", "false").lower() == "true",
        }

    def _log_config_status(self):
        """Log configuration status"""
        db_status = (
            f"{self._db_config.host}/{self._db_config.database}"
            if self._db_config.is_configured() else "Not configured"
        )
        live = self._live_period
        logger.info(f"✅ Database: {db_status}")
        logger.info(f"✅ Live period: {live.month} / {live.quarter} / {live.year}")
        logger.info(f"✅ Calendar: {', '.join(self._calendar_tables)}")

    # ==================== PUBLIC GETTERS ====================

    def get_db_config(self) -> Dict[str, Any]:
        """Get database configuration as dictionary"""
        return self._db_config.to_dict()

    def get_live_period_config(self) -> LivePeriodConfig:
        """Get live reporting period settings"""
        return self._live_period

    def get_calendar_tables(self) -> Dict[str, Dict[str, List[str]]]:
        """Get financial year -> quarter -> months tables (copy)"""
        return {
            year: {quarter: list(months) for quarter, months in quarters.items()}
            for year, quarters in self._calendar_tables.items()
        }

    def get_app_setting(self, key: str, default: Any = None) -> Any:
        """Get application setting with default"""
        return self._app_config.get(key, default)

    def is_feature_enabled(self, feature: str) -> bool:
        """Check if feature is enabled"""
        key = f"ENABLE_{feature.upper()}"
        return self._app_config.get(key, True)

    # ==================== PROPERTIES ====================

    @property
    def db_config(self) -> Dict[str, Any]:
        """Backward compatible property"""
        return self.get_db_config()

    @property
    def app_config(self) -> Dict[str, Any]:
        """Backward compatible property"""
        return self._app_config.copy()


# ==================== SINGLETON INSTANCE ====================

config = Config()

# ==================== BACKWARD COMPATIBILITY EXPORTS ====================

IS_RUNNING_ON_CLOUD = config.is_cloud
DB_CONFIG = config.db_config
APP_CONFIG = config.app_config

__all__ = [
    'config',
    'Config',
    'DatabaseConfig',
    'LivePeriodConfig',
    'load_calendar_tables',
    'IS_RUNNING_ON_CLOUD',
    'DB_CONFIG',
    'APP_CONFIG',
]
