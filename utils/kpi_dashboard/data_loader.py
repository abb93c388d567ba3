# utils/kpi_dashboard/data_loader.py
"""
Dashboard Data Store

Process-wide cache of department KPI rows read from the hosted database.
Load ONCE per TTL, filter MANY times (filtering is done by FilterProjection).

Principles:
1. One SELECT per department table
2. Cache shared by all sessions of the process (thread-safe)
3. Reload only when cache is missing, expired, or refresh() is called

Expected row shape: kpi_name, month, quarter, year, actual, target.
Extra columns pass through untouched.

Usage:
    store = DashboardDataStore()
    marketing_df = store.get_rows('marketing')
    store.refresh('marketing')
"""

import logging
import threading
import time
from datetime import datetime
from typing import Callable, Dict, List, Mapping, Optional, Tuple

import pandas as pd

from .constants import (
    DEPARTMENT_TABLES,
    CACHE_TTL_SECONDS,
    ROW_ACTUAL_FIELD,
    ROW_TARGET_FIELD,
    ROW_MONTH_FIELD,
    ROW_QUARTER_FIELD,
    ROW_YEAR_FIELD,
)

logger = logging.getLogger(__name__)

QueryFunc = Callable[[str], pd.DataFrame]


def _default_query(query: str) -> pd.DataFrame:
    from utils.db import execute_query_df
    return execute_query_df(query)


class DashboardDataStore:
    """
    Cached access to department rows.

    The cache lives on the class so every store instance in the process
    shares it; entries are keyed by table name.
    """

    _cache: Dict[str, Dict] = {}
    _cache_lock = threading.Lock()

    def __init__(
        self,
        tables: Optional[Mapping[str, str]] = None,
        ttl_seconds: Optional[int] = None,
        query_func: Optional[QueryFunc] = None
    ):
        """
        Args:
            tables: department -> table name (default: DEPARTMENT_TABLES)
            ttl_seconds: cache lifetime (default: CACHE_TTL_SECONDS setting)
            query_func: callable(sql) -> DataFrame (default: utils.db.execute_query_df)
        """
        self.tables = dict(tables or DEPARTMENT_TABLES)
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else self._configured_ttl()
        self._query = query_func or _default_query

    @staticmethod
    def _configured_ttl() -> int:
        from utils.config import config
        return config.get_app_setting("CACHE_TTL_SECONDS", CACHE_TTL_SECONDS)

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def departments(self) -> List[str]:
        return list(self.tables)

    def get_rows(self, department: str, force_reload: bool = False) -> pd.DataFrame:
        """
        Rows for a department (cached or fresh).

        Returns a copy so callers can filter/mutate freely.

        Raises:
            ValueError: unknown department
        """
        table = self._table_for(department)

        with self._cache_lock:
            needs_reload, reason = self._needs_reload(table)
            if force_reload or needs_reload:
                logger.info(f"🔄 Loading {department} rows ({reason or 'forced reload'})")
                self._cache[table] = {
                    'df': self._load_table(table),
                    '_loaded_at': datetime.now(),
                }
            else:
                logger.debug(f"♻️ Using cached {department} rows")

            return self._cache[table]['df'].copy()

    def refresh(self, department: Optional[str] = None):
        """Drop cached rows for one department (or all); next read reloads."""
        with self._cache_lock:
            if department is None:
                self._cache.clear()
                logger.info("🔄 Dashboard cache cleared")
            else:
                self._cache.pop(self._table_for(department), None)
                logger.info(f"🔄 {department} cache cleared")

    def get_cache_info(self) -> Dict[str, Dict]:
        """Loaded-at timestamp and row count per cached department."""
        info = {}
        with self._cache_lock:
            for department, table in self.tables.items():
                entry = self._cache.get(table)
                if entry:
                    info[department] = {
                        'rows': len(entry['df']),
                        'loaded_at': entry['_loaded_at'],
                    }
        return info

    @classmethod
    def clear_cache(cls):
        with cls._cache_lock:
            cls._cache.clear()

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _table_for(self, department: str) -> str:
        table = self.tables.get(department)
        if table is None:
            raise ValueError(
                f"Unknown department {department!r}. Available: {', '.join(self.tables)}"
            )
        return table

    def _needs_reload(self, table: str) -> Tuple[bool, Optional[str]]:
        entry = self._cache.get(table)
        if entry is None:
            return True, "No cached data"

        elapsed = (datetime.now() - entry['_loaded_at']).total_seconds()
        if elapsed > self.ttl_seconds:
            return True, f"TTL expired ({elapsed:.0f}s)"

        return False, None

    def _load_table(self, table: str) -> pd.DataFrame:
        start = time.perf_counter()
        try:
            df = self._query(f"SELECT * FROM {table}")
        except Exception as e:
            logger.error(f"❌ Failed to load {table}: {e}")
            raise

        df = self._normalize_rows(df)
        logger.info(f"📊 SQL [{table}]: {time.perf_counter() - start:.3f}s → {len(df):,} rows")
        return df

    @staticmethod
    def _normalize_rows(df: pd.DataFrame) -> pd.DataFrame:
        """Coerce numeric KPI columns and trim period labels."""
        df = df.copy()
        for column in (ROW_ACTUAL_FIELD, ROW_TARGET_FIELD):
            if column in df.columns:
                df[column] = pd.to_numeric(df[column], errors='coerce')
        for column in (ROW_MONTH_FIELD, ROW_QUARTER_FIELD, ROW_YEAR_FIELD):
            if column in df.columns:
                df[column] = df[column].where(df[column].isna(), df[column].astype(str).str.strip())
        return df
