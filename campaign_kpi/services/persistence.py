"""
Materialization of the staging and KPI report tables.

Both tables are recomputed wholesale on every run. They are replaced together
in a single transaction that creates each table if needed, truncates it and
inserts the new rows, so dashboards never see a partial report or a report
out of step with its staging table.

Key Functions:
- persist_tables: Overwrite staging_bank_marketing and kpi_bank_marketing
- fetch_report: Read the persisted report in presentation order
"""

import logging
from typing import Any, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from asyncpg import Connection

from campaign_kpi.core.config import get_settings
from campaign_kpi.core.database import get_db_pool
from campaign_kpi.models import ReportRow
from campaign_kpi.sql import (
    REPORT_TABLE_COLUMNS,
    STAGING_TABLE_COLUMNS,
    get_create_table_query,
    get_insert_query,
    get_report_select_query,
    get_truncate_query,
)

# Configure module logger
logger = logging.getLogger(__name__)


def dataframe_to_records(
    df: pd.DataFrame,
    columns: Sequence[Tuple[str, str]]
) -> List[Tuple[Any, ...]]:
    """
    Convert a DataFrame into insert tuples in table column order.

    Missing values (NaN, <NA>, None) become None and numpy scalars become
    Python scalars, as asyncpg expects.
    """
    names = [name for name, _ in columns]
    frame = df[names].astype(object)
    frame = frame.where(frame.notna(), None)
    return [
        tuple(_to_python(value) for value in row)
        for row in frame.itertuples(index=False, name=None)
    ]


def _to_python(value: Any) -> Any:
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    return value


async def _overwrite_table(
    conn: Connection,
    table: str,
    columns: Sequence[Tuple[str, str]],
    records: List[Tuple[Any, ...]]
) -> int:
    await conn.execute(get_create_table_query(table, list(columns)))
    await conn.execute(get_truncate_query(table))
    if records:
        await conn.executemany(get_insert_query(table, list(columns)), records)

    logger.info(f"Overwrote {table} with {len(records)} rows")

    return len(records)


# =============================================================================
# Write Operations
# =============================================================================


async def persist_tables(
    cleaned: pd.DataFrame,
    report: pd.DataFrame,
    staging_table: Optional[str] = None,
    report_table: Optional[str] = None
) -> Tuple[int, int]:
    """
    Replace the staging and report tables in one transaction.

    Empty frames still truncate their table.

    Args:
        cleaned: Output of clean_contacts.
        report: Output of build_report.
        staging_table: Staging table (default: settings.staging_table).
        report_table: Report table (default: settings.report_table).

    Returns:
        Tuple of (staging rows written, report rows written).

    Raises:
        ConfigurationError: If DATABASE_URL is not configured.
        asyncpg.PostgresError: If a statement fails; nothing is replaced.
    """
    settings = get_settings()
    staging_table = staging_table or settings.staging_table
    report_table = report_table or settings.report_table

    staging_records = dataframe_to_records(cleaned, STAGING_TABLE_COLUMNS)
    report_records = dataframe_to_records(report, REPORT_TABLE_COLUMNS)

    pool = await get_db_pool()

    async with pool.acquire() as conn:
        async with conn.transaction():
            staging_rows = await _overwrite_table(
                conn, staging_table, STAGING_TABLE_COLUMNS, staging_records
            )
            report_rows = await _overwrite_table(
                conn, report_table, REPORT_TABLE_COLUMNS, report_records
            )

    return staging_rows, report_rows


# =============================================================================
# Read Operations
# =============================================================================


async def fetch_report(
    conn: Optional[Connection] = None,
    table: Optional[str] = None
) -> List[ReportRow]:
    """
    Read the persisted KPI report.

    Args:
        conn: Connection to use; one is acquired from the pool when omitted.
        table: Report table (default: settings.report_table).

    Returns:
        ReportRow list ordered by segment, then conversion rate descending.
    """
    query = get_report_select_query(table or get_settings().report_table)

    if conn is None:
        pool = await get_db_pool()
        async with pool.acquire() as pooled:
            rows = await pooled.fetch(query)
    else:
        rows = await conn.fetch(query)

    return [ReportRow(**dict(row)) for row in rows]


__all__ = [
    'dataframe_to_records',
    'persist_tables',
    'fetch_report',
]
