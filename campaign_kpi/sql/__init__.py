"""
SQL Query Module for the campaign KPI pipeline.

Provides the SQL text used by the raw BigQuery source and by the PostgreSQL
persistence of the staging and KPI report tables.

Example usage:
    from campaign_kpi.sql import (
        REPORT_TABLE_COLUMNS,
        get_insert_query,
        get_report_select_query,
    )

    sql = get_insert_query('kpi_bank_marketing', REPORT_TABLE_COLUMNS)
"""

from campaign_kpi.sql.report_queries import (
    RAW_SELECT_COLUMNS,
    STAGING_TABLE_COLUMNS,
    REPORT_TABLE_COLUMNS,
    quote_identifier,
    get_raw_contacts_query,
    get_create_table_query,
    get_truncate_query,
    get_insert_query,
    get_report_select_query,
)

__all__ = [
    'RAW_SELECT_COLUMNS',
    'STAGING_TABLE_COLUMNS',
    'REPORT_TABLE_COLUMNS',
    'quote_identifier',
    'get_raw_contacts_query',
    'get_create_table_query',
    'get_truncate_query',
    'get_insert_query',
    'get_report_select_query',
]
