"""
SQL text for the raw source read and the two materialized tables.

- BigQuery: SELECT of the raw contact table (reserved words quoted)
- PostgreSQL: CREATE / TRUNCATE / INSERT for staging_bank_marketing and
  kpi_bank_marketing, plus the ordered report read-back

Both materialized tables are replaced wholesale on every run; there is no
upsert key. PostgreSQL statements use asyncpg's $n placeholders.
"""

from typing import List, Tuple

# Raw columns as exported; default, day and month are reserved in BigQuery
RAW_SELECT_COLUMNS: List[str] = [
    'age', 'job', 'marital', 'education', '`default`', 'balance',
    'housing', 'loan', 'contact', '`day`', '`month`', 'duration',
    'campaign', 'pdays', 'previous', 'poutcome', 'y',
]

STAGING_TABLE_COLUMNS: List[Tuple[str, str]] = [
    ('age', 'INTEGER NOT NULL'),
    ('job_type', 'TEXT'),
    ('marital_status', 'TEXT'),
    ('education_level', 'TEXT'),
    ('account_balance_eur', 'BIGINT NOT NULL'),
    ('has_default', 'BOOLEAN'),
    ('has_housing_loan', 'BOOLEAN'),
    ('has_personal_loan', 'BOOLEAN'),
    ('contact_type', 'TEXT'),
    ('contact_day', 'INTEGER NOT NULL'),
    ('contact_month', 'TEXT'),
    ('call_duration_minutes', 'DOUBLE PRECISION NOT NULL'),
    ('call_duration_seconds', 'INTEGER NOT NULL'),
    ('num_contacts_campaign', 'INTEGER NOT NULL'),
    ('days_since_last_contact', 'INTEGER'),
    ('num_contacts_previous', 'INTEGER NOT NULL'),
    ('previous_outcome', 'TEXT'),
    ('subscribed', 'BOOLEAN'),
    ('age_group', 'TEXT NOT NULL'),
    ('balance_category', 'TEXT NOT NULL'),
    ('campaign_intensity', 'TEXT NOT NULL'),
]

REPORT_TABLE_COLUMNS: List[Tuple[str, str]] = [
    ('segment', 'TEXT NOT NULL'),
    ('segment_value', 'TEXT'),
    ('total_contacts', 'INTEGER NOT NULL'),
    ('conversions', 'INTEGER NOT NULL'),
    ('conversion_rate_pct', 'DOUBLE PRECISION NOT NULL'),
    ('relative_effectiveness_index', 'DOUBLE PRECISION'),
    ('report_generated_at', 'TIMESTAMPTZ NOT NULL'),
]


def quote_identifier(name: str) -> str:
    """
    Quote a possibly schema-qualified PostgreSQL identifier.

    >>> quote_identifier('analytics.kpi_bank_marketing')
    '"analytics"."kpi_bank_marketing"'
    """
    return '.'.join('"' + part.replace('"', '""') + '"' for part in name.split('.'))


def get_raw_contacts_query(table_name: str) -> str:
    """BigQuery SELECT of the raw contact columns from table_name."""
    return f"SELECT {', '.join(RAW_SELECT_COLUMNS)} FROM `{table_name}`"


def get_create_table_query(table: str, columns: List[Tuple[str, str]]) -> str:
    column_defs = ',\n        '.join(f'{name} {sql_type}' for name, sql_type in columns)
    return f"""
    CREATE TABLE IF NOT EXISTS {quote_identifier(table)} (
        {column_defs}
    )
    """


def get_truncate_query(table: str) -> str:
    return f"TRUNCATE TABLE {quote_identifier(table)}"


def get_insert_query(table: str, columns: List[Tuple[str, str]]) -> str:
    names = ', '.join(name for name, _ in columns)
    placeholders = ', '.join(f'${position}' for position in range(1, len(columns) + 1))
    return f"INSERT INTO {quote_identifier(table)} ({names}) VALUES ({placeholders})"


def get_report_select_query(table: str) -> str:
    """Read the report back in presentation order."""
    names = ', '.join(name for name, _ in REPORT_TABLE_COLUMNS)
    return f"""
    SELECT {names}
    FROM {quote_identifier(table)}
    ORDER BY segment, conversion_rate_pct DESC, segment_value NULLS LAST
    """
