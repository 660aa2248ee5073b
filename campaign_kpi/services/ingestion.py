"""
Raw Contact Log Ingestion Service

This module loads the raw bank-marketing contact table, the external input of
the pipeline, from one of two sources with an identical column contract:

- CSV: the UCI bank-marketing export (bank-full.csv, ';'-separated) or any
  ','-separated file with the same columns
- BigQuery: the seeded raw_bank_marketing table

Loading does not validate or transform anything; the cleaning stage owns the
schema checks. The only failure raised here is an empty CSV.
"""

from pathlib import Path
from typing import BinaryIO, Optional, Union
import io
import logging

import pandas as pd
from google.cloud import bigquery

from campaign_kpi.core.config import ConfigurationError, Settings, get_settings
from campaign_kpi.models import RawSource, ValidationError
from campaign_kpi.services.cleaning import SchemaViolationError
from campaign_kpi.sql import get_raw_contacts_query

# Configure module logger
logger = logging.getLogger(__name__)

CsvInput = Union[str, Path, bytes, BinaryIO]

CSV_SEPARATORS = (',', ';')


def _read_bytes(file: CsvInput) -> bytes:
    if isinstance(file, (str, Path)):
        return Path(file).read_bytes()
    if isinstance(file, bytes):
        return file
    content = file.read()
    if isinstance(content, str):
        return content.encode('utf-8')
    return content


def detect_separator(header_line: str) -> str:
    """
    Pick the field separator of a CSV from its header line.

    >>> detect_separator('"age";"job";"marital"')
    ';'
    """
    return max(CSV_SEPARATORS, key=header_line.count)


# =============================================================================
# LOADERS
# =============================================================================

def load_raw_csv(file: CsvInput) -> pd.DataFrame:
    """
    Parse a raw contact CSV.

    Args:
        file: Path, raw bytes, or binary file object containing CSV data

    Returns:
        DataFrame with the raw columns as found in the file

    Raises:
        SchemaViolationError: If the file is empty
        FileNotFoundError: If a path does not exist
    """
    content = _read_bytes(file)

    if not content.strip():
        raise SchemaViolationError([ValidationError(
            field='file',
            message='CSV file is empty or contains no header',
            row_number=None
        )])

    header_line = content.splitlines()[0].decode('utf-8', errors='replace')
    separator = detect_separator(header_line)

    df = pd.read_csv(io.BytesIO(content), sep=separator)

    logger.info(f"Parsed CSV with {len(df)} rows and {len(df.columns)} columns (sep={separator!r})")

    return df


def load_raw_bigquery(project: str, table_name: str) -> pd.DataFrame:
    """
    Query the raw contact table from BigQuery.

    Args:
        project: BigQuery project ID
        table_name: Table name, optionally qualified as dataset.table

    Returns:
        DataFrame with the raw columns
    """
    client = bigquery.Client(project=project)

    query = get_raw_contacts_query(table_name)
    logger.info(f"Executing BigQuery query on {table_name}")

    df = client.query(query).result().to_dataframe()

    logger.info(f"BigQuery returned {len(df)} rows")

    return df


def load_raw_contacts(
    source: Optional[RawSource] = None,
    file: Optional[CsvInput] = None,
    settings: Optional[Settings] = None
) -> pd.DataFrame:
    """
    Load the raw contact table from the configured or given source.

    Args:
        source: Source to read from (default: settings.raw_source)
        file: CSV input for the csv source (default: settings.raw_csv_path)
        settings: Settings to read defaults from (default: get_settings())

    Returns:
        DataFrame with the raw columns

    Raises:
        ConfigurationError: If the BigQuery source is selected without a project
    """
    settings = settings or get_settings()
    source = RawSource(source or settings.raw_source)

    if source == RawSource.CSV:
        return load_raw_csv(file if file is not None else settings.raw_csv_path)

    if not settings.bigquery_project:
        raise ConfigurationError(
            "BIGQUERY_PROJECT not configured. Set this environment variable to read the raw table from BigQuery."
        )
    return load_raw_bigquery(settings.bigquery_project, settings.bigquery_raw_table)


# =============================================================================
# MODULE EXPORTS
# =============================================================================

__all__ = [
    'CSV_SEPARATORS',
    'detect_separator',
    'load_raw_csv',
    'load_raw_bigquery',
    'load_raw_contacts',
]
