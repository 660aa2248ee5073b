"""
Cleaning/Enrichment stage of the campaign KPI pipeline.

Turns the raw contact log (one row per marketing contact attempt) into the
cleaned staging record set consumed by the KPI aggregation stage.

Transformations:
- 'unknown' categorical literals -> missing (job, marital, education, contact, poutcome)
- yes/no/unknown flags -> nullable booleans (missing means unknown, not False)
- pdays == -1 ("never contacted") -> missing
- call duration exposed in seconds and in minutes (2 decimals)
- derived segmentation fields: age_group, balance_category, campaign_intensity
- short-call filter: rows with duration < 60 seconds are dropped

Calls under a minute are immediate rejections, wrong numbers or hang-ups and
convert at close to zero, so they are excluded from every KPI.

Validation is strict: a raw table with missing columns, non-integral numeric
values or out-of-domain flag literals raises SchemaViolationError instead of
being coerced.
"""

import logging
from typing import List

import numpy as np
import pandas as pd

from campaign_kpi.models import (
    AgeGroup,
    BalanceCategory,
    CampaignIntensity,
    Ternary,
    ValidationError,
)
from campaign_kpi.services.rounding import round_half_up

# Configure module logger
logger = logging.getLogger(__name__)

# =============================================================================
# CONSTANTS - Raw Contract
# =============================================================================

RAW_REQUIRED_COLUMNS: List[str] = [
    'age',
    'job',
    'marital',
    'education',
    'default',
    'balance',
    'housing',
    'loan',
    'contact',
    'day',
    'month',
    'duration',
    'campaign',
    'pdays',
    'previous',
    'poutcome',
    'y',
]

INTEGER_COLUMNS: List[str] = [
    'age',
    'balance',
    'day',
    'duration',
    'campaign',
    'pdays',
    'previous',
]

TERNARY_COLUMNS: List[str] = ['default', 'housing', 'loan', 'y']

UNKNOWN_CATEGORICAL_COLUMNS: List[str] = ['job', 'marital', 'education', 'contact', 'poutcome']

# =============================================================================
# CONSTANTS - Business Rules
# =============================================================================

NEVER_CONTACTED_PDAYS: int = -1

MIN_CALL_DURATION_SECONDS: int = 60

CLEANED_COLUMNS: List[str] = [
    'age',
    'job_type',
    'marital_status',
    'education_level',
    'account_balance_eur',
    'has_default',
    'has_housing_loan',
    'has_personal_loan',
    'contact_type',
    'contact_day',
    'contact_month',
    'call_duration_minutes',
    'call_duration_seconds',
    'num_contacts_campaign',
    'days_since_last_contact',
    'num_contacts_previous',
    'previous_outcome',
    'subscribed',
    'age_group',
    'balance_category',
    'campaign_intensity',
]


class SchemaViolationError(ValueError):
    """
    Raised when the raw contact table does not satisfy the input contract.

    Attributes:
        errors: The individual validation errors found.
    """

    def __init__(self, errors: List[ValidationError]):
        self.errors = errors
        summary = '; '.join(error.message for error in errors[:5])
        super().__init__(f"Raw contact table violates the input schema: {summary}")


def _normalize_column_names(df: pd.DataFrame) -> pd.DataFrame:
    """Return a copy with lowercase, stripped column names and a positional index."""
    df_normalized = df.reset_index(drop=True)
    df_normalized.columns = df_normalized.columns.astype(str).str.lower().str.strip()
    return df_normalized


def _first_row_number(mask: pd.Series) -> int:
    """1-based position of the first True value in a boolean mask."""
    return int(np.flatnonzero(mask.to_numpy())[0]) + 1


# =============================================================================
# VALIDATION FUNCTIONS
# =============================================================================

def validate_columns(df: pd.DataFrame) -> List[ValidationError]:
    """
    Validate that every raw column is present.

    Extra columns are allowed and ignored by the cleaning stage. Matching is
    case-insensitive.

    Args:
        df: The raw contact DataFrame

    Returns:
        List of ValidationError objects for any missing columns
    """
    errors: List[ValidationError] = []

    df_columns = set(df.columns.astype(str).str.lower().str.strip())
    for col in RAW_REQUIRED_COLUMNS:
        if col not in df_columns:
            errors.append(ValidationError(
                field=col,
                message=f"Required column '{col}' is missing from the raw contact table",
                row_number=None
            ))

    return errors


def validate_data_types(df: pd.DataFrame) -> List[ValidationError]:
    """
    Validate that integer columns hold integral, non-null numbers.

    Args:
        df: The raw contact DataFrame (column names already normalized)

    Returns:
        List of ValidationError objects, one per offending column
    """
    errors: List[ValidationError] = []

    for col in INTEGER_COLUMNS:
        if col not in df.columns:
            continue

        numeric_series = pd.to_numeric(df[col], errors='coerce')
        invalid_mask = numeric_series.isna() | (numeric_series % 1 != 0)
        invalid_count = int(invalid_mask.sum())

        if invalid_count > 0:
            invalid_values = df[col][invalid_mask].head(5).tolist()
            errors.append(ValidationError(
                field=col,
                message=(
                    f"Found {invalid_count} missing or non-integer values in column "
                    f"'{col}': {invalid_values}"
                ),
                row_number=_first_row_number(invalid_mask)
            ))

    return errors


def validate_ternary_values(df: pd.DataFrame) -> List[ValidationError]:
    """
    Validate that yes/no/unknown flags contain only those literals.

    Missing values are accepted and treated like 'unknown'.

    Args:
        df: The raw contact DataFrame (column names already normalized)

    Returns:
        List of ValidationError objects, one per offending column
    """
    errors: List[ValidationError] = []
    valid_literals = {t.value for t in Ternary}

    for col in TERNARY_COLUMNS:
        if col not in df.columns:
            continue

        values = df[col]
        # Stricter than an `else null` coercion: casing or typos in the export
        # ("Yes", "n") are rejected rather than read as unknown
        invalid_mask = values.notna() & ~values.astype(str).isin(valid_literals)
        invalid_count = int(invalid_mask.sum())

        if invalid_count > 0:
            invalid_values = values[invalid_mask].unique()[:5].tolist()
            errors.append(ValidationError(
                field=col,
                message=(
                    f"Found {invalid_count} invalid {col} values: {invalid_values}. "
                    f"Valid values are: {sorted(valid_literals)}"
                ),
                row_number=_first_row_number(invalid_mask)
            ))

    return errors


def validate_raw_contacts(df: pd.DataFrame) -> List[ValidationError]:
    """
    Run every raw contract check.

    Type and domain checks only run once all columns are present.
    """
    df_normalized = _normalize_column_names(df)

    errors = validate_columns(df_normalized)
    if errors:
        return errors

    errors.extend(validate_data_types(df_normalized))
    errors.extend(validate_ternary_values(df_normalized))
    return errors


# =============================================================================
# FIELD TRANSFORMATIONS
# =============================================================================

def coerce_ternary(values: pd.Series) -> pd.Series:
    """
    Map yes/no/unknown literals to a nullable boolean Series.

    Exactly 'yes' -> True, exactly 'no' -> False, anything else -> <NA>.
    """
    mapping = {Ternary.YES.value: True, Ternary.NO.value: False}
    return values.map(mapping).astype('boolean')


def normalize_unknown(values: pd.Series) -> pd.Series:
    """Replace the literal 'unknown' with a missing value."""
    return values.mask(values == Ternary.UNKNOWN.value)


def normalize_pdays(pdays: pd.Series) -> pd.Series:
    """Days since last contact as nullable Int64, -1 ("never contacted") -> <NA>."""
    days = pd.to_numeric(pdays).astype('Int64')
    return days.mask(days == NEVER_CONTACTED_PDAYS)


def seconds_to_minutes(seconds: pd.Series) -> pd.Series:
    return round_half_up(seconds / 60.0, 2)


def assign_age_group(age: pd.Series) -> pd.Series:
    """
    Bucket ages into AgeGroup labels.

    Buckets are left-inclusive; ages under 30 (including under 18) fall in
    "18-29" and everything from 60 up in "60+".
    """
    conditions = [age < 30, age < 40, age < 50, age < 60]
    choices = [
        AgeGroup.UNDER_30.value,
        AgeGroup.THIRTIES.value,
        AgeGroup.FORTIES.value,
        AgeGroup.FIFTIES.value,
    ]
    labels = np.select(conditions, choices, default=AgeGroup.SIXTY_PLUS.value)
    return pd.Series(labels, index=age.index, dtype=object)


def assign_balance_category(balance: pd.Series) -> pd.Series:
    """
    Bucket signed account balances into BalanceCategory labels.

    Upper bounds are inclusive: 1000 is Low, 1001 is Medium.
    """
    conditions = [
        balance < 0,
        balance == 0,
        balance <= 1000,
        balance <= 5000,
        balance <= 10000,
    ]
    choices = [
        BalanceCategory.NEGATIVE.value,
        BalanceCategory.ZERO.value,
        BalanceCategory.LOW.value,
        BalanceCategory.MEDIUM.value,
        BalanceCategory.HIGH.value,
    ]
    labels = np.select(conditions, choices, default=BalanceCategory.VERY_HIGH.value)
    return pd.Series(labels, index=balance.index, dtype=object)


def assign_campaign_intensity(campaign: pd.Series) -> pd.Series:
    """
    Bucket the number of contacts in this campaign into CampaignIntensity labels.

    Only exactly one contact is "Single Contact"; counts below one (not
    produced by the loader) take the "<= 3" branch.
    """
    conditions = [campaign == 1, campaign <= 3, campaign <= 5]
    choices = [
        CampaignIntensity.SINGLE.value,
        CampaignIntensity.LOW.value,
        CampaignIntensity.MEDIUM.value,
    ]
    labels = np.select(conditions, choices, default=CampaignIntensity.HIGH.value)
    return pd.Series(labels, index=campaign.index, dtype=object)


def filter_short_calls(
    cleaned: pd.DataFrame,
    min_seconds: int = MIN_CALL_DURATION_SECONDS
) -> pd.DataFrame:
    """Drop contacts whose call lasted less than min_seconds."""
    keep_mask = cleaned['call_duration_seconds'] >= min_seconds
    return cleaned[keep_mask].reset_index(drop=True)


# =============================================================================
# STAGE ENTRY POINT
# =============================================================================

def clean_contacts(raw: pd.DataFrame) -> pd.DataFrame:
    """
    Clean and enrich the raw contact log.

    Derived fields are computed for every raw row before the short-call
    filter runs; dropped rows never reach the output either way.

    Args:
        raw: Raw contact events with the columns in RAW_REQUIRED_COLUMNS

    Returns:
        DataFrame with CLEANED_COLUMNS, one row per raw event lasting at
        least MIN_CALL_DURATION_SECONDS

    Raises:
        SchemaViolationError: If the raw table violates the input contract
    """
    errors = validate_raw_contacts(raw)
    if errors:
        logger.error(f"Raw contact table rejected with {len(errors)} validation errors")
        raise SchemaViolationError(errors)

    df = _normalize_column_names(raw)
    integers = {col: pd.to_numeric(df[col]).astype('int64') for col in INTEGER_COLUMNS}
    categoricals = {col: normalize_unknown(df[col]) for col in UNKNOWN_CATEGORICAL_COLUMNS}

    cleaned = pd.DataFrame({
        'age': integers['age'],
        'job_type': categoricals['job'],
        'marital_status': categoricals['marital'],
        'education_level': categoricals['education'],
        'account_balance_eur': integers['balance'],
        'has_default': coerce_ternary(df['default']),
        'has_housing_loan': coerce_ternary(df['housing']),
        'has_personal_loan': coerce_ternary(df['loan']),
        'contact_type': categoricals['contact'],
        'contact_day': integers['day'],
        'contact_month': df['month'],
        'call_duration_minutes': seconds_to_minutes(integers['duration']),
        'call_duration_seconds': integers['duration'],
        'num_contacts_campaign': integers['campaign'],
        'days_since_last_contact': normalize_pdays(integers['pdays']),
        'num_contacts_previous': integers['previous'],
        'previous_outcome': categoricals['poutcome'],
        'subscribed': coerce_ternary(df['y']),
        'age_group': assign_age_group(integers['age']),
        'balance_category': assign_balance_category(integers['balance']),
        'campaign_intensity': assign_campaign_intensity(integers['campaign']),
    }, index=df.index, columns=CLEANED_COLUMNS)

    result = filter_short_calls(cleaned)

    logger.info(
        f"Cleaned contact log: {len(raw)} rows read, {len(result)} kept, "
        f"{len(raw) - len(result)} dropped as calls under {MIN_CALL_DURATION_SECONDS}s"
    )

    return result


# =============================================================================
# MODULE EXPORTS
# =============================================================================

__all__ = [
    # Constants
    'RAW_REQUIRED_COLUMNS',
    'INTEGER_COLUMNS',
    'TERNARY_COLUMNS',
    'UNKNOWN_CATEGORICAL_COLUMNS',
    'NEVER_CONTACTED_PDAYS',
    'MIN_CALL_DURATION_SECONDS',
    'CLEANED_COLUMNS',
    # Errors
    'SchemaViolationError',
    # Validation functions
    'validate_columns',
    'validate_data_types',
    'validate_ternary_values',
    'validate_raw_contacts',
    # Field transformations
    'coerce_ternary',
    'normalize_unknown',
    'normalize_pdays',
    'seconds_to_minutes',
    'assign_age_group',
    'assign_balance_category',
    'assign_campaign_intensity',
    'filter_short_calls',
    # Stage entry point
    'clean_contacts',
]
