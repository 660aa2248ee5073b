"""
Enumeration definitions for the campaign KPI pipeline.

All enums inherit from both `str` and `Enum` so the labels serialize as plain
strings in Pydantic models and compare equal to the raw values stored in
pandas columns.

The label strings are part of the output contract: dashboards read the
report table and filter on these exact values, so they must not be
reworded or translated.
"""

from enum import Enum


class Ternary(str, Enum):
    """
    Raw literals of the three-valued yes/no/unknown fields.

    Applies to default, housing, loan and the subscription outcome y.
    YES maps to True, NO to False, UNKNOWN to an absent value.
    """
    YES = "yes"
    NO = "no"
    UNKNOWN = "unknown"


class AgeGroup(str, Enum):
    """Age buckets, left-inclusive on the lower bound."""
    UNDER_30 = "18-29"
    THIRTIES = "30-39"
    FORTIES = "40-49"
    FIFTIES = "50-59"
    SIXTY_PLUS = "60+"


class BalanceCategory(str, Enum):
    """
    Account balance tiers on the signed yearly average balance.

    NEGATIVE indicates an overdraft; the upper tiers indicate savings capacity.
    """
    NEGATIVE = "Negative"
    ZERO = "Zero"
    LOW = "Low (1-1K)"
    MEDIUM = "Medium (1K-5K)"
    HIGH = "High (5K-10K)"
    VERY_HIGH = "Very High (10K+)"


class CampaignIntensity(str, Enum):
    """Number of contacts performed during this campaign for the client."""
    SINGLE = "Single Contact"
    LOW = "Low (2-3)"
    MEDIUM = "Medium (4-5)"
    HIGH = "High (6+)"


class Segment(str, Enum):
    """
    Segmentation dimensions of the KPI report.

    GENERAL is the degenerate dimension with a single value covering all rows.
    """
    GENERAL = "General"
    AGE_GROUP = "Grupo de Edad"
    OCCUPATION = "Ocupación"
    EDUCATION = "Nivel Educativo"
    MARITAL_STATUS = "Estado Civil"
    BALANCE = "Acumulado en Cuenta"
    CAMPAIGN_INTENSITY = "Intensidad de Campaña"
    CHANNEL = "Canal"
    PREVIOUS_OUTCOME = "Resultado Campaña Anterior"
    CONTACT_MONTH = "Mes de Contacto"


class RawSource(str, Enum):
    """Where the raw contact log is loaded from."""
    CSV = "csv"
    BIGQUERY = "bigquery"


# Segment value of the single GENERAL group
GENERAL_SEGMENT_VALUE = "Todos"

# Replacement labels for absent categorical values in the report
UNKNOWN_LABEL = "Desconocido"
NO_PRIOR_CAMPAIGN_LABEL = "Sin Campaña Previa"
