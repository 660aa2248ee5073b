'''
Campaign KPI Test Suite

Test Modules:
-------------
- test_cleaning.py: Cleaning/enrichment stage
  - Raw contract validation (columns, integer types, ternary domain)
  - Ternary, "unknown" and pdays sentinel normalization
  - Bucketing totality and boundaries, 60 second call filter

- test_kpi.py: KPI aggregation stage
  - Segment aggregates and replacement labels
  - Relative effectiveness index, zero general rate, empty input
  - Ordering and reproducibility with a fixed timestamp

- test_rounding.py: Half-away-from-zero rounding
- test_ingestion.py: CSV and BigQuery raw sources
- test_persistence.py: Transactional overwrite of the two tables
- test_pipeline.py: Orchestration outcomes and the refresh job
- test_api.py: FastAPI endpoints

Running Tests:
--------------
    pip install -e ".[test]"
    pytest campaign_kpi/tests -v

Configuration:
--------------
See conftest.py for shared fixtures and test configuration.
'''

# This file makes the tests directory a package so modules can import
# helpers from campaign_kpi.tests.conftest

__all__ = []
