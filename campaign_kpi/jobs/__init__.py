"""
Batch jobs for the campaign KPI pipeline.

- refresh.refresh_report: Full recompute of the staging and report tables, callable
  from a scheduler through the campaign-kpi-refresh console script.

Usage:

    from campaign_kpi.jobs import refresh_report

    result = await refresh_report(persist=False)
"""

from campaign_kpi.jobs.refresh import refresh_report, main

__all__ = [
    'refresh_report',
    'main',
]
