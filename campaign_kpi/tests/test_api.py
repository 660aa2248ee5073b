"""
Test Module for the HTTP API.

This module validates the FastAPI surface with FastAPI's TestClient:
- /health and / service endpoints
- POST /pipeline/run and /pipeline/run/csv status codes and payloads
- 503 when DATABASE_URL or BIGQUERY_PROJECT is missing
- GET /report and GET /report/preview

Settings and the database session are replaced through
app.dependency_overrides; the pipeline itself is patched where it is used.
"""

from typing import AsyncGenerator, Generator
from unittest.mock import AsyncMock, patch

import pandas as pd
import pytest
from fastapi.testclient import TestClient

from campaign_kpi.core.config import ConfigurationError, Settings
from campaign_kpi.core.dependencies import get_db_session, get_settings_dependency
from campaign_kpi.main import app
from campaign_kpi.models import PipelineRunResult, RawSource, ValidationError
from campaign_kpi.tests.conftest import FROZEN_NOW, create_csv_bytes, make_raw_frame


@pytest.fixture
def db_conn() -> AsyncMock:
    conn = AsyncMock()
    conn.fetch = AsyncMock(return_value=[])
    return conn


@pytest.fixture
def client(test_settings: Settings, db_conn: AsyncMock) -> Generator[TestClient, None, None]:
    async def override_db_session() -> AsyncGenerator[AsyncMock, None]:
        yield db_conn

    app.dependency_overrides[get_settings_dependency] = lambda: test_settings
    app.dependency_overrides[get_db_session] = override_db_session
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestServiceEndpoints:
    """Tests for health and root endpoints."""

    def test_health(self, client: TestClient):
        response = client.get('/health')

        assert response.status_code == 200
        assert response.json() == {'status': 'healthy'}

    def test_root(self, client: TestClient):
        body = client.get('/').json()

        assert body['name'] == 'Campaign KPI API'
        assert body['docs'] == '/docs'


class TestPipelineEndpoints:
    """Tests for the pipeline trigger."""

    def test_run_success(self, client: TestClient, test_settings: Settings):
        result = PipelineRunResult(
            success=True,
            source=RawSource.CSV,
            rows_read=6,
            rows_cleaned=5,
            rows_dropped=1,
            report_rows=33,
            report_generated_at=FROZEN_NOW,
            persisted=True,
        )

        with patch('campaign_kpi.api.pipeline.run_pipeline', new=AsyncMock(return_value=result)) as run:
            response = client.post('/pipeline/run', params={'persist': 'false'})

        assert response.status_code == 200
        assert response.json()['report_rows'] == 33
        run.assert_awaited_once_with(source=None, persist=False, settings=test_settings)

    def test_run_schema_violation_is_422(self, client: TestClient):
        result = PipelineRunResult(
            success=False,
            errors=[ValidationError(field='y', message='invalid y values', row_number=3)],
        )

        with patch('campaign_kpi.api.pipeline.run_pipeline', new=AsyncMock(return_value=result)):
            response = client.post('/pipeline/run')

        assert response.status_code == 422
        assert response.json()['detail'][0] == {
            'field': 'y',
            'message': 'invalid y values',
            'row_number': 3,
        }

    def test_run_persist_failure_is_500(self, client: TestClient):
        result = PipelineRunResult(
            success=False,
            errors=[ValidationError(field='persist', message='Failed to persist KPI tables')],
        )

        with patch('campaign_kpi.api.pipeline.run_pipeline', new=AsyncMock(return_value=result)):
            response = client.post('/pipeline/run')

        assert response.status_code == 500

    def test_run_without_database_url_is_503(
        self, client: TestClient, test_settings: Settings, sample_raw_contacts: pd.DataFrame
    ):
        settings = test_settings.model_copy(update={'database_url': None})
        with open(test_settings.raw_csv_path, 'wb') as f:
            f.write(create_csv_bytes(sample_raw_contacts))

        with patch('campaign_kpi.core.database._pool', None), \
                patch('campaign_kpi.core.database.get_settings', return_value=settings), \
                patch('campaign_kpi.services.persistence.get_settings', return_value=settings):
            response = client.post('/pipeline/run')

        assert response.status_code == 503
        detail = response.json()['detail']
        assert detail[0]['field'] == 'configuration'
        assert 'DATABASE_URL' in detail[0]['message']

    def test_run_persist_configuration_error_is_503(self, client: TestClient, sample_raw_contacts: pd.DataFrame):
        with patch(
            'campaign_kpi.services.pipeline.persist_tables',
            new=AsyncMock(side_effect=ConfigurationError('DATABASE_URL not configured'))
        ):
            response = client.post(
                '/pipeline/run/csv',
                files={'file': ('bank.csv', create_csv_bytes(sample_raw_contacts), 'text/csv')},
            )

        assert response.status_code == 503

    def test_run_bigquery_without_project_is_503(self, client: TestClient, test_settings: Settings):
        test_settings.raw_source = RawSource.BIGQUERY
        test_settings.bigquery_project = None

        response = client.post('/pipeline/run', params={'persist': 'false'})

        assert response.status_code == 503
        assert 'BIGQUERY_PROJECT' in response.json()['detail'][0]['message']

    def test_run_csv_upload(self, client: TestClient, sample_raw_contacts: pd.DataFrame):
        with patch('campaign_kpi.services.pipeline.persist_tables', new=AsyncMock(return_value=(5, 33))):
            response = client.post(
                '/pipeline/run/csv',
                files={'file': ('bank.csv', create_csv_bytes(sample_raw_contacts, sep=';'), 'text/csv')},
            )

        assert response.status_code == 200
        body = response.json()
        assert body['success'] is True
        assert body['persisted'] is True
        assert body['rows_cleaned'] == 5
        assert body['report_rows'] == 33

    def test_run_csv_invalid_upload(self, client: TestClient):
        raw = make_raw_frame([{'housing': 'sometimes'}])

        response = client.post(
            '/pipeline/run/csv',
            params={'persist': 'false'},
            files={'file': ('bank.csv', create_csv_bytes(raw), 'text/csv')},
        )

        assert response.status_code == 422
        assert response.json()['detail'][0]['field'] == 'housing'


class TestReportEndpoints:
    """Tests for report reads."""

    def test_get_report(self, client: TestClient, db_conn: AsyncMock):
        db_conn.fetch.return_value = [{
            'segment': 'General',
            'segment_value': 'Todos',
            'total_contacts': 2,
            'conversions': 1,
            'conversion_rate_pct': 50.0,
            'relative_effectiveness_index': 1.0,
            'report_generated_at': FROZEN_NOW,
        }]

        response = client.get('/report')

        assert response.status_code == 200
        rows = response.json()
        assert len(rows) == 1
        assert rows[0]['segment_value'] == 'Todos'
        assert rows[0]['conversion_rate_pct'] == 50.0

    def test_get_report_failure(self, client: TestClient, db_conn: AsyncMock):
        db_conn.fetch.side_effect = RuntimeError('relation does not exist')

        response = client.get('/report')

        assert response.status_code == 500
        assert 'relation does not exist' in response.json()['detail']

    def test_preview(self, client: TestClient, test_settings: Settings, three_row_raw: pd.DataFrame):
        with open(test_settings.raw_csv_path, 'wb') as f:
            f.write(create_csv_bytes(three_row_raw, sep=';'))

        response = client.get('/report/preview')

        assert response.status_code == 200
        rows = response.json()
        general = [r for r in rows if r['segment'] == 'General']
        assert general[0]['total_contacts'] == 2
        assert general[0]['conversion_rate_pct'] == 50.0
        assert general[0]['relative_effectiveness_index'] == 1.0

    def test_preview_schema_violation(self, client: TestClient, test_settings: Settings):
        raw = make_raw_frame([{}]).drop(columns=['duration'])
        with open(test_settings.raw_csv_path, 'wb') as f:
            f.write(create_csv_bytes(raw))

        response = client.get('/report/preview')

        assert response.status_code == 422
        assert response.json()['detail'][0]['field'] == 'duration'

    def test_preview_bigquery_without_project(self, client: TestClient, test_settings: Settings):
        test_settings.raw_source = RawSource.BIGQUERY
        test_settings.bigquery_project = None

        response = client.get('/report/preview')

        assert response.status_code == 503


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
