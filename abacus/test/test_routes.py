"""
Tests for the JSON API
"""

import threading
from decimal import Decimal
from io import BytesIO

from openpyxl import load_workbook

from abacus.buisness.assets.asset_context import AssetScheduleContext
from abacus.services.spreadsheet.report_export_service import ReportExportService
from conftest import asset_candidate


def create_asset(client, **overrides):
    response = client.post('/api/assets', json=asset_candidate(**overrides))
    assert response.status_code == 201, response.get_json()
    return response.get_json()


def test_create_asset_returns_schedule(client):
    body = create_asset(client)

    assert body['name'] == 'Engineering Workstation'
    assert body['cost'] == '2000.00'
    assert body['date_placed_in_service'] == '2022-01-15'
    assert body['is_disposed'] is False
    assert body['disposal_gain_loss'] is None
    assert [entry['year'] for entry in body['schedule']] == [2022, 2023, 2024, 2025, 2026]
    assert body['schedule'][-1]['ending_book_value'] == '200.00'


def test_create_asset_validation_errors(client):
    response = client.post('/api/assets', json=asset_candidate(cost='0', useful_life_years=1.5))

    assert response.status_code == 400
    errors = response.get_json()['errors']
    assert errors['cost'] == "Cost must be greater than 0"
    assert 'useful_life_years' in errors


def test_non_object_body_is_rejected(client):
    response = client.post('/api/assets', json=['not', 'an', 'object'])
    assert response.status_code == 400
    assert 'body' in response.get_json()['errors']


def test_get_update_and_list(client):
    asset_id = create_asset(client)['id']

    response = client.put(f'/api/assets/{asset_id}', json={'useful_life_years': 4})
    assert response.status_code == 200
    assert len(response.get_json()['schedule']) == 4

    response = client.get(f'/api/assets/{asset_id}')
    assert response.status_code == 200
    assert response.get_json()['useful_life_years'] == 4

    listed = client.get('/api/assets').get_json()
    assert [asset['id'] for asset in listed] == [asset_id]


def test_missing_asset_is_404(client):
    assert client.get('/api/assets/999').status_code == 404
    assert client.put('/api/assets/999', json={'name': 'x'}).status_code == 404
    assert client.delete('/api/assets/999').status_code == 404


def test_dispose_and_reinstate(client):
    asset_id = create_asset(client)['id']

    response = client.post(f'/api/assets/{asset_id}/dispose',
                           json={'disposed_date': '2024-05-01', 'disposed_value': '700'})
    assert response.status_code == 200
    body = response.get_json()
    assert body['is_disposed'] is True
    assert [entry['year'] for entry in body['schedule']] == [2022, 2023, 2024]
    assert body['book_value_at_disposal'] == '920.00'
    assert body['disposal_gain_loss'] == '-220.00'

    response = client.post(f'/api/assets/{asset_id}/dispose', json={'disposed_date': '2020-01-01'})
    assert response.status_code == 400

    response = client.post(f'/api/assets/{asset_id}/reinstate')
    assert response.status_code == 200
    assert len(response.get_json()['schedule']) == 5


def test_delete_asset(client):
    asset_id = create_asset(client)['id']
    response = client.delete(f'/api/assets/{asset_id}')
    assert response.get_json() == {'deleted': asset_id}
    assert client.get(f'/api/assets/{asset_id}').status_code == 404


def test_category_routes(client):
    response = client.post('/api/categories', json={'name': 'Vehicles', 'default_useful_life': 5})
    assert response.status_code == 201
    category_id = response.get_json()['id']

    assert client.post('/api/categories', json={'name': 'Vehicles'}).status_code == 400

    create_asset(client, category_id=category_id)
    listed = client.get('/api/categories').get_json()
    assert listed[0]['name'] == 'Vehicles'
    assert listed[0]['asset_count'] == 1

    response = client.delete(f'/api/categories/{category_id}')
    assert response.status_code == 409
    assert "1 asset(s)" in response.get_json()['error']

    response = client.put(f'/api/categories/{category_id}', json={'name': 'Fleet'})
    assert response.get_json()['name'] == 'Fleet'

    response = client.post(f'/api/categories/{category_id}/move-and-delete', json={'target_category_id': None})
    assert response.get_json() == {'deleted': category_id, 'moved': 1}
    assert client.delete(f'/api/categories/{category_id}').status_code == 404


def test_dashboard_and_annual_summary(client):
    create_asset(client)

    stats = client.get('/api/dashboard?year=2024').get_json()
    assert stats == {
        'year': 2024,
        'total_assets': 1,
        'total_cost': '2000.00',
        'total_book_value': '920.00',
        'current_year_depreciation': '360.00',
    }

    # Defaults to the current year of the injected clock
    assert client.get('/api/dashboard').get_json()['year'] == 2026

    summary = client.get('/api/reports/annual-summary').get_json()
    assert [row['year'] for row in summary] == [2022, 2023, 2024, 2025, 2026]
    assert summary[0] == {'year': 2022, 'total_depreciation': '360.00', 'asset_count': 1}


def test_import_upload(client):
    data = {'file': (BytesIO(ReportExportService.build_template()), 'assets.xlsx')}
    response = client.post('/api/import', data=data, content_type='multipart/form-data')

    assert response.status_code == 200
    body = response.get_json()
    assert body['imported'] == 1
    assert body['errors'] == []


def test_import_without_file(client):
    response = client.post('/api/import', data={}, content_type='multipart/form-data')
    assert response.status_code == 400
    assert 'file' in response.get_json()['errors']


def test_export_downloads(client):
    create_asset(client)

    response = client.get('/api/export/template')
    assert response.status_code == 200
    assert 'attachment' in response.headers['Content-Disposition']

    response = client.get('/api/export/report?year=2025')
    assert response.status_code == 200
    workbook = load_workbook(BytesIO(response.data))
    assert workbook.sheetnames == ["Assets", "Depreciation Schedule", "Annual Summary"]


def test_report_defaults_to_application_clock(client):
    create_asset(client)

    response = client.get('/api/export/report')
    assert response.status_code == 200
    assert 'depreciation_report_2026.xlsx' in response.headers['Content-Disposition']

    assets = list(load_workbook(BytesIO(response.data))["Assets"].iter_rows(min_row=2, values_only=True))
    # Current Book Value for 2026, the fixture's today, is the salvage value
    assert Decimal(str(assets[0][6])) == Decimal('200.00')


class RecordingLock:
    """Re-entrant lock that reports whether it is held"""

    def __init__(self):
        self._lock = threading.RLock()
        self.depth = 0

    def __enter__(self):
        self._lock.acquire()
        self.depth += 1
        return self

    def __exit__(self, *exc_info):
        self.depth -= 1
        self._lock.release()


def test_asset_responses_are_built_under_coordinator_lock(app, client, monkeypatch):
    lock = RecordingLock()
    app.extensions['abacus'].lock = lock

    held = []
    original_to_dict = AssetScheduleContext.to_dict

    def recording_to_dict(self, include_schedule=True):
        held.append(lock.depth > 0)
        return original_to_dict(self, include_schedule)

    monkeypatch.setattr(AssetScheduleContext, 'to_dict', recording_to_dict)

    asset_id = create_asset(client)['id']
    client.get(f'/api/assets/{asset_id}')
    client.put(f'/api/assets/{asset_id}', json={'notes': 'Desk 4'})
    client.post(f'/api/assets/{asset_id}/dispose', json={'disposed_date': '2024-01-01'})
    client.post(f'/api/assets/{asset_id}/reinstate')
    client.get('/api/assets')

    assert len(held) == 6
    assert all(held), held
    assert lock.depth == 0
