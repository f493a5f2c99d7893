"""
Tests for the asset lifecycle coordinator
"""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from abacus import db
from abacus.buisness.core.exceptions import AssetNotFoundError, FieldValidationError, StorageError
from abacus.data.core.asset_info.asset import Asset
from abacus.data.core.asset_info.depreciation_entry import DepreciationEntry
from conftest import asset_candidate


def stored_rows(asset_id):
    """Schedule rows straight from the table, in year order"""
    return (
        DepreciationEntry.query.filter_by(asset_id=asset_id)
        .order_by(DepreciationEntry.year)
        .all()
    )


def row_ids(asset_id):
    return [row.id for row in stored_rows(asset_id)]


def test_create_stores_asset_and_schedule(coordinator):
    asset = coordinator.create(asset_candidate())

    assert asset.id is not None
    assert asset.cost == Decimal('2000.00')
    rows = stored_rows(asset.id)
    assert [row.year for row in rows] == [2022, 2023, 2024, 2025, 2026]
    assert rows[-1].ending_book_value == Decimal('200.00')


def test_create_rejects_invalid_candidate_without_writing(coordinator):
    with pytest.raises(FieldValidationError) as excinfo:
        coordinator.create(asset_candidate(cost='0', salvage_value='5'))

    assert 'cost' in excinfo.value.errors
    assert Asset.query.count() == 0
    assert DepreciationEntry.query.count() == 0


def test_create_rejects_unknown_category(coordinator):
    with pytest.raises(FieldValidationError) as excinfo:
        coordinator.create(asset_candidate(category_id=999))
    assert excinfo.value.errors == {'category_id': "Category not found"}


def test_create_with_category(coordinator):
    category = coordinator.categories.create({'name': 'Computers'})
    asset = coordinator.create(asset_candidate(category_id=category.id))
    assert asset.category.name == 'Computers'


def test_get_asset_missing(coordinator):
    with pytest.raises(AssetNotFoundError):
        coordinator.get_asset(12345)


def test_update_non_financial_field_keeps_schedule(coordinator):
    asset = coordinator.create(asset_candidate())
    before = row_ids(asset.id)

    updated = coordinator.update(asset.id, {'name': 'Renamed Workstation', 'notes': 'moved to lab'})

    assert updated.name == 'Renamed Workstation'
    assert updated.notes == 'moved to lab'
    assert row_ids(asset.id) == before, "Schedule rows should not be rewritten"


def test_update_financial_field_regenerates_schedule(coordinator):
    asset = coordinator.create(asset_candidate())

    coordinator.update(asset.id, {'useful_life_years': 3, 'salvage_value': '500'})

    rows = stored_rows(asset.id)
    assert [row.year for row in rows] == [2022, 2023, 2024]
    assert all(row.depreciation_expense == Decimal('500.00') for row in rows)
    assert rows[-1].ending_book_value == Decimal('500.00')


def test_update_merges_with_stored_record(coordinator):
    asset = coordinator.create(asset_candidate(description='Desk unit'))

    # Only cost is sent; the stored salvage of 200 still applies
    with pytest.raises(FieldValidationError) as excinfo:
        coordinator.update(asset.id, {'cost': '100'})
    assert excinfo.value.errors == {'salvage_value': "Salvage value cannot exceed cost"}

    # An explicit None clears an optional field
    coordinator.update(asset.id, {'description': None})
    assert coordinator.get_asset(asset.id).description is None


def test_failed_update_leaves_record_untouched(coordinator):
    asset = coordinator.create(asset_candidate())
    with pytest.raises(FieldValidationError):
        coordinator.update(asset.id, {'useful_life_years': 0})

    stored = coordinator.get_asset(asset.id)
    assert stored.useful_life_years == 5
    assert len(stored_rows(asset.id)) == 5


def test_dispose_truncates_and_reinstate_restores(coordinator):
    asset = coordinator.create(asset_candidate())
    original = [row.to_schedule_entry() for row in stored_rows(asset.id)]

    disposed = coordinator.dispose(asset.id, '2024-03-01', '700')
    assert disposed.disposed_date == date(2024, 3, 1)
    assert disposed.disposed_value == Decimal('700.00')
    assert [row.year for row in stored_rows(asset.id)] == [2022, 2023, 2024]

    reinstated = coordinator.reinstate(asset.id)
    assert reinstated.disposed_date is None
    assert reinstated.disposed_value is None
    assert [row.to_schedule_entry() for row in stored_rows(asset.id)] == original


def test_dispose_rejects_bad_dates(coordinator):
    asset = coordinator.create(asset_candidate())

    with pytest.raises(FieldValidationError) as excinfo:
        coordinator.dispose(asset.id, '2021-12-31')
    assert 'disposed_date' in excinfo.value.errors

    with pytest.raises(FieldValidationError):
        coordinator.dispose(asset.id, '2027-01-01')

    assert coordinator.get_asset(asset.id).disposed_date is None
    assert len(stored_rows(asset.id)) == 5


def test_update_disposal_date_regenerates(coordinator):
    asset = coordinator.create(asset_candidate())
    coordinator.dispose(asset.id, '2023-06-30')

    coordinator.update(asset.id, {'disposed_date': '2025-01-10'})

    assert [row.year for row in stored_rows(asset.id)] == [2022, 2023, 2024, 2025]


def test_delete_removes_asset_and_schedule(coordinator):
    asset = coordinator.create(asset_candidate())
    asset_id = asset.id

    assert coordinator.delete(asset_id) == asset_id
    assert db.session.get(Asset, asset_id) is None
    assert DepreciationEntry.query.filter_by(asset_id=asset_id).count() == 0

    with pytest.raises(AssetNotFoundError):
        coordinator.delete(asset_id)


def test_storage_failure_rolls_back_and_keeps_previous_schedule(coordinator, monkeypatch):
    asset = coordinator.create(asset_candidate())
    asset_id = asset.id
    before = [row.to_schedule_entry() for row in stored_rows(asset_id)]

    def failing_commit(session):
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(type(db.session()), 'commit', failing_commit)

    with pytest.raises(StorageError):
        coordinator.update(asset_id, {'cost': '5000'})

    monkeypatch.undo()

    stored = coordinator.get_asset(asset_id)
    assert stored.cost == Decimal('2000.00')
    assert [row.to_schedule_entry() for row in stored_rows(asset_id)] == before


def test_storage_failure_on_create_writes_nothing(coordinator, monkeypatch):
    def failing_commit(session):
        raise OperationalError("COMMIT", {}, Exception("database is locked"))

    monkeypatch.setattr(type(db.session()), 'commit', failing_commit)

    with pytest.raises(StorageError):
        coordinator.create(asset_candidate())

    monkeypatch.undo()
    assert Asset.query.count() == 0
    assert DepreciationEntry.query.count() == 0


def test_largest_amount_round_trips_through_store(coordinator):
    asset = coordinator.create(asset_candidate(cost='9999999999999.99', salvage_value='0', useful_life_years=3))
    db.session.expire_all()

    stored = coordinator.get_asset(asset.id)
    assert stored.cost == Decimal('9999999999999.99')
    rows = stored_rows(asset.id)
    assert [row.depreciation_expense for row in rows] == [
        Decimal('3333333333333.33'), Decimal('3333333333333.33'), Decimal('3333333333333.33'),
    ]
    for row in rows:
        assert row.ending_book_value == row.beginning_book_value - row.depreciation_expense, row.year
        assert row.accumulated_depreciation == stored.cost - row.ending_book_value, row.year
    assert rows[-1].ending_book_value == Decimal('0.00')


def test_oversized_life_is_rejected_before_writing(coordinator):
    with pytest.raises(FieldValidationError) as excinfo:
        coordinator.create(asset_candidate(useful_life_years=10 ** 9))
    assert excinfo.value.errors == {'useful_life_years': "Useful life cannot exceed 100 years"}
    assert Asset.query.count() == 0
    assert DepreciationEntry.query.count() == 0


def test_clearing_disposal_date_clears_disposal(coordinator):
    asset = coordinator.create(asset_candidate())
    coordinator.dispose(asset.id, '2023-06-30', '900')

    updated = coordinator.update(asset.id, {'disposed_date': None})

    assert updated.disposed_date is None
    assert updated.disposed_value is None
    assert [row.year for row in stored_rows(asset.id)] == [2022, 2023, 2024, 2025, 2026]


def test_disposal_value_without_date_is_still_rejected(coordinator):
    asset = coordinator.create(asset_candidate())
    coordinator.dispose(asset.id, '2023-06-30', '900')

    with pytest.raises(FieldValidationError) as excinfo:
        coordinator.update(asset.id, {'disposed_date': '', 'disposed_value': '900'})
    assert excinfo.value.errors == {'disposed_value': "Disposal value requires a disposal date"}
    assert coordinator.get_asset(asset.id).disposed_date == date(2023, 6, 30)
