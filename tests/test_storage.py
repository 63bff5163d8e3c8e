from datetime import datetime
from decimal import Decimal

import pytest

from le_dashboard.models import Job, JobItem
from le_dashboard.services.date_utils import month_key, parse_datetime
from le_dashboard.services.errors import NotFoundError, ValidationError
from le_dashboard.services.storage import storage


@pytest.fixture
def ctx(app):
    with app.app_context():
        yield


def test_parse_datetime_normalises_to_naive_utc():
    assert parse_datetime('2024-05-01') == datetime(2024, 5, 1)
    assert parse_datetime('2024-05-01T09:30:00Z') == datetime(2024, 5, 1, 9, 30)
    assert parse_datetime('2024-05-01T11:30:00+02:00') == datetime(2024, 5, 1, 9, 30)
    assert parse_datetime('') is None
    assert parse_datetime(None) is None
    with pytest.raises(ValueError):
        parse_datetime('next tuesday')


def test_month_key():
    assert month_key(datetime(2024, 2, 29, 23, 59)) == '2024-02'
    assert month_key(None) is None


def test_create_job_coerces_fields(ctx):
    job = storage.create_job({
        'jobType': 'Hire',
        'costNett': 99.999,
        'jobComplete': 'true',
        'invoiced': False,
        'completionPhotos': ['a.jpg', 'b.jpg'],
        'unknownField': 'ignored',
    })
    assert job.department == 'HIRE'
    assert job.job_les == 'LEH000001'
    assert job.cost_nett == Decimal('100.00')
    assert job.job_complete is True
    assert job.invoiced is False
    assert job.completion_photos == ['a.jpg', 'b.jpg']


@pytest.mark.parametrize('payload, field', [
    ({'jobComplete': 'maybe'}, 'jobComplete'),
    ({'costNett': 'NaN'}, 'costNett'),
    ({'date': 'soon'}, 'date'),
    ({'clientId': 1.5}, 'clientId'),
    ({'description': {'text': 'nested'}}, 'description'),
    ({'costNett': '1e30'}, 'costNett'),
    ({'costNett': '123456789.5'}, 'costNett'),
    ({'clientId': 2 ** 40}, 'clientId'),
])
def test_create_job_rejects_bad_values(ctx, payload, field):
    with pytest.raises(ValidationError) as excinfo:
        storage.create_job(payload)
    assert excinfo.value.field == field
    assert Job.query.count() == 0


def test_storage_counter_helpers(ctx):
    assert storage.get_next_job_number() == 1
    assert storage.generate_job_les(1, 'engineering') == 'LEE000001'


def test_update_job_keeps_code_when_department_changes(ctx):
    job = storage.create_job({'department': 'HIRE'})
    storage.update_job(job.id, {'department': 'transport', 'jobLes': 'LEX000001'})
    job = storage.get_job(job.id)
    assert job.department == 'TRANSPORT'
    assert job.job_les == 'LEH000001'


def test_missing_records_raise_not_found(ctx):
    with pytest.raises(NotFoundError):
        storage.get_job(42)
    with pytest.raises(NotFoundError):
        storage.get_client(42)
    with pytest.raises(NotFoundError):
        storage.delete_job_item(42)
    with pytest.raises(NotFoundError):
        storage.get_admin_setting('missing')


def test_delete_client_unlinks_jobs(ctx):
    client = storage.create_client({'companyName': '  Acme Lifting  '})
    assert client.company_name == 'Acme Lifting'
    assert client.status == 'pending'
    job = storage.create_job({'department': 'SALES', 'clientId': client.id})

    storage.delete_client(client.id)

    job = storage.get_job(job.id)
    assert job.client_id is None
    assert job.job_les == 'LES000001'


def test_client_status_validation(ctx):
    with pytest.raises(ValidationError):
        storage.create_client({'companyName': 'Acme', 'status': 'maybe'})
    with pytest.raises(ValidationError):
        storage.create_client({'tradingName': 'No company name'})


def test_get_all_clients_only_returns_active(ctx):
    storage.create_client({'companyName': 'Beta'})
    storage.create_client({'companyName': 'Alpha', 'status': 'approved'})
    storage.create_client({'companyName': 'Gamma', 'active': False})

    assert [c.company_name for c in storage.get_all_clients()] == ['Alpha', 'Beta']
    assert [c.company_name for c in storage.get_all_clients(status='approved')] == ['Alpha']


def test_replace_job_items_is_all_or_nothing(ctx):
    job = storage.create_job({'department': 'HIRE'})
    storage.create_job_item(job.id, {'itemDescription': 'Chain block', 'priceWeek': '12.5'})

    with pytest.raises(ValidationError):
        storage.replace_job_items(job.id, [
            {'itemDescription': 'Lever hoist'},
            {'itemAssetNo': 'A-2'},
        ])
    assert [i.item_description for i in storage.get_job_items(job.id)] == ['Chain block']

    saved = storage.replace_job_items(job.id, [
        {'itemDescription': 'Lever hoist', 'onHireDate': '2024-06-01'},
        {'itemDescription': 'Webbing sling', 'priceWeek': 4},
    ])
    assert len(saved) == 2
    items = storage.get_job_items(job.id)
    assert [i.item_description for i in items] == ['Lever hoist', 'Webbing sling']
    assert items[0].on_hire_date == datetime(2024, 6, 1)
    assert items[1].price_week == Decimal('4.00')


def test_delete_job_items_by_job_id(ctx):
    job = storage.create_job({'department': 'HIRE'})
    storage.create_job_item(job.id, {'itemDescription': 'Shackle'})
    storage.create_job_item(job.id, {'itemDescription': 'Eyebolt'})

    storage.delete_job_items_by_job_id(job.id)
    assert JobItem.query.filter_by(job_id=job.id).count() == 0


def test_user_password_is_hashed(ctx):
    user = storage.create_user({'username': 'fabricator', 'password': 's3cret'})
    assert user.password_hash != 's3cret'
    assert user.check_password('s3cret')
    assert user.role == 'User'
    assert 'password' not in user.to_dict()
    assert 'passwordHash' not in user.to_dict()

    with pytest.raises(ValidationError):
        storage.create_user({'username': 'fabricator', 'password': 'other'})

    storage.update_user(user.id, {'password': 'changed'})
    assert storage.get_user(user.id).check_password('changed')


def test_admin_settings_crud(ctx):
    storage.create_admin_setting({'settingKey': 'vat_rate', 'settingValue': '20'})
    with pytest.raises(ValidationError):
        storage.create_admin_setting({'settingKey': 'vat_rate'})

    setting = storage.update_admin_setting('vat_rate', {'settingValue': '17.5', 'updatedBy': 'admin'})
    assert setting.setting_value == '17.5'
    assert setting.updated_by == 'admin'

    storage.delete_admin_setting('vat_rate')
    assert storage.get_all_admin_settings() == []
