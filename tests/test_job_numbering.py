import threading

import pytest

from le_dashboard.app import create_app
from le_dashboard.models import db, JobCounter
from le_dashboard.models.job import JOB_COUNTER_ID
from le_dashboard.services.job_numbering import (
    DEPARTMENT_PREFIXES,
    Department,
    allocate_job_code,
    format_job_code,
    next_job_number,
    peek_job_number,
    resolve_department,
)


def test_format_job_code_known_departments():
    assert format_job_code(1, 'HIRE') == 'LEH000001'
    assert format_job_code(999999, 'SALES') == 'LES999999'
    assert format_job_code(42, 'hire') == 'LEH000042'
    assert format_job_code(5, Department.TRANSPORT) == 'LEX000005'


@pytest.mark.parametrize('tag', ['UNKNOWN_DEPT', '', None, ' HIRE'])
def test_format_job_code_falls_back_to_general(tag):
    assert format_job_code(7, tag) == 'LEG000007'


def test_format_job_code_is_always_nine_characters():
    for department in Department:
        for number in (1, 9, 10, 12345, 999999):
            assert len(format_job_code(number, department)) == 9


def test_every_department_has_a_distinct_prefix():
    assert set(DEPARTMENT_PREFIXES) == set(Department)
    assert len(set(DEPARTMENT_PREFIXES.values())) == len(Department)


def test_department_parse_is_total():
    assert Department.parse('fabrication') is Department.FABRICATION
    assert Department.parse(Department.ADMIN) is Department.ADMIN
    assert Department.parse('nonsense') is Department.GENERAL
    assert Department.parse(None) is Department.GENERAL
    assert Department.parse(12) is Department.GENERAL


def test_resolve_department_prefers_explicit_department():
    assert resolve_department('SALES', 'Hire') is Department.SALES
    assert resolve_department(None, 'Hire') is Department.HIRE
    assert resolve_department('', 'Engineering') is Department.ENGINEERING
    assert resolve_department(None, None) is Department.GENERAL
    assert resolve_department('bogus', 'Hire') is Department.GENERAL


def test_first_allocation_returns_one(app):
    with app.app_context():
        assert peek_job_number() == 0
        assert next_job_number() == 1
        db.session.commit()
        assert peek_job_number() == 1


def test_sequential_allocations_are_consecutive(app):
    with app.app_context():
        db.session.get(JobCounter, JOB_COUNTER_ID).last_job_number = 41
        db.session.commit()

        numbers = []
        for _ in range(10):
            numbers.append(next_job_number())
            db.session.commit()

        assert numbers == list(range(42, 52))
        assert len(set(numbers)) == len(numbers)


def test_allocation_recreates_missing_counter_row(app):
    with app.app_context():
        JobCounter.query.delete()
        db.session.commit()

        assert next_job_number() == 1
        db.session.commit()
        assert next_job_number() == 2
        db.session.commit()


def test_rolled_back_allocation_is_not_consumed(app):
    with app.app_context():
        assert next_job_number() == 1
        db.session.rollback()

        assert peek_job_number() == 0
        assert allocate_job_code('SALES') == (1, 'LES000001')
        db.session.commit()


def test_concurrent_allocations_never_share_a_number(tmp_path):
    """Writers on separate connections are serialised by the counter row lock."""
    app = create_app('testing', test_config={
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'counter.db'}",
        'SQLALCHEMY_ENGINE_OPTIONS': {'connect_args': {'timeout': 30, 'check_same_thread': False}},
    })
    threads_count = 8
    per_thread = 25
    results = []
    errors = []
    lock = threading.Lock()
    start = threading.Barrier(threads_count)

    def worker():
        start.wait()
        try:
            with app.app_context():
                allocated = []
                for _ in range(per_thread):
                    allocated.append(next_job_number())
                    db.session.commit()
            with lock:
                results.extend(allocated)
        except Exception as e:
            with lock:
                errors.append(e)

    threads = [threading.Thread(target=worker) for _ in range(threads_count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert sorted(results) == list(range(1, threads_count * per_thread + 1))

    with app.app_context():
        assert peek_job_number() == threads_count * per_thread
        db.engine.dispose()
