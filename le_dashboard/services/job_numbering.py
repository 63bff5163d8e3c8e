# le_dashboard/services/job_numbering.py
"""
Job number allocation and job code formatting.

Every job, whatever its department, draws its number from one global
counter stored in the ``job_counter`` table. The number is then formatted
into a job code such as ``LEH000001``: a three letter department prefix
followed by the number zero-padded to six digits.
"""
import logging
from datetime import datetime
from enum import Enum

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from le_dashboard.models import db, JobCounter
from le_dashboard.models.job import JOB_COUNTER_ID
from le_dashboard.services.errors import AllocationPersistenceError

logger = logging.getLogger(__name__)

JOB_NUMBER_WIDTH = 6


class Department(str, Enum):
    HIRE = 'HIRE'
    FABRICATION = 'FABRICATION'
    SALES = 'SALES'
    TESTING = 'TESTING'
    TRANSPORT = 'TRANSPORT'
    ENGINEERING = 'ENGINEERING'
    CLIENTS = 'CLIENTS'
    ADMIN = 'ADMIN'
    GENERAL = 'GENERAL'

    @classmethod
    def parse(cls, tag):
        """
        Map a free-form department tag onto a Department.

        Matching is case-insensitive. None, the empty string and anything
        unrecognised all resolve to GENERAL; this never raises.
        """
        if isinstance(tag, cls):
            return tag
        if tag is None:
            return cls.GENERAL
        try:
            return cls(str(tag).upper())
        except ValueError:
            return cls.GENERAL


DEPARTMENT_PREFIXES = {
    Department.HIRE: 'LEH',
    Department.FABRICATION: 'LEF',
    Department.SALES: 'LES',
    Department.TESTING: 'LET',
    Department.TRANSPORT: 'LEX',
    Department.ENGINEERING: 'LEE',
    Department.CLIENTS: 'LEC',
    Department.ADMIN: 'LEA',
    Department.GENERAL: 'LEG',
}

# Job type labels used by the department job forms
JOB_TYPE_DEPARTMENTS = {
    'Hire': Department.HIRE,
    'Engineering': Department.ENGINEERING,
    'Fabrication': Department.FABRICATION,
    'Sales': Department.SALES,
    'Testing': Department.TESTING,
    'Transport': Department.TRANSPORT,
    'Clients': Department.CLIENTS,
}


def resolve_department(department=None, job_type=None):
    """An explicit department wins; otherwise fall back to the job type, then GENERAL."""
    if department:
        return Department.parse(department)
    if job_type:
        return JOB_TYPE_DEPARTMENTS.get(job_type, Department.GENERAL)
    return Department.GENERAL


def format_job_code(number, department):
    """
    Format a job number as a department job code.

    Args:
        number (int): Positive job number from the counter
        department: Department member or free-form tag

    Returns:
        str: e.g. ``format_job_code(1, 'HIRE') == 'LEH000001'``
    """
    prefix = DEPARTMENT_PREFIXES[Department.parse(department)]
    return f"{prefix}{int(number):0{JOB_NUMBER_WIDTH}d}"


def ensure_job_counter():
    """Create the counter row at zero if it does not exist yet."""
    if db.session.get(JobCounter, JOB_COUNTER_ID) is None:
        db.session.add(JobCounter(id=JOB_COUNTER_ID, last_job_number=0))
        db.session.commit()
        logger.info("Job counter initialised at 0")


def peek_job_number():
    """Current counter value without allocating; 0 when no job was ever created."""
    try:
        value = db.session.execute(
            select(JobCounter.last_job_number).where(JobCounter.id == JOB_COUNTER_ID)
        ).scalar()
    except SQLAlchemyError as e:
        raise AllocationPersistenceError(f"Could not read job counter: {e}") from e
    return value or 0


def next_job_number():
    """
    Allocate the next job number.

    The increment is a single UPDATE evaluated by the database, so the row
    is write-locked until the surrounding transaction ends and concurrent
    callers can never read the same value. The caller owns that transaction:
    committing it together with the new job keeps numbers from being spent
    on jobs that were never saved.

    Raises:
        AllocationPersistenceError: the counter could not be read or written
    """
    counter = JobCounter.__table__
    try:
        result = db.session.execute(
            counter.update()
            .where(counter.c.id == JOB_COUNTER_ID)
            .values(
                last_job_number=counter.c.last_job_number + 1,
                updated_at=datetime.utcnow(),
            )
        )
        if result.rowcount == 0:
            db.session.execute(
                counter.insert().values(
                    id=JOB_COUNTER_ID,
                    last_job_number=1,
                    updated_at=datetime.utcnow(),
                )
            )
            logger.info("Job counter created on first allocation")
            return 1

        return db.session.execute(
            select(counter.c.last_job_number).where(counter.c.id == JOB_COUNTER_ID)
        ).scalar_one()
    except SQLAlchemyError as e:
        logger.error(f"Job number allocation failed: {e}")
        raise AllocationPersistenceError(f"Could not allocate job number: {e}") from e


def allocate_job_code(department):
    """Allocate a number and format it; returns ``(job_number, job_les)``."""
    number = next_job_number()
    return number, format_job_code(number, department)
