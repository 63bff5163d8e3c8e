# le_dashboard/services/storage.py
"""
Storage layer: typed CRUD over the dashboard tables plus job number allocation.

Routes never touch the session directly; they call the module-level
``storage`` instance, which validates payloads, commits, and rolls back on
failure. API payloads use camelCase field names; each model's FIELD_MAP
translates them to columns and the column type decides how values are
coerced.
"""
import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation

from sqlalchemy import or_, BigInteger, Boolean, DateTime, Integer, Numeric, JSON
from sqlalchemy.exc import SQLAlchemyError

from le_dashboard.models import db, User, AdminSetting, Client, Job, JobItem
from le_dashboard.models.client import CLIENT_STATUSES
from le_dashboard.models.job import JOB_STATUSES
from le_dashboard.services.date_utils import parse_datetime
from le_dashboard.services.errors import (
    AllocationPersistenceError,
    NotFoundError,
    ValidationError,
)
from le_dashboard.services.job_numbering import (
    Department,
    DEPARTMENT_PREFIXES,
    allocate_job_code,
    format_job_code,
    next_job_number,
    resolve_department,
)

logger = logging.getLogger(__name__)

USER_FIELD_MAP = {
    'username': 'username',
    'role': 'role',
    'email': 'email',
    'firstName': 'first_name',
    'lastName': 'last_name',
    'isActive': 'is_active',
}

ADMIN_SETTING_FIELD_MAP = {
    'settingValue': 'setting_value',
    'description': 'description',
    'updatedBy': 'updated_by',
}

TRUE_STRINGS = ('true', '1', 'yes', 'on')
FALSE_STRINGS = ('false', '0', 'no', 'off')

# Signed column ranges shared by SQLite and PostgreSQL
INTEGER_RANGE = (-2 ** 31, 2 ** 31 - 1)
BIG_INTEGER_RANGE = (-2 ** 63, 2 ** 63 - 1)


def _check_amount_fits(column_type, api_name, amount):
    """Reject amounts with more integer digits than the Numeric column holds."""
    precision, scale = column_type.precision, column_type.scale or 0
    if precision is None:
        return
    integer_digits = max(amount.adjusted() + 1, 0)
    if integer_digits > precision - scale:
        raise ValidationError(
            f"{api_name} must be less than {10 ** (precision - scale)}", field=api_name
        )


def _coerce(column, api_name, value):
    """Convert a JSON value to the Python type of ``column``."""
    if value is None or (value == '' and not isinstance(column.type, JSON)):
        return None

    column_type = column.type
    if isinstance(column_type, Boolean):
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.lower() in TRUE_STRINGS + FALSE_STRINGS:
            return value.lower() in TRUE_STRINGS
        raise ValidationError(f"{api_name} must be true or false", field=api_name)

    if isinstance(column_type, Integer):
        if isinstance(value, bool):
            raise ValidationError(f"{api_name} must be a whole number", field=api_name)
        try:
            number = Decimal(str(value))
        except InvalidOperation:
            raise ValidationError(f"{api_name} must be a whole number", field=api_name)
        if not number.is_finite() or number != number.to_integral_value():
            raise ValidationError(f"{api_name} must be a whole number", field=api_name)
        low, high = BIG_INTEGER_RANGE if isinstance(column_type, BigInteger) else INTEGER_RANGE
        if not low <= number <= high:
            raise ValidationError(f"{api_name} is out of range", field=api_name)
        return int(number)

    if isinstance(column_type, Numeric):
        if isinstance(value, bool):
            raise ValidationError(f"{api_name} must be a number", field=api_name)
        try:
            amount = Decimal(str(value))
        except InvalidOperation:
            raise ValidationError(f"{api_name} must be a number", field=api_name)
        if not amount.is_finite():
            raise ValidationError(f"{api_name} must be a number", field=api_name)
        try:
            amount = amount.quantize(Decimal('0.01'))
        except InvalidOperation:
            raise ValidationError(f"{api_name} is out of range", field=api_name)
        _check_amount_fits(column_type, api_name, amount)
        return amount

    if isinstance(column_type, DateTime):
        try:
            return parse_datetime(value)
        except ValueError as e:
            raise ValidationError(str(e), field=api_name)

    if isinstance(column_type, JSON):
        return value

    if isinstance(value, (dict, list)):
        raise ValidationError(f"{api_name} must be text", field=api_name)
    return str(value)


def apply_fields(record, data, field_map, creating=False):
    """
    Copy the known fields of ``data`` onto ``record``.

    Unknown keys are ignored. When creating, null values are skipped so
    column defaults apply; when updating, nulling a NOT NULL column is
    rejected.
    """
    columns = record.__table__.c
    for api_name, attr in field_map.items():
        if api_name not in data:
            continue
        column = columns[attr]
        value = _coerce(column, api_name, data[api_name])
        if value is None:
            if creating:
                continue
            if not column.nullable:
                raise ValidationError(f"{api_name} cannot be empty", field=api_name)
        setattr(record, attr, value)
    return record


class DatabaseStorage:
    """Flask-SQLAlchemy implementation of the storage contract."""

    # --- helpers -----------------------------------------------------------

    def _commit(self, action):
        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Database error while trying to {action}: {e}")
            raise

    def _get_or_raise(self, model, record_id, label):
        record = db.session.get(model, record_id)
        if record is None:
            raise NotFoundError(f"{label} not found")
        return record

    def _check_client(self, client_id):
        if client_id is not None and db.session.get(Client, client_id) is None:
            raise ValidationError(f"Client {client_id} does not exist", field='clientId')

    # --- users -------------------------------------------------------------

    def get_all_users(self):
        return User.query.order_by(User.username.asc()).all()

    def get_user(self, user_id):
        return self._get_or_raise(User, user_id, 'User')

    def get_user_by_username(self, username):
        return User.query.filter_by(username=username).first()

    def create_user(self, data):
        data = data or {}
        username = (data.get('username') or '').strip()
        password = data.get('password') or ''
        if not username:
            raise ValidationError('username is required', field='username')
        if not password:
            raise ValidationError('password is required', field='password')
        if self.get_user_by_username(username):
            raise ValidationError(f"Username '{username}' already exists", field='username')

        user = User()
        apply_fields(user, {**data, 'username': username}, USER_FIELD_MAP, creating=True)
        user.set_password(password)
        db.session.add(user)
        self._commit('create user')
        logger.info(f"Created user '{user.username}' with role {user.role}")
        return user

    def update_user(self, user_id, data):
        user = self.get_user(user_id)
        data = data or {}
        new_username = data.get('username')
        if new_username and new_username != user.username and self.get_user_by_username(new_username):
            raise ValidationError(f"Username '{new_username}' already exists", field='username')

        apply_fields(user, data, USER_FIELD_MAP)
        if data.get('password'):
            user.set_password(data['password'])
        self._commit(f'update user {user_id}')
        return user

    def delete_user(self, user_id):
        user = self.get_user(user_id)
        db.session.delete(user)
        self._commit(f'delete user {user_id}')

    def record_login(self, user):
        user.last_login = datetime.utcnow()
        self._commit(f'record login for {user.username}')

    # --- admin settings ----------------------------------------------------

    def get_all_admin_settings(self):
        return AdminSetting.query.order_by(AdminSetting.setting_key.asc()).all()

    def get_admin_setting(self, key):
        setting = AdminSetting.query.filter_by(setting_key=key).first()
        if setting is None:
            raise NotFoundError('Admin setting not found')
        return setting

    def create_admin_setting(self, data):
        data = data or {}
        key = (data.get('settingKey') or '').strip()
        if not key:
            raise ValidationError('settingKey is required', field='settingKey')
        if AdminSetting.query.filter_by(setting_key=key).first():
            raise ValidationError(f"Setting '{key}' already exists", field='settingKey')

        setting = AdminSetting(setting_key=key)
        apply_fields(setting, data, ADMIN_SETTING_FIELD_MAP, creating=True)
        db.session.add(setting)
        self._commit(f'create admin setting {key}')
        return setting

    def update_admin_setting(self, key, data):
        setting = self.get_admin_setting(key)
        apply_fields(setting, data or {}, ADMIN_SETTING_FIELD_MAP)
        setting.updated_at = datetime.utcnow()
        self._commit(f'update admin setting {key}')
        return setting

    def delete_admin_setting(self, key):
        setting = self.get_admin_setting(key)
        db.session.delete(setting)
        self._commit(f'delete admin setting {key}')

    # --- clients -----------------------------------------------------------

    def get_all_clients(self, status=None):
        """Active clients, optionally narrowed to one application status."""
        query = Client.query.filter(Client.active.is_(True))
        if status:
            query = query.filter(Client.status == status)
        return query.order_by(Client.company_name.asc()).all()

    def get_client(self, client_id):
        return self._get_or_raise(Client, client_id, 'Client')

    def _validate_client_status(self, data):
        status = data.get('status')
        if status is not None and status not in CLIENT_STATUSES:
            raise ValidationError(
                f"Invalid status. Must be one of: {list(CLIENT_STATUSES)}", field='status'
            )

    def create_client(self, data):
        data = data or {}
        if not str(data.get('companyName') or '').strip():
            raise ValidationError('companyName is required', field='companyName')
        self._validate_client_status(data)

        client = Client()
        apply_fields(client, data, Client.FIELD_MAP, creating=True)
        client.company_name = client.company_name.strip()
        db.session.add(client)
        self._commit('create client')
        logger.info(f"Created client {client.id} '{client.company_name}' ({client.status})")
        return client

    def update_client(self, client_id, data):
        client = self.get_client(client_id)
        data = data or {}
        self._validate_client_status(data)
        apply_fields(client, data, Client.FIELD_MAP)
        self._commit(f'update client {client_id}')
        return client

    def approve_client(self, client_id):
        client = self.get_client(client_id)
        client.status = 'approved'
        client.approved_at = datetime.utcnow()
        self._commit(f'approve client {client_id}')
        logger.info(f"Credit application approved for client {client_id}")
        return client

    def reject_client(self, client_id):
        client = self.get_client(client_id)
        client.status = 'rejected'
        client.rejected_at = datetime.utcnow()
        self._commit(f'reject client {client_id}')
        logger.info(f"Credit application rejected for client {client_id}")
        return client

    def delete_client(self, client_id):
        client = self.get_client(client_id)
        # Jobs outlive their client; they are unlinked rather than deleted.
        Job.query.filter_by(client_id=client.id).update({'client_id': None})
        db.session.delete(client)
        self._commit(f'delete client {client_id}')

    # --- job counter -------------------------------------------------------

    def get_next_job_number(self):
        return next_job_number()

    def generate_job_les(self, job_number, department):
        return format_job_code(job_number, department)

    # --- jobs --------------------------------------------------------------

    def get_all_jobs(self, department=None, status=None, search=None, client_id=None):
        query = Job.query
        if department:
            query = query.filter(Job.department == Department.parse(department).value)
        if status:
            query = query.filter(Job.job_status == status)
        if client_id is not None:
            query = query.filter(Job.client_id == client_id)
        if search:
            pattern = f'%{search}%'
            query = query.outerjoin(Client, Job.client_id == Client.id).filter(or_(
                Job.job_les.ilike(pattern),
                Job.job_no.ilike(pattern),
                Job.description.ilike(pattern),
                Client.company_name.ilike(pattern),
            ))
        return query.order_by(Job.job_number.desc()).all()

    def get_job(self, job_id):
        return self._get_or_raise(Job, job_id, 'Job')

    def _validate_job_status(self, data):
        status = data.get('jobStatus')
        if status is not None and status not in JOB_STATUSES:
            raise ValidationError(
                f"Invalid jobStatus. Must be one of: {list(JOB_STATUSES)}", field='jobStatus'
            )

    def create_job(self, data):
        """
        Validate, allocate a job number and code, and insert the job.

        The counter increment and the new row share one transaction: a
        failure anywhere rolls both back, so no number is consumed by a job
        that was never saved.
        """
        data = data or {}
        self._validate_job_status(data)

        job = Job()
        apply_fields(job, data, Job.FIELD_MAP, creating=True)
        self._check_client(job.client_id)

        department = resolve_department(data.get('department'), data.get('jobType'))
        job.department = department.value

        try:
            job.job_number, job.job_les = allocate_job_code(department)
            db.session.add(job)
            db.session.commit()
        except AllocationPersistenceError:
            db.session.rollback()
            raise
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Database error while creating job: {e}")
            raise

        logger.info(f"Auto-generating job: {job.job_les} ({department.value}) - Job #{job.job_number}")
        return job

    def update_job(self, job_id, data):
        """
        Partial update. jobNumber and jobLes are write-once and ignored here;
        a department change leaves jobLes on its original prefix.
        """
        job = self.get_job(job_id)
        data = dict(data or {})
        for locked in ('jobNumber', 'jobLes'):
            if locked in data:
                logger.warning(f"Ignoring attempt to change {locked} of job {job.job_les}")
                data.pop(locked)
        self._validate_job_status(data)

        old_department = job.department
        apply_fields(job, data, Job.FIELD_MAP)
        self._check_client(job.client_id)

        if 'department' in data:
            new_department = Department.parse(data['department'])
            job.department = new_department.value
            if new_department.value != old_department and not job.job_les.startswith(DEPARTMENT_PREFIXES[new_department]):
                logger.warning(
                    f"Job {job.job_les} moved from {old_department} to {new_department.value}; "
                    f"job code keeps its original prefix"
                )

        self._commit(f'update job {job_id}')
        return job

    def delete_job(self, job_id):
        job = self.get_job(job_id)
        job_les = job.job_les
        JobItem.query.filter_by(job_id=job.id).delete()
        db.session.delete(job)
        self._commit(f'delete job {job_id}')
        logger.info(f"Deleted job {job_les}")

    # --- job items ---------------------------------------------------------

    def get_job_items(self, job_id):
        return JobItem.query.filter_by(job_id=job_id).order_by(JobItem.id.asc()).all()

    def get_job_item(self, item_id):
        return self._get_or_raise(JobItem, item_id, 'Job item')

    def _build_job_item(self, job_id, data):
        data = data or {}
        if not isinstance(data, dict):
            raise ValidationError('each item must be an object', field='items')
        if not str(data.get('itemDescription') or '').strip():
            raise ValidationError('itemDescription is required', field='itemDescription')
        item = JobItem(job_id=job_id)
        apply_fields(item, data, JobItem.FIELD_MAP, creating=True)
        return item

    def create_job_item(self, job_id, data):
        self.get_job(job_id)
        item = self._build_job_item(job_id, data)
        db.session.add(item)
        self._commit(f'create item for job {job_id}')
        return item

    def update_job_item(self, item_id, data):
        item = self.get_job_item(item_id)
        apply_fields(item, data or {}, JobItem.FIELD_MAP)
        self._commit(f'update job item {item_id}')
        return item

    def delete_job_item(self, item_id):
        item = self.get_job_item(item_id)
        db.session.delete(item)
        self._commit(f'delete job item {item_id}')

    def delete_job_items_by_job_id(self, job_id):
        JobItem.query.filter_by(job_id=job_id).delete()
        self._commit(f'delete items of job {job_id}')

    def replace_job_items(self, job_id, items):
        """Bulk save: every item is validated before the existing ones are removed."""
        self.get_job(job_id)
        new_items = [self._build_job_item(job_id, item) for item in items]

        JobItem.query.filter_by(job_id=job_id).delete()
        db.session.add_all(new_items)
        self._commit(f'replace items of job {job_id}')
        logger.info(f"Saved {len(new_items)} items for job {job_id}")
        return new_items


storage = DatabaseStorage()
