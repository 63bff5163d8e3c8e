# le_dashboard/models/job.py

from datetime import datetime
from .base import db

JOB_STATUSES = ('OPEN', 'IN_PROGRESS', 'COMPLETED', 'CANCELLED')

# Singleton row id for the global job counter
JOB_COUNTER_ID = 1


class JobCounter(db.Model):
    __tablename__ = 'job_counter'

    id = db.Column(db.Integer, primary_key=True, default=JOB_COUNTER_ID)
    last_job_number = db.Column(db.Integer, nullable=False, default=0)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f'<JobCounter last_job_number={self.last_job_number}>'


class Job(db.Model):
    __tablename__ = 'jobs'

    id = db.Column(db.Integer, primary_key=True)
    job_number = db.Column(db.Integer, unique=True, nullable=False)
    job_les = db.Column(db.String(15), nullable=False)
    job_no = db.Column(db.String(50))
    job_status = db.Column(db.String(20), nullable=False, default='OPEN')
    pm = db.Column(db.String(100))
    date = db.Column(db.DateTime, default=datetime.utcnow)
    client_id = db.Column(db.Integer, db.ForeignKey('clients.id'), nullable=True)
    description = db.Column(db.Text)
    job_type = db.Column(db.String(50))
    department = db.Column(db.String(50))
    linked_job_ref = db.Column(db.String(100))
    cost_nett = db.Column(db.Numeric(10, 2), default=0)
    quote_ref = db.Column(db.String(100))
    job_complete = db.Column(db.Boolean, default=False)
    invoiced = db.Column(db.Boolean, default=False)
    job_comments = db.Column(db.Text)
    purchase_order = db.Column(db.Text)
    attachments = db.Column(db.Text)
    invoice_comments = db.Column(db.Text)

    # Completion photos
    completion_photos = db.Column(db.JSON)
    photo_uploaded_at = db.Column(db.DateTime)
    photo_uploaded_by = db.Column(db.String(100))

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    items = db.relationship('JobItem', backref='job', lazy='dynamic', cascade="all, delete-orphan")

    # Writable API fields. jobNumber and jobLes are allocated on creation and
    # are deliberately absent.
    FIELD_MAP = {
        'jobNo': 'job_no',
        'jobStatus': 'job_status',
        'pm': 'pm',
        'date': 'date',
        'clientId': 'client_id',
        'description': 'description',
        'jobType': 'job_type',
        'department': 'department',
        'linkedJobRef': 'linked_job_ref',
        'costNett': 'cost_nett',
        'quoteRef': 'quote_ref',
        'jobComplete': 'job_complete',
        'invoiced': 'invoiced',
        'jobComments': 'job_comments',
        'purchaseOrder': 'purchase_order',
        'attachments': 'attachments',
        'invoiceComments': 'invoice_comments',
        'completionPhotos': 'completion_photos',
        'photoUploadedAt': 'photo_uploaded_at',
        'photoUploadedBy': 'photo_uploaded_by',
    }

    def to_dict(self):
        """Serializes the Job using the API's camelCase field names."""
        data = {
            'id': self.id,
            'jobNumber': self.job_number,
            'jobLes': self.job_les,
        }
        for api_name, attr in self.FIELD_MAP.items():
            data[api_name] = getattr(self, attr)
        data['costNett'] = f"{self.cost_nett or 0:.2f}"
        data['date'] = self.date.isoformat() if self.date else None
        data['photoUploadedAt'] = self.photo_uploaded_at.isoformat() if self.photo_uploaded_at else None
        data['createdAt'] = self.created_at.isoformat() if self.created_at else None
        data['updatedAt'] = self.updated_at.isoformat() if self.updated_at else None
        return data

    def __repr__(self):
        return f'<Job id={self.id} job_les={self.job_les}>'


class JobItem(db.Model):
    __tablename__ = 'job_items'

    id = db.Column(db.Integer, primary_key=True)
    job_id = db.Column(db.Integer, db.ForeignKey('jobs.id', ondelete='CASCADE'), nullable=False)
    item_description = db.Column(db.Text, nullable=False)
    item_asset_no = db.Column(db.String(100))
    on_hire_date = db.Column(db.DateTime)
    off_hire_date = db.Column(db.DateTime)
    price_week = db.Column(db.Numeric(10, 2), default=0)
    comments = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    FIELD_MAP = {
        'itemDescription': 'item_description',
        'itemAssetNo': 'item_asset_no',
        'onHireDate': 'on_hire_date',
        'offHireDate': 'off_hire_date',
        'priceWeek': 'price_week',
        'comments': 'comments',
    }

    def to_dict(self):
        return {
            'id': self.id,
            'jobId': self.job_id,
            'itemDescription': self.item_description,
            'itemAssetNo': self.item_asset_no,
            'onHireDate': self.on_hire_date.isoformat() if self.on_hire_date else None,
            'offHireDate': self.off_hire_date.isoformat() if self.off_hire_date else None,
            'priceWeek': f"{self.price_week or 0:.2f}",
            'comments': self.comments,
            'createdAt': self.created_at.isoformat() if self.created_at else None
        }
