# le_dashboard/models/admin_setting.py

from datetime import datetime
from .base import db

class AdminSetting(db.Model):
    __tablename__ = 'admin_settings'

    id = db.Column(db.Integer, primary_key=True)
    setting_key = db.Column(db.String(100), unique=True, nullable=False)
    setting_value = db.Column(db.Text)
    description = db.Column(db.Text)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    updated_by = db.Column(db.String(100))

    def to_dict(self):
        return {
            'id': self.id,
            'settingKey': self.setting_key,
            'settingValue': self.setting_value,
            'description': self.description,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
            'updatedBy': self.updated_by
        }
