"""
Settings Model
"""

import json
from datetime import datetime
from academy.extensions import db


class Setting(db.Model):
    """One row per settings category (seo, system, site_stats...)"""
    __tablename__ = 'settings'

    id = db.Column(db.Integer, primary_key=True)
    category = db.Column(db.String(64), unique=True, nullable=False, index=True)
    payload = db.Column(db.Text, nullable=False, default='{}')
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def values(self):
        return json.loads(self.payload or '{}')

    @values.setter
    def values(self, data):
        self.payload = json.dumps(data)

    def __repr__(self):
        return f'<Setting {self.category}>'
