"""
Admin User Model
"""

from datetime import datetime
from flask_login import UserMixin
from academy.extensions import db


class AdminUser(UserMixin, db.Model):
    """Back-office account; signs in with a password and an emailed code"""
    __tablename__ = 'admin_users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    is_active_account = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    @property
    def is_active(self):
        return self.is_active_account

    def __repr__(self):
        return f'<AdminUser {self.email}>'
