"""
Server-side Login Session Model
"""

from datetime import datetime
from academy.extensions import db


class StoredSession(db.Model):
    """Admin login state keyed by the identifier kept in the session cookie"""
    __tablename__ = 'login_sessions'

    id = db.Column(db.String(64), primary_key=True)
    payload = db.Column(db.Text, nullable=False, default='{}')
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f'<StoredSession {self.id[:8]}>'
