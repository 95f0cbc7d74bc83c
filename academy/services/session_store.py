"""
Session Store

Keeps admin login state on the server. The browser only carries an opaque key
in the signed Flask cookie, so one-time codes never leave the server.
"""

import json
import logging
from datetime import datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError

from academy.extensions import db
from academy.models import StoredSession

logger = logging.getLogger(__name__)


class SessionStore:
    """get / set / destroy by key."""

    def get(self, key):
        raise NotImplementedError

    def set(self, key, data):
        raise NotImplementedError

    def destroy(self, key):
        raise NotImplementedError


class SqlSessionStore(SessionStore):
    """Rows in `login_sessions`; a row untouched for `lifetime` is gone."""

    def __init__(self, lifetime=timedelta(hours=4)):
        self.lifetime = lifetime

    def get(self, key):
        if not key:
            return None
        row = db.session.get(StoredSession, key)
        if row is None:
            return None
        if datetime.utcnow() - row.updated_at > self.lifetime:
            logger.info('Login session %s... expired', key[:8])
            self.destroy(key)
            return None
        try:
            return json.loads(row.payload or '{}')
        except ValueError:
            logger.warning('Discarding unreadable login session %s...', key[:8])
            self.destroy(key)
            return None

    def set(self, key, data):
        row = db.session.get(StoredSession, key)
        if row is None:
            row = StoredSession(id=key)
            db.session.add(row)
        row.payload = json.dumps(data)
        row.updated_at = datetime.utcnow()
        try:
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            raise

    def destroy(self, key):
        if not key:
            return
        try:
            StoredSession.query.filter_by(id=key).delete()
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.warning('Could not delete login session: %s', e)
