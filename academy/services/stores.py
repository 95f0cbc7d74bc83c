"""
Content Stores

The primary store is the application database; the legacy store is a folder
of flat JSON array files left over from the first version of the site. Both
return loose dicts: typing happens in the content resolution layer.
"""

import json
import logging
import os

from sqlalchemy.exc import SQLAlchemyError

from academy.errors import NotFound, StoreUnavailable
from academy.extensions import db
from academy.models import Facility, Setting, Testimonial

logger = logging.getLogger(__name__)

COLLECTIONS = {
    'facilities': Facility,
    'testimonials': Testimonial,
}


class PrimaryStore:
    """Database-backed content, newest first."""

    def _model(self, collection):
        try:
            return COLLECTIONS[collection]
        except KeyError:
            raise NotFound(f'Unknown collection: {collection}')

    def list_all(self, collection):
        model = self._model(collection)
        try:
            rows = model.query.order_by(model.created_at.desc()).all()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StoreUnavailable(f'{collection}: {e}') from e
        return [row.to_dict() for row in rows]

    def count(self, collection):
        model = self._model(collection)
        try:
            return model.query.count()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StoreUnavailable(f'{collection}: {e}') from e

    def get_category(self, name):
        try:
            row = Setting.query.filter_by(category=name).first()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StoreUnavailable(f'settings/{name}: {e}') from e
        if row is None:
            raise NotFound(f'settings/{name}')
        return row.values

    def upsert_category(self, name, values):
        try:
            row = Setting.query.filter_by(category=name).first()
            if row is None:
                row = Setting(category=name)
                db.session.add(row)
            row.values = values
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StoreUnavailable(f'settings/{name}: {e}') from e
        return values


class LegacyFileStore:
    """Read-only `<collection>.json` files. A missing file raises FileNotFoundError."""

    def __init__(self, data_dir):
        self.data_dir = data_dir

    def path_for(self, collection):
        return os.path.join(self.data_dir, f'{collection}.json')

    def list_all(self, collection):
        path = self.path_for(collection)
        with open(path, encoding='utf-8') as fh:
            raw = fh.read()
        data = json.loads(raw or '[]')
        if not isinstance(data, list):
            raise ValueError(f'{path} does not hold a JSON array')
        return data
