"""
Public Content Models

Rows are handed out of the store as plain dicts (`to_dict`) and normalized by
the content resolution layer, so legacy JSON records and database rows go
through the same mapping.
"""

from datetime import datetime
from academy.extensions import db


class Facility(db.Model):
    """A facility shown in the public carousel"""
    __tablename__ = 'facilities'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    image_url = db.Column(db.String(500))
    image_thumb_url = db.Column(db.String(500))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'image_url': self.image_url,
            'image_thumb_url': self.image_thumb_url,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<Facility {self.title}>'


class Testimonial(db.Model):
    """A parent/student testimonial"""
    __tablename__ = 'testimonials'

    id = db.Column(db.Integer, primary_key=True)
    client_name = db.Column(db.String(120), nullable=False)
    client_role = db.Column(db.String(60), default='Parent')
    content = db.Column(db.Text, nullable=False)
    rating = db.Column(db.Integer, default=5)
    is_featured = db.Column(db.Boolean, default=False)
    image_url = db.Column(db.String(500))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'client_name': self.client_name,
            'client_role': self.client_role,
            'content': self.content,
            'rating': self.rating,
            'is_featured': self.is_featured,
            'image_url': self.image_url,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<Testimonial {self.client_name}>'
