"""
Models Package

Exports all models for easy importing.
"""

from academy.models.admin_user import AdminUser
from academy.models.content import Facility, Testimonial
from academy.models.setting import Setting
from academy.models.session import StoredSession

__all__ = ['AdminUser', 'Facility', 'Testimonial', 'Setting', 'StoredSession']
