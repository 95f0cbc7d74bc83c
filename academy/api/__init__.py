"""
Public API Blueprint

JSON read endpoints for the marketing pages plus the contact form.
"""

from flask import Blueprint

api_bp = Blueprint('api', __name__)

from academy.api import routes  # noqa: E402, F401
