"""
Admin Blueprint

Back-office sign-in (password, then emailed code) and the content overview
pages.
"""

from flask import Blueprint

admin_bp = Blueprint('admin', __name__, template_folder='../templates/admin')

from academy.admin import routes  # noqa: E402, F401
