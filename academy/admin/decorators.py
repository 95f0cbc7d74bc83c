"""
Admin Decorator
"""

from functools import wraps

from flask import redirect, url_for
from flask_login import current_user, logout_user

from academy.admin.session import load_login_session, save_login_session


def admin_required(f):
    """Decorator to ensure the request is from a fully signed-in admin.

    Both halves must agree: Flask-Login holds the account and the server-side
    login session is AUTHENTICATED for the same email. Anything else (a
    half-finished sign-in, an expired store record) is sent back to the login
    page. A passing check writes the login session back, which moves its
    idle expiry forward.
    """
    @wraps(f)
    def wrapper(*args, **kwargs):
        if not current_user.is_authenticated:
            return redirect(url_for('admin.login'))
        login_session = load_login_session()
        if not login_session.is_authenticated or login_session.authenticated_identity != current_user.email:
            logout_user()
            return redirect(url_for('admin.login'))
        save_login_session(login_session)
        return f(*args, **kwargs)
    return wrapper
