"""
Login Session Persistence

The signed cookie only carries `login_sid`; the LoginSession itself lives in
the server-side session store.
"""

from flask import session

from academy.services import LoginSession, get_services
from academy.services.security import generate_session_key

SESSION_KEY = 'login_sid'


def load_login_session():
    key = session.get(SESSION_KEY)
    data = get_services().session_store.get(key) if key else None
    return LoginSession.from_dict(data)


def save_login_session(login_session):
    key = session.get(SESSION_KEY)
    if not key:
        key = generate_session_key()
        session[SESSION_KEY] = key
    get_services().session_store.set(key, login_session.to_dict())


def destroy_login_session():
    key = session.pop(SESSION_KEY, None)
    if key:
        get_services().session_store.destroy(key)
