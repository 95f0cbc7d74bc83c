"""Test doubles for the sign-in collaborators."""

from academy.errors import DispatchError, InvalidCredentials
from academy.services.session_store import SessionStore

ADMIN_EMAIL = 'head@jollychildren.edu'
ADMIN_PASSWORD = 'correct horse battery'


class FakeClock:
    def __init__(self, now=1_700_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeIdentityProvider:
    def __init__(self, accounts):
        self.accounts = accounts
        self.calls = []

    def verify_password(self, email, secret):
        self.calls.append(email)
        if self.accounts.get(email) != secret:
            raise InvalidCredentials()
        return email


class RecordingMailer:
    def __init__(self, fail=False):
        self.fail = fail
        self.codes = []
        self.contacts = []

    def send_mfa_code(self, to, code):
        if self.fail:
            raise DispatchError()
        self.codes.append((to, code))
        return {'provider': 'test', 'accepted': [to]}

    def send_contact_notification(self, recipient, name, email, message, meta):
        if self.fail:
            raise DispatchError()
        self.contacts.append({'recipient': recipient, 'name': name, 'email': email, 'message': message})
        return {'provider': 'test', 'accepted': [recipient]}

    @property
    def last_code(self):
        return self.codes[-1][1]



class MemorySessionStore(SessionStore):
    """Dict-backed login session store."""

    def __init__(self):
        self.data = {}

    def get(self, key):
        value = self.data.get(key)
        return dict(value) if value is not None else None

    def set(self, key, data):
        self.data[key] = dict(data)

    def destroy(self, key):
        self.data.pop(key, None)
