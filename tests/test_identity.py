import pytest
from werkzeug.security import generate_password_hash

from academy.errors import InvalidCredentials
from academy.extensions import db
from academy.models import AdminUser
from academy.services.identity import (
    PROVIDER_FAILURE_MESSAGE,
    DatabaseIdentityProvider,
    SupabaseIdentityProvider,
    build_identity_provider,
)
from academy.services.supabase import SupabaseError
from fakes import ADMIN_EMAIL, ADMIN_PASSWORD


def test_database_provider_accepts_correct_password(app, admin_user):
    with app.app_context():
        user = DatabaseIdentityProvider().verify_password(ADMIN_EMAIL, ADMIN_PASSWORD)
        assert user.email == ADMIN_EMAIL


@pytest.mark.parametrize('email, password', [
    (ADMIN_EMAIL, 'wrong'),
    ('nobody@jollychildren.edu', ADMIN_PASSWORD),
])
def test_database_provider_rejects_bad_credentials(app, admin_user, email, password):
    with app.app_context():
        with pytest.raises(InvalidCredentials):
            DatabaseIdentityProvider().verify_password(email, password)


def test_database_provider_rejects_disabled_account(app):
    with app.app_context():
        db.session.add(AdminUser(email='old@jollychildren.edu', is_active_account=False,
                                 password_hash=generate_password_hash('pw')))
        db.session.commit()
        with pytest.raises(InvalidCredentials):
            DatabaseIdentityProvider().verify_password('old@jollychildren.edu', 'pw')


def test_shadow_account_never_matches(app):
    with app.app_context():
        db.session.add(AdminUser(email='deputy@jollychildren.edu', password_hash='!'))
        db.session.commit()
        with pytest.raises(InvalidCredentials):
            DatabaseIdentityProvider().verify_password('deputy@jollychildren.edu', '!')


class FakeSupabase:
    def __init__(self, error=None):
        self.error = error

    def sign_in_with_password(self, email, password):
        if self.error:
            raise self.error
        return {'email': email}


def test_supabase_bad_password_is_invalid_credentials():
    provider = SupabaseIdentityProvider(FakeSupabase(SupabaseError('Invalid login', status=400,
                                                                   code='invalid_credentials')))
    with pytest.raises(InvalidCredentials) as excinfo:
        provider.verify_password('a@b.co', 'x')
    assert excinfo.value.message == InvalidCredentials.message


def test_supabase_outage_uses_generic_message():
    provider = SupabaseIdentityProvider(FakeSupabase(SupabaseError('Auth request failed: timeout')))
    with pytest.raises(InvalidCredentials) as excinfo:
        provider.verify_password('a@b.co', 'x')
    assert excinfo.value.message == PROVIDER_FAILURE_MESSAGE


def test_build_identity_provider():
    assert isinstance(build_identity_provider({'IDENTITY_BACKEND': 'database'}), DatabaseIdentityProvider)
    assert isinstance(build_identity_provider({'IDENTITY_BACKEND': 'supabase'}, FakeSupabase()),
                      SupabaseIdentityProvider)
    with pytest.raises(RuntimeError):
        build_identity_provider({'IDENTITY_BACKEND': 'supabase'}, None)
