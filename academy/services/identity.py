"""
Identity Providers

Both providers expose `verify_password(email, secret)` and raise
InvalidCredentials for anything other than a confirmed password.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from werkzeug.security import check_password_hash

from academy.errors import InvalidCredentials
from academy.models import AdminUser
from academy.services.supabase import SupabaseError

logger = logging.getLogger(__name__)

PROVIDER_FAILURE_MESSAGE = 'Authentication failed. Please check your email and password.'


class DatabaseIdentityProvider:
    """Admin accounts in the `admin_users` table, werkzeug password hashes."""

    def verify_password(self, email, secret):
        try:
            user = AdminUser.query.filter_by(email=email).first()
        except SQLAlchemyError as e:
            logger.error('Admin lookup failed: %s', e)
            raise InvalidCredentials(PROVIDER_FAILURE_MESSAGE) from e

        if user is None or not user.is_active or not check_password_hash(user.password_hash, secret):
            raise InvalidCredentials()
        return user


class SupabaseIdentityProvider:
    """Supabase Auth (GoTrue) password grant."""

    def __init__(self, client):
        self.client = client

    def verify_password(self, email, secret):
        try:
            user = self.client.sign_in_with_password(email, secret)
        except SupabaseError as e:
            if e.code in ('invalid_credentials', 'invalid_grant') or e.status in (400, 401):
                raise InvalidCredentials() from e
            logger.error('Supabase sign-in error: %s', e)
            raise InvalidCredentials(PROVIDER_FAILURE_MESSAGE) from e
        return user


def build_identity_provider(config, supabase_client=None):
    backend = (config.get('IDENTITY_BACKEND') or 'database').lower()
    if backend == 'supabase':
        if supabase_client is None:
            raise RuntimeError('IDENTITY_BACKEND=supabase requires SUPABASE_URL and SUPABASE_ANON_KEY')
        return SupabaseIdentityProvider(supabase_client)
    return DatabaseIdentityProvider()
