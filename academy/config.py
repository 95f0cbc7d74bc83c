"""
Configuration settings for the Academy website backend
"""
import os
from datetime import timedelta


def _env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """Flask application configuration"""

    # Flask secret key for sessions
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production-12345'

    # Database configuration
    basedir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'instance', 'academy.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Admin session (sliding window, refreshed on every request)
    SESSION_LIFETIME = timedelta(hours=4)
    PERMANENT_SESSION_LIFETIME = SESSION_LIFETIME
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    SESSION_COOKIE_SECURE = _env_bool('SESSION_COOKIE_SECURE')

    # Login throttling and one-time codes
    LOGIN_WINDOW_SECONDS = 15 * 60
    MAX_LOGIN_ATTEMPTS = 5
    CODE_TTL_SECONDS = 10 * 60
    MAX_CODE_ATTEMPTS = 5
    RESEND_THROTTLE_SECONDS = 60

    # Identity provider: 'database' (admin_users table) or 'supabase'
    IDENTITY_BACKEND = os.environ.get('IDENTITY_BACKEND') or 'database'

    # Supabase (auth + storage)
    SUPABASE_URL = os.environ.get('SUPABASE_URL')
    SUPABASE_ANON_KEY = os.environ.get('SUPABASE_ANON_KEY')
    SUPABASE_SERVICE_ROLE_KEY = os.environ.get('SUPABASE_SERVICE_ROLE_KEY')
    SUPABASE_TIMEOUT = 6

    # Content locations
    LEGACY_DATA_DIR = os.environ.get('LEGACY_DATA_DIR') or os.path.join(basedir, 'data')
    SITE_ROOT = os.environ.get('SITE_ROOT') or os.path.join(basedir, 'site')
    PUBLIC_ROOT = os.environ.get('PUBLIC_ROOT') or os.path.join(basedir, 'public')

    # Mail: SendGrid first, then SMTP, then console
    SENDGRID_API_KEY = os.environ.get('SENDGRID_API_KEY')
    SENDGRID_API_URL = 'https://api.sendgrid.com/v3/mail/send'
    MAIL_SERVER = os.environ.get('SMTP_HOST')
    MAIL_PORT = int(os.environ.get('SMTP_PORT') or 587)
    MAIL_USE_SSL = _env_bool('SMTP_SECURE')
    MAIL_USE_TLS = not MAIL_USE_SSL
    MAIL_USERNAME = os.environ.get('SMTP_USER')
    MAIL_PASSWORD = os.environ.get('SMTP_PASS')
    FROM_EMAIL = os.environ.get('FROM_EMAIL') or os.environ.get('SMTP_USER') or 'no-reply@localhost'
    MAIL_DEFAULT_SENDER = FROM_EMAIL
    CONTACT_RECIPIENT = os.environ.get('CONTACT_RECIPIENT') or FROM_EMAIL
    MFA_RECIPIENT_OVERRIDE = os.environ.get('MFA_RECIPIENT_OVERRIDE')
    MFA_LOG_TO_CONSOLE = _env_bool('MFA_LOG_TO_CONSOLE')

    # Branding used in outgoing mail
    BRAND_NAME = os.environ.get('BRAND_NAME') or 'Jolly Children Academic Center'
    BRAND_PRIMARY_COLOR = os.environ.get('BRAND_PRIMARY_COLOR') or '#2E7D32'
    SUPPORT_EMAIL = os.environ.get('SUPPORT_EMAIL') or FROM_EMAIL

    LOG_LEVEL = os.environ.get('LOG_LEVEL') or 'INFO'


class TestConfig(Config):
    """Testing configuration"""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    IDENTITY_BACKEND = 'database'
    SENDGRID_API_KEY = None
    MAIL_SERVER = None
    MFA_RECIPIENT_OVERRIDE = None
    MFA_LOG_TO_CONSOLE = False
    SUPABASE_URL = None
    SUPABASE_ANON_KEY = None
    SUPABASE_SERVICE_ROLE_KEY = None
