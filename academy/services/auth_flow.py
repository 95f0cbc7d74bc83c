"""
Admin Authentication Flow

Two-step sign-in: a password check followed by a 6-digit code sent by email.
The state lives in a `LoginSession`, which the caller loads from and saves back
to the session store around every operation.

    NONE --begin_login--> PASSWORD_OK --verify_code--> AUTHENTICATED
                              |
                              +--lockout--> NONE
"""

import logging
import time
from dataclasses import asdict, dataclass, field, fields
from typing import List, Optional

from academy.errors import (
    CodeExpired,
    CodeLockout,
    CodeMismatch,
    DispatchError,
    InvalidCredentials,
    InvalidRequest,
    RateLimited,
    ResendThrottled,
    RestartRequired,
)
from academy.services.security import (
    constant_time_equals,
    generate_code,
    generate_csrf_token,
    looks_like_email,
    prune_attempts,
)

logger = logging.getLogger(__name__)


class AuthStage:
    NONE = 'none'
    PASSWORD_OK = 'password_ok'
    AUTHENTICATED = 'authenticated'


@dataclass
class LoginSession:
    """Per-browser sign-in state. Timestamps are epoch seconds."""
    auth_stage: str = AuthStage.NONE
    pending_identity: Optional[str] = None
    one_time_code: Optional[str] = None
    code_expires_at: Optional[float] = None
    code_send_throttle_at: Optional[float] = None
    failed_code_attempts: int = 0
    login_attempts: List[float] = field(default_factory=list)
    csrf_token: Optional[str] = None
    authenticated_identity: Optional[str] = None

    @classmethod
    def from_dict(cls, data):
        if not data:
            return cls()
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self):
        return asdict(self)

    @property
    def is_authenticated(self):
        return self.auth_stage == AuthStage.AUTHENTICATED and bool(self.authenticated_identity)

    @property
    def awaiting_code(self):
        return self.auth_stage == AuthStage.PASSWORD_OK and bool(self.pending_identity)

    def issue_csrf_token(self):
        self.csrf_token = generate_csrf_token()
        return self.csrf_token

    def consume_csrf_token(self, submitted):
        """Tokens are single use: the stored one is dropped whatever the outcome."""
        expected, self.csrf_token = self.csrf_token, None
        return constant_time_equals(submitted, expected)

    def clear_code(self):
        self.one_time_code = None
        self.code_expires_at = None
        self.failed_code_attempts = 0

    def restart(self):
        """Back to NONE; login attempt history is kept."""
        self.auth_stage = AuthStage.NONE
        self.pending_identity = None
        self.code_send_throttle_at = None
        self.authenticated_identity = None
        self.clear_code()


class AdminAuthenticator:
    """Runs the sign-in operations against an identity provider and a mailer.

    `identity_provider.verify_password(email, secret)` must raise
    InvalidCredentials on failure; `mailer.send_mfa_code(email, code)` must
    raise DispatchError when the code could not be handed to a transport.
    """

    def __init__(self, identity_provider, mailer, clock=time.time,
                 max_login_attempts=5, login_window_seconds=15 * 60,
                 code_ttl_seconds=10 * 60, max_code_attempts=5,
                 resend_throttle_seconds=60):
        self.identity_provider = identity_provider
        self.mailer = mailer
        self.clock = clock
        self.max_login_attempts = max_login_attempts
        self.login_window_seconds = login_window_seconds
        self.code_ttl_seconds = code_ttl_seconds
        self.max_code_attempts = max_code_attempts
        self.resend_throttle_seconds = resend_throttle_seconds

    @classmethod
    def from_config(cls, config, identity_provider, mailer, clock=time.time):
        return cls(
            identity_provider,
            mailer,
            clock=clock,
            max_login_attempts=config['MAX_LOGIN_ATTEMPTS'],
            login_window_seconds=config['LOGIN_WINDOW_SECONDS'],
            code_ttl_seconds=config['CODE_TTL_SECONDS'],
            max_code_attempts=config['MAX_CODE_ATTEMPTS'],
            resend_throttle_seconds=config['RESEND_THROTTLE_SECONDS'],
        )

    def begin_login(self, session, identity, secret, csrf_token):
        """Check the password and send the first code.

        Raises RateLimited, InvalidRequest, InvalidCredentials or
        DispatchError. A DispatchError leaves the session in PASSWORD_OK.
        """
        now = self.clock()
        session.login_attempts = prune_attempts(session.login_attempts, now, self.login_window_seconds)
        if len(session.login_attempts) >= self.max_login_attempts:
            logger.warning('Login rate limit reached (%d attempts in window)', len(session.login_attempts))
            raise RateLimited()

        if not session.consume_csrf_token(csrf_token):
            logger.warning('CSRF token mismatch on login')
            raise InvalidRequest()

        identity = (identity or '').strip().lower()
        if not identity or not secret or not looks_like_email(identity):
            session.login_attempts.append(now)
            logger.info('Login rejected: missing or malformed credentials')
            raise InvalidRequest()

        logger.info('Login attempt for %s', identity)
        try:
            self.identity_provider.verify_password(identity, secret)
        except InvalidCredentials:
            session.login_attempts.append(now)
            logger.info('Login failed for %s (%d attempts in window)', identity, len(session.login_attempts))
            raise

        logger.info('Password verified for %s', identity)
        session.restart()
        session.auth_stage = AuthStage.PASSWORD_OK
        session.pending_identity = identity
        session.login_attempts = []
        self._issue_code(session, now)
        return identity

    def verify_code(self, session, submitted_code, csrf_token):
        """Finish sign-in. Returns the authenticated identity."""
        if not session.awaiting_code:
            raise RestartRequired()
        if not session.consume_csrf_token(csrf_token):
            logger.warning('CSRF token mismatch on code verification')
            raise InvalidRequest()

        now = self.clock()
        if not session.one_time_code or session.code_expires_at is None or now >= session.code_expires_at:
            raise CodeExpired()

        if not constant_time_equals((submitted_code or '').strip(), session.one_time_code):
            session.failed_code_attempts += 1
            if session.failed_code_attempts >= self.max_code_attempts:
                logger.warning('Code lockout for %s', session.pending_identity)
                session.restart()
                raise CodeLockout()
            raise CodeMismatch()

        identity = session.pending_identity
        session.clear_code()
        session.pending_identity = None
        session.code_send_throttle_at = None
        session.auth_stage = AuthStage.AUTHENTICATED
        session.authenticated_identity = identity
        logger.info('Admin %s signed in', identity)
        return identity

    def resend_code(self, session, csrf_token):
        if not session.awaiting_code:
            raise RestartRequired()
        if not session.consume_csrf_token(csrf_token):
            logger.warning('CSRF token mismatch on code resend')
            raise InvalidRequest()

        now = self.clock()
        last = session.code_send_throttle_at
        if last is not None and now - last < self.resend_throttle_seconds:
            raise ResendThrottled()
        self._issue_code(session, now)

    def _issue_code(self, session, now):
        session.one_time_code = generate_code()
        session.code_expires_at = now + self.code_ttl_seconds
        try:
            self.mailer.send_mfa_code(session.pending_identity, session.one_time_code)
        except DispatchError:
            logger.error('Verification code could not be sent to %s', session.pending_identity)
            raise
        session.code_send_throttle_at = now
