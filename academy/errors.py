"""
Error taxonomy

Every collaborator failure (identity provider, mail, database, storage) is
converted into one of these at the service boundary. Auth errors carry the
message shown to the admin; nothing here leaks which factor failed.
"""


class AuthError(Exception):
    """Base class for admin sign-in failures."""
    message = 'Authentication failed.'
    category = 'danger'

    def __init__(self, message=None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class InvalidRequest(AuthError):
    message = 'Invalid request.'


class RateLimited(AuthError):
    message = 'Too many login attempts. Try again later.'


class InvalidCredentials(AuthError):
    message = 'Invalid email or password.'


class CodeExpired(AuthError):
    message = 'Code expired. Please request a new one.'
    category = 'warning'


class CodeMismatch(AuthError):
    message = 'Invalid code. Please try again.'


class CodeLockout(AuthError):
    message = 'Too many invalid codes. Please sign in again.'


class ResendThrottled(AuthError):
    message = 'Please wait a minute before requesting a new code.'
    category = 'warning'


class RestartRequired(AuthError):
    message = 'Please sign in to continue.'
    category = 'info'


class DispatchError(AuthError):
    message = 'We could not send your verification code. Please try again.'


class StoreUnavailable(Exception):
    """The primary content store could not be read."""


class NotFound(Exception):
    """A requested record or settings category does not exist."""
