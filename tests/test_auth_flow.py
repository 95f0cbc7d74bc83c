import pytest

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
from academy.services.auth_flow import AdminAuthenticator, AuthStage, LoginSession
from fakes import FakeClock, FakeIdentityProvider, RecordingMailer

EMAIL = 'office@jollychildren.edu'
PASSWORD = 's3cret-pass'


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def provider():
    return FakeIdentityProvider({EMAIL: PASSWORD})


@pytest.fixture()
def mailer():
    return RecordingMailer()


@pytest.fixture()
def auth(provider, mailer, clock):
    return AdminAuthenticator(provider, mailer, clock=clock)


def begin(auth, session, email=EMAIL, password=PASSWORD):
    return auth.begin_login(session, email, password, session.issue_csrf_token())


def verify(auth, session, code):
    return auth.verify_code(session, code, session.issue_csrf_token())


def resend(auth, session):
    return auth.resend_code(session, session.issue_csrf_token())


def wrong_code(code):
    return '%06d' % ((int(code) + 1) % 1000000)


def test_sixth_attempt_in_window_is_rate_limited_without_consulting_provider(auth, provider, clock):
    session = LoginSession()
    for _ in range(5):
        with pytest.raises(InvalidCredentials):
            begin(auth, session, password='wrong')
        clock.advance(30)
    assert len(provider.calls) == 5

    with pytest.raises(RateLimited):
        begin(auth, session)
    assert len(provider.calls) == 5
    assert session.auth_stage == AuthStage.NONE


def test_attempts_older_than_window_are_pruned(auth, clock):
    session = LoginSession()
    for _ in range(5):
        with pytest.raises(InvalidCredentials):
            begin(auth, session, password='wrong')

    clock.advance(15 * 60)
    begin(auth, session)
    assert session.auth_stage == AuthStage.PASSWORD_OK
    assert session.login_attempts == []


def test_token_mismatch_fails_closed_and_is_not_recorded(auth, provider):
    session = LoginSession()
    session.issue_csrf_token()
    with pytest.raises(InvalidRequest):
        auth.begin_login(session, EMAIL, PASSWORD, 'forged')
    assert provider.calls == []
    assert session.login_attempts == []
    assert session.csrf_token is None


def test_token_is_single_use(auth):
    session = LoginSession()
    token = session.issue_csrf_token()
    with pytest.raises(InvalidCredentials):
        auth.begin_login(session, EMAIL, 'wrong', token)
    with pytest.raises(InvalidRequest):
        auth.begin_login(session, EMAIL, PASSWORD, token)


@pytest.mark.parametrize('email, password', [
    ('', PASSWORD),
    (EMAIL, ''),
    ('not-an-email', PASSWORD),
    ('two@@example', PASSWORD),
])
def test_malformed_credentials_are_invalid_requests_and_counted(auth, provider, email, password):
    session = LoginSession()
    with pytest.raises(InvalidRequest):
        begin(auth, session, email=email, password=password)
    assert provider.calls == []
    assert len(session.login_attempts) == 1


def test_successful_login_issues_six_digit_code(auth, mailer, clock):
    session = LoginSession()
    begin(auth, session, email='  Office@JollyChildren.edu ')

    code = session.one_time_code
    assert session.auth_stage == AuthStage.PASSWORD_OK
    assert session.pending_identity == EMAIL
    assert len(code) == 6 and code.isascii() and code.isdigit()
    assert session.code_expires_at == clock.now + 10 * 60
    assert session.code_send_throttle_at == clock.now
    assert session.login_attempts == []
    assert mailer.codes == [(EMAIL, code)]


def test_dispatch_failure_keeps_password_ok(provider, clock):
    auth = AdminAuthenticator(provider, RecordingMailer(fail=True), clock=clock)
    session = LoginSession()
    with pytest.raises(DispatchError):
        begin(auth, session)

    assert session.auth_stage == AuthStage.PASSWORD_OK
    assert session.pending_identity == EMAIL
    assert session.one_time_code is not None
    assert session.code_send_throttle_at is None
    assert not session.is_authenticated


def test_correct_code_authenticates_and_clears_code_state(auth, mailer):
    session = LoginSession()
    begin(auth, session)
    session.failed_code_attempts = 2

    assert verify(auth, session, mailer.last_code) == EMAIL
    assert session.auth_stage == AuthStage.AUTHENTICATED
    assert session.is_authenticated
    assert session.authenticated_identity == EMAIL
    assert session.one_time_code is None
    assert session.code_expires_at is None
    assert session.failed_code_attempts == 0
    assert session.pending_identity is None


def test_code_is_trimmed_before_comparison(auth, mailer):
    session = LoginSession()
    begin(auth, session)
    verify(auth, session, f' {mailer.last_code}\n')
    assert session.is_authenticated


def test_fifth_wrong_code_locks_out(auth, mailer):
    session = LoginSession()
    begin(auth, session)
    bad = wrong_code(mailer.last_code)

    for attempt in range(1, 5):
        with pytest.raises(CodeMismatch):
            verify(auth, session, bad)
        assert session.failed_code_attempts == attempt
        assert session.auth_stage == AuthStage.PASSWORD_OK

    with pytest.raises(CodeLockout):
        verify(auth, session, bad)
    assert session.auth_stage == AuthStage.NONE
    assert session.pending_identity is None
    assert session.one_time_code is None
    assert session.failed_code_attempts == 0


def test_lockout_requires_new_login(auth, mailer):
    session = LoginSession()
    begin(auth, session)
    code = mailer.last_code
    for _ in range(4):
        with pytest.raises(CodeMismatch):
            verify(auth, session, 'abc')
    with pytest.raises(CodeLockout):
        verify(auth, session, '12')

    with pytest.raises(RestartRequired):
        verify(auth, session, code)


def test_expired_code_fails_without_counting(auth, mailer, clock):
    session = LoginSession()
    begin(auth, session)
    clock.advance(10 * 60)

    with pytest.raises(CodeExpired):
        verify(auth, session, mailer.last_code)
    assert session.failed_code_attempts == 0
    assert session.auth_stage == AuthStage.PASSWORD_OK


def test_code_just_before_expiry_is_accepted(auth, mailer, clock):
    session = LoginSession()
    begin(auth, session)
    clock.advance(10 * 60 - 1)
    verify(auth, session, mailer.last_code)
    assert session.is_authenticated


def test_verify_without_password_step_requires_restart(auth):
    with pytest.raises(RestartRequired):
        verify(auth, LoginSession(), '123456')


def test_verify_with_forged_token_is_not_counted(auth, mailer):
    session = LoginSession()
    begin(auth, session)
    with pytest.raises(InvalidRequest):
        auth.verify_code(session, mailer.last_code, 'forged')
    assert session.failed_code_attempts == 0
    assert session.auth_stage == AuthStage.PASSWORD_OK


def test_resend_is_throttled_for_sixty_seconds(auth, mailer, clock):
    session = LoginSession()
    begin(auth, session)

    clock.advance(61)
    resend(auth, session)
    first = session.one_time_code
    assert len(mailer.codes) == 2
    assert session.code_expires_at == clock.now + 10 * 60

    clock.advance(30)
    with pytest.raises(ResendThrottled):
        resend(auth, session)
    assert session.one_time_code == first
    assert len(mailer.codes) == 2


def test_resend_keeps_failed_attempt_count(auth, mailer, clock):
    session = LoginSession()
    begin(auth, session)
    for _ in range(3):
        with pytest.raises(CodeMismatch):
            verify(auth, session, wrong_code(mailer.last_code))

    clock.advance(60)
    resend(auth, session)
    assert session.failed_code_attempts == 3


def test_resend_dispatch_failure_keeps_stage(auth, mailer, clock):
    session = LoginSession()
    begin(auth, session)
    clock.advance(60)
    mailer.fail = True

    with pytest.raises(DispatchError):
        resend(auth, session)
    assert session.auth_stage == AuthStage.PASSWORD_OK
    assert session.pending_identity == EMAIL


def test_resend_requires_password_step(auth):
    with pytest.raises(RestartRequired):
        resend(auth, LoginSession())


def test_login_session_round_trip_ignores_unknown_keys():
    session = LoginSession(auth_stage=AuthStage.PASSWORD_OK, pending_identity=EMAIL,
                           one_time_code='012345', login_attempts=[1.0, 2.0])
    data = session.to_dict()
    data['legacy_flag'] = True

    restored = LoginSession.from_dict(data)
    assert restored == session
    assert LoginSession.from_dict(None) == LoginSession()
