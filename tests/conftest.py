import pytest
from werkzeug.security import generate_password_hash

from academy import create_app
from academy.config import TestConfig
from academy.extensions import db
from academy.models import AdminUser
from fakes import ADMIN_EMAIL, ADMIN_PASSWORD, RecordingMailer


@pytest.fixture()
def app(tmp_path):
    class _Config(TestConfig):
        LEGACY_DATA_DIR = str(tmp_path / 'data')
        SITE_ROOT = str(tmp_path / 'site')
        PUBLIC_ROOT = str(tmp_path / 'public')

    (tmp_path / 'data').mkdir()
    app = create_app(_Config)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def services(app):
    return app.extensions['academy']


@pytest.fixture()
def mailer(services):
    recorder = RecordingMailer()
    services.authenticator.mailer = recorder
    services.mailer = recorder
    return recorder


@pytest.fixture()
def admin_user(app):
    with app.app_context():
        user = AdminUser(email=ADMIN_EMAIL, password_hash=generate_password_hash(ADMIN_PASSWORD))
        db.session.add(user)
        db.session.commit()
    return ADMIN_EMAIL
