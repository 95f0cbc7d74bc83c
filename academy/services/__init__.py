"""
Services Package

Collaborators are built once per application in `init_services` and handed
around through `app.extensions`; request code fetches them with
`get_services()`.
"""

from dataclasses import dataclass
from typing import Any

from flask import current_app

from academy.services.auth_flow import AdminAuthenticator, AuthStage, LoginSession
from academy.services.content import (
    DEFAULT_SITE_STATS,
    get_site_stats,
    resolve_facilities,
    resolve_testimonials,
    sanitize_site_stats,
)
from academy.services.identity import build_identity_provider
from academy.services.images import ImageResolver
from academy.services.mailer import Mailer
from academy.services.session_store import SqlSessionStore
from academy.services.stores import LegacyFileStore, PrimaryStore
from academy.services.supabase import SupabaseClient

EXTENSION_KEY = 'academy'


@dataclass
class Services:
    authenticator: AdminAuthenticator
    mailer: Any
    session_store: Any
    primary_store: Any
    legacy_store: Any
    storage: Any = None


def init_services(app, mail_ext=None):
    config = app.config
    supabase = SupabaseClient.from_config(config)
    mailer = Mailer.from_config(config, smtp=mail_ext)
    identity_provider = build_identity_provider(config, supabase)
    services = Services(
        authenticator=AdminAuthenticator.from_config(config, identity_provider, mailer),
        mailer=mailer,
        session_store=SqlSessionStore(config['SESSION_LIFETIME']),
        primary_store=PrimaryStore(),
        legacy_store=LegacyFileStore(config['LEGACY_DATA_DIR']),
        storage=supabase,
    )
    app.extensions[EXTENSION_KEY] = services
    return services


def get_services():
    return current_app.extensions[EXTENSION_KEY]


__all__ = [
    'AdminAuthenticator',
    'AuthStage',
    'LoginSession',
    'DEFAULT_SITE_STATS',
    'get_site_stats',
    'resolve_facilities',
    'resolve_testimonials',
    'sanitize_site_stats',
    'ImageResolver',
    'Mailer',
    'Services',
    'init_services',
    'get_services',
]
