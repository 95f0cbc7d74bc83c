"""
Admin Routes

Sign-in is two steps. POST /login checks the password and emails a code;
POST /mfa checks the code. Every failure is flashed and redirected, never
raised to the client.
"""

import logging

from flask import flash, redirect, render_template, request, session, url_for
from flask_login import current_user, login_user, logout_user

from academy.admin import admin_bp
from academy.admin.decorators import admin_required
from academy.admin.session import destroy_login_session, load_login_session, save_login_session
from academy.errors import AuthError, CodeLockout, RestartRequired, StoreUnavailable
from academy.extensions import db
from academy.models import AdminUser
from academy.services import get_services, get_site_stats, resolve_facilities, sanitize_site_stats

logger = logging.getLogger(__name__)


@admin_bp.route('/login', methods=['GET'])
def login():
    """Login page; every render issues a fresh anti-forgery token."""
    login_session = load_login_session()
    if current_user.is_authenticated and login_session.is_authenticated:
        return redirect(url_for('admin.dashboard'))

    csrf_token = login_session.issue_csrf_token()
    save_login_session(login_session)
    return render_template('admin/login.html', title='Admin Login', csrf_token=csrf_token)


@admin_bp.route('/login', methods=['POST'])
def login_submit():
    login_session = load_login_session()
    authenticator = get_services().authenticator
    email = request.form.get('email') or request.form.get('username') or ''
    try:
        authenticator.begin_login(login_session,
                                  email,
                                  request.form.get('password', ''),
                                  request.form.get('csrfToken'))
    except AuthError as e:
        save_login_session(login_session)
        flash(e.message, e.category)
        return redirect(url_for('admin.login'))

    save_login_session(login_session)
    return redirect(url_for('admin.mfa'))


@admin_bp.route('/mfa', methods=['GET'])
def mfa():
    """Code entry page, only reachable after the password step."""
    login_session = load_login_session()
    if not login_session.awaiting_code:
        return redirect(url_for('admin.login'))

    csrf_token = login_session.issue_csrf_token()
    save_login_session(login_session)
    return render_template('admin/mfa.html', title='Verify code', csrf_token=csrf_token)


@admin_bp.route('/mfa', methods=['POST'])
def mfa_submit():
    login_session = load_login_session()
    authenticator = get_services().authenticator
    try:
        identity = authenticator.verify_code(login_session,
                                             request.form.get('code', ''),
                                             request.form.get('csrfToken'))
    except RestartRequired:
        save_login_session(login_session)
        return redirect(url_for('admin.login'))
    except CodeLockout as e:
        save_login_session(login_session)
        flash(e.message, e.category)
        return redirect(url_for('admin.login'))
    except AuthError as e:
        save_login_session(login_session)
        flash(e.message, e.category)
        return redirect(url_for('admin.mfa'))

    save_login_session(login_session)
    login_user(_admin_account(identity))
    flash('Welcome, Administrator!', 'success')
    return redirect(url_for('admin.dashboard'))


@admin_bp.route('/mfa/resend', methods=['POST'])
def mfa_resend():
    login_session = load_login_session()
    authenticator = get_services().authenticator
    try:
        authenticator.resend_code(login_session, request.form.get('csrfToken'))
    except RestartRequired:
        save_login_session(login_session)
        return redirect(url_for('admin.login'))
    except AuthError as e:
        save_login_session(login_session)
        flash(e.message, e.category)
        return redirect(url_for('admin.mfa'))

    save_login_session(login_session)
    flash('A new code has been sent.', 'info')
    return redirect(url_for('admin.mfa'))


@admin_bp.route('/logout', methods=['POST'])
def logout():
    """Drops the stored login session and the cookie."""
    destroy_login_session()
    logout_user()
    session.clear()
    return redirect(url_for('admin.login'))


def _admin_account(email):
    """Flask-Login account for a confirmed email.

    With the database identity backend the row already exists; with Supabase
    a local row without a usable password is created on first sign-in.
    """
    user = AdminUser.query.filter_by(email=email).first()
    if user is None:
        user = AdminUser(email=email, password_hash='!')
        db.session.add(user)
        db.session.commit()
        logger.info('Created local admin record for %s', email)
    return user


def _count(store, collection):
    """COUNT with a full-fetch fallback, reported for the dashboard."""
    diag = {'source': 'count', 'value': 0, 'fallback': False, 'error': None}
    try:
        diag['value'] = store.count(collection)
        return diag
    except StoreUnavailable as e:
        diag['error'] = str(e)
    try:
        diag['value'] = len(store.list_all(collection))
        diag['fallback'] = True
        diag['source'] = 'findAll-length'
    except StoreUnavailable as e:
        diag['error'] += f' | fallback failed: {e}'
    return diag


@admin_bp.route('/')
@admin_bp.route('/dashboard')
@admin_required
def dashboard():
    """Admin dashboard with content counts and the site stats form."""
    services = get_services()
    diagnostics = {
        'facilities': _count(services.primary_store, 'facilities'),
        'testimonials': _count(services.primary_store, 'testimonials'),
    }
    if any(d['error'] and not d['fallback'] for d in diagnostics.values()):
        flash('Error loading dashboard data', 'danger')

    login_session = load_login_session()
    csrf_token = login_session.issue_csrf_token()
    save_login_session(login_session)

    return render_template('admin/dashboard.html',
                           title='Admin Dashboard',
                           admin_email=current_user.email,
                           stats={
                               'totalFacilities': diagnostics['facilities']['value'],
                               'totalTestimonials': diagnostics['testimonials']['value'],
                           },
                           stats_diagnostics=diagnostics,
                           site_stats=get_site_stats(services.primary_store),
                           csrf_token=csrf_token)


@admin_bp.route('/facilities')
@admin_required
def facilities():
    """Merged facility list (database plus legacy JSON) with diagnostics."""
    services = get_services()
    records, diagnostics = resolve_facilities(services.primary_store, services.legacy_store)
    error_message = None
    if not diagnostics['db']['ok']:
        error_message = 'Could not reach the database; showing legacy records only.'
    return render_template('admin/facilities.html',
                           title='Facilities Management',
                           facilities=[r.to_public() for r in records],
                           facilities_diagnostics=diagnostics,
                           error_message=error_message)


@admin_bp.route('/settings/site-stats', methods=['POST'])
@admin_required
def update_site_stats():
    login_session = load_login_session()
    valid = login_session.consume_csrf_token(request.form.get('csrfToken'))
    save_login_session(login_session)
    if not valid:
        flash('Invalid request.', 'danger')
        return redirect(url_for('admin.dashboard'))

    store = get_services().primary_store
    sanitized = sanitize_site_stats(request.form, get_site_stats(store))
    try:
        store.upsert_category('site_stats', sanitized)
        flash('Site statistics updated successfully', 'success')
    except StoreUnavailable as e:
        logger.error('Error updating site statistics: %s', e)
        flash('Failed to update site statistics', 'danger')
    return redirect(url_for('admin.dashboard'))
