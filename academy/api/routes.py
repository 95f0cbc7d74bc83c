"""
Public API Routes

"No data" is never an error here: empty lists and default stats are valid
answers. Only an unexpected failure inside a handler produces a 500.
"""

import logging
import re
from collections.abc import Mapping

from flask import current_app, jsonify, request

from academy.api import api_bp
from academy.errors import DispatchError
from academy.services import (
    ImageResolver,
    get_services,
    get_site_stats,
    resolve_facilities,
    resolve_testimonials,
)

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r'^(?!.{255,})([A-Z0-9._%+-]{1,64})@([A-Z0-9.-]+)\.[A-Z]{2,}$', re.IGNORECASE)
FEATURED_LIMIT = 5


@api_bp.route('/facilities')
def facilities():
    try:
        services = get_services()
        records, _ = resolve_facilities(services.primary_store, services.legacy_store)
        resolver = ImageResolver(request.host_url,
                                 [current_app.config['SITE_ROOT'], current_app.config['PUBLIC_ROOT']],
                                 storage=services.storage)
        return jsonify([r.to_public(resolver) for r in records])
    except Exception:
        logger.exception('Error fetching facilities')
        return jsonify({'error': 'Failed to fetch facilities'}), 500


@api_bp.route('/testimonials')
def testimonials():
    try:
        services = get_services()
        records, _ = resolve_testimonials(services.primary_store, services.legacy_store)
        return jsonify([r.to_public() for r in records])
    except Exception:
        logger.exception('Error fetching testimonials')
        return jsonify({'error': 'Failed to fetch testimonials'}), 500


@api_bp.route('/testimonials/featured')
def featured_testimonials():
    try:
        services = get_services()
        records, _ = resolve_testimonials(services.primary_store, services.legacy_store)
        featured = [r.to_public() for r in records if r.is_featured][:FEATURED_LIMIT]
        return jsonify(featured)
    except Exception:
        logger.exception('Error fetching featured testimonials')
        return jsonify({'error': 'Failed to fetch featured testimonials'}), 500


@api_bp.route('/site-stats')
def site_stats():
    try:
        return jsonify(get_site_stats(get_services().primary_store))
    except Exception:
        logger.exception('Error serving site stats')
        return jsonify({'error': 'Failed to load site stats'}), 500


def _field(data, key):
    """Trimmed text value; numbers are accepted as text, anything else is empty."""
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return ''
    return str(value).strip()


@api_bp.route('/contact', methods=['POST'])
def contact():
    """Contact form: validate, drop obvious bots, mail the office."""
    data = request.get_json(silent=True)
    if data is None:
        data = request.form
    if not isinstance(data, Mapping):
        data = {}
    name = _field(data, 'name')
    email = _field(data, 'email')
    message = _field(data, 'message')

    # Hidden honeypot fields; bots get a success response and nothing is sent
    if _field(data, 'website') or _field(data, 'phone'):
        logger.warning('[ContactForm] Honeypot triggered')
        return jsonify({'status': 'ok'})

    errors = []
    if not name:
        errors.append('Name is required')
    if not email or not EMAIL_PATTERN.match(email):
        errors.append('Valid email is required')
    if not message:
        errors.append('Message is required')
    elif len(message.split()) < 3:
        errors.append('Message is too short')
    if errors:
        return jsonify({'errors': errors}), 400

    meta = {
        'ip': request.remote_addr,
        'ua': request.headers.get('User-Agent', 'N/A'),
        'referer': request.headers.get('Referer', 'N/A'),
    }
    try:
        info = get_services().mailer.send_contact_notification(
            current_app.config['CONTACT_RECIPIENT'], name, email, message, meta)
    except DispatchError:
        logger.error('[ContactForm] Notification could not be sent')
        return jsonify({'error': 'Failed to submit contact form'}), 500

    logger.info('[ContactForm] Email processed via %s', info.get('provider'))
    return jsonify({'status': 'ok'})


@api_bp.route('/health')
def health_check():
    """Health check endpoint."""
    return jsonify({'status': 'ok'})
