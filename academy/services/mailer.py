"""
Mail Dispatch

Provider order: SendGrid HTTP API, then SMTP through Flask-Mail, then the
server log. The log transport is only used when no provider is configured (or
MFA_LOG_TO_CONSOLE is set); a configured provider that fails raises
DispatchError instead of silently falling back.
"""

import logging
import smtplib

import requests
from flask_mail import Message
from markupsafe import escape

from academy.errors import DispatchError

logger = logging.getLogger(__name__)


class Mailer:
    def __init__(self, sender, sendgrid_api_key=None, sendgrid_api_url=None,
                 smtp=None, recipient_override=None, log_codes_to_console=False,
                 brand_name='Jolly Children Academic Center', brand_color='#2E7D32',
                 support_email=None, timeout=10, http=None):
        self.sender = sender
        self.sendgrid_api_key = sendgrid_api_key
        self.sendgrid_api_url = sendgrid_api_url or 'https://api.sendgrid.com/v3/mail/send'
        self.smtp = smtp
        self.recipient_override = recipient_override
        self.log_codes_to_console = log_codes_to_console
        self.brand_name = brand_name
        self.brand_color = brand_color
        self.support_email = support_email or sender
        self.timeout = timeout
        self.http = http or requests.Session()

    @classmethod
    def from_config(cls, config, smtp=None):
        return cls(
            config['FROM_EMAIL'],
            sendgrid_api_key=config.get('SENDGRID_API_KEY'),
            sendgrid_api_url=config.get('SENDGRID_API_URL'),
            smtp=smtp if config.get('MAIL_SERVER') else None,
            recipient_override=config.get('MFA_RECIPIENT_OVERRIDE'),
            log_codes_to_console=config.get('MFA_LOG_TO_CONSOLE', False),
            brand_name=config.get('BRAND_NAME'),
            brand_color=config.get('BRAND_PRIMARY_COLOR'),
            support_email=config.get('SUPPORT_EMAIL'),
        )

    @property
    def has_provider(self):
        return bool(self.sendgrid_api_key) or self.smtp is not None

    def send(self, to, subject, text, html=None):
        """Deliver one message; returns a small delivery-info dict."""
        failures = []
        if self.sendgrid_api_key:
            try:
                return self._send_sendgrid(to, subject, text, html)
            except (requests.exceptions.RequestException, DispatchError) as e:
                logger.error('[mailer] SendGrid send failed: %s', e)
                failures.append('sendgrid')

        if self.smtp is not None:
            try:
                return self._send_smtp(to, subject, text, html)
            except (smtplib.SMTPException, OSError) as e:
                logger.error('[mailer] SMTP send failed: %s', e)
                failures.append('smtp')

        if failures:
            raise DispatchError()

        logger.warning('[mailer] No mail provider configured; "%s" to %s was not sent', subject, to)
        return {'provider': 'console', 'accepted': [to]}

    def _send_sendgrid(self, to, subject, text, html):
        content = [{'type': 'text/plain', 'value': text}]
        if html:
            content.append({'type': 'text/html', 'value': html})
        payload = {
            'personalizations': [{'to': [{'email': to}]}],
            'from': {'email': self.sender},
            'subject': subject,
            'content': content,
        }
        resp = self.http.post(self.sendgrid_api_url, json=payload, timeout=self.timeout,
                              headers={'Authorization': f'Bearer {self.sendgrid_api_key}'})
        if resp.status_code >= 300:
            raise DispatchError(f'SendGrid returned {resp.status_code}')
        logger.info('[mailer] email sent via SendGrid: %s', subject)
        return {'provider': 'sendgrid', 'statusCode': resp.status_code, 'accepted': [to]}

    def _send_smtp(self, to, subject, text, html):
        msg = Message(subject, sender=self.sender, recipients=[to], body=text, html=html)
        self.smtp.send(msg)
        logger.info('[mailer] email sent via SMTP: %s', subject)
        return {'provider': 'smtp', 'accepted': [to]}

    def send_mfa_code(self, to, code):
        recipient = self.recipient_override or to
        if self.log_codes_to_console or not self.has_provider:
            if recipient != to:
                logger.warning('[MFA] Verification code for %s (overridden to %s): %s', to, recipient, code)
            else:
                logger.warning('[MFA] Verification code for %s: %s', to, code)
            return {'provider': 'console', 'accepted': [recipient]}

        subject = 'Your verification code'
        text = f'Your verification code is: {code}\nIt expires in 10 minutes.'
        return self.send(recipient, subject, text, self._code_html(code))

    def _code_html(self, code):
        brand = escape(self.brand_name)
        support = escape(self.support_email)
        return (
            '<div style="background:#f5f7fb;padding:24px;font-family:Arial,Helvetica,sans-serif;">'
            f'<div style="font-size:20px;font-weight:700;color:{self.brand_color};">{brand}</div>'
            '<h1 style="font-size:20px;color:#111;">Verify your login</h1>'
            '<p>Use the following code to complete your sign-in:</p>'
            f'<div style="display:inline-block;padding:14px 18px;letter-spacing:6px;font-size:26px;'
            f'font-weight:800;color:#fff;background:{self.brand_color};border-radius:10px;">{escape(code)}</div>'
            '<p style="font-size:14px;color:#555;">This code will expire in 10 minutes. '
            "If you didn't request this, you can ignore this email.</p>"
            f'<p style="font-size:12px;color:#6b7280;">Need help? Contact '
            f'<a href="mailto:{support}">{support}</a>.</p>'
            '</div>'
        )

    def send_contact_notification(self, recipient, name, email, message, meta):
        subject = f'New Contact Form Message from {name}'
        text = (
            'You have received a new contact form submission.\n\n'
            f'Name: {name}\nEmail: {email}\nMessage:\n{message}\n\n'
            f'--\nMeta:\nIP: {meta.get("ip")}\nUser-Agent: {meta.get("ua")}\nReferrer: {meta.get("referer")}'
        )
        html = (
            '<p>You have received a new contact form submission.</p>'
            f'<p><strong>Name:</strong> {escape(name)}<br>'
            f'<strong>Email:</strong> {escape(email)}</p>'
            f'<p><strong>Message:</strong><br>{str(escape(message)).replace(chr(10), "<br>")}</p>'
            f'<hr><p style="font-size:12px;color:#666;">IP: {escape(meta.get("ip"))}<br>'
            f'User-Agent: {escape(meta.get("ua"))}<br>Referrer: {escape(meta.get("referer"))}</p>'
        )
        return self.send(recipient, subject, text, html)
