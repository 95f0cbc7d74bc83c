"""
Supabase REST Client

Thin `requests` wrapper over the two Supabase services this site uses:
GoTrue password sign-in and Storage URLs for facility images.
"""

import logging
from urllib.parse import quote

import requests

logger = logging.getLogger(__name__)


class SupabaseError(Exception):
    """Supabase answered with an error or could not be reached."""

    def __init__(self, message, status=None, code=None):
        super().__init__(message)
        self.status = status
        self.code = code


class SupabaseClient:
    def __init__(self, url, anon_key, service_key=None, timeout=6, http=None):
        self.url = url.rstrip('/')
        self.anon_key = anon_key
        self.service_key = service_key
        self.timeout = timeout
        self.http = http or requests.Session()
        self._bucket_public = {}

    @classmethod
    def from_config(cls, config):
        """Returns None when Supabase is not configured."""
        if not config.get('SUPABASE_URL') or not config.get('SUPABASE_ANON_KEY'):
            return None
        return cls(config['SUPABASE_URL'], config['SUPABASE_ANON_KEY'],
                   service_key=config.get('SUPABASE_SERVICE_ROLE_KEY'),
                   timeout=config.get('SUPABASE_TIMEOUT', 6))

    def _headers(self, key):
        return {'apikey': key, 'Authorization': f'Bearer {key}'}

    def sign_in_with_password(self, email, password):
        """Return the user object, or raise SupabaseError."""
        try:
            resp = self.http.post(
                f'{self.url}/auth/v1/token',
                params={'grant_type': 'password'},
                json={'email': email, 'password': password},
                headers={'apikey': self.anon_key},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise SupabaseError(f'Auth request failed: {e}') from e

        if resp.status_code != 200:
            body = _safe_json(resp)
            raise SupabaseError(body.get('error_description') or body.get('msg') or 'Sign-in failed',
                                status=resp.status_code,
                                code=body.get('error_code') or body.get('error'))
        return _safe_json(resp).get('user') or {}

    def public_url(self, bucket, object_path):
        return f'{self.url}/storage/v1/object/public/{quote(bucket)}/{quote(object_path)}'

    def bucket_is_public(self, bucket):
        if bucket in self._bucket_public:
            return self._bucket_public[bucket]

        if self.service_key:
            resp = self.http.get(f'{self.url}/storage/v1/bucket/{quote(bucket)}',
                                 headers=self._headers(self.service_key), timeout=self.timeout)
            if resp.status_code != 200:
                raise SupabaseError(f'Bucket lookup failed for {bucket}', status=resp.status_code)
            public = bool(_safe_json(resp).get('public'))
        else:
            # Without the service key the only signal is whether anonymous reads work.
            resp = self.http.head(f'{self.url}/storage/v1/object/public/{quote(bucket)}/',
                                  timeout=self.timeout)
            public = resp.status_code < 400

        self._bucket_public[bucket] = public
        return public

    def create_signed_url(self, bucket, object_path, expires_in=3600):
        if not self.service_key:
            return None
        resp = self.http.post(
            f'{self.url}/storage/v1/object/sign/{quote(bucket)}/{quote(object_path)}',
            json={'expiresIn': expires_in},
            headers=self._headers(self.service_key),
            timeout=self.timeout,
        )
        if resp.status_code != 200:
            raise SupabaseError(f'Signing failed for {bucket}/{object_path}', status=resp.status_code)
        signed = _safe_json(resp).get('signedURL') or _safe_json(resp).get('signedUrl')
        if not signed:
            return None
        if signed.startswith('http'):
            return signed
        return f'{self.url}/storage/v1{signed}'


def _safe_json(resp):
    try:
        data = resp.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
