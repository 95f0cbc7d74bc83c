"""
Facility Image URLs

Turns whatever was stored as a facility image into a URL the browser can load,
or None. A missing image is a normal, displayable state, so nothing here raises.
"""

import logging
import os
import re

import requests

from academy.services.supabase import SupabaseError

logger = logging.getLogger(__name__)

ABSOLUTE_URL = re.compile(r'^https?://', re.IGNORECASE)
STORAGE_REF = re.compile(r'^[^/]+/.+\.[a-zA-Z]{2,5}$')
UPLOADS_PATH = '/uploads/facilities/'
SIGNED_URL_SECONDS = 60 * 60


class ImageResolver:
    def __init__(self, origin, local_roots, storage=None):
        self.origin = origin.rstrip('/')
        self.local_roots = [root for root in local_roots if root]
        self.storage = storage

    def resolve(self, raw):
        if not raw or not isinstance(raw, str):
            return None
        try:
            return self._resolve(raw.strip())
        except Exception as e:
            logger.warning('Could not resolve facility image %r: %s', raw, e)
            return None

    def _resolve(self, raw):
        if ABSOLUTE_URL.match(raw):
            return raw
        if raw.startswith('/'):
            return self._resolve_local(raw)
        if STORAGE_REF.match(raw):
            bucket, _, object_path = raw.partition('/')
            return self._resolve_storage(bucket, object_path)
        return f'{self.origin}/{raw.lstrip("/")}'

    def _resolve_local(self, raw):
        rel = raw.lstrip('/')
        if '..' in rel.split('/'):
            return None
        for root in self.local_roots:
            if os.path.isfile(os.path.join(root, *rel.split('/'))):
                return self.origin + raw
        logger.warning('Facility image referenced but not found locally: %s', raw)
        return None

    def _resolve_storage(self, bucket, object_path):
        url = None
        if self.storage is not None:
            try:
                if self.storage.bucket_is_public(bucket):
                    url = self.storage.public_url(bucket, object_path)
            except (SupabaseError, requests.exceptions.RequestException) as e:
                logger.debug('Public URL lookup failed for %s: %s', bucket, e)
            if not url:
                try:
                    url = self.storage.create_signed_url(bucket, object_path, SIGNED_URL_SECONDS)
                except (SupabaseError, requests.exceptions.RequestException) as e:
                    logger.debug('Signed URL failed for %s/%s: %s', bucket, object_path, e)
        if not url:
            url = self.origin + UPLOADS_PATH + object_path.rsplit('/', 1)[-1]
        return url
