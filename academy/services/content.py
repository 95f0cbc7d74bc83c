"""
Content Resolution

Public read paths never fail for lack of data. Each one is an ordered set of
fallible sources (database, legacy JSON file, hard-coded defaults) resolved by
the helpers below:

- `load_source` runs one source and captures the outcome instead of raising.
- `supplement` keeps primary records and adds legacy records with unseen ids,
  or falls back to the legacy records when the primary is down or empty.
- `dedupe` collapses records sharing (title, imageUrl), first one wins.
- `first_available` picks the first source that produced a value.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

logger = logging.getLogger(__name__)

DEFAULT_SITE_STATS = {
    'totalStudents': 450,
    'totalStaff': 48,
    'totalClubsTeams': 15,
    'yearsOfJoy': 12,
}

SITE_STATS_LIMITS = {
    'totalStudents': 100000,
    'totalStaff': 5000,
    'totalClubsTeams': 1000,
    'yearsOfJoy': 200,
}


@dataclass
class SourceResult:
    name: str
    ok: bool = False
    value: Any = None
    error: Optional[str] = None
    exists: bool = True

    @property
    def records(self):
        return list(self.value or [])

    def diagnostics(self):
        return {
            'ok': self.ok,
            'exists': self.exists,
            'count': len(self.records) if isinstance(self.value, list) else None,
            'error': self.error,
        }


def load_source(name, loader):
    """Run `loader()`; a missing backing file counts as an empty, healthy source."""
    try:
        value = loader()
    except FileNotFoundError:
        return SourceResult(name, ok=True, value=[], exists=False)
    except Exception as e:
        logger.warning('[%s] read failed: %s', name, e)
        return SourceResult(name, ok=False, error=str(e))
    return SourceResult(name, ok=True, value=value)


def first_available(sources, default):
    """Return the first non-empty value from `(name, loader)` pairs, else `default`."""
    for name, loader in sources:
        result = load_source(name, loader)
        if result.ok and result.value:
            return result.value
    return default


# -- typed records ------------------------------------------------------------

def _pick(raw, *keys, default=None):
    for key in keys:
        value = raw.get(key)
        if value not in (None, ''):
            return value
    return default


def _record_id(raw):
    value = _pick(raw, 'id', '_id')
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        return ''
    return str(value)


def _flag(value):
    if isinstance(value, str):
        return value.strip().lower() in ('true', '1', 'yes', 'on')
    return bool(value)


def _timestamp(value):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value) if value is not None else ''


@dataclass
class FacilityRecord:
    id: str
    title: str
    description: str
    image_url: str
    image_thumb: Optional[str]
    created_at: str

    @property
    def dedupe_key(self):
        return (self.title, self.image_url)

    def to_public(self, resolver=None):
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'imageUrl': resolver.resolve(self.image_url) if resolver else (self.image_url or None),
            'imageThumb': self.image_thumb,
            'createdAt': self.created_at,
        }


@dataclass
class TestimonialRecord:
    id: str
    client_name: str
    client_role: str
    content: str
    rating: int
    is_featured: bool
    image_url: str
    created_at: str

    __test__ = False

    @property
    def dedupe_key(self):
        return (self.content, self.image_url)

    def to_public(self):
        return {
            'id': self.id,
            'clientName': self.client_name,
            'clientRole': self.client_role,
            'content': self.content,
            'rating': self.rating,
            'isFeatured': self.is_featured,
            'imageUrl': self.image_url or None,
            'createdAt': self.created_at,
        }


def normalize_facility(raw):
    return FacilityRecord(
        id=_record_id(raw),
        title=str(_pick(raw, 'title', 'name', default='')),
        description=str(_pick(raw, 'description', default='')),
        image_url=str(_pick(raw, 'image_url', 'imageUrl', 'image', 'photoUrl', default='')),
        image_thumb=_pick(raw, 'image_thumb_url', 'imageThumb'),
        created_at=_timestamp(_pick(raw, 'created_at', 'createdAt')),
    )


def normalize_testimonial(raw):
    rating = _pick(raw, 'rating', default=5)
    try:
        rating = int(rating)
    except (TypeError, ValueError):
        rating = 5
    return TestimonialRecord(
        id=_record_id(raw),
        client_name=str(_pick(raw, 'client_name', 'clientName', 'name', default='Anonymous')),
        client_role=str(_pick(raw, 'client_role', 'clientRole', 'role', default='Parent')),
        content=str(_pick(raw, 'content', 'testimonialContent', 'text', default='')),
        rating=rating,
        is_featured=_flag(_pick(raw, 'is_featured', 'isFeatured', default=False)),
        image_url=str(_pick(raw, 'image_url', 'imageUrl', 'image', 'photoUrl', default='')),
        created_at=_timestamp(_pick(raw, 'created_at', 'createdAt')),
    )


# -- merge policy --------------------------------------------------------------

def _normalize_all(result, normalize):
    records = []
    for raw in result.records:
        if isinstance(raw, Mapping):
            records.append(normalize(raw))
        else:
            logger.warning('[%s] skipping non-object record: %r', result.name, raw)
    return records


def supplement(primary, fallback):
    """Primary records plus unseen-id fallback records, or the fallback alone."""
    if primary:
        known = {r.id for r in primary}
        extra = [r for r in fallback if r.id and r.id not in known]
        return list(primary) + extra
    return list(fallback)


def dedupe(records):
    seen = set()
    unique = []
    for record in records:
        if record.dedupe_key in seen:
            continue
        seen.add(record.dedupe_key)
        unique.append(record)
    return unique


def resolve_collection(name, primary_loader, fallback_loader, normalize):
    """Merged, de-duplicated records plus a diagnostics dict for admin pages."""
    primary = load_source(f'{name}:db', primary_loader)
    fallback = load_source(f'{name}:json', fallback_loader)

    primary_records = _normalize_all(primary, normalize) if primary.ok else []
    fallback_records = _normalize_all(fallback, normalize) if fallback.ok else []

    merged = supplement(primary_records, fallback_records)
    if primary_records and len(merged) > len(primary_records):
        logger.info('[%s] Adding %d supplemental legacy records not present in DB.',
                    name, len(merged) - len(primary_records))
    records = dedupe(merged)
    if len(records) != len(merged):
        logger.info('[%s] Dedupe removed %d duplicate records.', name, len(merged) - len(records))

    if not records:
        if not primary.ok:
            logger.info('[%s] Empty list: DB unavailable and no JSON fallback records.', name)
        else:
            logger.info('[%s] DB reachable but returned 0 rows; JSON fallback empty.', name)

    diagnostics = {
        'db': primary.diagnostics(),
        'json': dict(fallback.diagnostics(), used=len(merged) > len(primary_records)),
        'merged': {'count': len(records)},
    }
    return records, diagnostics


def resolve_facilities(primary_store, legacy_store):
    return resolve_collection(
        'facilities',
        lambda: primary_store.list_all('facilities'),
        lambda: legacy_store.list_all('facilities'),
        normalize_facility,
    )


def resolve_testimonials(primary_store, legacy_store):
    return resolve_collection(
        'testimonials',
        lambda: primary_store.list_all('testimonials'),
        lambda: legacy_store.list_all('testimonials'),
        normalize_testimonial,
    )


def get_site_stats(primary_store):
    """Public counters; any lookup failure yields the defaults."""
    stored = first_available(
        [('settings:site_stats', lambda: primary_store.get_category('site_stats'))],
        default={},
    )
    if not isinstance(stored, Mapping):
        stored = {}
    return {key: stored.get(key) if stored.get(key) is not None else fallback
            for key, fallback in DEFAULT_SITE_STATS.items()}


def sanitize_site_stats(form, current):
    """Non-negative integers capped per field; bad input keeps the current value."""
    sanitized = {}
    for key, limit in SITE_STATS_LIMITS.items():
        fallback = current.get(key, DEFAULT_SITE_STATS[key])
        try:
            value = int(form.get(key))
        except (TypeError, ValueError):
            value = fallback
        if value < 0:
            value = fallback
        sanitized[key] = min(value, limit)
    return sanitized
