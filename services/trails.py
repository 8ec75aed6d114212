"""
Trail records: local name matching for search suggestions, list filtering,
and the trail listing endpoint backed by the local trail store.
"""

import logging
from math import radians, sin, cos, sqrt, atan2

from flask import Blueprint, request, jsonify

from database import get_trails, TRAIL_FILTER_FIELDS
from services.suggestions import Suggestion, TRAIL

logger = logging.getLogger(__name__)

trails_bp = Blueprint('trails', __name__)

MIN_QUERY_LENGTH = 2
MAX_QUERY_LENGTH = 100
DEFAULT_DESCRIPTION = 'Trail in South Africa'
DEFAULT_LOCATION = 'South Africa'

DIFFICULTY_COLORS = {
    'easy': '#4CAF50',
    'moderate': '#FF9800',
    'hard': '#F44336',
    'difficult': '#F44336',
    'expert': '#9C27B0',
}
DEFAULT_DIFFICULTY_COLOR = '#2196F3'


def haversine_km(lat1, lon1, lat2, lon2):
    """Distance in km between two points."""
    rlat1, rlon1, rlat2, rlon2 = radians(lat1), radians(lon1), radians(lat2), radians(lon2)
    dlat, dlon = rlat2 - rlat1, rlon2 - rlon1
    a = sin(dlat/2)**2 + cos(rlat1)*cos(rlat2)*sin(dlon/2)**2
    return 6371 * 2 * atan2(sqrt(a), sqrt(1-a))


def difficulty_color(difficulty):
    return DIFFICULTY_COLORS.get((difficulty or '').lower(), DEFAULT_DIFFICULTY_COLOR)


def searchable(query):
    """True when a query is long enough to search and short enough to send."""
    if not isinstance(query, str):
        return False
    return MIN_QUERY_LENGTH <= len(query.strip()) <= MAX_QUERY_LENGTH


def trail_tags(record):
    tags = record.get('tags') or []
    if isinstance(tags, str):
        return [tags]
    if not isinstance(tags, (list, tuple)):
        return []
    return [t for t in tags if isinstance(t, str)]


def _as_float(value):
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def extract_coordinates(location):
    """(lon, lat) from a {latitude, longitude} or {_lat, _long} location, else None."""
    if not isinstance(location, dict):
        return None
    for lat_key, lon_key in (('latitude', 'longitude'), ('_lat', '_long')):
        lat = _as_float(location.get(lat_key))
        lon = _as_float(location.get(lon_key))
        if lat is not None and lon is not None:
            return (lon, lat)
    return None


def trail_distance(record):
    value = record.get('distanceKm')
    return value if value is not None else record.get('distance')


def trail_elevation(record):
    value = record.get('elevationGainM')
    return value if value is not None else record.get('elevationGain')


def trail_status(record):
    status = record.get('status')
    # Older documents nest it: {"status": "closed", "lastUpdated": ...}
    if isinstance(status, dict):
        status = status.get('status')
    if isinstance(status, str) and status.strip().lower() == 'closed':
        return 'closed'
    return 'open'


def _measure_label(value, unit):
    if value is None or isinstance(value, bool):
        return ''
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return f'{value} {unit}'


def trail_suggestion(record):
    """Project a trail record into a trail-kind suggestion."""
    name = record['name']
    return Suggestion(
        kind=TRAIL,
        name=name,
        display_name=name,
        description=record.get('description') or DEFAULT_DESCRIPTION,
        difficulty=record.get('difficulty') or 'Unknown',
        distance_label=_measure_label(trail_distance(record), 'km'),
        elevation_label=_measure_label(trail_elevation(record), 'm'),
        location=DEFAULT_LOCATION,
        tags=trail_tags(record),
        coordinates=extract_coordinates(record.get('location')),
        status=trail_status(record),
    )


def match_trails(query, corpus):
    """Rank trail records whose name contains the query.

    Exact name matches come first, then names starting with the query, then
    the rest by ascending name length. Queries shorter than two characters
    (after trimming) or longer than MAX_QUERY_LENGTH match nothing.
    """
    if not searchable(query):
        return []
    q = query.strip().lower()

    matches = []
    for record in corpus or []:
        name = record.get('name') if isinstance(record, dict) else None
        if not name or not isinstance(name, str):
            continue
        if q in name.lower():
            matches.append(record)

    def rank(record):
        name = record['name'].lower()
        return (name != q, not name.startswith(q), len(name))

    matches.sort(key=rank)
    return [trail_suggestion(r) for r in matches]


def filter_trails(records, difficulty='all', tags='all', min_distance=0, max_distance=20,
                  max_location_distance=80, user_location=None):
    """Filter trail records the way the trail list panel does.

    `user_location` is a (lat, lon) pair; when given together with a positive
    `max_location_distance`, trails farther away (or without coordinates) are
    dropped.
    """
    results = []
    for record in records:
        if difficulty != 'all' and record.get('difficulty') != difficulty:
            continue

        if tags != 'all':
            needle = tags.lower()
            if not any(needle in t.lower() for t in trail_tags(record)):
                continue

        distance = _as_float(trail_distance(record))
        if distance is None or not (min_distance <= distance <= max_distance):
            continue

        if user_location and max_location_distance > 0:
            coords = extract_coordinates(record.get('location'))
            if coords is None:
                continue
            lon, lat = coords
            if haversine_km(user_location[0], user_location[1], lat, lon) > max_location_distance:
                continue

        results.append(record)
    return results


@trails_bp.route('/api/trails')
def api_trails():
    """List stored trails; every query parameter is an equality filter."""
    filters = request.args.to_dict()
    unknown = sorted(set(filters) - set(TRAIL_FILTER_FIELDS))
    if unknown:
        return jsonify({'error': f"Unsupported filter: {', '.join(unknown)}"}), 400
    try:
        return jsonify(get_trails(**filters))
    except Exception as e:
        logger.error(f"Trail listing failed: {e}")
        return jsonify({'error': 'Internal server error. Check logs for details.'}), 500
