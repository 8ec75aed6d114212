"""
Mapbox geocoding: location suggestions for the search bar, single-place
coordinate lookup, and reverse geocoding of coordinates to an address.

Every call degrades to an empty result when no access token is configured
or the provider fails; nothing here raises past the module boundary.
"""

import logging
from urllib.parse import quote

import requests

import config
from services import http_session
from services.cache import cached_response, cache_response
from services.suggestions import Suggestion, GEOCODED, GEOCODED_LIMIT
from services.trails import searchable

logger = logging.getLogger(__name__)

COUNTRY = 'ZA'
BBOX = '16.4,-35.0,33.0,-22.0'  # west,south,east,north
SUGGEST_TYPES = 'address,poi,place,locality,neighborhood,region'
REVERSE_TYPES = 'address,poi,locality,neighborhood,place,region,country'
TRAIL_HINTS = ('trail', 'park', 'reserve', 'nature')
DEFAULT_AREA = 'South Africa'
COORDINATES_TTL = 300

KIND_STYLES = {
    'trail': ('Trail or nature location', ['Trail', 'Nature']),
    'address': ('Street address', ['Address']),
    'poi': ('Point of interest', ['POI']),
    'location': ('Location in South Africa', ['Location']),
}


def _resolve_token(token):
    return token if token is not None else config.MAPBOX_TOKEN


def _place_url(search_text, safe=''):
    return f"{config.MAPBOX_GEOCODING_URL}/{quote(search_text, safe=safe)}.json"


def _get_features(url, params):
    """GET a geocoding URL and return its feature list ([] on any failure)."""
    try:
        r = http_session.get(url, params=params, timeout=config.HTTP_TIMEOUT)
        r.raise_for_status()
        data = r.json()
    except (requests.RequestException, ValueError) as e:
        logger.warning(f'Mapbox geocoding failed: {e}')
        return []
    features = data.get('features') if isinstance(data, dict) else None
    if not isinstance(features, list):
        return []
    return [f for f in features if isinstance(f, dict)]


def _text(feature, key):
    value = feature.get(key)
    return value if isinstance(value, str) else ''


def _place_types(feature):
    place_type = feature.get('place_type') or []
    if isinstance(place_type, str):
        return [place_type]
    if not isinstance(place_type, (list, tuple)):
        return []
    return [t for t in place_type if isinstance(t, str)]


def _center(feature):
    center = feature.get('center')
    if isinstance(center, (list, tuple)) and len(center) >= 2:
        try:
            return (float(center[0]), float(center[1]))
        except (TypeError, ValueError):
            return None
    return None


def classify_feature(feature):
    """'trail', 'address', 'poi' or 'location' for a geocoding feature."""
    properties = feature.get('properties') or {}
    category = properties.get('category') if isinstance(properties, dict) else None
    place_types = _place_types(feature)
    haystack = [category, _text(feature, 'text')] + place_types
    for value in haystack:
        if isinstance(value, str) and any(h in value.lower() for h in TRAIL_HINTS):
            return 'trail'
    if 'address' in place_types:
        return 'address'
    if 'poi' in place_types:
        return 'poi'
    return 'location'


def parse_feature(feature):
    """Build a geocoded suggestion from one provider feature."""
    text = _text(feature, 'text')
    place_name = _text(feature, 'place_name') or text
    parts = place_name.split(', ')
    display_name = ', '.join(parts[:2])
    description, tags = KIND_STYLES[classify_feature(feature)]
    return Suggestion(
        kind=GEOCODED,
        name=text or display_name,
        display_name=display_name,
        description=description,
        difficulty='',
        distance_label='',
        elevation_label='',
        location=', '.join(parts[1:3]) or DEFAULT_AREA,
        tags=list(tags),
        coordinates=_center(feature),
    )


def fetch_geocoded(query, token=None, limit=GEOCODED_LIMIT):
    """Location suggestions for a search query.

    Without an access token this returns [] and makes no request.
    """
    token = _resolve_token(token)
    if not token or not searchable(query):
        return []

    features = _get_features(_place_url(query), {
        'access_token': token,
        'country': COUNTRY,
        'limit': limit,
        'types': SUGGEST_TYPES,
        'bbox': BBOX,
    })
    suggestions = []
    for feature in features:
        if not (_text(feature, 'place_name') or _text(feature, 'text')):
            continue
        try:
            suggestions.append(parse_feature(feature))
        except (TypeError, ValueError) as e:
            logger.warning(f'Skipping malformed geocoding feature: {e}')
    return suggestions[:limit]


def get_location_coordinates(location_name, token=None):
    """Best single match for a place name: {latitude, longitude, name} or None."""
    token = _resolve_token(token)
    name = (location_name or '').strip()
    if not token or not name:
        return None

    cached = cached_response('coordinates', name.lower(), ttl=COORDINATES_TTL)
    if cached is not None:
        return cached

    features = _get_features(_place_url(name), {
        'access_token': token,
        'country': COUNTRY,
        'limit': 1,
        'types': SUGGEST_TYPES,
        'bbox': BBOX,
    })
    for feature in features:
        center = _center(feature)
        if center is None:
            continue
        result = {
            'latitude': center[1],
            'longitude': center[0],
            'name': _text(feature, 'place_name'),
        }
        return cache_response('coordinates', name.lower(), result, ttl=COORDINATES_TTL)
    return None


CONTEXT_FIELDS = (
    ('address.', 'houseNumber'),
    ('neighborhood.', 'neighborhood'),
    ('locality.', 'city'),
    ('region.', 'state'),
    ('postcode.', 'postcode'),
    ('country.', 'country'),
)


def _city_from_place_name(parts):
    if len(parts) == 1:
        return parts[0]
    for i, part in enumerate(parts):
        # A long trailing part is the country
        if i == len(parts) - 1 and len(part) > 10:
            continue
        if 'Province' in part or 'State' in part:
            continue
        return part
    return ''


def parse_reverse_feature(feature, coordinates):
    """Split a reverse-geocoding feature into address components."""
    place_name = _text(feature, 'place_name')
    parts = [p.strip() for p in place_name.split(',')] if place_name else []
    street = parts[0] if parts else ''

    found = {field: '' for _, field in CONTEXT_FIELDS}
    place_city = ''
    context = feature.get('context')
    for item in context if isinstance(context, list) else []:
        if not isinstance(item, dict):
            continue
        item_id = str(item.get('id', ''))
        text = _text(item, 'text')
        if item_id.startswith('place.'):
            place_city = place_city or text
            continue
        for prefix, field in CONTEXT_FIELDS:
            if item_id.startswith(prefix):
                found[field] = text
                break

    city = found['city'] or place_city
    if not city and parts:
        city = _city_from_place_name(parts)

    house_number = found['houseNumber']
    if house_number and house_number not in street:
        address_part = f'{house_number} {street}'
    else:
        address_part = street

    full = [address_part]
    neighborhood, state, postcode, country = (
        found['neighborhood'], found['state'], found['postcode'], found['country'])
    if neighborhood and neighborhood != address_part:
        full.append(neighborhood)
    if city and city not in (address_part, neighborhood):
        full.append(city)
    if state and state != city:
        full.append(state)
    if postcode:
        full.append(postcode)
    if country and country != state:
        full.append(country)
    full_address = ', '.join(p for p in full if p)

    properties = feature.get('properties')
    if not isinstance(properties, dict):
        properties = {}
    place_types = _place_types(feature)
    center = _center(feature)
    return {
        'address': street,
        'houseNumber': house_number,
        'city': city,
        'state': state,
        'postcode': postcode,
        'country': country,
        'neighborhood': neighborhood,
        'fullAddress': full_address or place_name,
        'displayName': place_name,
        'name': _text(properties, 'name') or _text(feature, 'text') or street or city or 'Unknown Location',
        'type': place_types[0] if place_types else 'location',
        'coordinates': list(center) if center else list(coordinates),
    }


def reverse_geocode(coordinates, token=None):
    """Address components for a (lon, lat) pair, or None."""
    token = _resolve_token(token)
    if not token:
        logger.warning('Reverse geocoding skipped: no Mapbox token configured')
        return None
    try:
        lon, lat = float(coordinates[0]), float(coordinates[1])
    except (TypeError, ValueError, IndexError):
        return None

    features = _get_features(_place_url(f'{lon},{lat}', safe=','), {
        'access_token': token,
        'types': REVERSE_TYPES,
        'limit': 1,
    })
    if not features:
        return None
    return parse_reverse_feature(features[0], (lon, lat))


def get_location_name(coordinates, token=None):
    result = reverse_geocode(coordinates, token=token)
    if result is None:
        return None
    return {
        'name': result['name'],
        'fullAddress': result['fullAddress'],
        'city': result['city'],
        'type': result['type'],
    }
