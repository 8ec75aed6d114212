import logging

from flask import Blueprint, request, jsonify

from database import get_trails
from services.cache import cached_response, cache_response
from services.geocoding import fetch_geocoded, get_location_coordinates, get_location_name
from services.suggestions import merge_suggestions
from services.trails import match_trails, searchable, MIN_QUERY_LENGTH, MAX_QUERY_LENGTH

logger = logging.getLogger(__name__)

search_bp = Blueprint('search', __name__)

AUTOCOMPLETE_TTL = 300


def suggest(query, corpus, geocoder=None):
    """One-shot suggestions: ranked trail matches merged with geocoded places."""
    if not searchable(query):
        return []
    geocoder = geocoder or fetch_geocoded
    return merge_suggestions(match_trails(query, corpus), geocoder(query))


@search_bp.route('/api/autocomplete')
def api_autocomplete():
    q = request.args.get('q', '').strip()[:MAX_QUERY_LENGTH]
    if len(q) < MIN_QUERY_LENGTH:
        return jsonify([])

    ac_key = q.lower()
    cached = cached_response('autocomplete', ac_key, ttl=AUTOCOMPLETE_TTL)
    if cached is not None:
        return jsonify(cached)

    try:
        corpus = get_trails()
    except Exception as e:
        logger.error(f"Trail corpus unavailable for autocomplete: {e}")
        corpus = []

    results = [s.to_dict() for s in suggest(q, corpus)]
    cache_response('autocomplete', ac_key, results, ttl=AUTOCOMPLETE_TTL)
    return jsonify(results)


@search_bp.route('/api/geocode')
def api_geocode():
    q = request.args.get('q', '').strip()[:MAX_QUERY_LENGTH]
    if not q:
        return jsonify({'error': 'q required'}), 400
    result = get_location_coordinates(q)
    if result is None:
        return jsonify({'error': 'Location not found'}), 404
    return jsonify(result)


@search_bp.route('/api/geocode/reverse')
def api_reverse_geocode():
    lat = request.args.get('lat', type=float)
    lon = request.args.get('lon', type=float)
    if lat is None or lon is None:
        return jsonify({'error': 'lat and lon required'}), 400
    result = get_location_name((lon, lat))
    if result is None:
        return jsonify({'error': 'Location not found'}), 404
    return jsonify(result)
