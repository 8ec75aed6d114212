"""
Trail alerts: fetches alerts for each saved trail from the alerts Cloud
Function in parallel and merges them into per-trail and flat views.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed

import requests
from flask import Blueprint, request, jsonify

import config
from services import http_session
from services.cache import cached_response, cache_response

logger = logging.getLogger(__name__)

alerts_bp = Blueprint('alerts', __name__)

_executor = ThreadPoolExecutor(max_workers=4)

CACHE_TTL = 1800  # 30 minutes
MAX_TRAILS = 50

ALERT_LABELS = {
    'authority': 'Closure',
}
DEFAULT_ALERT_LABEL = 'Condition'


def fetch_trail_alerts(trail_id):
    """Alerts for one trail ([] when the function is unreachable)."""
    cached = cached_response('alerts', trail_id, ttl=CACHE_TTL)
    if cached is not None:
        return cached

    try:
        r = http_session.get(f'{config.FUNCTIONS_BASE_URL}/getAlerts',
                             params={'trailId': trail_id}, timeout=config.HTTP_TIMEOUT)
        r.raise_for_status()
        data = r.json()
    except (requests.RequestException, ValueError) as e:
        logger.warning(f'Alerts fetch failed for trail {trail_id}: {e}')
        return []

    alerts = data.get('alerts') if isinstance(data, dict) else None
    if not isinstance(alerts, list):
        alerts = []
    alerts = [dict(a, trailId=a.get('trailId', trail_id)) for a in alerts if isinstance(a, dict)]
    return cache_response('alerts', trail_id, alerts, ttl=CACHE_TTL)


def fetch_alerts_for_trails(trail_ids):
    """{trail_id: [alert, ...]} for every trail that has alerts."""
    unique_ids = list(dict.fromkeys(t for t in trail_ids if t))
    futures = {_executor.submit(fetch_trail_alerts, t): t for t in unique_ids}
    by_trail = {}
    for future in as_completed(futures):
        trail_id = futures[future]
        try:
            alerts = future.result()
        except Exception as e:
            logger.error(f'Alerts worker failed for trail {trail_id}: {e}')
            continue
        if alerts:
            by_trail[trail_id] = alerts
    # as_completed order is arbitrary; keep the caller's order
    return {t: by_trail[t] for t in unique_ids if t in by_trail}


def alert_label(alert):
    return ALERT_LABELS.get(alert.get('type'), DEFAULT_ALERT_LABEL)


def flatten_alerts(alerts_by_trail):
    """One list of alerts across trails, deduplicated by alert id."""
    seen = set()
    flat = []
    for alerts in alerts_by_trail.values():
        for a in alerts:
            alert_id = a.get('id')
            if alert_id is not None:
                if alert_id in seen:
                    continue
                seen.add(alert_id)
            flat.append(dict(a, label=alert_label(a)))
    return flat


@alerts_bp.route('/api/alerts')
def api_alerts():
    """Alerts for a comma-separated list of trail ids."""
    raw = request.args.get('trail_ids', '')
    trail_ids = [t.strip() for t in raw.split(',') if t.strip()]
    if not trail_ids:
        return jsonify({'error': 'trail_ids required'}), 400
    if len(trail_ids) > MAX_TRAILS:
        return jsonify({'error': f'At most {MAX_TRAILS} trails per request'}), 400

    try:
        by_trail = fetch_alerts_for_trails(trail_ids)
        alerts = flatten_alerts(by_trail)
        return jsonify({'byTrail': by_trail, 'alerts': alerts, 'count': len(alerts)})
    except Exception as e:
        logger.error(f"Alerts API error: {e}")
        return jsonify({'byTrail': {}, 'alerts': [], 'count': 0,
                        'error': 'Service temporarily unavailable'}), 200
