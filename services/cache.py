import threading
import time

# (namespace, key) -> (timestamp, data)
_api_cache = {}
_lock = threading.Lock()
API_CACHE_TTL = 300  # 5 minutes
MAX_ENTRIES = 500


def cached_response(namespace, key, ttl=API_CACHE_TTL):
    """Return a fresh cached value for (namespace, key), or None."""
    now = time.time()
    with _lock:
        entry = _api_cache.get((namespace, key))
    if entry is None:
        return None
    ts, data = entry
    if now - ts < ttl:
        return data
    return None


def cache_response(namespace, key, data, ttl=API_CACHE_TTL):
    """Store a value and prune stale entries once the cache grows large."""
    now = time.time()
    with _lock:
        _api_cache[(namespace, key)] = (now, data)
        if len(_api_cache) > MAX_ENTRIES:
            cutoff = now - ttl
            stale = [k for k, (ts, _) in _api_cache.items() if ts < cutoff]
            for k in stale:
                del _api_cache[k]
    return data


def clear_cache(namespace=None):
    with _lock:
        if namespace is None:
            _api_cache.clear()
            return
        for k in [k for k in _api_cache if k[0] == namespace]:
            del _api_cache[k]
