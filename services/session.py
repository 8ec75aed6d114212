"""
Search session: the state behind one search bar.

Typing shows local trail matches immediately, then a debounced geocoding
lookup merges location suggestions in. A generation counter is bumped on
every query-changing operation; a geocoding result is applied only if its
generation is still current, so a slow response for an old query never
replaces suggestions for a newer one.
"""

import logging
import threading

import config
from services.debounce import Debouncer
from services.geocoding import fetch_geocoded
from services.suggestions import merge_suggestions, IMMEDIATE_TRAIL_LIMIT
from services.trails import match_trails, searchable

logger = logging.getLogger(__name__)

EMPTY = 'empty'
QUERYING = 'querying'
READY = 'ready'


class SearchSession:

    def __init__(self, geocoder=None, navigate=None, on_change=None, quiet_period=None):
        """
        geocoder: callable(query) -> list of geocoded suggestions; defaults to
            the Mapbox adapter.
        navigate: callable(query) receiving the literal query on submit.
        on_change: callable(suggestions) run after a geocoding merge is applied.
        quiet_period: debounce delay in seconds.
        """
        self._geocoder = geocoder or fetch_geocoded
        self._navigate = navigate
        self._on_change = on_change
        if quiet_period is None:
            quiet_period = config.SEARCH_DEBOUNCE_SECONDS
        self._debouncer = Debouncer(quiet_period)
        self._lock = threading.Lock()
        self._generation = 0
        self._ready_generation = None
        self._closed = False

        self.query = ''
        self.suggestions = []
        self.visible = False
        self._corpus = ()

    @property
    def trail_corpus(self):
        return self._corpus

    @property
    def state(self):
        with self._lock:
            if not searchable(self.query):
                return EMPTY
            if self._ready_generation == self._generation:
                return READY
            return QUERYING

    @property
    def closed(self):
        return self._closed

    def update_corpus(self, records):
        """Replace the trail corpus. Current suggestions are left as they are."""
        corpus = tuple(records or ())
        with self._lock:
            self._corpus = corpus

    def update_query(self, text):
        text = text or ''
        with self._lock:
            self._generation += 1
            generation = self._generation
            self.query = text

            if not searchable(text):
                self.suggestions = []
                self.visible = False
                self._debouncer.cancel()
                return list(self.suggestions)

            trail_matches = match_trails(text, self._corpus)
            self.suggestions = trail_matches[:IMMEDIATE_TRAIL_LIMIT]
            self.visible = True
            current = list(self.suggestions)
            if self._closed:
                return current

            self._debouncer.call(self._apply_geocoded, generation, text, trail_matches)
        return current

    def submit_search(self, text):
        with self._lock:
            self._generation += 1
            self.query = text
            self.suggestions = []
            self.visible = False
            self._debouncer.cancel()
        if self._navigate is not None:
            self._navigate(text)
        else:
            logger.debug(f'Search submitted with no navigation target: {text!r}')

    def clear(self):
        with self._lock:
            self._generation += 1
            self.query = ''
            self.suggestions = []
            self.visible = False
            self._debouncer.cancel()

    def close(self):
        """Tear down: cancel the pending lookup and drop any late result."""
        with self._lock:
            self._closed = True
            self._generation += 1
            self._debouncer.cancel()

    def wait_idle(self, timeout=None):
        return self._debouncer.wait_idle(timeout)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _apply_geocoded(self, generation, query, trail_matches):
        geocoded = self._geocoder(query)
        with self._lock:
            if self._closed or generation != self._generation:
                logger.debug(f'Discarding geocoding result for superseded query {query!r}')
                return
            self.suggestions = merge_suggestions(trail_matches, geocoded)
            self._ready_generation = generation
            suggestions = list(self.suggestions)
        if self._on_change is not None:
            self._on_change(suggestions)
