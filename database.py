import json
import sqlite3
import uuid

from config import TRAILS_DB_PATH

DB_PATH = TRAILS_DB_PATH

# query parameter -> column
TRAIL_FILTER_FIELDS = {
    'id': 'id',
    'name': 'name',
    'difficulty': 'difficulty',
    'status': 'status',
}


def get_db():
    conn = sqlite3.connect(DB_PATH)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    return conn


def init_db():
    conn = get_db()
    conn.executescript('''
        CREATE TABLE IF NOT EXISTS trails (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            description TEXT DEFAULT '',
            difficulty TEXT DEFAULT '',
            distance_km REAL,
            elevation_gain_m REAL,
            tags TEXT DEFAULT '[]',
            status TEXT DEFAULT 'open',
            latitude REAL,
            longitude REAL,
            created_at TEXT DEFAULT (datetime('now'))
        );
        CREATE INDEX IF NOT EXISTS idx_trails_name ON trails(name);
        CREATE INDEX IF NOT EXISTS idx_trails_difficulty ON trails(difficulty);
    ''')
    conn.close()


def add_trail(data):
    """Insert a trail document and return its id."""
    location = data.get('location') or {}
    trail_id = str(data.get('id') or uuid.uuid4().hex)
    conn = get_db()
    conn.execute('''
        INSERT INTO trails (id, name, description, difficulty, distance_km, elevation_gain_m,
            tags, status, latitude, longitude)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
    ''', (
        trail_id,
        data['name'],
        data.get('description', ''),
        data.get('difficulty', ''),
        data.get('distanceKm'),
        data.get('elevationGainM'),
        json.dumps(data.get('tags') or []),
        data.get('status', 'open'),
        location.get('latitude'),
        location.get('longitude'),
    ))
    conn.commit()
    conn.close()
    return trail_id


def _row_to_trail(row):
    trail = {
        'id': row['id'],
        'name': row['name'],
        'description': row['description'],
        'difficulty': row['difficulty'],
        'distanceKm': row['distance_km'],
        'elevationGainM': row['elevation_gain_m'],
        'tags': json.loads(row['tags'] or '[]'),
        'status': row['status'] or 'open',
        'location': None,
    }
    if row['latitude'] is not None and row['longitude'] is not None:
        trail['location'] = {'latitude': row['latitude'], 'longitude': row['longitude']}
    return trail


def get_trails(**filters):
    """All stored trails matching every given equality filter."""
    clauses = []
    params = []
    for key, value in filters.items():
        column = TRAIL_FILTER_FIELDS.get(key)
        if column is None:
            raise ValueError(f'Unsupported trail filter: {key}')
        clauses.append(f'{column} = ?')
        params.append(value)

    sql = 'SELECT * FROM trails'
    if clauses:
        sql += ' WHERE ' + ' AND '.join(clauses)
    sql += ' ORDER BY name'

    conn = get_db()
    rows = conn.execute(sql, params).fetchall()
    conn.close()
    return [_row_to_trail(r) for r in rows]
