import logging

from flask import Flask, request, jsonify
from flask_compress import Compress

import config
from database import init_db
from routes.api import register_blueprints

logger = logging.getLogger(__name__)


def create_app():
    app = Flask(__name__)

    # Gzip/Brotli compression for all responses
    Compress(app)
    app.config['COMPRESS_ALGORITHM'] = ['br', 'gzip']
    app.config['COMPRESS_MIMETYPES'] = ['application/json']

    register_blueprints(app)

    @app.after_request
    def add_cache_headers(response):
        if request.path.startswith('/api/'):
            response.headers['Cache-Control'] = 'public, max-age=60'
        # Security headers
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'SAMEORIGIN'
        response.headers['Access-Control-Allow-Origin'] = '*'
        return response

    @app.route('/health')
    def health():
        return jsonify({
            'status': 'healthy',
            'geocoding': 'enabled' if config.MAPBOX_TOKEN else 'disabled',
        })

    return app


logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)

# Initialize DB on import (works with both gunicorn and direct run)
init_db()
app = create_app()

if __name__ == '__main__':
    app.run(host='0.0.0.0', port=8095, debug=False, threaded=True)
