import importlib
import logging

from services.search import search_bp
from services.trails import trails_bp

logger = logging.getLogger(__name__)

# Search and trail listing are required; the rest may fail to load
# without taking the app down.
CORE_BLUEPRINTS = [search_bp, trails_bp]
OPTIONAL_MODULES = [
    ('services.alerts', 'alerts_bp'),
]


def load_optional_blueprints():
    blueprints = []
    for module_path, bp_name in OPTIONAL_MODULES:
        try:
            blueprints.append(getattr(importlib.import_module(module_path), bp_name))
        except (ImportError, AttributeError) as e:
            logger.warning(f"Optional module {module_path} failed to load: {e}")
    return blueprints


def register_blueprints(app):
    for bp in CORE_BLUEPRINTS + load_optional_blueprints():
        app.register_blueprint(bp)
        logger.debug(f"Registered blueprint {bp.name}")
