# relay/routes/api.py
from datetime import datetime, timezone

from flask import Blueprint, jsonify

from relay.routes import get_client

api_bp = Blueprint('api', __name__)


@api_bp.route('/health')
def health_check():
    """Endpoint de salud para verificar que la API funciona."""
    return jsonify({
        'status': 'ok',
        'token_cached': get_client().credentials.cache.is_valid(),
        'timestamp': datetime.now(timezone.utc).isoformat(),
    })
