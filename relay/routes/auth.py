# relay/routes/auth.py
from flask import Blueprint, jsonify

from relay.routes import get_client

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/get-auth-token', methods=['POST'])
def get_auth_token():
    """Return the current PhonePe access token, fetching one if needed."""
    grant, seconds_left = get_client().credentials.get_grant_with_ttl()
    return jsonify({'success': True, 'data': grant.to_public_dict(expires_in=seconds_left)})
