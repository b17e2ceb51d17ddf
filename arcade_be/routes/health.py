from datetime import datetime, timezone

from flask import Blueprint, jsonify

from ..extensions import limiter

health_bp = Blueprint('health', __name__, url_prefix='/api')


@health_bp.route('/health', methods=['GET'])
@limiter.exempt
def health_check():
    # Never counted against RATELIMIT_DEFAULT
    return jsonify({
        'status': True,
        'service': 'arcade_be',
        'timestamp': datetime.now(timezone.utc).isoformat()
    }), 200
