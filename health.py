from flask import Blueprint, current_app, jsonify

health_bp = Blueprint('health', __name__)


@health_bp.route('/health')
def health_check():
    """Health check endpoint for external monitoring"""
    return jsonify({
        'status': 'ok',
        'message': 'Service is running',
        'app': current_app.config.get('APP_NAME'),
        'version': '1.0.0'
    })
