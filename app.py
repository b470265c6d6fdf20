"""
HTML Compare - Flask Application
Serves the document comparison API.
"""
from flask import Flask, jsonify

from config_logging import get_config, APP_NAME, VERSION
from html_compare.routes import hc_blueprint


def create_app() -> Flask:
    """Build the Flask application with the comparison blueprint mounted."""
    config = get_config()

    app = Flask(__name__)
    # JSON envelope overhead on top of two documents
    app.config['MAX_CONTENT_LENGTH'] = 2 * config.max_markup_bytes + 64 * 1024
    app.register_blueprint(hc_blueprint, url_prefix='/api/compare')

    @app.route('/api/version')
    def version():
        """Report application name and version"""
        return jsonify({'app': APP_NAME, 'version': VERSION})

    @app.errorhandler(404)
    def not_found(_error):
        return jsonify({'success': False, 'error': {'code': 'NOT_FOUND', 'message': 'Not found'}}), 404

    @app.errorhandler(413)
    def too_large(_error):
        return jsonify({'success': False,
                        'error': {'code': 'PAYLOAD_TOO_LARGE', 'message': 'Request body too large'}}), 413

    return app


if __name__ == '__main__':
    print("=" * 60)
    print("  HTML Compare")
    print("  Starting server at http://localhost:5000")
    print("=" * 60)
    create_app().run(host='127.0.0.1', port=5000)
