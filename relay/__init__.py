# relay/__init__.py
import logging

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from config import Config
from relay.errors import RelayError, UpstreamAuthError, ValidationError

logger = logging.getLogger(__name__)


def configure_logging(level):
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logging.getLogger("relay").setLevel(level)


def register_error_handlers(app):
    @app.errorhandler(ValidationError)
    def handle_validation_error(error):
        return jsonify({'success': False, 'message': str(error)}), 400

    @app.errorhandler(RelayError)
    def handle_relay_error(error):
        status = 502
        # Errores 4xx de PhonePe (p. ej. orden inexistente) se devuelven tal cual
        if (not isinstance(error, UpstreamAuthError) and error.status_code
                and 400 <= error.status_code < 500 and error.status_code != 401):
            status = error.status_code
        return jsonify(error.to_dict()), status

    @app.errorhandler(Exception)
    def handle_unexpected(error):
        if isinstance(error, HTTPException):
            return error
        logger.exception("Unhandled error")
        return jsonify({
            'success': False,
            'message': 'Internal Server Error',
        }), 500


def create_app(config_class=Config, client=None):
    app = Flask(__name__)

    # Cargar configuración
    app.config.from_object(config_class)
    configure_logging(app.config.get('LOG_LEVEL', 'INFO'))

    if client is None:
        if not app.config.get('PHONEPE_CLIENT_ID') or not app.config.get('PHONEPE_CLIENT_SECRET'):
            logger.error("Client ID or Client Secret is missing. Please check your .env file.")
            raise RuntimeError("PhonePe client credentials are not configured")
        from relay.models.api_client import PhonePeClient
        client = PhonePeClient.from_config(app.config)

    from relay.Services.phonepe_service import PhonePeService
    app.extensions['phonepe_client'] = client
    app.extensions['phonepe_service'] = PhonePeService(
        client,
        redirect_url=app.config['PAYMENT_REDIRECT_URL'],
        expire_after=app.config['PAYMENT_EXPIRE_AFTER'],
        success_url=app.config.get('PAYMENT_SUCCESS_URL'),
        failure_url=app.config.get('PAYMENT_FAILURE_URL'),
    )

    origins = [o.strip() for o in app.config['CORS_ORIGINS'].split(',') if o.strip()]
    CORS(
        app,
        origins=origins,
        methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    register_error_handlers(app)

    # Register blueprints
    from relay.routes.auth import auth_bp
    from relay.routes.payments import payments_bp
    from relay.routes.refunds import refunds_bp
    from relay.routes.webhooks import webhooks_bp
    from relay.routes.api import api_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(payments_bp)
    app.register_blueprint(refunds_bp)
    app.register_blueprint(webhooks_bp)
    app.register_blueprint(api_bp, url_prefix='/api')

    return app
