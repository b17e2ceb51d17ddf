from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from flask import Flask, request, jsonify, current_app, g, has_request_context
import uuid
from flask_cors import CORS
from werkzeug.exceptions import HTTPException as WerkzeugHTTPException # Renamed to avoid conflict
from arcade_be.exceptions import AppException
from arcade_be.error_codes import ErrorCodes
import logging
from pythonjsonlogger.json import JsonFormatter
from marshmallow import ValidationError
from http import HTTPStatus

# Custom Logging Filter for Request ID
class RequestIdFilter(logging.Filter):
    def filter(self, record):
        record.request_id = g.get('request_id', 'N/A') if has_request_context() else 'N/A'
        return True

from .extensions import limiter # Relative import
from .utils.security import secure_headers # Relative import
from .services.slot_machine_service import SlotMachineService # Relative import
from .services.games_service import GamesService # Relative import
from .config import Config # Relative import

# --- Blueprint Imports ---
from .routes.games import games_bp
from .routes.slot import slot_bp
from .routes.health import health_bp

def create_app(config_class=Config):
    """Application factory pattern."""
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.json.sort_keys = False

    # --- CORS Setup ---
    allowed_origins = []

    # Development origins
    if app.debug:
        allowed_origins.extend([
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:5173",
            "http://127.0.0.1:5173"
        ])

    # Production origins from validated configuration
    if getattr(config_class, 'CORS_ORIGINS_LIST', None):
        allowed_origins.extend(config_class.CORS_ORIGINS_LIST)

    if allowed_origins:
        CORS(app,
             resources={r"/api/*": {"origins": allowed_origins}},
             methods=['GET', 'POST', 'OPTIONS'],
             allow_headers=['Content-Type'],
             expose_headers=['X-RateLimit-Limit', 'X-RateLimit-Remaining'],
             max_age=86400)
        app.logger.info(f"CORS configured for origins: {allowed_origins}")
    else:
        app.logger.warning("No CORS origins configured - API will reject cross-origin requests")

    # --- Logging Configuration ---
    if not app.debug:
        logger = app.logger
        handler = logging.StreamHandler()
        formatter = JsonFormatter(
            '%(asctime)s %(levelname)s %(request_id)s %(module)s %(funcName)s %(lineno)d %(message)s'
        )
        handler.setFormatter(formatter)
        handler.addFilter(RequestIdFilter())
        if logger.hasHandlers():
            logger.handlers.clear()
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    else:
        # Basic logging for debug mode if not already configured
        if not app.logger.handlers:
            logging.basicConfig(level=logging.DEBUG)

    # --- Request ID Middleware ---
    @app.before_request
    def assign_request_id():
        g.request_id = str(uuid.uuid4())

    @app.after_request
    def security_headers_middleware(response):
        response.headers['X-Request-ID'] = g.get('request_id', 'N/A')
        return secure_headers(response)

    # --- Rate Limiter Setup ---
    if app.config.get("TESTING"):
        app.config['RATELIMIT_ENABLED'] = False
    limiter.init_app(app)

    # --- Services ---
    SlotMachineService().init_app(app)
    GamesService().init_app(app)

    # --- Error Handlers ---
    @app.errorhandler(ValidationError)
    def handle_validation_error(e):
        # Marshmallow errors raised outside the routes' own schema handling
        request_id = g.get('request_id', 'N/A')
        current_app.logger.warning(
            f"Request ID: {request_id} - Validation error: {e.messages} - Error Code: {ErrorCodes.VALIDATION_ERROR}"
        )
        return jsonify({
            'request_id': request_id,
            'status': False,
            'error_code': ErrorCodes.VALIDATION_ERROR,
            'status_message': 'Input validation failed.',
            'details': {'errors': e.messages},
            'action_button': None
        }), HTTPStatus.UNPROCESSABLE_ENTITY

    @app.errorhandler(WerkzeugHTTPException)
    def handle_werkzeug_http_exception(e):
        request_id = g.get('request_id', 'N/A')
        error_code = ErrorCodes.GENERIC_ERROR # Default
        if e.code == 404:
            error_code = ErrorCodes.NOT_FOUND
        elif e.code == 405:
            error_code = ErrorCodes.METHOD_NOT_ALLOWED
        elif e.code == 429:
            error_code = ErrorCodes.RATE_LIMITED
        elif e.code >= 500:
            error_code = ErrorCodes.INTERNAL_SERVER_ERROR

        current_app.logger.warning(
            f"Request ID: {request_id} - Werkzeug HTTPException: {e.code} - {e.name}: {e.description} - Error Code: {error_code}"
        )
        response_data = {
            'request_id': request_id,
            'status': False,
            'error_code': error_code,
            'status_message': e.name,
            'details': {'description': e.description},
            'action_button': None
        }
        # Keep headers such as Allow or Retry-After from the original response
        response = e.get_response()
        response.data = jsonify(response_data).data
        response.content_type = "application/json"
        return response

    @app.errorhandler(404) # Catches werkzeug.exceptions.NotFound
    def handle_flask_not_found(e):
        request_id = g.get('request_id', 'N/A')
        current_app.logger.warning(
            f"Request ID: {request_id} - HTTP 404 Not Found: {request.url} - Error Code: {ErrorCodes.NOT_FOUND}"
        )
        return jsonify({
            'request_id': request_id,
            'status': False,
            'error_code': ErrorCodes.NOT_FOUND,
            'status_message': 'The requested resource was not found.',
            'details': {'path': request.path},
            'action_button': None
        }), HTTPStatus.NOT_FOUND

    # --- Global Error Handler (catch-all for general exceptions) ---
    @app.errorhandler(Exception)
    def handle_global_exception(e):
        request_id = g.get('request_id', 'N/A')

        if isinstance(e, AppException):
            log = current_app.logger.error if e.status_code >= 500 else current_app.logger.warning
            log(
                f"Request ID: {request_id} - AppException: {e.error_code} - {e.status_message} - Details: {e.details}",
                exc_info=e.status_code >= 500 # Log stack trace for server errors
            )
            return jsonify({
                'request_id': request_id,
                'status': False,
                'error_code': e.error_code,
                'status_message': e.status_message,
                'details': e.details,
                'action_button': e.action_button or None
            }), e.status_code

        if isinstance(e, WerkzeugHTTPException):
            return handle_werkzeug_http_exception(e)

        current_app.logger.critical(
            f"Request ID: {request_id} - Unhandled Critical Exception. Error Code: {ErrorCodes.INTERNAL_SERVER_ERROR}",
            exc_info=True
        )
        return jsonify({
            'request_id': request_id,
            'status': False,
            'error_code': ErrorCodes.INTERNAL_SERVER_ERROR,
            'status_message': 'An unexpected internal server error occurred. Please try again later.',
            'details': {},
            'action_button': None
        }), HTTPStatus.INTERNAL_SERVER_ERROR

    # Register Blueprints
    app.register_blueprint(games_bp)
    app.register_blueprint(slot_bp)
    app.register_blueprint(health_bp)

    log_production_warnings(app)

    return app

def log_production_warnings(app):
    if not app.debug and not app.config.get('TESTING'):
        if app.config.get('RATELIMIT_STORAGE_URI') == 'memory://':
            app.logger.warning(
                "PERFORMANCE/SCALABILITY WARNING: RATELIMIT_STORAGE_URI is set to 'memory://'. "
                "This is not suitable for multi-process or multi-instance deployments, "
                "and each process keeps its own slot machine balance. "
                "Consider using a persistent store like Redis (e.g., 'redis://localhost:6379/0')."
            )


# Create the app instance for direct usage (flask --app arcade_be.app run, gunicorn arcade_be.app:app)
app = create_app()

if __name__ == '__main__':
    app.run(host='0.0.0.0', port=5000, debug=app.debug)
