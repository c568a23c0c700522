from datetime import datetime, timezone, timedelta
import logging
import os
from flask import Flask, jsonify
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_mail import Mail
from workdesk.database.db_manager import DBManager
from workdesk.database.models.user import User
from workdesk.utils.error_messages import ERROR_MESSAGES
from workdesk.utils.response import error_response
from workdesk.utils.db_init import init_db
from workdesk.database.token_blocklist import BLOCKLIST
from workdesk.payments.client import GatewayClient
from workdesk.payments.sdk_loader import SdkLoader

from .routes.auth import auth_blueprint
from .routes.navigation import navigation_blueprint
from .routes.permissions import permissions_blueprint
from .routes.invoices import invoices_blueprint
from .routes.invoice_payments import invoice_payments_blueprint
from .routes.webhooks import webhooks_bp
from .routes.projects import projects_blueprint
from .routes.timesheets import timesheets_blueprint
from .routes.preferences import preferences_blueprint

mail = Mail()

logger = logging.getLogger(__name__)


def _env_flag(name, default='False'):
    return os.environ.get(name, default).lower() in ('1', 'true', 'yes', 'on')


def configure_logging(level_name):
    logging.basicConfig(
        level=getattr(logging, level_name.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(overrides=None):
    """
    Application factory.

    Args:
        overrides: config values applied last (tests use this to turn off
                   INIT_DB_ON_STARTUP and SCHEDULER_ENABLED).
    """
    app = Flask(__name__)

    # --- Configuration ---
    app.config["JWT_SECRET_KEY"] = os.environ.get('JWT_SECRET_KEY', 'change-me-jwt-secret')
    app.config["SECRET_KEY"] = os.environ.get('SECRET_KEY', 'change-me-secret')
    app.config["JWT_ACCESS_TOKEN_EXPIRES"] = timedelta(hours=int(os.environ.get('JWT_ACCESS_TOKEN_HOURS', '1')))
    app.config["JWT_REFRESH_TOKEN_EXPIRES"] = timedelta(days=int(os.environ.get('JWT_REFRESH_TOKEN_DAYS', '30')))
    app.config["JWT_TOKEN_LOCATION"] = ["headers"]

    app.config['APP_NAME'] = os.environ.get('APP_NAME', 'Workdesk')
    app.config['APP_URL'] = os.environ.get('APP_URL', '')
    app.config['SAAS_MODE'] = _env_flag('SAAS_MODE')
    app.config['BILLING_API_URL'] = os.environ.get('BILLING_API_URL', 'http://localhost:8000')
    app.config['BILLING_API_TOKEN'] = os.environ.get('BILLING_API_TOKEN')
    app.config['BILLING_API_TIMEOUT'] = float(os.environ.get('BILLING_API_TIMEOUT', '30'))
    app.config['PAYMENT_WEBHOOK_SECRET'] = os.environ.get('PAYMENT_WEBHOOK_SECRET')
    app.config['SDK_LOAD_TIMEOUT'] = float(os.environ.get('SDK_LOAD_TIMEOUT', '10'))
    app.config['LOG_LEVEL'] = os.environ.get('LOG_LEVEL', 'INFO')
    app.config['INIT_DB_ON_STARTUP'] = _env_flag('INIT_DB_ON_STARTUP', 'True')
    app.config['SCHEDULER_ENABLED'] = _env_flag('SCHEDULER_ENABLED', 'True')

    # --- Mail Configuration ---
    app.config['MAIL_SERVER'] = os.environ.get('MAIL_SERVER', 'smtp.gmail.com')
    app.config['MAIL_PORT'] = int(os.environ.get('MAIL_PORT', 587))
    app.config['MAIL_USERNAME'] = os.environ.get('MAIL_USERNAME')
    app.config['MAIL_PASSWORD'] = os.environ.get('MAIL_PASSWORD')
    app.config['MAIL_USE_TLS'] = os.environ.get('MAIL_USE_TLS', 'True') == 'True'
    app.config['MAIL_DEFAULT_SENDER'] = os.environ.get('MAIL_DEFAULT_SENDER')

    if overrides:
        app.config.update(overrides)

    configure_logging(app.config['LOG_LEVEL'])

    if app.config['INIT_DB_ON_STARTUP']:
        with app.app_context():
            init_db()

    # --- CORS Configuration ---
    cors_origins = os.environ.get('CORS_ORIGINS', '*')
    CORS(app,
         resources={r"/api/*": {"origins": cors_origins}},
         supports_credentials=True,
         allow_headers=["Content-Type", "Authorization", "X-Signature"],
         methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"])

    mail.init_app(app)

    # --- Payment flow services (shared per process) ---
    app.extensions.setdefault('gateway_client', GatewayClient(
        base_url=app.config['BILLING_API_URL'],
        token=app.config['BILLING_API_TOKEN'],
        timeout=app.config['BILLING_API_TIMEOUT'],
    ))
    app.extensions.setdefault('sdk_loader', SdkLoader(timeout=app.config['SDK_LOAD_TIMEOUT']))

    # --- Scheduler Configuration ---
    if app.config['SCHEDULER_ENABLED']:
        from workdesk.services.scheduler_service import scheduler_service
        scheduler_service.init_app(app)

    jwt = JWTManager(app)

    # --- JWT Blocklist Configuration ---
    def check_if_token_in_blocklist(jwt_header, jwt_payload):
        return jwt_payload["jti"] in BLOCKLIST

    def revoked_token_callback(jwt_header, jwt_payload):
        return error_response(error_code='token_revoked', message=ERROR_MESSAGES["auth"]["token_revoked"], status=401)

    # --- JWT Custom Error Handlers ---
    def handle_invalid_token(error):
        return error_response(error_code='invalid_token', message=ERROR_MESSAGES["auth"]["token_invalid"], status=401)

    def handle_missing_token(error):
        return error_response(error_code='missing_token', message=ERROR_MESSAGES["auth"]["token_missing"], status=401)

    def handle_expired_token(jwt_header, jwt_payload):
        return error_response(error_code='token_expired', message=ERROR_MESSAGES["auth"]["token_expired"], status=401)

    def handle_user_lookup_error(jwt_header, jwt_data):
        return error_response(error_code='invalid_token', message=ERROR_MESSAGES["auth"]["token_invalid"], status=401)

    def user_lookup_callback(_jwt_header, jwt_data):
        return User.find_by_id(jwt_data["sub"])

    jwt.token_in_blocklist_loader(check_if_token_in_blocklist)
    jwt.revoked_token_loader(revoked_token_callback)
    jwt.invalid_token_loader(handle_invalid_token)
    jwt.unauthorized_loader(handle_missing_token)
    jwt.expired_token_loader(handle_expired_token)
    jwt.user_lookup_error_loader(handle_user_lookup_error)
    jwt.user_lookup_loader(user_lookup_callback)

    # --- Register Blueprints ---
    app.register_blueprint(auth_blueprint, url_prefix='/api/auth')
    app.register_blueprint(navigation_blueprint, url_prefix='/api')
    app.register_blueprint(permissions_blueprint, url_prefix='/api')
    app.register_blueprint(invoices_blueprint, url_prefix='/api')
    app.register_blueprint(invoice_payments_blueprint, url_prefix='/api')
    app.register_blueprint(webhooks_bp, url_prefix='/api')
    app.register_blueprint(projects_blueprint, url_prefix='/api')
    app.register_blueprint(timesheets_blueprint, url_prefix='/api')
    app.register_blueprint(preferences_blueprint, url_prefix='/api')

    @app.route("/api/health")
    def health_check():  # type: ignore
        try:
            result = DBManager.execute_query("SELECT 1", fetch="one")
            if result is None:
                raise Exception("DB returned no result")
            db_status = "connected"
            http_status = 200
        except Exception as e:
            db_status = f"error: {str(e)}"
            http_status = 500

        return jsonify({
            "status": "running" if http_status == 200 else "error",
            "message": "Workdesk portal is up and running!" if http_status == 200 else "Database connection failed",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "database": db_status
        }), http_status

    logger.info("Workdesk portal ready (saas_mode=%s)", app.config['SAAS_MODE'])
    return app
