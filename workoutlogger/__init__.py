import logging
import os
from logging.handlers import RotatingFileHandler

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from workoutlogger.config import config as config_by_name
from workoutlogger.errors import ApiError, ConfigurationError, error_response
from workoutlogger.extensions import db, ma, jwt, migrate

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(app):
    """Attach handlers to the package logger once, at the configured level."""
    level_name = str(app.config.get('LOG_LEVEL', 'INFO')).upper()
    level = getattr(logging, level_name, logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT)

    package_logger = logging.getLogger('workoutlogger')
    package_logger.setLevel(level)
    app.logger.setLevel(level)

    if not any(getattr(h, '_workoutlogger', False) for h in package_logger.handlers):
        stream = logging.StreamHandler()
        stream.setFormatter(formatter)
        stream._workoutlogger = True
        package_logger.addHandler(stream)

    log_file = app.config.get('LOG_FILE')
    if log_file and not any(isinstance(h, RotatingFileHandler) for h in package_logger.handlers):
        os.makedirs(os.path.dirname(log_file) or '.', exist_ok=True)
        file_handler = RotatingFileHandler(log_file, maxBytes=1_000_000, backupCount=5)
        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)


def configure_jwt(app):
    """Resolve the signing key and token claims, failing fast without a key."""
    secret = os.getenv('JWT_KEY') or app.config.get('JWT_SECRET_KEY')
    if not secret:
        raise ConfigurationError(
            "JWT signing key is not configured. Set JWT_KEY or JWT_SECRET_KEY."
        )
    app.config['JWT_SECRET_KEY'] = secret

    issuer = app.config.get('JWT_ISSUER')
    if issuer:
        app.config['JWT_ENCODE_ISSUER'] = issuer
        app.config['JWT_DECODE_ISSUER'] = issuer
    audience = app.config.get('JWT_AUDIENCE')
    if audience:
        app.config['JWT_ENCODE_AUDIENCE'] = audience
        app.config['JWT_DECODE_AUDIENCE'] = audience


def register_jwt_callbacks():
    from workoutlogger.models import User

    @jwt.user_lookup_loader
    def user_lookup_callback(_jwt_header, jwt_data):
        return db.session.query(User).filter_by(username=jwt_data["sub"]).first()

    @jwt.user_lookup_error_loader
    def user_lookup_error_callback(_jwt_header, jwt_data):
        logger.warning("Token presented for unknown user %r", jwt_data.get("sub"))
        return jsonify({"msg": "Unknown user"}), 401

    @jwt.expired_token_loader
    def expired_token_callback(_jwt_header, _jwt_payload):
        return jsonify({"msg": "Token has expired"}), 401

    @jwt.invalid_token_loader
    def invalid_token_callback(reason):
        return jsonify({"msg": f"Invalid token: {reason}"}), 401

    @jwt.unauthorized_loader
    def unauthorized_callback(reason):
        return jsonify({"msg": reason}), 401


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(error):
        return error_response(error)

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({"msg": error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        db.session.rollback()
        logger.exception("Unhandled error")
        return jsonify({"msg": "Internal server error"}), 500


def register_commands(app):
    import click

    @app.cli.command("create-user")
    @click.argument("username")
    @click.argument("password")
    def create_user_command(username, password):
        """Create USERNAME with PASSWORD under the normal password policy."""
        from workoutlogger.services import AuthGateway

        _, error = AuthGateway(db.session, app.config).register(username, password)
        if error:
            raise click.ClickException(error.msg)
        click.echo(f"User '{username}' created.")


def create_app(config_name=None, overrides=None):
    app = Flask(__name__, instance_relative_config=True)

    # Settings: class, then instance/config.py, then explicit overrides
    config_name = config_name or os.getenv('FLASK_CONFIG', 'default')
    app.config.from_object(config_by_name[config_name])
    app.config.from_pyfile('config.py', silent=True)
    if overrides:
        app.config.update(overrides)

    configure_logging(app)
    configure_jwt(app)

    # Extensions
    db.init_app(app)
    ma.init_app(app)
    jwt.init_app(app)
    migrate.init_app(app, db)

    prefix = app.config['API_PREFIX'].rstrip('/')
    CORS(app, resources={rf"{prefix}/*": {
        "origins": app.config['CORS_ORIGINS'],
        "allow_headers": ["Content-Type", "Authorization"],
        "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    }})

    register_jwt_callbacks()
    register_error_handlers(app)
    register_commands(app)

    # Blueprints
    from workoutlogger.routes import auth_bp, guest_auth_bp, workouts_bp, health_bp

    app.register_blueprint(auth_bp, url_prefix=f"{prefix}/auth")
    app.register_blueprint(guest_auth_bp, url_prefix=f"{prefix}/guest-auth")
    app.register_blueprint(workouts_bp, url_prefix=f"{prefix}/workouts")
    app.register_blueprint(health_bp, url_prefix=prefix)

    if app.config.get('AUTO_CREATE_TABLES'):
        with app.app_context():
            db.create_all()

    logger.info("WorkoutLogger started with '%s' configuration", config_name)
    return app
