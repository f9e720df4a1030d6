from flask import Flask
from flasgger import Swagger
from flask_cors import CORS
import logging

from .config import get_config
from .errors import register_error_handlers
from .rate_limit import configure_rate_limiting
from models import storage
from models.account_store import AccountStore
from services.session_service import SessionService
from utils.password_hasher import PasswordHasher
from utils.tokens import TokenAuthority

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0",
    "info": {
        "title": "Account Session API",
        "version": "1.0.0",
        "description": "Account registration, login and access/refresh token sessions.",
    },
    "basePath": "/",  # blueprints are mounted under /api/v1
    "schemes": ["http"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Enter the token with the `Bearer ` prefix, e.g. \"Bearer abcde12345\"."
        }
    }
}

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec_1",
            "route": "/swagger.json",
            "rule_filter": lambda rule: True,   # include all endpoints
            "model_filter": lambda tag: True,   # include all models
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
}


def build_session_service(config) -> SessionService:
    """
    Wire the auth collaborators from configuration values.
    Secrets are read here once and passed in; nothing downstream looks them up.
    """
    tokens = TokenAuthority(
        access_secret=config["ACCESS_TOKEN_SECRET"],
        refresh_secret=config["REFRESH_TOKEN_SECRET"],
        access_ttl=config["ACCESS_TOKEN_EXPIRES"],
        refresh_ttl=config["REFRESH_TOKEN_EXPIRES"],
        algorithm=config["JWT_ALGORITHM"],
        issuer=config.get("JWT_ISSUER"),
        leeway=config.get("JWT_LEEWAY_SECONDS", 0),
    )
    hasher = PasswordHasher(
        time_cost=config["ARGON2_TIME_COST"],
        memory_cost=config["ARGON2_MEMORY_COST"],
        parallelism=config["ARGON2_PARALLELISM"],
    )
    return SessionService(AccountStore(storage), hasher, tokens)


def create_app(config_name: str | None = None, **overrides) -> Flask:
    """
    Application factory: creates and configures the Flask app.
    Keyword overrides are applied on top of the selected config class.
    """
    app = Flask(__name__)

    config_cls = get_config(config_name)
    config_cls.validate()
    app.config.from_object(config_cls)
    app.config.update(overrides)

    logging.getLogger().setLevel(app.config.get("LOG_LEVEL", "INFO"))

    storage.reload(app.config["DATABASE_URL"], echo=app.config.get("SQL_ECHO", False))

    service = build_session_service(app.config)
    app.extensions["session_service"] = service
    app.extensions["account_store"] = service.store
    app.extensions["token_authority"] = service.tokens

    # Cross-Origin Resource Sharing: enable for dev, configurable for prod
    CORS(app, resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}}, supports_credentials=True)

    # Swagger UI and JSON
    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    # Register global error handlers that return the uniform envelope
    register_error_handlers(app)

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .users import bp as users_bp

    configure_rate_limiting(app, auth_bp)

    app.register_blueprint(health_bp, url_prefix="/api/v1")
    app.register_blueprint(auth_bp, url_prefix="/api/v1/auth")
    app.register_blueprint(users_bp, url_prefix="/api/v1")

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        # This calls scoped_session.remove(), preventing connection leaks
        storage.close()

    @app.route("/")
    def root():
        return {
            "message": "Welcome to Account Session API",
            "docs": "/apidocs/",
            "health": "/api/v1/health",
        }, 200

    return app
