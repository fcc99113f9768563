"""
Application Flask - Factory Pattern
"""
import logging
import os
from flask import Flask, jsonify
from flasgger import Swagger

from catalog_admin.config import config
from catalog_admin.extensions import db, migrate, jwt, cors, ma
from catalog_admin.core.crypto import get_cipher
from catalog_admin.core.errors import ServiceError, EncryptionKeyNotConfigured


# Configuration Swagger
SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec",
            "route": "/apispec.json",
            "rule_filter": lambda rule: True,
            "model_filter": lambda tag: True,
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/"
}

SWAGGER_TEMPLATE = {
    "info": {
        "title": "Catalog Admin API",
        "description": "API REST d'administration: arbre de catégories, locales et identifiants chiffrés, utilisateurs.",
        "version": "1.0.0"
    },
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "JWT Authorization header. Example: 'Bearer {token}'"
        }
    },
    "security": [{"Bearer": []}],
    "tags": [
        {"name": "Auth", "description": "Authentification et gestion des tokens JWT"},
        {"name": "Categories", "description": "Arbre des catégories"},
        {"name": "Locales", "description": "Locales et secrets Bazaarvoice"},
        {"name": "Users", "description": "Gestion des utilisateurs"}
    ]
}


def create_app(config_name=None):
    """
    Factory pour créer l'application Flask.
    """
    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config[config_name])

    configure_logging(app)

    # Clé de chiffrement: erreur fatale au démarrage si exigée et absente
    if app.config.get('REQUIRE_ENCRYPTION_KEY'):
        get_cipher()

    # Initialiser les extensions
    register_extensions(app)

    # Initialiser Swagger
    Swagger(app, config=SWAGGER_CONFIG, template=SWAGGER_TEMPLATE)

    # Enregistrer les blueprints
    register_blueprints(app)

    # Enregistrer les callbacks JWT
    register_jwt_callbacks(app)

    # Enregistrer les error handlers
    register_error_handlers(app)

    # Enregistrer les hooks
    register_hooks(app)

    return app


def configure_logging(app):
    """
    Configure le logging standard (niveau et format) pour l'application
    et les loggers du package.
    """
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)

    package_logger = logging.getLogger('catalog_admin')
    package_logger.setLevel(level)
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s [%(name)s] %(message)s'
        ))
        package_logger.addHandler(handler)

    app.logger.setLevel(level)


def register_extensions(app):
    """
    Initialise les extensions Flask.
    """
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    ma.init_app(app)

    cors.init_app(app, resources={
        r"/*": {
            "origins": app.config.get('CORS_ORIGINS', '*'),
            "methods": ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization", "X-Requested-With"],
            "supports_credentials": False
        }
    })


def register_blueprints(app):
    """
    Enregistre les blueprints de l'API.
    """
    from catalog_admin.api.v1 import api_v1
    app.register_blueprint(api_v1)

    # Route de santé
    @app.route('/health')
    def health():
        return jsonify({'status': 'healthy', 'version': '1.0.0'}), 200

    # Route racine
    @app.route('/')
    def index():
        return jsonify({
            'name': 'Catalog Admin API',
            'version': '1.0.0',
            'endpoints': {
                'health': '/health',
                'api': '/api/v1',
                'auth': '/api/v1/auth',
                'categories': '/api/v1/categories',
                'admin_categories': '/api/v1/admin/categories',
                'admin_locales': '/api/v1/admin/locales',
                'admin_users': '/api/v1/admin/users'
            }
        }), 200


def register_jwt_callbacks(app):
    """
    Enregistre les callbacks JWT pour la gestion des tokens.
    """
    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return jsonify({
            'error': 'Token expiré',
            'message': 'Veuillez vous reconnecter'
        }), 401

    @jwt.invalid_token_loader
    def invalid_token_callback(error):
        return jsonify({
            'error': 'Token invalide',
            'message': str(error)
        }), 401

    @jwt.unauthorized_loader
    def missing_token_callback(error):
        return jsonify({
            'error': 'Token manquant',
            'message': 'Authentification requise'
        }), 401


def register_error_handlers(app):
    """
    Enregistre les gestionnaires d'erreurs globaux.
    """
    @app.errorhandler(ServiceError)
    def service_error(error):
        db.session.rollback()
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(EncryptionKeyNotConfigured)
    def encryption_key_missing(error):
        db.session.rollback()
        app.logger.error(str(error))
        return jsonify({
            'error': 'Erreur serveur',
            'message': 'Chiffrement non configuré'
        }), 500

    @app.errorhandler(400)
    def bad_request(error):
        return jsonify({
            'error': 'Requête invalide',
            'message': str(error.description) if hasattr(error, 'description') else 'Données invalides'
        }), 400

    @app.errorhandler(403)
    def forbidden(error):
        return jsonify({'error': 'Forbidden'}), 403

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({
            'error': 'Non trouvé',
            'message': 'La ressource demandée n\'existe pas'
        }), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({
            'error': 'Méthode non autorisée',
            'message': 'Cette méthode HTTP n\'est pas supportée pour cette route'
        }), 405

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        return jsonify({
            'error': 'Erreur serveur',
            'message': 'Une erreur interne est survenue'
        }), 500


def register_hooks(app):
    """
    Enregistre les hooks de requête.
    """
    @app.after_request
    def after_request(response):
        # Headers de sécurité
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['X-XSS-Protection'] = '1; mode=block'
        # Les réponses peuvent contenir des secrets déchiffrés
        response.headers['Cache-Control'] = 'no-store'
        return response


# Point d'entrée pour le développement
if __name__ == '__main__':
    app = create_app()
    app.run(debug=True, host='0.0.0.0', port=5000)
