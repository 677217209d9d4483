"""
Portfolio Site - Main Application Entry Point
Application Factory Pattern: configuration, extensions, backends and blueprints

Route handling lives in the blueprints. The document store is created once
per app; the auth service is created per request from the browser session.
"""

import os
from datetime import datetime
from flask import Flask, render_template, redirect, request, flash
from sqlalchemy import text
from config import get_config
from extensions import db
from models import StoredDocument  # noqa: F401 (registers the documents table)
from backends import build_document_store
from utils.auth import get_auth, close_auth, current_id_token
from utils.helpers import text_to_paragraphs
from utils.notifications import send_email

# Import all blueprints
from blueprints.auth import auth_bp
from blueprints.pages import pages_bp
from blueprints.dashboard import dashboard_bp


def create_app(config_name=None):
    """
    Application Factory Pattern
    Creates and configures Flask application instance

    Args:
        config_name (str): Configuration environment name (optional)

    Returns:
        Flask: Configured Flask application instance
    """

    app = Flask(__name__)

    # Load configuration
    app.config.from_object(get_config(config_name))

    # Initialize extensions and backends with app
    initialize_extensions(app)
    initialize_backends(app)

    # Register Jinja filters
    app.jinja_env.filters['paragraphs'] = text_to_paragraphs

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Register request/response hooks
    register_hooks(app)

    # Health check route
    @app.route('/health')
    def health_check():
        return {'status': 'ok', 'message': 'Portfolio is running'}, 200

    return app


def initialize_extensions(app):
    """Initialize Flask extensions with the app instance"""
    db.init_app(app)

    # Tables back the local document store only
    if app.config.get('DOCUMENT_BACKEND') != 'sql':
        return

    with app.app_context():
        try:
            db.create_all()
            # Verify connection
            db.session.execute(text('SELECT 1'))
            app.logger.info("Database initialized successfully")
        except Exception as e:
            app.logger.error(f"Database initialization failed: {str(e)}")


def initialize_backends(app):
    """Document store, login throttling state and the password reset mailer"""
    app.extensions['document_store'] = build_document_store(app.config, token_getter=current_id_token)
    app.extensions['login_attempts'] = {}
    app.extensions['rate_limits'] = {}
    app.extensions['mailer'] = send_email
    app.logger.info(f"Backends: documents={app.config.get('DOCUMENT_BACKEND')}, "
                    f"auth={app.config.get('AUTH_BACKEND')}")


def register_blueprints(app):
    """Register all application blueprints"""
    app.register_blueprint(pages_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(dashboard_bp)


def register_error_handlers(app):
    """Register custom error handlers"""

    @app.errorhandler(404)
    def page_not_found(e):
        return render_template('404.html'), 404

    @app.errorhandler(500)
    def internal_server_error(e):
        app.logger.error(f"Server Error: {str(e)}")
        return render_template('500.html'), 500

    @app.errorhandler(413)
    def file_too_large(e):
        max_mb = app.config.get('MAX_CONTENT_LENGTH', 0) // (1024 * 1024)
        flash(f'File is too large. Maximum size is {max_mb}MB.', 'error')
        return redirect(request.url), 303


def register_hooks(app):
    """Register request/response hooks and context processors"""

    app.teardown_request(close_auth)

    @app.context_processor
    def inject_global_vars():
        auth = get_auth()
        return {
            'current_user': auth.user,
            'is_authenticated': auth.is_authenticated,
            'current_year': datetime.now().year,
        }

    @app.after_request
    def add_security_headers(response):
        """Add security headers to all responses"""
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'SAMEORIGIN'
        response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'
        if not app.debug:
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'
        return response


if __name__ == '__main__':
    # Get environment
    env = os.environ.get('FLASK_ENV', 'development')

    # Create app
    app = create_app(env)

    # Run development server
    app.run(
        host='0.0.0.0',
        port=int(os.environ.get('PORT', 5000)),
        debug=(env == 'development')
    )
