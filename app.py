from flask import Flask, request, g, jsonify
from sqlalchemy.exc import SQLAlchemyError
from config import Config
from routes import health_bp, auth_bp, admin_bp, admin_comments_bp, comments_bp

from models import db
from flask_migrate import Migrate
from utils.auth_context import load_current_user, refresh_session
from security.bruteforce import init_login_guard
from security.csrf import require_csrf
from security.rate_limit import init_rate_limiters


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(admin_comments_bp)
    app.register_blueprint(comments_bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    # Process-local throttling state
    init_rate_limiters(app)
    init_login_guard(app)

    @app.before_request
    def _load_user():
        load_current_user()

    CSRF_EXEMPT_PATHS = {
        "/auth/login",
        "/comments",
        "/health",
    }

    @app.before_request
    def _csrf_protect():
        # Only protect state-changing requests
        if request.method in ("POST", "PUT", "PATCH", "DELETE"):
            # Exempt login and anonymous endpoints
            if request.path in CSRF_EXEMPT_PATHS:
                return None

            # Only enforce CSRF if user is already authenticated (cookie session)
            if getattr(g, "user", None) is not None:
                failure = require_csrf()
                if failure:
                    return failure

    @app.after_request
    def _refresh_session(resp):
        return refresh_session(resp)

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"
        # the login page is plain HTML with no scripts or styles
        resp.headers["Content-Security-Policy"] = "default-src 'none'; form-action 'self'; frame-ancestors 'none';"
        return resp

    register_error_handlers(app)
    register_cli(app)

    return app

#-------------------------

def register_error_handlers(app):
    @app.errorhandler(404)
    def _not_found(_err):
        return jsonify(error="Not found"), 404

    @app.errorhandler(405)
    def _method_not_allowed(_err):
        return jsonify(error="Method not allowed"), 405

    @app.errorhandler(SQLAlchemyError)
    def _database_error(err):
        db.session.rollback()
        app.logger.exception("Database error on %s %s", request.method, request.path)
        return jsonify(error="Internal server error"), 500

    @app.errorhandler(500)
    def _internal_error(_err):
        return jsonify(error="Internal server error"), 500

#-------------------------
import click
from models.user import User, ROLES
from security.password import hash_password
from security.password_policy import validate_password
from security.sanitize import normalize_email, is_valid_email

def register_cli(app):
    @app.cli.command("create-account")
    @click.argument("email")
    @click.option("--name", required=True, help="Display name.")
    @click.option("--role", type=click.Choice(ROLES), default="admin", show_default=True)
    @click.password_option(help="Account password (prompted when omitted).")
    def create_account(email, name, role, password):
        """Provision an admin/editor/viewer account."""
        email = normalize_email(email)
        if not is_valid_email(email):
            raise click.BadParameter("Invalid email", param_hint="EMAIL")

        valid, errors = validate_password(password)
        if not valid:
            raise click.ClickException("; ".join(errors))

        if User.query.filter_by(email=email).first():
            raise click.ClickException(f"{email} already exists")

        user = User(email=email, name=name.strip(), role=role, password_hash=hash_password(password))
        db.session.add(user)
        db.session.commit()
        click.echo(f"Created {role} account {email}")

    @app.cli.command("reset-password")
    @click.argument("email")
    @click.password_option(help="New password (prompted when omitted).")
    def reset_password(email, password):
        """Replace an account's password."""
        user = User.query.filter_by(email=normalize_email(email)).first()
        if not user:
            raise click.ClickException("Account not found")

        valid, errors = validate_password(password)
        if not valid:
            raise click.ClickException("; ".join(errors))

        user.password_hash = hash_password(password)
        db.session.commit()
        click.echo(f"Password updated for {user.email}")

#-------------------------




if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)
