# File: backend/geoattend/__init__.py
"""Geo Attendance - Application Factory."""
import logging
import os
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()
limiter = Limiter(key_func=get_remote_address)

def create_app(config_name: str = None) -> Flask:
    """Application factory pattern."""
    app = Flask(__name__)

    # Load configuration
    from config import get_config
    config_class = get_config(config_name)
    app.config.from_object(config_class)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)

    # Configure CORS
    CORS(app, origins=app.config.get('CORS_ORIGINS', ["*"]))

    # Setup logging
    setup_logging(app)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Add CLI commands
    register_commands(app)

    @app.route('/health')
    def health_check():
        return jsonify({
            'status': 'healthy',
            'service': 'Geo Attendance',
            'version': '1.0.0'
        })

    return app

def register_blueprints(app: Flask) -> None:
    """Register all application blueprints."""
    from geoattend.api.auth import auth_bp
    from geoattend.api.sessions import sessions_bp
    from geoattend.api.attendance import attendance_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(sessions_bp, url_prefix='/api/sessions')
    app.register_blueprint(attendance_bp, url_prefix='/api/attendance')

def register_error_handlers(app: Flask) -> None:
    """Register error handlers."""
    from geoattend.exceptions import AttendanceError
    from geoattend.utils.helpers import handle_error, error_response
    from werkzeug.exceptions import HTTPException

    @app.errorhandler(AttendanceError)
    def attendance_error(error):
        return error_response(
            error.message,
            error.status_code,
            code=error.code,
            details=error.details,
            **error.extra
        )

    @app.errorhandler(HTTPException)
    def handle_exception(e):
        if e.code >= 500:
            db.session.rollback()
        return handle_error(e.description, e.code)

    @app.errorhandler(Exception)
    def internal_error(error):
        db.session.rollback()
        app.logger.exception('Unhandled error: %s', error)
        return handle_error('Internal server error', 500)

    # JWT error handlers
    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return handle_error('Token has expired', 401)

    @jwt.invalid_token_loader
    def invalid_token_callback(error):
        return handle_error('Invalid token', 401)

    @jwt.unauthorized_loader
    def missing_token_callback(error):
        return handle_error('Authorization token required', 401)

def setup_logging(app: Flask) -> None:
    """Setup application logging."""
    level = getattr(logging, app.config.get('LOG_LEVEL', 'INFO'), logging.INFO)
    app.logger.setLevel(level)

    if not app.debug and not app.testing:
        log_file = app.config.get('LOG_FILE', 'logs/app.log')
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(level)
        app.logger.addHandler(file_handler)
        app.logger.info('Geo Attendance startup')

def register_commands(app: Flask) -> None:
    """Register CLI commands."""
    import click

    @app.cli.command('init-db')
    @click.option('--drop', is_flag=True, help='Drop existing tables')
    def init_db(drop):
        """Initialize the database."""
        from geoattend import models  # noqa: F401

        if drop:
            db.drop_all()
            click.echo('Dropped all tables.')

        db.create_all()
        click.echo('Created all tables.')

    @app.cli.command('seed-db')
    def seed_db():
        """Seed database with demo data."""
        from geoattend.services.seed_service import SeedService

        summary = SeedService.seed_all()
        click.echo(
            f"Seeded course {summary['course_code']} "
            f"with {summary['students']} enrolled students."
        )

    @app.cli.command('create-teacher')
    def create_teacher():
        """Create a teacher account."""
        from sqlalchemy.exc import IntegrityError
        from geoattend.models.teacher import Teacher, TeacherRole

        email = click.prompt('Teacher email')
        name = click.prompt('Teacher name')
        password = click.prompt('Password', hide_input=True, confirmation_prompt=True)
        is_admin = click.confirm('Grant admin role?', default=False)

        teacher = Teacher(
            email=email.lower().strip(),
            name=name.strip(),
            role=TeacherRole.ADMIN if is_admin else TeacherRole.TEACHER
        )
        teacher.set_password(password)

        try:
            db.session.add(teacher)
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise click.ClickException(f'A teacher with email {email} already exists')
        click.echo(f'Teacher created: {teacher.email}')
