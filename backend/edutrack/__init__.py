"""EduTrack - Application Factory."""
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
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["200 per day", "50 per hour"]
)

def create_app(config_name: str = None) -> Flask:
    """Application factory pattern."""
    app = Flask(__name__)

    # Load configuration
    from edutrack.config import get_config
    config_class = get_config(config_name)
    app.config.from_object(config_class)

    # Session history is keyed by date, newest first
    app.json.sort_keys = False

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

    # Setup database
    setup_database(app)

    # Add CLI commands
    register_commands(app)

    @app.route('/health')
    def health_check():
        return jsonify({
            'status': 'healthy',
            'service': 'EduTrack',
            'version': '1.0.0'
        })

    return app

def register_blueprints(app: Flask) -> None:
    """Register all application blueprints."""
    from flask_swagger_ui import get_swaggerui_blueprint
    from edutrack.api.auth import auth_bp
    from edutrack.api.sessions import sessions_bp
    from edutrack.api.attendance import attendance_bp
    from edutrack.api.performance import performance_bp
    from edutrack.api.risk import risk_bp
    from edutrack.api.reports import reports_bp
    from edutrack.api.notifications import notifications_bp
    from edutrack.utils.swagger import SWAGGER_URL, API_URL, SWAGGER_UI_CONFIG, generate_swagger_spec

    # Auth
    app.register_blueprint(auth_bp, url_prefix='/api/auth')

    # Attendance
    app.register_blueprint(sessions_bp, url_prefix='/api/sessions')
    app.register_blueprint(attendance_bp, url_prefix='/api/attendance')

    # Academics
    app.register_blueprint(performance_bp, url_prefix='/api/performance')
    app.register_blueprint(risk_bp, url_prefix='/api/risk')
    app.register_blueprint(reports_bp, url_prefix='/api/reports')
    app.register_blueprint(notifications_bp, url_prefix='/api/notifications')

    # Swagger UI
    @app.route(API_URL)
    def swagger_spec():
        """Serve Swagger/OpenAPI specification."""
        return jsonify(generate_swagger_spec())

    swaggerui_bp = get_swaggerui_blueprint(SWAGGER_URL, API_URL, config=SWAGGER_UI_CONFIG)
    app.register_blueprint(swaggerui_bp, url_prefix=SWAGGER_URL)

def register_error_handlers(app: Flask) -> None:
    """Register error handlers."""
    from edutrack.utils.helpers import handle_error, error_response
    from edutrack.services.exceptions import ServiceError
    from werkzeug.exceptions import HTTPException

    @app.errorhandler(ServiceError)
    def service_error(error):
        return error_response(
            error.message,
            error.status_code,
            code=error.code,
            data=error.details or None
        )

    @app.errorhandler(400)
    def bad_request(error):
        return handle_error(error, 400)

    @app.errorhandler(401)
    def unauthorized(error):
        return handle_error(error, 401)

    @app.errorhandler(403)
    def forbidden(error):
        return handle_error(error, 403)

    @app.errorhandler(404)
    def not_found(error):
        return handle_error(error, 404)

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        return handle_error(error, 500)

    @app.errorhandler(HTTPException)
    def handle_exception(e):
        return handle_error(e, e.code)

    # JWT error handlers
    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return error_response("Token has expired", 401)

    @jwt.invalid_token_loader
    def invalid_token_callback(error):
        return error_response("Invalid token", 401)

    @jwt.unauthorized_loader
    def missing_token_callback(error):
        return error_response("Authorization token required", 401)

def setup_logging(app: Flask) -> None:
    """Setup application logging."""
    if not app.debug and not app.testing:
        log_file = app.config.get('LOG_FILE', 'logs/app.log')
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        level = logging.getLevelName(app.config.get('LOG_LEVEL', 'INFO'))
        file_handler.setLevel(level)
        app.logger.addHandler(file_handler)
        logging.getLogger('edutrack').addHandler(file_handler)

        app.logger.setLevel(level)
        app.logger.info('EduTrack startup')

def setup_database(app: Flask) -> None:
    """Setup database connections."""
    with app.app_context():
        # Import all models
        from edutrack.models import (
            User, UserRole,
            AttendanceSession, AttendanceRecord, AttendanceStatus,
            PerformanceRecord, ProgressReport, Notification
        )

def register_commands(app: Flask) -> None:
    """Register CLI commands."""
    import click
    from sqlalchemy.exc import SQLAlchemyError

    @app.cli.command('init-db')
    @click.option('--drop', is_flag=True, help='Drop existing tables')
    def init_db(drop):
        """Initialize the database."""
        if drop:
            db.drop_all()
            click.echo('Dropped all tables.')

        db.create_all()
        click.echo('Created all tables.')

    @app.cli.command('seed-db')
    def seed_db():
        """Seed database with demo data."""
        from edutrack.services.seed_service import SeedService

        SeedService(db.session).seed_all()
        click.echo('Database seeded successfully!')

    @app.cli.command('create-admin')
    def create_admin():
        """Create admin user."""
        email = click.prompt('Admin email')
        name = click.prompt('Admin name')
        department = click.prompt('Department', default='Computer Science & Engineering')
        password = click.prompt('Password', hide_input=True)

        from edutrack.models.user import User, UserRole

        admin = User(
            email=email.lower().strip(),
            name=name,
            role=UserRole.ADMIN,
            department=department
        )
        admin.set_password(password)

        try:
            db.session.add(admin)
            db.session.commit()
            click.echo(f'Admin user created: {email}')
        except SQLAlchemyError as e:
            db.session.rollback()
            click.echo(f"Error creating admin: {e}")
