from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_migrate import Migrate
from datetime import timedelta
import os
from dotenv import load_dotenv

load_dotenv()

db = SQLAlchemy()
login_manager = LoginManager()
migrate = Migrate()

def create_app(test_config=None):
    app = Flask(__name__)

    # Configuration
    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    app.config['SQLALCHEMY_DATABASE_URI'] = os.environ.get('DATABASE_URL') or 'sqlite:///membership.db'
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['MEDIA_ROOT'] = os.environ.get('MEDIA_ROOT') or os.path.join(app.root_path, 'static')
    app.config['BASE_URL'] = os.environ.get('BASE_URL') or 'http://localhost:5051'
    app.config['MAX_PHOTO_SIZE'] = 5 * 1024 * 1024  # 5MB per photo
    app.config['MAX_CONTENT_LENGTH'] = 16 * 1024 * 1024  # 16MB max request size
    app.config['SHOW_ERROR_DETAIL'] = os.environ.get('APP_ENV', 'production') == 'development'
    app.config['LOG_LEVEL'] = os.environ.get('LOG_LEVEL', 'INFO').upper()

    # Session cookie for the admin area
    app.config['SESSION_COOKIE_HTTPONLY'] = True
    app.config['SESSION_COOKIE_SAMESITE'] = 'Lax'
    app.config['PERMANENT_SESSION_LIFETIME'] = timedelta(days=1)

    if test_config:
        app.config.update(test_config)

    app.logger.setLevel(app.config['LOG_LEVEL'])

    # Initialize extensions
    db.init_app(app)
    login_manager.init_app(app)
    migrate.init_app(app, db)

    # Create tables
    from membership import models  # noqa: F401
    with app.app_context():
        db.create_all()

    # Create media directories
    from membership.media import PHOTO_DIR, QR_DIR
    os.makedirs(os.path.join(app.config['MEDIA_ROOT'], PHOTO_DIR), exist_ok=True)
    os.makedirs(os.path.join(app.config['MEDIA_ROOT'], QR_DIR), exist_ok=True)

    # User loader for Flask-Login
    from membership.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    # JSON envelopes instead of login redirects
    from membership.responses import register_error_handlers, unauthorized
    login_manager.unauthorized_handler(unauthorized)
    register_error_handlers(app)

    # Register blueprints
    from membership.routes import members_bp, admin_bp, verification_bp

    app.register_blueprint(members_bp, url_prefix='/api/members')
    app.register_blueprint(admin_bp, url_prefix='/admin')
    app.register_blueprint(verification_bp)

    return app
