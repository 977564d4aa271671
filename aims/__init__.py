import logging

import click
from flask import Flask, jsonify
from werkzeug.security import generate_password_hash

from .extensions import db, migrate, login_manager
from .errors import register_error_handlers


def configure_logging(app):
    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logging.getLogger("aims").setLevel(app.config.get("LOG_LEVEL", "INFO"))


def register_commands(app):
    from .services.timetable import seed_timetable
    from .models.user import User

    @app.cli.command("seed-timetable")
    def seed_timetable_command():
        """Load the weekly slot grid."""
        count = seed_timetable(db.session)
        click.echo(f"Timetable initialized with {count} entries")

    @app.cli.command("create-admin")
    @click.argument("username")
    @click.password_option()
    def create_admin_command(username, password):
        """Create an admin login."""
        db.session.add(User(username=username.strip().lower(), role="admin",
                            password_hash=generate_password_hash(password)))
        db.session.commit()
        click.echo(f"Admin {username} created")


def create_app(config_object="config.Config", notifier=None):
    app = Flask(__name__)
    app.config.from_object(config_object)
    configure_logging(app)

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    from . import models
    from .models.user import User
    from .services.notifier import EmailNotifier

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({"error": "UNAUTHORIZED", "message": "Authentication required"}), 401

    app.extensions["aims_notifier"] = notifier or EmailNotifier.from_config(app.config)

    from .blueprints.auth import bp as auth_bp
    from .blueprints.admin import bp as admin_bp
    from .blueprints.teacher import bp as teacher_bp
    from .blueprints.student import bp as student_bp
    from .blueprints.enrollment import bp as enrollment_bp
    from .blueprints.grades import bp as grades_bp
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(admin_bp, url_prefix="/admin")
    app.register_blueprint(teacher_bp, url_prefix="/teacher")
    app.register_blueprint(student_bp, url_prefix="/student")
    app.register_blueprint(enrollment_bp, url_prefix="/enrollment")
    app.register_blueprint(grades_bp, url_prefix="/grades")
    register_error_handlers(app)
    register_commands(app)

    return app
