import logging
from logging.handlers import RotatingFileHandler

import click
from flask import Flask
from flask_cors import CORS

from fitcoach.config import config
from fitcoach.errors import register_error_handlers
from fitcoach.extensions import db, ma, jwt, migrate, socketio, scheduler, outbox

DRAIN_JOB_ID = "drain_notification_outbox"


def configure_logging(app):
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    formatter = logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")

    root = logging.getLogger()
    root.setLevel(level)
    if not any(isinstance(h, logging.StreamHandler) for h in root.handlers):
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        root.addHandler(console)

    if app.config.get("LOG_FILE"):
        file_handler = RotatingFileHandler(app.config["LOG_FILE"], maxBytes=1024 * 1024, backupCount=5)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    app.logger.setLevel(level)


def configure_scheduler(app):
    """Start the background job that drains the notification outbox."""
    if not app.config.get("SCHEDULER_ENABLED") or scheduler.running:
        return

    scheduler.init_app(app)

    def drain_outbox():
        with app.app_context():
            outbox.drain()

    scheduler.add_job(
        id=DRAIN_JOB_ID,
        func=drain_outbox,
        trigger="interval",
        seconds=app.config["NOTIFICATION_DRAIN_INTERVAL"],
        replace_existing=True,
    )
    scheduler.start()


def register_commands(app):
    @app.cli.command("create-admin")
    @click.option("--email", required=True)
    @click.option("--password", required=True)
    @click.option("--first-name", default="Super")
    @click.option("--last-name", default="Admin")
    def create_admin(email, password, first_name, last_name):
        """Create the first admin account."""
        from fitcoach.models.user import User, ROLE_ADMIN

        email = email.strip().lower()
        if User.query.filter_by(email=email).first():
            click.echo(f"User with email '{email}' already exists.")
            return
        user = User(email=email, first_name=first_name, last_name=last_name, role=ROLE_ADMIN, status="active")
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        click.echo(f"Admin {email} created with id {user.id}")


def create_app(config_name="default"):
    app = Flask(__name__)
    app.config.from_object(config[config_name])

    configure_logging(app)

    db.init_app(app)
    ma.init_app(app)
    jwt.init_app(app)
    migrate.init_app(app, db)
    CORS(app, resources={r"/api/*": {
        "origins": app.config["CORS_ORIGINS"],
        "allow_headers": ["Content-Type", "Authorization"],
        "methods": ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    }})
    socketio.init_app(app, async_mode=app.config["SOCKETIO_ASYNC_MODE"])

    from fitcoach import models  # noqa: F401
    from fitcoach import sockets  # noqa: F401
    from fitcoach.services.notifications import persist_and_push
    outbox.init_app(app, sink=persist_and_push)

    register_error_handlers(app)

    from fitcoach.routes.auth import auth_bp
    from fitcoach.routes.users import users_bp
    from fitcoach.routes.questionnaires import questionnaires_bp
    from fitcoach.routes.exercises import exercises_bp
    from fitcoach.routes.workouts import workouts_bp
    from fitcoach.routes.combined_workouts import combined_workouts_bp
    from fitcoach.routes.sessions import sessions_bp
    from fitcoach.routes.meals import meals_bp
    from fitcoach.routes.notifications import notifications_bp

    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(users_bp, url_prefix="/api/users")
    app.register_blueprint(questionnaires_bp, url_prefix="/api/questionnaires")
    app.register_blueprint(exercises_bp, url_prefix="/api/exercises")
    app.register_blueprint(workouts_bp, url_prefix="/api/workouts")
    app.register_blueprint(combined_workouts_bp, url_prefix="/api/combined-workouts")
    app.register_blueprint(sessions_bp, url_prefix="/api/sessions")
    app.register_blueprint(meals_bp, url_prefix="/api/meals")
    app.register_blueprint(notifications_bp, url_prefix="/api/notifications")

    register_commands(app)
    configure_scheduler(app)

    return app
