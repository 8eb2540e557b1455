# voicepath/__init__.py
import os
from typing import Any, Dict

from flask import Flask, jsonify
from flask_cors import CORS

from .config import Config
from .errors import VoicePathError
from .extensions import db, socketio
from .focus.session import FocusSessionRegistry

"""
Note on import ordering:
Blueprints and Socket.IO namespaces are imported inside create_app() so that
importing the package (e.g. for the models) does not pull in the routes.
"""


def create_app(config_object=None):
    app = Flask(__name__)
    app.config.from_object(config_object or Config)

    # If running under pytest, force an in-memory DB and testing mode BEFORE init_app
    # so the SQLAlchemy engine binds to the correct URI for the lifetime of the app.
    if os.environ.get('PYTEST_CURRENT_TEST'):
        app.config['TESTING'] = True
        app.config['SQLALCHEMY_DATABASE_URI'] = 'sqlite:///:memory:'

    # Ensure instance folder exists (default SQLite file lives there)
    try:
        os.makedirs(app.instance_path)
    except OSError:
        pass

    # Browser client lives on another origin
    origins = app.config.get('CORS_ORIGINS') or ["*"]
    cors_origins = "*" if "*" in origins else origins
    CORS(app, resources={r"/*": {"origins": cors_origins}})

    # Initialize Application Extensions
    db.init_app(app)
    # eventlet in production (see run.py / gunicorn.conf.py); plain threads under
    # pytest so the Socket.IO test client handles events synchronously.
    async_mode: str = "eventlet"
    if app.config.get('TESTING') or os.environ.get('PYTEST_CURRENT_TEST'):
        async_mode = 'threading'
    socketio_kwargs: Dict[str, Any] = {
        "cors_allowed_origins": cors_origins,
        "async_mode": async_mode,
    }
    if async_mode == "threading":
        socketio_kwargs["async_handlers"] = False
    socketio.init_app(app, **socketio_kwargs)

    # Focus timers are app state, one session per task
    app.extensions["focus_sessions"] = FocusSessionRegistry(
        default_interval_minutes=app.config.get('FOCUS_CHECKIN_INTERVAL_MINUTES', 1)
    )

    from .sockets.focus_gateway import register_namespace
    register_namespace(socketio)

    @app.errorhandler(VoicePathError)
    def _handle_domain_error(exc: VoicePathError):
        db.session.rollback()
        app.logger.warning(f"[API] {exc.__class__.__name__}: {exc.message}")
        return jsonify(exc.to_dict()), exc.status_code

    # Register App Blueprints (import lazily to avoid cycles)
    from .main.routes import main_bp
    from .tasks.routes import tasks_bp
    from .flow.routes import flow_bp
    from .service.routes.voice_tasks import voice_tasks_bp
    from .service.routes.flowchart import flowchart_bp
    from .service.routes.assistant import assistant_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(tasks_bp, url_prefix="/api")
    app.register_blueprint(flow_bp, url_prefix="/api/flow")
    app.register_blueprint(voice_tasks_bp, url_prefix="/api")
    app.register_blueprint(flowchart_bp, url_prefix="/api")
    app.register_blueprint(assistant_bp, url_prefix="/api")

    with app.app_context():
        # Import models so their tables are known, then create any missing ones.
        from . import models  # noqa: F401
        db.create_all()

    app.logger.info(f"[{app.config.get('APP_NAME', 'VoicePath')}] Application initialised")
    return app


__all__ = ["create_app", "socketio", "db"]
