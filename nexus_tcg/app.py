"""
Defines the Flask container and the Socket.IO server
"""
import logging
import os

from flask import Flask
from flask_socketio import SocketIO

from . import init_nexus
from .state import env_overrides


def create_app(overrides=None, services=None, with_socketio=True):
    """
    Build the app. Settings come from ``nexus_tcg.config``, then
    ``NEXUS_*`` environment variables, then ``overrides``.
    """
    app = Flask(__name__)
    app.config.from_object("nexus_tcg.config")
    app.config.update(env_overrides(os.environ, list(app.config.keys())))
    app.config.update(overrides or {})

    socketio = SocketIO(app) if with_socketio else None
    init_nexus(app, socketio, services=services)
    return app


def main():
    logging.basicConfig(level=logging.INFO)
    app = create_app()
    socketio = app.extensions["socketio"]
    socketio.run(app, host=os.environ.get("HOST", "127.0.0.1"), port=int(os.environ.get("PORT", "5000")),
                 allow_unsafe_werkzeug=True)


if __name__ == "__main__":
    main()
