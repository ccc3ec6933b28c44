# nexus_tcg/__init__.py
from .routes import nexus_bp
from .sockets import make_notifier, register_nexus_socket_handlers
from .state import EXTENSION_KEY, build_services


def init_nexus(app, socketio=None, services=None):
    app.extensions[EXTENSION_KEY] = services or build_services(app.config)
    app.register_blueprint(nexus_bp)
    if socketio is not None:
        register_nexus_socket_handlers(socketio)
        app.extensions["nexus_notify"] = make_notifier(socketio)
