"""
Flask application and HTTP server for the Transmission RPC endpoint.
"""
import time

from flask import Flask, g, request
from werkzeug.serving import make_server

from putioarr.routes.transmission_routes import transmission_blueprint
from putioarr.utils.app_state import AppState
from putioarr.utils.logger import get_logger

logger = get_logger("http")


def create_app(state: AppState) -> Flask:
    """
    Create the Flask app serving /transmission/rpc.

    Args:
        state: Shared application state, available to routes as
            current_app.config['APP_STATE']

    Returns:
        Configured Flask app
    """
    app = Flask(__name__)
    app.config['APP_STATE'] = state
    app.register_blueprint(transmission_blueprint)

    @app.before_request
    def start_timer():
        g.request_start = time.time()

    @app.after_request
    def log_request(response):
        elapsed = time.time() - g.get("request_start", time.time())
        logger.info(
            f'{request.remote_addr} "{request.method} {request.full_path.rstrip("?")} '
            f'{request.environ.get("SERVER_PROTOCOL", "HTTP/1.1")}" {response.status_code} '
            f'{response.calculate_content_length() or 0} "{request.referrer or "-"}" '
            f'"{request.user_agent.string or "-"}" {elapsed:.6f}'
        )
        return response

    return app


def create_server(app: Flask, bind_address: str, port: int):
    """Create a threaded WSGI server; call serve_forever() to run it."""
    return make_server(bind_address, port, app, threaded=True)
