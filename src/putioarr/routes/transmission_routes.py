from flask import Blueprint, request, jsonify, current_app, make_response

from putioarr import transmission
from putioarr.routes.rpc_handlers import handle_torrent_add, handle_torrent_get, handle_torrent_remove
from putioarr.utils.logger import get_logger

logger = get_logger("rpc")
transmission_blueprint = Blueprint('transmission', __name__)

# Methods that the arrs call but that need no work on our side
NOOP_METHODS = ["torrent-set", "queue-move-top"]


def _validate_user(state) -> bool:
    auth = request.authorization
    if auth is None or auth.password is None:
        return False
    return auth.username == state.config.username and auth.password == state.config.password


def _session_conflict():
    response = make_response("", 409)
    response.headers[transmission.SESSION_ID_HEADER] = transmission.SESSION_ID
    response.content_type = "application/json"
    return response


@transmission_blueprint.route('/transmission/rpc', methods=['GET'])
def rpc_get():
    """Pretty much only used for authentication"""
    state = current_app.config['APP_STATE']
    if not _validate_user(state):
        return "forbidden", 403
    return _session_conflict()


@transmission_blueprint.route('/transmission/rpc', methods=['POST'])
def rpc_post():
    """Handle a Transmission JSON-RPC call"""
    state = current_app.config['APP_STATE']

    # A 409 makes the client retry with the session id, and with credentials
    if not _validate_user(state):
        return _session_conflict()

    payload = request.get_json(force=True, silent=True)
    if not isinstance(payload, dict):
        payload = {}
    method = payload.get("method", "")
    arguments = payload.get("arguments") or {}
    logger.info(f"client rpc request for {method}")

    try:
        if method == "session-get":
            result_arguments = transmission.session_config(state.config.download_directory)
        elif method in NOOP_METHODS:
            result_arguments = {}
        elif method == "torrent-get":
            result_arguments = handle_torrent_get(state)
        elif method == "torrent-add":
            try:
                handle_torrent_add(state, arguments)
            except Exception as e:
                logger.error(f"torrent-add failed: {e}")
                return str(e), 400
            result_arguments = {}
        elif method == "torrent-remove":
            handle_torrent_remove(state, arguments)
            result_arguments = {}
        else:
            logger.warning(f"Unknown rpc method {method}")
            return jsonify({"result": f"method not recognized: {method}", "arguments": {}}), 200
    except Exception as e:
        logger.error(f"Error handling rpc request {method}: {str(e)}")
        return jsonify({"result": str(e)}), 500

    return jsonify({"result": "success", "arguments": result_arguments}), 200
