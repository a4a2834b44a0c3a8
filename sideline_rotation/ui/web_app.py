"""
Web application module for the Sideline Rotation engine.

This module contains the Flask app that exposes a MatchSession as JSON
API endpoints for a sideline UI.
"""
import logging
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request

from .. import __version__
from ..models import Formation, Player, TeamConfig, TeamConfigError
from ..services import FormationDefinitionError, MatchSession, NoMatchInProgressError, OperationOutcome
from ..services.rotation_calculator import OperationStatus
from ..utils import APP_TITLE, fmt_mmss
from ..utils.constants import DEFAULT_WEB_HOST, DEFAULT_WEB_PORT

logger = logging.getLogger(__name__)


class InvalidRequestError(ValueError):
    """Raised for request bodies missing required fields."""


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _require(data: Dict[str, Any], *keys: str):
    missing = [key for key in keys if not data.get(key)]
    if missing:
        raise InvalidRequestError(f"Missing fields: {', '.join(missing)}")
    values = tuple(str(data[key]) for key in keys)
    return values if len(values) > 1 else values[0]


def _state_payload(state) -> Dict[str, Any]:
    payload = state.to_json()
    payload["sub_timer_display"] = fmt_mmss(state.sub_timer_seconds)
    return payload


def _outcome_response(outcome: OperationOutcome):
    payload = outcome.to_json()
    payload["state"] = _state_payload(outcome.state)
    if outcome.result.status is OperationStatus.REJECTED:
        payload.update({"success": False, "error": outcome.result.reason})
        return jsonify(payload), 400
    payload["success"] = True
    return jsonify(payload)


def create_app(session: Optional[MatchSession] = None) -> Flask:
    """
    Create and configure the Flask application with API endpoints.

    Args:
        session: Match session to serve; a fresh one is created when omitted

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__)
    match_session = session or MatchSession()
    app.config["MATCH_SESSION"] = match_session

    @app.errorhandler(InvalidRequestError)
    @app.errorhandler(TeamConfigError)
    @app.errorhandler(FormationDefinitionError)
    def handle_bad_request(error):
        logger.warning("Bad request: %s", error)
        return jsonify({"success": False, "error": str(error)}), 400

    @app.errorhandler(NoMatchInProgressError)
    def handle_no_match(error):
        return jsonify({"success": False, "error": str(error)}), 400

    # ==================== API Endpoints ==================== #

    @app.route("/api/info", methods=["GET"])
    def get_info():
        return jsonify({"success": True, "app": APP_TITLE, "version": __version__})

    @app.route("/api/state", methods=["GET"])
    def get_state():
        """Get the current game state."""
        state = match_session.state
        if state is None:
            raise NoMatchInProgressError("No match in progress")
        return jsonify({"success": True, "state": _state_payload(state)})

    @app.route("/api/match/start", methods=["POST"])
    def start_match():
        """Start a match from a team configuration, line-up and squad."""
        data = _json_body()
        if not data.get("team_config") or not data.get("formation") or not data.get("players"):
            raise InvalidRequestError("team_config, formation and players are required")
        try:
            players = [Player.from_dict(p) for p in data["players"]]
        except (KeyError, TypeError) as e:
            raise InvalidRequestError(f"Invalid player entry: {e}") from e
        try:
            state = match_session.start_match(
                TeamConfig.from_dict(data["team_config"]),
                Formation.from_dict(data["formation"]),
                players,
                selected_formation=data.get("selected_formation"),
            )
        except ValueError as e:
            raise InvalidRequestError(str(e)) from e
        return jsonify({"success": True, "state": _state_payload(state)})

    @app.route("/api/substitution", methods=["POST"])
    def substitute():
        return _outcome_response(match_session.substitute())

    @app.route("/api/position-switch", methods=["POST"])
    def switch_positions():
        player_a_id, player_b_id = _require(_json_body(), "player_a_id", "player_b_id")
        return _outcome_response(match_session.switch_positions(player_a_id, player_b_id))

    @app.route("/api/goalie", methods=["POST"])
    def switch_goalie():
        player_id = _require(_json_body(), "player_id")
        return _outcome_response(match_session.switch_goalie(player_id))

    @app.route("/api/players/<player_id>/toggle-inactive", methods=["POST"])
    def toggle_inactive(player_id: str):
        return _outcome_response(match_session.toggle_inactive(player_id))

    @app.route("/api/substitutes/swap", methods=["POST"])
    def swap_substitutes():
        slot_a, slot_b = _require(_json_body(), "slot_a", "slot_b")
        return _outcome_response(match_session.swap_substitutes(slot_a, slot_b))

    @app.route("/api/substitutes/reorder", methods=["POST"])
    def reorder_substitute():
        target_slot = _require(_json_body(), "target_slot")
        return _outcome_response(match_session.reorder_substitute(target_slot))

    @app.route("/api/next-target", methods=["POST"])
    def set_next_target():
        target, kind = _require(_json_body(), "target", "kind")
        return _outcome_response(match_session.set_next_target(target, kind))

    @app.route("/api/pairs/<pair_key>/swap", methods=["POST"])
    def swap_pair_positions(pair_key: str):
        return _outcome_response(match_session.swap_pair_positions(pair_key))

    @app.route("/api/undo", methods=["POST"])
    def undo_substitution():
        return _outcome_response(match_session.undo_substitution())

    @app.route("/api/timer/pause", methods=["POST"])
    def pause_timer():
        return _outcome_response(match_session.pause())

    @app.route("/api/timer/resume", methods=["POST"])
    def resume_timer():
        return _outcome_response(match_session.resume())

    @app.route("/api/history", methods=["GET"])
    def get_history():
        return jsonify({"success": True, "history": match_session.get_command_history()})

    return app


def run_web_app(host: str = DEFAULT_WEB_HOST, port: int = DEFAULT_WEB_PORT) -> None:
    """
    Run the web application.

    Args:
        host: Host address to bind to (default: localhost only)
        port: Port number to listen on
    """
    app = create_app()
    app.run(host=host, port=port, debug=False)


if __name__ == "__main__":
    run_web_app()
