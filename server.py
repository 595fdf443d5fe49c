"""
Minimal Flask API that exposes one immersive chess session to a 3D front end.

Endpoints:
- GET  /api/session          -> session projection + camera state
- POST /api/session/input    -> {"key": "w"|"a"|"s"|"d"|"space"|...} or {"action": "up"|...|"confirm"}
- POST /api/session/reset    -> {"player_side": "white"|"black"} (optional; keeps the current side)
- POST /api/session/camera   -> {"mode": "centered"|"follow"}
- GET  /api/camera           -> camera state only (polled every frame by the renderer)
- POST /api/camera/orbit     -> {"target": [x, y, z], "position": [x, y, z]} (either optional; manual orbit/pan/zoom)

The session runs on a SessionHost loop thread; handlers only submit events and read projections.
"""
from __future__ import annotations

import logging
import os

from flask import Flask, jsonify, request

from immersive_chess.camera import CameraMode, Vec3
from immersive_chess.cursor import CONFIRM_KEYS, Direction, direction_for_key
from immersive_chess.host import OrbitCamera, SessionHost, SetCameraMode
from immersive_chess.llm_opponent import LLMMoveSelector
from immersive_chess.oracle import ChessOracle, parse_side
from immersive_chess.random_opponent import RandomMoveSelector
from immersive_chess.session import Confirm, GameSession, MoveCursor, ResetSession, SessionConfig


def _event_from_payload(data: dict):
    """Translate an input payload into a session event; None when it names nothing."""
    key = data.get("key")
    if isinstance(key, str):
        if key.lower() in CONFIRM_KEYS:
            return Confirm()
        direction = direction_for_key(key)
        return MoveCursor(direction) if direction else None
    action = str(data.get("action") or "").strip().lower()
    if action == "confirm":
        return Confirm()
    try:
        return MoveCursor(Direction(action))
    except ValueError:
        return None


def _vec3(value) -> Vec3 | None:
    if value is None:
        return None
    if not isinstance(value, (list, tuple)) or len(value) != 3:
        raise ValueError(f"Expected [x, y, z], got {value!r}")
    try:
        return Vec3(*(float(v) for v in value))
    except (TypeError, ValueError):
        raise ValueError(f"Expected [x, y, z] numbers, got {value!r}") from None


def create_app(host: SessionHost) -> Flask:
    app = Flask(__name__)

    @app.route("/api/session", methods=["GET"])
    def get_session():
        return jsonify(host.snapshot())

    @app.route("/api/session/input", methods=["POST"])
    def session_input():
        data = request.get_json(force=True, silent=True) or {}
        event = _event_from_payload(data)
        if event is None:
            return jsonify({"error": "unknown_input", "message": "Expected a movement key, a confirm key, or an action."}), 400
        return jsonify(host.dispatch(event))

    @app.route("/api/session/reset", methods=["POST"])
    def session_reset():
        data = request.get_json(force=True, silent=True) or {}
        side = data.get("player_side")
        try:
            side = parse_side(side) if side is not None else None
        except ValueError as e:
            return jsonify({"error": "invalid_side", "message": str(e)}), 400
        return jsonify(host.dispatch(ResetSession(side)))

    @app.route("/api/session/camera", methods=["POST"])
    def session_camera():
        data = request.get_json(force=True, silent=True) or {}
        try:
            mode = CameraMode.parse(data.get("mode"))
        except ValueError as e:
            return jsonify({"error": "invalid_mode", "message": str(e)}), 400
        return jsonify(host.dispatch(SetCameraMode(mode)))

    @app.route("/api/camera", methods=["GET"])
    def get_camera():
        return jsonify(host.snapshot()["camera"])

    @app.route("/api/camera/orbit", methods=["POST"])
    def camera_orbit():
        data = request.get_json(force=True, silent=True) or {}
        try:
            event = OrbitCamera(target=_vec3(data.get("target")), position=_vec3(data.get("position")))
        except ValueError as e:
            return jsonify({"error": "invalid_vector", "message": str(e)}), 400
        return jsonify(host.dispatch(event)["camera"])

    @app.after_request
    def add_cors_headers(response):
        response.headers["Access-Control-Allow-Origin"] = request.headers.get("Origin", "*")
        response.headers["Access-Control-Allow-Credentials"] = "true"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type, Authorization"
        response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
        # Prevent caching so the renderer always sees the freshest state
        response.headers["Cache-Control"] = "no-store, max-age=0"
        return response

    @app.route("/api/<path:path>", methods=["OPTIONS"])
    def cors_preflight(path: str):
        resp = app.make_response(("", 204))
        resp.headers["Access-Control-Allow-Origin"] = request.headers.get("Origin", "*")
        resp.headers["Access-Control-Allow-Credentials"] = "true"
        resp.headers["Access-Control-Allow-Headers"] = "Content-Type, Authorization"
        resp.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
        return resp

    return app


def build_host(player_side: str = "white", use_random: bool = False) -> SessionHost:
    selector = RandomMoveSelector() if use_random else LLMMoveSelector()
    session = GameSession(ChessOracle(), selector, SessionConfig(player_side=player_side))
    return SessionHost(session)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    host = build_host(
        player_side=os.environ.get("CHESS_PLAYER_SIDE", "white"),
        use_random=os.environ.get("CHESS_RANDOM_OPPONENT", "0") == "1",
    ).start()
    try:
        create_app(host).run(host="0.0.0.0", port=int(os.environ.get("PORT", 8000)))
    finally:
        host.stop()
