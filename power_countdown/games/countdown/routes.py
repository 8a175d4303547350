# power_countdown/games/countdown/routes.py
from __future__ import annotations
from typing import Any, Dict
import logging

from flask import Blueprint, current_app, jsonify, make_response, request

from ... import limiter
from ..core.playflow import Playflow
from ..core.session_store import SESSION_COOKIE, SessionRegistry, base_session_id, get_or_create_session_id
from ..core.store_registry import get_store
from .logic.combine import Operation
from .logic.slots import CardRef, Location
from .logic.state import Combine, ReturnCard, ReturnToHand, Stage, Undo
from .player import PlayerSession
from .services.puzzle_source import PuzzleSource, build_source

logger = logging.getLogger(__name__)

bp = Blueprint("countdown", __name__, url_prefix="/games/countdown")

SESSIONS_KEY = "countdown.sessions"
SOURCE_KEY = "countdown.source"


def _ai_limit() -> str:
    return current_app.config.get("COUNTDOWN_AI_LIMIT", "10 per minute")


def _sessions() -> SessionRegistry[PlayerSession]:
    default = current_app.config.get("DEFAULT_DIFFICULTY", "MEDIUM")
    cap = current_app.config.get("COUNTDOWN_MAX_SESSIONS", 1000)
    return get_store(SESSIONS_KEY, lambda: SessionRegistry(lambda sid: PlayerSession(sid, default), cap))


def _source() -> PuzzleSource:
    return get_store(SOURCE_KEY, lambda: build_source(current_app.config))


def warmup() -> None:
    _sessions()
    _source()


def _body() -> Dict[str, Any]:
    j = request.get_json(silent=True)
    return j if isinstance(j, dict) else {}


def _respond(player: PlayerSession, sid: str, changed: bool = True, **extra):
    payload = {"ok": True, "changed": changed, "state": player.payload()}
    payload.update(extra)
    resp = make_response(jsonify(payload))
    if not request.cookies.get(SESSION_COOKIE):
        resp.set_cookie(SESSION_COOKIE, base_session_id(sid), httponly=True, samesite="Lax", path="/")
    return resp


def _bad_request(msg: str):
    return jsonify({"ok": False, "error": msg}), 400


def _current(create: bool = False):
    """
    (session_id, player). Only puzzle requests register a player; other routes
    get a throwaway, unstarted one for sessions the registry does not hold.
    """
    sid = get_or_create_session_id(request)
    if create:
        return sid, _sessions().get(sid)
    player = _sessions().peek(sid)
    if player is None:
        player = PlayerSession(sid, current_app.config.get("DEFAULT_DIFFICULTY", "MEDIUM"))
    return sid, player


# ----------------------------
# read
# ----------------------------
@bp.get("/api/state")
def api_state():
    sid, player = _current()
    return _respond(player, sid, changed=False)


@bp.get("/api/stats")
def api_stats():
    sid, player = _current()
    return jsonify({"ok": True, "stats": player.stats()})


# ----------------------------
# puzzle / hint (provider-backed)
# ----------------------------
@bp.post("/api/new")
@limiter.limit(_ai_limit)
def api_new():
    sid, player = _current(create=True)
    difficulty = _body().get("difficulty") or request.args.get("difficulty")
    changed = player.new_puzzle(_source(), difficulty)
    return _respond(player, sid, changed=changed)


@bp.post("/api/hint")
@limiter.limit(_ai_limit)
def api_hint():
    sid, player = _current()
    hint = player.request_hint(_source())
    return _respond(player, sid, changed=hint is not None, hint=hint)


# ----------------------------
# moves
# ----------------------------
@bp.post("/api/stage")
def api_stage():
    sid, player = _current()
    j = _body()
    try:
        ref = CardRef(Location.parse(j.get("source", "hand")), str(j["card_id"]))
        slot = Location.parse(j.get("slot"))
    except KeyError:
        return _bad_request("card_id is required")
    except ValueError as e:
        return _bad_request(str(e))
    if not slot.is_slot:
        return _bad_request("slot must be slotA or slotB")
    return _respond(player, sid, changed=player.apply(Stage(ref, slot)))


@bp.post("/api/return")
def api_return():
    sid, player = _current()
    j = _body()
    if "card_id" not in j:
        return _bad_request("card_id is required")
    # without a source, look the card up in either slot
    if j.get("source") is None:
        return _respond(player, sid, changed=player.apply(ReturnCard(str(j["card_id"]))))
    try:
        ref = CardRef(Location.parse(j["source"]), str(j["card_id"]))
    except ValueError as e:
        return _bad_request(str(e))
    return _respond(player, sid, changed=player.apply(ReturnToHand(ref)))


@bp.post("/api/combine")
def api_combine():
    sid, player = _current()
    try:
        op = Operation.parse(_body().get("operation"))
    except ValueError as e:
        return _bad_request(str(e))
    return _respond(player, sid, changed=player.apply(Combine(op)))


@bp.post("/api/undo")
def api_undo():
    sid, player = _current()
    return _respond(player, sid, changed=player.apply(Undo()))


# ----------------------------
# leave
# ----------------------------
@bp.post("/api/exit")
def api_exit():
    sid = get_or_create_session_id(request)
    registry = _sessions()
    player = registry.drop(sid)
    stats = player.stats() if player is not None else Playflow(session_id=sid).summary()
    logger.info("[%s] session closed, %d still active", sid, len(registry))
    return jsonify({"ok": True, "stats": stats})
