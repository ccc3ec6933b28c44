# nexus_tcg/routes.py
import logging

from flask import Blueprint, current_app, jsonify, request

from .content.catalog import card_to_dict
from .dispatch import Dispatcher
from .engine.actions import parse_action
from .engine.errors import GameError
from .state import services

log = logging.getLogger(__name__)

nexus_bp = Blueprint("nexus", __name__)


def request_body() -> dict:
    """JSON first, then form fields, then the query string."""
    body = request.get_json(silent=True)
    if isinstance(body, dict):
        return body
    if request.form:
        return request.form.to_dict()
    return request.args.to_dict()


@nexus_bp.route("/api/game", methods=["POST"])
def game_action():
    try:
        action = parse_action(request_body(), referrer=request.referrer)
        notify = current_app.extensions.get("nexus_notify")
        return jsonify(Dispatcher(services(), notify=notify).dispatch(action))
    except GameError as exc:
        return jsonify(error=exc.message), exc.status
    except Exception:
        log.exception("unhandled error in game action")
        return jsonify(error="Server error"), 500


@nexus_bp.route("/api/cards")
def list_cards():
    codes = request.args.get("codes")
    wanted = [c.strip() for c in codes.split(",") if c.strip()] if codes else None
    cards = [card_to_dict(c) for c in services().catalog.pick(wanted)]
    return jsonify(ok=True, count=len(cards), cards=cards)


@nexus_bp.route("/api/health")
def health():
    return jsonify(ok=True, route="health")
