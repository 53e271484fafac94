from __future__ import annotations

from flask import Blueprint, jsonify

from ..game.prompts import DEFAULT_PROMPTS

bp = Blueprint("prompts", __name__)


@bp.get("/prompts")
def get_prompts():
    return jsonify({"prompts": list(DEFAULT_PROMPTS)})
