"""Skill catalog endpoint."""

from flask import Blueprint, jsonify, request

from gatehunt.catalog.enums import Rank
from gatehunt.catalog.skills import SKILLS

bp_skills = Blueprint("skills", __name__)


@bp_skills.route("/api/skills")
def list_skills():
    """Return the static catalog, optionally filtered by ``?rank=``."""
    rank = Rank.parse(request.args.get("rank"))
    skills = [s for s in SKILLS.values() if rank is None or s.rank == rank]
    return jsonify({"skills": [s.to_dict() for s in skills]})
