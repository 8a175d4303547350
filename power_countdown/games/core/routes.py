# power_countdown/games/core/routes.py
from flask import Blueprint, jsonify

core_bp = Blueprint("core", __name__)


@core_bp.get("/api/health")
def health_check():
    """Health check endpoint"""
    return jsonify({"status": "healthy"})


@core_bp.get("/api/games")
def list_games():
    """List available games"""
    return jsonify({"games": ["countdown"]})
