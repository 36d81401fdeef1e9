from datetime import datetime, timezone

from flask import Blueprint
from sqlalchemy import text

from models import storage

bp = Blueprint("health", __name__)


@bp.get("/health")
def health():
    """
    Health check
    ---
    tags:
      - Health
    responses:
      200:
        description: API is up
        schema:
          type: object
          properties:
            status:
              type: string
              example: healthy
            database:
              type: string
              example: ok
            timestamp:
              type: string
    """
    storage.get_session().execute(text("SELECT 1"))
    return {
        "status": "healthy",
        "database": "ok",
        "version": "1.0.0",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }, 200
