from datetime import timedelta

from sqlalchemy.orm import Session
from pos_backend.models.log import Log, utcnow


def write_log(db: Session, *, user_id, action, resource, status="SUCCESS", ip=None, meta=None):
    entry = Log(user_id=user_id, action=action, resource=resource, status=status, ip=ip, meta=meta or {})
    db.add(entry)
    db.commit()


def count_recent_failures(db: Session, *, action: str, window_minutes: int, ip=None, user_id=None) -> int:
    """Count FAIL entries for an action within the last ``window_minutes``, per IP or per user."""
    cutoff = utcnow() - timedelta(minutes=window_minutes)
    query = db.query(Log).filter(Log.action == action, Log.status == "FAIL", Log.ts >= cutoff)
    if ip is not None:
        query = query.filter(Log.ip == ip)
    if user_id is not None:
        query = query.filter(Log.user_id == user_id)
    return query.count()
