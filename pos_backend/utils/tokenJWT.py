# pos_backend/utils/tokenJWT.py
import secrets
from datetime import timedelta, timezone

from jose import jwt, JWTError
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from pos_backend.config import Settings
from pos_backend.database import get_db, get_settings
from pos_backend.models.log import utcnow
from pos_backend.models.session import UserSession
from pos_backend.models.users import User

bearer_scheme = HTTPBearer(auto_error=False)


def session_profile(user: User) -> dict:
    return {"id": user.id, "name": user.name, "email": user.email, "role": user.role}


# Store a new server-side session and return the signed token referencing it
def open_session(db: Session, user: User, settings: Settings) -> str:
    now = utcnow()
    # Drop this user's sessions that have already run out
    db.query(UserSession).filter(UserSession.user_id == user.id, UserSession.expires_at <= now).delete(
        synchronize_session=False
    )
    expires_at = now + timedelta(minutes=settings.SESSION_EXPIRE_MINUTES)
    sid = secrets.token_urlsafe(32)
    db.add(UserSession(id=sid, user_id=user.id, data=session_profile(user), expires_at=expires_at))
    db.commit()

    claims = {"sid": sid, "sub": user.email, "exp": expires_at.replace(tzinfo=timezone.utc)}
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def get_current_session(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> UserSession:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise credentials_exception
    try:
        payload = jwt.decode(credentials.credentials, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        sid = payload.get("sid")
        if sid is None:
            raise credentials_exception
    except JWTError:
        raise credentials_exception

    session = db.query(UserSession).filter(UserSession.id == sid).first()
    if session is None:
        raise credentials_exception
    if session.expires_at <= utcnow():
        db.delete(session)
        db.commit()
        raise credentials_exception
    return session


# Retrieve the user behind the current session
def get_current_user(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
) -> User:
    user = db.query(User).filter(User.id == session.user_id).first()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def admin_required(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return current_user
