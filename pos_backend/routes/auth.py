# pos_backend/routes/auth.py
import hmac

from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy import func
from sqlalchemy.orm import Session

from pos_backend.config import Settings
from pos_backend.database import get_db, get_settings
from pos_backend.models.session import UserSession
from pos_backend.models.users import User
from pos_backend.schemas import user as schemas
from pos_backend.utils.audit import count_recent_failures, write_log
from pos_backend.utils.hashing import get_password_hash, verify_password
from pos_backend.utils.tokenJWT import get_current_session, get_current_user, open_session

router = APIRouter(tags=["Auth"])


def _client_ip(request: Request):
    return request.client.host if request.client else None


def _throttle(db: Session, settings: Settings, *, action: str, ip=None, user_id=None) -> None:
    failures = count_recent_failures(
        db, action=action, window_minutes=settings.RATE_LIMIT_WINDOW_MINUTES, ip=ip, user_id=user_id,
    )
    if failures >= settings.RATE_LIMIT_MAX_ATTEMPTS:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many attempts, try again later",
        )


# First-run bootstrap of the sole admin account
@router.post("/setup", response_model=schemas.UserResponse, status_code=status.HTTP_201_CREATED)
def setup_admin(
    payload: schemas.SetupRequest,
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    if not settings.ADMIN_SETUP_KEY:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Setup is disabled")
    if not hmac.compare_digest(payload.setup_key.encode(), settings.ADMIN_SETUP_KEY.encode()):
        write_log(db, user_id=None, action="SETUP", resource="auth", status="FAIL", ip=_client_ip(request))
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid setup key")
    if db.query(User.id).first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Setup already completed")

    admin = User(
        name=payload.name.strip(),
        email=payload.email.strip().lower(),
        password_hash=get_password_hash(payload.password),
        role="admin",
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)

    write_log(db, user_id=admin.id, action="SETUP", resource="auth", status="SUCCESS",
              ip=_client_ip(request), meta={"email": admin.email})
    return admin


# Authenticate user and open a server-side session
@router.post("/login", response_model=schemas.Token)
def login(
    payload: schemas.UserLogin,
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    ip = _client_ip(request)
    _throttle(db, settings, action="LOGIN", ip=ip)

    email = payload.email.strip().lower()
    db_user = db.query(User).filter(func.lower(User.email) == email).first()

    # Validate credentials and log failure on error
    if not db_user or not verify_password(payload.password, db_user.password_hash):
        write_log(db, user_id=(db_user.id if db_user else None), action="LOGIN", resource="auth",
                  status="FAIL", ip=ip, meta={"email": email})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    access_token = open_session(db, db_user, settings)

    write_log(db, user_id=db_user.id, action="LOGIN", resource="auth",
              status="SUCCESS", ip=ip, meta={"email": db_user.email})

    return {"access_token": access_token, "token_type": "bearer"}


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(session: UserSession = Depends(get_current_session), db: Session = Depends(get_db)):
    db.delete(session)
    db.commit()


# Profile stored in the current session
@router.get("/me", response_model=schemas.SessionProfile)
def me(session: UserSession = Depends(get_current_session)):
    return session.data


@router.put("/me/password", status_code=status.HTTP_204_NO_CONTENT)
def change_password(
    payload: schemas.PasswordChange,
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    current_user: User = Depends(get_current_user),
):
    ip = _client_ip(request)
    _throttle(db, settings, action="PASSWORD_CHANGE", user_id=current_user.id)

    if not verify_password(payload.current_password, current_user.password_hash):
        write_log(db, user_id=current_user.id, action="PASSWORD_CHANGE", resource="auth", status="FAIL", ip=ip)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Current password is incorrect")

    current_user.password_hash = get_password_hash(payload.new_password)
    db.commit()
    write_log(db, user_id=current_user.id, action="PASSWORD_CHANGE", resource="auth", status="SUCCESS", ip=ip)
