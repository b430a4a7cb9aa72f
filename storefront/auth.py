from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
import logging
import jwt
from passlib.context import CryptContext

from .config import Settings
from .database import get_db, get_settings
from .errors import AuthError, ForbiddenError
from .models import Admin

logger = logging.getLogger(__name__)

ALGO = "HS256"
STAFF_ROLES = ("superadmin", "admin")

pwd_ctx = CryptContext(schemes=["bcrypt"], deprecated="auto")
bearer = HTTPBearer(auto_error=False)

def get_password_hash(password: str) -> str:
    return pwd_ctx.hash(password)

def verify_password(password: str, hash_: str) -> bool:
    return pwd_ctx.verify(password, hash_)

def create_access_token(data: Dict[str, Any], settings: Settings,
                        expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.access_expire_min))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm=ALGO)

def token_for_admin(admin: Admin, settings: Settings) -> str:
    return create_access_token(
        {"sub": str(admin.id), "username": admin.username, "role": admin.role}, settings
    )

def decode_token(token: str, settings: Settings) -> Dict[str, Any]:
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[ALGO])
    except jwt.ExpiredSignatureError:
        raise AuthError("Token expirado, inicia sesión de nuevo")
    except jwt.PyJWTError:
        raise AuthError("Token inválido")

def get_current_admin(cred: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
                      db: Session = Depends(get_db),
                      settings: Settings = Depends(get_settings)) -> Admin:
    if cred is None or cred.scheme.lower() != "bearer":
        raise AuthError("Token de autenticación requerido")
    payload = decode_token(cred.credentials, settings)
    try:
        aid = int(payload.get("sub", "0"))
    except (TypeError, ValueError):
        raise AuthError("Token inválido")
    admin = db.get(Admin, aid)
    if not admin or not admin.is_active:
        raise AuthError("Administrador no encontrado")
    return admin

def require_role(*roles: str):
    def dependency(admin: Admin = Depends(get_current_admin)) -> Admin:
        if admin.role not in roles:
            logger.warning("Admin %s (%s) denied, needs one of %s", admin.username, admin.role, roles)
            raise ForbiddenError("No tienes permisos para esta acción")
        return admin
    return dependency

def authenticate(db: Session, username: str, password: str) -> Admin:
    admin = db.query(Admin).filter(Admin.username == username, Admin.is_active.is_(True)).first()
    if not admin or not verify_password(password, admin.password_hash):
        logger.warning("Failed login for %r", username)
        raise AuthError("Credenciales inválidas")
    return admin
