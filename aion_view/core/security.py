"""
Aion View - Security
Hash de senhas (bcrypt) e tokens de sessão (JWT)
"""
import math
from datetime import datetime, timedelta
from typing import Optional

from jose import jwt, JWTError
import bcrypt

from .config import settings


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verifica password usando bcrypt"""
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(
            plain_password.encode('utf-8'),
            hashed_password.encode('utf-8')
        )
    except ValueError:
        # Hash corrompido ou em outro formato
        return False


def get_password_hash(password: str) -> str:
    """Gera hash bcrypt do password"""
    return bcrypt.hashpw(
        password.encode('utf-8'),
        bcrypt.gensalt(10)
    ).decode('utf-8')


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Cria JWT token de sessão do usuário"""
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS))
    to_encode.update({"exp": expire})

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_access_token(token: str) -> Optional[dict]:
    """Verifica JWT token"""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return payload
    except JWTError:
        return None


def is_locked(locked_until: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """True enquanto o bloqueio estiver no futuro"""
    now = now or datetime.utcnow()
    return locked_until is not None and locked_until > now


def minutes_until(moment: datetime, now: Optional[datetime] = None) -> int:
    """Minutos restantes (arredondado para cima) até `moment`"""
    now = now or datetime.utcnow()
    return max(0, math.ceil((moment - now).total_seconds() / 60))
