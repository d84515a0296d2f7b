"""
Aion View - Accounts Service
Login com bloqueio por tentativas, sessões e administração de usuários

Usado tanto pela API quanto pelo admin_cli.py (acesso direto ao banco).
"""
import logging
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from aion_view.core import (
    settings,
    create_access_token,
    verify_password,
    get_password_hash,
    is_locked,
    minutes_until
)
from aion_view.core.errors import (
    AccountLockedError,
    AuthenticationError,
    ConflictError,
    InactiveAccountError,
    NotFoundError,
    ValidationError
)
from aion_view.models import User, UserRole, UserSector, UserSession

logger = logging.getLogger(__name__)

# A partir de quantas tentativas o diagnóstico alerta
ATTEMPTS_WARNING = 3


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == _normalize_email(email)))
    return result.scalar_one_or_none()


async def _require_user_by_email(db: AsyncSession, email: str) -> User:
    user = await get_user_by_email(db, email)
    if not user:
        raise NotFoundError(f"Usuário não encontrado: {email}")
    return user


# ============================================
# LOGIN / SESSÕES
# ============================================

async def authenticate(
    db: AsyncSession,
    email: str,
    password: str,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
    now: Optional[datetime] = None
) -> Tuple[User, str]:
    """
    Autentica o usuário e abre uma sessão.

    Retorna (user, token). A senha errada incrementa login_attempts e, ao
    atingir MAX_LOGIN_ATTEMPTS, bloqueia a conta por LOCKOUT_MINUTES.
    """
    now = now or datetime.utcnow()
    user = await get_user_by_email(db, email)

    if not user:
        logger.warning(f"[AUTH] Tentativa de login com email desconhecido: {email}")
        raise AuthenticationError()

    if is_locked(user.locked_until, now):
        raise AccountLockedError(minutes_until(user.locked_until, now))

    if not verify_password(password, user.password):
        user.login_attempts = (user.login_attempts or 0) + 1
        if user.login_attempts >= settings.MAX_LOGIN_ATTEMPTS:
            user.locked_until = now + timedelta(minutes=settings.LOCKOUT_MINUTES)
            logger.warning(
                f"[AUTH] Conta {user.email} bloqueada por {settings.LOCKOUT_MINUTES} minutos "
                f"({user.login_attempts} tentativas)"
            )
        await db.commit()
        raise AuthenticationError()

    if not user.active:
        raise InactiveAccountError()

    user.login_attempts = 0
    user.locked_until = None
    user.last_login = now

    token = create_access_token(
        data={"sub": user.id, "email": user.email, "role": user.role}
    )

    await db.execute(
        delete(UserSession).where(
            UserSession.user_id == user.id,
            UserSession.expires_at < now
        )
    )
    db.add(UserSession(
        user_id=user.id,
        token=token,
        ip_address=ip_address,
        user_agent=(user_agent or "")[:512] or None,
        created_at=now,
        last_used_at=now,
        expires_at=now + timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS),
    ))
    await db.commit()
    await db.refresh(user)

    logger.info(f"[AUTH] Login: {user.email}")
    return user, token


async def logout(db: AsyncSession, token: str) -> bool:
    """Remove a sessão do token; retorna False se não existia"""
    result = await db.execute(delete(UserSession).where(UserSession.token == token))
    await db.commit()
    return result.rowcount > 0


async def get_session(db: AsyncSession, token: str) -> Optional[UserSession]:
    result = await db.execute(select(UserSession).where(UserSession.token == token))
    return result.scalar_one_or_none()


# ============================================
# SENHA / BLOQUEIO
# ============================================

async def unlock_user(db: AsyncSession, email: str) -> User:
    """Zera tentativas e remove o bloqueio"""
    user = await _require_user_by_email(db, email)
    user.login_attempts = 0
    user.locked_until = None
    await db.commit()
    logger.info(f"[AUTH] Conta desbloqueada: {user.email}")
    return user


async def set_password(db: AsyncSession, email: str, new_password: str) -> User:
    """Define nova senha e também desbloqueia a conta"""
    if not new_password:
        raise ValidationError("Senha não pode ser vazia")

    user = await _require_user_by_email(db, email)
    user.password = get_password_hash(new_password)
    user.login_attempts = 0
    user.locked_until = None
    await db.commit()
    logger.info(f"[AUTH] Senha redefinida: {user.email}")
    return user


async def change_password(db: AsyncSession, user: User, current_password: str, new_password: str):
    if not verify_password(current_password, user.password):
        raise ValidationError("Senha atual incorreta", code="INVALID_PASSWORD")
    if len(new_password) < 6:
        raise ValidationError("A nova senha deve ter ao menos 6 caracteres")

    user.password = get_password_hash(new_password)
    await db.commit()


async def create_or_update_admin(
    db: AsyncSession,
    email: str,
    password: str,
    name: str = "Administrador"
) -> Tuple[User, bool]:
    """
    Cria um admin ou, se o email já existe, redefine a senha e promove.
    Retorna (user, created).
    """
    user = await get_user_by_email(db, email)
    hashed = get_password_hash(password)

    if user:
        user.password = hashed
        user.role = UserRole.ADMIN.value
        user.active = True
        user.can_impersonate = True
        user.login_attempts = 0
        user.locked_until = None
        await db.commit()
        return user, False

    user = User(
        email=_normalize_email(email),
        name=name,
        password=hashed,
        role=UserRole.ADMIN.value,
        active=True,
        can_impersonate=True,
        login_attempts=0,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user, True


# ============================================
# CRUD
# ============================================

def _apply_sectors(user: User, sectors: Iterable[dict]):
    user.sectors = [
        UserSector(sector_id=int(s["sector_id"]), sector_name=s.get("sector_name"))
        for s in sectors
    ]


async def list_users(db: AsyncSession) -> List[User]:
    result = await db.execute(select(User).order_by(User.name))
    return list(result.scalars().all())


async def get_user(db: AsyncSession, user_id: str) -> User:
    user = await db.get(User, user_id)
    if not user:
        raise NotFoundError("Usuário não encontrado")
    return user


async def create_user(
    db: AsyncSession,
    email: str,
    name: str,
    role: str = UserRole.COMUM.value,
    password: Optional[str] = None,
    phone: Optional[str] = None,
    active: bool = True,
    sectors: Iterable[dict] = ()
) -> User:
    if role not in {r.value for r in UserRole}:
        raise ValidationError(f"Perfil inválido: {role}")
    if await get_user_by_email(db, email):
        raise ConflictError("Email já cadastrado")

    user = User(
        email=_normalize_email(email),
        name=name,
        phone=phone,
        password=get_password_hash(password or settings.DEFAULT_USER_PASSWORD),
        role=role,
        active=active,
        can_impersonate=role == UserRole.ADMIN.value,
        login_attempts=0,
    )
    _apply_sectors(user, sectors)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info(f"[USERS] Usuário criado: {user.email} ({user.role})")
    return user


async def update_user(db: AsyncSession, user_id: str, **changes) -> User:
    """Atualiza campos informados; `sectors` substitui o conjunto inteiro"""
    user = await get_user(db, user_id)

    if changes.get("email") and _normalize_email(changes["email"]) != user.email:
        if await get_user_by_email(db, changes["email"]):
            raise ConflictError("Email já cadastrado")
        user.email = _normalize_email(changes["email"])

    if changes.get("role") is not None:
        if changes["role"] not in {r.value for r in UserRole}:
            raise ValidationError(f"Perfil inválido: {changes['role']}")
        user.role = changes["role"]

    for field in ("name", "phone", "active", "can_impersonate"):
        if changes.get(field) is not None:
            setattr(user, field, changes[field])

    if changes.get("password"):
        user.password = get_password_hash(changes["password"])

    if changes.get("sectors") is not None:
        _apply_sectors(user, changes["sectors"])

    await db.commit()
    await db.refresh(user)
    return user


async def delete_user(db: AsyncSession, user_id: str, current_user_id: Optional[str] = None):
    user = await get_user(db, user_id)
    if current_user_id and user.id == current_user_id:
        raise ValidationError("Não é possível excluir o próprio usuário")
    await db.delete(user)
    await db.commit()
    logger.info(f"[USERS] Usuário removido: {user.email}")


async def list_sectors(db: AsyncSession) -> List[dict]:
    """Setores distintos vinculados a usuários"""
    result = await db.execute(
        select(UserSector.sector_id, UserSector.sector_name)
        .distinct()
        .order_by(UserSector.sector_name)
    )
    return [{"sector_id": sid, "sector_name": name} for sid, name in result.all()]


# ============================================
# DIAGNÓSTICO
# ============================================

def diagnose_user(user: User, now: Optional[datetime] = None) -> dict:
    """
    Status da conta para o admin_cli: INATIVO, BLOQUEADO, MUITAS TENTATIVAS ou OK,
    com os problemas encontrados e a correção sugerida para cada um.
    """
    now = now or datetime.utcnow()
    attempts = user.login_attempts or 0
    locked = is_locked(user.locked_until, now)
    minutes_left = minutes_until(user.locked_until, now) if locked else 0

    problems = []
    if not user.active:
        problems.append({
            "problem": "Usuário inativo",
            "fix": f"python admin_cli.py create-admin {user.email} <senha>",
        })
    if locked:
        problems.append({
            "problem": f"Conta bloqueada por mais {minutes_left} minuto(s)",
            "fix": f"python admin_cli.py unlock {user.email}",
        })
    if attempts >= ATTEMPTS_WARNING:
        problems.append({
            "problem": f"Muitas tentativas de login ({attempts})",
            "fix": f"python admin_cli.py unlock {user.email}",
        })
    if not user.password or not user.password.startswith(("$2b$", "$2a$")):
        problems.append({
            "problem": "Hash de senha inválido",
            "fix": f"python admin_cli.py set-password {user.email} <senha>",
        })

    if not user.active:
        status = "INATIVO"
    elif locked:
        status = "BLOQUEADO"
    elif attempts >= ATTEMPTS_WARNING:
        status = "MUITAS TENTATIVAS"
    else:
        status = "OK"

    return {
        "email": user.email,
        "status": status,
        "login_attempts": attempts,
        "minutes_left": minutes_left,
        "problems": problems,
    }
