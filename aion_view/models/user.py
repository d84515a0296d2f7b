"""
Aion View - User Models
Usuários do dashboard, setores vinculados e sessões
"""
import uuid
import enum
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, Integer, ForeignKey, Text
from sqlalchemy.orm import relationship

from aion_view.database import Base


class UserRole(str, enum.Enum):
    """Perfis de acesso"""
    ADMIN = "admin"
    GERENTE = "gerente"
    COMUM = "comum"


class User(Base):
    """Modelo de usuário"""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    phone = Column(String(30))
    password = Column(String(255), nullable=False)
    role = Column(String(20), default=UserRole.COMUM.value, nullable=False)

    active = Column(Boolean, default=True)
    can_impersonate = Column(Boolean, default=False)

    # Controle de bloqueio por tentativas de login
    login_attempts = Column(Integer, default=0, nullable=False)
    locked_until = Column(DateTime)
    last_login = Column(DateTime)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    sectors = relationship(
        "UserSector", back_populates="user", lazy="selectin", cascade="all, delete-orphan"
    )
    sessions = relationship(
        "UserSession", back_populates="user", lazy="selectin", cascade="all, delete-orphan"
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "phone": self.phone,
            "role": self.role,
            "active": self.active,
            "can_impersonate": self.can_impersonate,
            "login_attempts": self.login_attempts,
            "locked_until": self.locked_until.isoformat() if self.locked_until else None,
            "last_login": self.last_login.isoformat() if self.last_login else None,
            "sectors": [s.to_dict() for s in self.sectors] if self.sectors else [],
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


class UserSector(Base):
    """Setor hospitalar vinculado a um usuário"""
    __tablename__ = "user_sectors"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    sector_id = Column(Integer, nullable=False)
    sector_name = Column(String(255))

    user = relationship("User", back_populates="sectors")

    def to_dict(self):
        return {
            "sector_id": self.sector_id,
            "sector_name": self.sector_name,
        }


class UserSession(Base):
    """Sessão de login (um token JWT emitido)"""
    __tablename__ = "user_sessions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    token = Column(Text, nullable=False)
    ip_address = Column(String(64))
    user_agent = Column(String(512))

    created_at = Column(DateTime, default=datetime.utcnow)
    last_used_at = Column(DateTime, default=datetime.utcnow)
    expires_at = Column(DateTime, nullable=False)

    user = relationship("User", back_populates="sessions")

    def to_dict(self):
        return {
            "id": self.id,
            "ip_address": self.ip_address,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "last_used_at": self.last_used_at.isoformat() if self.last_used_at else None,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
        }
