"""
Aion View - HTTP Cache Model
Respostas de rotas caras persistidas no banco
"""
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text

from aion_view.database import Base


class HttpCache(Base):
    __tablename__ = "http_cache"

    key = Column(String(512), primary_key=True)
    payload = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
