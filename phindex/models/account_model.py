from sqlalchemy import Column, String, DateTime, func

from phindex.database import Base


class Account(Base):
    __tablename__ = "accounts"

    # Subject claim of the auth provider's token
    id = Column(String(64), primary_key=True)
    nickname = Column(String(64), nullable=False, index=True)
    name = Column(String, nullable=True)
    email = Column(String, nullable=True)
    avatar_url = Column(String, nullable=True)
    role = Column(String, default="user", nullable=False, server_default="user")  # user or admin

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
