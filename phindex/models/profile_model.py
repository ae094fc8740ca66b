from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, func, text

from phindex.database import Base


class PersonProfile(Base):
    __tablename__ = "person_profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True, index=True)

    name = Column(String, nullable=False)
    slug = Column(String, nullable=False, unique=True, index=True)
    category = Column(String, nullable=False, index=True)
    country = Column(String, nullable=False)
    ancestry = Column(String, nullable=False)
    gender = Column(String, nullable=False)
    height = Column(Integer, nullable=False)  # cm

    front_image_url = Column(String, nullable=False)
    profile_image_url = Column(String, nullable=True)
    is_anonymous = Column(Boolean, nullable=False, server_default=text("false"), default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
