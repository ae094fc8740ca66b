from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint, func

from phindex.database import Base


class Vote(Base):
    __tablename__ = "votes"
    __table_args__ = (
        UniqueConstraint("user_id", "profile_id", "characteristic_type", name="unique_user_vote"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    profile_id = Column(Integer, ForeignKey("person_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    characteristic_type = Column(String, nullable=False, default="phenotype")
    classification = Column(String, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
