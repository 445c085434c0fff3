"""Per-user daily usage quota rows."""

from sqlalchemy import Column, Date, Integer, String, CheckConstraint

from .database import Base


class UsageQuota(Base):
    """Persisted form of a user's quota ledger.

    A row is created by the user's first successful submission and is only
    modified by the atomic answer commit.
    """

    __tablename__ = "usage_quotas"

    user_id = Column(String(255), primary_key=True)
    call_count = Column(Integer, nullable=False, default=0)
    last_call_date = Column(Date, nullable=True)

    __table_args__ = (
        CheckConstraint("call_count >= 0", name="ck_usage_quotas_call_count_non_negative"),
    )

    def __repr__(self) -> str:
        return (
            f"<UsageQuota(user_id='{self.user_id}', "
            f"call_count={self.call_count}, "
            f"last_call_date={self.last_call_date})>"
        )
