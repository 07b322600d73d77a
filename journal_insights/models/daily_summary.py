"""
Daily Summary Model

Stores the generated 7-day reflection summary for a user.
One row per (user, summary_date); a new day gets a new row.
"""

import sqlalchemy as sa
from sqlalchemy import Column, Integer, Text, DateTime, Date, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from journal_insights.database import Base


class DailySummary(Base):
    __tablename__ = "daily_summaries"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    summary = Column(Text, nullable=False)
    key_themes = Column(JSON, nullable=True)  # ordered list of strings
    emotional_trends = Column(JSON, nullable=True)  # category -> value
    entry_count = Column(Integer, nullable=False, default=0)
    analysis_period_start = Column(Date, nullable=False)
    analysis_period_end = Column(Date, nullable=False)
    summary_date = Column(Date, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=sa.func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "summary_date", name="uq_daily_summaries_user_date"),
    )

    user = relationship("User", back_populates="daily_summaries")

    def __repr__(self):
        return f"<DailySummary user={self.user_id} {self.summary_date}>"
