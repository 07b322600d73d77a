"""
Daily Quote Model

Stores the generated inspirational quote for a user's day.
One row per (user, quote_date): the row is the cache for that day.
"""

import sqlalchemy as sa
from sqlalchemy import Column, Integer, String, Text, DateTime, Date, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from journal_insights.database import Base


class DailyQuote(Base):
    __tablename__ = "daily_quotes"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    quote = Column(Text, nullable=False)
    author = Column(String(255), nullable=True)
    citation = Column(String(255), nullable=True)
    explanation = Column(Text, nullable=True)
    # Assigned by the database so the cache key follows the server's calendar
    quote_date = Column(Date, nullable=False, server_default=sa.func.current_date())
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=sa.func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "quote_date", name="uq_daily_quotes_user_date"),
    )

    user = relationship("User", back_populates="daily_quotes")

    def __repr__(self):
        return f"<DailyQuote user={self.user_id} {self.quote_date}>"
