import sqlalchemy as sa
from sqlalchemy import Boolean, Column, Integer, String, Text, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from journal_insights.database import Base


class JournalEntry(Base):
    __tablename__ = "journal_entries"

    id = Column(Integer, primary_key=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    # [{"emotion": "joy", "confidence": 0.91}, ...]; NULL when classification failed
    emotions = Column(JSON, nullable=True)
    is_favorite = Column(Boolean, nullable=False, server_default=sa.text("false"))
    created_at = Column(
        DateTime(timezone=True), nullable=False, server_default=sa.func.now(), index=True
    )
    updated_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    user = relationship("User", back_populates="journal_entries")

    def __repr__(self):
        return f"<JournalEntry {self.id} user={self.user_id}>"
