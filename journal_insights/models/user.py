from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from journal_insights.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    identity_uid = Column(String(128), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    email_verified = Column(Boolean, nullable=False, default=False)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    username = Column(String(100), unique=True, nullable=True)
    auth_provider = Column(String(50), nullable=False, default="email")  # email, google
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    last_login_at = Column(DateTime(timezone=True), nullable=True)
    google_id = Column(String(128), nullable=True)
    avatar_url = Column(String(500), nullable=True)

    # Relationships: everything a user writes or is generated for them goes with the account
    journal_entries = relationship(
        "JournalEntry",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    daily_quotes = relationship(
        "DailyQuote",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    daily_summaries = relationship(
        "DailySummary",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<User {self.email}>"
