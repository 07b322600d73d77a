from journal_insights.models.user import User
from journal_insights.models.journal_entry import JournalEntry
from journal_insights.models.daily_quote import DailyQuote
from journal_insights.models.daily_summary import DailySummary

__all__ = [
    "User",
    "JournalEntry",
    "DailyQuote",
    "DailySummary",
]
