"""
Insights Routes

Daily quote, daily summary, top emotions and emotion trends for the
current user. "Nothing to show yet" is a 200 with a message, never an error.
Handlers are plain functions so the threadpool absorbs NLP service latency.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from journal_insights.auth import get_current_user
from journal_insights.database import get_db
from journal_insights.models import User
from journal_insights.services.emotion_trends import get_emotion_trends, get_top_emotions
from journal_insights.services.insights_client import InsightsClient, get_insights_client
from journal_insights.services.quote_service import get_or_create_daily_quote
from journal_insights.services.summary_service import get_or_create_daily_summary

router = APIRouter(prefix="/api/insights", tags=["insights"])


@router.get("/quote")
def daily_quote(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    client: InsightsClient = Depends(get_insights_client),
):
    return get_or_create_daily_quote(db, current_user.id, client)


@router.get("/summary")
def daily_summary(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    client: InsightsClient = Depends(get_insights_client),
):
    return get_or_create_daily_summary(db, current_user.id, client)


@router.get("/topEmotions")
def top_emotions(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return get_top_emotions(db, current_user.id)


@router.get("/emotionTrends")
def emotion_trends(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return {"emotionTrends": get_emotion_trends(db, current_user.id)}
