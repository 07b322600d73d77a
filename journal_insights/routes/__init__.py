from journal_insights.routes.auth import router as auth_router
from journal_insights.routes.journals import router as journals_router
from journal_insights.routes.insights import router as insights_router

__all__ = [
    'auth_router',
    'journals_router',
    'insights_router',
]
