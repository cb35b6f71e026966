"""
Dashboard routers, one per screen group.
"""

from dashboard.routes import (
    admin,
    analytics,
    auth,
    chats,
    menu,
    qrcodes,
    questions,
    reservations,
    restaurants,
    settings,
    tables,
    uploads,
)

ROUTERS = [
    auth.router,
    restaurants.router,
    tables.router,
    menu.router,
    reservations.router,
    chats.router,
    questions.router,
    qrcodes.router,
    settings.router,
    analytics.router,
    admin.router,
    uploads.router,
]

__all__ = ["ROUTERS"]
