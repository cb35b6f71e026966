"""
                Restaurant Dashboard

Management dashboard for restaurant organizations: restaurants, menus,
tables, reservations, guest chats, QR codes, team, subscriptions and
support, served as a FastAPI backend-for-frontend over the restaurant
REST API.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
