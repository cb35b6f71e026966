"""
Mock Restaurant Backend

In-memory implementation of the restaurant REST API, served to the
dashboard's httpx client through ``httpx.MockTransport``. Used in
development mode (ENV_MODE=development) and by the test-suite, so the
dashboard can be exercised end to end without a running backend.

Behavior:
    - Seeded with one demo organization, two restaurants, tables, menu,
      reservations around "today", chat sessions and questions
    - Answers with the same ``{code, messages, data, meta}`` envelope and
      the same mixed camelCase/snake_case field names as the real backend
    - Protected routes answer 401 without a valid bearer token
    - Optional simulated latency
    - ``fail()`` forces the next answers of a route to an arbitrary status,
      for exercising error handling

Demo accounts (password ``password123``):
    - admin@example.com    platform admin
    - manager@example.com  organization owner

Version: 1.0.0
"""

import asyncio
import base64
import itertools
import json
import logging
import random
import re
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Optional
from urllib.parse import parse_qs

import httpx

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password123"

# 1x1 transparent PNG
QR_PNG = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)

PUBLIC_ROUTES = (
    "/auth/login",
    "/auth/register",
    "/auth/request-password-reset",
    "/auth/verify-password-reset",
    "/qrcodes/",
    "/reservations/available/",
    "/reservations/my",
)


class MockHttpError(Exception):
    """Raised by route handlers to answer with an error envelope."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def envelope(data: Any = None, code: int = 200, messages: Optional[list[str]] = None) -> httpx.Response:
    return httpx.Response(
        code,
        json={"code": code, "messages": messages or [], "data": data, "meta": None},
    )


def _add_minutes(hhmm: str, minutes: int) -> str:
    hours, mins = (int(part) for part in hhmm.split(":")[:2])
    total = min(hours * 60 + mins + minutes, 23 * 60 + 59)
    return f"{total // 60:02d}:{total % 60:02d}"


def _to_minutes(hhmm: str) -> int:
    hours, mins = (int(part) for part in hhmm.split(":")[:2])
    return hours * 60 + mins


class MockBackend:
    """
    In-memory restaurant backend.

    Attributes:
        today: Date the seeded reservations are placed around
        min_latency: Minimum simulated response time in seconds
        max_latency: Maximum simulated response time in seconds
        calls: Log of ``(method, path)`` for every handled request

    Example:
        >>> backend = MockBackend()
        >>> http = httpx.AsyncClient(
        ...     base_url="http://backend", transport=httpx.MockTransport(backend.handle)
        ... )
    """

    def __init__(
        self,
        today: Optional[date] = None,
        min_latency: float = 0.0,
        max_latency: float = 0.0,
    ):
        self.today = today or date.today()
        self.min_latency = min_latency
        self.max_latency = max_latency
        self.calls: list[tuple[str, str]] = []
        self.tokens: dict[str, int] = {}
        self._forced: dict[tuple[str, str], list[httpx.Response]] = {}
        self._ids = itertools.count(1000)
        self._seed()
        self._routes = self._build_routes()

        logger.info(
            f"MockBackend initialized "
            f"({len(self.restaurants)} restaurants, {len(self.reservations)} reservations)"
        )

    @property
    def provider_name(self) -> str:
        return "mock"

    # =========================================================================
    # TEST HOOKS
    # =========================================================================

    def fail(
        self,
        method: str,
        path: str,
        status_code: int,
        body: Any = None,
        content_type: str = "application/json",
        times: int = 1,
    ) -> None:
        """Force the next ``times`` answers for ``method path``."""
        if content_type == "application/json":
            content = json.dumps(body if body is not None else {"message": "Forced failure"}).encode()
        else:
            content = body if isinstance(body, bytes) else str(body or "").encode()
        responses = [
            httpx.Response(status_code, content=content, headers={"content-type": content_type})
            for _ in range(times)
        ]
        self._forced.setdefault((method.upper(), path), []).extend(responses)

    def issue_token(self, user_id: int) -> str:
        token = f"mock-token-{user_id}-{next(self._ids)}"
        self.tokens[token] = user_id
        return token

    # =========================================================================
    # TRANSPORT ENTRY POINT
    # =========================================================================

    async def handle(self, request: httpx.Request) -> httpx.Response:
        """httpx.MockTransport handler."""
        if self.max_latency > 0:
            await asyncio.sleep(random.uniform(self.min_latency, self.max_latency))

        method = request.method.upper()
        path = request.url.path
        self.calls.append((method, path))

        forced = self._forced.get((method, path))
        if forced:
            response = forced.pop(0)
            logger.debug(f"Mock: forced {response.status_code} for {method} {path}")
            return response

        for route_method, pattern, handler in self._routes:
            if route_method != method:
                continue
            match = pattern.match(path)
            if not match:
                continue
            try:
                user_id = self._authenticate(request, path)
                params = {k: v[-1] for k, v in parse_qs(request.url.query.decode()).items()}
                body = self._json_body(request)
                kwargs = {k: int(v) if v.isdigit() else v for k, v in match.groupdict().items()}
                result = handler(user_id=user_id, body=body, params=params, request=request, **kwargs)
            except MockHttpError as exc:
                return envelope(None, exc.status_code, [exc.message])
            if isinstance(result, httpx.Response):
                return result
            return envelope(result)

        return envelope(None, 404, [f"Cannot {method} {path}"])

    def _authenticate(self, request: httpx.Request, path: str) -> Optional[int]:
        header = request.headers.get("authorization", "")
        token = header[7:] if header.startswith("Bearer ") else ""
        user_id = self.tokens.get(token)
        if user_id is None and not path.startswith(PUBLIC_ROUTES):
            raise MockHttpError(401, "Unauthorized")
        return user_id

    @staticmethod
    def _json_body(request: httpx.Request) -> dict:
        if "json" not in request.headers.get("content-type", ""):
            return {}
        content = request.content
        if not content:
            return {}
        data = json.loads(content)
        return data if isinstance(data, dict) else {"items": data}

    def _next_id(self) -> int:
        return next(self._ids)

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat()

    def _get(self, table: dict[int, dict], item_id: int, label: str) -> dict:
        item = table.get(item_id)
        if item is None:
            raise MockHttpError(404, f"{label} not found")
        return item

    # =========================================================================
    # SEED DATA
    # =========================================================================

    def _seed(self) -> None:
        today = self.today
        created = "2024-01-15T10:00:00.000Z"

        self.languages = {
            1: {"id": 1, "createdAt": created, "code": "ru", "name": "Русский", "description": "Russian"},
            2: {"id": 2, "createdAt": created, "code": "en", "name": "English", "description": "English"},
        }
        self.users = {
            1: {"id": 1, "created_at": created, "email": "admin@example.com", "name": "Anna Admin",
                "company": "Platform", "phone": "+79000000001", "role": "admin", "isActive": True,
                "password": DEMO_PASSWORD},
            2: {"id": 2, "created_at": created, "email": "manager@example.com", "name": "Mark Manager",
                "company": "Demo Restaurant Group", "phone": "+79000000002", "role": "user",
                "isActive": True, "password": DEMO_PASSWORD},
            3: {"id": 3, "created_at": created, "email": "waiter@example.com", "name": "Olga Waiter",
                "company": "Demo Restaurant Group", "phone": "+79000000003", "role": "user",
                "isActive": True, "password": DEMO_PASSWORD},
        }
        self.organizations = {
            1: {"id": 1, "created_at": created, "name": "Demo Restaurant Group",
                "phone": "+79000000100", "admin_id": 2, "user_ids": [2, 3], "language_ids": [1, 2]},
            2: {"id": 2, "created_at": created, "name": "Platform",
                "phone": "+79000000200", "admin_id": 1, "user_ids": [1], "language_ids": [1]},
        }
        every_day = [
            {"id": day + 1, "day_of_week": day, "open_time": "10:00", "close_time": "22:00"}
            for day in range(7)
        ]
        self.restaurants = {
            1: {"id": 1, "created_at": created, "organization_id": 1, "name": "Bella Vista",
                "address": "Tverskaya 1, Moscow", "phone": "+74950000001",
                "website": "https://bellavista.example.com", "description": "Italian cuisine",
                "image_url": "/uploads/images/bella.png", "currency": "RUB",
                "reservation_duration": 120, "working_hours": every_day},
            2: {"id": 2, "created_at": created, "organization_id": 1, "name": "Sakura",
                "address": "Arbat 10, Moscow", "phone": "+74950000002", "website": None,
                "description": "Japanese cuisine", "image_url": None, "currency": "RUB",
                "reservation_duration": 90,
                "working_hours": [dict(h, id=h["id"] + 10) for h in every_day if h["day_of_week"] != 0]},
        }
        self.tables = {
            1: {"id": 1, "createdAt": created, "restaurant_id": 1, "name": "Table 1", "guestCount": 2},
            2: {"id": 2, "createdAt": created, "restaurant_id": 1, "name": "Table 2", "guestCount": 4},
            3: {"id": 3, "createdAt": created, "restaurant_id": 1, "name": "Table 3", "guestCount": 6},
            4: {"id": 4, "createdAt": created, "restaurant_id": 1, "name": "Terrace", "guestCount": 8},
            5: {"id": 5, "createdAt": created, "restaurant_id": 2, "name": "Bar 1", "guestCount": 2},
            6: {"id": 6, "createdAt": created, "restaurant_id": 2, "name": "Bar 2", "guestCount": 4},
        }
        self.categories = {
            1: {"id": 1, "created_at": created, "restaurant_id": 1, "name": "Salads", "sort_order": 1},
            2: {"id": 2, "created_at": created, "restaurant_id": 1, "name": "Main courses", "sort_order": 2},
            3: {"id": 3, "created_at": created, "restaurant_id": 1, "name": "Desserts", "sort_order": 3},
            4: {"id": 4, "created_at": created, "restaurant_id": 2, "name": "Rolls", "sort_order": 1},
        }
        self.dishes = {
            1: self._dish(1, 1, 1, "Caesar salad", 450, 320, 18, 22, 12,
                          [("Romaine lettuce", 150), ("Chicken breast", 100)], ["Eggs"]),
            2: self._dish(2, 1, 1, "Greek salad", 390, 210, 6, 16, 10,
                          [("Tomatoes", 120), ("Feta", 60)], ["Milk"]),
            3: self._dish(3, 1, 2, "Ribeye steak", 1900, 780, 62, 58, 0,
                          [("Beef ribeye", 300)], []),
            4: self._dish(4, 1, 3, "Tiramisu", 420, 450, 7, 28, 40,
                          [("Mascarpone", 80), ("Savoiardi", 50)], ["Eggs", "Milk", "Gluten"]),
            5: self._dish(5, 2, 4, "California roll", 520, 0, 0, 0, 0,
                          [("Rice", 120), ("Crab", 60)], ["Fish"]),
        }
        self.dish_of_day = {1: 3}

        yesterday = today - timedelta(days=1)
        tomorrow = today + timedelta(days=1)
        self.reservations = {}
        for row in (
            (1, 1, 1, today, "12:00", "confirmed", "Ivan Petrov", "+79001112233", 2, 1),
            (2, 1, 2, today, "19:00", "pending", "Maria Ivanova", "+79004445566", 4, None),
            (3, 1, 3, tomorrow, "18:00", "pending", "Ivan Petrov", "+79001112233", 5, 3),
            (4, 1, 1, yesterday, "20:00", "completed", "Alex Smith", "+79007778899", 2, None),
            (5, 1, 4, today, "13:00", "cancelled", "Olga Kuznetsova", "+79001234567", 6, None),
            (6, 2, 5, today, "20:00", "confirmed", "Kenji Sato", "+79990000000", 2, None),
        ):
            self._add_reservation(*row)

        self.chat_sessions = {
            1: {"id": 1, "restaurant_id": 1, "table_id": 1, "active": True, "lastActive": self._now()},
            2: {"id": 2, "restaurant_id": 1, "table_id": 2, "active": True, "lastActive": self._now()},
            3: {"id": 3, "restaurant_id": 1, "table_id": None, "active": True, "lastActive": self._now()},
            4: {"id": 4, "restaurant_id": 1, "table_id": None, "active": False,
                "lastActive": "2024-05-01T12:00:00.000Z"},
        }
        self.messages = {1: [], 2: [], 3: [], 4: []}
        for session_id, author, content in (
            (1, "user", "Hello! What is the soup of the day?"),
            (1, "bot", "Today we serve minestrone."),
            (1, "user", "Can I book a table for tonight?"),
            (1, "bot", "Of course, for how many guests?"),
            (2, "user", "Could you bring the bill?"),
            (2, "bot", "I will call a waiter for you."),
            (2, "restaurant", "The waiter is on the way."),
            (2, "user", "Thank you!"),
            (3, "user", "Do you have vegetarian dishes?"),
            (3, "bot", "Yes, try our Greek salad."),
            (4, "user", "Are you open on Sunday?"),
            (4, "bot", "Yes, from 10:00 to 22:00."),
        ):
            self.add_message(session_id, author, content)

        self.questions = {
            1: {"id": 1, "created_at": created, "text": "What is on the menu today?", "language_id": 2,
                "chat_type": "menu", "display_order": 1},
            2: {"id": 2, "created_at": created, "text": "Do you have vegetarian dishes?", "language_id": 2,
                "chat_type": "menu", "display_order": 2},
            3: {"id": 3, "created_at": created, "text": "Can I book a table for tonight?", "language_id": 2,
                "chat_type": "reservation", "display_order": 1},
            4: {"id": 4, "created_at": created, "text": "Какое блюдо дня?", "language_id": 1,
                "chat_type": "menu", "display_order": 1},
        }
        start = today - timedelta(days=100)
        end = today + timedelta(days=265)
        self.subscriptions = {
            1: {"id": 1, "createdAt": created, "organization_id": 1, "period": 12,
                "startDate": start.isoformat(), "endDate": end.isoformat(), "isActive": True},
        }
        self.extension_requests = {
            1: {"id": 1, "createdAt": created, "organization_id": 1, "user_id": 2,
                "name": "Mark Manager", "phone": "+79000000002", "email": "manager@example.com",
                "period": 12, "comment": "Please extend for another year", "status": "pending",
                "adminComment": None},
        }
        self.support_tickets = {
            1: {"id": 1, "user_id": 2, "title": "Cannot upload images",
                "description": "Image upload fails for large photos of our dishes.",
                "email": "manager@example.com", "phone": "+79000000002", "status": "in_progress",
                "created_at": created, "updated_at": created},
        }
        self.admin_logs = {
            1: {"id": 1, "adminId": 1, "action": "update_user_role", "entityType": "user",
                "entityId": 3, "details": "role=user", "ipAddress": "127.0.0.1", "createdAt": created},
        }

    def _dish(self, dish_id, restaurant_id, category_id, name, price, calories, proteins,
              fats, carbohydrates, ingredients, allergens) -> dict:
        return {
            "id": dish_id, "created_at": "2024-01-15T10:00:00.000Z", "restaurant_id": restaurant_id,
            "category_id": category_id, "name": name, "price": price, "description": None,
            "image": None, "calories": calories, "proteins": proteins, "fats": fats,
            "carbohydrates": carbohydrates,
            "ingredients": [{"id": i + 1, "name": n, "quantity": q} for i, (n, q) in enumerate(ingredients)],
            "allergens": [{"id": i + 1, "name": n, "description": None} for i, n in enumerate(allergens)],
        }

    def _add_reservation(self, reservation_id, restaurant_id, table_id, on_date, start_time,
                         status, name, phone, guests, session_id) -> dict:
        duration = self.restaurants[restaurant_id].get("reservation_duration") or 120
        reservation = {
            "id": reservation_id, "restaurant_id": restaurant_id, "table_id": table_id,
            "customer_name": name, "customer_phone": phone, "customer_email": None,
            "guest_count": guests, "reservation_date": on_date.isoformat(),
            "start_time": start_time, "end_time": _add_minutes(start_time, duration),
            "status": status, "notes": None, "session_id": session_id,
            "created_at": self._now(),
        }
        self.reservations[reservation_id] = reservation
        return reservation

    def add_message(self, session_id: int, author: str, content: str) -> dict:
        """Append a chat message as if ``author`` (user, bot or restaurant) wrote it."""
        message = {"id": self._next_id(), "content": content, "sentAt": self._now(), "authorType": author}
        self.messages.setdefault(session_id, []).append(message)
        if session_id in self.chat_sessions:
            self.chat_sessions[session_id]["lastActive"] = message["sentAt"]
        return message

    # =========================================================================
    # RENDERING
    # =========================================================================

    @staticmethod
    def _public_user(user: dict) -> dict:
        return {k: v for k, v in user.items() if k != "password"}

    def _render_organization(self, org: dict) -> dict:
        admin = self.users.get(org["admin_id"])
        return {
            "id": org["id"], "created_at": org["created_at"], "name": org["name"],
            "phone": org["phone"], "admin_id": org["admin_id"],
            "admin": self._user_in_org(admin) if admin else None,
            "users": [self._user_in_org(self.users[u]) for u in org["user_ids"] if u in self.users],
            "languages": [self.languages[i] for i in org["language_ids"] if i in self.languages],
        }

    @staticmethod
    def _user_in_org(user: dict) -> dict:
        return {"id": user["id"], "name": user["name"], "email": user["email"], "phone": user.get("phone")}

    def _render_restaurant(self, restaurant: dict) -> dict:
        org = self.organizations.get(restaurant["organization_id"], {})
        data = {k: v for k, v in restaurant.items() if k != "organization_id"}
        data["organization"] = {"id": org.get("id"), "name": org.get("name"), "phone": org.get("phone")}
        return data

    def _restaurant_ref(self, restaurant_id: int) -> Optional[dict]:
        restaurant = self.restaurants.get(restaurant_id)
        if restaurant is None:
            return None
        return {"id": restaurant["id"], "name": restaurant["name"], "currency": restaurant["currency"]}

    def _render_table(self, table: dict) -> dict:
        return {
            "id": table["id"], "createdAt": table["createdAt"], "name": table["name"],
            "guestCount": table["guestCount"], "restaurant": self._restaurant_ref(table["restaurant_id"]),
        }

    def _render_dish(self, dish: dict) -> dict:
        category = self.categories.get(dish["category_id"])
        data = {k: v for k, v in dish.items() if k not in ("restaurant_id", "category_id")}
        data["restaurant"] = self._restaurant_ref(dish["restaurant_id"])
        data["menuCategory"] = {"id": category["id"], "name": category["name"]} if category else None
        return data

    def _render_reservation(self, reservation: dict) -> dict:
        table = self.tables.get(reservation["table_id"])
        restaurant = self.restaurants.get(reservation["restaurant_id"], {})
        data = {k: v for k, v in reservation.items() if k != "session_id"}
        data["restaurant_name"] = restaurant.get("name")
        data["table"] = {"id": table["id"], "name": table["name"]} if table else None
        return data

    def _render_session(self, session: dict) -> dict:
        table = self.tables.get(session["table_id"]) if session["table_id"] else None
        data = {"id": session["id"], "active": session["active"], "lastActive": session["lastActive"]}
        if table:
            data["table"] = {"id": table["id"], "name": table["name"]}
        return data

    def _render_question(self, question: dict) -> dict:
        data = {k: v for k, v in question.items() if k != "language_id"}
        data["language"] = self.languages.get(question["language_id"])
        return data

    def _render_subscription(self, sub: dict) -> dict:
        org = self.organizations.get(sub["organization_id"], {})
        end = date.fromisoformat(sub["endDate"])
        days_left = max((end - self.today).days, 0)
        data = {k: v for k, v in sub.items() if k != "organization_id"}
        data["organization"] = {"id": org.get("id"), "name": org.get("name"), "phone": org.get("phone")}
        data["daysLeft"] = days_left
        data["isActive"] = sub["isActive"] and days_left > 0
        return data

    def _render_extension_request(self, req: dict) -> dict:
        org = self.organizations.get(req["organization_id"], {})
        user = self.users.get(req["user_id"])
        data = {k: v for k, v in req.items() if k not in ("organization_id", "user_id")}
        data["organization"] = {"id": org.get("id"), "name": org.get("name")}
        data["user"] = {"id": user["id"], "name": user["name"], "email": user["email"]} if user else None
        return data

    def _render_ticket(self, ticket: dict) -> dict:
        user = self.users.get(ticket["user_id"], {})
        data = dict(ticket)
        data["user_name"] = user.get("name", "")
        data["user_email"] = user.get("email", "")
        return data

    def _render_log(self, log: dict) -> dict:
        admin = self.users.get(log["adminId"], {})
        return dict(log, adminName=admin.get("name", ""), adminEmail=admin.get("email", ""))

    def _organization_of(self, user_id: Optional[int]) -> Optional[dict]:
        for org in self.organizations.values():
            if user_id in org["user_ids"]:
                return org
        return None

    @staticmethod
    def _paged(items: list, key: str, params: dict, size_param: str, total_key: str) -> dict:
        page = int(params.get("page", 1))
        page_size = int(params.get(size_param, 20))
        start = (page - 1) * page_size
        return {
            key: items[start:start + page_size],
            total_key: len(items),
            "page": page,
            size_param: page_size,
        }

    # =========================================================================
    # ROUTE TABLE
    # =========================================================================

    def _build_routes(self) -> list[tuple[str, re.Pattern, Callable]]:
        table = [
            # Auth
            ("POST", r"/auth/login", self._login),
            ("POST", r"/auth/register", self._register),
            ("POST", r"/auth/change-password", self._change_password),
            ("POST", r"/auth/request-password-reset", self._request_reset),
            ("POST", r"/auth/verify-password-reset", self._verify_reset),
            ("GET", r"/auth/chek", self._check_token),
            # Users
            ("POST", r"/user", self._create_user),
            ("GET", r"/user/(?P<target_id>\d+)", self._get_user),
            ("PATCH", r"/user/(?P<target_id>\d+)", self._update_user),
            # Organizations
            ("GET", r"/organization", self._list_organizations),
            ("GET", r"/organization/(?P<org_id>\d+)", self._get_organization),
            ("PATCH", r"/organization/(?P<org_id>\d+)", self._update_organization),
            ("POST", r"/organization/(?P<org_id>\d+)/users", self._add_org_user),
            ("DELETE", r"/organization/(?P<org_id>\d+)/users", self._remove_org_user),
            ("GET", r"/organization/(?P<org_id>\d+)/languages", self._org_languages),
            ("POST", r"/organization/(?P<org_id>\d+)/languages", self._add_org_language),
            ("DELETE", r"/organization/(?P<org_id>\d+)/languages", self._remove_org_language),
            # Languages
            ("GET", r"/languages", self._list_languages),
            ("POST", r"/languages", self._create_language),
            # Restaurants
            ("GET", r"/restaurants", self._list_restaurants),
            ("GET", r"/restaurants/organization/(?P<org_id>\d+)", self._restaurants_by_org),
            ("GET", r"/restaurants/(?P<restaurant_id>\d+)", self._get_restaurant),
            ("POST", r"/restaurants", self._create_restaurant),
            ("PUT", r"/restaurants/(?P<restaurant_id>\d+)", self._update_restaurant),
            ("DELETE", r"/restaurants/(?P<restaurant_id>\d+)", self._delete_restaurant),
            ("PUT", r"/restaurants/(?P<restaurant_id>\d+)/working-hours", self._update_working_hours),
            # Tables
            ("GET", r"/tables/restaurant/(?P<restaurant_id>\d+)", self._tables_by_restaurant),
            ("GET", r"/tables/(?P<table_id>\d+)", self._get_table),
            ("POST", r"/tables", self._create_table),
            ("PUT", r"/tables/(?P<table_id>\d+)", self._update_table),
            ("DELETE", r"/tables/(?P<table_id>\d+)", self._delete_table),
            # Categories
            ("GET", r"/categories/restaurant/(?P<restaurant_id>\d+)", self._categories_by_restaurant),
            ("PUT", r"/categories/sort-order", self._category_sort_order),
            ("GET", r"/categories/(?P<category_id>\d+)", self._get_category),
            ("POST", r"/categories", self._create_category),
            ("PATCH", r"/categories/(?P<category_id>\d+)", self._update_category),
            ("DELETE", r"/categories/(?P<category_id>\d+)", self._delete_category),
            # Dishes
            ("GET", r"/dishes/restaurant/(?P<restaurant_id>\d+)", self._dishes_by_restaurant),
            ("GET", r"/dishes/category/(?P<restaurant_id>\d+)", self._dishes_by_category),
            ("GET", r"/dishes/dish-of-day/(?P<restaurant_id>\d+)", self._get_dish_of_day),
            ("POST", r"/dishes/dish-of-day/(?P<dish_id>\d+)", self._set_dish_of_day),
            ("GET", r"/dishes/(?P<dish_id>\d+)", self._get_dish),
            ("POST", r"/dishes", self._create_dish),
            ("PUT", r"/dishes/(?P<dish_id>\d+)", self._update_dish),
            ("DELETE", r"/dishes/(?P<dish_id>\d+)", self._delete_dish),
            # Reservations
            ("GET", r"/reservations", self._list_reservations),
            ("GET", r"/reservations/restaurant/(?P<restaurant_id>\d+)", self._reservations_by_restaurant),
            ("GET", r"/reservations/available/(?P<restaurant_id>\d+)", self._available_slots),
            ("GET", r"/reservations/my", self._reservations_by_phone),
            ("GET", r"/reservations/session/(?P<session_id>\d+)", self._reservations_by_session),
            ("GET", r"/reservations/(?P<reservation_id>\d+)", self._get_reservation),
            ("POST", r"/reservations", self._create_reservation),
            ("PATCH", r"/reservations/(?P<reservation_id>\d+)", self._update_reservation),
            ("POST", r"/reservations/(?P<reservation_id>\d+)/cancel", self._cancel_reservation),
            ("POST", r"/reservations/(?P<reservation_id>\d+)/cancel/public", self._cancel_by_phone),
            ("DELETE", r"/reservations/(?P<reservation_id>\d+)", self._delete_reservation),
            # Chat
            ("GET", r"/chat/table/session/(?P<table_id>\d+)", self._table_sessions),
            ("GET", r"/chat/table/session/(?P<session_id>\d+)/messages", self._session_messages),
            ("POST", r"/chat/table/message/send", self._send_message),
            ("POST", r"/chat/table/session/close/(?P<session_id>\d+)", self._close_session),
            ("GET", r"/chat/restaurant/sessions/(?P<restaurant_id>\d+)", self._restaurant_sessions),
            ("GET", r"/chat/restaurant/session/(?P<session_id>\d+)/messages", self._session_messages),
            ("POST", r"/chat/restaurant/message/send", self._send_message),
            ("POST", r"/chat/restaurant/session/close/(?P<session_id>\d+)", self._close_session),
            # Questions
            ("GET", r"/questions", self._list_questions),
            ("GET", r"/questions/language/(?P<code>[a-z]+)", self._questions_by_language),
            ("PUT", r"/questions/reorder", self._reorder_questions),
            ("POST", r"/questions", self._create_question),
            ("PUT", r"/questions/(?P<question_id>\d+)", self._update_question),
            ("DELETE", r"/questions/(?P<question_id>\d+)", self._delete_question),
            # QR codes
            ("GET", r"/qrcodes/restaurant/(?P<restaurant_id>\d+)(/download)?", self._qr_restaurant),
            ("GET", r"/qrcodes/restaurant/(?P<restaurant_id>\d+)/table/(?P<table_id>\d+)(/download)?",
             self._qr_table),
            # Extension requests
            ("GET", r"/subscriptions/extension-requests", self._list_extension_requests),
            ("GET", r"/subscriptions/extension-requests/my", self._my_extension_requests),
            ("GET", r"/subscriptions/extension-requests/status/(?P<status>[a-z_]+)",
             self._extension_requests_by_status),
            ("GET", r"/subscriptions/extension-requests/(?P<request_id>\d+)", self._get_extension_request),
            ("POST", r"/subscriptions/extension-requests", self._create_extension_request),
            ("PATCH", r"/subscriptions/extension-requests/(?P<request_id>\d+)/status",
             self._update_extension_request),
            # Subscriptions
            ("GET", r"/subscriptions", self._list_subscriptions),
            ("GET", r"/subscriptions/organization/(?P<org_id>\d+)", self._subscriptions_by_org),
            ("GET", r"/subscriptions/organization/(?P<org_id>\d+)/active", self._active_subscription),
            ("GET", r"/subscriptions/(?P<subscription_id>\d+)", self._get_subscription),
            ("POST", r"/subscriptions", self._create_subscription),
            ("PUT", r"/subscriptions/(?P<subscription_id>\d+)", self._update_subscription),
            ("POST", r"/subscriptions/(?P<subscription_id>\d+)/extend", self._extend_subscription),
            ("POST", r"/subscriptions/(?P<subscription_id>\d+)/deactivate", self._deactivate_subscription),
            ("DELETE", r"/subscriptions/(?P<subscription_id>\d+)", self._delete_subscription),
            # Uploads
            ("POST", r"/uploads/images", self._upload_image),
            # Admin
            ("GET", r"/admin/stats", self._admin_stats),
            ("GET", r"/admin/users", self._admin_users),
            ("GET", r"/admin/users/(?P<target_id>\d+)", self._get_user),
            ("PATCH", r"/admin/users/(?P<target_id>\d+)/status", self._admin_user_status),
            ("PATCH", r"/admin/users/(?P<target_id>\d+)/role", self._admin_user_role),
            ("DELETE", r"/admin/users/(?P<target_id>\d+)", self._admin_delete_user),
            ("GET", r"/admin/organizations", self._admin_organizations),
            ("GET", r"/admin/organizations/(?P<org_id>\d+)", self._get_organization),
            ("DELETE", r"/admin/organizations/(?P<org_id>\d+)", self._admin_delete_organization),
            ("GET", r"/admin/dishes", self._admin_dishes),
            ("DELETE", r"/admin/dishes/(?P<dish_id>\d+)", self._delete_dish),
            ("GET", r"/admin/logs", self._admin_logs),
            ("GET", r"/admin/logs/me", self._admin_my_logs),
            ("GET", r"/admin/support", self._admin_support),
            ("PATCH", r"/admin/support/(?P<ticket_id>\d+)/status", self._admin_support_status),
            # Support
            ("POST", r"/support", self._create_ticket),
            ("GET", r"/support/my", self._my_tickets),
            ("GET", r"/support/(?P<ticket_id>\d+)", self._get_ticket),
        ]
        return [(method, re.compile(f"^{pattern}$"), handler) for method, pattern, handler in table]

    # =========================================================================
    # AUTH / USERS
    # =========================================================================

    def _auth_result(self, user: dict) -> dict:
        org = self._organization_of(user["id"])
        return {
            "token": self.issue_token(user["id"]),
            "type": "Bearer",
            "expires_at": int((datetime.now(timezone.utc) + timedelta(days=7)).timestamp()),
            "user": self._public_user(user),
            "organization": self._render_organization(org) if org else None,
        }

    def _find_user(self, email: str) -> Optional[dict]:
        for user in self.users.values():
            if user["email"].lower() == str(email).lower():
                return user
        return None

    def _login(self, body, **_) -> dict:
        user = self._find_user(body.get("email", ""))
        if user is None or user["password"] != body.get("password"):
            raise MockHttpError(401, "Invalid email or password")
        if not user.get("isActive", True):
            raise MockHttpError(403, "Account is disabled")
        return self._auth_result(user)

    def _register(self, body, **_) -> dict:
        if self._find_user(body.get("email", "")):
            raise MockHttpError(422, "User with this email already exists")
        user = self._create_user(body=body)
        user = self.users[user["id"]]
        org_id = self._next_id()
        self.organizations[org_id] = {
            "id": org_id, "created_at": self._now(), "name": body.get("company") or user["name"],
            "phone": body.get("phone") or "", "admin_id": user["id"], "user_ids": [user["id"]],
            "language_ids": [1],
        }
        return self._auth_result(user)

    def _change_password(self, user_id, body, **_) -> None:
        user = self.users[user_id]
        if user["password"] != body.get("oldPassword"):
            raise MockHttpError(422, "Old password is incorrect")
        user["password"] = body.get("newPassword")

    def _request_reset(self, body, **_) -> None:
        logger.info(f"Mock: password reset code 123456 issued for {body.get('email')}")

    def _verify_reset(self, body, **_) -> None:
        user = self._find_user(body.get("email", ""))
        if user is None or body.get("code") != "123456":
            raise MockHttpError(422, "Invalid reset code")
        user["password"] = body.get("newPassword")

    def _check_token(self, user_id, **_) -> dict:
        user = self.users[user_id]
        org = self._organization_of(user_id)
        return {"id": user["id"], "email": user["email"], "company_id": org["id"] if org else None}

    def _create_user(self, body, **_) -> dict:
        if self._find_user(body.get("email", "")):
            raise MockHttpError(422, "User with this email already exists")
        user_id = self._next_id()
        self.users[user_id] = {
            "id": user_id, "created_at": self._now(), "email": body.get("email"),
            "name": body.get("name", ""), "company": body.get("company"), "phone": body.get("phone"),
            "role": "user", "isActive": True, "password": body.get("password"),
        }
        return self._public_user(self.users[user_id])

    def _get_user(self, target_id, **_) -> dict:
        return self._public_user(self._get(self.users, target_id, "User"))

    def _update_user(self, target_id, body, **_) -> dict:
        user = self._get(self.users, target_id, "User")
        for key in ("name", "email", "phone", "company"):
            if key in body:
                user[key] = body[key]
        return self._public_user(user)

    # =========================================================================
    # ORGANIZATIONS / LANGUAGES
    # =========================================================================

    def _list_organizations(self, **_) -> dict:
        return {"organizations": [self._render_organization(o) for o in self.organizations.values()]}

    def _get_organization(self, org_id, **_) -> dict:
        return self._render_organization(self._get(self.organizations, org_id, "Organization"))

    def _update_organization(self, org_id, body, **_) -> dict:
        org = self._get(self.organizations, org_id, "Organization")
        for key in ("name", "phone"):
            if key in body:
                org[key] = body[key]
        return self._render_organization(org)

    def _add_org_user(self, org_id, body, **_) -> None:
        org = self._get(self.organizations, org_id, "Organization")
        member = int(body.get("user_id"))
        self._get(self.users, member, "User")
        if member not in org["user_ids"]:
            org["user_ids"].append(member)

    def _remove_org_user(self, org_id, body, **_) -> None:
        org = self._get(self.organizations, org_id, "Organization")
        member = int(body.get("user_id"))
        if member == org["admin_id"]:
            raise MockHttpError(403, "Cannot remove the organization owner")
        if member in org["user_ids"]:
            org["user_ids"].remove(member)

    def _org_languages(self, org_id, **_) -> list:
        org = self._get(self.organizations, org_id, "Organization")
        return [self.languages[i] for i in org["language_ids"] if i in self.languages]

    def _add_org_language(self, org_id, body, **_) -> None:
        org = self._get(self.organizations, org_id, "Organization")
        language_id = int(body.get("languageId"))
        self._get(self.languages, language_id, "Language")
        if language_id not in org["language_ids"]:
            org["language_ids"].append(language_id)

    def _remove_org_language(self, org_id, body, **_) -> None:
        org = self._get(self.organizations, org_id, "Organization")
        language_id = int(body.get("languageId"))
        if language_id in org["language_ids"]:
            org["language_ids"].remove(language_id)

    def _list_languages(self, **_) -> dict:
        return {"languages": list(self.languages.values())}

    def _create_language(self, body, **_) -> dict:
        code = body.get("code", "")
        if any(lang["code"] == code for lang in self.languages.values()):
            raise MockHttpError(422, f"Language {code} already exists")
        language_id = self._next_id()
        self.languages[language_id] = {
            "id": language_id, "createdAt": self._now(), "code": code,
            "name": body.get("name", ""), "description": body.get("description"),
        }
        return self.languages[language_id]

    # =========================================================================
    # RESTAURANTS / TABLES
    # =========================================================================

    def _list_restaurants(self, user_id, **_) -> dict:
        org = self._organization_of(user_id)
        items = [r for r in self.restaurants.values() if org and r["organization_id"] == org["id"]]
        return {"restaurants": [self._render_restaurant(r) for r in items]}

    def _restaurants_by_org(self, org_id, **_) -> dict:
        items = [r for r in self.restaurants.values() if r["organization_id"] == org_id]
        return {"restaurants": [self._render_restaurant(r) for r in items]}

    def _get_restaurant(self, restaurant_id, **_) -> dict:
        return self._render_restaurant(self._get(self.restaurants, restaurant_id, "Restaurant"))

    def _create_restaurant(self, user_id, body, **_) -> dict:
        org = self._organization_of(user_id)
        restaurant_id = self._next_id()
        self.restaurants[restaurant_id] = {
            "id": restaurant_id, "created_at": self._now(),
            "organization_id": body.get("organization_id") or (org["id"] if org else None),
            "name": body.get("name"), "address": body.get("address", ""), "phone": body.get("phone", ""),
            "website": body.get("website"), "description": body.get("description"),
            "image_url": body.get("image_url"), "currency": body.get("currency"),
            "reservation_duration": body.get("reservation_duration") or 120,
            "working_hours": self._hours(body.get("working_hours", [])),
        }
        return self._render_restaurant(self.restaurants[restaurant_id])

    def _hours(self, hours: list[dict]) -> list[dict]:
        return [
            {"id": self._next_id(), "day_of_week": h["day_of_week"],
             "open_time": h["open_time"], "close_time": h["close_time"]}
            for h in hours
        ]

    def _update_restaurant(self, restaurant_id, body, **_) -> dict:
        restaurant = self._get(self.restaurants, restaurant_id, "Restaurant")
        for key in ("name", "address", "phone", "website", "description", "image_url",
                    "currency", "reservation_duration"):
            if key in body:
                restaurant[key] = body[key]
        if "working_hours" in body:
            restaurant["working_hours"] = self._hours(body["working_hours"])
        return self._render_restaurant(restaurant)

    def _delete_restaurant(self, restaurant_id, **_) -> None:
        self._get(self.restaurants, restaurant_id, "Restaurant")
        del self.restaurants[restaurant_id]

    def _update_working_hours(self, restaurant_id, body, **_) -> None:
        restaurant = self._get(self.restaurants, restaurant_id, "Restaurant")
        restaurant["working_hours"] = self._hours(body.get("working_hours", []))

    def _tables_by_restaurant(self, restaurant_id, **_) -> dict:
        items = [t for t in self.tables.values() if t["restaurant_id"] == restaurant_id]
        return {"tables": [self._render_table(t) for t in items]}

    def _get_table(self, table_id, **_) -> dict:
        return self._render_table(self._get(self.tables, table_id, "Table"))

    def _create_table(self, body, **_) -> dict:
        restaurant_id = body.get("restaurantId")
        self._get(self.restaurants, restaurant_id, "Restaurant")
        table_id = self._next_id()
        self.tables[table_id] = {
            "id": table_id, "createdAt": self._now(), "restaurant_id": restaurant_id,
            "name": body.get("name"), "guestCount": body.get("guestCount", 2),
        }
        return self._render_table(self.tables[table_id])

    def _update_table(self, table_id, body, **_) -> dict:
        table = self._get(self.tables, table_id, "Table")
        for key in ("name", "guestCount"):
            if key in body:
                table[key] = body[key]
        return self._render_table(table)

    def _delete_table(self, table_id, **_) -> None:
        self._get(self.tables, table_id, "Table")
        del self.tables[table_id]

    # =========================================================================
    # MENU
    # =========================================================================

    def _categories_by_restaurant(self, restaurant_id, **_) -> dict:
        items = [c for c in self.categories.values() if c["restaurant_id"] == restaurant_id]
        return {"categories": sorted(items, key=lambda c: c["sort_order"])}

    def _get_category(self, category_id, **_) -> dict:
        return self._get(self.categories, category_id, "Category")

    def _create_category(self, body, **_) -> dict:
        restaurant_id = body.get("restaurant_id")
        self._get(self.restaurants, restaurant_id, "Restaurant")
        siblings = [c["sort_order"] for c in self.categories.values() if c["restaurant_id"] == restaurant_id]
        category_id = self._next_id()
        self.categories[category_id] = {
            "id": category_id, "created_at": self._now(), "restaurant_id": restaurant_id,
            "name": body.get("name"), "sort_order": body.get("sort_order") or max(siblings, default=0) + 1,
        }
        return self.categories[category_id]

    def _update_category(self, category_id, body, **_) -> dict:
        category = self._get(self.categories, category_id, "Category")
        for key in ("name", "sort_order"):
            if key in body:
                category[key] = body[key]
        return category

    def _category_sort_order(self, body, **_) -> None:
        for item in body.get("categories", []):
            category = self._get(self.categories, int(item["id"]), "Category")
            category["sort_order"] = int(item["sort_order"])

    def _delete_category(self, category_id, **_) -> None:
        self._get(self.categories, category_id, "Category")
        if any(d["category_id"] == category_id for d in self.dishes.values()):
            raise MockHttpError(422, "Category still contains dishes")
        del self.categories[category_id]

    def _dishes_by_restaurant(self, restaurant_id, **_) -> dict:
        items = [d for d in self.dishes.values() if d["restaurant_id"] == restaurant_id]
        return {"dishes": [self._render_dish(d) for d in items]}

    def _dishes_by_category(self, restaurant_id, **_) -> dict:
        groups = []
        for category in self._categories_by_restaurant(restaurant_id)["categories"]:
            dishes = [self._render_dish(d) for d in self.dishes.values() if d["category_id"] == category["id"]]
            groups.append({"category": {"id": category["id"], "name": category["name"]}, "dishes": dishes})
        return {"categories": groups}

    def _get_dish(self, dish_id, **_) -> dict:
        return self._render_dish(self._get(self.dishes, dish_id, "Dish"))

    def _dish_fields(self, dish: dict, body: dict) -> None:
        for key in ("name", "price", "description", "image", "calories", "proteins", "fats", "carbohydrates"):
            if key in body:
                dish[key] = body[key]
        if "menuCategoryId" in body:
            self._get(self.categories, body["menuCategoryId"], "Category")
            dish["category_id"] = body["menuCategoryId"]
        if "ingredients" in body:
            dish["ingredients"] = [dict(i, id=self._next_id()) for i in body["ingredients"]]
        if "allergens" in body:
            dish["allergens"] = [dict(a, id=self._next_id()) for a in body["allergens"]]

    def _create_dish(self, body, **_) -> dict:
        category = self._get(self.categories, body.get("menuCategoryId"), "Category")
        dish = self._dish(self._next_id(), body.get("restaurant_id") or category["restaurant_id"],
                          category["id"], body.get("name"), body.get("price", 0), 0, 0, 0, 0, [], [])
        self._dish_fields(dish, body)
        self.dishes[dish["id"]] = dish
        return self._render_dish(dish)

    def _update_dish(self, dish_id, body, **_) -> dict:
        dish = self._get(self.dishes, dish_id, "Dish")
        self._dish_fields(dish, body)
        return self._render_dish(dish)

    def _delete_dish(self, dish_id, **_) -> None:
        self._get(self.dishes, dish_id, "Dish")
        del self.dishes[dish_id]

    def _get_dish_of_day(self, restaurant_id, **_) -> Optional[dict]:
        dish_id = self.dish_of_day.get(restaurant_id)
        if dish_id is None or dish_id not in self.dishes:
            return None
        return self._render_dish(self.dishes[dish_id])

    def _set_dish_of_day(self, dish_id, **_) -> None:
        dish = self._get(self.dishes, dish_id, "Dish")
        self.dish_of_day[dish["restaurant_id"]] = dish_id

    # =========================================================================
    # RESERVATIONS
    # =========================================================================

    def _list_reservations(self, **_) -> dict:
        return {"reservations": [self._render_reservation(r) for r in self.reservations.values()]}

    def _reservations_by_restaurant(self, restaurant_id, **_) -> dict:
        items = [r for r in self.reservations.values() if r["restaurant_id"] == restaurant_id]
        return {"reservations": [self._render_reservation(r) for r in items]}

    def _reservations_by_phone(self, params, **_) -> dict:
        phone = params.get("phone", "")
        items = [r for r in self.reservations.values() if r["customer_phone"] == phone]
        return {"reservations": [self._render_reservation(r) for r in items]}

    def _reservations_by_session(self, session_id, **_) -> dict:
        items = [r for r in self.reservations.values() if r.get("session_id") == session_id]
        return {"reservations": [self._render_reservation(r) for r in items]}

    def _get_reservation(self, reservation_id, **_) -> dict:
        return self._render_reservation(self._get(self.reservations, reservation_id, "Reservation"))

    def _busy(self, table_id: int, on_date: str, start: int, end: int, skip: Optional[int] = None) -> bool:
        for r in self.reservations.values():
            if r["id"] == skip or r["table_id"] != table_id or r["reservation_date"] != on_date:
                continue
            if r["status"] in ("cancelled", "completed", "no_show"):
                continue
            if _to_minutes(r["start_time"]) < end and start < _to_minutes(r["end_time"]):
                return True
        return False

    def _available_slots(self, restaurant_id, params, **_) -> dict:
        restaurant = self._get(self.restaurants, restaurant_id, "Restaurant")
        try:
            on_date = date.fromisoformat(params.get("date", ""))
        except ValueError:
            raise MockHttpError(422, "date must be YYYY-MM-DD")
        guest_count = int(params.get("guest_count") or 0)
        duration = restaurant.get("reservation_duration") or 120
        day_of_week = (on_date.weekday() + 1) % 7
        hours = next((h for h in restaurant["working_hours"] if h["day_of_week"] == day_of_week), None)

        slots = []
        if hours:
            opening = _to_minutes(hours["open_time"])
            closing = _to_minutes(hours["close_time"])
            tables = [t for t in self.tables.values()
                      if t["restaurant_id"] == restaurant_id and t["guestCount"] >= guest_count]
            for table in tables:
                start = opening
                while start + duration <= closing:
                    if not self._busy(table["id"], on_date.isoformat(), start, start + duration):
                        slots.append({
                            "table_id": table["id"], "table_name": table["name"],
                            "capacity": table["guestCount"],
                            "start_time": f"{start // 60:02d}:{start % 60:02d}",
                            "end_time": _add_minutes(f"{start // 60:02d}:{start % 60:02d}", duration),
                        })
                    start += 60
        return {"restaurant_id": restaurant_id, "restaurant_name": restaurant["name"],
                "date": on_date.isoformat(), "slots": slots}

    def _create_reservation(self, body, **_) -> dict:
        table = self._get(self.tables, body.get("table_id"), "Table")
        restaurant_id = body.get("restaurant_id") or table["restaurant_id"]
        on_date = date.fromisoformat(body["reservation_date"])
        start = body["start_time"]
        duration = self.restaurants[restaurant_id].get("reservation_duration") or 120
        if self._busy(table["id"], on_date.isoformat(), _to_minutes(start), _to_minutes(start) + duration):
            raise MockHttpError(422, "Table is already booked for this time")
        reservation = self._add_reservation(
            self._next_id(), restaurant_id, table["id"], on_date, start, "pending",
            body.get("customer_name"), body.get("customer_phone"), body.get("guest_count", 2), None,
        )
        reservation["customer_email"] = body.get("customer_email")
        reservation["notes"] = body.get("notes")
        return self._render_reservation(reservation)

    def _update_reservation(self, reservation_id, body, **_) -> dict:
        reservation = self._get(self.reservations, reservation_id, "Reservation")
        for key in ("customer_name", "customer_phone", "customer_email", "guest_count",
                    "reservation_date", "start_time", "table_id", "notes", "status"):
            if key in body:
                reservation[key] = body[key]
        if "start_time" in body:
            duration = self.restaurants[reservation["restaurant_id"]].get("reservation_duration") or 120
            reservation["end_time"] = _add_minutes(body["start_time"], duration)
        return self._render_reservation(reservation)

    def _cancel_reservation(self, reservation_id, **_) -> dict:
        reservation = self._get(self.reservations, reservation_id, "Reservation")
        reservation["status"] = "cancelled"
        return self._render_reservation(reservation)

    def _cancel_by_phone(self, reservation_id, body, **_) -> dict:
        reservation = self._get(self.reservations, reservation_id, "Reservation")
        if reservation["customer_phone"] != body.get("phone"):
            raise MockHttpError(403, "Phone number does not match the reservation")
        reservation["status"] = "cancelled"
        return self._render_reservation(reservation)

    def _delete_reservation(self, reservation_id, **_) -> None:
        self._get(self.reservations, reservation_id, "Reservation")
        del self.reservations[reservation_id]

    # =========================================================================
    # CHAT
    # =========================================================================

    def _table_sessions(self, table_id, **_) -> dict:
        items = [s for s in self.chat_sessions.values() if s["table_id"] == table_id]
        return {"sessions": [self._render_session(s) for s in items]}

    def _restaurant_sessions(self, restaurant_id, **_) -> dict:
        items = [s for s in self.chat_sessions.values() if s["restaurant_id"] == restaurant_id]
        items.sort(key=lambda s: s["lastActive"], reverse=True)
        return {"sessions": [self._render_session(s) for s in items]}

    def _session_messages(self, session_id, **_) -> dict:
        self._get(self.chat_sessions, session_id, "Chat session")
        return {"messages": self.messages.get(session_id, [])}

    def _send_message(self, body, **_) -> dict:
        session_id = int(body.get("sessionId", 0))
        session = self._get(self.chat_sessions, session_id, "Chat session")
        if not session["active"]:
            raise MockHttpError(422, "Chat session is closed")
        content = str(body.get("content", "")).strip()
        if not content:
            raise MockHttpError(422, "Message content is required")
        return self.add_message(session_id, "restaurant", content)

    def _close_session(self, session_id, **_) -> None:
        session = self._get(self.chat_sessions, session_id, "Chat session")
        session["active"] = False

    # =========================================================================
    # QUESTIONS
    # =========================================================================

    def _sorted_questions(self, items) -> list[dict]:
        return [self._render_question(q) for q in sorted(items, key=lambda q: q["display_order"])]

    def _list_questions(self, **_) -> dict:
        return {"questions": self._sorted_questions(self.questions.values())}

    def _questions_by_language(self, code, **_) -> dict:
        ids = {lang["id"] for lang in self.languages.values() if lang["code"] == code}
        return {"questions": self._sorted_questions(q for q in self.questions.values() if q["language_id"] in ids)}

    def _language_id(self, code: Optional[str]) -> int:
        for lang in self.languages.values():
            if lang["code"] == code:
                return lang["id"]
        raise MockHttpError(422, f"Unknown language: {code}")

    def _create_question(self, body, **_) -> dict:
        question_id = self._next_id()
        chat_type = body.get("chatType", "menu")
        same_type = [q["display_order"] for q in self.questions.values() if q["chat_type"] == chat_type]
        self.questions[question_id] = {
            "id": question_id, "created_at": self._now(), "text": body.get("text"),
            "language_id": self._language_id(body.get("languageCode", "ru")), "chat_type": chat_type,
            "display_order": body.get("displayOrder") or max(same_type, default=0) + 1,
        }
        return self._render_question(self.questions[question_id])

    def _update_question(self, question_id, body, **_) -> dict:
        question = self._get(self.questions, question_id, "Question")
        if "text" in body:
            question["text"] = body["text"]
        if "chatType" in body:
            question["chat_type"] = body["chatType"]
        if "displayOrder" in body:
            question["display_order"] = body["displayOrder"]
        if "languageCode" in body:
            question["language_id"] = self._language_id(body["languageCode"])
        return self._render_question(question)

    def _reorder_questions(self, body, **_) -> None:
        for position, question_id in enumerate(body.get("questionIds", []), start=1):
            self._get(self.questions, int(question_id), "Question")["display_order"] = position

    def _delete_question(self, question_id, **_) -> None:
        self._get(self.questions, question_id, "Question")
        del self.questions[question_id]

    # =========================================================================
    # QR CODES / UPLOADS
    # =========================================================================

    def _qr_restaurant(self, restaurant_id, **_) -> httpx.Response:
        self._get(self.restaurants, restaurant_id, "Restaurant")
        return httpx.Response(200, content=QR_PNG, headers={"content-type": "image/png"})

    def _qr_table(self, restaurant_id, table_id, **_) -> httpx.Response:
        self._get(self.restaurants, restaurant_id, "Restaurant")
        table = self._get(self.tables, table_id, "Table")
        if table["restaurant_id"] != restaurant_id:
            raise MockHttpError(404, "Table not found")
        return httpx.Response(200, content=QR_PNG, headers={"content-type": "image/png"})

    def _upload_image(self, request, **_) -> dict:
        if b'name="image"' not in request.content:
            raise MockHttpError(422, "Field 'image' is required")
        return {"url": f"/uploads/images/{self._next_id()}.png"}

    # =========================================================================
    # SUBSCRIPTIONS / EXTENSION REQUESTS
    # =========================================================================

    def _list_subscriptions(self, **_) -> dict:
        return {"subscriptions": [self._render_subscription(s) for s in self.subscriptions.values()]}

    def _subscriptions_by_org(self, org_id, **_) -> list:
        return [self._render_subscription(s) for s in self.subscriptions.values() if s["organization_id"] == org_id]

    def _active_subscription(self, org_id, **_) -> dict:
        for sub in self.subscriptions.values():
            rendered = self._render_subscription(sub)
            if sub["organization_id"] == org_id and rendered["isActive"]:
                return rendered
        raise MockHttpError(404, "No active subscription")

    def _get_subscription(self, subscription_id, **_) -> dict:
        return self._render_subscription(self._get(self.subscriptions, subscription_id, "Subscription"))

    def _create_subscription(self, body, **_) -> dict:
        self._get(self.organizations, body.get("organizationId"), "Organization")
        start = date.fromisoformat(body["startDate"])
        subscription_id = self._next_id()
        self.subscriptions[subscription_id] = {
            "id": subscription_id, "createdAt": self._now(), "organization_id": body["organizationId"],
            "period": body["period"], "startDate": start.isoformat(),
            "endDate": (start + timedelta(days=30 * int(body["period"]))).isoformat(),
            "isActive": body.get("isActive", True),
        }
        return self._render_subscription(self.subscriptions[subscription_id])

    def _update_subscription(self, subscription_id, body, **_) -> dict:
        sub = self._get(self.subscriptions, subscription_id, "Subscription")
        if "period" in body:
            sub["period"] = body["period"]
        if "startDate" in body:
            sub["startDate"] = body["startDate"]
        if "isActive" in body:
            sub["isActive"] = body["isActive"]
        start = date.fromisoformat(sub["startDate"])
        sub["endDate"] = (start + timedelta(days=30 * int(sub["period"]))).isoformat()
        return self._render_subscription(sub)

    def _extend_subscription(self, subscription_id, body, **_) -> dict:
        sub = self._get(self.subscriptions, subscription_id, "Subscription")
        months = int(body.get("period", 0))
        sub["period"] += months
        sub["endDate"] = (date.fromisoformat(sub["endDate"]) + timedelta(days=30 * months)).isoformat()
        sub["isActive"] = True
        return self._render_subscription(sub)

    def _deactivate_subscription(self, subscription_id, **_) -> None:
        self._get(self.subscriptions, subscription_id, "Subscription")["isActive"] = False

    def _delete_subscription(self, subscription_id, **_) -> None:
        self._get(self.subscriptions, subscription_id, "Subscription")
        del self.subscriptions[subscription_id]

    def _list_extension_requests(self, **_) -> dict:
        return {"requests": [self._render_extension_request(r) for r in self.extension_requests.values()]}

    def _my_extension_requests(self, user_id, **_) -> dict:
        items = [r for r in self.extension_requests.values() if r["user_id"] == user_id]
        return {"requests": [self._render_extension_request(r) for r in items]}

    def _extension_requests_by_status(self, status, **_) -> dict:
        items = [r for r in self.extension_requests.values() if r["status"] == status]
        return {"requests": [self._render_extension_request(r) for r in items]}

    def _get_extension_request(self, request_id, **_) -> dict:
        return self._render_extension_request(self._get(self.extension_requests, request_id, "Request"))

    def _create_extension_request(self, user_id, body, **_) -> dict:
        org = self._organization_of(user_id)
        request_id = self._next_id()
        self.extension_requests[request_id] = {
            "id": request_id, "createdAt": self._now(), "organization_id": org["id"] if org else None,
            "user_id": user_id, "name": body.get("name", ""), "phone": body.get("phone", ""),
            "email": body.get("email", ""), "period": body.get("period"), "comment": body.get("comment"),
            "status": "pending", "adminComment": None,
        }
        return self._render_extension_request(self.extension_requests[request_id])

    def _update_extension_request(self, request_id, body, **_) -> dict:
        req = self._get(self.extension_requests, request_id, "Request")
        req["status"] = body.get("status", req["status"])
        req["adminComment"] = body.get("adminComment", req["adminComment"])
        return self._render_extension_request(req)

    # =========================================================================
    # ADMIN / SUPPORT
    # =========================================================================

    def _require_admin(self, user_id: Optional[int]) -> None:
        if self.users.get(user_id, {}).get("role") != "admin":
            raise MockHttpError(403, "Admin access required")

    def _log(self, admin_id: int, action: str, entity_type: str, entity_id: int) -> None:
        log_id = self._next_id()
        self.admin_logs[log_id] = {
            "id": log_id, "adminId": admin_id, "action": action, "entityType": entity_type,
            "entityId": entity_id, "details": None, "ipAddress": "127.0.0.1", "createdAt": self._now(),
        }

    def _admin_stats(self, user_id, **_) -> dict:
        self._require_admin(user_id)
        logs = sorted(self.admin_logs.values(), key=lambda entry: entry["createdAt"], reverse=True)[:5]
        return {
            "totalUsers": len(self.users),
            "activeUsers": sum(1 for u in self.users.values() if u.get("isActive")),
            "totalOrganizations": len(self.organizations),
            "totalRestaurants": len(self.restaurants),
            "totalDishes": len(self.dishes),
            "totalTables": len(self.tables),
            "totalQuestions": len(self.questions),
            "activeSubscriptions": sum(
                1 for s in self.subscriptions.values() if self._render_subscription(s)["isActive"]
            ),
            "recentActivity": [
                {"id": entry["id"], "action": entry["action"], "entityType": entry["entityType"],
                 "entityId": entry["entityId"], "createdAt": entry["createdAt"],
                 "adminName": self.users.get(entry["adminId"], {}).get("name", "")}
                for entry in logs
            ],
        }

    def _admin_users(self, user_id, params, **_) -> dict:
        self._require_admin(user_id)
        users = [self._public_user(u) for u in self.users.values()]
        return self._paged(users, "users", params, "pageSize", "totalCount")

    def _admin_user_status(self, user_id, target_id, body, **_) -> None:
        self._require_admin(user_id)
        user = self._get(self.users, target_id, "User")
        user["isActive"] = bool(body.get("isActive"))
        self._log(user_id, "update_user_status", "user", target_id)

    def _admin_user_role(self, user_id, target_id, body, **_) -> None:
        self._require_admin(user_id)
        user = self._get(self.users, target_id, "User")
        if body.get("role") not in ("user", "admin"):
            raise MockHttpError(422, "Role must be user or admin")
        user["role"] = body["role"]
        self._log(user_id, "update_user_role", "user", target_id)

    def _admin_delete_user(self, user_id, target_id, **_) -> None:
        self._require_admin(user_id)
        self._get(self.users, target_id, "User")
        if target_id == user_id:
            raise MockHttpError(422, "You cannot delete yourself")
        del self.users[target_id]
        for org in self.organizations.values():
            if target_id in org["user_ids"]:
                org["user_ids"].remove(target_id)
        self._log(user_id, "delete_user", "user", target_id)

    def _admin_organizations(self, user_id, params, **_) -> dict:
        self._require_admin(user_id)
        orgs = [self._render_organization(o) for o in self.organizations.values()]
        return self._paged(orgs, "organizations", params, "pageSize", "totalCount")

    def _admin_delete_organization(self, user_id, org_id, **_) -> None:
        self._require_admin(user_id)
        self._get(self.organizations, org_id, "Organization")
        del self.organizations[org_id]
        self._log(user_id, "delete_organization", "organization", org_id)

    def _admin_dishes(self, user_id, params, **_) -> dict:
        self._require_admin(user_id)
        dishes = [self._render_dish(d) for d in self.dishes.values()]
        return self._paged(dishes, "dishes", params, "pageSize", "totalCount")

    def _admin_logs(self, user_id, params, **_) -> dict:
        self._require_admin(user_id)
        logs = [self._render_log(entry) for entry in self.admin_logs.values()]
        return self._paged(logs, "logs", params, "pageSize", "totalCount")

    def _admin_my_logs(self, user_id, params, **_) -> dict:
        self._require_admin(user_id)
        logs = [self._render_log(entry) for entry in self.admin_logs.values() if entry["adminId"] == user_id]
        return self._paged(logs, "logs", params, "pageSize", "totalCount")

    def _admin_support(self, user_id, params, **_) -> dict:
        self._require_admin(user_id)
        status = params.get("status")
        tickets = [self._render_ticket(t) for t in self.support_tickets.values()
                   if not status or t["status"] == status]
        return self._paged(tickets, "tickets", params, "page_size", "total_count")

    def _admin_support_status(self, user_id, ticket_id, body, **_) -> dict:
        self._require_admin(user_id)
        ticket = self._get(self.support_tickets, ticket_id, "Ticket")
        ticket["status"] = body.get("status", ticket["status"])
        ticket["updated_at"] = self._now()
        return self._render_ticket(ticket)

    def _create_ticket(self, user_id, body, **_) -> dict:
        ticket_id = self._next_id()
        self.support_tickets[ticket_id] = {
            "id": ticket_id, "user_id": user_id, "title": body.get("title", ""),
            "description": body.get("description", ""), "email": body.get("email", ""),
            "phone": body.get("phone"), "status": "in_progress",
            "created_at": self._now(), "updated_at": self._now(),
        }
        return self._render_ticket(self.support_tickets[ticket_id])

    def _my_tickets(self, user_id, params, **_) -> dict:
        tickets = [self._render_ticket(t) for t in self.support_tickets.values() if t["user_id"] == user_id]
        return self._paged(tickets, "tickets", params, "page_size", "total_count")

    def _get_ticket(self, ticket_id, **_) -> dict:
        return self._render_ticket(self._get(self.support_tickets, ticket_id, "Ticket"))
