"""
Pydantic Schemas for Backend Records and Dashboard Forms

Records mirror what the restaurant backend returns. The backend mixes
camelCase and snake_case, so records accept both spellings and expose
snake_case attributes.

Forms validate what the dashboard user submits before anything reaches the
backend (required fields, numeric ranges, password confirmation) and know
how to serialize themselves into the backend's wire format via
``to_payload()``.

Version: 1.0.0
"""

import re
from datetime import date, datetime
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    HttpUrl,
    field_validator,
    model_validator,
)

T = TypeVar("T")

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)(:[0-5]\d)?$")


def normalize_time(value: Optional[str]) -> Optional[str]:
    """Normalize ``HH:MM`` / ``HH:MM:SS`` to ``HH:MM``; raise on anything else."""
    if value is None or value == "":
        return value
    value = str(value).strip()
    match = TIME_PATTERN.match(value)
    if not match:
        raise ValueError("Time must be in HH:MM format")
    return f"{match.group(1)}:{match.group(2)}"


def _aliases(*names: str) -> AliasChoices:
    return AliasChoices(*names)


# =============================================================================
# ENUMS
# =============================================================================

class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"


class ReservationStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    NO_SHOW = "no_show"


class AuthorType(str, Enum):
    USER = "user"
    BOT = "bot"
    RESTAURANT = "restaurant"


class ChatType(str, Enum):
    MENU = "menu"
    RESERVATION = "reservation"


class ExtensionRequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"


class SupportTicketStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


# =============================================================================
# BASE CLASSES
# =============================================================================

class Record(BaseModel):
    """Base for records read from the backend."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Form(BaseModel):
    """Base for user-submitted forms sent to the backend."""
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    def to_payload(self) -> dict[str, Any]:
        """Serialize into the backend's wire format."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


# =============================================================================
# ENVELOPE
# =============================================================================

class PageMeta(Record):
    total_count: Optional[int] = Field(None, validation_alias=_aliases("totalCount", "total_count"))
    page: Optional[int] = None
    page_size: Optional[int] = Field(None, validation_alias=_aliases("pageSize", "page_size"))


class ApiResponse(Record):
    """Uniform backend envelope ``{code, messages, data, meta}``."""
    code: int = 200
    messages: list[str] = Field(default_factory=list)
    data: Any = None
    meta: Optional[PageMeta] = None


class Page(BaseModel, Generic[T]):
    """One page of a paginated listing."""
    items: list[T] = Field(default_factory=list)
    total_count: int = 0
    page: int = 1
    page_size: int = 20

    @property
    def total_pages(self) -> int:
        if self.page_size <= 0:
            return 0
        return (self.total_count + self.page_size - 1) // self.page_size


# =============================================================================
# USERS / ORGANIZATIONS
# =============================================================================

class User(Record):
    id: int
    created_at: Optional[str] = Field(None, validation_alias=_aliases("created_at", "createdAt"))
    email: str
    name: str = ""
    company: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[UserRole] = None
    is_active: Optional[bool] = Field(None, validation_alias=_aliases("isActive", "is_active"))

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class UserInOrg(Record):
    id: int
    name: str = ""
    email: str = ""
    phone: Optional[str] = None


class Language(Record):
    id: int
    created_at: Optional[str] = Field(None, validation_alias=_aliases("createdAt", "created_at"))
    code: str
    name: str
    description: Optional[str] = None


class OrganizationRef(Record):
    id: int
    name: str = ""
    phone: Optional[str] = None


class Organization(Record):
    id: int
    created_at: Optional[str] = Field(None, validation_alias=_aliases("created_at", "createdAt"))
    name: str
    phone: Optional[str] = None
    admin_id: Optional[int] = None
    admin: Optional[UserInOrg] = None
    users: list[UserInOrg] = Field(default_factory=list)
    languages: list[Language] = Field(default_factory=list)


class AuthResult(Record):
    token: str
    type: str = "Bearer"
    expires_at: Optional[int] = None
    user: User
    organization: Optional[Organization] = None


class TokenCheck(Record):
    id: int
    email: str
    company_id: Optional[int] = None


# =============================================================================
# RESTAURANTS / TABLES
# =============================================================================

class WorkingHour(Record):
    id: Optional[int] = None
    day_of_week: int = Field(..., ge=0, le=6)
    open_time: str
    close_time: str

    @field_validator("open_time", "close_time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        return normalize_time(v)


class RestaurantRef(Record):
    id: int
    name: str = ""
    currency: Optional[str] = None


class Restaurant(Record):
    id: int
    created_at: Optional[str] = Field(None, validation_alias=_aliases("created_at", "createdAt"))
    organization: Optional[OrganizationRef] = None
    name: str
    address: str = ""
    phone: str = ""
    website: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    currency: Optional[str] = None
    reservation_duration: Optional[int] = None
    working_hours: list[WorkingHour] = Field(default_factory=list)

    def hours_for_day(self, day_of_week: int) -> Optional[WorkingHour]:
        for hour in self.working_hours:
            if hour.day_of_week == day_of_week:
                return hour
        return None


class TableRef(Record):
    id: int
    name: str = ""


class Table(Record):
    id: int
    created_at: Optional[str] = Field(None, validation_alias=_aliases("createdAt", "created_at"))
    restaurant: Optional[RestaurantRef] = None
    name: str
    guest_count: int = Field(0, validation_alias=_aliases("guestCount", "guest_count", "capacity"))


# =============================================================================
# MENU
# =============================================================================

class MenuCategory(Record):
    id: int
    created_at: Optional[str] = Field(None, validation_alias=_aliases("created_at", "createdAt"))
    restaurant_id: Optional[int] = Field(None, validation_alias=_aliases("restaurant_id", "restaurantId"))
    name: str
    sort_order: int = Field(0, validation_alias=_aliases("sort_order", "sortOrder"))


class CategoryRef(Record):
    id: int
    name: str = ""


class Ingredient(Record):
    id: Optional[int] = None
    name: str
    quantity: float = 0


class Allergen(Record):
    id: Optional[int] = None
    name: str
    description: Optional[str] = None


class Dish(Record):
    id: int
    created_at: Optional[str] = Field(None, validation_alias=_aliases("created_at", "createdAt"))
    restaurant: Optional[RestaurantRef] = None
    menu_category: Optional[CategoryRef] = Field(
        None, validation_alias=_aliases("menuCategory", "menu_category")
    )
    name: str
    price: float = 0
    description: Optional[str] = None
    image: Optional[str] = None
    proteins: float = 0
    fats: float = 0
    carbohydrates: float = 0
    calories: float = 0
    ingredients: list[Ingredient] = Field(default_factory=list)
    allergens: list[Allergen] = Field(default_factory=list)

    @property
    def has_nutrition(self) -> bool:
        return any(v > 0 for v in (self.calories, self.proteins, self.fats, self.carbohydrates))


class DishGroup(Record):
    category: CategoryRef
    dishes: list[Dish] = Field(default_factory=list)


# =============================================================================
# RESERVATIONS
# =============================================================================

class Reservation(Record):
    """
    A table reservation.

    The backend has emitted two spellings over time (``reservation_date`` /
    ``date``, ``start_time`` / ``time``, ``customer_*`` / ``guest_*``, flat
    ``table_id`` / nested ``table``); both are accepted.
    """
    id: int
    restaurant_id: Optional[int] = None
    restaurant_name: Optional[str] = None
    table_id: Optional[int] = None
    table_name: Optional[str] = None
    customer_name: str = Field("", validation_alias=_aliases("customer_name", "guest_name"))
    customer_phone: str = Field("", validation_alias=_aliases("customer_phone", "guest_phone"))
    customer_email: Optional[str] = Field(None, validation_alias=_aliases("customer_email", "guest_email"))
    guest_count: int = Field(0, validation_alias=_aliases("guest_count", "guestCount", "guests"))
    reservation_date: date = Field(..., validation_alias=_aliases("reservation_date", "date"))
    start_time: str = Field(..., validation_alias=_aliases("start_time", "time"))
    end_time: Optional[str] = None
    status: ReservationStatus = ReservationStatus.PENDING
    notes: Optional[str] = None
    created_at: Optional[str] = Field(None, validation_alias=_aliases("created_at", "createdAt"))

    @model_validator(mode="before")
    @classmethod
    def flatten_table(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("table"), dict):
            table = data["table"]
            data = dict(data)
            data.setdefault("table_id", table.get("id"))
            data.setdefault("table_name", table.get("name"))
        return data

    @field_validator("reservation_date", mode="before")
    @classmethod
    def truncate_datetime(cls, v: Any) -> Any:
        if isinstance(v, str) and len(v) > 10:
            return v[:10]
        if isinstance(v, datetime):
            return v.date()
        return v

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def validate_time(cls, v: Any) -> Any:
        if v is None or v == "":
            return None if v == "" else v
        return normalize_time(str(v)[:8])


class AvailableSlot(Record):
    table_id: int
    table_name: str = ""
    capacity: int = 0
    start_time: str
    end_time: str

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        return normalize_time(v)


class Availability(Record):
    restaurant_id: int
    restaurant_name: str = ""
    date: str
    slots: list[AvailableSlot] = Field(default_factory=list)


# =============================================================================
# CHAT
# =============================================================================

class ChatMessage(Record):
    id: int
    content: str
    sent_at: Optional[datetime] = Field(None, validation_alias=_aliases("sentAt", "sent_at"))
    author_type: AuthorType = Field(..., validation_alias=_aliases("authorType", "author_type"))


class ChatSession(Record):
    id: int
    active: bool = True
    last_active: Optional[datetime] = Field(None, validation_alias=_aliases("lastActive", "last_active"))
    table: Optional[TableRef] = None
    messages: list[ChatMessage] = Field(default_factory=list)

    @property
    def is_table_session(self) -> bool:
        return self.table is not None


# =============================================================================
# QUESTIONS
# =============================================================================

class Question(Record):
    id: int
    created_at: Optional[str] = Field(None, validation_alias=_aliases("created_at", "createdAt"))
    text: str
    language: Optional[Language] = None
    chat_type: ChatType = Field(ChatType.MENU, validation_alias=_aliases("chat_type", "chatType"))
    display_order: int = Field(0, validation_alias=_aliases("display_order", "displayOrder"))


# =============================================================================
# SUBSCRIPTIONS
# =============================================================================

class Subscription(Record):
    id: int
    created_at: Optional[str] = Field(None, validation_alias=_aliases("createdAt", "created_at"))
    organization: Optional[OrganizationRef] = None
    period: int = 0
    start_date: Optional[date] = Field(None, validation_alias=_aliases("startDate", "start_date"))
    end_date: Optional[date] = Field(None, validation_alias=_aliases("endDate", "end_date"))
    is_active: bool = Field(False, validation_alias=_aliases("isActive", "is_active"))
    days_left: int = Field(0, validation_alias=_aliases("daysLeft", "days_left"))

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def truncate_datetime(cls, v: Any) -> Any:
        if isinstance(v, str) and len(v) > 10:
            return v[:10]
        return v


class ExtensionRequestUser(Record):
    id: int
    name: str = ""
    email: str = ""


class ExtensionRequest(Record):
    id: int
    created_at: Optional[str] = Field(None, validation_alias=_aliases("createdAt", "created_at"))
    organization: Optional[OrganizationRef] = None
    user: Optional[ExtensionRequestUser] = None
    name: str = ""
    phone: str = ""
    email: str = ""
    period: Optional[int] = None
    comment: Optional[str] = None
    status: ExtensionRequestStatus = ExtensionRequestStatus.PENDING
    admin_comment: Optional[str] = Field(None, validation_alias=_aliases("adminComment", "admin_comment"))


# =============================================================================
# ADMIN / SUPPORT
# =============================================================================

class AdminActivity(Record):
    id: int
    action: str
    entity_type: str = Field("", validation_alias=_aliases("entityType", "entity_type"))
    entity_id: Optional[int] = Field(None, validation_alias=_aliases("entityId", "entity_id"))
    admin_name: str = Field("", validation_alias=_aliases("adminName", "admin_name"))
    created_at: Optional[str] = Field(None, validation_alias=_aliases("createdAt", "created_at"))


class AdminStats(Record):
    total_users: int = Field(0, validation_alias=_aliases("totalUsers", "total_users"))
    active_users: int = Field(0, validation_alias=_aliases("activeUsers", "active_users"))
    total_organizations: int = Field(0, validation_alias=_aliases("totalOrganizations", "total_organizations"))
    total_restaurants: int = Field(0, validation_alias=_aliases("totalRestaurants", "total_restaurants"))
    total_dishes: int = Field(0, validation_alias=_aliases("totalDishes", "total_dishes"))
    total_tables: int = Field(0, validation_alias=_aliases("totalTables", "total_tables"))
    total_questions: int = Field(0, validation_alias=_aliases("totalQuestions", "total_questions"))
    active_subscriptions: int = Field(0, validation_alias=_aliases("activeSubscriptions", "active_subscriptions"))
    recent_activity: list[AdminActivity] = Field(
        default_factory=list, validation_alias=_aliases("recentActivity", "recent_activity")
    )


class AdminLog(Record):
    id: int
    admin_id: Optional[int] = Field(None, validation_alias=_aliases("adminId", "admin_id"))
    admin_name: str = Field("", validation_alias=_aliases("adminName", "admin_name"))
    admin_email: str = Field("", validation_alias=_aliases("adminEmail", "admin_email"))
    action: str
    entity_type: str = Field("", validation_alias=_aliases("entityType", "entity_type"))
    entity_id: Optional[int] = Field(None, validation_alias=_aliases("entityId", "entity_id"))
    details: Optional[str] = None
    ip_address: str = Field("", validation_alias=_aliases("ipAddress", "ip_address"))
    created_at: Optional[str] = Field(None, validation_alias=_aliases("createdAt", "created_at"))


class SupportTicket(Record):
    id: int
    user_id: Optional[int] = None
    user_name: str = ""
    user_email: str = ""
    title: str
    description: str = ""
    email: str = ""
    phone: Optional[str] = None
    status: SupportTicketStatus = SupportTicketStatus.IN_PROGRESS
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


# =============================================================================
# AUTH FORMS
# =============================================================================

class LoginForm(Form):
    email: EmailStr
    password: str = Field(..., min_length=8)


class RegisterForm(Form):
    company: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    email: EmailStr
    phone: Optional[str] = None
    password: str = Field(..., min_length=8)
    confirm_password: str = Field(..., alias="confirmPassword", exclude=True)
    terms: bool = Field(True, exclude=True)

    @model_validator(mode="after")
    def check_confirmation(self) -> "RegisterForm":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        if not self.terms:
            raise ValueError("You must accept the terms")
        return self


class PasswordResetRequestForm(Form):
    email: EmailStr


class PasswordResetForm(Form):
    email: EmailStr
    code: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, alias="newPassword")
    confirm_password: str = Field(..., alias="confirmPassword", exclude=True)

    @model_validator(mode="after")
    def check_confirmation(self) -> "PasswordResetForm":
        if self.new_password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class ChangePasswordForm(Form):
    old_password: str = Field(..., min_length=8, alias="oldPassword")
    new_password: str = Field(..., min_length=8, alias="newPassword")
    confirm_password: str = Field(..., alias="confirmPassword", exclude=True)

    @model_validator(mode="after")
    def check_confirmation(self) -> "ChangePasswordForm":
        if self.new_password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


# =============================================================================
# SETTINGS / TEAM FORMS
# =============================================================================

class ProfileForm(Form):
    name: str = Field(..., min_length=1)
    email: EmailStr
    phone: Optional[str] = None


class OrganizationForm(Form):
    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)


class TeamMemberForm(Form):
    """New staff account; the backend user is created then added to the organization."""
    name: str = Field(..., min_length=1)
    email: EmailStr
    phone: Optional[str] = None
    password: str = Field(..., min_length=8)
    company: Optional[str] = None


class LanguageForm(Form):
    code: str = Field(..., min_length=2, max_length=10)
    name: str = Field(..., min_length=1)
    description: Optional[str] = None


class SupportTicketForm(Form):
    title: str = Field(..., min_length=5, max_length=100)
    description: str = Field(..., min_length=20)
    email: EmailStr
    phone: Optional[str] = None


class ExtensionRequestForm(Form):
    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    email: EmailStr
    period: Optional[int] = Field(None, ge=1)
    comment: Optional[str] = None


class SubscriptionForm(Form):
    organization_id: int = Field(..., alias="organizationId")
    period: int = Field(..., ge=1)
    start_date: date = Field(..., alias="startDate")
    is_active: Optional[bool] = Field(None, alias="isActive")


# =============================================================================
# RESTAURANT / TABLE FORMS
# =============================================================================

class WorkingHourForm(Form):
    day_of_week: int = Field(..., ge=0, le=6)
    open_time: str = "09:00"
    close_time: str = "22:00"
    is_closed: bool = Field(False, exclude=True)

    @field_validator("open_time", "close_time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        return normalize_time(v)


def default_working_hours() -> list[WorkingHourForm]:
    """09:00-22:00 every day, Sunday (0) closed."""
    return [
        WorkingHourForm(day_of_week=day, is_closed=(day == 0))
        for day in range(7)
    ]


class RestaurantForm(Form):
    organization_id: Optional[int] = None
    name: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    website: Optional[HttpUrl] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    currency: Optional[str] = None
    reservation_duration: Optional[int] = Field(None, ge=15)
    working_hours: list[WorkingHourForm] = Field(default_factory=default_working_hours)

    @field_validator("website", mode="before")
    @classmethod
    def empty_website(cls, v: Any) -> Any:
        if v == "":
            return None
        return v

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["working_hours"] = [
            hour.to_payload() for hour in self.working_hours if not hour.is_closed
        ]
        return payload


class TableForm(Form):
    name: str = Field(..., min_length=1)
    guest_count: int = Field(2, ge=1, alias="guestCount")
    restaurant_id: Optional[int] = Field(None, alias="restaurantId")


# =============================================================================
# MENU FORMS
# =============================================================================

class CategoryForm(Form):
    name: str = Field(..., min_length=1)
    restaurant_id: Optional[int] = None
    sort_order: Optional[int] = Field(None, ge=0)


class CategoryOrderItem(Form):
    id: int
    sort_order: int


class CategorySortOrderForm(Form):
    categories: list[CategoryOrderItem]


class IngredientForm(Form):
    name: str = Field(..., min_length=1)
    quantity: float = Field(..., ge=0)


class AllergenForm(Form):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None


class DishForm(Form):
    restaurant_id: Optional[int] = None
    menu_category_id: int = Field(..., alias="menuCategoryId")
    name: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    description: Optional[str] = None
    image: Optional[str] = None
    calories: Optional[float] = Field(None, ge=0, le=9999)
    proteins: Optional[float] = Field(None, ge=0, le=999)
    fats: Optional[float] = Field(None, ge=0, le=999)
    carbohydrates: Optional[float] = Field(None, ge=0, le=999)
    ingredients: list[IngredientForm] = Field(..., min_length=1)
    allergens: list[AllergenForm] = Field(default_factory=list)


# =============================================================================
# RESERVATION / CHAT / QUESTION FORMS
# =============================================================================

class ReservationForm(Form):
    restaurant_id: Optional[int] = None
    table_id: int
    customer_name: str = Field(..., min_length=1)
    customer_phone: str = Field(..., min_length=1)
    customer_email: Optional[EmailStr] = None
    guest_count: int = Field(2, ge=1)
    reservation_date: date
    start_time: str
    notes: Optional[str] = None

    @field_validator("customer_email", mode="before")
    @classmethod
    def empty_email(cls, v: Any) -> Any:
        if v == "":
            return None
        return v

    @field_validator("start_time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        return normalize_time(v)


class ReservationUpdateForm(Form):
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_email: Optional[str] = None
    guest_count: Optional[int] = Field(None, ge=1)
    reservation_date: Optional[date] = None
    start_time: Optional[str] = None
    table_id: Optional[int] = None
    notes: Optional[str] = None

    @field_validator("start_time")
    @classmethod
    def validate_time(cls, v: Optional[str]) -> Optional[str]:
        return normalize_time(v)


class MessageForm(Form):
    content: str = Field(..., min_length=1, max_length=4000)


class QuestionForm(Form):
    text: str = Field(..., min_length=1)
    language_code: Optional[str] = Field(None, alias="languageCode")
    chat_type: ChatType = Field(ChatType.MENU, alias="chatType")
    display_order: Optional[int] = Field(None, ge=0, alias="displayOrder")


class QuestionUpdateForm(Form):
    text: Optional[str] = Field(None, min_length=1)
    language_code: Optional[str] = Field(None, alias="languageCode")
    chat_type: Optional[ChatType] = Field(None, alias="chatType")
    display_order: Optional[int] = Field(None, ge=0, alias="displayOrder")


class ReorderForm(Form):
    """New order of items after a drag-and-drop move."""
    from_index: int = Field(..., ge=0)
    to_index: int = Field(..., ge=0)


# =============================================================================
# DASHBOARD RESPONSES
# =============================================================================

class ToastResponse(BaseModel):
    """Outcome of a mutation, rendered by the browser as a toast."""
    success: bool = True
    message: str = ""
    data: Any = None


class HealthResponse(BaseModel):
    status: str
    backend: str
    cache: str
    environment: str
    timestamp: datetime
