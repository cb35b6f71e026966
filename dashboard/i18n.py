"""
Dashboard Translations

Russian (default) and English strings used in toasts, labels and the
server-rendered pages. Lookups fall back to Russian, then to the key itself.
"""

from typing import Any, Optional

SUPPORTED_LANGUAGES = ("ru", "en")
DEFAULT_LANGUAGE = "ru"

TRANSLATIONS: dict[str, dict[str, Any]] = {
    "ru": {
        "app.title": "Панель ресторана",
        "nav.dashboard": "Дашборд",
        "nav.reservations": "Бронирования",
        "nav.calendar": "Календарь",
        "nav.chats": "Чаты",
        "nav.menu": "Меню",
        "nav.tables": "Столы",
        "nav.settings": "Настройки",
        "auth.login": "Войти",
        "auth.logout": "Выйти",
        "auth.email": "Email",
        "auth.password": "Пароль",
        "auth.login_success": "Вы вошли в систему",
        "auth.login_failed": "Неверный email или пароль",
        "auth.register_success": "Регистрация прошла успешно",
        "auth.register_failed": "Ошибка регистрации",
        "auth.reset_sent": "Код для сброса пароля отправлен на почту",
        "auth.reset_success": "Пароль успешно изменён",
        "auth.password_changed": "Пароль изменён",
        "auth.session_expired": "Сессия истекла, войдите снова",
        "restaurant.required": "Сначала выберите ресторан",
        "restaurant.created": "Ресторан создан",
        "restaurant.updated": "Ресторан обновлён",
        "restaurant.deleted": "Ресторан удалён",
        "restaurant.hours_updated": "Часы работы обновлены",
        "table.created": "Стол создан",
        "table.updated": "Стол обновлён",
        "table.deleted": "Стол удалён",
        "category.created": "Категория создана",
        "category.updated": "Категория обновлена",
        "category.deleted": "Категория удалена",
        "category.reordered": "Порядок категорий сохранён",
        "dish.created": "Блюдо создано",
        "dish.updated": "Блюдо обновлено",
        "dish.deleted": "Блюдо удалено",
        "dish.of_day_set": "Блюдо дня установлено",
        "reservation.created": "Бронирование создано",
        "reservation.updated": "Бронирование обновлено",
        "reservation.cancelled": "Бронирование отменено",
        "reservation.deleted": "Бронирование удалено",
        "reservation.status_changed": "Статус бронирования изменён",
        "reservation.exported": "Экспорт бронирований выполнен",
        "reservation.export_cleared": "Файл экспорта удалён",
        "chat.sent": "Сообщение отправлено",
        "chat.send_failed": "Ошибка отправки сообщения",
        "chat.closed": "Чат закрыт",
        "chat.close_failed": "Ошибка закрытия чата",
        "chat.returned_to_ai": "AI-бот снова отвечает на сообщения",
        "question.created": "Вопрос создан",
        "question.updated": "Вопрос обновлён",
        "question.deleted": "Вопрос удалён",
        "question.reordered": "Порядок вопросов сохранён",
        "image.uploaded": "Изображение загружено",
        "image.upload_failed": "Ошибка загрузки изображения",
        "profile.updated": "Профиль обновлён",
        "organization.updated": "Организация обновлена",
        "language.added": "Язык добавлен",
        "language.removed": "Язык удалён",
        "language.created": "Язык создан",
        "team.added": "Сотрудник добавлен",
        "team.removed": "Сотрудник удалён",
        "subscription.request_sent": "Заявка на продление отправлена",
        "subscription.fetch_failed": "Не удалось загрузить подписку",
        "support.created": "Обращение отправлено",
        "support.status_changed": "Статус обращения изменён",
        "admin.user_updated": "Пользователь обновлён",
        "admin.user_deleted": "Пользователь удалён",
        "admin.organization_deleted": "Организация удалена",
        "admin.dish_deleted": "Блюдо удалено",
        "admin.request_updated": "Заявка обновлена",
        "admin.subscription_saved": "Подписка сохранена",
        "error.generic": "Произошла ошибка",
        "error.validation": "Проверьте правильность заполнения полей",
        "status.pending": "Ожидает",
        "status.confirmed": "Подтверждено",
        "status.cancelled": "Отменено",
        "status.completed": "Завершено",
        "status.no_show": "Не пришёл",
        "table_status.free": "Свободен",
        "table_status.reserved": "Забронирован",
        "table_status.occupied": "Занят",
        "author.user": "Гость",
        "author.bot": "AI-бот",
        "author.restaurant": "Персонал",
        "author.system": "Система",
        "weekday.short": ["Вс", "Пн", "Вт", "Ср", "Чт", "Пт", "Сб"],
        "quick_replies": [
            {"text": "Сейчас подойдёт официант", "icon": "👨‍🍳"},
            {"text": "Ваш заказ готовится", "icon": "🍳"},
            {"text": "Столик забронирован, ждём вас!", "icon": "✅"},
            {"text": "Спасибо за обращение!", "icon": "🙏"},
            {"text": "Минутку, уточню информацию", "icon": "⏳"},
            {"text": "К сожалению, это невозможно", "icon": "😔"},
        ],
    },
    "en": {
        "app.title": "Restaurant Dashboard",
        "nav.dashboard": "Dashboard",
        "nav.reservations": "Reservations",
        "nav.calendar": "Calendar",
        "nav.chats": "Chats",
        "nav.menu": "Menu",
        "nav.tables": "Tables",
        "nav.settings": "Settings",
        "auth.login": "Sign in",
        "auth.logout": "Sign out",
        "auth.email": "Email",
        "auth.password": "Password",
        "auth.login_success": "Signed in",
        "auth.login_failed": "Invalid email or password",
        "auth.register_success": "Registration successful",
        "auth.register_failed": "Registration failed",
        "auth.reset_sent": "A reset code was sent to your email",
        "auth.reset_success": "Password was reset",
        "auth.password_changed": "Password changed",
        "auth.session_expired": "Session expired, please sign in again",
        "restaurant.required": "Select a restaurant first",
        "restaurant.created": "Restaurant created",
        "restaurant.updated": "Restaurant updated",
        "restaurant.deleted": "Restaurant deleted",
        "restaurant.hours_updated": "Working hours updated",
        "table.created": "Table created",
        "table.updated": "Table updated",
        "table.deleted": "Table deleted",
        "category.created": "Category created",
        "category.updated": "Category updated",
        "category.deleted": "Category deleted",
        "category.reordered": "Category order saved",
        "dish.created": "Dish created",
        "dish.updated": "Dish updated",
        "dish.deleted": "Dish deleted",
        "dish.of_day_set": "Dish of the day set",
        "reservation.created": "Reservation created",
        "reservation.updated": "Reservation updated",
        "reservation.cancelled": "Reservation cancelled",
        "reservation.deleted": "Reservation deleted",
        "reservation.status_changed": "Reservation status changed",
        "reservation.exported": "Reservations exported",
        "reservation.export_cleared": "Export file removed",
        "chat.sent": "Message sent",
        "chat.send_failed": "Failed to send message",
        "chat.closed": "Chat closed",
        "chat.close_failed": "Failed to close chat",
        "chat.returned_to_ai": "The AI bot answers messages again",
        "question.created": "Question created",
        "question.updated": "Question updated",
        "question.deleted": "Question deleted",
        "question.reordered": "Question order saved",
        "image.uploaded": "Image uploaded",
        "image.upload_failed": "Image upload failed",
        "profile.updated": "Profile updated",
        "organization.updated": "Organization updated",
        "language.added": "Language added",
        "language.removed": "Language removed",
        "language.created": "Language created",
        "team.added": "Team member added",
        "team.removed": "Team member removed",
        "subscription.request_sent": "Extension request sent",
        "subscription.fetch_failed": "Failed to fetch subscription",
        "support.created": "Support request sent",
        "support.status_changed": "Ticket status changed",
        "admin.user_updated": "User updated",
        "admin.user_deleted": "User deleted",
        "admin.organization_deleted": "Organization deleted",
        "admin.dish_deleted": "Dish deleted",
        "admin.request_updated": "Request updated",
        "admin.subscription_saved": "Subscription saved",
        "error.generic": "An error occurred",
        "error.validation": "Please check the highlighted fields",
        "status.pending": "Pending",
        "status.confirmed": "Confirmed",
        "status.cancelled": "Cancelled",
        "status.completed": "Completed",
        "status.no_show": "No show",
        "table_status.free": "Free",
        "table_status.reserved": "Reserved",
        "table_status.occupied": "Occupied",
        "author.user": "Guest",
        "author.bot": "AI bot",
        "author.restaurant": "Staff",
        "author.system": "System",
        "weekday.short": ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"],
        "quick_replies": [
            {"text": "A waiter is on the way", "icon": "👨‍🍳"},
            {"text": "Your order is being prepared", "icon": "🍳"},
            {"text": "Your table is booked, see you soon!", "icon": "✅"},
            {"text": "Thank you for reaching out!", "icon": "🙏"},
            {"text": "One moment, let me check", "icon": "⏳"},
            {"text": "Unfortunately, that is not possible", "icon": "😔"},
        ],
    },
}


def normalize_language(language: Optional[str]) -> str:
    if language and language.lower() in SUPPORTED_LANGUAGES:
        return language.lower()
    return DEFAULT_LANGUAGE


def translate(key: str, language: str = DEFAULT_LANGUAGE) -> Any:
    """Look up ``key`` in ``language``, falling back to Russian then the key."""
    table = TRANSLATIONS.get(normalize_language(language), {})
    if key in table:
        return table[key]
    return TRANSLATIONS[DEFAULT_LANGUAGE].get(key, key)


def quick_replies(language: str = DEFAULT_LANGUAGE) -> list[dict[str, str]]:
    return translate("quick_replies", language)


def author_label(author_type: str, language: str = DEFAULT_LANGUAGE) -> str:
    key = f"author.{author_type}"
    label = translate(key, language)
    return label if label != key else translate("author.system", language)
