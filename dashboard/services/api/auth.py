"""
Auth and user endpoints.
"""

from typing import Any

from dashboard.schemas import (
    AuthResult,
    ChangePasswordForm,
    LoginForm,
    PasswordResetForm,
    RegisterForm,
    TokenCheck,
    User,
)
from dashboard.services.api.client import Resource, unwrap_one


class AuthApi(Resource):

    async def login(self, form: LoginForm) -> AuthResult:
        data = await self.client.post("/auth/login", json=form.to_payload())
        return AuthResult.model_validate(data)

    async def register(self, form: RegisterForm) -> AuthResult:
        data = await self.client.post("/auth/register", json=form.to_payload())
        return AuthResult.model_validate(data)

    async def change_password(self, form: ChangePasswordForm) -> None:
        await self.client.post(
            "/auth/change-password",
            json={"oldPassword": form.old_password, "newPassword": form.new_password},
        )

    async def request_password_reset(self, email: str) -> None:
        await self.client.post("/auth/request-password-reset", json={"email": email})

    async def verify_password_reset(self, form: PasswordResetForm) -> None:
        await self.client.post(
            "/auth/verify-password-reset",
            json={"email": form.email, "code": form.code, "newPassword": form.new_password},
        )

    async def check_token(self) -> TokenCheck:
        # The backend route is spelled "chek".
        data = await self.client.get("/auth/chek")
        return TokenCheck.model_validate(data)


class UsersApi(Resource):

    async def get(self, user_id: int) -> User:
        return unwrap_one(await self.client.get(f"/user/{user_id}"), User, "user")

    async def update(self, user_id: int, changes: dict[str, Any]) -> User:
        return unwrap_one(await self.client.patch(f"/user/{user_id}", json=changes), User, "user")

    async def create(self, payload: dict[str, Any]) -> User:
        return unwrap_one(await self.client.post("/user", json=payload), User, "user")
