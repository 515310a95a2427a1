"""
Auth routes: thin proxies over Supabase Auth.

- POST /auth/sign-in: email + password -> Supabase session (access/refresh token).
- POST /auth/sign-out: revoke the caller's session.
- PUT /auth/credentials: change the caller's login email and/or password.
"""
from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials
from pydantic import BaseModel, Field, model_validator
from typing import Optional

from rentflow.core.auth import User, get_current_user, security, sign_in, sign_out, update_credentials

router = APIRouter(prefix="/auth", tags=["auth"])


class SignInRequest(BaseModel):
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)


class CredentialsUpdate(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = Field(None, min_length=6)

    @model_validator(mode="after")
    def something_to_change(self):
        if not self.email and not self.password:
            raise ValueError("email or password is required")
        return self


@router.post("/sign-in")
def sign_in_route(payload: SignInRequest):
    return sign_in(payload.email, payload.password)


@router.post("/sign-out", status_code=204)
def sign_out_route(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    current_user: User = Depends(get_current_user),
):
    sign_out(credentials.credentials)


@router.put("/credentials")
def update_credentials_route(
    payload: CredentialsUpdate,
    current_user: User = Depends(get_current_user),
):
    user = update_credentials(current_user.id, email=payload.email, password=payload.password)
    return {"id": user.get("id", current_user.id), "email": user.get("email", current_user.email)}
