"""FastAPI application that exposes the registration and login endpoints."""
from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, field_validator

from .auth import (
    AuthError,
    AuthService,
    DuplicateEmail,
    InvalidCredentials,
    MissingCredentials,
    ValidationFailed,
)
from .config import DEFAULT_SERVICE_NAME
from .store import JSONRecordStore, RecordStore, StorageUnavailable, resolve_store_path

logger = logging.getLogger("dcnexus.api")

INTERNAL_ERROR_MESSAGE = "Error interno del servidor."
REGISTER_SUCCESS_MESSAGE = "Registro exitoso."
LOGIN_SUCCESS_MESSAGE = "Inicio de sesión exitoso."

_ERROR_STATUS = {
    ValidationFailed: status.HTTP_400_BAD_REQUEST,
    DuplicateEmail: status.HTTP_409_CONFLICT,
    MissingCredentials: status.HTTP_400_BAD_REQUEST,
    InvalidCredentials: status.HTTP_401_UNAUTHORIZED,
}


class _AsciiJSONResponse(JSONResponse):
    """JSON response with non-ASCII escaped, so lone surrogates still encode."""

    def render(self, content: Any) -> bytes:
        return json.dumps(content, allow_nan=False, separators=(",", ":")).encode("utf-8")


def _as_optional_text(value: object) -> Optional[str]:
    return value if isinstance(value, str) else None


class RegisterRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    fullName: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None

    @field_validator("fullName", "email", "password", mode="before")
    @classmethod
    def _discard_non_strings(cls, value: object) -> Optional[str]:
        return _as_optional_text(value)


class LoginRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email: Optional[str] = None
    password: Optional[str] = None

    @field_validator("email", "password", mode="before")
    @classmethod
    def _discard_non_strings(cls, value: object) -> Optional[str]:
        return _as_optional_text(value)


class UserView(BaseModel):
    id: int
    fullName: str
    email: str


class AuthResponse(BaseModel):
    ok: bool = True
    message: str
    user: UserView


async def _read_json_object(request: Request) -> Dict[str, Any]:
    """Return the request body as a dict, or an empty dict when it is not one."""
    try:
        payload = await request.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


def _error_response(status_code: int, message: str) -> JSONResponse:
    return _AsciiJSONResponse(status_code=status_code, content={"ok": False, "message": message})


def _auth_error_response(exc: AuthError) -> JSONResponse:
    status_code = _ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
    return _error_response(status_code, exc.message)


def _internal_error_response() -> JSONResponse:
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)


def create_app(
    *,
    store: RecordStore | None = None,
    service_name: str | None = None,
) -> FastAPI:
    if store is None:
        store = JSONRecordStore(resolve_store_path(os.getenv("DCNEXUS_USERS_PATH")))

    if service_name is None:
        service_name = DEFAULT_SERVICE_NAME

    auth_service = AuthService(store)

    app = FastAPI(
        title=f"{service_name} API",
        description="User registration and login backed by a flat JSON file",
        version="1.0.0",
    )
    app.state.store = store
    app.state.auth = auth_service

    @app.get("/health")
    async def healthcheck() -> Dict[str, object]:
        return {
            "ok": True,
            "service": service_name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.post("/api/register", name="register")
    async def register(request: Request) -> JSONResponse:
        payload = RegisterRequest.model_validate(await _read_json_object(request))
        try:
            user = auth_service.register(payload.fullName, payload.email, payload.password)
        except AuthError as exc:
            return _auth_error_response(exc)
        except StorageUnavailable:
            logger.exception("Registration failed: users file unavailable")
            return _internal_error_response()
        except Exception:
            logger.exception("Unexpected error while registering a user")
            return _internal_error_response()

        body = AuthResponse(message=REGISTER_SUCCESS_MESSAGE, user=UserView(**user))
        return _AsciiJSONResponse(status_code=status.HTTP_201_CREATED, content=body.model_dump())

    @app.post("/api/login", name="login")
    async def login(request: Request) -> JSONResponse:
        payload = LoginRequest.model_validate(await _read_json_object(request))
        try:
            user = auth_service.login(payload.email, payload.password)
        except AuthError as exc:
            return _auth_error_response(exc)
        except StorageUnavailable:
            logger.exception("Login failed: users file unavailable")
            return _internal_error_response()
        except Exception:
            logger.exception("Unexpected error while signing a user in")
            return _internal_error_response()

        body = AuthResponse(message=LOGIN_SUCCESS_MESSAGE, user=UserView(**user))
        return _AsciiJSONResponse(status_code=status.HTTP_200_OK, content=body.model_dump())

    return app


__all__ = ["AuthResponse", "LoginRequest", "RegisterRequest", "UserView", "create_app"]
