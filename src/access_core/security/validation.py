"""
access_core.security.validation

Structural validation and sanitization of inbound JSON payloads.

Responsibilities:
- Reject bodies that claim to be JSON but do not parse.
- Validate known routes (login, registration) against whitelisted schemas.
- Escape HTML in string fields so stored content cannot carry markup.
"""

from __future__ import annotations

import html
import json
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, EmailStr, Field, ValidationError

SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})

# Deeper bodies are rejected before any recursive walk (schema or sanitizer).
MAX_JSON_DEPTH = 32


class LoginPayload(BaseModel):
    identifier: str = Field(min_length=3, max_length=50)
    password: str = Field(min_length=6)


class RegistrationPayload(BaseModel):
    username: str = Field(min_length=3, max_length=20, pattern=r"^[a-zA-Z0-9_]+$")
    email: EmailStr
    password: str = Field(min_length=8)
    firstname: str = Field(min_length=2, max_length=50)
    lastname: str = Field(min_length=2, max_length=50)


# Checked in order; the more specific path must come first.
ROUTE_SCHEMAS: tuple[tuple[str, type[BaseModel]], ...] = (
    ("/auth/local/register", RegistrationPayload),
    ("/auth/local", LoginPayload),
)


@dataclass(frozen=True, slots=True)
class ValidationResult:
    ok: bool
    message: str = ""
    payload: Any = None


def sanitize(value: Any) -> Any:
    if isinstance(value, dict):
        out: dict[str, Any] = {}
        for key, item in value.items():
            # Passwords are hashed, never rendered; escaping would corrupt them.
            if "password" in str(key).lower():
                out[key] = item
            else:
                out[key] = sanitize(item)
        return out
    if isinstance(value, list):
        return [sanitize(item) for item in value]
    if isinstance(value, str):
        return html.escape(value.strip())
    return value


def exceeds_depth(value: Any, limit: int = MAX_JSON_DEPTH) -> bool:
    stack: list[tuple[Any, int]] = [(value, 1)]
    while stack:
        item, depth = stack.pop()
        if isinstance(item, dict):
            children: Iterable[Any] = item.values()
        elif isinstance(item, list):
            children = item
        else:
            continue
        if depth > limit:
            return True
        stack.extend((child, depth + 1) for child in children)
    return False


def _format_errors(err: ValidationError) -> str:
    return ", ".join(
        f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in err.errors()
    )


class RequestValidator:
    def __init__(self, route_schemas: tuple[tuple[str, type[BaseModel]], ...] = ROUTE_SCHEMAS) -> None:
        self._route_schemas = route_schemas

    def schema_for(self, path: str) -> type[BaseModel] | None:
        for fragment, schema in self._route_schemas:
            if fragment in path:
                return schema
        return None

    async def validate(
        self,
        *,
        method: str,
        path: str,
        content_type: str | None,
        body: bytes,
    ) -> ValidationResult:
        if method.upper() in SAFE_METHODS or not body:
            return ValidationResult(ok=True)
        # Multipart uploads and other non-JSON bodies are left to their handlers.
        if not content_type or "json" not in content_type.lower():
            return ValidationResult(ok=True)

        try:
            data = json.loads(body)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            return ValidationResult(ok=False, message=f"Invalid data: malformed JSON ({e})")
        except RecursionError:
            return ValidationResult(ok=False, message="Invalid data: JSON nested too deeply")

        if exceeds_depth(data):
            return ValidationResult(ok=False, message="Invalid data: JSON nested too deeply")

        schema = self.schema_for(path)
        if schema is not None:
            if not isinstance(data, dict):
                return ValidationResult(ok=False, message="Invalid data: expected a JSON object")
            try:
                schema.model_validate(data)
            except ValidationError as e:
                return ValidationResult(ok=False, message=f"Invalid data: {_format_errors(e)}")

        return ValidationResult(ok=True, payload=sanitize(data))
