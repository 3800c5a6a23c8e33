"""
Name: Cookie Sessions

Responsibilities:
  - Issue a fresh opaque token on every login (no session fixation)
  - Wrap the token in a signed JWT cookie and reject tampered or expired ones
  - Resolve a request's cookie to the stored employee id
  - Destroy sessions on logout or when the employee no longer exists

Collaborators:
  - infrastructure.session_store: token -> employee id with TTL
  - auth.py: login/logout and the per-request session dependency

Notes:
  - Cookie value: HS256 JWT {"sid": <token>, "iat", "exp"}
  - The cookie holds no employee data; the store is authoritative
"""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

import jwt
from fastapi import Request, Response

from .infrastructure.session_store import SessionStore

JWT_ALGORITHM = "HS256"


class SessionManager:
    """
    R: Glue between the signed cookie and the session store.

    Attributes:
        store: Backend holding token -> employee id
        cookie_name: Name of the session cookie
        ttl_seconds: Store TTL, cookie Max-Age and JWT lifetime
        secure: Set the Secure cookie flag (production)
    """

    def __init__(
        self,
        store: SessionStore,
        secret: str,
        cookie_name: str = "sid",
        ttl_seconds: int = 24 * 60 * 60,
        secure: bool = False,
    ):
        self.store = store
        self._secret = secret
        self.cookie_name = cookie_name
        self.ttl_seconds = ttl_seconds
        self.secure = secure

    def sign(self, token: str) -> str:
        """R: Encode the session token as a signed, expiring JWT."""
        now = datetime.now(timezone.utc)
        payload = {
            "sid": token,
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(seconds=self.ttl_seconds)).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=JWT_ALGORITHM)

    def unsign(self, value: str) -> Optional[str]:
        """R: Token from a cookie value, None if tampered, expired or malformed."""
        try:
            payload = jwt.decode(
                value,
                self._secret,
                algorithms=[JWT_ALGORITHM],
                options={"require": ["sid", "exp"]},
            )
        except jwt.InvalidTokenError:
            return None
        token = payload.get("sid")
        if not isinstance(token, str) or not token:
            return None
        return token

    def load(self, request: Request) -> Optional[Tuple[str, int]]:
        """R: (token, employee_id) for the request's session, if any."""
        raw = request.cookies.get(self.cookie_name)
        if not raw:
            return None
        token = self.unsign(raw)
        if token is None:
            return None
        employee_id = self.store.get(token)
        if employee_id is None:
            return None
        return token, employee_id

    def start(self, request: Request, response: Response, employee_id: int) -> str:
        """R: Replace any existing session with a new token for employee_id."""
        previous = self.load(request)
        if previous is not None:
            self.store.delete(previous[0])

        token = secrets.token_urlsafe(32)
        self.store.set(token, employee_id, self.ttl_seconds)
        response.set_cookie(
            key=self.cookie_name,
            value=self.sign(token),
            max_age=self.ttl_seconds,
            httponly=True,
            secure=self.secure,
            samesite="lax",
            path="/",
        )
        return token

    def destroy(self, token: str) -> None:
        self.store.delete(token)

    def end(self, request: Request, response: Response) -> bool:
        """R: Destroy the request's session and clear the cookie."""
        current = self.load(request)
        if current is not None:
            self.destroy(current[0])
        response.delete_cookie(
            key=self.cookie_name,
            path="/",
            httponly=True,
            secure=self.secure,
            samesite="lax",
        )
        return current is not None
