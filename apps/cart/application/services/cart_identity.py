from __future__ import annotations

import re
import uuid
from dataclasses import dataclass

from django.conf import settings

from apps.cart.domain.errors import CartIdentityError

_SESSION_RE = re.compile(r"^[A-Za-z0-9_-]{8,64}$")


def session_cookie_name() -> str:
    return getattr(settings, "CART_SESSION_COOKIE", "cart_session")


@dataclass(frozen=True)
class CartIdentity:
    user: object | None = None
    session_id: str = ""
    issued: bool = False

    def __post_init__(self):
        if (self.user is None) == (not self.session_id):
            raise CartIdentityError()

    @property
    def is_guest(self) -> bool:
        return self.user is None

    def owner_filter(self) -> dict:
        if self.user is not None:
            return {"user": self.user}
        return {"user__isnull": True, "session_id": self.session_id}

    def owner_fields(self) -> dict:
        if self.user is not None:
            return {"user": self.user, "session_id": ""}
        return {"user": None, "session_id": self.session_id}


def resolve_cart_identity(request) -> CartIdentity:
    """Signed-in users own their cart; guests get the cookie session, minted on first use."""
    user = getattr(request, "user", None)
    if user is not None and user.is_authenticated:
        return CartIdentity(user=user)

    raw = (request.COOKIES.get(session_cookie_name()) or "").strip()
    if raw and _SESSION_RE.match(raw):
        return CartIdentity(session_id=raw)
    return CartIdentity(session_id=uuid.uuid4().hex, issued=True)


def attach_session_cookie(response, identity: CartIdentity):
    if identity.issued:
        response.set_cookie(
            session_cookie_name(),
            identity.session_id,
            max_age=getattr(settings, "CART_SESSION_MAX_AGE", 60 * 60 * 24 * 30),
            httponly=True,
            samesite="Lax",
            secure=not settings.DEBUG,
        )
    return response
