from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

import firebase_admin
from firebase_admin import auth, credentials
from firebase_admin import exceptions as firebase_exceptions

from app.domain.models import CallerIdentity

FIREBASE_APP_NAME = "green-procurement-api"


@dataclass
class FirebaseIdentityVerifier:
    credentials_path: str
    check_revoked: bool = False
    _app: Any = field(init=False, repr=False)

    def __post_init__(self) -> None:
        try:
            self._app = firebase_admin.get_app(FIREBASE_APP_NAME)
        except ValueError:
            self._app = firebase_admin.initialize_app(
                credentials.Certificate(self.credentials_path),
                name=FIREBASE_APP_NAME,
            )

    async def verify(self, token: str) -> CallerIdentity | None:
        try:
            decoded = await asyncio.to_thread(
                auth.verify_id_token,
                token,
                app=self._app,
                check_revoked=self.check_revoked,
            )
        except (ValueError, firebase_exceptions.FirebaseError):
            return None
        return identity_from_claims(decoded)


def identity_from_claims(decoded: dict[str, Any]) -> CallerIdentity | None:
    subject = decoded.get("uid") or decoded.get("sub")
    if not isinstance(subject, str) or not subject:
        return None
    return CallerIdentity(
        subject=subject,
        email=decoded.get("email"),
        display_name=decoded.get("name"),
        claims=dict(decoded),
    )
