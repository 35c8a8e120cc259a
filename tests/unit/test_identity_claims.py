from __future__ import annotations

import pytest

from app.clients.firebase_identity import identity_from_claims


@pytest.mark.unit
def test_identity_prefers_uid_and_keeps_profile_claims() -> None:
    identity = identity_from_claims(
        {"uid": "user-alice", "sub": "ignored", "email": "alice@example.org", "name": "Alice"}
    )

    assert identity is not None
    assert identity.subject == "user-alice"
    assert identity.email == "alice@example.org"
    assert identity.display_name == "Alice"
    assert identity.claims["sub"] == "ignored"


@pytest.mark.unit
def test_identity_falls_back_to_sub_claim() -> None:
    identity = identity_from_claims({"sub": "user-bob"})

    assert identity is not None and identity.subject == "user-bob"


@pytest.mark.unit
@pytest.mark.parametrize("claims", [{}, {"uid": ""}, {"uid": 42}])
def test_identity_requires_subject(claims: dict[str, object]) -> None:
    assert identity_from_claims(claims) is None
