from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from app.domain.errors import DomainError


class UploadState(StrEnum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    PARSED = "parsed"
    SCORED = "scored"
    ENRICHED = "enriched"
    AGGREGATED = "aggregated"
    PERSISTED = "persisted"
    RESPONDED = "responded"
    FAILED = "failed"


ALLOWED_TRANSITIONS: dict[UploadState, set[UploadState]] = {
    UploadState.UNAUTHENTICATED: {UploadState.AUTHENTICATED, UploadState.FAILED},
    UploadState.AUTHENTICATED: {UploadState.PARSED, UploadState.FAILED},
    UploadState.PARSED: {UploadState.SCORED, UploadState.FAILED},
    UploadState.SCORED: {UploadState.ENRICHED, UploadState.FAILED},
    UploadState.ENRICHED: {UploadState.AGGREGATED, UploadState.FAILED},
    UploadState.AGGREGATED: {UploadState.PERSISTED, UploadState.FAILED},
    UploadState.PERSISTED: {UploadState.RESPONDED},
    UploadState.RESPONDED: set(),
    UploadState.FAILED: set(),
}

# Stage whose failure moves an upload out of the given state.
STAGE_BY_STATE: dict[UploadState, str] = {
    UploadState.UNAUTHENTICATED: "authenticate",
    UploadState.AUTHENTICATED: "parse",
    UploadState.PARSED: "score",
    UploadState.SCORED: "enrich",
    UploadState.ENRICHED: "aggregate",
    UploadState.AGGREGATED: "persist",
}


class InvalidTransitionError(DomainError):
    pass


@dataclass
class UploadLifecycle:
    state: UploadState = UploadState.UNAUTHENTICATED
    transitions: list[UploadState] = field(default_factory=lambda: [UploadState.UNAUTHENTICATED])

    def advance(self, to_state: UploadState) -> None:
        if to_state not in ALLOWED_TRANSITIONS[self.state]:
            raise InvalidTransitionError(f"invalid upload transition: {self.state} -> {to_state}")
        self.state = to_state
        self.transitions.append(to_state)

    def fail(self) -> str:
        """Mark the upload failed and return the stage that was running."""
        stage = STAGE_BY_STATE.get(self.state, "internal")
        self.advance(UploadState.FAILED)
        return stage
