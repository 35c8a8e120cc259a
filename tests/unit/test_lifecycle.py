import pytest

from app.domain.lifecycle import ALLOWED_TRANSITIONS, InvalidTransitionError, UploadLifecycle, UploadState


@pytest.mark.unit
def test_upload_lifecycle_follows_pipeline_order() -> None:
    lifecycle = UploadLifecycle()
    for state in (
        UploadState.AUTHENTICATED,
        UploadState.PARSED,
        UploadState.SCORED,
        UploadState.ENRICHED,
        UploadState.AGGREGATED,
        UploadState.PERSISTED,
        UploadState.RESPONDED,
    ):
        lifecycle.advance(state)

    assert lifecycle.state is UploadState.RESPONDED
    assert len(lifecycle.transitions) == 8


@pytest.mark.unit
def test_transition_guard_rejects_skipped_stage() -> None:
    lifecycle = UploadLifecycle()
    lifecycle.advance(UploadState.AUTHENTICATED)

    with pytest.raises(InvalidTransitionError):
        lifecycle.advance(UploadState.ENRICHED)
    assert UploadState.PARSED in ALLOWED_TRANSITIONS[UploadState.AUTHENTICATED]


@pytest.mark.unit
def test_fail_reports_running_stage_and_is_terminal() -> None:
    lifecycle = UploadLifecycle()
    lifecycle.advance(UploadState.AUTHENTICATED)
    lifecycle.advance(UploadState.PARSED)
    lifecycle.advance(UploadState.SCORED)

    assert lifecycle.fail() == "enrich"
    assert lifecycle.state is UploadState.FAILED
    with pytest.raises(InvalidTransitionError):
        lifecycle.advance(UploadState.PERSISTED)


@pytest.mark.unit
def test_persisted_upload_cannot_fail() -> None:
    assert UploadState.FAILED not in ALLOWED_TRANSITIONS[UploadState.PERSISTED]
