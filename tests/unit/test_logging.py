import pytest

from cutout.core.logging import (
    LogContext,
    add_app_context,
    request_id_var,
    stage_var,
    with_logging,
)


def test_log_context_binds_and_restores_request_id():
    assert request_id_var.get() is None

    with LogContext(request_id="req-1"):
        assert request_id_var.get() == "req-1"
        assert add_app_context(None, "info", {"event": "x"})["request_id"] == "req-1"

    assert request_id_var.get() is None


def test_log_context_without_request_id_is_a_no_op():
    with LogContext():
        assert request_id_var.get() is None


def test_with_logging_sets_stage_for_the_call_only():
    seen = []

    @with_logging("generation")
    def stage():
        seen.append(stage_var.get())
        return "done"

    assert stage() == "done"
    assert seen == ["generation"]
    assert stage_var.get() is None


def test_with_logging_reraises_and_resets_stage():
    @with_logging("post_processing")
    def stage():
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        stage()

    assert stage_var.get() is None


def test_event_stage_wins_over_context_stage():
    token = stage_var.set("generation")
    try:
        event = add_app_context(None, "info", {"event": "x", "stage": "download_generated"})
    finally:
        stage_var.reset(token)

    assert event["stage"] == "download_generated"
