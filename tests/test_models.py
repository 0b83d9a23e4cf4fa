"""
Tests for domain models — Selection, ImageReference, Receipt, WorkflowResult.
"""

import pytest
from pydantic import ValidationError

from ublue_it.core.models import (
    IMAGE_VARIANTS,
    DesktopEnvironment,
    FailureKind,
    ImageReference,
    Receipt,
    Selection,
    WorkflowResult,
    WorkflowState,
)

# ── Selection ────────────────────────────────────────────────────────


class TestSelection:
    def test_defaults(self):
        s = Selection()
        assert s.desktop_env == "gnome"
        assert s.has_nvidia is False
        assert s.nvidia_vers == ""
        assert s.auto_reboot is False

    def test_normalizes_case_and_whitespace(self):
        s = Selection(desktop_env="  KDE ", nvidia_vers="Current")
        assert s.desktop_env == "kde"
        assert s.nvidia_vers == "current"

    def test_none_driver_is_latest(self):
        assert Selection(nvidia_vers=None).nvidia_vers == ""

    def test_integer_driver_is_text(self):
        assert Selection(nvidia_vers=525).nvidia_vers == "525"

    def test_unknown_desktop_is_kept_for_the_resolver(self):
        assert Selection(desktop_env="cinnamon").desktop_env == "cinnamon"

    def test_frozen(self):
        s = Selection()
        with pytest.raises(ValidationError):
            s.desktop_env = "kde"


# ── Image table ──────────────────────────────────────────────────────


class TestImageVariants:
    def test_every_desktop_has_a_variant(self):
        assert set(IMAGE_VARIANTS) == set(DesktopEnvironment)

    @pytest.mark.parametrize(
        "desktop, plain, nvidia",
        [
            (DesktopEnvironment.BLUEFIN, "bluefin", "bluefin-nvidia"),
            (DesktopEnvironment.GNOME, "silverblue-main", "silverblue-nvidia"),
            (DesktopEnvironment.KDE, "kinoite-main", "kinoite-nvidia"),
            (DesktopEnvironment.LXQT, "lxqt-main", "lxqt-nvidia"),
            (DesktopEnvironment.MATE, "mate-main", "mate-nvidia"),
            (DesktopEnvironment.XFCE, "vauxite-main", "vauxite-nvidia"),
        ],
    )
    def test_image_names(self, desktop, plain, nvidia):
        variant = IMAGE_VARIANTS[desktop]
        assert variant.image_name(nvidia=False) == plain
        assert variant.image_name(nvidia=True) == nvidia


class TestImageReference:
    def test_render(self):
        ref = ImageReference(image_name="kinoite-nvidia", tag="39-525", nvidia=True)
        assert str(ref) == "ostree-unverified-registry:ghcr.io/ublue-os/kinoite-nvidia:39-525"
        assert ref.pull_spec == "ghcr.io/ublue-os/kinoite-nvidia:39-525"
        assert ref.repository == "ghcr.io/ublue-os"

    def test_unknown_image_rejected(self):
        with pytest.raises(ValidationError, match="Unknown image name"):
            ImageReference(image_name="cinnamon-main", tag="39")

    def test_empty_tag_rejected(self):
        with pytest.raises(ValidationError, match="tag"):
            ImageReference(image_name="silverblue-main", tag=" ")

    def test_equality_by_value(self):
        a = ImageReference(image_name="vauxite-main", tag="38")
        b = ImageReference(image_name="vauxite-main", tag="38")
        assert a == b


# ── Receipt ──────────────────────────────────────────────────────────


class TestReceipt:
    def test_success(self):
        r = Receipt.success(adapter="shell", action_id="op:rebase", output="staged", exit_status=0)
        assert r.ok and not r.failed and not r.skipped
        assert r.output == "staged"

    def test_failure_carries_status(self):
        r = Receipt.failure(adapter="shell", action_id="op:rebase", error="boom", exit_status=1)
        assert r.failed
        assert r.exit_status == 1
        assert r.error == "boom"

    def test_skip(self):
        r = Receipt.skip(adapter="shell", action_id="op:reboot", reason="manual")
        assert r.skipped
        assert r.output == "manual"


# ── WorkflowResult ───────────────────────────────────────────────────


class TestWorkflowResult:
    def test_terminal_states(self):
        assert WorkflowState.DONE.terminal
        assert WorkflowState.FAILED.terminal
        assert not WorkflowState.REBASING.terminal

    def test_enter_records_history(self):
        result = WorkflowResult()
        result.enter(WorkflowState.RESOLVING)
        result.enter(WorkflowState.FAILED)
        assert result.state == WorkflowState.FAILED
        assert result.states == [WorkflowState.RESOLVING, WorkflowState.FAILED]

    def test_status(self):
        done = WorkflowResult(state=WorkflowState.DONE)
        partial = WorkflowResult(state=WorkflowState.FAILED, rebase_staged=True)
        failed = WorkflowResult(state=WorkflowState.FAILED)
        assert (done.status, partial.status, failed.status) == ("ok", "partial", "failed")

    def test_to_dict(self):
        result = WorkflowResult(
            operation_id="op-1",
            state=WorkflowState.FAILED,
            failure=FailureKind.KARGS_FAILED,
            reference=ImageReference(image_name="kinoite-nvidia", tag="39", nvidia=True),
            steps={"rebase": Receipt.success(adapter="shell", action_id="op-1:rebase")},
            rebase_staged=True,
        )
        data = result.to_dict()
        assert data["status"] == "partial"
        assert data["failure"] == "kargs_failed"
        assert data["reference"].endswith("kinoite-nvidia:39")
        assert data["steps"]["rebase"]["status"] == "ok"
