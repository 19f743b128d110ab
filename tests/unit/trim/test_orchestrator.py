"""Unit tests for BatchOrchestrator."""

from pathlib import Path

import pytest

from vtrim.exceptions import StorageError, ValidationError
from vtrim.introspector.stub import StubProbe
from vtrim.trim.models import BatchState, TrimRequest
from vtrim.trim.orchestrator import BatchOrchestrator


@pytest.fixture
def session_id(store) -> str:
    return store.create_session()


def _request(store, session_id, files, **kwargs) -> TrimRequest:
    return TrimRequest(
        session_id=session_id,
        files=files,
        output_dir=store.resolve_session_dir(session_id),
        **kwargs,
    )


class TestBatchOrchestratorRun:
    """Tests for BatchOrchestrator.run."""

    def test_trims_every_file_in_order(
        self, store, session_id, make_upload, fake_engine
    ) -> None:
        """Each file gets the planned window and a positional name."""
        files = [make_upload(session_id, "a.mp4"), make_upload(session_id, "b.mov")]
        probe = StubProbe(default=10.0)
        orchestrator = BatchOrchestrator(probe, fake_engine)

        result = orchestrator.run(
            _request(store, session_id, files, trim_start=1.0, trim_end=2.0)
        )

        assert [p.file_name for p in result.processed] == [
            "trimmed_1.mp4",
            "trimmed_2.mov",
        ]
        assert [p.original_name for p in result.processed] == ["a.mp4", "b.mov"]
        assert result.skipped == []
        assert orchestrator.state == BatchState.COMPLETED

        window = fake_engine.calls[0][2]
        assert window.start == pytest.approx(1.0)
        assert window.end == pytest.approx(8.0)
        for processed in result.processed:
            assert processed.output_path.is_file()
            assert processed.url == (
                f"/api/output/{session_id}/{processed.file_name}"
            )

    def test_skipped_file_leaves_naming_gap(
        self, store, session_id, make_upload, fake_engine
    ) -> None:
        """Names follow input position, so a skip leaves a gap."""
        files = [
            make_upload(session_id, "a.mp4"),
            make_upload(session_id, "short.mp4"),
            make_upload(session_id, "c.mp4"),
        ]
        probe = StubProbe({"stored-short.mp4": 0.5}, default=10.0)

        result = BatchOrchestrator(probe, fake_engine).run(
            _request(store, session_id, files, trim_start=1.0, trim_end=1.0)
        )

        assert [p.file_name for p in result.processed] == [
            "trimmed_1.mp4",
            "trimmed_3.mp4",
        ]
        assert len(result.skipped) == 1
        skipped = result.skipped[0]
        assert skipped.index == 2
        assert skipped.original_name == "short.mp4"
        assert "too short" in skipped.reason
        assert result.total == 3

    def test_all_infeasible_gives_empty_result(
        self, store, session_id, make_upload, fake_engine
    ) -> None:
        """An empty processed list is a valid outcome."""
        files = [make_upload(session_id, "tiny.mp4")]
        probe = StubProbe(default=0.5)

        result = BatchOrchestrator(probe, fake_engine).run(
            _request(store, session_id, files, trim_start=1.0, trim_end=1.0)
        )

        assert result.processed == []
        assert fake_engine.calls == []

    def test_probe_failure_skips_file(
        self, store, session_id, make_upload, fake_engine
    ) -> None:
        """A probe error skips only that file."""
        files = [make_upload(session_id, "bad.mp4"), make_upload(session_id, "ok.mp4")]
        probe = StubProbe({"stored-ok.mp4": 5.0})

        result = BatchOrchestrator(probe, fake_engine).run(
            _request(store, session_id, files)
        )

        assert [p.file_name for p in result.processed] == ["trimmed_2.mp4"]
        assert result.skipped[0].index == 1
        assert "No scripted duration" in result.skipped[0].reason

    def test_encode_failure_skips_file(
        self, store, session_id, make_upload, fake_engine
    ) -> None:
        """An encode error skips the file and the batch continues."""
        files = [make_upload(session_id, "a.mp4"), make_upload(session_id, "b.mp4")]
        fake_engine.fail_names = {"stored-a.mp4"}

        result = BatchOrchestrator(StubProbe(default=10.0), fake_engine).run(
            _request(store, session_id, files)
        )

        assert [p.file_name for p in result.processed] == ["trimmed_2.mp4"]
        assert "exited with code" in result.skipped[0].reason
        assert len(fake_engine.calls) == 2

    def test_missing_upload_is_skipped(
        self, store, session_id, make_upload, fake_engine
    ) -> None:
        """An upload deleted before processing is reported as missing."""
        gone = make_upload(session_id, "gone.mp4")
        gone.upload_path.unlink()
        probe = StubProbe(default=10.0)

        result = BatchOrchestrator(probe, fake_engine).run(
            _request(store, session_id, [gone])
        )

        assert result.processed == []
        assert result.skipped[0].reason == "upload missing"
        assert probe.calls == []

    def test_custom_base_name(
        self, store, session_id, make_upload, fake_engine
    ) -> None:
        """A sanitized base name replaces the default."""
        files = [make_upload(session_id, "a.mp4")]

        result = BatchOrchestrator(StubProbe(default=10.0), fake_engine).run(
            _request(store, session_id, files, base_name="my/clip")
        )

        assert result.processed[0].file_name == "my_clip_1.mp4"

    def test_reports_progress_per_file(
        self, store, session_id, make_upload, fake_engine
    ) -> None:
        """Progress callbacks carry the 1-based file index."""
        files = [make_upload(session_id, "a.mp4"), make_upload(session_id, "b.mp4")]
        events: list[tuple[int, float]] = []

        BatchOrchestrator(
            StubProbe(default=10.0), fake_engine, on_progress=lambda i, f: events.append((i, f))
        ).run(_request(store, session_id, files))

        assert events == [(1, 0.5), (1, 1.0), (2, 0.5), (2, 1.0)]

    def test_unwritable_output_dir_raises(
        self, store, session_id, make_upload, fake_engine, temp_dir: Path
    ) -> None:
        """Failure to create the output directory fails the whole batch."""
        blocker = temp_dir / "blocker"
        blocker.write_text("not a directory")
        request = TrimRequest(
            session_id=session_id,
            files=[make_upload(session_id, "a.mp4")],
            output_dir=blocker / "out",
        )

        with pytest.raises(StorageError):
            BatchOrchestrator(StubProbe(default=10.0), fake_engine).run(request)


class TestTrimRequest:
    """Tests for TrimRequest validation."""

    def test_negative_cut_rejected(self, temp_dir: Path) -> None:
        with pytest.raises(ValidationError, match="trimStart"):
            TrimRequest(session_id="s", files=[], output_dir=temp_dir, trim_start=-1)
        with pytest.raises(ValidationError, match="trimEnd"):
            TrimRequest(session_id="s", files=[], output_dir=temp_dir, trim_end=-0.5)

    def test_blank_base_name_uses_default(self, temp_dir: Path) -> None:
        request = TrimRequest(session_id="s", files=[], output_dir=temp_dir, base_name="")
        assert request.base_name == "trimmed"
