"""Tests for the single-flight generation session."""

import subprocess
import sys
import threading
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from crispe.core.errors import GenerationError
from crispe.core.schema.crispe_input import CrispeInput
from crispe.core.schema.messages import GeneratedPrompts
from crispe.core.session import GenerationSession


def make_adapter(result=None, error=None):
    adapter = MagicMock()
    if error is not None:
        adapter.generate.side_effect = error
    else:
        adapter.generate.return_value = result or GeneratedPrompts(en="optimized")
    return adapter


class TestGenerationSession:
    """Tests for trigger rules and result tracking."""

    def test_run_stores_result(self):
        adapter = make_adapter(GeneratedPrompts(en="E", cn="C"))
        session = GenerationSession(adapter)

        result = session.run(CrispeInput(instruction="Write"), "cn")

        assert result == GeneratedPrompts(en="E", cn="C")
        assert session.result is result
        assert session.error is None
        assert not session.is_generating

    def test_blank_instruction_is_a_no_op(self):
        adapter = make_adapter()
        session = GenerationSession(adapter)

        assert session.run(CrispeInput(context="ctx", instruction="   "), "en") is None
        adapter.generate.assert_not_called()

    def test_trigger_while_in_flight_is_a_no_op(self):
        """Test that a second run during an outstanding one does nothing."""
        started = threading.Event()
        release = threading.Event()

        def slow_generate(data, language, on_progress=None):
            started.set()
            release.wait(timeout=5)
            return GeneratedPrompts(en="first")

        adapter = MagicMock()
        adapter.generate.side_effect = slow_generate
        session = GenerationSession(adapter)
        results = []

        worker = threading.Thread(
            target=lambda: results.append(session.run(CrispeInput(instruction="Write"), "en"))
        )
        worker.start()
        assert started.wait(timeout=5)

        assert session.is_generating
        assert session.run(CrispeInput(instruction="Write again"), "en") is None

        release.set()
        worker.join(timeout=5)

        assert results == [GeneratedPrompts(en="first")]
        assert adapter.generate.call_count == 1
        assert not session.is_generating

    def test_failure_stores_error_and_resets(self):
        adapter = make_adapter(error=GenerationError("Failed to generate prompt. Please check your connection."))
        session = GenerationSession(adapter)
        session.result = GeneratedPrompts(en="old")

        with pytest.raises(GenerationError):
            session.run(CrispeInput(instruction="Write"), "en")

        assert session.result is None
        assert session.error == "Failed to generate prompt. Please check your connection."
        assert not session.is_generating

    def test_progress_is_tracked_and_forwarded(self):
        seen_status = []
        forwarded = []
        session = None

        def generate(data, language, on_progress=None):
            on_progress("Sending request to AI...")
            seen_status.append(session.status)
            return GeneratedPrompts(en="done")

        adapter = MagicMock()
        adapter.generate.side_effect = generate
        session = GenerationSession(adapter)

        session.run(CrispeInput(instruction="Write"), "en", on_progress=forwarded.append)

        assert seen_status == ["Sending request to AI..."]
        assert forwarded == ["Sending request to AI..."]
        assert session.status == ""

    def test_clear(self):
        session = GenerationSession(make_adapter())
        session.run(CrispeInput(instruction="Write"), "en")

        session.clear()

        assert session.result is None
        assert session.error is None


class TestSessionImports:
    """Tests for the core layer's import boundary."""

    def test_importing_session_does_not_load_llm_layer(self):
        code = (
            "import sys, crispe.core.session; "
            "print(sorted(m for m in sys.modules if m.startswith('crispe.llm')))"
        )

        completed = subprocess.run(
            [sys.executable, "-c", code],
            cwd=Path(__file__).resolve().parents[2],
            capture_output=True,
            text=True,
            check=True,
        )

        assert completed.stdout.strip() == "[]"
