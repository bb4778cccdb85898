"""
Tests for the generation status and the per-directory lock.
"""

from __future__ import annotations

import threading

import pytest

from models_builder.pipeline.config import ModelsBuilderConfig, ModelsMode
from models_builder.pipeline.errors import GenerationInProgressError
from models_builder.pipeline.locking import generation_lock
from models_builder.pipeline.status import GenerationStatus, build_dashboard


class TestGenerationStatus:
    """Tests for GenerationStatus."""

    def test_report_and_clear(self):
        status = GenerationStatus()
        status.report("Failed to build models.", ValueError("boom"))
        assert status.last_error == "Failed to build models.\nValueError: boom"
        status.clear()
        assert status.last_error is None

    def test_out_of_date_flag(self):
        status = GenerationStatus()
        assert not status.is_out_of_date
        status.flag_out_of_date()
        assert status.is_out_of_date
        status.clear_out_of_date()
        assert not status.is_out_of_date

    def test_out_of_date_tracking_disabled(self):
        status = GenerationStatus(out_of_date_enabled=False)
        status.flag_out_of_date()
        assert not status.is_out_of_date

    def test_persistence(self, tmp_path):
        status = GenerationStatus(tmp_path)
        status.report("Failed to build models.")
        status.flag_out_of_date()
        assert (tmp_path / GenerationStatus.ERROR_FILE).is_file()
        assert (tmp_path / GenerationStatus.OUT_OF_DATE_FILE).is_file()

        reloaded = GenerationStatus(tmp_path)
        assert reloaded.last_error == "Failed to build models."
        assert reloaded.is_out_of_date

        reloaded.clear()
        reloaded.clear_out_of_date()
        assert not (tmp_path / GenerationStatus.ERROR_FILE).exists()
        assert not (tmp_path / GenerationStatus.OUT_OF_DATE_FILE).exists()


class TestDashboard:
    """Tests for build_dashboard."""

    def test_enabled_dll_mode(self):
        config = ModelsBuilderConfig(models_mode=ModelsMode.DLL)
        status = GenerationStatus()
        status.report("Failed to build models.")
        dashboard = build_dashboard(config, status)
        assert dashboard["enable"] is True
        assert dashboard["canGenerate"] is True
        assert dashboard["generateCausesRestart"] is True
        assert dashboard["outOfDateModels"] is False
        assert dashboard["lastError"] == "Failed to build models."
        assert "compiled into" in dashboard["text"]

    def test_disabled(self):
        dashboard = build_dashboard(ModelsBuilderConfig(enable=False), GenerationStatus())
        assert dashboard["canGenerate"] is False
        assert dashboard["text"] == "Models builder is disabled."


class TestGenerationLock:
    """Tests for generation_lock."""

    def test_second_acquisition_is_rejected(self, tmp_path):
        with generation_lock(tmp_path):
            with pytest.raises(GenerationInProgressError):
                with generation_lock(tmp_path / "."):
                    pass

    def test_lock_is_released(self, tmp_path):
        with generation_lock(tmp_path):
            pass
        with generation_lock(tmp_path):
            pass

    def test_released_on_error(self, tmp_path):
        with pytest.raises(RuntimeError):
            with generation_lock(tmp_path):
                raise RuntimeError("boom")
        with generation_lock(tmp_path):
            pass

    def test_different_directories_do_not_block(self, tmp_path):
        with generation_lock(tmp_path / "a"):
            with generation_lock(tmp_path / "b"):
                pass

    def test_blocking_waits_for_release(self, tmp_path):
        entered = threading.Event()
        release = threading.Event()

        def hold():
            with generation_lock(tmp_path):
                entered.set()
                release.wait(5)

        thread = threading.Thread(target=hold)
        thread.start()
        entered.wait(5)
        release.set()
        with generation_lock(tmp_path, blocking=True, timeout=5):
            pass
        thread.join(5)
