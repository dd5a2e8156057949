"""End-to-end tests: motion log through session, metrics, advice, and history."""

from __future__ import annotations

import math
from collections.abc import Iterator
from pathlib import Path

import pytest
from conftest import five_phase_motion

from kinemotion.core.config import Settings, get_settings
from kinemotion.core.types import JumpProtocol, Subject, TestConfiguration
from kinemotion.main import main
from kinemotion.pipeline.session import CaptureSessionController


def _write_motion_csv(path: Path) -> Path:
    lines = ["t,ax,ay,az,gx,gy,gz"]
    for s in five_phase_motion():
        a = s.acceleration
        lines.append(f"{s.timestamp:.2f},{a.x},{a.y},{a.z!r},0,0,0")
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def cli_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Point the CLI at a temporary history file."""
    history = tmp_path / "history.json"
    monkeypatch.setenv("STORAGE_HISTORY_PATH", str(history))
    get_settings.cache_clear()
    yield history
    get_settings.cache_clear()


class TestFivePhaseCmj:
    """70 kg athlete, CMJ, IMU, 2.3 s synthetic five-phase trace."""

    def test_metrics(
        self, cmj_imu_config: TestConfiguration, subject: Subject, settings: Settings
    ) -> None:
        """Flight is the 400 ms unloaded phase; values are finite and in range."""
        controller = CaptureSessionController(cmj_imu_config, subject, settings)
        controller.start(now=0.0)
        for sample in five_phase_motion(subject.weight_kg):
            controller.add_motion(sample)
        result = controller.stop()
        m = result.metrics

        for value in (m.jump_height_cm, m.flight_time_ms, m.max_knee_flexion_degrees):
            assert math.isfinite(value)
            assert value >= 0.0
        assert m.asymmetry_percent is None or -100.0 <= m.asymmetry_percent <= 100.0

        assert m.flight_time_ms == 400.0
        assert m.jump_height_cm == pytest.approx(19.6)
        assert m.rsi is None
        assert m.peak_power_watts is not None and m.peak_power_watts > 0
        assert m.impulse_height_cm is not None and m.impulse_height_cm > 0

        assert len(result.grf_series) == 230
        assert result.advice[-1].startswith("CMJ tip")
        assert result.config.protocol is JumpProtocol.CMJ


class TestCli:
    """The command-line entry point."""

    def test_imu_then_history(
        self, tmp_path: Path, cli_env: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        csv_path = _write_motion_csv(tmp_path / "jump.csv")

        assert main(["imu", str(csv_path), "--weight", "70", "--save"]) == 0
        out = capsys.readouterr().out
        assert "Jump height:       19.6 cm" in out
        assert "Flight time:       400 ms" in out
        assert cli_env.exists()

        assert main(["--history"]) == 0
        assert "CMJ via IMU" in capsys.readouterr().out

    def test_missing_file(self, tmp_path: Path, cli_env: Path) -> None:
        """Unreadable input is an input error."""
        assert main(["imu", str(tmp_path / "absent.csv")]) == 1

    def test_empty_log(self, tmp_path: Path, cli_env: Path) -> None:
        path = tmp_path / "empty.csv"
        path.write_text("t,ax,ay,az\n", encoding="utf-8")
        assert main(["imu", str(path)]) == 1

    def test_empty_history(self, cli_env: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["--history"]) == 0
        assert "No saved results." in capsys.readouterr().out

    def test_no_command(self, cli_env: Path) -> None:
        assert main([]) == 1

    def test_clear_history(
        self, tmp_path: Path, cli_env: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Saved results are gone after clearing."""
        csv_path = _write_motion_csv(tmp_path / "jump.csv")
        assert main(["imu", str(csv_path), "--save"]) == 0
        capsys.readouterr()

        assert main(["--clear-history"]) == 0
        assert "History cleared." in capsys.readouterr().out

        assert main(["--history"]) == 0
        assert "No saved results." in capsys.readouterr().out
