"""Capture session state machine.

Gates sample ingestion and runs metrics derivation exactly once per
session:

    IDLE --start()--> RECORDING --stop()--> ANALYZING --derived--> COMPLETE
    RECORDING --cancel()--> IDLE

Producer timestamps must come from the same clock the controller uses.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import replace

from kinemotion.analysis.advice import AdviceRuleEngine
from kinemotion.analysis.metrics import MetricsDerivationEngine
from kinemotion.core.config import Settings, get_settings
from kinemotion.core.exceptions import SessionStateError
from kinemotion.core.logging import get_logger
from kinemotion.core.types import (
    AnalysisResult,
    ForceProvenance,
    JointAngleSample,
    LandmarkFrame,
    LiveReadout,
    MotionSample,
    Recording,
    SessionState,
    Subject,
    TestConfiguration,
    TimeSeriesPoint,
)
from kinemotion.sensors.fusion import SensorFusionEstimator
from kinemotion.sensors.live import ForceMagnitudeEstimator, LiveForceWindow
from kinemotion.vision.kinematics import extract_foot_height, extract_knee_angle, opposite_side

logger = get_logger(__name__)

CompletionListener = Callable[[AnalysisResult], None]


class CaptureSessionController:
    """Owns the session buffer and drives one capture session at a time.

    Samples are accepted only while RECORDING. Overlapping producer calls
    are serialized; a sample that finds the buffer busy is dropped so the
    series stays strictly time-ordered.
    """

    def __init__(
        self,
        config: TestConfiguration,
        subject: Subject,
        settings: Settings | None = None,
        engine: MetricsDerivationEngine | None = None,
        advisor: AdviceRuleEngine | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize controller.

        Args:
            config: Test configuration for every session run by this controller
            subject: Athlete profile
            settings: Application settings (uses cached settings if None)
            engine: Metrics engine (built from settings if None)
            advisor: Advice engine (built from settings if None)
            clock: Time source in seconds
        """
        self.config = config
        self.subject = subject
        self.settings = settings or get_settings()
        self._engine = engine or MetricsDerivationEngine(
            self.settings.analysis, gravity=self.settings.fusion.gravity
        )
        self._advisor = advisor or AdviceRuleEngine(self.settings.advice)
        self._clock = clock

        self._lock = threading.Lock()
        self._listeners: list[CompletionListener] = []
        self._state = SessionState.IDLE
        self._result: AnalysisResult | None = None
        self._start_time = 0.0

        self.live_window = LiveForceWindow(self.settings.fusion.live_window_capacity)
        self._new_estimators()
        self._clear_buffers()

    @property
    def state(self) -> SessionState:
        """Current session state."""
        return self._state

    @property
    def is_recording(self) -> bool:
        return self._state is SessionState.RECORDING

    @property
    def result(self) -> AnalysisResult | None:
        """Result of the last completed session."""
        return self._result

    @property
    def sample_count(self) -> int:
        """Number of knee angle samples in the session buffer."""
        return len(self._knee_angle)

    @property
    def max_flexion(self) -> float:
        """Running peak knee flexion of the current session (degrees)."""
        return self._max_flexion

    @property
    def fusion(self) -> SensorFusionEstimator:
        """Orientation estimator of the current session."""
        return self._fusion

    def on_complete(self, listener: CompletionListener) -> None:
        """Register a callback that receives each finished result once."""
        self._listeners.append(listener)

    def start(self, now: float | None = None) -> None:
        """Begin recording a new session.

        Args:
            now: Start time on the producer clock (reads the clock if None)

        Raises:
            SessionStateError: If a session is already running
        """
        with self._lock:
            if self._state in (SessionState.RECORDING, SessionState.ANALYZING):
                raise SessionStateError(f"Cannot start while {self._state.name}")

            self._start_time = self._clock() if now is None else now
            self._new_estimators()
            self._clear_buffers()
            self._result = None
            self._state = SessionState.RECORDING

        logger.info(
            "Recording started (%s, %s)", self.config.protocol.value, self.config.method.value
        )

    def add_landmarks(self, frame: LandmarkFrame) -> bool:
        """Ingest one pose-estimator frame.

        Frames whose hip or ankle is not confidently visible are skipped
        silently.

        Args:
            frame: Landmarks with producer timestamp

        Returns:
            True if anything was appended to the session buffer
        """
        kin = self.settings.kinematics
        angle = extract_knee_angle(frame, kin.primary_side, kin.min_visibility)
        if angle is not None:
            self._latest_angle = angle

        with self._writer() as acquired:
            if not acquired:
                logger.debug("Buffer busy, dropped frame at %.3f s", frame.timestamp)
                return False
            if self._state is not SessionState.RECORDING:
                return False

            t = frame.timestamp - self._start_time
            if not self._in_order(t):
                return False

            other = extract_knee_angle(frame, opposite_side(kin.primary_side), kin.min_visibility)
            foot = extract_foot_height(frame, kin.min_visibility)
            if angle is None and other is None and foot is None:
                return False

            if angle is not None:
                self._knee_angle.append(JointAngleSample(t, angle))
                self._max_flexion = max(self._max_flexion, 180.0 - angle)
            if other is not None:
                self._contralateral.append(JointAngleSample(t, other))
            if foot is not None:
                self._foot_height.append(TimeSeriesPoint(t, foot))
            self._last_time = t
            return True

    def add_motion(self, sample: MotionSample) -> bool:
        """Ingest one device-motion event.

        The live force readout is updated in every state; the analysis
        buffer only while recording.

        Args:
            sample: Motion event with producer timestamp

        Returns:
            True if the sample was appended to the session buffer
        """
        with self._writer() as acquired:
            if not acquired:
                logger.debug("Buffer busy, dropped motion sample at %.3f s", sample.timestamp)
                return False

            self._live_force.update(sample.acceleration, sample.timestamp * 1000.0)
            if self._state is not SessionState.RECORDING:
                return False

            t = sample.timestamp - self._start_time
            if not self._in_order(t):
                return False

            accel = sample.acceleration
            if not self._fusion.is_seeded:
                self._fusion.seed(accel)
            else:
                dt = t - self._last_time
                self._fusion.update_orientation(accel, sample.rotation_rate, dt)

            vertical = self._fusion.vertical_acceleration(accel)
            force = self._fusion.ground_reaction_force(vertical, self.subject.weight_kg)
            angle = self._fusion.flexion_proxy_degrees()

            self._grf.append(TimeSeriesPoint(t, force))
            self._knee_angle.append(JointAngleSample(t, angle))
            self._max_flexion = max(self._max_flexion, 180.0 - angle)
            self._latest_angle = angle
            self._last_time = t
            return True

    def stop(self) -> AnalysisResult:
        """Freeze the buffer and derive the session result.

        Derivation runs synchronously; COMPLETE is only observable once the
        result exists. If derivation or advice fails the controller returns
        to IDLE. Listener errors are logged and do not undo completion.

        Returns:
            Finished analysis result with advice

        Raises:
            SessionStateError: If not recording
            InsufficientSamplesError: If the buffer holds no knee angles
        """
        with self._lock:
            if self._state is not SessionState.RECORDING:
                raise SessionStateError(f"Cannot stop while {self._state.name}")
            self._state = SessionState.ANALYZING
            recording = self._freeze()

        logger.info(
            "Recording stopped: %d samples over %.2f s", self.sample_count, recording.duration_s
        )

        try:
            result = self._engine.derive(recording, self.config, self.subject)
            advice = self._advisor.evaluate(result.metrics, self.config.protocol)
        except Exception:
            self._state = SessionState.IDLE
            logger.error("Analysis failed; session discarded")
            raise

        result = replace(result, advice=tuple(advice))
        self._result = result
        self._state = SessionState.COMPLETE

        for listener in self._listeners:
            try:
                listener(result)
            except Exception:
                logger.exception("Completion listener %r failed", listener)
        return result

    def cancel(self) -> None:
        """Abort the recording without producing a result.

        Raises:
            SessionStateError: If not recording
        """
        with self._lock:
            if self._state is not SessionState.RECORDING:
                raise SessionStateError(f"Cannot cancel while {self._state.name}")
            self._clear_buffers()
            self._state = SessionState.IDLE
        logger.info("Recording cancelled")

    def live_readout(self, now_ms: float | None = None) -> LiveReadout:
        """Snapshot for the live view; also feeds the live force window.

        Args:
            now_ms: Current time in milliseconds (reads the clock if None)

        Returns:
            Latest angle, force, and freshness
        """
        if now_ms is None:
            now_ms = self._clock() * 1000.0
        elapsed_ms = now_ms - self._start_time * 1000.0 if self.is_recording else None

        sample = self._live_force.readout(now_ms, elapsed_ms)
        self.live_window.push(sample)
        return LiveReadout(
            angle_degrees=self._latest_angle,
            force_newtons=sample.force_newtons,
            is_fresh=sample.provenance is ForceProvenance.MEASURED,
            provenance=sample.provenance,
        )

    @contextmanager
    def _writer(self) -> Iterator[bool]:
        """Try to take the buffer without waiting."""
        acquired = self._lock.acquire(blocking=False)
        try:
            yield acquired
        finally:
            if acquired:
                self._lock.release()

    def _in_order(self, t: float) -> bool:
        if t < 0 or t <= self._last_time:
            logger.debug("Out-of-order sample at %.3f s dropped", t)
            return False
        return True

    def _new_estimators(self) -> None:
        self._fusion = SensorFusionEstimator(self.settings.fusion)
        self._live_force = ForceMagnitudeEstimator(self.subject.weight_kg, self.settings.fusion)

    def _clear_buffers(self) -> None:
        self._knee_angle: list[JointAngleSample] = []
        self._contralateral: list[JointAngleSample] = []
        self._foot_height: list[TimeSeriesPoint] = []
        self._grf: list[TimeSeriesPoint] = []
        self._last_time = float("-inf")
        self._max_flexion = 0.0
        self._latest_angle: float | None = None

    def _freeze(self) -> Recording:
        return Recording(
            knee_angle=tuple(self._knee_angle),
            contralateral_knee_angle=tuple(self._contralateral),
            foot_height=tuple(self._foot_height),
            grf=tuple(self._grf),
            duration_s=max(0.0, self._last_time),
            primary_side=self.settings.kinematics.primary_side,
        )
