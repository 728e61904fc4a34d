"""Sampling cycle orchestration: acquire, classify, decide, actuate."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Mapping, Optional, Protocol, Sequence

from models.config import MonitorConfig
from models.errors import InvalidReadingError
from models.records import ActuatorState, Classification, Reading
from models.schemas import ActuatorStatus, CycleReport, ParameterStatus
from services.acquisition import ReadingSource, StaticSource
from services.classifier import Classifier
from services.decision import DecisionEngine

logger = logging.getLogger(__name__)


class ActuatorSink(Protocol):
    def apply(self, state: ActuatorState) -> None:
        ...


ReportCallback = Callable[[CycleReport], None]


class LoggingActuator:
    """Stands in for the LED outputs; logs each output when it switches."""

    def __init__(self) -> None:
        self.state: Optional[ActuatorState] = None

    def apply(self, state: ActuatorState) -> None:
        previous = self.state.as_dict() if self.state is not None else {}
        for output, active in state.as_dict().items():
            if previous.get(output) != active:
                logger.info(
                    "%s switched %s", output.upper(), "ON" if active else "OFF",
                    extra={output: active},
                )
        self.state = state


@dataclass(frozen=True)
class Evaluation:
    reading: Reading
    classification: Classification
    state: ActuatorState


def build_report(
    cycle: int, config: MonitorConfig, evaluation: Evaluation
) -> CycleReport:
    statuses = [
        ParameterStatus(
            name=parameter.name,
            label=parameter.display_name,
            unit=parameter.unit,
            value=evaluation.reading[parameter.name],
            band=evaluation.classification[parameter.name],
            fallback=parameter.name in evaluation.reading.fallbacks,
        )
        for parameter in config.parameters
    ]
    return CycleReport(
        cycle=cycle,
        profile=config.profile,
        taken_at=evaluation.reading.taken_at,
        parameters=statuses,
        actuators=ActuatorStatus(**evaluation.state.as_dict()),
    )


class MonitorService:
    """Runs sampling cycles against externally owned sources and outputs."""

    def __init__(
        self,
        config: MonitorConfig,
        source: ReadingSource,
        actuators: Sequence[ActuatorSink] = (),
        on_report: Optional[ReportCallback] = None,
    ) -> None:
        self.config = config
        self.source = source
        self.actuators = list(actuators)
        self.on_report = on_report
        self.classifier = Classifier(config)
        self.engine = DecisionEngine(config)
        self._cycle = 0

    def evaluate(self, reading: Reading) -> Evaluation:
        classification = self.classifier.classify(reading)
        return Evaluation(
            reading=reading,
            classification=classification,
            state=self.engine.decide(classification),
        )

    def run_cycle(self) -> CycleReport:
        """Run one cycle; actuators only ever see a completely decided state.

        Every actuator is offered the same state; one that fails is logged and
        does not keep the others from applying it.
        """
        self._cycle += 1
        reading = self.source.read()
        evaluation = self.evaluate(reading)
        report = build_report(self._cycle, self.config, evaluation)

        for actuator in self.actuators:
            try:
                actuator.apply(evaluation.state)
            except Exception as exc:  # noqa: BLE001
                logger.exception(
                    "Actuator failed to apply state",
                    extra={"cycle": self._cycle, "reason": str(exc)},
                )

        logger.debug(
            "Cycle complete",
            extra={"cycle": self._cycle, "profile": self.config.profile, **evaluation.state.as_dict()},
        )
        if self.on_report is not None:
            self.on_report(report)
        return report

    def run(
        self,
        cycles: Optional[int] = None,
        interval: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> List[CycleReport]:
        """Repeat cycles every ``interval`` seconds; ``cycles=None`` runs until interrupted.

        Reports are only collected for bounded runs.
        """
        reports: List[CycleReport] = []
        completed = 0
        while cycles is None or completed < cycles:
            try:
                report = self.run_cycle()
                if cycles is not None:
                    reports.append(report)
            except InvalidReadingError as exc:
                logger.error(
                    "Cycle skipped",
                    extra={"cycle": self._cycle, "reason": str(exc)},
                )
            completed += 1
            if cycles is None or completed < cycles:
                sleep(interval)
        return reports


def evaluate_values(config: MonitorConfig, values: Mapping[str, object]) -> CycleReport:
    """One-shot classification and decision for a fixed set of values."""
    service = MonitorService(config, StaticSource(config, values))
    return service.run_cycle()

