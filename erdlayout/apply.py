"""Animated application of a computed layout to a live diagram."""

import dataclasses
import logging
from collections.abc import Callable, Iterator, Mapping

from erdlayout.graph import Point

logger = logging.getLogger(__name__)

ANIMATION_DURATION_MS = 800
ANIMATION_STEP_MS = 20

FrameCallback = Callable[[dict[str, Point]], None]
PersistCallback = Callable[[str, Point], None]


class LayoutInProgress(RuntimeError):
    """Raised when a layout is applied while another one is still being applied."""


@dataclasses.dataclass
class ApplyReport:
    frames: int = 0
    persisted: list[str] = dataclasses.field(default_factory=list)
    failed: list[str] = dataclasses.field(default_factory=list)


class LayoutApplier:
    """
    Moves nodes from their current to their target positions in discrete steps.

    The applier owns no timer: ``on_frame`` is called once per step and the
    caller decides how to pace the frames. After the last interpolated step
    the exact target positions are sent once more, so rounding never leaves
    a node off target. Positions are then handed to ``persist`` node by
    node; failures are logged and not retried.
    """

    def __init__(
        self,
        on_frame: FrameCallback,
        persist: PersistCallback | None = None,
        duration_ms: int = ANIMATION_DURATION_MS,
        step_ms: int = ANIMATION_STEP_MS,
    ):
        if step_ms <= 0 or duration_ms < step_ms:
            raise ValueError(f"Invalid animation timing: {duration_ms}ms in {step_ms}ms steps")
        self.on_frame = on_frame
        self.persist = persist
        self.steps = duration_ms // step_ms
        self._in_flight = False

    @property
    def busy(self) -> bool:
        return self._in_flight

    def frames(
        self,
        current: Mapping[str, Point],
        target: Mapping[str, Point],
    ) -> Iterator[dict[str, Point]]:
        """
        Yield interpolated positions, one dict per step.

        Nodes missing from ``target`` keep their current position.
        """
        for step in range(1, self.steps + 1):
            t = step / self.steps
            frame = {}
            for nid, start in current.items():
                end = target.get(nid)
                if end is None:
                    frame[nid] = start
                else:
                    frame[nid] = Point(start.x + (end.x - start.x) * t,
                                       start.y + (end.y - start.y) * t)
            yield frame

    def apply(
        self,
        current: Mapping[str, Point],
        target: Mapping[str, Point],
    ) -> ApplyReport:
        """
        Animate to ``target``, finalize, then persist every moved node.

        Raises:
            LayoutInProgress: if called while a previous apply is running.
        """
        if self._in_flight:
            raise LayoutInProgress("A layout is already being applied")

        self._in_flight = True
        report = ApplyReport()
        try:
            for frame in self.frames(current, target):
                self.on_frame(frame)
                report.frames += 1

            final = dict(current)
            final.update({nid: p for nid, p in target.items() if nid in current})
            self.on_frame(final)
            report.frames += 1

            if self.persist is not None:
                self._persist_all(final, [nid for nid in current if nid in target], report)
        finally:
            self._in_flight = False

        logger.info("Applied layout: %d frame(s), %d persisted, %d failed",
                    report.frames, len(report.persisted), len(report.failed))
        return report

    def _persist_all(self, positions: dict[str, Point], ids: list[str], report: ApplyReport) -> None:
        for nid in ids:
            try:
                self.persist(nid, positions[nid])
            except Exception:
                logger.exception("Failed to persist position of %s", nid)
                report.failed.append(nid)
            else:
                report.persisted.append(nid)
