"""BDD step definitions for the detection window."""

from dataclasses import dataclass, field

import pytest
from pytest_bdd import given, parsers, then, when

from madpy.adapters.storage.ring_buffer import ChangePointHistory
from madpy.adapters.storage.sample_queue import SampleQueue
from madpy.core.detector import WindowDetector
from madpy.core.models import Sample


@dataclass
class WindowScenarioContext:
    """State shared between the steps of one scenario."""

    history: ChangePointHistory = field(default_factory=ChangePointHistory)
    change_points: list[int] = field(default_factory=list)
    passes: list[list[float]] = field(default_factory=list)
    detector: WindowDetector | None = None
    queue: SampleQueue | None = None
    sent: int = 0

    def detect(self, values: list[float], sensitivity: int) -> list[int]:
        self.passes.append(list(values))
        return list(self.change_points)


@pytest.fixture
def ctx():
    """Fresh scenario context for each test."""
    context = WindowScenarioContext()
    yield context
    if context.queue is not None:
        context.queue.close()


@given(parsers.parse("a detector with a window of {size:d} samples"))
def step_detector(ctx: WindowScenarioContext, size: int) -> None:
    ctx.queue = SampleQueue(capacity=size)
    ctx.detector = WindowDetector(
        ctx.queue, ctx.detect, min_samples=size, history=ctx.history
    )


@given("the detection function finds no change points")
def step_no_change_points(ctx: WindowScenarioContext) -> None:
    ctx.change_points = []


@given(parsers.parse('the detection function finds change points at "{indices}"'))
def step_change_points(ctx: WindowScenarioContext, indices: str) -> None:
    ctx.change_points = [int(i) for i in indices.split(",")]


@when(parsers.parse("{count:d} samples arrive"))
def step_samples_arrive(ctx: WindowScenarioContext, count: int) -> None:
    for _ in range(count):
        ctx.queue.push(Sample(timestamp=1_700_000_000.0 + ctx.sent, value=ctx.sent))
        ctx.sent += 1
    while len(ctx.queue) and not ctx.detector.filled:
        ctx.detector.add(ctx.queue.pop())


@when("one detection pass runs")
def step_detection_pass(ctx: WindowScenarioContext) -> None:
    ctx.detector.step()


@then("no detection pass has run")
def step_no_pass(ctx: WindowScenarioContext) -> None:
    assert ctx.passes == []
    assert not ctx.detector.filled


@then(parsers.parse("the window holds {count:d} samples"))
def step_window_size(ctx: WindowScenarioContext, count: int) -> None:
    assert len(ctx.detector.window) == count


@then(parsers.parse("the window starts at sample {index:d}"))
def step_window_start(ctx: WindowScenarioContext, index: int) -> None:
    assert ctx.detector.window[0].value == index


@then(parsers.parse("{count:d} change points are recorded"))
def step_recorded(ctx: WindowScenarioContext, count: int) -> None:
    assert len(ctx.history) == count
