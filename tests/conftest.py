"""
Pytest configuration and shared fixtures for Automation Canvas tests.

Tests exercise models/ and services/ only; nothing here needs a Qt
event loop. The synchronizer's next-turn scheduler is a DeferredCallQueue
that tests drain explicitly.
"""

import pytest
import tempfile
import shutil
from pathlib import Path
from typing import Generator

# Add parent directory to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from models import AutomationNode, AutomationEdge, CanvasDocument, NodeKind, Position
from services import (
    AutomationEditor, AutomationStore, DeferredCallQueue, NodeIdMinter
)


# ============== Temporary Directory Fixtures ==============

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    tmp = tempfile.mkdtemp(prefix="automation_canvas_test_")
    yield Path(tmp)
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def store(temp_dir: Path) -> AutomationStore:
    """Automation store rooted in a temporary directory."""
    return AutomationStore(temp_dir / "automations")


# ============== Model Fixtures ==============

@pytest.fixture
def empty_document() -> CanvasDocument:
    return CanvasDocument()


@pytest.fixture
def simple_document() -> CanvasDocument:
    """Trigger -> action, one edge."""
    document = CanvasDocument()
    document.add_node(AutomationNode(
        id="trigger-1",
        kind=NodeKind.TRIGGER,
        label="HTTP Trigger",
        position=Position(100, 100),
    ))
    document.add_node(AutomationNode(
        id="action-1",
        kind=NodeKind.ACTION,
        label="Log Action",
        position=Position(350, 100),
    ))
    document.edges.append(AutomationEdge(id="edge-1", source="trigger-1", target="action-1"))
    return document


@pytest.fixture
def branching_document() -> dict:
    """Saved-form document with a condition fanning out to two actions."""
    return {
        "nodes": [
            {"id": "t", "position": {"x": 0, "y": 0}, "data": {"label": "Start", "type": "trigger"}},
            {"id": "c", "position": {"x": 200, "y": 0}, "data": {"label": "Check", "type": "condition"}},
            {"id": "a1", "position": {"x": 400, "y": -80}, "data": {"label": "Yes", "type": "action"}},
            {"id": "a2", "position": {"x": 400, "y": 80}, "data": {"label": "No", "type": "action"}},
        ],
        "edges": [
            {"id": "e1", "source": "t", "target": "c"},
            {"id": "e2", "source": "c", "target": "a1"},
            {"id": "e3", "source": "c", "target": "a2"},
        ],
    }


# ============== Editor Fixtures ==============

class FakeClock:
    """Clock returning a fixed time that tests can advance."""

    def __init__(self, start: float = 1700000000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeView:
    """
    Stand-in for the Qt canvas geometry.

    Viewport pixels map to scene coordinates through a pan offset and a
    zoom factor, like QGraphicsView.mapToScene.
    """

    def __init__(self, width=800.0, height=600.0, pan=(0.0, 0.0), zoom=1.0, origin=(0.0, 0.0)):
        self.width = width
        self.height = height
        self.pan = pan
        self.zoom = zoom
        self.origin = origin

    def map_to_scene(self, x: float, y: float) -> tuple[float, float]:
        return (x / self.zoom + self.pan[0], y / self.zoom + self.pan[1])

    def container_size(self) -> tuple[float, float]:
        return (self.width, self.height)

    def container_origin(self) -> tuple[float, float]:
        return self.origin


class ChangeRecorder:
    """on_change callback that keeps every emitted document."""

    def __init__(self):
        self.calls: list[CanvasDocument] = []

    def __call__(self, document: CanvasDocument):
        self.calls.append(document)

    @property
    def count(self) -> int:
        return len(self.calls)

    @property
    def last(self) -> CanvasDocument:
        return self.calls[-1]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def minter(clock: FakeClock) -> NodeIdMinter:
    return NodeIdMinter(clock=clock)


@pytest.fixture
def scheduler() -> DeferredCallQueue:
    return DeferredCallQueue()


@pytest.fixture
def recorder() -> ChangeRecorder:
    return ChangeRecorder()


@pytest.fixture
def fake_view() -> FakeView:
    return FakeView()


@pytest.fixture
def editor(recorder, scheduler, minter, fake_view) -> AutomationEditor:
    """Editor with an empty document attached to an 800x600 view."""
    editor = AutomationEditor(on_change=recorder, schedule=scheduler, minter=minter)
    editor.attach_view(
        transform=fake_view,
        bounds=fake_view,
        container_origin=fake_view.container_origin,
    )
    return editor
