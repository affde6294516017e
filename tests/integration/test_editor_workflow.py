"""
Integration tests for the automation editor.

Drives an AutomationEditor the way the canvas and the host window do:
gestures in, on_change notifications out, values loaded from and saved
to an AutomationStore.
"""

import pytest

from models import CanvasDocument, NodeKind, documents_equal
from services import (
    AutomationEditor, AutomationStore, AutomationStoreError,
    AutomationNotFoundError, DeferredCallQueue, NodeIdMinter,
    MENU_CLOSED, PaneMenuOpen, encode_palette_payload
)
from models import DEFAULT_PALETTE_ITEMS

from tests.conftest import ChangeRecorder, FakeClock, FakeView


class TestBasicWorkflow:
    """Create, connect and delete through the editor."""

    def test_create_connect_delete(self, editor, recorder):
        """Test the trigger -> action walkthrough."""
        assert editor.document.is_empty

        trigger = editor.create_node("trigger")
        assert [n.kind for n in editor.document.nodes] == [NodeKind.TRIGGER]
        assert trigger.id.startswith("trigger-")
        assert editor.document.edges == []

        action = editor.create_node(NodeKind.ACTION)
        edge = editor.connect(trigger.id, action.id)
        assert len(editor.document.edges) == 1
        assert (edge.source, edge.target) == (trigger.id, action.id)

        editor.delete_node(trigger.id)
        assert [n.id for n in editor.document.nodes] == [action.id]
        assert editor.document.edges == []

        # One notification per edit, each a snapshot
        assert recorder.count == 4
        assert len(recorder.calls[2].edges) == 1
        assert documents_equal(recorder.last, editor.document)

    def test_create_node_at_center(self, editor, fake_view):
        node = editor.create_node("condition")
        assert node.position.to_tuple() == (fake_view.width / 2, fake_view.height / 2)

    def test_create_node_unknown_kind(self, editor, recorder):
        assert editor.create_node("webhook") is None
        assert editor.document.is_empty
        assert recorder.count == 0

    def test_create_node_at(self, editor):
        node = editor.create_node_at(10, 20, "action")
        assert node.position.to_tuple() == (10, 20)
        assert editor.create_node_at(0, 0, "nope") is None

    def test_connect_ignores_missing_and_duplicates(self, editor, recorder):
        a = editor.create_node("trigger")
        b = editor.create_node("action")
        assert editor.connect(a.id, "ghost") is None
        assert editor.connect(a.id, b.id) is not None
        assert editor.connect(a.id, b.id) is None
        assert len(editor.document.edges) == 1
        assert recorder.count == 3

    def test_move_node_emits(self, editor, recorder):
        node = editor.create_node("action")
        assert editor.move_node(node.id, 5, 6) is True
        assert recorder.last.get_node(node.id).position.to_tuple() == (5, 6)
        assert editor.move_node("ghost", 1, 1) is False

    def test_repeated_move_reports_once(self, editor, recorder):
        """Test that duplicate move events from the view emit once."""
        node = editor.create_node("action")
        count = recorder.count
        editor.move_node(node.id, 5, 6)
        editor.move_node(node.id, 5, 6)
        assert recorder.count == count + 1

    def test_delete_edge_and_items(self, editor):
        a = editor.create_node("trigger")
        b = editor.create_node("action")
        c = editor.create_node("action")
        e1 = editor.connect(a.id, b.id)
        editor.connect(b.id, c.id)

        assert editor.delete_edge(e1.id).id == e1.id
        assert editor.delete_edge(e1.id) is None

        removed = editor.delete_items(node_ids=[c.id, "ghost"], edge_ids=[])
        assert removed == 1
        assert [n.id for n in editor.document.nodes] == [a.id, b.id]
        assert editor.document.edges == []
        assert editor.delete_items() == 0

    def test_document_listeners(self, editor):
        seen = []
        editor.add_document_listener(lambda doc: seen.append(len(doc.nodes)))
        node = editor.create_node("action")
        editor.move_node(node.id, 1, 1)  # moves are drawn by the view already
        editor.delete_node(node.id)
        assert seen == [1, 0]


class TestMenusAndDrops:
    """Context menu and palette drop paths through the editor."""

    def test_pane_menu_adds_under_cursor(self, recorder, scheduler, minter):
        view = FakeView(origin=(100.0, 40.0), pan=(-50.0, 0.0))
        editor = AutomationEditor(on_change=recorder, schedule=scheduler, minter=minter)
        editor.attach_view(transform=view, bounds=view, container_origin=view.container_origin)

        editor.interaction.open_pane_menu(300, 240)
        node = editor.interaction.add_node_from_menu(NodeKind.TRIGGER)

        assert node.position.to_tuple() == (150.0, 200.0)
        assert editor.interaction.state == MENU_CLOSED
        assert recorder.count == 1

    def test_node_menu_delete(self, editor, recorder):
        a = editor.create_node("trigger")
        b = editor.create_node("action")
        editor.connect(a.id, b.id)

        editor.interaction.open_node_menu(a.id, 10, 10)
        editor.interaction.delete_node_from_menu()

        assert [n.id for n in editor.document.nodes] == [b.id]
        assert editor.document.edges == []
        assert recorder.last.edges == []

    def test_palette_drop(self, editor, recorder):
        payload = encode_palette_payload(DEFAULT_PALETTE_ITEMS[1])
        node = editor.handle_drop(payload, 200, 150)
        assert node.kind == NodeKind.ACTION
        assert node.position.to_tuple() == (200, 150)
        assert recorder.count == 1

    def test_bad_drop_is_silent(self, editor, recorder):
        assert editor.handle_drop("{oops", 0, 0) is None
        assert editor.document.is_empty
        assert recorder.count == 0


class TestControlledEditor:
    """Owner-controlled value and the synchronizer guard."""

    def test_idempotent_load(self, editor, scheduler, branching_document):
        """Test that loading the same value twice changes nothing the second time."""
        replaced = []
        editor.add_document_listener(replaced.append)

        assert editor.set_value(branching_document) is True
        scheduler.run_pending()
        first = editor.document

        assert editor.set_value(branching_document) is False
        assert editor.document is first
        assert len(replaced) == 1

    def test_load_dismisses_open_menu(self, editor, branching_document):
        editor.interaction.open_pane_menu(1, 1)
        editor.set_value(branching_document)
        assert editor.interaction.state == MENU_CLOSED

    def test_rerender_moves_during_load_not_echoed(self, editor, recorder, scheduler, branching_document):
        """Test that the view re-reporting positions during a load does not ping-pong."""
        editor.set_value(branching_document)
        for node in list(editor.document.nodes):
            editor.move_node(node.id, node.position.x, node.position.y)
        assert recorder.count == 0

        scheduler.run_pending()
        editor.move_node("t", 1, 1)
        assert recorder.count == 1

    def test_owner_feeding_value_back(self, scheduler, minter):
        """Test a host that stores every change and passes it back in."""
        owner = {"value": CanvasDocument(), "changes": 0}
        editor = AutomationEditor(value=owner["value"], schedule=scheduler, minter=minter)

        def on_change(doc):
            owner["value"] = doc
            owner["changes"] += 1
            editor.set_value(doc)

        editor.on_change = on_change
        a = editor.create_node("trigger")
        b = editor.create_node("action")
        editor.connect(a.id, b.id)

        assert owner["changes"] == 3
        assert documents_equal(owner["value"], editor.document)
        assert scheduler.pending == 0

    def test_owner_feeding_non_finite_value_back(self, scheduler, minter):
        """Test a host whose stored value picks up a NaN coordinate."""
        owner = {"changes": 0, "applied": []}
        editor = AutomationEditor(value=CanvasDocument(), schedule=scheduler, minter=minter)

        def on_change(doc):
            owner["changes"] += 1
            doc.nodes[0].position.x = float("nan")
            owner["applied"].append(editor.set_value(doc))
            owner["applied"].append(editor.set_value(doc))
            scheduler.run_pending()

        editor.on_change = on_change
        trigger = editor.create_node("trigger")
        editor.move_node(trigger.id, 40, 40)
        editor.create_node("action")
        scheduler.run_pending()

        # The NaN coordinate is read as 0 once; feeding it again changes nothing
        assert owner["applied"] == [False, False, True, False, False, False]
        assert owner["changes"] == 3
        assert len(editor.document.nodes) == 2
        assert editor.document.nodes[0].position.x == 0.0
        assert not editor.sync.applying_external

    def test_malformed_load_gives_empty_canvas(self, editor):
        editor.create_node("action")
        editor.set_value({"nodes": {"bad": True}})
        assert editor.document.is_empty

    def test_save_pushes_current_document(self, editor, recorder):
        editor.create_node("action")
        count = recorder.count
        snapshot = editor.save()
        assert recorder.count == count + 1
        assert documents_equal(snapshot, editor.document)


class TestStoreRoundTrip:
    """Editor documents through the automation store."""

    def test_save_then_load(self, editor, store):
        """Test that a saved document loads back structurally equal."""
        a = editor.create_node("trigger")
        b = editor.create_node("condition")
        editor.connect(a.id, b.id)
        editor.move_node(b.id, 321.5, -12)

        automation_id = store.new_id()
        store.save(automation_id, "My automation", editor.save())
        loaded = store.load(automation_id)

        assert documents_equal(loaded, editor.document)

    def test_reopen_in_new_editor(self, editor, store, scheduler):
        a = editor.create_node("trigger")
        store.save("flow-1", "Flow", editor.document)

        recorder = ChangeRecorder()
        other = AutomationEditor(on_change=recorder, schedule=scheduler,
                                 minter=NodeIdMinter(clock=FakeClock()))
        other.set_value(store.load("flow-1"))
        scheduler.run_pending()

        assert other.document.get_node(a.id) is not None
        assert recorder.count == 0

        # New nodes never collide with loaded ones
        created = other.create_node("trigger")
        assert created.id != a.id

    def test_failed_load_leaves_editor_untouched(self, editor, store):
        editor.create_node("action")
        before = editor.document.to_dict()
        with pytest.raises(AutomationNotFoundError):
            editor.set_value(store.load("missing"))
        assert editor.document.to_dict() == before

    def test_invalid_id(self, store):
        with pytest.raises(AutomationStoreError):
            store.load("../escape")
