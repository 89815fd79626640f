"""
Tests for checklist persistence in SQLite.
"""

from chatter.agents.structured.schemas import ChecklistItem
from chatter.memory.conversation_store import ConversationStateStore

from conftest import run


class TestConversationStateStore:
    def test_unknown_conversation(self, tmp_path):
        store = ConversationStateStore(db_path=str(tmp_path / "state.db"))
        assert run(store.load("missing")) is None

    def test_save_and_load(self, tmp_path):
        store = ConversationStateStore(db_path=str(tmp_path / "state.db"))
        checklist = [ChecklistItem(point="Framework", resolution="React"), ChecklistItem(point="Auth")]

        run(store.save("c1", checklist))

        assert run(store.load("c1")) == checklist

    def test_save_overwrites(self, tmp_path):
        store = ConversationStateStore(db_path=str(tmp_path / "state.db"))
        run(store.save("c1", [ChecklistItem(point="old")]))
        run(store.save("c1", []))

        assert run(store.load("c1")) == []

    def test_conversations_are_separate(self, tmp_path):
        store = ConversationStateStore(db_path=str(tmp_path / "state.db"))
        run(store.save("a", [ChecklistItem(point="for a")]))
        run(store.save("b", [ChecklistItem(point="for b")]))

        assert run(store.load("a"))[0].point == "for a"
        assert run(store.load("b"))[0].point == "for b"

    def test_delete(self, tmp_path):
        store = ConversationStateStore(db_path=str(tmp_path / "state.db"))
        run(store.save("c1", [ChecklistItem(point="p")]))

        assert run(store.delete("c1")) is True
        assert run(store.delete("c1")) is False
        assert run(store.load("c1")) is None

    def test_creates_parent_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "state.db"
        ConversationStateStore(db_path=str(path))
        assert path.parent.is_dir()
