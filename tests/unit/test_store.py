"""
Unit tests for the item store.
"""

import threading

import pytest

from itemapi.core.store import Item, ItemStore, InvalidItemError, SAMPLE_ITEMS


class TestItem:
    """Tests for the Item record."""

    def test_zero_value(self):
        """Test that Item() is the empty record."""
        assert Item() == Item(id=0, title="", completed=False)

    def test_to_dict(self):
        """Test the wire representation."""
        item = Item(id=3, title="x", completed=True)
        assert item.to_dict() == {"id": 3, "title": "x", "completed": True}

    def test_from_dict_ignores_id_and_unknown_fields(self):
        """Test that client ids and extra keys are dropped."""
        item = Item.from_dict({"id": 99, "title": "A", "completed": False, "extra": 1})
        assert item == Item(title="A", completed=False)

    def test_from_dict_missing_fields_default(self):
        """Test that missing fields keep their zero value."""
        assert Item.from_dict({}) == Item()
        assert Item.from_dict({"title": "only"}) == Item(title="only")

    @pytest.mark.parametrize("data", [
        [],
        "string",
        {"title": 5},
        {"completed": "yes"},
        {"completed": 1},
    ])
    def test_from_dict_rejects_bad_data(self, data):
        """Test that non-objects and wrong field types are rejected."""
        with pytest.raises(InvalidItemError):
            Item.from_dict(data)


class TestItemStore:
    """Tests for ItemStore."""

    def test_empty_store(self, store):
        """Test a fresh store."""
        assert store.get_all() == []
        assert len(store) == 0

    def test_create_assigns_sequential_ids(self, store):
        """Test that ids start at 1 and increase."""
        first = store.create(Item(title="a"))
        second = store.create(Item(title="b"))

        assert first.id == 1
        assert second.id == 2
        assert len(store) == 2

    def test_create_discards_input_id(self, store):
        """Test that the caller cannot choose the id."""
        stored = store.create(Item(id=42, title="a"))
        assert stored.id == 1
        assert store.get(42) == (Item(), False)

    def test_get_after_create(self, store):
        """Test that a created item is readable with the same fields."""
        stored = store.create(Item(title="read me", completed=True))

        item, found = store.get(stored.id)

        assert found is True
        assert item == Item(id=stored.id, title="read me", completed=True)

    def test_get_missing_returns_zero_value(self, store):
        """Test the not-found result."""
        assert store.get(999) == (Item(), False)

    def test_get_all_is_a_snapshot(self, store):
        """Test that later writes do not change an earlier listing."""
        store.create(Item(title="a"))
        snapshot = store.get_all()

        store.create(Item(title="b"))

        assert len(snapshot) == 1
        assert len(store.get_all()) == 2

    def test_update_replaces_fields(self, store):
        """Test that update is a full replace keyed by the path id."""
        stored = store.create(Item(title="old", completed=True))

        updated, found = store.update(stored.id, Item(id=77, title="new"))

        assert found is True
        assert updated == Item(id=stored.id, title="new", completed=False)
        assert store.get(stored.id) == (updated, True)
        assert store.get(77) == (Item(), False)

    def test_update_absent_leaves_store_untouched(self, store):
        """Test that updating an unknown id changes nothing."""
        store.create(Item(title="a"))
        before = store.get_all()

        result = store.update(999, Item(title="x"))

        assert result == (Item(), False)
        assert store.get_all() == before
        assert len(store) == 1

    def test_delete_twice(self, store):
        """Test that the second delete of the same id reports absence."""
        stored = store.create(Item(title="a"))

        assert store.delete(stored.id) is True
        assert store.delete(stored.id) is False
        assert store.get(stored.id) == (Item(), False)

    def test_ids_not_reused_after_delete(self, store):
        """Test that deleted ids are never handed out again."""
        first = store.create(Item(title="a"))
        store.delete(first.id)

        second = store.create(Item(title="b"))

        assert second.id == first.id + 1

    def test_size_accounting(self, store):
        """Test len() against creates and deletes."""
        for i in range(5):
            store.create(Item(title=str(i)))
        store.delete(2)
        store.delete(4)
        store.delete(4)

        assert len(store) == 3
        assert sorted(item.id for item in store.get_all()) == [1, 3, 5]

    def test_with_samples(self):
        """Test the seeded store."""
        store = ItemStore.with_samples()

        assert len(store) == len(SAMPLE_ITEMS)
        item, found = store.get(1)
        assert found
        assert item.title == "Learn Python"
        assert store.create(Item(title="next")).id == len(SAMPLE_ITEMS) + 1


class TestItemStoreConcurrency:
    """Tests for concurrent access."""

    def test_concurrent_creates_get_unique_ids(self, store):
        """Test that parallel creates yield exactly 1..N."""
        threads_count = 8
        per_thread = 50
        results = [[] for _ in range(threads_count)]
        start = threading.Barrier(threads_count)

        def worker(index):
            start.wait()
            for _ in range(per_thread):
                results[index].append(store.create(Item(title=f"t{index}")).id)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(threads_count)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10)

        all_ids = [item_id for ids in results for item_id in ids]
        total = threads_count * per_thread

        assert sorted(all_ids) == list(range(1, total + 1))
        assert len(store) == total

        # Each thread sees its own ids increasing
        for ids in results:
            assert ids == sorted(ids)

    def test_concurrent_reads_and_writes(self, store):
        """Test that readers never see a torn state while writers run."""
        for i in range(10):
            store.create(Item(title=str(i)))
        errors = []

        def reader():
            for _ in range(200):
                for item in store.get_all():
                    if item.id <= 0:
                        errors.append(item)

        def writer():
            for i in range(100):
                stored = store.create(Item(title=f"w{i}"))
                store.update(stored.id, Item(title="changed"))
                store.delete(stored.id)

        threads = [threading.Thread(target=reader) for _ in range(4)]
        threads += [threading.Thread(target=writer) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10)

        assert errors == []
        assert len(store) == 10
