"""Tests for local durable storage backends."""

import json

import pytest

from storefront.cart.storage import FileStorage, MemoryStorage
from storefront.cart.store import CartStore
from storefront.exceptions import StorageError

from .conftest import product_ref


class TestMemoryStorage:
    def test_set_get_remove(self):
        storage = MemoryStorage()
        storage.set_item("cart", "[]")
        assert storage.get_item("cart") == "[]"

        storage.remove_item("cart")
        assert storage.get_item("cart") is None

    def test_remove_missing_key(self):
        MemoryStorage().remove_item("cart")


class TestFileStorage:
    def test_missing_file_reads_as_empty(self, tmp_path):
        storage = FileStorage(str(tmp_path / "storage.json"))
        assert storage.get_item("cart") is None

    def test_values_survive_new_instance(self, tmp_path):
        path = str(tmp_path / "nested" / "storage.json")
        FileStorage(path).set_item("cart", "[1]")

        assert FileStorage(path).get_item("cart") == "[1]"

    def test_keys_are_independent(self, tmp_path):
        storage = FileStorage(str(tmp_path / "storage.json"))
        storage.set_item("cart", "[]")
        storage.set_item("theme", "dark")
        storage.remove_item("cart")

        assert storage.get_item("cart") is None
        assert storage.get_item("theme") == "dark"

    def test_unreadable_file_raises_on_read(self, tmp_path):
        path = tmp_path / "storage.json"
        path.write_text("not json")

        with pytest.raises(StorageError):
            FileStorage(str(path)).get_item("cart")

    def test_unreadable_file_is_replaced_on_write(self, tmp_path):
        path = tmp_path / "storage.json"
        path.write_text("not json")

        FileStorage(str(path)).set_item("cart", "[]")
        assert json.loads(path.read_text()) == {"cart": "[]"}


class TestCartOnFileStorage:
    def test_cart_survives_restart(self, tmp_path):
        path = str(tmp_path / "storage.json")
        cart = CartStore(FileStorage(path))
        cart.add_item(product_ref(id="a", price=50.0), 2)

        restored = CartStore(FileStorage(path))
        assert restored.items == cart.items
        assert restored.total == 100.0

    def test_unreadable_file_gives_empty_cart(self, tmp_path):
        path = tmp_path / "storage.json"
        path.write_text("{broken")

        cart = CartStore(FileStorage(str(path)))
        assert cart.is_empty
        assert cart.notifier.last.title == "Cart Error"

    def test_last_write_wins_across_sessions(self, tmp_path):
        path = str(tmp_path / "storage.json")
        first = CartStore(FileStorage(path))
        second = CartStore(FileStorage(path))

        first.add_item(product_ref(id="a"))
        second.add_item(product_ref(id="b"))

        restored = CartStore(FileStorage(path))
        assert [line.product_id for line in restored.items] == ["b"]
