"""Tests for the encrypted local store and its key-value backends."""

import pytest

from blvckwall.errors import DecryptionError, NotFound
from blvckwall.models.categories import Category, LOCAL_KEY_PREFIX
from blvckwall.services.crypto import EncryptionCodec
from blvckwall.services.local_backends import InMemoryKeyValueBackend, SqliteKeyValueBackend
from blvckwall.services.local_store import LocalDurableStore, LocalRecordStore


class TestEncryptionCodec:
    def test_round_trip(self, codec):
        payload = {"name": "Dr. Smith", "tags": ["a", "b"], "score": 0.5}
        token = codec.encrypt(payload, "owner-1")
        assert token.startswith("v1.")
        assert "Dr. Smith" not in token
        assert codec.decrypt(token, "owner-1") == payload

    def test_key_is_generated_once_per_owner(self, codec, kv_backend):
        codec.encrypt({"x": 1}, "owner-1")
        stored = kv_backend.get_item("owner-1", codec.key_name("owner-1"))
        codec.encrypt({"x": 2}, "owner-1")
        assert kv_backend.get_item("owner-1", codec.key_name("owner-1")) == stored
        assert len(bytes.fromhex(stored)) == 16

    def test_foreign_owner_cannot_decrypt(self, codec):
        token = codec.encrypt({"secret": True}, "owner-1")
        with pytest.raises(DecryptionError):
            codec.decrypt(token, "owner-2")

    def test_foreign_key_cannot_decrypt(self, codec):
        token = codec.encrypt({"secret": True}, "owner-1")
        other = EncryptionCodec(InMemoryKeyValueBackend())
        with pytest.raises(DecryptionError):
            other.decrypt(token, "owner-1")

    @pytest.mark.parametrize("token", ["", "v2.abcd", "v1.", "v1.%%%%", "v1.AAAA", "plaintext"])
    def test_corrupt_tokens(self, codec, token):
        with pytest.raises(DecryptionError):
            codec.decrypt(token, "owner-1")

    def test_forget_reloads_key_from_backend(self, codec):
        token = codec.encrypt({"x": 1}, "owner-1")
        codec.forget("owner-1")
        assert codec.decrypt(token, "owner-1") == {"x": 1}

    def test_destroy_key_makes_old_data_unreadable(self, codec):
        token = codec.encrypt({"x": 1}, "owner-1")
        codec.destroy_key("owner-1")
        with pytest.raises(DecryptionError):
            codec.decrypt(token, "owner-1")


class TestLocalDurableStore:
    def test_storage_key_layout(self):
        key = LocalDurableStore.storage_key("u1", Category.AGENTS, "abc")
        assert key == f"{LOCAL_KEY_PREFIX}u1_agents_abc"

    def test_values_are_encrypted_at_rest(self, local_store, kv_backend):
        local_store.set("u1", Category.AGENTS, "a1", {"name": "Dr. Smith"})
        raw = kv_backend.get_item("u1", local_store.storage_key("u1", Category.AGENTS, "a1"))
        assert raw.startswith("v1.")
        assert "Dr. Smith" not in raw
        assert local_store.get("u1", Category.AGENTS, "a1") == {"name": "Dr. Smith"}

    def test_unreadable_entry_reads_as_absent(self, local_store, kv_backend):
        kv_backend.set_item("u1", local_store.storage_key("u1", Category.AGENTS, "bad"), "v1.garbage")
        assert local_store.get("u1", Category.AGENTS, "bad") is None

    @pytest.mark.parametrize("stored_key", ["not-hex", "abcd", "00" * 32])
    def test_corrupt_key_material_reads_as_absent(self, local_store, kv_backend, stored_key):
        local_store.set("u1", Category.AGENTS, "a1", {"name": "Dr. Smith"})
        kv_backend.set_item("u1", local_store.codec.key_name("u1"), stored_key)
        local_store.codec.forget("u1")
        assert local_store.get("u1", Category.AGENTS, "a1") is None

    def test_corrupt_key_material_is_a_decryption_error(self, codec, kv_backend):
        kv_backend.set_item("u1", codec.key_name("u1"), "not-hex")
        with pytest.raises(DecryptionError):
            codec.encrypt({"x": 1}, "u1")

    def test_keys_are_scoped_by_category(self, local_store):
        local_store.set("u1", Category.AGENTS, "a1", {})
        local_store.set("u1", Category.KNOWLEDGE_BASES, "k1", {})
        assert local_store.keys("u1", Category.AGENTS) == ["a1"]
        assert local_store.keys("u1", Category.KNOWLEDGE_BASES) == ["k1"]

    def test_clear_only_touches_one_owner(self, local_store):
        local_store.set("u1", Category.AGENTS, "a1", {"n": 1})
        local_store.set("u2", Category.AGENTS, "a2", {"n": 2})
        assert local_store.clear("u1") == 2  # record + encryption key
        assert local_store.keys("u1", Category.AGENTS) == []
        assert local_store.get("u2", Category.AGENTS, "a2") == {"n": 2}


class TestLocalRecordStore:
    def test_insert_assigns_store_fields(self, records):
        record = records.insert("u1", Category.AGENTS, {"name": "A", "voice": "serena", "user_id": "spoofed"})
        assert record["user_id"] == "u1"
        assert record["version"] == 1
        assert record["id"]
        assert records.get("u1", Category.AGENTS, record["id"]) == record

    def test_update_bumps_version_and_keeps_identity(self, records):
        record = records.insert("u1", Category.AGENTS, {"name": "A", "voice": "serena"})
        updated = records.update("u1", Category.AGENTS, record["id"], {"name": "B"})
        assert updated["name"] == "B"
        assert updated["voice"] == "serena"
        assert updated["version"] == 2
        assert updated["created_at"] == record["created_at"]

    def test_list_filters(self, records):
        records.insert("u1", Category.AGENTS, {"name": "A", "voice": "serena"})
        records.insert("u1", Category.AGENTS, {"name": "B", "voice": "morgan"})
        names = [r["name"] for r in records.list("u1", Category.AGENTS, {"voice": "morgan"})]
        assert names == ["B"]

    def test_filters_cast_query_strings_to_stored_type(self, records):
        records.insert("u1", Category.AGENTS, {"name": "A", "voice": "serena", "temperature": 0.7})
        records.insert("u1", Category.ACTIVITY_FEED, {"activity_type": "x", "title": "t", "is_read": False})
        assert len(records.list("u1", Category.AGENTS, {"temperature": "0.7"})) == 1
        assert records.list("u1", Category.AGENTS, {"temperature": "0.5"}) == []
        assert records.list("u1", Category.AGENTS, {"temperature": "warm"}) == []
        assert len(records.list("u1", Category.ACTIVITY_FEED, {"is_read": "false"})) == 1
        assert records.list("u1", Category.ACTIVITY_FEED, {"is_read": "true"}) == []

    def test_missing_records_raise_not_found(self, records):
        with pytest.raises(NotFound):
            records.get("u1", Category.AGENTS, "nope")
        with pytest.raises(NotFound):
            records.update("u1", Category.AGENTS, "nope", {"name": "x"})
        with pytest.raises(NotFound):
            records.delete("u1", Category.AGENTS, "nope")

    def test_other_owner_sees_nothing(self, records):
        record = records.insert("u1", Category.AGENTS, {"name": "A", "voice": "serena"})
        assert records.list("u2", Category.AGENTS) == []
        with pytest.raises(NotFound):
            records.get("u2", Category.AGENTS, record["id"])


class TestSqliteKeyValueBackend:
    @pytest.fixture
    def backend(self, tmp_path):
        backend = SqliteKeyValueBackend(str(tmp_path / "local.db"))
        yield backend
        backend.close()

    def test_basic_operations(self, backend):
        backend.set_item("u1", "k1", "v1")
        backend.set_item("u1", "k1", "v2")
        backend.set_item("u1", "other", "x")
        assert backend.get_item("u1", "k1") == "v2"
        assert backend.keys("u1", "k") == ["k1"]
        assert backend.remove_item("u1", "k1") is True
        assert backend.remove_item("u1", "k1") is False
        assert backend.get_item("u1", "k1") is None

    def test_owner_prefix_collision(self, backend):
        backend.set_item("u1", "a", "1")
        backend.set_item("u10", "a", "2")
        assert backend.remove_owner("u1") == 1
        assert backend.get_item("u10", "a") == "2"

    def test_data_survives_reopen(self, tmp_path):
        path = str(tmp_path / "local.db")
        first = SqliteKeyValueBackend(path)
        store = LocalDurableStore(first)
        store.set("u1", Category.AGENTS, "a1", {"name": "Dr. Smith"})
        first.close()

        second = SqliteKeyValueBackend(path)
        try:
            assert LocalDurableStore(second).get("u1", Category.AGENTS, "a1") == {"name": "Dr. Smith"}
        finally:
            second.close()
