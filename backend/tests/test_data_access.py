"""Tests for the data access facade: owner scoping, fallback and validation."""

import pytest
from postgrest.exceptions import APIError

from blvckwall.db import SupabaseRecordStore
from blvckwall.errors import NotFound, StoreUnavailable, Unauthorized, ValidationError
from blvckwall.models.categories import Category
from blvckwall.services.data_access import DataAccessFacade, StorageMode
from blvckwall.services.session import DEMO_OWNER

from conftest import PASSWORD
from test_db import MockClient, MockQueryBuilder

AGENT = {"name": "Dr. Smith", "voice": "serena", "greeting": "Hello"}


class BrokenLocalRecords:
    def _fail(self, *args, **kwargs):
        raise StoreUnavailable("local disk full")

    list = get = insert = update = delete = _fail


class TestStorageMode:
    def test_demo_owner_is_local(self, facade):
        assert facade.sessions.resolve_owner_or_demo() == DEMO_OWNER
        assert facade.storage_mode(DEMO_OWNER) == StorageMode.LOCAL_DEMO

    def test_demo_owner_never_touches_remote(self, facade, remote):
        record = facade.create(Category.AGENTS, AGENT)
        assert remote.tables.get("agents", {}) == {}
        assert record["user_id"] == DEMO_OWNER.id

    def test_authenticated_owner_writes_remote(self, facade, sessions, remote, records):
        owner = sessions.login("u1@example.com", PASSWORD)
        record = facade.create(Category.AGENTS, AGENT)
        assert remote.get(owner.id, Category.AGENTS, record["id"])["name"] == "Dr. Smith"
        assert records.list(owner.id, Category.AGENTS) == []


class TestValidation:
    def test_create_reports_every_violation(self, facade):
        with pytest.raises(ValidationError) as exc:
            facade.create(Category.AGENTS, {"greeting": "x" * 501, "temperature": 2})
        violations = exc.value.violations
        assert any("'name'" in v for v in violations)
        assert any("'voice'" in v for v in violations)
        assert any("'greeting'" in v for v in violations)
        assert any("'temperature'" in v for v in violations)

    def test_validation_happens_before_any_store(self, sessions, remote):
        sessions.login("u1@example.com", PASSWORD)
        facade = DataAccessFacade(sessions, remote, BrokenLocalRecords())
        remote.available = False
        with pytest.raises(ValidationError):
            facade.create(Category.AGENTS, {"name": ""})

    def test_unknown_fields_are_rejected_before_any_store(self, sessions, remote):
        sessions.login("u1@example.com", PASSWORD)
        facade = DataAccessFacade(sessions, remote, BrokenLocalRecords())
        remote.available = False
        with pytest.raises(ValidationError) as exc:
            facade.create(Category.AGENTS, {**AGENT, "nickname": "Doc"})
        assert exc.value.violations == ["Unknown field 'nickname'"]
        with pytest.raises(ValidationError):
            facade.update(Category.AGENTS, "any", {"nickname": "Doc"})

    def test_unknown_filters_are_rejected(self, facade):
        with pytest.raises(ValidationError) as exc:
            facade.list(Category.AGENTS, {"nickname": "Doc"})
        assert exc.value.violations == ["Cannot filter on unknown field 'nickname'"]
        assert facade.list(Category.AGENTS, {"voice": "serena", "id": "x"}) == []

    def test_remote_schema_error_is_not_an_outage(self, sessions, records):
        owner = sessions.login("u1@example.com", PASSWORD)
        error = APIError({"message": "Could not find the 'greeting' column", "code": "PGRST204",
                          "hint": None, "details": None})
        remote = SupabaseRecordStore(MockClient(MockQueryBuilder(error=error)))
        facade = DataAccessFacade(sessions, remote, records)
        with pytest.raises(ValidationError):
            facade.create(Category.AGENTS, AGENT)
        assert records.list(owner.id, Category.AGENTS) == []

    def test_unknown_category(self, facade):
        with pytest.raises(ValidationError):
            facade.list("invoices")

    def test_phone_provider_choices(self, facade):
        with pytest.raises(ValidationError) as exc:
            facade.create(Category.PHONE_NUMBERS, {"phone_number": "+15550100", "provider": "twilio"})
        assert exc.value.violations == ["Field 'provider' must be one of: retell, elevenlabs"]

    def test_update_may_omit_but_not_blank_required(self, facade):
        record = facade.create(Category.AGENTS, AGENT)
        assert facade.update(Category.AGENTS, record["id"], {"greeting": "Hi"})["greeting"] == "Hi"
        with pytest.raises(ValidationError):
            facade.update(Category.AGENTS, record["id"], {"name": "  "})

    def test_reserved_fields_are_ignored(self, facade):
        record = facade.create(Category.AGENTS, {**AGENT, "user_id": "someone-else", "version": 9})
        assert record["user_id"] == DEMO_OWNER.id
        assert record["version"] == 1


class TestOwnerIsolation:
    def test_owners_never_see_each_other(self, facade, sessions):
        sessions.login("u1@example.com", PASSWORD)
        mine = facade.create(Category.AGENTS, AGENT)
        sessions.logout()

        sessions.login("u2@example.com", PASSWORD)
        assert facade.list(Category.AGENTS) == []
        with pytest.raises(NotFound):
            facade.get(Category.AGENTS, mine["id"])
        assert facade.delete(Category.AGENTS, mine["id"]) is False

    def test_isolation_holds_on_local_fallback(self, facade, sessions, remote):
        remote.available = False
        sessions.login("u1@example.com", PASSWORD)
        mine = facade.create(Category.AGENTS, AGENT)
        sessions.logout()

        sessions.login("u2@example.com", PASSWORD)
        assert facade.list(Category.AGENTS) == []
        with pytest.raises(NotFound):
            facade.get(Category.AGENTS, mine["id"])

    def test_demo_records_stay_out_of_real_owner(self, facade, sessions):
        facade.create(Category.AGENTS, AGENT)
        sessions.login("u1@example.com", PASSWORD)
        assert facade.list(Category.AGENTS) == []

    def test_demo_owner_cannot_touch_data_exports(self, facade):
        with pytest.raises(Unauthorized):
            facade.create(Category.DATA_EXPORTS, {"export_type": "csv"})
        with pytest.raises(Unauthorized):
            facade.list(Category.DATA_EXPORTS)

    def test_real_owner_can_request_exports(self, facade, sessions):
        sessions.login("u1@example.com", PASSWORD)
        record = facade.create(Category.DATA_EXPORTS, {"export_type": "csv"})
        assert facade.get(Category.DATA_EXPORTS, record["id"])["export_type"] == "csv"


class TestFallback:
    def test_remote_outage_falls_back_to_local(self, facade, sessions, remote, records):
        owner = sessions.login("u1@example.com", PASSWORD)
        remote.available = False
        record = facade.create(Category.AGENTS, AGENT)
        assert records.get(owner.id, Category.AGENTS, record["id"])["name"] == "Dr. Smith"
        assert facade.list(Category.AGENTS)[0]["id"] == record["id"]

    def test_not_found_does_not_fall_back(self, facade, sessions, records):
        owner = sessions.login("u1@example.com", PASSWORD)
        local_only = records.insert(owner.id, Category.AGENTS, AGENT)
        with pytest.raises(NotFound):
            facade.get(Category.AGENTS, local_only["id"])

    def test_same_state_gives_same_answer(self, facade, sessions, remote):
        sessions.login("u1@example.com", PASSWORD)
        facade.create(Category.AGENTS, AGENT)
        first = facade.list(Category.AGENTS)
        assert facade.list(Category.AGENTS) == first

        remote.available = False
        facade.create(Category.AGENTS, {**AGENT, "name": "Offline"})
        offline = facade.list(Category.AGENTS)
        assert [r["name"] for r in offline] == ["Offline"]
        assert facade.list(Category.AGENTS) == offline

    def test_lists_are_never_merged(self, facade, sessions, remote):
        sessions.login("u1@example.com", PASSWORD)
        remote.available = False
        facade.create(Category.AGENTS, {**AGENT, "name": "Offline"})
        remote.available = True
        facade.create(Category.AGENTS, {**AGENT, "name": "Online"})
        assert [r["name"] for r in facade.list(Category.AGENTS)] == ["Online"]


class TestDelete:
    def test_delete_is_idempotent(self, facade, sessions):
        sessions.login("u1@example.com", PASSWORD)
        record = facade.create(Category.AGENTS, AGENT)
        assert facade.delete(Category.AGENTS, record["id"]) is True
        assert facade.delete(Category.AGENTS, record["id"]) is False
        with pytest.raises(NotFound):
            facade.get(Category.AGENTS, record["id"])

    def test_delete_removes_copies_from_both_stores(self, facade, sessions, remote, records):
        owner = sessions.login("u1@example.com", PASSWORD)
        remote.available = False
        offline = facade.create(Category.AGENTS, AGENT)
        remote.available = True
        remote.insert(owner.id, Category.AGENTS, {**AGENT, "id": offline["id"]})

        assert facade.delete(Category.AGENTS, offline["id"]) is True
        with pytest.raises(NotFound):
            records.get(owner.id, Category.AGENTS, offline["id"])
        with pytest.raises(NotFound):
            remote.get(owner.id, Category.AGENTS, offline["id"])

    def test_delete_survives_remote_outage(self, facade, sessions, remote):
        sessions.login("u1@example.com", PASSWORD)
        remote.available = False
        record = facade.create(Category.AGENTS, AGENT)
        assert facade.delete(Category.AGENTS, record["id"]) is True

    def test_delete_fails_when_no_store_reachable(self, sessions, remote):
        sessions.login("u1@example.com", PASSWORD)
        remote.available = False
        facade = DataAccessFacade(sessions, remote, BrokenLocalRecords())
        with pytest.raises(StoreUnavailable):
            facade.delete(Category.AGENTS, "any")


class TestScenarios:
    def test_new_agent_is_listed_first(self, facade, sessions):
        sessions.login("u1@example.com", PASSWORD)
        facade.create(Category.AGENTS, {**AGENT, "name": "Dr. Jones"})
        created = facade.create(Category.AGENTS, AGENT)

        listed = facade.list(Category.AGENTS)
        assert listed[0]["id"] == created["id"]
        assert listed[0]["name"] == "Dr. Smith"
        assert listed[0]["version"] == 1

    def test_offline_records_survive_logout_and_login(self, facade, sessions, remote):
        remote.available = False
        sessions.login("u2@example.com", PASSWORD)
        record = facade.create(Category.KNOWLEDGE_BASES, {"name": "Clinic FAQ"})
        sessions.logout()
        assert facade.sessions.resolve_owner_or_demo() == DEMO_OWNER

        sessions.login("u2@example.com", PASSWORD)
        assert facade.get(Category.KNOWLEDGE_BASES, record["id"])["name"] == "Clinic FAQ"

    def test_logout_with_clear_local_wipes_owner_data(self, facade, sessions, remote):
        remote.available = False
        sessions.login("u2@example.com", PASSWORD)
        record = facade.create(Category.KNOWLEDGE_BASES, {"name": "Clinic FAQ"})
        sessions.logout(clear_local=True)

        sessions.login("u2@example.com", PASSWORD)
        with pytest.raises(NotFound):
            facade.get(Category.KNOWLEDGE_BASES, record["id"])


def test_log_activity(facade):
    entry = facade.log_activity("agent_deployed", "Agent deployed", metadata={"id": "a1"})
    assert entry["is_read"] is False
    assert facade.list(Category.ACTIVITY_FEED)[0]["metadata"] == {"id": "a1"}
