"""Tests for sampro.core.store.facade — DataStore CRUD and id generation."""

from __future__ import annotations

import json
import re
from pathlib import Path

import pytest
from pydantic import ValidationError

from sampro.core.constants import APP_DATA_KEY
from sampro.core.exceptions import ConstraintError, InvalidDocumentError
from sampro.core.models import AppData, Collection, Color, DailyReport, Permissions, User, seed_document
from sampro.core.store import DataStore, FileStorage, next_id, timestamp_id
from tests.conftest import FailingStorage, RecordingStorage


@pytest.fixture
def data_store(storage: RecordingStorage) -> DataStore:
    return DataStore.open(storage)


def _stored(storage: RecordingStorage) -> dict:
    return json.loads(storage.get_item(APP_DATA_KEY))


# ---------------------------------------------------------------------------
# Identifiers
# ---------------------------------------------------------------------------


class TestNextId:
    def test_after_highest(self) -> None:
        assert next_id("C", ["C001", "C002", "C005"]) == "C006"

    def test_empty(self) -> None:
        assert next_id("C", []) == "C001"

    def test_multi_letter_prefix(self) -> None:
        assert next_id("CAT", ["CAT001", "CAT002"]) == "CAT003"

    def test_ids_with_other_prefix_ignored(self) -> None:
        assert next_id("M", ["MT001", "MT007", "M004"]) == "M005"

    def test_non_numeric_suffix_ignored(self) -> None:
        assert next_id("C", ["Cx", "C", "C002"]) == "C003"

    def test_pads_to_three_but_grows(self) -> None:
        assert next_id("S", ["S999"]) == "S1000"

    def test_timestamp_id(self) -> None:
        assert re.fullmatch(r"DR-\d{13}", timestamp_id("DR-"))


# ---------------------------------------------------------------------------
# Open
# ---------------------------------------------------------------------------


class TestOpen:
    def test_first_run_writes_seed(self, storage: RecordingStorage) -> None:
        data_store = DataStore.open(storage)
        assert data_store.data == seed_document()
        assert storage.writes == [APP_DATA_KEY]
        assert _stored(storage)["users"][0]["username"] == "admin"

    def test_second_open_does_not_write(self, storage: RecordingStorage) -> None:
        DataStore.open(storage)
        DataStore.open(storage)
        assert storage.writes == [APP_DATA_KEY]

    def test_legacy_document_is_migrated_before_load(self, legacy_storage: RecordingStorage) -> None:
        data_store = DataStore.open(legacy_storage)
        assert [i.id for i in data_store.data.items] == ["F1"]
        report = data_store.data.daily_reports[0]
        assert report.item_id == "F1"
        assert report.materials_used[0].material_type_id == "MT1"
        assert report.materials_used[0].quantity_used == 5

    def test_null_fabrics_do_not_erase_items(self) -> None:
        raw = json.dumps({"fabrics": None, "items": [{"id": "I1", "name": "Linen"}]})
        storage = RecordingStorage({APP_DATA_KEY: raw})
        data_store = DataStore.open(storage)
        assert [i.id for i in data_store.data.items] == ["I1"]
        assert not data_store.read_only
        assert "fabrics" not in _stored(storage)

    def test_corrupt_document_falls_back_to_seed_untouched(self) -> None:
        storage = RecordingStorage({APP_DATA_KEY: "{broken"})
        data_store = DataStore.open(storage)
        assert data_store.data == seed_document()
        assert storage.get_item(APP_DATA_KEY) == "{broken"
        assert storage.writes == []

    def test_null_fields_load_and_survive_a_write(self) -> None:
        users = [{"id": "U007", "name": "Ops", "username": "ops", "password": "pw", "permissions": {"canEdit": True}}]
        settings = {"companyName": "Nile Mills", "logoUrl": None}
        report = {"id": "D1", "itemId": "I1", "colorId": None, "materialsUsed": None, "quantitySold": None}
        storage = RecordingStorage(
            {APP_DATA_KEY: json.dumps({"dailyReports": [report], "users": users, "settings": settings})}
        )
        data_store = DataStore.open(storage)
        assert not data_store.read_only
        loaded = data_store.data.daily_reports[0]
        assert (loaded.color_id, loaded.materials_used, loaded.quantity_sold) == ("", [], 0)

        data_store.upsert(Collection.COLORS, {"id": "C001", "name": "Red"})
        stored = _stored(storage)
        assert stored["users"][0]["username"] == "ops"
        assert stored["users"][0]["password"] == "pw"
        assert stored["settings"]["companyName"] == "Nile Mills"
        assert stored["dailyReports"][0]["itemId"] == "I1"

    def test_wrong_shape_is_kept_and_locks_writes(self) -> None:
        raw = json.dumps({"colors": "not a list", "users": [{"id": "U007", "username": "ops"}]})
        storage = RecordingStorage({APP_DATA_KEY: raw})
        data_store = DataStore.open(storage)
        assert data_store.read_only
        assert data_store.data == seed_document()
        with pytest.raises(InvalidDocumentError):
            data_store.upsert(Collection.COLORS, {"id": "C009", "name": "Green"})
        with pytest.raises(InvalidDocumentError):
            data_store.update_settings(company_name="X")
        assert storage.get_item(APP_DATA_KEY) == raw
        assert storage.writes == []

    def test_replace_unlocks_a_wrong_shape(self) -> None:
        storage = RecordingStorage({APP_DATA_KEY: json.dumps({"colors": "not a list"})})
        data_store = DataStore.open(storage)
        data_store.replace(seed_document())
        assert not data_store.read_only
        assert _stored(storage)["colors"][0]["id"] == "C001"
        data_store.upsert(Collection.COLORS, {"id": "C009", "name": "Green"})
        assert storage.writes == [APP_DATA_KEY, APP_DATA_KEY]

    def test_missing_collections_default(self) -> None:
        storage = RecordingStorage({APP_DATA_KEY: json.dumps({"colors": [{"id": "C001", "name": "Red"}]})})
        data = DataStore.open(storage).data
        assert data.colors == [Color(id="C001", name="Red")]
        assert data.daily_reports == []
        assert data.users[0].username == "admin"

    def test_unknown_keys_survive_a_write(self) -> None:
        storage = RecordingStorage({APP_DATA_KEY: json.dumps({"extraThing": {"a": 1}})})
        data_store = DataStore.open(storage)
        data_store.upsert(Collection.COLORS, {"id": "C001", "name": "Red"})
        assert _stored(storage)["extraThing"] == {"a": 1}


# ---------------------------------------------------------------------------
# Upsert
# ---------------------------------------------------------------------------


class TestUpsert:
    def test_appends_new_record(self, data_store: DataStore, storage: RecordingStorage) -> None:
        data_store.upsert(Collection.COLORS, Color(id="C003", name="Green"))
        assert [c.id for c in data_store.data.colors] == ["C001", "C002", "C003"]
        assert _stored(storage)["colors"][-1] == {"id": "C003", "name": "Green"}

    def test_replaces_in_place(self, data_store: DataStore) -> None:
        data_store.upsert(Collection.COLORS, {"id": "C001", "name": "Crimson"})
        assert [(c.id, c.name) for c in data_store.data.colors] == [("C001", "Crimson"), ("C002", "أزرق")]

    def test_one_write_per_mutation(self, data_store: DataStore, storage: RecordingStorage) -> None:
        before = len(storage.writes)
        data_store.upsert(Collection.SIZES, {"id": "S003", "name": "Small"})
        data_store.delete(Collection.SIZES, "S003")
        assert len(storage.writes) == before + 2

    def test_returns_new_snapshot_and_keeps_old(self, data_store: DataStore) -> None:
        old = data_store.data
        new = data_store.upsert(Collection.COLORS, {"id": "C009", "name": "Black"})
        assert new is data_store.data
        assert new is not old
        assert len(old.colors) == 2
        assert len(new.colors) == 3

    def test_snapshots_are_frozen(self, data_store: DataStore) -> None:
        with pytest.raises(ValidationError):
            data_store.data.colors[0].name = "changed"  # type: ignore[misc]

    def test_missing_id_rejected(self, data_store: DataStore) -> None:
        with pytest.raises(ConstraintError, match="id is required"):
            data_store.upsert(Collection.COLORS, {"id": "", "name": "Nameless"})

    def test_invalid_record_rejected(self, data_store: DataStore) -> None:
        with pytest.raises(ConstraintError, match="Invalid dailyReports record"):
            data_store.upsert(Collection.DAILY_REPORTS, {"id": "DR-1", "materialsUsed": "lots"})

    def test_wrong_type_rejected(self, data_store: DataStore) -> None:
        with pytest.raises(TypeError):
            data_store.upsert(Collection.COLORS, 42)  # type: ignore[arg-type]

    def test_report_round_trip(self, data_store: DataStore, storage: RecordingStorage) -> None:
        report = DailyReport.model_validate(
            {
                "id": "DR-1",
                "reportDate": "2024-06-01",
                "itemId": "I001",
                "materialsUsed": [{"materialTypeId": "MT001", "quantityUsed": 12.5}],
                "quantityManufactured": 40,
                "quantitySold": 15,
            }
        )
        data_store.upsert(Collection.DAILY_REPORTS, report)
        stored = _stored(storage)["dailyReports"][0]
        assert stored["materialsUsed"] == [{"materialTypeId": "MT001", "quantityUsed": 12.5}]
        assert "balance" not in stored
        reloaded = DataStore(storage).get(Collection.DAILY_REPORTS, "DR-1")
        assert reloaded.balance == 25

    def test_write_failure_keeps_change_in_memory(self, failing_storage: FailingStorage) -> None:
        data_store = DataStore.open(failing_storage)
        data_store.upsert(Collection.COLORS, {"id": "C003", "name": "Green"})
        assert data_store.last_write_ok is False
        assert data_store.get(Collection.COLORS, "C003") is not None


class TestUsers:
    def test_duplicate_username_rejected(self, data_store: DataStore) -> None:
        with pytest.raises(ConstraintError, match="already taken"):
            data_store.upsert(Collection.USERS, {"id": "U-2", "name": "Other", "username": "admin", "password": "x"})

    def test_same_user_may_keep_username(self, data_store: DataStore) -> None:
        data_store.upsert(Collection.USERS, {"id": "U001", "name": "Boss", "username": "admin"})
        assert data_store.data.users[0].name == "Boss"

    def test_edit_without_password_keeps_stored_one(self, data_store: DataStore) -> None:
        data_store.upsert(Collection.USERS, {"id": "U001", "name": "Boss", "username": "admin"})
        assert data_store.data.users[0].password == "admin"

    def test_edit_with_password_replaces_it(self, data_store: DataStore) -> None:
        data_store.upsert(Collection.USERS, {"id": "U001", "name": "Boss", "username": "admin", "password": "s3cret"})
        assert data_store.data.users[0].password == "s3cret"

    def test_new_user_appended(self, data_store: DataStore) -> None:
        user = User(id="U-2", name="Clerk", username="clerk", password="pw", permissions=Permissions(can_add=True))
        data_store.upsert(Collection.USERS, user)
        assert [u.username for u in data_store.data.users] == ["admin", "clerk"]


# ---------------------------------------------------------------------------
# Delete / replace / settings
# ---------------------------------------------------------------------------


class TestDelete:
    def test_removes_record(self, data_store: DataStore) -> None:
        data_store.delete(Collection.COLORS, "C001")
        assert [c.id for c in data_store.data.colors] == ["C002"]

    def test_missing_id_is_no_op(self, data_store: DataStore, storage: RecordingStorage) -> None:
        before = data_store.data
        writes = len(storage.writes)
        assert data_store.delete(Collection.COLORS, "C999") is before
        assert len(storage.writes) == writes

    def test_last_user_cannot_be_deleted(self, data_store: DataStore) -> None:
        with pytest.raises(ConstraintError, match="last remaining user"):
            data_store.delete(Collection.USERS, "U001")
        assert len(data_store.data.users) == 1

    def test_user_deleted_when_others_remain(self, data_store: DataStore) -> None:
        data_store.upsert(Collection.USERS, {"id": "U-2", "name": "Clerk", "username": "clerk", "password": "pw"})
        data_store.delete(Collection.USERS, "U001")
        assert [u.id for u in data_store.data.users] == ["U-2"]

    def test_reports_keep_dangling_references(self, data_store: DataStore) -> None:
        data_store.upsert(
            Collection.DAILY_REPORTS,
            {"id": "DR-1", "itemId": "I001", "materialsUsed": [{"materialTypeId": "MT001", "quantityUsed": 1}]},
        )
        data_store.delete(Collection.ITEMS, "I001")
        assert data_store.get(Collection.DAILY_REPORTS, "DR-1").item_id == "I001"


class TestReplaceAndSettings:
    def test_replace(self, data_store: DataStore, storage: RecordingStorage) -> None:
        incoming = AppData(users=[User(id="U9", name="N", username="n", password="p")])
        data_store.replace(incoming)
        assert data_store.data is incoming
        assert _stored(storage)["users"][0]["id"] == "U9"

    def test_replace_without_users_rejected(self, data_store: DataStore) -> None:
        with pytest.raises(ConstraintError):
            data_store.replace(AppData(users=[]))

    def test_update_settings(self, data_store: DataStore, storage: RecordingStorage) -> None:
        data_store.update_settings(company_name="Nile Mills")
        assert data_store.data.settings.company_name == "Nile Mills"
        assert _stored(storage)["settings"]["companyName"] == "Nile Mills"
        assert data_store.data.settings.manager_name == "المدير العام"


class TestMasterIds:
    def test_next_master_id(self, data_store: DataStore) -> None:
        assert data_store.next_master_id(Collection.COLORS) == "C003"
        assert data_store.next_master_id(Collection.CATEGORIES) == "CAT003"
        assert data_store.next_master_id(Collection.MATERIAL_TYPES) == "MT002"

    def test_next_master_id_for_non_master_rejected(self, data_store: DataStore) -> None:
        with pytest.raises(ValueError):
            data_store.next_master_id(Collection.USERS)


class TestSubscribe:
    def test_subscriber_sees_each_mutation(self, data_store: DataStore) -> None:
        seen: list[AppData] = []
        unsubscribe = data_store.subscribe(seen.append)
        data_store.upsert(Collection.COLORS, {"id": "C003", "name": "Green"})
        unsubscribe()
        data_store.delete(Collection.COLORS, "C003")
        assert len(seen) == 1
        assert seen[0].colors[-1].id == "C003"


class TestFileBacked:
    def test_persists_across_instances(self, tmp_path: Path) -> None:
        DataStore.open(FileStorage(tmp_path)).upsert(Collection.SEASONS, {"id": "SE003", "name": "ربيع"})
        reopened = DataStore.open(FileStorage(tmp_path))
        assert reopened.get(Collection.SEASONS, "SE003").name == "ربيع"
