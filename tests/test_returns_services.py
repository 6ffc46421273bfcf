"""
Unit tests for the returns services: toggle, deposits, weekly filtering and the upsert.
"""
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
from fastapi import HTTPException
from firebase_admin import firestore

from sales_dashboard.common.dates import week_window
from sales_dashboard.common.firebase import HISTORY_COLLECTION, RETURNS_COLLECTION, collection_path
from sales_dashboard.returns.constants import ADD_TO_RETURNS_FAILED_MESSAGE, ADDED_TO_RETURNS_ACTION
from sales_dashboard.returns.schemas import ReturnRecord
from sales_dashboard.returns.services import (
    add_to_returns,
    build_return_payload,
    count_returns,
    filter_returns,
    get_returns_week,
    parse_deposit,
    save_deposit,
    save_toggle,
    toggle_returned,
)

REFERENCE = datetime(2025, 1, 8, 12, 0)


@pytest.fixture
def sale():
    return {
        "id": "sale-1",
        "itemName": "Motor 1.9 TDI",
        "note": "starý motor vrátit",
        "seller": "Petr",
        "sellingPriceCzk": "12500",
        "purchasePricePln": 900,
        "deliveryCity": "Brno",
        "customerAddress": "Husova 1",
        "customerContact": "420123456789",
        "saleDate": "2025-01-07",
    }


class TestToggleReturned:

    def test_false_to_true_sets_returned_at(self):
        now = datetime(2025, 1, 8, 10, 0, tzinfo=timezone.utc)
        patch_ = toggle_returned({"id": "r1", "returned": False}, now=now)
        assert patch_.returned is True
        assert patch_.returnedAt == now
        assert patch_.to_firestore()["returnedAt"] is firestore.firestore.SERVER_TIMESTAMP

    def test_true_to_false_clears_returned_at(self):
        patch_ = toggle_returned({"id": "r1", "returned": True, "returnedAt": datetime.now(timezone.utc)})
        assert patch_.returned is False
        assert patch_.returnedAt is None
        assert patch_.to_firestore()["returnedAt"] is firestore.firestore.DELETE_FIELD

    def test_missing_flag_counts_as_not_returned(self):
        assert toggle_returned({"id": "r1"}).returned is True

    def test_default_timestamp_is_aware(self):
        patch_ = toggle_returned({"id": "r1", "returned": False})
        assert patch_.returnedAt is not None
        assert patch_.returnedAt.tzinfo is not None

    def test_toggling_twice_restores_initial_state(self):
        record = {"id": "r1", "returned": False}
        first = toggle_returned(record)
        record = {**record, **first.model_dump()}
        second = toggle_returned(record)
        assert second.returned is False
        assert second.returnedAt is None
        assert second.to_firestore()["returnedAt"] is firestore.firestore.DELETE_FIELD


class TestParseDeposit:

    @pytest.mark.parametrize("raw, expected", [
        ("1,5", 1.5),
        ("1.5", 1.5),
        (" 250 ", 250.0),
        ("abc", 0.0),
        ("", 0.0),
        (None, 0.0),
        (300, 300.0),
        ("inf", 0.0),
        ("nan", 0.0),
        ("1_000", 0.0),
        ("1_5", 0.0),
    ])
    def test_parse(self, raw, expected):
        assert parse_deposit(raw) == expected


class TestWeeklyReturns:

    @pytest.fixture
    def returns(self):
        return [
            {"id": "r1", "itemName": "A", "returned": True,
             "createdAt": datetime(2025, 1, 7, 9, 0, tzinfo=timezone.utc)},
            {"id": "r2", "itemName": "B",
             "createdAt": datetime(2025, 1, 9, 9, 0, tzinfo=timezone.utc)},
            {"id": "r3", "itemName": "C", "saleDate": "2025-01-10"},
            {"id": "r4", "itemName": "D",
             "createdAt": datetime(2025, 1, 2, 9, 0, tzinfo=timezone.utc)},
            {"id": "r5", "itemName": "E"},
        ]

    def test_filter_and_order(self, returns, tz):
        window = week_window(REFERENCE, 0, tz)
        assert [r["id"] for r in filter_returns(returns, window, tz)] == ["r2", "r1", "r3"]

    def test_counter(self, returns, tz):
        window = week_window(REFERENCE, 0, tz)
        counter = count_returns(filter_returns(returns, window, tz))
        assert (counter.total, counter.returned, counter.remaining) == (3, 1, 2)

    @pytest.mark.asyncio
    async def test_get_returns_week(self, returns, tz):
        data = await get_returns_week(returns, week_offset=0, reference=REFERENCE, tz=tz)
        assert data.week.label == "06.01.2025 – 12.01.2025"
        assert [row.id for row in data.items] == ["r2", "r1", "r3"]
        assert data.items[1].statusLabel == "Vráceno"
        assert data.items[0].statusLabel == "Nesplněno"
        assert data.items[0].depositCzk == 0

    @pytest.mark.asyncio
    async def test_row_display_fields(self, tz):
        returns = [{"id": "r1", "sellingPriceCzk": 12500, "customerContact": "420123456789",
                    "customerPhone2": "", "createdAt": datetime(2025, 1, 7, tzinfo=timezone.utc)}]
        data = await get_returns_week(returns, reference=REFERENCE, tz=tz)
        row = data.items[0]
        assert row.sellingPriceDisplay == "12\u00a0500"
        assert row.phoneDisplay == ["+420 123 456 789"]


class TestBuildReturnPayload:

    def test_snapshot_fields(self, sale):
        payload = build_return_payload(sale)
        assert payload["transactionId"] == "sale-1"
        assert payload["itemName"] == "Motor 1.9 TDI"
        assert payload["sellingPriceCzk"] == 12500.0
        assert payload["customerPhone2"] == ""
        assert "purchasePricePln" not in payload

    def test_state_fields_only_when_supplied(self, sale):
        payload = build_return_payload(sale)
        assert "returned" not in payload
        assert "depositCzk" not in payload

        payload = build_return_payload({**sale, "returned": True, "depositCzk": "500"})
        assert payload["returned"] is True
        assert payload["depositCzk"] == 500.0


class TestAddToReturns:

    @pytest.mark.asyncio
    async def test_creates_return_and_history(self, fake_firestore, sale):
        record = await add_to_returns(sale)

        returns = fake_firestore.documents[collection_path(RETURNS_COLLECTION)]
        history = fake_firestore.documents[collection_path(HISTORY_COLLECTION)]
        assert list(returns) == ["sale-1"]
        assert record.id == "sale-1"
        assert record.returned is False
        assert record.depositCzk == 0
        assert record.createdAt is not None

        (entry,) = history.values()
        assert entry["action"] == ADDED_TO_RETURNS_ACTION
        assert entry["docId"] == "sale-1"
        assert "Motor 1.9 TDI" in entry["details"]
        assert isinstance(entry["timestamp"], datetime)

    @pytest.mark.asyncio
    async def test_upsert_is_idempotent_per_sale(self, fake_firestore, sale):
        await add_to_returns(sale)
        await add_to_returns(sale)

        returns = fake_firestore.documents[collection_path(RETURNS_COLLECTION)]
        history = fake_firestore.documents[collection_path(HISTORY_COLLECTION)]
        assert len(returns) == 1
        assert len(history) == 2

    @pytest.mark.asyncio
    async def test_upsert_preserves_return_state(self, fake_firestore, sale):
        await add_to_returns(sale)
        returns = fake_firestore.documents[collection_path(RETURNS_COLLECTION)]
        returns["sale-1"].update({"returned": True, "depositCzk": 500.0, "returnedAt": datetime.now(timezone.utc)})

        record = await add_to_returns({**sale, "note": "updated note"})

        assert record.returned is True
        assert record.depositCzk == 500.0
        assert record.note == "updated note"
        assert returns["sale-1"]["returnedAt"] is not None

    @pytest.mark.asyncio
    async def test_failure_is_reported(self, sale):
        broken_db = MagicMock()
        broken_db.collection.return_value.document.return_value.set.side_effect = Exception("unavailable")
        with patch('firebase_admin.firestore.client', return_value=broken_db):
            with pytest.raises(HTTPException) as exc_info:
                await add_to_returns(sale)

        assert exc_info.value.status_code == 500
        assert exc_info.value.detail == ADD_TO_RETURNS_FAILED_MESSAGE
        broken_db.collection.return_value.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_history_failure_leaves_return_record(self, fake_firestore, sale):
        with patch('sales_dashboard.returns.services.append_history', side_effect=Exception("log down")):
            with pytest.raises(HTTPException):
                await add_to_returns(sale)

        assert "sale-1" in fake_firestore.documents[collection_path(RETURNS_COLLECTION)]
        assert fake_firestore.documents[collection_path(HISTORY_COLLECTION)] == {}

    @pytest.mark.asyncio
    async def test_failed_read_back_still_succeeds(self, fake_firestore, sale):
        document_type = type(fake_firestore.collection(collection_path(RETURNS_COLLECTION)).document("sale-1"))
        with patch.object(document_type, "get", side_effect=Exception("deadline exceeded")):
            record = await add_to_returns(sale)

        assert record.id == "sale-1"
        assert record.transactionId == "sale-1"
        assert record.itemName == "Motor 1.9 TDI"
        assert record.createdAt is None
        assert list(fake_firestore.documents[collection_path(RETURNS_COLLECTION)]) == ["sale-1"]
        assert len(fake_firestore.documents[collection_path(HISTORY_COLLECTION)]) == 1

    def test_numeric_transaction_id_is_text(self):
        record = ReturnRecord(id="r1", transactionId=12345, itemName=7)
        assert record.transactionId == "12345"
        assert record.itemName == "7"


class TestBackgroundWrites:

    def test_save_toggle_sets_and_clears_returned_at(self, fake_firestore):
        returns = fake_firestore.documents[collection_path(RETURNS_COLLECTION)]
        returns["r1"] = {"itemName": "A", "returned": False}

        assert save_toggle("r1", toggle_returned(returns["r1"])) is True
        assert returns["r1"]["returned"] is True
        assert "returnedAt" in returns["r1"]

        assert save_toggle("r1", toggle_returned(returns["r1"])) is True
        assert returns["r1"]["returned"] is False
        assert "returnedAt" not in returns["r1"]

    def test_save_deposit(self, fake_firestore):
        returns = fake_firestore.documents[collection_path(RETURNS_COLLECTION)]
        returns["r1"] = {"itemName": "A"}

        assert save_deposit("r1", parse_deposit("1 000,5".replace(" ", ""))) is True
        assert returns["r1"]["depositCzk"] == 1000.5

    def test_failed_write_is_logged_not_raised(self, fake_firestore, caplog):
        assert save_deposit("missing", 10.0) is False
        assert "missing" in caplog.text
