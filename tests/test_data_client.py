import pytest
from postgrest import APIError

from fakes import FakeStore
from pharmacy_backend.orm import ENTITY_TABLES, DataClient, ModelHandler, UnknownEntityError


def test_one_handler_per_entity(db):
    assert set(db) == set(ENTITY_TABLES)
    for entity, table in ENTITY_TABLES.items():
        handler = db[entity]
        assert isinstance(handler, ModelHandler)
        assert handler.table == table
    assert db.model("Sale") is db["Sale"]


def test_handlers_share_the_injected_store(store, db):
    assert db["Medicine"].store is store
    assert db["Branch"].store is store


def test_unknown_entity_raises(db):
    with pytest.raises(UnknownEntityError):
        db["Invoice"]
    assert "Invoice" not in db


def test_restricted_registry():
    db = DataClient(FakeStore(), entities=["Sale", "SaleItem"])
    assert set(db) == {"Sale", "SaleItem"}
    with pytest.raises(KeyError):
        db["Stock"]


def test_run_grouped_passes_the_same_client(db):
    seen = []
    result = db.run_grouped(lambda tx: seen.append(tx) or "done")
    assert result == "done"
    assert seen == [db]
    assert db.transaction.__func__ is db.run_grouped.__func__


def test_grouped_calls_are_not_rolled_back_on_failure():
    store = FakeStore({"stocks": [{"id": 1, "medicine_id": 3, "branch_id": 2, "quantity": 10}]})
    db = DataClient(store)

    def sell(tx):
        sale = tx["Sale"].create({"branchId": 2, "totalAmount": 40})
        tx["SaleItem"].create({"saleId": sale["id"], "medicineId": 3, "quantity": 4})
        # second item points at a stock row that does not exist
        tx["Stock"].update({"id": 99}, {"quantity": 6})
        return sale

    with pytest.raises(APIError):
        db.transaction(sell)

    # earlier writes persist: no atomicity
    assert len(store.tables["sales"]) == 1
    assert store.tables["sale_items"][0]["sale_id"] == store.tables["sales"][0]["id"]
    assert store.tables["stocks"][0]["quantity"] == 10
