"""Tests for the table-oriented storage primitives."""

import logging
import threading

import pytest

from kakeibo.database.factories import DB_PATH_ENV, create_sqlite_database
from kakeibo.domain import entities
from kakeibo.domain.entities import Table
from kakeibo.domain.errors import NotFoundError, ValidationError


def _expense_fields(**overrides):
    fields = {
        "date": "2024-05-01",
        "category_id": "cat-1",
        "payment_method_id": "pm-1",
        "amount": 1200,
        "description": "ランチ",
        "rating": None,
        "memo": "",
        "deleted": False,
        "is_fixed": False,
        "fixed_cost_id": None,
    }
    fields.update(overrides)
    return fields


class TestSingleRecordOperations:
    """Tests for get/add/update/delete."""

    def test_add_assigns_id_and_timestamps(self, temp_db):
        """Test that add returns a domain entity with generated fields."""
        expense = temp_db.add(Table.EXPENSES, _expense_fields())

        assert isinstance(expense, entities.Expense)
        assert len(expense.id) == 36
        assert expense.created_at == expense.updated_at
        assert temp_db.get(Table.EXPENSES, expense.id) == expense

    def test_add_keeps_given_id(self, temp_db):
        """Test that a caller supplied id is stored."""
        expense = temp_db.add(Table.EXPENSES, _expense_fields(id="fixed-id"))
        assert expense.id == "fixed-id"

    def test_get_missing_returns_none(self, temp_db):
        """Test get of an unknown id."""
        assert temp_db.get(Table.EXPENSES, "missing") is None

    def test_update_merges_fields_and_refreshes_updated_at(self, temp_db):
        """Test that update changes only the given fields."""
        expense = temp_db.add(Table.EXPENSES, _expense_fields())
        updated = temp_db.update(Table.EXPENSES, expense.id, {"amount": 900})

        assert updated.amount == 900
        assert updated.description == "ランチ"
        assert updated.created_at == expense.created_at
        assert updated.updated_at > expense.updated_at

    @pytest.mark.parametrize("field", ["id", "created_at"])
    def test_update_rejects_immutable_fields(self, temp_db, field):
        """Test that id and created_at cannot change."""
        expense = temp_db.add(Table.EXPENSES, _expense_fields())
        with pytest.raises(ValidationError, match="cannot be changed"):
            temp_db.update(Table.EXPENSES, expense.id, {field: "x"})

    def test_update_unknown_record(self, temp_db):
        """Test update of a missing record."""
        with pytest.raises(NotFoundError):
            temp_db.update(Table.EXPENSES, "missing", {"amount": 1})

    def test_unknown_field_rejected(self, temp_db):
        """Test that fields outside the table are rejected."""
        with pytest.raises(ValidationError, match="Unknown field"):
            temp_db.add(Table.EXPENSES, _expense_fields(colour="red"))

    def test_delete_removes_record(self, temp_db):
        """Test physical delete."""
        expense = temp_db.add(Table.EXPENSES, _expense_fields())
        temp_db.delete(Table.EXPENSES, expense.id)

        assert temp_db.get(Table.EXPENSES, expense.id) is None
        with pytest.raises(NotFoundError):
            temp_db.delete(Table.EXPENSES, expense.id)


class TestBulkAndQueries:
    """Tests for bulk insert and query primitives."""

    def test_bulk_add_is_all_or_nothing(self, temp_db):
        """Test that one bad record aborts the whole batch."""
        with pytest.raises(ValidationError):
            temp_db.bulk_add(
                Table.EXPENSES,
                [_expense_fields(), _expense_fields(colour="red")],
            )
        assert temp_db.count(Table.EXPENSES) == 0

    def test_bulk_add_returns_entities(self, temp_db):
        """Test a successful bulk insert."""
        added = temp_db.bulk_add(
            Table.EXPENSES, [_expense_fields(amount=1), _expense_fields(amount=2)]
        )
        assert [e.amount for e in added] == [1, 2]
        assert temp_db.count(Table.EXPENSES) == 2

    def test_where_between_is_inclusive(self, temp_db):
        """Test that both range ends are included."""
        for day in ("2024-04-30", "2024-05-01", "2024-05-31", "2024-06-01"):
            temp_db.add(Table.EXPENSES, _expense_fields(date=day))

        rows = temp_db.where_between(Table.EXPENSES, "date", "2024-05-01", "2024-05-31")
        assert [r.date for r in rows] == ["2024-05-01", "2024-05-31"]

    def test_where_equals_and_prefix(self, temp_db):
        """Test equality and prefix queries."""
        temp_db.add(Table.EXPENSES, _expense_fields(date="2024-05-10"))
        temp_db.add(Table.EXPENSES, _expense_fields(date="2024-06-10"))

        assert len(temp_db.where_equals(Table.EXPENSES, "date", "2024-05-10")) == 1
        assert len(temp_db.where_prefix(Table.EXPENSES, "date", "2024-05")) == 1
        assert temp_db.where_prefix(Table.EXPENSES, "date", "2024_0") == []

    def test_order_by(self, temp_db):
        """Test ordering both ways."""
        for amount in (3, 1, 2):
            temp_db.add(Table.EXPENSES, _expense_fields(amount=amount))

        assert [e.amount for e in temp_db.order_by(Table.EXPENSES, "amount")] == [1, 2, 3]
        assert [
            e.amount for e in temp_db.order_by(Table.EXPENSES, "amount", descending=True)
        ] == [3, 2, 1]

    def test_count_with_equals_and_predicate(self, temp_db):
        """Test counting by field equality and a predicate."""
        temp_db.add(Table.EXPENSES, _expense_fields(amount=100, is_fixed=True))
        temp_db.add(Table.EXPENSES, _expense_fields(amount=200, is_fixed=True))
        temp_db.add(Table.EXPENSES, _expense_fields(amount=300))

        assert temp_db.count(Table.EXPENSES, is_fixed=True) == 2
        assert temp_db.count(Table.EXPENSES, predicate=lambda e: e.amount > 150) == 2
        assert temp_db.count(Table.EXPENSES, predicate=lambda e: e.amount > 150, is_fixed=True) == 1


class TestTransactions:
    """Tests for transaction()."""

    def test_rollback_on_error(self, temp_db):
        """Test that an exception discards every write of the block."""
        with pytest.raises(RuntimeError):
            with temp_db.transaction():
                temp_db.add(Table.EXPENSES, _expense_fields())
                raise RuntimeError("boom")
        assert temp_db.count(Table.EXPENSES) == 0

    def test_nested_transactions_commit_once(self, temp_db):
        """Test that inner blocks join the outer transaction."""
        with pytest.raises(RuntimeError):
            with temp_db.transaction():
                with temp_db.transaction():
                    temp_db.add(Table.EXPENSES, _expense_fields())
                raise RuntimeError("boom")
        assert temp_db.count(Table.EXPENSES) == 0

    def test_transaction_serializes_threads(self, temp_db):
        """Test that check-then-act inside a transaction is atomic."""
        barrier = threading.Barrier(4)

        def add_once():
            barrier.wait()
            with temp_db.transaction():
                if temp_db.count(Table.EXPENSES) == 0:
                    temp_db.add(Table.EXPENSES, _expense_fields())

        threads = [threading.Thread(target=add_once) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert temp_db.count(Table.EXPENSES) == 1


class TestSubscriptions:
    """Tests for live queries."""

    def _watch(self, db, tables=(Table.EXPENSES,)):
        results = []
        subscription = db.subscribe(
            list(tables), lambda: db.count(Table.EXPENSES), results.append
        )
        return subscription, results

    def test_delivers_immediately_and_after_commit(self, temp_db):
        """Test initial delivery and refresh after a write."""
        _, results = self._watch(temp_db)
        temp_db.add(Table.EXPENSES, _expense_fields())
        assert results == [0, 1]

    def test_ignores_other_tables(self, temp_db):
        """Test that writes to unrelated tables do not notify."""
        _, results = self._watch(temp_db)
        temp_db.add(Table.INCOMES, {"date": "2024-05-01", "source_id": "s", "amount": 1, "memo": "", "deleted": False})
        assert results == [0]

    def test_transaction_notifies_once_after_commit(self, temp_db):
        """Test that subscribers see only the committed end state."""
        _, results = self._watch(temp_db)
        with temp_db.transaction():
            temp_db.add(Table.EXPENSES, _expense_fields())
            temp_db.add(Table.EXPENSES, _expense_fields())
            assert results == [0]
        assert results == [0, 2]

    def test_rollback_notifies_nobody(self, temp_db):
        """Test that rolled back writes are not delivered."""
        _, results = self._watch(temp_db)
        with pytest.raises(RuntimeError):
            with temp_db.transaction():
                temp_db.add(Table.EXPENSES, _expense_fields())
                raise RuntimeError("boom")
        temp_db.add(Table.INCOMES, {"date": "2024-05-01", "source_id": "s", "amount": 1, "memo": "", "deleted": False})
        assert results == [0]

    def test_unsubscribe(self, temp_db):
        """Test that an unsubscribed query stops receiving results."""
        subscription, results = self._watch(temp_db)
        subscription.unsubscribe()
        temp_db.add(Table.EXPENSES, _expense_fields())
        assert results == [0]
        assert len(temp_db.observers) == 0

    def test_failing_callback_is_logged(self, temp_db, caplog):
        """Test that a broken subscriber neither fails the write nor others."""
        calls = []

        def broken(result):
            if calls:
                raise RuntimeError("subscriber bug")
            calls.append(result)

        temp_db.subscribe([Table.EXPENSES], lambda: temp_db.count(Table.EXPENSES), broken)
        _, results = self._watch(temp_db)

        with caplog.at_level(logging.ERROR, logger="kakeibo"):
            temp_db.add(Table.EXPENSES, _expense_fields())

        assert temp_db.count(Table.EXPENSES) == 1
        assert results == [0, 1]
        assert "Live query failed" in caplog.text

    def test_failing_first_delivery_registers_nothing(self, temp_db):
        """Test that subscribe raises and leaves no subscription behind."""

        def broken(result):
            raise RuntimeError("subscriber bug")

        with pytest.raises(RuntimeError):
            temp_db.subscribe([Table.EXPENSES], lambda: temp_db.count(Table.EXPENSES), broken)

        assert len(temp_db.observers) == 0
        temp_db.add(Table.EXPENSES, _expense_fields())


class TestFactories:
    """Tests for database construction from paths and URLs."""

    def test_creates_missing_parent_directories(self, tmp_path):
        """Test that a nested database path works on first use."""
        db_path = tmp_path / "nested" / "dir" / "kakeibo.db"
        db = create_sqlite_database(str(db_path))
        try:
            db.initialize_schema()
            assert db.database_url == f"sqlite:///{db_path}"
            assert db_path.exists()
        finally:
            db.disconnect()

    def test_url_passes_through(self):
        """Test that a SQLAlchemy URL is used as given."""
        db = create_sqlite_database("sqlite://")
        try:
            db.initialize_schema()
            assert db.database_url == "sqlite://"
            assert db.count(Table.PAYMENT_METHODS) > 0
        finally:
            db.disconnect()

    def test_path_from_environment(self, tmp_path, monkeypatch):
        """Test the KAKEIBO_DB_PATH fallback."""
        db_path = tmp_path / "env.db"
        monkeypatch.setenv(DB_PATH_ENV, str(db_path))
        db = create_sqlite_database()
        try:
            assert db.database_url == f"sqlite:///{db_path}"
        finally:
            db.disconnect()
