import gc

import pytest

from sqlstep import ColumnType, InvalidStateError, ResultSet


@pytest.fixture
def filled(table):
    insert = table.prepare("INSERT INTO test (value) VALUES (?);")

    for value in ("one", "two", "three"):
        insert.bind_text(1, value)
        insert.execute()
        insert.reset()

    insert.close()
    yield table


def test_insert_and_query(table):
    insert = table.prepare("INSERT INTO test (id, value) VALUES (:id, ?);")
    insert.bind_int(":id", 1)
    insert.bind_text(2, "test value")

    result_set = insert.execute()

    assert isinstance(result_set, ResultSet)
    assert not result_set.can_read

    query = table.prepare("SELECT id, value FROM test;")
    result_set = query.execute()

    assert result_set.can_read
    assert result_set.read_int(0) == 1
    assert result_set.read_string(1) == "test value"

    assert not result_set.next()
    assert not result_set.can_read

    with pytest.raises(InvalidStateError):
        result_set.read_int(0)


def test_insert_and_query_with_reset(table):
    insert = table.prepare("INSERT INTO test (id, value) VALUES (:id, ?);")
    insert.bind_int(":id", 1)
    insert.bind_text(2, "a")
    insert.execute()

    assert insert.reset()
    insert.bind_int(":id", 2)
    insert.bind_text(2, "b")
    insert.execute()

    result_set = table.prepare("SELECT id, value FROM test ORDER BY id;").execute()

    assert result_set.read_row() == (1, "a")
    assert result_set.next()
    assert result_set.read_row() == (2, "b")
    assert not result_set.next()
    assert not result_set.can_read


def test_next(filled):
    result_set = filled.prepare("SELECT value FROM test ORDER BY id;").execute()
    values = []

    while result_set.can_read:
        values.append(result_set.read_string(0))
        result_set.next()

    assert values == ["one", "two", "three"]


def test_iteration(filled):
    result_set = filled.prepare("SELECT id, value FROM test ORDER BY id;").execute()

    assert list(result_set) == [(1, "one"), (2, "two"), (3, "three")]
    assert list(result_set) == []


def test_iteration_from_current_row(filled):
    result_set = filled.prepare("SELECT value FROM test ORDER BY id;").execute()
    result_set.next()

    assert [row[0] for row in result_set] == ["two", "three"]


def test_empty_result(table):
    result_set = table.prepare("SELECT * FROM test;").execute()

    assert not result_set.can_read
    assert list(result_set) == []


def test_keeps_statement_alive(filled):
    statement = filled.prepare("SELECT value FROM test ORDER BY id;")
    result_set = statement.execute()

    del statement
    gc.collect()

    assert result_set.statement.is_open
    assert result_set.read_string(0) == "one"
    assert result_set.next()
    assert result_set.read_string(0) == "two"


def test_shares_statement_state(filled):
    statement = filled.prepare("SELECT value FROM test ORDER BY id;")
    first = statement.execute()

    assert first.statement is statement

    statement.reset()
    assert not first.can_read

    second = statement.execute()
    assert first.can_read
    assert first.read_string(0) == second.read_string(0) == "one"


def test_column_metadata(filled):
    statement = filled.prepare("SELECT id, value, NULL AS empty FROM test;")
    result_set = statement.execute()

    assert result_set.column_count() == 3
    assert result_set.column_name(1) == "value"
    assert result_set.column_type(0) is ColumnType.Integer
    assert result_set.column_type(2) is ColumnType.Null
    assert result_set.read(2) is None
    assert result_set.read_row() == (1, "one", None)


def test_read_blob_and_double(table):
    result_set = table.prepare("SELECT x'cafe', 0.25;").execute()

    assert result_set.read_blob(0) == b"\xca\xfe"
    assert result_set.read_double(1) == 0.25


def test_closed_statement(filled):
    statement = filled.prepare("SELECT value FROM test;")
    result_set = statement.execute()
    statement.close()

    assert not result_set.can_read

    with pytest.raises(InvalidStateError, match="Statement is not open"):
        result_set.read_string(0)

    with pytest.raises(InvalidStateError):
        result_set.next()


def test_closed_database(filled):
    result_set = filled.prepare("SELECT value FROM test;").execute()
    filled.close()

    with pytest.raises(InvalidStateError):
        result_set.read_string(0)
