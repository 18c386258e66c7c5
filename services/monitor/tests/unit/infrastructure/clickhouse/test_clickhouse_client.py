from unittest.mock import patch

import pytest
from src.infrastructure.clickhouse.client import ClickHouseClient
from src.infrastructure.clickhouse.ddl import ALL_DDLS


@pytest.fixture
def driver():
    with patch("src.infrastructure.clickhouse.client.Client") as client_cls:
        yield client_cls.return_value


def test_creates_tables_on_init(driver):
    ClickHouseClient()

    executed = [c.args[0] for c in driver.execute.call_args_list]
    assert executed == ALL_DDLS


def test_insert_rows_builds_positional_insert(driver):
    client = ClickHouseClient()
    driver.execute.reset_mock()

    client.insert_rows(
        "monitor_events",
        [{"event_name": "request", "props": "{}"}, {"props": "{}", "event_name": "x"}],
    )

    driver.execute.assert_called_once_with(
        "INSERT INTO monitor_events (event_name, props) VALUES",
        [("request", "{}"), ("x", "{}")],
    )


def test_insert_nothing_is_a_noop(driver):
    client = ClickHouseClient()
    driver.execute.reset_mock()

    client.insert_rows("monitor_events", [])

    driver.execute.assert_not_called()


def test_ping(driver):
    client = ClickHouseClient()
    driver.execute.return_value = [(1,)]
    assert client.ping() is True


def test_close_disconnects(driver):
    ClickHouseClient().close()
    driver.disconnect.assert_called_once()


def test_query_errors_propagate(driver):
    client = ClickHouseClient()
    driver.execute.side_effect = ConnectionError("down")

    with pytest.raises(ConnectionError):
        client.query("SELECT 1", {})
