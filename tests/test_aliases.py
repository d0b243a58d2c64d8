import pytest
from fastapi.testclient import TestClient

from config import ApiConfig, Config
from models import DatabaseManager, DatabaseService, filter_page, parse_id, unsigned_id
from web.app import app
from web.dependencies import get_config, get_db_service
from web.routes.aliases import resolve_page
from conftest import ALIAS_ROWS


@pytest.fixture
def db_service(tmp_path):
    db_manager = DatabaseManager(f"sqlite:///{tmp_path / 'xax.h2.db'}")
    db_manager.create_tables()
    service = DatabaseService(db_manager)
    for alias_id, account_id, name, uri, timestamp in ALIAS_ROWS:
        service.add_alias(alias_id, account_id, name, uri, timestamp)
    yield service
    db_manager.close()


@pytest.fixture
def client(db_service):
    app.dependency_overrides[get_db_service] = lambda: db_service
    app.dependency_overrides[get_config] = lambda: Config(api=ApiConfig(max_api_records=3))
    yield TestClient(app)
    app.dependency_overrides.clear()


def names(aliases):
    return [a['aliasName'] for a in aliases]


def test_filter_page_counts_only_matching_items():
    items = list(range(10))
    page = filter_page(items, lambda i: i % 2 == 0, 1, 2)
    assert list(page) == [2, 4]


def test_filter_page_edges():
    assert list(filter_page(range(5), lambda i: True, -3, 1)) == [0, 1]
    assert list(filter_page(range(5), lambda i: True, 3, 2)) == []
    assert list(filter_page(range(5), lambda i: True, 3, 100)) == [3, 4]


def test_aliases_are_ordered_by_lower_case_name(db_service):
    aliases = db_service.get_aliases(100)
    assert names(aliases) == ["alpha", "Beta", "delta", "Zeta"]
    assert aliases[0] == {
        'alias': '2',
        'account': '100',
        'aliasName': 'alpha',
        'aliasURI': 'acct:alpha',
        'timestamp': 10,
    }


def test_timestamp_filter_is_inclusive(db_service):
    assert names(db_service.get_aliases(100, timestamp=30)) == ["Beta", "delta", "Zeta"]
    assert db_service.get_aliases(100, timestamp=51) == []


def test_pagination_applies_after_filtering(db_service):
    assert names(db_service.get_aliases(100, timestamp=30, first_index=1, last_index=1)) == ["delta"]
    assert names(db_service.get_aliases(100, first_index=2)) == ["delta", "Zeta"]


def test_other_accounts_are_excluded(db_service):
    assert names(db_service.get_aliases(200)) == ["gamma"]
    assert db_service.get_aliases(300) == []
    assert db_service.count_aliases(100) == 4


def test_unsigned_ids():
    assert parse_id("18446744073709551615") == -1
    assert unsigned_id(-1) == "18446744073709551615"
    assert parse_id(" 42 ") == 42
    with pytest.raises(ValueError):
        parse_id("-5")
    with pytest.raises(ValueError):
        parse_id("abc")


@pytest.mark.parametrize("first, last, expected", [
    (0, None, (0, 2)),
    (-4, None, (0, 2)),
    (1, 2, (1, 2)),
    (1, 10, (1, 3)),
    (2, -1, (2, 4)),
])
def test_resolve_page(first, last, expected):
    assert resolve_page(first, last, 3) == expected


def test_api_lists_aliases(client):
    response = client.get("/api/aliases", params={"account": "100"})

    assert response.status_code == 200
    assert names(response.json()["aliases"]) == ["alpha", "Beta", "delta"]


def test_api_filters_and_paginates(client):
    response = client.get("/api/aliases", params={
        "account": "100", "timestamp": 30, "firstIndex": 1, "lastIndex": 2,
    })

    assert response.status_code == 200
    assert names(response.json()["aliases"]) == ["delta", "Zeta"]


def test_api_requires_account(client):
    assert client.get("/api/aliases").status_code == 400
    assert client.get("/api/aliases", params={"account": "bob"}).status_code == 400


def test_api_rejects_negative_timestamp(client):
    response = client.get("/api/aliases", params={"account": "100", "timestamp": -1})
    assert response.status_code == 400
