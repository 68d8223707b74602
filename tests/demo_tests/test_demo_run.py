from unittest.mock import AsyncMock, patch

import pytest

from zmongo_orgs import demo
from zmongo_orgs.errors import StoreError
from zmongo_orgs.safe_result import SafeResult


@pytest.mark.asyncio
async def test_run_demo_walks_through_every_step(memory_zmongo, capsys):
    memory_zmongo.aggregate_rows = [
        {"_id": None, "organizationName": "Initech", "totalUsers": 2},
        {"_id": None, "organizationName": "Umbrella Corp", "totalUsers": 1},
    ]

    await demo.run_demo(memory_zmongo)

    out = capsys.readouterr().out
    assert "Projects after delete (empty)" in out
    assert "newHola" in out
    assert "User: Bill" in out
    assert "Works at: Initech (USA)" in out
    assert "Umbrella Corp" in out
    memory_zmongo.db.client.close.assert_called_once()

    projects = list(memory_zmongo.collections["projects"].values())
    assert [p["title"] for p in projects] == ["test", "test2"]
    assert len(memory_zmongo.collections["users"]) == 3
    assert memory_zmongo.calls[0] == "ping"


@pytest.mark.asyncio
async def test_run_demo_is_repeatable(memory_zmongo):
    await demo.run_demo(memory_zmongo)
    await demo.run_demo(memory_zmongo)
    assert len(memory_zmongo.collections["organizations"]) == 2
    assert len(memory_zmongo.collections["projects"]) == 2


@pytest.mark.asyncio
async def test_run_demo_stops_on_failure_and_still_closes(memory_zmongo):
    memory_zmongo.ping = AsyncMock(return_value=SafeResult.from_exception(StoreError("no servers")))

    with pytest.raises(StoreError, match="no servers"):
        await demo.run_demo(memory_zmongo)

    memory_zmongo.db.client.close.assert_called_once()
    assert "delete_documents" not in memory_zmongo.calls


def test_main_logs_and_returns_nonzero_on_store_error(caplog):
    caplog.set_level("ERROR", logger="zmongo_orgs.demo")
    with patch("zmongo_orgs.demo.config.configure_logging"), \
            patch("zmongo_orgs.demo.run_demo", AsyncMock(side_effect=StoreError("no servers"))):
        assert demo.main() == 1
    assert "Demo aborted: no servers" in caplog.text


def test_main_returns_zero_on_success():
    with patch("zmongo_orgs.demo.config.configure_logging"), \
            patch("zmongo_orgs.demo.run_demo", AsyncMock(return_value=None)):
        assert demo.main() == 0


def test_main_returns_nonzero_for_malformed_uri(monkeypatch):
    monkeypatch.setenv("MONGO_URI", "notauri://x")
    monkeypatch.delenv("MONGO_DATABASE_NAME", raising=False)
    with patch("zmongo_orgs.demo.config.configure_logging"):
        assert demo.main() == 1


def test_failed_step_is_logged_once(memory_zmongo, caplog):
    caplog.set_level("ERROR", logger="zmongo_orgs.demo")
    memory_zmongo.ping = AsyncMock(return_value=SafeResult.from_exception(StoreError("no servers")))
    with patch("zmongo_orgs.demo.config.configure_logging"), \
            patch("zmongo_orgs.demo.ZMongo", return_value=memory_zmongo):
        assert demo.main() == 1

    errors = [r for r in caplog.records if r.levelname == "ERROR"]
    assert [r.getMessage() for r in errors] == ["Demo aborted: no servers"]
