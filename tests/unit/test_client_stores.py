import json

import pytest

from botpanel.client import Dashboard, Store, StoreError


def _dashboard(client, email="owner@example.com"):
    # TestClient speaks the requests-style session API against the ASGI app
    return Dashboard(email=email, user=email.split("@")[0], session=client, timeout=None)


def test_fetch_and_create_prepend(client):
    dash = _dashboard(client)
    assert dash.chatbots.fetch() == []
    first = dash.chatbots.create({"name_chatbot": "First"})
    second = dash.chatbots.create({"name_chatbot": "Second"})
    assert [b["id"] for b in dash.chatbots.items] == [second["id"], first["id"]]
    assert dash.chatbots.loading is False
    assert dash.chatbots.error is None

    fresh = _dashboard(client)
    assert [b["id"] for b in fresh.chatbots.fetch()] == [second["id"], first["id"]]


def test_flows_append_on_create(client):
    dash = _dashboard(client)
    bot = dash.chatbots.create({"name_chatbot": "Bot"})
    a = dash.flows.create({"chatbot_id": bot["id"], "keyword": "a", "response_text": "A"})
    b = dash.flows.create({"chatbot_id": bot["id"], "keyword": "b, c", "response_text": "B"})
    assert [f["id"] for f in dash.flows.items] == [a["id"], b["id"]]
    assert dash.flows.items[1]["keyword"] == ["b", "c"]


def test_fetch_with_filters(client):
    dash = _dashboard(client)
    dash.leads.create({"full_name": "Open", "status": "pending"})
    dash.leads.create({"full_name": "Won", "status": "converted"})
    rows = dash.leads.fetch(status="converted", chatbot_id=None)
    assert [r["full_name"] for r in rows] == ["Won"]


def test_update_replaces_cached_row(client):
    dash = _dashboard(client)
    bot = dash.chatbots.create({"name_chatbot": "Bot", "description": "old"})
    updated = dash.chatbots.update(bot["id"], {"description": "new"})
    assert updated["description"] == "new"
    assert dash.chatbots.items[0]["description"] == "new"
    assert dash.chatbots.items[0]["updated_at"] == updated["updated_at"]


def test_update_optimistic_reverts_on_failure(client):
    dash = _dashboard(client)
    dash.chatbots.create({"name_chatbot": "Taken"})
    bot = dash.chatbots.create({"name_chatbot": "Mine"})
    before = dict(dash.chatbots.items[0])

    with pytest.raises(StoreError) as exc:
        dash.chatbots.update_optimistic(bot["id"], {"name_chatbot": "Taken"})

    assert exc.value.status_code == 409
    assert dash.chatbots.items[0] == before
    assert dash.chatbots.error == "Chatbot with this name already exists"
    assert dash.chatbots.loading is False


def test_update_optimistic_success(client):
    dash = _dashboard(client)
    bot = dash.chatbots.create({"name_chatbot": "Bot"})
    row = dash.chatbots.update_optimistic(bot["id"], {"is_active": False})
    assert row["is_active"] is False
    assert dash.chatbots.items[0]["is_active"] is False


def test_toggle_and_delete(client):
    dash = _dashboard(client)
    bot = dash.chatbots.create({"name_chatbot": "Bot"})
    assert dash.chatbots.toggle(bot["id"])["is_active"] is False
    dash.chatbots.delete(bot["id"])
    assert dash.chatbots.items == []
    assert dash.chatbots.fetch() == []


def test_delete_missing_row_raises_and_keeps_cache(client):
    dash = _dashboard(client)
    bot = dash.chatbots.create({"name_chatbot": "Bot"})
    other = _dashboard(client, email="other@example.com")
    other.chatbots.items = [dict(bot)]
    with pytest.raises(StoreError) as exc:
        other.chatbots.delete(bot["id"])
    assert exc.value.status_code == 404
    assert len(other.chatbots.items) == 1


def test_validation_error_sets_error(client):
    dash = _dashboard(client)
    with pytest.raises(StoreError) as exc:
        dash.chatbots.create({})
    assert exc.value.status_code == 422
    assert dash.chatbots.error
    assert dash.chatbots.items == []


def test_local_search_excludes_embedding():
    store = Store(session=None, path="knowledge-prompts")
    store.items = [
        {"id": "1", "prompt_text": "Parking available", "embedding": [0.123]},
        {"id": "2", "prompt_text": "Open at 9", "embedding": None},
    ]
    assert [r["id"] for r in store.search("PARKING")] == ["1"]
    assert store.search(json.dumps(0.123)) == []
    assert len(store.search("")) == 2


def test_qr_assignment_none_when_unassigned(client):
    assert _dashboard(client).qr_assignment() is None
