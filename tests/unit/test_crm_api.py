import uuid


def _h(email):
    return {"x-auth-request-user": email.split("@")[0], "x-auth-request-email": email}


OWNER = _h("owner@example.com")


def test_lead_defaults_and_status_filter(client):
    r = client.post("/leads/", json={"full_name": "Maria Lopez", "email": "maria@example.com"}, headers=OWNER)
    assert r.status_code == 201, r.text
    lead = r.json()
    assert lead["status"] == "pending"
    assert lead["is_active"] is True
    assert lead["chatbot_id"] is None

    client.post("/leads/", json={"full_name": "Juan", "status": "converted"}, headers=OWNER)
    r = client.get("/leads/", params={"status": "converted"}, headers=OWNER)
    assert [l["full_name"] for l in r.json()] == ["Juan"]


def test_lead_invalid_status_is_rejected(client):
    r = client.post("/leads/", json={"full_name": "X", "status": "lost"}, headers=OWNER)
    assert r.status_code == 422


def test_product_price_must_not_be_negative(client):
    r = client.post("/products-services/", json={"name": "Haircut", "price": -1}, headers=OWNER)
    assert r.status_code == 422
    r = client.post("/products-services/", json={"name": "Haircut", "price": 12.5}, headers=OWNER)
    assert r.status_code == 201
    product = r.json()
    assert product["price"] == 12.5
    assert product["active"] is True


def test_product_toggle_uses_active_flag(client):
    product = client.post("/products-services/", json={"name": "Massage"}, headers=OWNER).json()
    r = client.post(f"/products-services/{product['id']}/toggle", headers=OWNER)
    assert r.status_code == 200
    assert r.json()["active"] is False
    r = client.get("/products-services/", params={"active": "false"}, headers=OWNER)
    assert [p["id"] for p in r.json()] == [product["id"]]


def test_customer_insight_validation(client):
    r = client.post(
        "/customer-insights/",
        json={"phone_number": "+34600000000", "customer_type": "unknown"},
        headers=OWNER,
    )
    assert r.status_code == 422
    r = client.post(
        "/customer-insights/",
        json={"phone_number": "+34600000000", "customer_type": "curioso", "confidence_score": 1.5},
        headers=OWNER,
    )
    assert r.status_code == 422
    r = client.post(
        "/customer-insights/",
        json={
            "phone_number": "+34600000000",
            "customer_type": "cliente_activo",
            "confidence_score": 0.8,
            "metadata": {"source": "whatsapp"},
        },
        headers=OWNER,
    )
    assert r.status_code == 201
    insight = r.json()
    assert insight["metadata"] == {"source": "whatsapp"}
    assert "metadata_col" not in insight

    r = client.patch(f"/customer-insights/{insight['id']}", json={"metadata": {"source": "web"}}, headers=OWNER)
    assert r.status_code == 200
    assert r.json()["metadata"] == {"source": "web"}
    r = client.patch(f"/customer-insights/{insight['id']}", json={"metadata": None}, headers=OWNER)
    assert r.status_code == 422

    r = client.get("/customer-insights/search/", params={"query": "\"source\": \"web\""}, headers=OWNER)
    assert [row["id"] for row in r.json()] == [insight["id"]]


def test_business_document_tags_and_search(client):
    r = client.post(
        "/business-documents/",
        json={"title": "Opening hours", "content": "Mon-Fri 9-18", "document_type": "schedule", "tags": "hours, week"},
        headers=OWNER,
    )
    assert r.status_code == 201, r.text
    assert r.json()["tags"] == ["hours", "week"]
    client.post("/business-documents/", json={"title": "Refunds", "document_type": "policy"}, headers=OWNER)

    r = client.get("/business-documents/search/", params={"query": "MON-FRI"}, headers=OWNER)
    assert [d["title"] for d in r.json()] == ["Opening hours"]
    r = client.get("/business-documents/", params={"document_type": "policy"}, headers=OWNER)
    assert [d["title"] for d in r.json()] == ["Refunds"]


def test_client_data_requires_chatbot(client):
    r = client.post("/client-data/", json={"full_name": "Ana", "phone_number": "+34611111111"}, headers=OWNER)
    assert r.status_code == 422
    r = client.post(
        "/client-data/",
        json={"chatbot_id": str(uuid.uuid4()), "full_name": "Ana", "phone_number": "+34611111111"},
        headers=OWNER,
    )
    assert r.status_code == 404
    assert r.json()["detail"] == "Chatbot not found"


def test_search_is_scoped_to_owner(client):
    client.post("/leads/", json={"full_name": "Shared Name"}, headers=OWNER)
    client.post("/leads/", json={"full_name": "Shared Name"}, headers=_h("other@example.com"))
    r = client.get("/leads/search/", params={"query": "shared"}, headers=OWNER)
    assert len(r.json()) == 1
