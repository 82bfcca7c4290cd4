from app.shared.database.models import ChatSession, ContactSubmission, FAQ


def seed_faqs(db):
    db.add_all([
        FAQ(question="How do I track my shipment?", answer="Use the tracking number on the home page.", category="tracking", order_index=1),
        FAQ(question="Which payment methods do you accept?", answer="Cards through Stripe and Paystack.", category="billing", order_index=2),
        FAQ(question="Draft question", answer="Not yet visible.", category="general", order_index=3, is_published=False),
    ])
    db.commit()


def create_ticket(client, headers, **fields):
    payload = {"subject": "Package arrived damaged", "message": "The box was crushed.", **fields}
    return client.post("/api/v1/support/tickets", json=payload, headers=headers)


def test_faqs_published_and_ordered(client, db):
    seed_faqs(db)
    questions = [f["question"] for f in client.get("/api/v1/support/faqs").json()]
    assert questions == ["How do I track my shipment?", "Which payment methods do you accept?"]

    billing = client.get("/api/v1/support/faqs", params={"category": "billing"}).json()
    assert len(billing) == 1


def test_faq_search(client, db):
    seed_faqs(db)
    results = client.get("/api/v1/support/faqs/search", params={"q": "paystack"}).json()
    assert [f["category"] for f in results] == ["billing"]

    assert client.get("/api/v1/support/faqs/search", params={"q": "  "}).json() == []
    assert client.get("/api/v1/support/faqs/search").json() == []


def test_contact_info_and_form(client, db):
    info = client.get("/api/v1/support/contact").json()
    assert info["email"] == "support@blynelogistics.com"

    response = client.post(
        "/api/v1/support/contact",
        json={"name": "Kemi", "email": "kemi@blynelogistics.com", "message": "Do you ship to Kano?"}
    )
    assert response.status_code == 201
    assert response.json()["message"] == "Thank you for your message. We will get back to you soon."
    assert db.query(ContactSubmission).count() == 1


def test_contact_form_invalid_email(client):
    response = client.post("/api/v1/support/contact", json={"name": "Kemi", "email": "not-an-email", "message": "Hi"})
    assert response.status_code == 422


def test_create_ticket_defaults(client, customer, customer_headers):
    response = create_ticket(client, customer_headers)
    assert response.status_code == 201
    assert response.json()["message"] == "Support ticket created successfully"
    ticket = response.json()["ticket"]
    assert ticket["status"] == "open"
    assert ticket["category"] == "general"
    assert ticket["priority"] == "medium"
    assert ticket["user_id"] == str(customer.id)


def test_create_ticket_invalid_priority(client, customer_headers):
    assert create_ticket(client, customer_headers, priority="critical").status_code == 422


def test_ticket_visibility(client, customer_headers, other_headers, admin_headers):
    ticket_id = create_ticket(client, customer_headers).json()["ticket"]["id"]
    create_ticket(client, other_headers, subject="Wrong invoice", category="billing")

    assert client.get("/api/v1/support/tickets", headers=customer_headers).json()["total"] == 1
    assert client.get("/api/v1/support/tickets", headers=admin_headers).json()["total"] == 2

    assert client.get(f"/api/v1/support/tickets/{ticket_id}", headers=other_headers).status_code == 403
    assert client.get(f"/api/v1/support/tickets/{ticket_id}", headers=admin_headers).status_code == 200


def test_ticket_list_invalid_status(client, customer_headers):
    response = client.get("/api/v1/support/tickets", params={"status": "archived"}, headers=customer_headers)
    assert response.status_code == 400


def test_staff_reply_reopens_closed_ticket(client, customer_headers, admin_headers):
    ticket_id = create_ticket(client, customer_headers).json()["ticket"]["id"]

    closed = client.post(f"/api/v1/support/tickets/{ticket_id}/close", headers=customer_headers).json()["ticket"]
    assert closed["status"] == "closed"
    assert closed["closed_at"] is not None

    reply = client.post(
        f"/api/v1/support/tickets/{ticket_id}/replies",
        json={"message": "We are sending a replacement."},
        headers=admin_headers
    )
    assert reply.status_code == 201
    assert reply.json()["reply"]["is_staff"] is True

    detail = client.get(f"/api/v1/support/tickets/{ticket_id}", headers=customer_headers).json()
    assert detail["status"] == "in_progress"
    assert detail["closed_at"] is None
    assert [r["message"] for r in detail["replies"]] == ["We are sending a replacement."]


def test_customer_reply_is_not_staff(client, customer_headers):
    ticket_id = create_ticket(client, customer_headers).json()["ticket"]["id"]
    reply = client.post(f"/api/v1/support/tickets/{ticket_id}/replies", json={"message": "Any update?"}, headers=customer_headers)
    assert reply.json()["reply"]["is_staff"] is False


def test_live_chat(client, customer_headers, other_headers, admin_headers):
    started = client.post("/api/v1/support/chat/start", headers=customer_headers)
    assert started.status_code == 200
    body = started.json()
    assert body["agentName"] == "Support Team"
    session_id = body["sessionId"]

    sent = client.post(f"/api/v1/support/chat/{session_id}/message", json={"message": "Hello"}, headers=customer_headers)
    assert sent.status_code == 200
    assert sent.json()["data"]["is_from_user"] is True

    agent = client.post(f"/api/v1/support/chat/{session_id}/message", json={"message": "Hi, how can I help?"}, headers=admin_headers)
    assert agent.json()["data"]["is_from_user"] is False

    messages = client.get(f"/api/v1/support/chat/{session_id}/messages", headers=customer_headers).json()
    assert [m["message"] for m in messages] == ["Hello", "Hi, how can I help?"]

    assert client.get(f"/api/v1/support/chat/{session_id}/messages", headers=other_headers).status_code == 403


def test_chat_closed_session(client, db, customer_headers):
    session_id = client.post("/api/v1/support/chat/start", headers=customer_headers).json()["sessionId"]
    session = db.query(ChatSession).one()
    session.status = "closed"
    db.commit()

    response = client.post(f"/api/v1/support/chat/{session_id}/message", json={"message": "Hello?"}, headers=customer_headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "This chat session is closed"
