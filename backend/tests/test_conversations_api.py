from sqlalchemy import func, select

from skoropad.db.models.conversation import Conversation


async def _unread(client, headers, user):
    return (await client.get("/v1/conversations/unread", headers=headers(user))).json()["unread"]


async def test_chair_walkthrough(client, make_user, headers, session_factory):
    a = await make_user("andriy")
    b = await make_user("bohdan")

    # A lists a chair with only a Telegram contact
    res = await client.post(
        "/v1/advertisements/",
        json={
            "category": "furniture",
            "subcategory": "chairs",
            "title": "Chair",
            "description": "Oak chair",
            "telegram_contact": "@andriy",
        },
        headers=headers(a),
    )
    assert res.status_code == 201
    chair_id = res.json()["id"]

    # ...and cannot list a table without any contact
    res = await client.post(
        "/v1/advertisements/",
        json={"category": "furniture", "subcategory": "tables", "title": "Table", "description": "Pine table"},
        headers=headers(a),
    )
    assert res.status_code == 422

    # B messages A about the chair: a new conversation, A has one unread
    res = await client.post(
        "/v1/messages/",
        json={"receiver_id": str(a.id), "advertisement_id": chair_id, "content": "Still available?"},
        headers=headers(b),
    )
    assert res.status_code == 201
    conversation_id = res.json()["conversation_id"]
    assert await _unread(client, headers, a) == 1
    assert await _unread(client, headers, b) == 0

    # A replies: same conversation, B has one unread, A still has one
    res = await client.post(
        f"/v1/conversations/{conversation_id}/messages",
        json={"content": "Yes, come by tomorrow"},
        headers=headers(a),
    )
    assert res.status_code == 201
    assert res.json()["conversation_id"] == conversation_id
    assert res.json()["receiver_id"] == str(b.id)
    assert await _unread(client, headers, b) == 1
    assert await _unread(client, headers, a) == 1

    # A opens the conversation
    res = await client.post(f"/v1/conversations/{conversation_id}/read", headers=headers(a))
    assert res.status_code == 200
    assert res.json() == {"conversation_id": conversation_id, "messages_marked": 1, "unread_count": 0}
    assert await _unread(client, headers, a) == 0
    assert await _unread(client, headers, b) == 1

    async with session_factory() as session:
        assert (await session.execute(select(func.count(Conversation.id)))).scalar_one() == 1

    res = await client.get("/v1/conversations/", headers=headers(b))
    summaries = res.json()
    assert len(summaries) == 1
    assert summaries[0]["other_user"]["nickname"] == "andriy"
    assert summaries[0]["advertisement_title"] == "Chair"
    assert summaries[0]["unread_count"] == 1
    assert summaries[0]["last_message"]["content"] == "Yes, come by tomorrow"

    res = await client.get(f"/v1/conversations/{conversation_id}/messages", headers=headers(b))
    assert [m["content"] for m in res.json()] == ["Still available?", "Yes, come by tomorrow"]


async def test_sender_cannot_choose_conversation(client, make_user, headers):
    a = await make_user("andriy")
    b = await make_user("bohdan")
    c = await make_user("chrystia")

    first = (await client.post(
        "/v1/messages/", json={"receiver_id": str(b.id), "content": "hi"}, headers=headers(a)
    )).json()

    res = await client.post(
        "/v1/messages/",
        json={"receiver_id": str(c.id), "content": "hi", "conversation_id": first["conversation_id"]},
        headers=headers(a),
    )
    assert res.status_code == 201
    assert res.json()["conversation_id"] != first["conversation_id"]


async def test_start_conversation_endpoint(client, make_user, headers):
    a = await make_user("andriy")
    b = await make_user("bohdan")

    res = await client.post("/v1/conversations/start", json={"recipient_id": str(a.id)}, headers=headers(b))
    assert res.status_code == 201
    conversation = res.json()
    assert conversation["user1_unread_count"] + conversation["user2_unread_count"] == 1

    res = await client.post("/v1/conversations/start", json={"recipient_id": str(b.id)}, headers=headers(a))
    assert res.status_code == 200
    assert res.json()["id"] == conversation["id"]


async def test_outsider_gets_404(client, make_user, headers):
    a = await make_user("andriy")
    b = await make_user("bohdan")
    eve = await make_user("eve")
    msg = (await client.post(
        "/v1/messages/", json={"receiver_id": str(b.id), "content": "secret"}, headers=headers(a)
    )).json()

    for path in ("", "/messages"):
        res = await client.get(f"/v1/conversations/{msg['conversation_id']}{path}", headers=headers(eve))
        assert res.status_code == 404
    res = await client.post(f"/v1/conversations/{msg['conversation_id']}/messages", json={"content": "x"}, headers=headers(eve))
    assert res.status_code == 404
    res = await client.delete(f"/v1/conversations/{msg['conversation_id']}", headers=headers(eve))
    assert res.status_code == 404

    res = await client.delete(f"/v1/conversations/{msg['conversation_id']}", headers=headers(b))
    assert res.status_code == 204
    assert (await client.get("/v1/conversations/", headers=headers(a))).json() == []


async def test_message_to_self_is_rejected(client, make_user, headers):
    a = await make_user("andriy")
    res = await client.post("/v1/messages/", json={"receiver_id": str(a.id), "content": "me"}, headers=headers(a))
    assert res.status_code == 400
