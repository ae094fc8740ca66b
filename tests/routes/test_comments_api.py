async def _comment(client, profile_id, headers, content="Great photo", parent=None):
    resp = await client.post(
        f"/profiles/{profile_id}/comments",
        json={"content": content, "parent_comment_id": parent},
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


async def test_comment_carries_authors_votes(client, profile, auth_headers):
    headers = auth_headers("alice")
    await client.put(f"/votes/{profile.id}", json={"classification": "Nordid"}, headers=headers)

    created = await _comment(client, profile.id, headers)
    assert created["content"] == "Great photo"
    assert created["user"]["id"] == "alice"
    assert created["user_votes"] == {"phenotype": "Nordid"}

    listed = (await client.get(f"/profiles/{profile.id}/comments")).json()
    assert [c["id"] for c in listed] == [created["id"]]
    assert listed[0]["user"]["nickname"]


async def test_profanity_is_rejected(client, profile, auth_headers):
    resp = await client.post(
        f"/profiles/{profile.id}/comments",
        json={"content": "what a load of shit"},
        headers=auth_headers("alice"),
    )
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "PROFANITY"


async def test_replies_nest_and_notify_parent_author(client, profile, auth_headers):
    parent = await _comment(client, profile.id, auth_headers("alice"), "First!")
    reply = await _comment(client, profile.id, auth_headers("bob"), "Agreed", parent=parent["id"])
    # replying to yourself does not notify
    await _comment(client, profile.id, auth_headers("alice"), "Thanks", parent=parent["id"])

    listed = (await client.get(f"/profiles/{profile.id}/comments")).json()
    assert len(listed) == 1
    assert [r["id"] for r in listed[0]["replies"]][0] == reply["id"]
    assert len(listed[0]["replies"]) == 2

    notes = (await client.get("/notifications", headers=auth_headers("alice"))).json()
    assert len(notes) == 1
    assert notes[0]["type"] == "reply"
    assert notes[0]["comment_id"] == reply["id"]
    assert notes[0]["is_read"] is False

    read = await client.post(f"/notifications/{notes[0]['id']}/read", headers=auth_headers("alice"))
    assert read.json()["is_read"] is True
    unread = await client.get("/notifications", params={"unread_only": True}, headers=auth_headers("alice"))
    assert unread.json() == []

    # someone else's notification
    other = await client.post(f"/notifications/{notes[0]['id']}/read", headers=auth_headers("bob"))
    assert other.status_code == 404


async def test_reply_to_comment_on_other_profile_is_rejected(client, make_profile, auth_headers):
    first = await make_profile("Ada Lovelace")
    second = await make_profile("Jane Doe")
    parent = await _comment(client, first.id, auth_headers("alice"))

    resp = await client.post(
        f"/profiles/{second.id}/comments",
        json={"content": "Hi", "parent_comment_id": parent["id"]},
        headers=auth_headers("bob"),
    )
    assert resp.status_code == 400


async def test_like_toggle_and_top_sort(client, profile, auth_headers):
    older = await _comment(client, profile.id, auth_headers("alice"), "Older")
    newer = await _comment(client, profile.id, auth_headers("bob"), "Newer")

    liked = await client.post(f"/comments/{newer['id']}/like", headers=auth_headers("carol"))
    assert liked.json() == {"liked": True, "count": 1}

    top = (await client.get(f"/profiles/{profile.id}/comments", params={"sort": "top"},
                            headers=auth_headers("carol"))).json()
    assert [c["id"] for c in top] == [newer["id"], older["id"]]
    assert top[0]["is_liked"] is True
    assert top[1]["is_liked"] is False

    recent = (await client.get(f"/profiles/{profile.id}/comments")).json()
    assert [c["id"] for c in recent] == [older["id"], newer["id"]]

    unliked = await client.post(f"/comments/{newer['id']}/like", headers=auth_headers("carol"))
    assert unliked.json() == {"liked": False, "count": 0}


async def test_delete_comment_removes_replies(client, profile, auth_headers):
    parent = await _comment(client, profile.id, auth_headers("alice"), "Parent")
    await _comment(client, profile.id, auth_headers("bob"), "Child", parent=parent["id"])

    forbidden = await client.delete(f"/comments/{parent['id']}", headers=auth_headers("bob"))
    assert forbidden.status_code == 403

    resp = await client.delete(f"/comments/{parent['id']}", headers=auth_headers("alice"))
    assert resp.status_code == 204
    assert (await client.get(f"/profiles/{profile.id}/comments")).json() == []
    assert (await client.get("/notifications", headers=auth_headers("alice"))).json() == []
