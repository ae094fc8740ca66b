async def test_tally_for_unknown_profile_is_404(client):
    resp = await client.get("/votes/999")
    assert resp.status_code == 404


async def test_cast_requires_login(client, profile):
    resp = await client.put(f"/votes/{profile.id}", json={"classification": "Nordid"})
    assert resp.status_code == 401


async def test_cast_vote_returns_fresh_tally(client, profile, auth_headers):
    resp = await client.put(
        f"/votes/{profile.id}",
        json={"classification": "Nordid"},
        headers=auth_headers("alice"),
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["profile_id"] == profile.id
    assert body["characteristic_type"] == "phenotype"
    assert body["user_vote"] == "Nordid"
    assert body["total"] == 1
    assert body["votes"] == [{"classification": "Nordid", "count": 1, "percentage": 100.0}]


async def test_cast_twice_keeps_one_vote_per_user(client, profile, auth_headers):
    headers = auth_headers("alice")
    await client.put(f"/votes/{profile.id}", json={"classification": "Nordid"}, headers=headers)
    resp = await client.put(f"/votes/{profile.id}", json={"classification": "Alpinid"}, headers=headers)

    body = resp.json()
    assert body["total"] == 1
    assert body["user_vote"] == "Alpinid"
    assert [v["classification"] for v in body["votes"]] == ["Alpinid"]


async def test_tally_orders_by_count_and_hides_user_vote_for_anonymous(client, profile, auth_headers):
    await client.put(f"/votes/{profile.id}", json={"classification": "Nordid"}, headers=auth_headers("u1"))
    await client.put(f"/votes/{profile.id}", json={"classification": "Alpinid"}, headers=auth_headers("u2"))
    await client.put(f"/votes/{profile.id}", json={"classification": "Alpinid"}, headers=auth_headers("u3"))

    resp = await client.get(f"/votes/{profile.id}")
    body = resp.json()
    assert [(v["classification"], v["count"]) for v in body["votes"]] == [("Alpinid", 2), ("Nordid", 1)]
    assert body["user_vote"] is None
    assert body["total"] == 3

    mine = await client.get(f"/votes/{profile.id}", headers=auth_headers("u1"))
    assert mine.json()["user_vote"] == "Nordid"


async def test_change_without_existing_vote_is_404(client, profile, auth_headers):
    resp = await client.patch(
        f"/votes/{profile.id}",
        json={"classification": "Nordid"},
        headers=auth_headers("alice"),
    )
    assert resp.status_code == 404


async def test_change_vote_moves_the_count(client, profile, auth_headers):
    await client.put(f"/votes/{profile.id}", json={"classification": "Nordid"}, headers=auth_headers("u1"))
    await client.put(f"/votes/{profile.id}", json={"classification": "Nordid"}, headers=auth_headers("u2"))

    resp = await client.patch(
        f"/votes/{profile.id}",
        json={"classification": "Dinarid"},
        headers=auth_headers("u1"),
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 2
    assert body["user_vote"] == "Dinarid"
    assert {v["classification"]: v["count"] for v in body["votes"]} == {"Nordid": 1, "Dinarid": 1}


async def test_rejects_unknown_characteristic_and_blank_classification(client, profile, auth_headers):
    headers = auth_headers("alice")
    bad_type = await client.put(
        f"/votes/{profile.id}",
        json={"classification": "Nordid", "characteristic_type": "Shoe Size"},
        headers=headers,
    )
    assert bad_type.status_code == 400

    blank = await client.put(f"/votes/{profile.id}", json={"classification": "   "}, headers=headers)
    assert blank.status_code == 400

    empty = await client.put(f"/votes/{profile.id}", json={"classification": ""}, headers=headers)
    assert empty.status_code == 400
    assert empty.json()["detail"] == "Classification is required"

    bad_query = await client.get(f"/votes/{profile.id}", params={"characteristic_type": "Shoe Size"})
    assert bad_query.status_code == 400


async def test_votes_are_scoped_per_characteristic(client, profile, auth_headers):
    headers = auth_headers("alice")
    await client.put(f"/votes/{profile.id}", json={"classification": "Nordid"}, headers=headers)
    await client.put(
        f"/votes/{profile.id}",
        json={"classification": "Northern Europe", "characteristic_type": "Primary Geographic"},
        headers=headers,
    )

    phenotype = (await client.get(f"/votes/{profile.id}")).json()
    geographic = (
        await client.get(f"/votes/{profile.id}", params={"characteristic_type": "Primary Geographic"})
    ).json()
    assert phenotype["total"] == 1
    assert geographic["votes"][0]["classification"] == "Northern Europe"


async def test_geographic_votes(client, profile, auth_headers):
    await client.put(
        f"/votes/{profile.id}",
        json={"classification": "Levant", "characteristic_type": "Primary Geographic"},
        headers=auth_headers("u1"),
    )
    await client.put(
        f"/votes/{profile.id}",
        json={"classification": "Armenoid", "characteristic_type": "Primary Phenotype"},
        headers=auth_headers("u1"),
    )

    resp = await client.get(f"/votes/{profile.id}/geographic")
    assert resp.status_code == 200
    body = resp.json()
    assert set(body["geographic_votes"]) == {"Primary Geographic", "Secondary Geographic", "Tertiary Geographic"}
    assert body["geographic_votes"]["Primary Geographic"][0]["classification"] == "Levant"
    assert body["geographic_votes"]["Secondary Geographic"] == []
    assert body["phenotype_votes"]["Primary Phenotype"][0]["count"] == 1


async def test_physical_votes_include_callers_choices(client, profile, auth_headers):
    await client.put(
        f"/votes/{profile.id}",
        json={"classification": "Brown", "characteristic_type": "Eye Color"},
        headers=auth_headers("u1"),
    )
    await client.put(
        f"/votes/{profile.id}",
        json={"classification": "Blue", "characteristic_type": "Eye Color"},
        headers=auth_headers("u2"),
    )

    resp = await client.get(f"/votes/{profile.id}/physical", headers=auth_headers("u2"))
    body = resp.json()
    eye = next(c for c in body["characteristics"] if c["name"] == "Eye Color")
    assert [o["option"] for o in eye["votes"]] == ["Brown", "Blue"]
    assert eye["votes"][0]["percentage"] == 50.0
    assert body["user_votes"] == {"Eye Color": "Blue"}


async def test_my_votes_and_unique_voters(client, profile, auth_headers):
    await client.put(f"/votes/{profile.id}", json={"classification": "Nordid"}, headers=auth_headers("u1"))
    await client.put(
        f"/votes/{profile.id}",
        json={"classification": "Light", "characteristic_type": "Skin Color"},
        headers=auth_headers("u1"),
    )
    await client.put(f"/votes/{profile.id}", json={"classification": "Alpinid"}, headers=auth_headers("u2"))

    mine = await client.get(f"/votes/{profile.id}/mine", headers=auth_headers("u1"))
    assert mine.json() == {"phenotype": "Nordid", "Skin Color": "Light"}

    voters = await client.get(f"/votes/{profile.id}/voters")
    assert voters.json() == {"profile_id": profile.id, "unique_voters": 2}
