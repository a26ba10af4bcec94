def test_follow_toggles(client, make_user, login_as):
    alice = make_user("Alice")
    bob = make_user("Bob")
    bob_id = login_as(bob)
    login_as(alice)

    assert client.post(f"/api/follow/{bob_id}").json() == {"following": True}
    assert client.post(f"/api/follow/{bob_id}").json() == {"following": False}
    assert client.post(f"/api/follow/{bob_id}").json() == {"following": True}


def test_cannot_follow_self(client, make_user, login_as):
    alice_id = login_as(make_user("Alice"))

    resp = client.post(f"/api/follow/{alice_id}")

    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "You can't follow yourself"}


def test_follow_unknown_user(client, make_user, login_as):
    login_as(make_user("Alice"))

    resp = client.post("/api/follow/9999")

    assert resp.status_code == 404
    assert resp.json()["message"] == "User not found"


def test_all_users_with_follow_status(client, make_user, login_as):
    alice = make_user("Alice")
    bob = make_user("Bob")
    carol = make_user("Carol")
    dave = make_user("Dave")
    for user in (bob, carol, dave, alice):
        login_as(user)
    # Carol follows Alice; Alice follows Bob and Carol
    login_as(carol)
    client.post(f"/api/follow/{alice['id']}")
    login_as(alice)
    client.post(f"/api/follow/{bob['id']}")
    client.post(f"/api/follow/{carol['id']}")

    resp = client.get("/api/users/all")

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    users = {u["username"]: u for u in body["users"]}
    assert set(users) == {"Bob", "Carol", "Dave"}
    assert (users["Bob"]["is_following"], users["Bob"]["follows_back"]) == (True, False)
    assert (users["Carol"]["is_following"], users["Carol"]["follows_back"]) == (True, True)
    assert (users["Dave"]["is_following"], users["Dave"]["follows_back"]) == (False, False)
    assert users["Dave"]["profile_image"] == "default.png"


def test_friends_are_mutual_follows_only(client, make_user, login_as):
    alice = make_user("Alice")
    bob = make_user("Bob")
    carol = make_user("Carol")
    dave = make_user("Dave")
    for user in (bob, carol, dave):
        login_as(user)
    login_as(alice)
    client.post(f"/api/follow/{bob['id']}")
    client.post(f"/api/follow/{carol['id']}")
    login_as(bob)
    client.post(f"/api/follow/{alice['id']}")
    login_as(dave)
    client.post(f"/api/follow/{alice['id']}")
    login_as(alice)

    resp = client.get("/api/friends")

    assert resp.status_code == 200
    assert resp.json() == [{"id": bob["id"], "username": "Bob", "profile_image": "default.png"}]


def test_unfollow_breaks_friendship(client, friends, login_as):
    alice, bob = friends
    login_as(alice)
    assert [f["username"] for f in client.get("/api/friends").json()] == ["Bob"]

    client.post(f"/api/follow/{bob['id']}")

    assert client.get("/api/friends").json() == []
    login_as(bob)
    assert client.get("/api/friends").json() == []
