import os

from conftest import PNG_BYTES


def test_upload_stores_image_and_redirects(client, settings, make_user, login_as):
    login_as(make_user("Alice"))

    resp = client.post(
        "/api/upload",
        files={"image": ("Holiday.JPG", PNG_BYTES, "image/jpeg")},
        data={"caption": "holiday", "emotion": "excited"},
        follow_redirects=False,
    )

    assert resp.status_code == 303
    assert resp.headers["location"] == "/gallery.html"
    memories = client.get("/api/my-memories").json()
    assert len(memories) == 1
    memory = memories[0]
    assert memory["caption"] == "holiday"
    assert memory["emotion"] == "excited"
    assert memory["username"] == "Alice"
    assert memory["image_path"].endswith(".jpg")
    name = os.path.basename(memory["image_path"])
    assert os.path.exists(os.path.join(settings.upload_dir, name))
    assert client.get(memory["image_path"]).content == PNG_BYTES


def test_upload_requires_image(client, make_user, login_as):
    login_as(make_user("Alice"))

    resp = client.post("/api/upload", data={"caption": "nothing"}, follow_redirects=False)

    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "Image required"}
    assert client.get("/api/my-memories").json() == []


def test_upload_rejects_non_image(client, make_user, login_as):
    login_as(make_user("Alice"))

    resp = client.post(
        "/api/upload",
        files={"image": ("notes.txt", b"hello", "text/plain")},
        follow_redirects=False,
    )

    assert resp.status_code == 400
    assert client.get("/api/my-memories").json() == []


def test_uploads_get_distinct_names(client, make_user, login_as, upload):
    login_as(make_user("Alice"))
    first = upload(filename="same.png")
    second = upload(filename="same.png")

    assert first["image_path"] != second["image_path"]


def test_my_memories_only_lists_own(client, friends, login_as, upload):
    alice, bob = friends
    login_as(alice)
    upload(caption="mine")
    login_as(bob)
    upload(caption="bob's")

    login_as(alice)
    assert [m["caption"] for m in client.get("/api/my-memories").json()] == ["mine"]


def test_owner_can_delete_memory(client, settings, make_user, login_as, upload):
    login_as(make_user("Alice"))
    memory = upload()
    client.post(f"/api/like/{memory['id']}")
    client.post(f"/api/comment/{memory['id']}", json={"text": "bye"})

    resp = client.delete(f"/api/memories/{memory['id']}")

    assert resp.status_code == 200
    assert resp.json()["success"] is True
    assert client.get("/api/my-memories").json() == []
    assert client.get("/api/memories").json() == []
    name = os.path.basename(memory["image_path"])
    assert not os.path.exists(os.path.join(settings.upload_dir, name))


def test_non_owner_cannot_delete_memory(client, friends, login_as, upload):
    alice, bob = friends
    login_as(alice)
    memory = upload()

    login_as(bob)
    resp = client.delete(f"/api/memories/{memory['id']}")

    assert resp.status_code == 403
    assert resp.json()["success"] is False
    assert [m["id"] for m in client.get("/api/memories").json()] == [memory["id"]]
    login_as(alice)
    assert [m["id"] for m in client.get("/api/my-memories").json()] == [memory["id"]]


def test_delete_unknown_memory(client, make_user, login_as):
    login_as(make_user("Alice"))

    assert client.delete("/api/memories/9999").status_code == 404


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
