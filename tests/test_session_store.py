from pixsoul.core.session_store import SessionStore


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_create_and_get():
    store = SessionStore(ttl=60)

    sid = store.create({"user": {"id": 1}})

    assert store.get(sid) == {"user": {"id": 1}}
    assert store.get("unknown") is None
    assert store.get(None) is None


def test_ids_are_unique_and_opaque():
    store = SessionStore(ttl=60)

    sids = {store.create() for _ in range(50)}

    assert len(sids) == 50
    assert all(len(sid) >= 32 for sid in sids)


def test_records_expire_after_fixed_ttl():
    clock = FakeClock()
    store = SessionStore(ttl=3600, timer=clock)
    sid = store.create({"user": {"id": 1}})

    clock.now += 3599
    assert store.get(sid) is not None

    clock.now += 2
    assert store.get(sid) is None


def test_update_does_not_extend_lifetime():
    clock = FakeClock()
    store = SessionStore(ttl=100, timer=clock)
    sid = store.create({"a": 1})

    clock.now += 90
    assert store.update(sid, {"a": 2}) is True
    assert store.get(sid) == {"a": 2}

    clock.now += 20
    assert store.get(sid) is None
    assert store.update(sid, {"a": 3}) is False


def test_get_returns_a_copy():
    store = SessionStore(ttl=60)
    sid = store.create({"a": 1})

    store.get(sid)["a"] = 2

    assert store.get(sid) == {"a": 1}


def test_destroy():
    store = SessionStore(ttl=60)
    sid = store.create()

    store.destroy(sid)
    store.destroy(sid)
    store.destroy(None)

    assert store.get(sid) is None
    assert len(store) == 0
