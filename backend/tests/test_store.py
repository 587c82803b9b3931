import threading

from keyrelay.core.store import MemoryRecordStore, SqlRecordStore
from keyrelay.core.user import register_user


def test_create_user_if_absent_is_idempotent(store):
    first, created = store.create_user_if_absent("alice", "PEM_A", "t1")
    assert created
    again, created = store.create_user_if_absent("alice", "PEM_OTHER", "t2")
    assert not created
    assert again.token == "t1"
    assert again.public_key_pem == "PEM_A"
    assert store.list_usernames() == ["alice"]


def test_find_user(store):
    assert store.find_user("alice") is None
    store.create_user_if_absent("alice", "PEM_A", "t1")
    user = store.find_user("alice")
    assert user.username == "alice"
    assert user.token == "t1"
    assert user.created_at.tzinfo is not None


def test_messages_are_scoped_to_recipient_and_ordered(store):
    store.append_message("alice", "bob", "c1", "k1", "iv1")
    store.append_message("carol", "alice", "c2", "k2", "iv2")
    store.append_message("carol", "bob", "c3", "k3", "iv3")
    store.append_message("alice", "bob", "c4", "k4", "iv4")

    to_bob = store.list_messages_to("bob")
    assert [m.ciphertext for m in to_bob] == ["c1", "c3", "c4"]
    assert all(m.recipient == "bob" for m in to_bob)
    assert [m.ciphertext for m in store.list_messages_to("alice")] == ["c2"]
    assert store.list_messages_to("nobody") == []


def test_list_usernames_in_registration_order(store):
    for name in ("bob", "alice", "carol"):
        store.create_user_if_absent(name, "PEM", name + "-token")
    assert store.list_usernames() == ["bob", "alice", "carol"]


def test_sql_store_survives_lost_registration_race(sql_store, monkeypatch):
    sql_store.create_user_if_absent("alice", "PEM_A", "winner")

    # Make the pre-insert check miss the existing row, as a concurrent writer would
    real_find = SqlRecordStore.find_user
    calls = []

    def racing_find(self, username):
        calls.append(username)
        if len(calls) == 1:
            return None
        return real_find(self, username)

    monkeypatch.setattr(SqlRecordStore, "find_user", racing_find)

    user, created = sql_store.create_user_if_absent("alice", "PEM_B", "loser")
    assert not created
    assert user.token == "winner"
    assert user.public_key_pem == "PEM_A"


def test_memory_store_concurrent_registration_creates_one_user():
    store = MemoryRecordStore()
    tokens = []
    barrier = threading.Barrier(16)

    def worker():
        barrier.wait()
        tokens.append(register_user(store, "alice", "PEM_A"))

    threads = [threading.Thread(target=worker) for _ in range(16)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(set(tokens)) == 1
    assert store.list_usernames() == ["alice"]


def test_usernames_have_no_length_limit(store):
    name = "x" * 1000
    store.create_user_if_absent(name, "PEM", "t1")
    store.append_message(name, "y" * 1000, "c", "k", "iv")
    assert store.find_user(name).username == name
    assert len(store.list_messages_to("y" * 1000)) == 1
