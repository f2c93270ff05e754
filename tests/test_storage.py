from taskmasters.client import storage


def test_logout_keeps_server_url():
    storage.store_server_url("http://tm.test")
    storage.store_auth("tok", {"id": 1, "username": "testuser"})

    storage.clear_auth()

    assert storage.get_token() is None
    assert storage.get_user() is None
    assert storage.get_server_url() == "http://tm.test"


def test_corrupt_state_file_reads_as_empty():
    path = storage.storage_file()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("{not json", encoding="utf-8")

    assert storage.load_state() == {}

    storage.store_auth("tok", {"id": 1, "username": "testuser"})
    assert storage.get_token() == "tok"
