from paillier_cli import (
    FileError,
    KeystoreError,
    create_keystore,
    load_keystore,
    retrieve_key_from_keystore,
    store_key_in_keystore,
)


def test_store_and_retrieve(tmp_path):
    path = str(tmp_path / "keystore.json")
    assert create_keystore("hunter2", path) is None
    assert store_key_in_keystore("hunter2", "alice", '{"secret":1}', path) is None
    assert retrieve_key_from_keystore("hunter2", "alice", path) == '{"secret":1}'


def test_store_creates_missing_keystore(tmp_path):
    path = str(tmp_path / "new.json")
    assert store_key_in_keystore("pw", "bob", "text", path) is None
    keystore, _ = load_keystore("pw", path)
    assert list(keystore["keys"]) == ["bob"]


def test_wrong_passphrase(tmp_path):
    path = str(tmp_path / "keystore.json")
    store_key_in_keystore("right", "alice", "text", path)
    err = retrieve_key_from_keystore("wrong", "alice", path)
    assert isinstance(err, KeystoreError)
    assert "Wrong passphrase" in str(err)


def test_store_with_wrong_passphrase_is_refused(tmp_path):
    path = str(tmp_path / "keystore.json")
    store_key_in_keystore("right", "alice", "text", path)
    assert isinstance(store_key_in_keystore("wrong", "bob", "text", path), KeystoreError)
    assert retrieve_key_from_keystore("right", "alice", path) == "text"


def test_unknown_key_name(tmp_path):
    path = str(tmp_path / "keystore.json")
    create_keystore("pw", path)
    assert isinstance(retrieve_key_from_keystore("pw", "nobody", path), KeystoreError)


def test_missing_keystore_file(tmp_path):
    assert isinstance(retrieve_key_from_keystore("pw", "alice", str(tmp_path / "absent.json")), FileError)


def test_corrupt_keystore(tmp_path):
    path = tmp_path / "keystore.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")
    assert isinstance(load_keystore("pw", str(path)), KeystoreError)
