import json

from chocolate import (
    Environment,
    Registry,
    Secp256k1Backend,
    SqliteStorage,
    account_for_secret,
    challenge_digest,
    config,
    public_key_for,
)
from chocolate.cli import main

SECRET = (777).to_bytes(32, "big")


def test_keygen_prints_key(capsys):
    assert main(["keygen"]) == 0
    key = json.loads(capsys.readouterr().out)
    assert account_for_secret(bytes.fromhex(key["secret"])).hex() == key["account"]


def test_keygen_writes_file(tmp_path, capsys):
    out = tmp_path / "key.json"
    assert main(["keygen", "--output", str(out)]) == 0
    key = json.loads(out.read_text())
    assert key["public_key"] == public_key_for(bytes.fromhex(key["secret"])).hex()


def test_address_from_secret_and_pubkey(capsys):
    expected = account_for_secret(SECRET).hex()
    assert main(["address", "--secret", SECRET.hex()]) == 0
    assert capsys.readouterr().out.strip() == expected
    assert main(["address", "--pubkey", "0x" + public_key_for(SECRET).hex()]) == 0
    assert capsys.readouterr().out.strip() == expected


def test_challenge_and_sign(capsys):
    account = account_for_secret(SECRET)
    assert main(["challenge", "--account", account.hex(), "--index", "3"]) == 0
    message = bytes.fromhex(capsys.readouterr().out.strip())
    assert message == account.encode() + b"\x00\x00\x00\x03"

    assert main(["digest", "--message", message.hex()]) == 0
    assert capsys.readouterr().out.strip() == challenge_digest(message).hex()

    assert main(["sign", "--secret", SECRET.hex(), "--message", message.hex()]) == 0
    signature = bytes.fromhex(capsys.readouterr().out.strip())
    recovered = Secp256k1Backend().ecdsa_recover(signature, challenge_digest(message))
    assert recovered == public_key_for(SECRET)


def test_bad_input_exit_code(capsys):
    assert main(["challenge", "--account", "abcd", "--index", "1"]) == 1
    assert "Error" in capsys.readouterr().err


def test_status_reads_configured_registry(monkeypatch, tmp_path, capsys, accounts):
    path = tmp_path / "chocolate.db"
    env = Environment(accounts.alice)
    seeded = Registry(SqliteStorage(path), env, admin=accounts.alice)
    seeded.add_project()
    seeded.add_project()
    seeded.add_authorizer(accounts.charlie)
    seeded.storage.close()

    monkeypatch.setattr(config, "STORAGE_BACKEND", "sqlite")
    monkeypatch.setattr(config, "DB_PATH", str(path))
    monkeypatch.setattr(config, "ADMIN_ACCOUNT", accounts.alice.hex())

    assert main(["status"]) == 0
    status = json.loads(capsys.readouterr().out)
    assert status["storage"] == "sqlite"
    assert status["admin"] == accounts.alice.hex()
    assert status["projects"] == 2
    assert status["authorizers"] == 1
    assert status["verifications_issued"] == 0


def test_status_rejects_bad_config(monkeypatch, capsys):
    monkeypatch.setattr(config, "STORAGE_BACKEND", "redis")
    assert main(["status"]) == 1
    assert json.loads(capsys.readouterr().out)["checks"]["storage_backend"] is False
