from realtyhub.utils.passwords import hash_password, needs_rehash, verify_password
from realtyhub.utils.slugs import slugify


def test_slugify():
    assert slugify("Hello, World!") == "hello-world"
    assert slugify("  Lake   View -- Apartment ") == "lake-view-apartment"
    assert slugify("Café Déjà Vu") == "cafe-deja-vu"
    assert slugify("under_score") == "under-score"
    assert slugify("!!!") == ""
    assert slugify(None) == ""


def test_password_hash_roundtrip():
    encoded = hash_password("correct horse")
    assert encoded.startswith("$argon2id$")
    assert verify_password("correct horse", encoded)
    assert not verify_password("wrong horse", encoded)
    assert not needs_rehash(encoded)


def test_verify_rejects_missing_or_garbage_hashes():
    assert not verify_password("secret", None)
    assert not verify_password("", hash_password("secret"))
    assert not verify_password("secret", "not-a-hash")
