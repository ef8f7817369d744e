"""Tests for PBKDF2 password hashing."""

from unittest.mock import patch

import pytest

from voxmail.server.passwords import ALGORITHM, hash_password, verify_password


@pytest.mark.usefixtures("fast_kdf")
class TestPasswordHashing:
    def test_round_trip(self):
        stored = hash_password("correct horse")
        assert verify_password("correct horse", stored)
        assert not verify_password("wrong horse", stored)

    def test_stored_format(self):
        algorithm, iterations, salt, key = hash_password("secret123").split("$")
        assert algorithm == ALGORITHM
        assert iterations == "1000"
        assert salt and key

    def test_salted(self):
        assert hash_password("secret123") != hash_password("secret123")

    def test_old_iteration_count_still_verifies(self):
        stored = hash_password("secret123")
        with patch("voxmail.server.passwords.KDF_ITERATIONS", 2000):
            assert verify_password("secret123", stored)

    @pytest.mark.parametrize(
        "stored",
        [
            "",
            "not-a-hash",
            "md5$1000$c2FsdA==$a2V5",
            "pbkdf2_sha256$lots$c2FsdA==$a2V5",
            "pbkdf2_sha256$1000$a$a2V5",
        ],
    )
    def test_malformed_hash(self, stored):
        assert verify_password("secret123", stored) is False
