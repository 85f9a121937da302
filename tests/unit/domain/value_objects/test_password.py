"""Unit tests for the PasswordSecret value object.

bcrypt runs at the production work factor here, so each case is kept to a
handful of hashes.
"""

import pytest

from warden.core.exceptions import HashingError
from warden.domain.value_objects.password import PasswordSecret


class TestPasswordSecret:
    """Test cases for hashing and verifying password secrets."""

    @pytest.mark.parametrize(
        "plaintext",
        [
            "pw12345678",
            "x" * 72,
            "pässwörd-ü€",
        ],
    )
    def test_set_then_matches_same_plaintext(self, plaintext):
        """A digest verifies the plaintext it was computed from."""
        # Arrange
        secret = PasswordSecret()

        # Act
        secret.set(plaintext)

        # Assert
        assert secret.matches(plaintext) is True

    def test_matches_rejects_different_plaintext_without_error(self):
        """A wrong candidate is reported as False, never as an exception."""
        # Arrange
        secret = PasswordSecret()
        secret.set("pw12345678")

        # Act & Assert
        assert secret.matches("pw12345679") is False
        assert secret.matches("PW12345678") is False
        assert secret.matches("") is False

    def test_set_is_salted(self):
        """Identical plaintexts produce different digests that both verify."""
        # Arrange
        first, second = PasswordSecret(), PasswordSecret()

        # Act
        first.set("pw12345678")
        second.set("pw12345678")

        # Assert
        assert first.hash != second.hash
        assert first.matches("pw12345678")
        assert second.matches("pw12345678")

    def test_set_keeps_plaintext_in_memory_and_stores_bcrypt_digest(self):
        """The plaintext stays available on the instance; the digest is bcrypt."""
        # Arrange
        secret = PasswordSecret()

        # Act
        secret.set("pw12345678")

        # Assert
        assert secret.plaintext == "pw12345678"
        assert secret.hash.startswith("$2b$12$")
        assert len(secret.hash) == 60
        assert "pw12345678" not in secret.hash

    def test_from_hash_has_no_plaintext(self):
        """A secret rebuilt from storage carries the digest only."""
        # Arrange
        original = PasswordSecret()
        original.set("pw12345678")

        # Act
        loaded = PasswordSecret.from_hash(original.hash)

        # Assert
        assert loaded.plaintext is None
        assert loaded.hash == original.hash
        assert loaded.matches("pw12345678")

    def test_matches_with_corrupt_digest_raises_hashing_error(self):
        """A structurally invalid stored digest is the only error case."""
        # Arrange
        secret = PasswordSecret.from_hash("not-a-bcrypt-digest")

        # Act & Assert
        with pytest.raises(HashingError):
            secret.matches("pw12345678")

    def test_matches_rejects_nul_candidate_without_error(self):
        """A candidate bcrypt refuses is a wrong password, not a corrupt digest."""
        # Arrange
        secret = PasswordSecret()
        secret.set("pw12345678")

        # Act & Assert
        assert secret.matches("pa55\x00word") is False
        assert secret.matches("pw12345678") is True

    def test_matches_without_digest_raises_hashing_error(self):
        """Verifying against no digest at all is treated as corruption."""
        # Act & Assert
        with pytest.raises(HashingError):
            PasswordSecret().matches("pw12345678")

    def test_set_wraps_primitive_failure(self, mocker):
        """A failure of the hashing primitive surfaces as HashingError and leaves no state."""
        # Arrange
        mocker.patch(
            "warden.domain.value_objects.password.hash_password",
            side_effect=RuntimeError("bcrypt backend unavailable"),
        )
        secret = PasswordSecret()

        # Act & Assert
        with pytest.raises(HashingError):
            secret.set("pw12345678")
        assert secret.hash is None
        assert secret.plaintext is None

    def test_repr_does_not_expose_material(self):
        """Neither plaintext nor digest appear in the representation."""
        # Arrange
        secret = PasswordSecret()
        secret.set("pw12345678")

        # Act
        text = repr(secret)

        # Assert
        assert "pw12345678" not in text
        assert secret.hash not in text
