"""
ペイロード暗号化の単体テスト
"""

import pytest
from cryptography.fernet import Fernet

from session_guard.infrastructure.security.encryption import SessionEncryption


class TestSessionEncryption:
    """SessionEncryptionクラスのテスト"""

    def test_encryption_and_decryption(self) -> None:
        """暗号化と復号化が正しく動作すること"""
        key = Fernet.generate_key().decode()
        encryptor = SessionEncryption(encryption_key=key)

        assert encryptor.enabled is True

        data = {"csrf_token": "token", "cart": [1, 2, 3], "name": "テスト"}
        encrypted = encryptor.encrypt(data)

        assert "token" not in encrypted
        assert encryptor.decrypt(encrypted) == data

    def test_disabled_encryption_stores_plain_json(self) -> None:
        """キーが空の場合は平文JSONになること"""
        encryptor = SessionEncryption(encryption_key="")

        assert encryptor.enabled is False
        encoded = encryptor.encrypt({"csrf_token": "token"})
        assert encoded == '{"csrf_token": "token"}'
        assert encryptor.decrypt(encoded) == {"csrf_token": "token"}

    def test_invalid_key_fails(self) -> None:
        """不正なキーは構築時にエラーになること"""
        with pytest.raises(ValueError):
            SessionEncryption(encryption_key="not-a-fernet-key")

    def test_tampered_data_fails(self) -> None:
        """改ざんされたデータはValueError"""
        encryptor = SessionEncryption(encryption_key=Fernet.generate_key().decode())
        encrypted = encryptor.encrypt({"csrf_token": "token"})
        tampered = encrypted[:-4] + ("AAAA" if encrypted[-4:] != "AAAA" else "BBBB")

        with pytest.raises(ValueError):
            encryptor.decrypt(tampered)

    def test_wrong_key_fails(self) -> None:
        """別のキーで暗号化されたデータはValueError"""
        encrypted = SessionEncryption(
            encryption_key=Fernet.generate_key().decode()
        ).encrypt({"csrf_token": "token"})
        other = SessionEncryption(encryption_key=Fernet.generate_key().decode())

        with pytest.raises(ValueError):
            other.decrypt(encrypted)

    def test_non_serializable_payload(self) -> None:
        """JSONシリアライズできないペイロードはValueError"""
        encryptor = SessionEncryption(encryption_key="")
        with pytest.raises(ValueError):
            encryptor.encrypt({"csrf_token": "token", "obj": object()})

    def test_non_object_payload(self) -> None:
        """オブジェクト以外のJSONはValueError"""
        encryptor = SessionEncryption(encryption_key="")
        with pytest.raises(ValueError):
            encryptor.decrypt("[1, 2, 3]")
        with pytest.raises(ValueError):
            encryptor.decrypt("{broken")
