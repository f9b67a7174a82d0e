import json
import os
import sys
import tempfile
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from spotify_api.token_manager import TokenInfo, TokenManager


class TestTokenInfo(unittest.TestCase):
    def test_from_spotify_token_response_computes_absolute_expiry_in_ms(self):
        token = TokenInfo.from_spotify_token_response(
            {"access_token": "at", "refresh_token": "rt", "expires_in": 3600, "token_type": "Bearer"},
            now=1_000_000,
        )
        self.assertEqual(token.access_token, "at")
        self.assertEqual(token.refresh_token, "rt")
        self.assertEqual(token.expires_at, 1_000_000 + 3_600_000)

    def test_missing_refresh_token_falls_back_to_previous(self):
        token = TokenInfo.from_spotify_token_response(
            {"access_token": "at2", "expires_in": 60},
            now=0,
            previous_refresh_token="old-rt",
        )
        self.assertEqual(token.refresh_token, "old-rt")

    def test_is_expired_uses_strict_greater_than(self):
        token = TokenInfo(access_token="at", refresh_token="rt", expires_at=5000)
        self.assertFalse(token.is_expired(now=4999))
        self.assertFalse(token.is_expired(now=5000))
        self.assertTrue(token.is_expired(now=5001))

    def test_is_expired_with_skew(self):
        token = TokenInfo(access_token="at", refresh_token="rt", expires_at=5000)
        self.assertTrue(token.is_expired(now=4500, skew_ms=1000))


class TestTokenManager(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.cache_path = os.path.join(self._tmp.name, "spotify_tokens.json")
        self.tm = TokenManager(cache_path=self.cache_path)

    def tearDown(self):
        self._tmp.cleanup()

    def test_token_cache_roundtrip(self):
        token = TokenInfo(access_token="at", refresh_token="rt", expires_at=9999999999000)
        self.tm.save(token)

        loaded = self.tm.load()
        self.assertEqual(loaded, token)

    def test_saved_file_uses_documented_field_names(self):
        self.tm.save(TokenInfo(access_token="at", refresh_token="rt", expires_at=123))
        with open(self.cache_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        self.assertEqual(data["access_token"], "at")
        self.assertEqual(data["refresh_token"], "rt")
        self.assertEqual(data["expires_at"], 123)

    def test_save_leaves_no_temp_files_behind(self):
        self.tm.save(TokenInfo(access_token="at", refresh_token="rt", expires_at=1))
        self.tm.save(TokenInfo(access_token="at2", refresh_token="rt", expires_at=2))
        self.assertEqual(os.listdir(self._tmp.name), ["spotify_tokens.json"])
        self.assertEqual(self.tm.load().access_token, "at2")

    def test_save_creates_missing_directory(self):
        nested = os.path.join(self._tmp.name, "data", "tokens.json")
        tm = TokenManager(cache_path=nested)
        tm.save(TokenInfo(access_token="at", refresh_token="rt", expires_at=1))
        self.assertTrue(os.path.exists(nested))

    def test_load_missing_file_returns_none(self):
        self.assertIsNone(self.tm.load())

    def test_load_corrupt_file_returns_none(self):
        with open(self.cache_path, "w", encoding="utf-8") as f:
            f.write("{not json")
        self.assertIsNone(self.tm.load())

    def test_load_incomplete_payload_returns_none(self):
        with open(self.cache_path, "w", encoding="utf-8") as f:
            json.dump({"refresh_token": "rt"}, f)
        self.assertIsNone(self.tm.load())

    def test_load_non_finite_expiry_returns_none(self):
        for literal in ["Infinity", "-Infinity", "NaN"]:
            with self.subTest(expires_at=literal):
                with open(self.cache_path, "w", encoding="utf-8") as f:
                    f.write('{"access_token": "at", "refresh_token": "rt", "expires_at": ' + literal + "}")
                self.assertIsNone(self.tm.load())

    def test_clear_removes_file(self):
        self.tm.save(TokenInfo(access_token="at", refresh_token="rt", expires_at=1))
        self.assertTrue(self.tm.clear())
        self.assertFalse(os.path.exists(self.cache_path))
        self.assertFalse(self.tm.clear())


if __name__ == "__main__":
    unittest.main(verbosity=2)
