import sys
import time
import unittest
from pathlib import Path

import jwt

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from resume_tailor.core.errors import AuthError
from resume_tailor.core.security import TokenVerifier, authenticate, bearer_token

SECRET = "test-secret-key-that-is-long-enough-for-hs256"


def make_token(sub="user-1", *, secret=SECRET, aud="authenticated", expires_in=3600, **claims):
    payload = {"sub": sub, "aud": aud, "exp": int(time.time()) + expires_in, **claims}
    return jwt.encode(payload, secret, algorithm="HS256")


class SecurityTests(unittest.TestCase):
    def setUp(self):
        self.verifier = TokenVerifier(SECRET)

    def test_bearer_token_parsing(self):
        self.assertEqual(bearer_token("Bearer abc.def"), "abc.def")
        self.assertEqual(bearer_token("bearer   abc"), "abc")
        self.assertIsNone(bearer_token("Basic abc"))
        self.assertIsNone(bearer_token(None))

    def test_valid_token_resolves_user(self):
        user = authenticate(f"Bearer {make_token(email='ada@example.com')}", self.verifier)
        self.assertEqual(user.id, "user-1")
        self.assertEqual(user.email, "ada@example.com")

    def test_missing_header(self):
        with self.assertRaises(AuthError) as ctx:
            authenticate(None, self.verifier)
        self.assertEqual(ctx.exception.status_code, 401)
        self.assertEqual(ctx.exception.details, "Missing authorization header")

    def test_rejects_expired_wrong_secret_and_wrong_audience(self):
        for token in (
            make_token(expires_in=-60),
            make_token(secret="another-secret-key-that-is-long-enough-too"),
            make_token(aud="anon"),
        ):
            with self.assertRaises(AuthError):
                self.verifier.verify(token)

    def test_token_without_subject_is_rejected(self):
        with self.assertRaises(AuthError):
            self.verifier.verify(make_token(sub=""))


if __name__ == "__main__":
    unittest.main()
