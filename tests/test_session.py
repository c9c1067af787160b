import unittest

from payportal.core.session import AuthSession
from payportal.models.user import AuthContext, Role


class TestAuthSession(unittest.TestCase):

    def setUp(self):
        self.session = AuthSession()
        self.seen = []
        self.subscription = self.session.subscribe(self.seen.append)

    def test_starts_anonymous(self):
        self.assertFalse(self.session.current().is_authenticated)

    def test_sign_in_notifies_subscribers(self):
        ctx = self.session.sign_in("tok", role="master", user_id="u1")
        self.assertEqual(self.seen, [ctx])
        self.assertEqual(ctx.role, Role.MASTER)
        self.assertTrue(ctx.can_manage_retailers)

    def test_sign_out_notifies_subscribers(self):
        self.session.sign_in("tok")
        self.session.sign_out()
        self.assertFalse(self.seen[-1].is_authenticated)

    def test_role_change_notifies(self):
        self.session.sign_in("tok", role="retailer")
        self.session.update_role("master")
        self.assertEqual([c.role for c in self.seen], [Role.RETAILER, Role.MASTER])

    def test_unchanged_context_is_not_republished(self):
        self.session.sign_in("tok", role="user")
        self.session.sign_in("tok", role="user")
        self.assertEqual(len(self.seen), 1)

    def test_unsubscribe(self):
        self.session.unsubscribe(self.subscription)
        self.session.sign_in("tok")
        self.assertEqual(self.seen, [])

    def test_sign_in_requires_token(self):
        with self.assertRaises(ValueError):
            self.session.sign_in("")


class TestAuthContext(unittest.TestCase):

    def test_from_bearer(self):
        ctx = AuthContext.from_bearer("Bearer abc", role="master")
        self.assertEqual(ctx.token, "abc")
        self.assertEqual(ctx.role, Role.MASTER)

    def test_from_missing_or_malformed_header(self):
        self.assertIsNone(AuthContext.from_bearer(None).token)
        self.assertIsNone(AuthContext.from_bearer("Basic xyz").token)

    def test_unknown_role_is_plain_user(self):
        self.assertEqual(Role.parse("superuser"), Role.USER)
        self.assertEqual(Role.parse(None), Role.USER)

if __name__ == '__main__':
    unittest.main()
