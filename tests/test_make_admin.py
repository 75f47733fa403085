from make_admin import grant_admin
from painel.users.access import AccessState, evaluate_access
from tests.base import DatabaseTestCase


class TestGrantAdmin(DatabaseTestCase):
    def test_grants_role_once(self):
        user = self.make_user()

        self.assertTrue(grant_admin(self.db, "ana@example.com"))
        self.assertTrue(grant_admin(self.db, "ana@example.com"))

        self.db.refresh(user)
        self.assertEqual([r.role for r in user.roles], ["admin"])
        self.assertEqual(evaluate_access(self.db, user).state, AccessState.ADMIN_OVERRIDE)

    def test_unknown_email(self):
        self.assertFalse(grant_admin(self.db, "ninguem@example.com"))
