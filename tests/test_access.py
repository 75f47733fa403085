from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError

from painel.errors import DataUnavailable
from painel.users.access import LOGIN_PAGE, PLANS_PAGE, AccessState, evaluate_access
from painel.users.plans import add_months, request_plan, start_trial
from tests.base import DatabaseTestCase, utc

AGORA = utc(2024, 1, 10, 12, 0)


class TestEvaluateAccess(DatabaseTestCase):
    def test_unauthenticated(self):
        decision = evaluate_access(self.db, None, now=AGORA)
        self.assertEqual(decision.state, AccessState.UNAUTHENTICATED)
        self.assertFalse(decision.granted)
        self.assertEqual(decision.redirect_to, LOGIN_PAGE)

    def test_admin_without_subscription(self):
        user = self.make_user(admin=True)
        decision = evaluate_access(self.db, user, now=AGORA)
        self.assertEqual(decision.state, AccessState.ADMIN_OVERRIDE)
        self.assertTrue(decision.granted)

    def test_admin_with_expired_subscription(self):
        sub = self.active_subscription(start_date=datetime(2023, 1, 1), end_date=datetime(2023, 2, 1))
        user = self.make_user(admin=True, subscription=sub)
        self.assertEqual(evaluate_access(self.db, user, now=AGORA).state, AccessState.ADMIN_OVERRIDE)

    def test_no_subscription(self):
        user = self.make_user()
        decision = evaluate_access(self.db, user, now=AGORA)
        self.assertEqual(decision.state, AccessState.NO_SUBSCRIPTION)
        self.assertEqual(decision.redirect_to, PLANS_PAGE)

    def test_waiting_payment_is_not_access(self):
        sub = self.active_subscription(status="waiting_payment", start_date=datetime(2024, 1, 1))
        user = self.make_user(subscription=sub)
        self.assertEqual(evaluate_access(self.db, user, now=AGORA).state, AccessState.NO_SUBSCRIPTION)

    def test_active_trial(self):
        sub = self.active_subscription(
            start_date=datetime(2024, 1, 5), is_trial=True, trial_end_at=datetime(2024, 1, 12)
        )
        user = self.make_user(subscription=sub)
        decision = evaluate_access(self.db, user, now=AGORA)
        self.assertEqual(decision.state, AccessState.ACTIVE_TRIAL)
        self.assertTrue(decision.granted)
        self.assertEqual(decision.subscription.id, sub.id)

    def test_expired_trial(self):
        sub = self.active_subscription(
            start_date=datetime(2024, 1, 1), is_trial=True, trial_end_at=datetime(2024, 1, 8)
        )
        user = self.make_user(subscription=sub)
        decision = evaluate_access(self.db, user, now=AGORA)
        self.assertEqual(decision.state, AccessState.EXPIRED_TRIAL)
        self.assertFalse(decision.granted)
        self.assertEqual(decision.redirect_to, PLANS_PAGE)

    def test_expired_subscription(self):
        sub = self.active_subscription(start_date=datetime(2023, 12, 1), end_date=datetime(2024, 1, 1))
        user = self.make_user(subscription=sub)
        decision = evaluate_access(self.db, user, now=AGORA)
        self.assertEqual(decision.state, AccessState.EXPIRED_SUBSCRIPTION)
        self.assertEqual(decision.redirect_to, PLANS_PAGE)

    def test_active_subscription_without_end(self):
        user = self.make_user(subscription=self.active_subscription(start_date=datetime(2023, 6, 1)))
        self.assertEqual(evaluate_access(self.db, user, now=AGORA).state, AccessState.ACTIVE_SUBSCRIPTION)

    def test_most_recent_active_subscription_wins(self):
        old = self.active_subscription(start_date=datetime(2023, 1, 1), end_date=datetime(2023, 12, 31))
        user = self.make_user(subscription=old)
        self.db.add(self.active_subscription(user_id=user.id, start_date=datetime(2024, 1, 1)))
        self.db.commit()

        self.assertEqual(evaluate_access(self.db, user, now=AGORA).state, AccessState.ACTIVE_SUBSCRIPTION)

    def test_store_failure_raises(self):
        db = MagicMock()
        db.query.side_effect = OperationalError("SELECT", {}, Exception("connection refused"))

        with self.assertRaises(DataUnavailable):
            evaluate_access(db, SimpleNamespace(id=1), now=AGORA)


class TestPlanos(DatabaseTestCase):
    def test_add_months_clamps_day(self):
        self.assertEqual(add_months(datetime(2024, 1, 31), 1), datetime(2024, 2, 29))
        self.assertEqual(add_months(datetime(2024, 11, 15), 3), datetime(2025, 2, 15))

    def test_trial_gives_access(self):
        user = self.make_user()
        trial = start_trial(user, now=datetime(2024, 1, 5))
        self.db.add(trial)
        self.db.commit()

        self.assertTrue(trial.is_trial)
        self.assertEqual(trial.trial_end_at, datetime(2024, 1, 12))
        self.assertEqual(evaluate_access(self.db, user, now=AGORA).state, AccessState.ACTIVE_TRIAL)

    def test_request_plan_waits_for_payment(self):
        user = self.make_user()
        plano = SimpleNamespace(name="Trimestral", duration_months=3, price=Decimal("79.90"))

        sub = request_plan(user, plano, now=datetime(2024, 1, 10))

        self.assertEqual(sub.status, "waiting_payment")
        self.assertEqual(sub.end_date, datetime(2024, 4, 10))
        self.assertIn("79.90", sub.notes)
        self.assertFalse(evaluate_access(self.db, user, now=AGORA).granted)
