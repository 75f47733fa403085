import unittest
from datetime import date, datetime
from decimal import Decimal
from unittest.mock import MagicMock, patch

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import OperationalError

from painel.errors import DataUnavailable
from painel.finance.aggregator import (
    aggregate_project_totals,
    aggregate_window,
    money,
    roi_percent,
    sum_amounts,
    to_decimal,
)
from painel.finance.history import compute_snapshot, refresh_history_after_write, upsert_financial_history
from painel.finance.windows import resolve_window
from painel.models.finance import FinancialHistory, Investment
from painel.schemas.finance import InvestmentCreate, RevenueCreate
from painel.services.finance_service import (
    add_investment,
    add_revenue,
    compute_net_amount,
    delete_transaction,
    entry_instant,
)
from tests.base import DatabaseTestCase


class TestMoney(unittest.TestCase):
    def test_float_goes_through_str(self):
        self.assertEqual(to_decimal(0.1), Decimal("0.1"))
        self.assertEqual(to_decimal(None), Decimal("0.00"))

    def test_sum_is_exact(self):
        self.assertEqual(sum_amounts([0.1, 0.1, 0.1]), Decimal("0.30"))
        self.assertEqual(sum_amounts([]), Decimal("0.00"))

    def test_rounding_half_up(self):
        self.assertEqual(money(Decimal("0.005")), Decimal("0.01"))
        self.assertEqual(money(Decimal("2.675")), Decimal("2.68"))

    def test_roi_without_investment_is_zero(self):
        self.assertEqual(roi_percent(Decimal("80.00"), Decimal("0.00")), Decimal("0.00"))

    def test_roi(self):
        self.assertEqual(roi_percent(Decimal("-70.00"), Decimal("150.00")), Decimal("-46.67"))

    def test_snapshot(self):
        snap = compute_snapshot([Decimal("100.00")], [Decimal("80.00")])
        self.assertEqual(snap.net_profit, Decimal("-20.00"))
        self.assertEqual(snap.roi, Decimal("-20.00"))


class TestNetAmount(unittest.TestCase):
    def test_gateway_fees(self):
        self.assertEqual(compute_net_amount("100.00", "4.99", "0.40"), Decimal("94.61"))

    def test_without_fees(self):
        self.assertEqual(compute_net_amount("80.00", "0", "0"), Decimal("80.00"))

    def test_can_be_negative(self):
        self.assertEqual(compute_net_amount("1.00", "10", "2.00"), Decimal("-1.10"))


class TestEntryInstant(unittest.TestCase):
    def test_date_is_local_midnight(self):
        self.assertEqual(entry_instant(date(2024, 1, 1)), datetime(2024, 1, 1, 3, 0))

    def test_naive_datetime_is_business_local(self):
        self.assertEqual(entry_instant(datetime(2024, 3, 1, 23, 0)), datetime(2024, 3, 2, 2, 0))


class TestPayloadLimits(unittest.TestCase):
    def test_investment_amount_bounds(self):
        for amount in ("0", "-1", "1000000000.00"):
            with self.assertRaises(PydanticValidationError):
                InvestmentCreate(project_id=1, amount=amount, date=date(2024, 1, 1))

        ok = InvestmentCreate(project_id=1, amount="999999999.99", date=date(2024, 1, 1))
        self.assertEqual(ok.amount, Decimal("999999999.99"))

    def test_revenue_percentage_bounds(self):
        with self.assertRaises(PydanticValidationError):
            RevenueCreate(project_id=1, gross_amount="10", gateway_percentage="100.01", date=date(2024, 1, 1))
        with self.assertRaises(PydanticValidationError):
            RevenueCreate(project_id=1, gross_amount="10", gateway_fixed_fee="1000000.00", date=date(2024, 1, 1))


class TestProjectAggregation(DatabaseTestCase):
    def setUp(self):
        super().setUp()
        self.user = self.make_user()
        self.project = self.make_project(self.user)

    def _scenario(self):
        add_investment(self.db, self.user.id, self.project.id, Decimal("100.00"), date(2024, 1, 1))
        add_investment(self.db, self.user.id, self.project.id, Decimal("50.00"), date(2024, 1, 2))
        add_revenue(self.db, self.user.id, self.project.id, Decimal("80.00"), 0, 0, date(2024, 1, 1))

    def test_project_totals(self):
        self._scenario()
        totals = aggregate_project_totals(self.db, self.user.id, self.project.id)
        self.assertEqual(totals.total_investment, Decimal("150.00"))
        self.assertEqual(totals.total_revenue, Decimal("80.00"))
        self.assertEqual(totals.net_profit, Decimal("-70.00"))
        self.assertEqual(totals.roi, Decimal("-46.67"))

    def test_daily_history(self):
        self._scenario()
        row = (
            self.db.query(FinancialHistory)
            .filter(FinancialHistory.project_id == self.project.id, FinancialHistory.date == date(2024, 1, 1))
            .one()
        )
        self.assertEqual(row.investment_amount, Decimal("100.00"))
        self.assertEqual(row.revenue_amount, Decimal("80.00"))
        self.assertEqual(row.net_profit, Decimal("-20.00"))
        self.assertEqual(row.roi, Decimal("-20.00"))
        self.assertEqual(self.db.query(FinancialHistory).count(), 2)

    def test_other_user_rows_are_ignored(self):
        self._scenario()
        other = self.make_user("bruno@example.com")
        other_project = self.make_project(other, "Outro")
        add_investment(self.db, other.id, other_project.id, Decimal("999.00"), date(2024, 1, 1))

        totals = aggregate_project_totals(self.db, self.user.id, self.project.id)
        self.assertEqual(totals.total_investment, Decimal("150.00"))

    def test_window_includes_late_local_revenue(self):
        add_revenue(self.db, self.user.id, self.project.id, Decimal("30.00"), 0, 0, datetime(2024, 3, 1, 23, 0))
        add_revenue(self.db, self.user.id, self.project.id, Decimal("5.00"), 0, 0, date(2024, 3, 2))

        window = resolve_window("custom", date(2024, 3, 1), date(2024, 3, 1))
        totals = aggregate_window(self.db, self.user.id, window)
        self.assertEqual(totals.total_revenue, Decimal("30.00"))
        self.assertEqual(totals.total_investment, Decimal("0.00"))
        self.assertEqual(totals.total_profit, Decimal("30.00"))

    def test_upsert_is_idempotent(self):
        self._scenario()
        first = upsert_financial_history(self.db, self.user.id, self.project.id, date(2024, 1, 1))
        values = (first.investment_amount, first.revenue_amount, first.net_profit, first.roi)

        second = upsert_financial_history(self.db, self.user.id, self.project.id, date(2024, 1, 1))
        self.assertEqual((second.investment_amount, second.revenue_amount, second.net_profit, second.roi), values)
        self.assertEqual(
            self.db.query(FinancialHistory).filter(FinancialHistory.date == date(2024, 1, 1)).count(),
            1,
        )

    def test_delete_recomputes_day(self):
        investment, _ = add_investment(self.db, self.user.id, self.project.id, Decimal("100.00"), date(2024, 1, 1))
        row = self.db.query(Investment).filter(Investment.id == investment.id).one()

        history = delete_transaction(self.db, row)
        self.assertEqual(history.investment_amount, Decimal("0.00"))
        self.assertEqual(history.roi, Decimal("0.00"))
        self.assertEqual(self.db.query(Investment).count(), 0)

    def test_upsert_failure_raises_data_unavailable(self):
        error = OperationalError("INSERT", {}, Exception("disk I/O error"))
        with patch("painel.finance.history._write_snapshot", side_effect=error):
            with self.assertRaises(DataUnavailable):
                upsert_financial_history(self.db, self.user.id, self.project.id, date(2024, 1, 1))

    @patch("painel.finance.history.investment_amounts")
    def test_read_failure_rolls_the_session_back(self, mock_amounts):
        mock_amounts.side_effect = DataUnavailable("Não foi possível carregar os dados financeiros.")
        db = MagicMock()

        self.assertIsNone(refresh_history_after_write(db, self.user.id, self.project.id, date(2024, 1, 1)))
        db.rollback.assert_called_once_with()
        db.commit.assert_not_called()

    @patch("painel.finance.history.upsert_financial_history")
    def test_history_failure_keeps_the_investment(self, mock_upsert):
        mock_upsert.side_effect = DataUnavailable("Não foi possível atualizar o histórico financeiro.")

        investment, history = add_investment(self.db, self.user.id, self.project.id, Decimal("10.00"), date(2024, 1, 1))

        self.assertIsNone(history)
        self.assertIsNotNone(investment.id)
        self.assertEqual(self.db.query(Investment).count(), 1)
        self.assertEqual(self.db.query(FinancialHistory).count(), 0)

    def test_refresh_returns_row(self):
        row = refresh_history_after_write(self.db, self.user.id, self.project.id, date(2024, 1, 5))
        self.assertEqual(row.investment_amount, Decimal("0.00"))
        self.assertEqual(row.date, date(2024, 1, 5))


if __name__ == "__main__":
    unittest.main()
