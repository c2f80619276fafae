import unittest
from datetime import date
from decimal import Decimal

from missionhub.utils.money import sum_amounts, to_decimal
from missionhub.utils.progress import days_remaining, progress_percent, remaining_amount


class TestProgress(unittest.TestCase):
    def test_zero_goal_has_no_progress(self):
        self.assertEqual(progress_percent(Decimal("50"), Decimal("0")), 0)

    def test_progress_is_rounded(self):
        self.assertEqual(progress_percent(Decimal("1"), Decimal("3")), 33)
        self.assertEqual(progress_percent(Decimal("2"), Decimal("3")), 67)
        self.assertEqual(progress_percent(Decimal("999999"), Decimal("1000000")), 100)

    def test_progress_is_capped(self):
        self.assertEqual(progress_percent(Decimal("250"), Decimal("100")), 100)

    def test_remaining_amount_never_negative(self):
        self.assertEqual(remaining_amount("30", "100"), Decimal("70.00"))
        self.assertEqual(remaining_amount("130", "100"), Decimal("0.00"))

    def test_days_remaining(self):
        today = date(2024, 5, 1)
        self.assertEqual(days_remaining(date(2024, 5, 11), today), 10)
        self.assertEqual(days_remaining(date(2024, 4, 1), today), 0)
        self.assertEqual(days_remaining(None, today), 0)


class TestMoney(unittest.TestCase):
    def test_to_decimal_quantizes(self):
        self.assertEqual(to_decimal(0.1), Decimal("0.10"))
        self.assertEqual(to_decimal("10.005"), Decimal("10.01"))
        self.assertEqual(to_decimal(3), Decimal("3.00"))

    def test_to_decimal_rejects_booleans(self):
        with self.assertRaises(TypeError):
            to_decimal(True)

    def test_sum_amounts(self):
        self.assertEqual(sum_amounts([]), Decimal("0.00"))
        self.assertEqual(sum_amounts(["0.10", 0.2, Decimal("0.3")]), Decimal("0.60"))


if __name__ == "__main__":
    unittest.main()
