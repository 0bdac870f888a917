# services/late_fee_policy.py
"""
Late-fee policies.

Two formulas exist for rent that is paid late:

- flat: the lease's late_fee_amount, charged once, as soon as the days
  overdue exceed the lease's grace period.
- daily_accrual: 50 per day for every day beyond the fifth day overdue,
  ignoring the lease's own fee and grace terms.

They are alternatives, never combined. The flat policy is the default;
LATE_FEE_POLICY=daily_accrual selects the other one.
"""
import os
from decimal import Decimal

from dotenv import load_dotenv

load_dotenv()

LATE_FEE_POLICY = os.getenv("LATE_FEE_POLICY", "flat")


class FlatLateFeePolicy:
     name = "flat"

     def late_fee(self, lease, days_overdue: int) -> Decimal:
          if days_overdue > lease.grace_period_days:
               return Decimal(lease.late_fee_amount)
          return Decimal("0")


class DailyAccrualLateFeePolicy:
     name = "daily_accrual"

     def __init__(self, free_days: int = 5, daily_amount: Decimal = Decimal("50")):
          self.free_days = free_days
          self.daily_amount = daily_amount

     def late_fee(self, lease, days_overdue: int) -> Decimal:
          if days_overdue > self.free_days:
               return (days_overdue - self.free_days) * self.daily_amount
          return Decimal("0")


POLICIES = {
     FlatLateFeePolicy.name: FlatLateFeePolicy,
     DailyAccrualLateFeePolicy.name: DailyAccrualLateFeePolicy,
}


def get_late_fee_policy(name: str = None):
     name = name or LATE_FEE_POLICY
     try:
          return POLICIES[name]()
     except KeyError:
          raise ValueError(f"Unknown late fee policy '{name}'. Expected one of: {', '.join(POLICIES)}")
