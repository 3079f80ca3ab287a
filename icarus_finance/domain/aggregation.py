"""Monthly aggregation of receivables and payables"""

from datetime import date
from typing import Dict, List, Optional, Sequence

from icarus_finance.domain.models import FinancialAccount, MonthlyFinancialData
from icarus_finance.utils.date_utils import add_months, month_key, parse_iso_date


def aggregate_monthly(
    accounts: Sequence[FinancialAccount],
    months: int = 12,
    today: Optional[date] = None,
) -> List[MonthlyFinancialData]:
    """
    Bucket accounts by due-date month over the last `months` months.

    Receivables count toward `receivables` and, once paid, toward `income`;
    payables likewise toward `payables` and `expense`. Cancelled accounts are
    ignored. Output is sorted oldest -> newest.
    """
    today = today or date.today()
    start = add_months(today, -months)

    buckets: Dict[str, MonthlyFinancialData] = {}
    for account in accounts:
        if account.status == "cancelled":
            continue
        due = parse_iso_date(account.due_date)
        if due < start:
            continue

        key = month_key(due)
        bucket = buckets.get(key)
        if bucket is None:
            bucket = MonthlyFinancialData(month=key, income=0.0, expense=0.0, net_flow=0.0)
            buckets[key] = bucket

        paid = account.status == "paid"
        if account.type == "receivable":
            bucket.receivables += account.final_amount
            if paid:
                bucket.income += account.final_amount
        else:
            bucket.payables += account.final_amount
            if paid:
                bucket.expense += account.final_amount

    for bucket in buckets.values():
        bucket.net_flow = bucket.income - bucket.expense

    return [buckets[key] for key in sorted(buckets)]
