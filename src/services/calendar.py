"""取引日カレンダーの生成。"""
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable, List

# EGX の週末は金曜・土曜 (datetime.weekday() で 4, 5)
EGX_WEEKEND: tuple[int, ...] = (4, 5)


def generate_calendar(
    days_needed: int,
    *,
    now: datetime | date | None = None,
    weekend: Iterable[int] = EGX_WEEKEND,
) -> List[date]:
    """前日を起点に週末を飛ばしながら遡り、取引日を新しい順に返す。

    当日が取引日でも含めない。場中の未確定値を終値として扱わないため。
    """
    if days_needed <= 0:
        return []
    if now is None:
        now = datetime.now()
    anchor = now.date() if isinstance(now, datetime) else now
    skip = frozenset(weekend)
    if len(skip) >= 7:
        raise ValueError("weekend must leave at least one trading weekday")

    current = anchor - timedelta(days=1)
    days: list[date] = []
    while len(days) < days_needed:
        if current.weekday() not in skip:
            days.append(current)
        current -= timedelta(days=1)
    return days
