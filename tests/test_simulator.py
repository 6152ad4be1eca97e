from datetime import date, datetime

import numpy as np

from domain.models import StockRef
from services.calendar import generate_calendar
from services.simulator import simulate_all

DATES = generate_calendar(5, now=datetime(2024, 6, 13))


class FixedRng:
    def __init__(self, fraction: float) -> None:
        self.fraction = fraction

    def uniform(self, low: float, high: float) -> float:
        return low + (high - low) * self.fraction


def test_simulation_is_reproducible_for_a_fixed_seed():
    stocks = [StockRef("COMI"), StockRef("NEWCO")]
    first = simulate_all(stocks, DATES, np.random.default_rng(42))
    second = simulate_all(stocks, DATES, np.random.default_rng(42))

    assert [r.history for r in first] == [r.history for r in second]
    assert all(r.is_simulated for r in first)


def test_simulation_changes_stay_within_two_percent():
    rows = simulate_all([StockRef("COMI"), StockRef("ETEL")], DATES, np.random.default_rng(1))
    for row in rows:
        assert [s.date for s in row.history] == DATES
        assert all(-2.0 <= s.change_percent <= 2.0 for s in row.history)
        assert all(s.price > 0 for s in row.history)


def test_simulation_upper_bound_compounds_from_approx_seed():
    row = simulate_all([StockRef("COMI")], DATES[:3], FixedRng(1.0))[0]

    # 古い日から +2% ずつ積み上がり、表示は新しい順
    assert [s.change_percent for s in row.history] == [2.0, 2.0, 2.0]
    assert [s.price for s in row.history] == [
        round(82.5 * 1.02 ** 3, 2),
        round(82.5 * 1.02 ** 2, 2),
        round(82.5 * 1.02, 2),
    ]


def test_simulation_seeds_unknown_symbols_from_plausible_range():
    row = simulate_all([StockRef("NEWCO")], DATES[:1], FixedRng(0.0))[0]
    # 種値 10.0 から -2%
    assert row.history[0].price == 9.8
    assert row.history[0].change_percent == -2.0
