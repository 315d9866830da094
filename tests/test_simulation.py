"""Tests for the wealth projection and savings helpers."""

import pytest
from cpf_sim_sg import (
    AccountBalances,
    SimulationParams,
    base_retirement_expense,
    project_savings_growth,
    project_wealth,
    simulate_ledger,
)


def _retiree(investments: float) -> SimulationParams:
    """Retires at 65 with flat rates so drawdowns are easy to follow."""
    return SimulationParams(
        current_age=64, retirement_age=65, end_age=66,
        cash=1000, investments=investments, monthly_expenses=1000,
        cash_rate=0, investment_return=0, inflation_rate=0,
    )


class TestProjectWealth:
    def test_one_point_per_year(self):
        result = project_wealth(SimulationParams(current_age=30, end_age=95))
        assert len(result.points) == 66
        assert result.ages[0] == 30
        assert result.ages[-1] == 95

    def test_opening_point_is_inputs(self):
        params = SimulationParams(cash=500, investments=2000, cpf=AccountBalances(oa=100, sa=200, ma=300, ra=0))
        p0 = project_wealth(params).points[0]
        assert p0.cash == 500
        assert p0.investments == 2000
        assert p0.net_worth == pytest.approx(3100)
        assert p0.liquid_wealth == pytest.approx(2800)

    def test_cpf_matches_monthly_ledger(self):
        params = SimulationParams(
            current_age=30, end_age=70, monthly_income=5000,
            cpf=AccountBalances(oa=20000, sa=10000, ma=15000),
        )
        ledger = simulate_ledger(params).yearly()
        for p, lp in zip(project_wealth(params).points, ledger):
            assert (p.oa, p.sa, p.ma, p.ra) == pytest.approx((lp.oa, lp.sa, lp.ma, lp.ra))

    def test_savings_accumulate_before_retirement(self):
        params = SimulationParams(
            current_age=30, end_age=31, monthly_savings=1000, investment_fraction=0.5,
            cash_rate=0, investment_return=0,
        )
        p1 = project_wealth(params).points[1]
        assert p1.cash == pytest.approx(6000)
        assert p1.investments == pytest.approx(6000)

    def test_growth_applies_to_opening_balance(self):
        params = SimulationParams(current_age=30, end_age=31, cash=1000, investments=1000,
                                  cash_rate=0.01, investment_return=0.1)
        p1 = project_wealth(params).points[1]
        assert p1.cash == pytest.approx(1010)
        assert p1.investments == pytest.approx(1100)

    def test_drawdown_cash_then_investments(self):
        result = project_wealth(_retiree(100000))
        p1, p2 = result.points[1], result.points[2]
        assert p1.is_retired
        assert p1.annual_expense == pytest.approx(12000)
        assert p1.cash == 0
        assert p1.investments == pytest.approx(89000)
        assert p2.investments == pytest.approx(77000)
        assert result.first_shortfall_age is None

    def test_shortfall_recorded(self):
        result = project_wealth(_retiree(5000))
        p1 = result.points[1]
        assert p1.cash == 0
        assert p1.investments == 0
        assert p1.shortfall == pytest.approx(6000)
        assert result.first_shortfall_age == 65

    def test_liquid_balances_never_negative(self):
        params = SimulationParams(
            current_age=40, retirement_age=45, end_age=95, cash=1000,
            monthly_expenses=5000, investment_return=-0.5,
        )
        for p in project_wealth(params).points:
            assert p.cash >= 0
            assert p.investments >= 0

    def test_annuity_reduces_drawdown(self):
        params = SimulationParams(
            current_age=60, retirement_age=60, end_age=70, cash=500000,
            monthly_expenses=2000, cpf=AccountBalances(ra=150000),
            cash_rate=0, inflation_rate=0,
        )
        result = project_wealth(params)
        p = result.points[-1]
        assert p.annuity_annual > 0
        spent = 500000 - p.cash
        assert spent < 2000 * 12 * 10

    def test_annual_returns_used(self):
        params = SimulationParams(current_age=30, end_age=32, investments=1000,
                                  annual_investment_returns=[0.1, -0.5])
        result = project_wealth(params)
        assert result.points[1].investments == pytest.approx(1100)
        assert result.points[2].investments == pytest.approx(550)

    def test_value_at_and_growth(self):
        params = SimulationParams(current_age=30, end_age=40, monthly_income=5000, monthly_savings=500)
        result = project_wealth(params)
        assert result.value_at(35) == result.points[5].net_worth
        assert result.value_at(200) == result.points[-1].net_worth
        assert result.total_growth == pytest.approx(result.points[-1].net_worth - result.points[0].net_worth)
        assert result.total_growth > 0


class TestProjectSavingsGrowth:
    def test_zero_return(self):
        rows = project_savings_growth(1000, 100, 0, 2)
        assert len(rows) == 3
        assert rows[0] == {"year": 0, "balance": 1000, "contributions": 1000, "gains": 0}
        assert rows[2]["balance"] == 3400
        assert rows[2]["gains"] == 0

    def test_positive_return_earns_gains(self):
        rows = project_savings_growth(10000, 500, 0.06, 10)
        assert rows[-1]["gains"] > 0
        assert rows[-1]["contributions"] == 10000 + 500 * 120

    def test_malformed_inputs(self):
        rows = project_savings_growth("abc", None, "x", 1)
        assert rows[-1]["balance"] == 0


class TestBaseRetirementExpense:
    @pytest.mark.parametrize(
        "args, expected",
        [
            ((2000, 3000, 4000, 5000), 2000),
            ((0, 3000, 4000, 5000), 3000),
            ((0, 0, 4000, 5000), 2800),
            ((0, 0, 0, 5000), 3500),
            ((0, 0, 0, 0), 0),
            (("n/a", None, "", "-"), 0),
        ],
    )
    def test_priority(self, args, expected):
        assert base_retirement_expense(*args) == pytest.approx(expected)
