"""Tests for SimulationParams, withdrawal directives and coercion helpers."""

import math
from datetime import date, datetime

import pytest
from cpf_sim_sg import AccountBalances, SimulationParams, WithdrawalDirective
from cpf_sim_sg.params import MONTHLY, ONE_TIME, YEARLY, parse_date, to_age, to_num, to_rate


class TestToNum:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (12, 12.0),
            (3.5, 3.5),
            ("SGD 1,200.50", 1200.5),
            ("12abc", 12.0),
            ("-4.5", -4.5),
            (".5", 0.5),
        ],
    )
    def test_parses(self, value, expected):
        assert to_num(value) == pytest.approx(expected)

    @pytest.mark.parametrize(
        "value", [None, True, False, "abc", "", "-", float("nan"), math.inf, "9" * 400],
    )
    def test_falls_back_to_default(self, value):
        assert to_num(value) == 0.0
        assert to_num(value, 7.0) == 7.0

    def test_to_age_clamped(self):
        assert to_age(200) == 120
        assert to_age(-5) == 0
        assert to_age("45 years") == 45

    def test_to_rate_non_negative(self):
        assert to_rate(-3) == 0.0
        assert to_rate("junk", 0.05) == 0.05


class TestParseDate:
    def test_iso_string(self):
        assert parse_date("2020-05-01") == date(2020, 5, 1)

    def test_iso_datetime_string(self):
        assert parse_date("2020-05-01T10:00:00Z") == date(2020, 5, 1)

    def test_date_and_datetime(self):
        assert parse_date(date(2020, 5, 1)) == date(2020, 5, 1)
        assert parse_date(datetime(2020, 5, 1, 12, 0)) == date(2020, 5, 1)

    @pytest.mark.parametrize("value", [None, "", "not a date", "2020-13-40", 20200501])
    def test_invalid(self, value):
        assert parse_date(value) is None


class TestAccountBalances:
    def test_negative_clamped(self):
        b = AccountBalances(oa=-100, sa=50)
        assert b.oa == 0.0
        assert b.sa == 50.0

    def test_liquid_and_total(self):
        b = AccountBalances(oa=100, sa=200, ma=300, ra=400)
        assert b.liquid == 300
        assert b.total == 1000

    def test_from_record_malformed(self):
        b = AccountBalances.from_record({"oa": "10,000", "sa": "abc"})
        assert b.oa == 10000.0
        assert b.sa == 0.0
        assert b.ma == 0.0


class TestWithdrawalDirective:
    def test_unknown_account_falls_back_to_oa(self):
        w = WithdrawalDirective("x", "brokerage", 100)
        assert w.account == "oa"

    def test_account_aliases(self):
        assert WithdrawalDirective("x", "Medisave", 100).account == "ma"
        assert WithdrawalDirective("x", "SA", 100).account == "sa"

    def test_unknown_kind_falls_back_to_one_time(self):
        w = WithdrawalDirective("x", "oa", 100, kind="fortnightly")
        assert w.kind == ONE_TIME

    def test_one_time_fires_once_at_start_month(self):
        w = WithdrawalDirective("car", "oa", 5000, ONE_TIME, start_age=35)
        assert w.amount_due(60, current_age=30) == 5000
        assert w.amount_due(59, current_age=30) == 0
        assert w.amount_due(61, current_age=30) == 0

    def test_one_time_without_start_fires_first_month(self):
        w = WithdrawalDirective("car", "oa", 5000)
        assert w.amount_due(1, current_age=30) == 5000

    def test_one_time_in_the_past_fires_first_month(self):
        w = WithdrawalDirective("car", "oa", 5000, ONE_TIME, start_age=25)
        assert w.amount_due(1, current_age=30) == 5000

    def test_monthly_window_inclusive(self):
        w = WithdrawalDirective("housing", "oa", 1500, MONTHLY, start_age=31, end_age=32)
        assert w.amount_due(11, current_age=30) == 0
        assert w.amount_due(12, current_age=30) == 1500
        assert w.amount_due(24, current_age=30) == 1500
        assert w.amount_due(25, current_age=30) == 0

    def test_yearly_on_anniversary(self):
        w = WithdrawalDirective("insurance", "ma", 800, YEARLY, start_age=31)
        assert w.amount_due(12, current_age=30) == 800
        assert w.amount_due(13, current_age=30) == 0
        assert w.amount_due(24, current_age=30) == 800

    def test_from_record_alternate_keys(self):
        w = WithdrawalDirective.from_record(
            {"name": "loan", "account": "oa", "amount": "1,000", "type": "monthly", "startAge": 35, "endAge": "60"},
        )
        assert w.purpose == "loan"
        assert w.amount == 1000.0
        assert w.kind == MONTHLY
        assert w.start_age == 35
        assert w.end_age == 60


class TestSimulationParams:
    def test_defaults(self):
        p = SimulationParams()
        assert p.current_age == 30
        assert p.end_age == 95
        assert p.oa_rate == 0.025
        assert p.smra_rate == 0.0408

    def test_end_age_not_before_current_age(self):
        p = SimulationParams(current_age=70, end_age=60)
        assert p.end_age == 70
        assert p.total_years == 0

    def test_savings_split(self):
        p = SimulationParams(monthly_savings=1000, investment_fraction=0.3)
        assert p.monthly_investment == pytest.approx(300)
        assert p.monthly_cash_savings == pytest.approx(700)

    def test_investment_fraction_capped(self):
        p = SimulationParams(monthly_savings=1000, investment_fraction=5)
        assert p.monthly_investment == 1000
        assert p.monthly_cash_savings == 0

    def test_negative_return_floored(self):
        assert SimulationParams(investment_return=-3).investment_return == -1.0
        assert SimulationParams(investment_return=-0.2).investment_return == -0.2

    def test_inflation_factor(self):
        p = SimulationParams(inflation_rate=0.02)
        assert p.inflation_factor(0) == 1.0
        assert p.inflation_factor(10) == pytest.approx(1.02 ** 10)

    def test_annual_returns_override(self):
        p = SimulationParams(investment_return=0.05, annual_investment_returns=[0.1, -0.1])
        assert p.get_investment_return(0) == 0.1
        assert p.get_investment_return(1) == -0.1
        assert p.get_investment_return(2) == 0.05

    def test_withdrawal_records_coerced(self):
        p = SimulationParams(withdrawals=[{"purpose": "x", "account": "ma", "amount": 100}])
        assert isinstance(p.withdrawals[0], WithdrawalDirective)
        assert p.withdrawals[0].account == "ma"

    def test_from_record_malformed_fields(self):
        p = SimulationParams.from_record({
            "current_age": "forty",
            "monthly_income": "5,000",
            "cpf": {"oa": "20000"},
            "withdrawals": [{"purpose": "x", "amount": 10}, "garbage"],
        })
        assert p.current_age == 30
        assert p.monthly_income == 5000.0
        assert p.cpf.oa == 20000.0
        assert len(p.withdrawals) == 1
