"""Tests for life event analysis (capital needs and solvency)."""

from datetime import date

import pytest
from cpf_sim_sg import (
    AccountBalances,
    CapitalNeedsReport,
    CriticalIllnessEvent,
    DeathEvent,
    Dependent,
    DisabilityEvent,
    InsurancePayouts,
    InsurancePolicy,
    LifeEventProfile,
    PropertyLoan,
    SimulationParams,
    SolvencyTimeline,
    analyze_life_event,
    capital_needs_timeline,
    total_education_cost,
)
from cpf_sim_sg.events import DISABILITY, project_assets_to_age


class TestInsurance:
    def test_from_record_camel_case(self):
        policy = InsurancePolicy.from_record(
            {"deathCoverage": "500,000", "tpdCoverage": 300000, "earlyCiCoverage": 50000, "lateCiCoverage": None},
        )
        assert policy.death_coverage == 500000
        assert policy.disability_coverage == 300000
        assert policy.late_ci_coverage == 0

    def test_payouts_summed(self):
        policies = [
            InsurancePolicy(death_coverage=100000, early_ci_coverage=20000, late_ci_coverage=30000),
            InsurancePolicy(death_coverage=50000, disability_coverage=80000),
        ]
        payouts = InsurancePayouts.from_policies(policies)
        assert payouts.death == 150000
        assert payouts.disability == 80000
        assert payouts.critical_illness == 50000


class TestProfile:
    def test_from_params(self):
        params = SimulationParams(
            current_age=30, monthly_income=5000, cash=1000,
            cpf=AccountBalances(oa=100, sa=200, ma=300, ra=400),
        )
        profile = LifeEventProfile.from_params(params)
        assert profile.take_home_income == pytest.approx(4000)
        assert profile.cpf_liquid == pytest.approx(600)
        assert profile.cash == 1000

    def test_malformed_fields(self):
        profile = LifeEventProfile(current_age="abc", monthly_expenses="-100", cash="SGD 5,000")
        assert profile.current_age == 30
        assert profile.monthly_expenses == 0
        assert profile.cash == 5000


class TestProjectAssets:
    def test_no_years(self):
        profile = LifeEventProfile(current_age=40, cash=100, investments=200, cpf_liquid=300)
        assets = project_assets_to_age(profile, 35)
        assert (assets.cash, assets.investments, assets.cpf) == (100, 200, 300)

    def test_zero_rate_is_linear(self):
        profile = LifeEventProfile(current_age=40, cash=1000, monthly_cash_savings=100, cash_rate=0)
        assert project_assets_to_age(profile, 50).cash == pytest.approx(1000 + 100 * 12 * 10)

    def test_future_value_annuity(self):
        profile = LifeEventProfile(current_age=40, investments=10000, monthly_investment=100, investment_return=0.05)
        expected = 10000 * 1.05 ** 10 + 1200 * (1.05 ** 10 - 1) / 0.05
        assert project_assets_to_age(profile, 50).investments == pytest.approx(expected)

    def test_cpf_growth(self):
        profile = LifeEventProfile(current_age=40, cpf_liquid=100000)
        assert project_assets_to_age(profile, 50).cpf == pytest.approx(100000 * 1.025 ** 10)


class TestCapitalNeeds:
    def test_surplus(self):
        profile = LifeEventProfile(current_age=40, cash=1_000_000, monthly_expenses=2000)
        report = analyze_life_event(profile, DeathEvent(age=40))
        assert isinstance(report, CapitalNeedsReport)
        assert report.family_support == pytest.approx(2000 * 0.7 * 12 * 20)
        assert report.final_expenses == 25000
        assert report.total_liabilities == pytest.approx(361000)
        assert report.gap == pytest.approx(639000)
        assert report.is_surplus

    def test_shortfall_with_mortgage_and_dependents(self):
        as_of = date(2025, 1, 1)
        kids = [Dependent("a", "2018-01-01", "male")]
        profile = LifeEventProfile(
            current_age=40, monthly_expenses=3000,
            mortgage=PropertyLoan(price=500000),
            dependents=kids, as_of=as_of,
            payouts=InsurancePayouts(death=200000),
        )
        report = analyze_life_event(profile, DeathEvent(age=40))
        assert report.mortgage == pytest.approx(375000)
        assert report.education == pytest.approx(total_education_cost(kids, as_of=as_of))
        assert report.insurance == 200000
        assert report.gap < 0
        assert not report.is_surplus

    def test_later_death_has_smaller_mortgage(self):
        profile = LifeEventProfile(current_age=40, mortgage=PropertyLoan(price=500000))
        early = analyze_life_event(profile, DeathEvent(age=41))
        late = analyze_life_event(profile, DeathEvent(age=60))
        assert late.mortgage < early.mortgage

    def test_timeline_ages(self):
        profile = LifeEventProfile(current_age=30, monthly_expenses=2000, monthly_cash_savings=500)
        rows = capital_needs_timeline(profile, DeathEvent(age=30))
        assert [r.event_age for r in rows] == list(range(30, 71))
        assert rows[-1].total_assets > rows[0].total_assets

    def test_timeline_capped_at_85(self):
        profile = LifeEventProfile(current_age=60)
        rows = capital_needs_timeline(profile, DeathEvent(age=60))
        assert rows[-1].event_age == 85


class TestSolvency:
    def test_disability_with_no_assets_depletes_immediately(self):
        profile = LifeEventProfile(current_age=40, monthly_expenses=2000)
        timeline = analyze_life_event(profile, DisabilityEvent(age=40))
        assert isinstance(timeline, SolvencyTimeline)
        assert timeline.event_kind == DISABILITY
        assert timeline.depletion_age == 40
        assert not timeline.is_solvent
        assert timeline.points[0].annual_expense == pytest.approx(2000 * 12 * 1.1)

    def test_disability_releases_cpf(self):
        profile = LifeEventProfile(current_age=40, cpf_liquid=100000)
        timeline = analyze_life_event(profile, DisabilityEvent(age=40))
        assert timeline.points[0].cpf == 0
        assert timeline.points[0].cash == pytest.approx(100000)

    def test_payout_added_to_cash(self):
        profile = LifeEventProfile(current_age=40, payouts=InsurancePayouts(disability=250000))
        timeline = analyze_life_event(profile, DisabilityEvent(age=40))
        assert timeline.payout == 250000
        assert timeline.points[0].cash == pytest.approx(250000)
        assert timeline.is_solvent

    def test_horizon_is_95(self):
        profile = LifeEventProfile(current_age=40)
        timeline = analyze_life_event(profile, CriticalIllnessEvent(age=50))
        assert timeline.points[0].age == 50
        assert timeline.points[-1].age == 95
        assert len(timeline.points) == 46

    def test_illness_income_resumes_after_recovery(self):
        profile = LifeEventProfile(current_age=40, retirement_age=65, take_home_income=5000, monthly_expenses=2000)
        timeline = analyze_life_event(profile, CriticalIllnessEvent(age=40))
        by_age = {p.age: p for p in timeline.points}
        assert by_age[44].income == 0
        assert by_age[45].income == pytest.approx(5000 * 12 * 1.02 ** 5)
        assert by_age[64].income > 0
        assert by_age[65].income == 0
        # recovered years carry no medical loading
        assert by_age[45].annual_expense == pytest.approx(2000 * 12 * 1.03 ** 5)
        assert by_age[44].annual_expense == pytest.approx(2000 * 12 * 1.03 ** 4 * 1.1)

    def test_illness_keeps_cpf_growing(self):
        profile = LifeEventProfile(current_age=40, cpf_liquid=10000)
        timeline = analyze_life_event(profile, CriticalIllnessEvent(age=40))
        assert timeline.points[0].cpf == pytest.approx(10000 * 1.025)

    def test_investments_cover_cash_deficit(self):
        profile = LifeEventProfile(current_age=40, investments=100000, monthly_expenses=1000, investment_return=0)
        timeline = analyze_life_event(profile, DisabilityEvent(age=40, expense_factor=1.0))
        p = timeline.points[0]
        assert p.cash == 0
        assert p.investments == pytest.approx(88000)

    def test_liquid_wealth_never_negative(self):
        profile = LifeEventProfile(current_age=40, monthly_expenses=5000, cash=10000)
        timeline = analyze_life_event(profile, DisabilityEvent(age=45))
        assert all(p.liquid_wealth >= 0 for p in timeline.points)


class TestDispatch:
    def test_unknown_event(self):
        with pytest.raises(TypeError):
            analyze_life_event(LifeEventProfile(), object())
