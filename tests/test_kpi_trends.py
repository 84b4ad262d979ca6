import pytest
from datetime import date
from kpi_dashboard.models.employee import Employee, Position
from kpi_dashboard.services import kpi_trends

JAN_W2 = date(2025, 1, 6)
JAN_W3 = date(2025, 1, 13)
FEB_W6 = date(2025, 2, 3)


@pytest.fixture
def two_months(add_week):
    add_week("Anna Kowalska", "Sourcer", JAN_W2, verifications=20, interviews=2)
    add_week("Jan Nowak", "Sourcer", JAN_W2, verifications=10)
    add_week("Anna Kowalska", "Sourcer", JAN_W3, verifications=22, placements=1)
    add_week("Maria Wiśniewska", "Rekruter", JAN_W3, cv_added=25, interviews=4, placements=1)
    add_week("Anna Kowalska", "Sourcer", FEB_W6, verifications=18, interviews=1)


def test_trends_group_by_week_and_position(db_session, two_months):
    points = kpi_trends.get_trends(db_session)

    keys = [(p.week_start, p.position) for p in points]
    assert keys == [
        (JAN_W2, Position.SOURCER),
        (JAN_W3, Position.REKRUTER),
        (JAN_W3, Position.SOURCER),
        (FEB_W6, Position.SOURCER),
    ]
    first = points[0]
    assert first.total_verifications == 30
    assert first.employee_count == 2


def test_trends_window(db_session, two_months):
    points = kpi_trends.get_trends(db_session, weeks=3)
    assert {p.week_start for p in points} == {JAN_W3, FEB_W6}


def test_trends_window_on_empty_db(db_session):
    assert kpi_trends.get_trends(db_session, weeks=4) == []


def test_available_periods_newest_first(db_session, two_months):
    weeks = kpi_trends.get_available_weeks(db_session)
    assert [w.week_start for w in weeks] == [FEB_W6, JAN_W3, JAN_W2]
    assert weeks[0].week_end == date(2025, 2, 9)

    months = kpi_trends.get_available_months(db_session)
    assert [(m.year, m.month) for m in months] == [(2025, 2), (2025, 1)]


def test_summary(db_session, two_months):
    db_session.add(Employee(name="Katarzyna Dąbrowska", position=Position.TAC))
    db_session.commit()

    summary = kpi_trends.get_summary(db_session, today=date(2025, 1, 20))

    assert (summary.year, summary.month) == (2025, 1)
    assert summary.monthly_totals.verifications == 52
    assert summary.monthly_totals.placements == 2
    breakdown = {b.position: b for b in summary.position_breakdown}
    assert breakdown[Position.SOURCER].employee_count == 2
    assert breakdown[Position.SOURCER].verifications == 52
    assert breakdown[Position.TAC].employee_count == 1
    assert breakdown[Position.TAC].placements == 0
    change = summary.weekly_change
    assert (change.current_verifications, change.previous_verifications) == (18, 22)
    assert change.previous_placements == 2


def test_summary_on_empty_db(db_session):
    summary = kpi_trends.get_summary(db_session, today=date(2025, 1, 20))
    assert summary.monthly_totals.verifications == 0
    assert summary.position_breakdown == []
    assert summary.weekly_change.current_verifications == 0


def test_monthly_trend_ratios(db_session, two_months):
    points = kpi_trends.get_monthly_trend(db_session)

    assert [(p.year, p.month) for p in points] == [(2025, 1), (2025, 2)]
    january, february = points
    assert january.verifications_per_placement == 26.0
    assert january.interviews_per_placement == 3.0
    assert february.total_placements == 0
    assert february.verifications_per_placement is None


def test_weekly_verification_trend(db_session, two_months):
    points = kpi_trends.get_weekly_verification_trend(db_session)

    assert [p.week_start for p in points] == [JAN_W2, JAN_W3, FEB_W6]
    assert points[0].total_verifications == 30
    assert points[0].avg_verifications_per_person == 15.0
    assert points[1].avg_verifications_per_person == 11.0


def test_all_time_placements(db_session, two_months):
    rows = kpi_trends.get_all_time_placements(db_session)

    assert [r.name for r in rows] == ["Maria Wiśniewska", "Anna Kowalska", "Jan Nowak"]
    anna = rows[1]
    assert anna.total_placements == 1
    assert anna.total_interviews == 3
    assert (anna.first_week, anna.last_week) == (JAN_W2, FEB_W6)


def test_all_time_verifications(db_session, two_months):
    rows = kpi_trends.get_all_time_verifications(db_session)

    assert rows[0].name == "Anna Kowalska"
    assert rows[0].total_verifications == 60
    assert rows[0].verifications_per_day == 4.0
    assert rows[-1].verifications_per_day == 0.0
