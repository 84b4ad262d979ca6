import pytest
from datetime import date
from kpi_dashboard.models.employee import Position
from kpi_dashboard.schemas.kpi import ChampionEntry
from kpi_dashboard.services.champions_league import get_champions_league, rank_entries

WEEK_2 = date(2025, 1, 6)
WEEK_3 = date(2025, 1, 13)


def _entry(employee_id, name, total_points):
    return ChampionEntry(
        rank=0, employee_id=employee_id, name=name, position=Position.SOURCER,
        placements=0, interviews=0, recommendations=0, verifications=total_points, cv_added=0,
        placement_points=0, interview_points=0, recommendation_points=0,
        verification_points=total_points, cv_points=0, total_points=total_points,
    )


def test_rank_entries_orders_by_points_then_name():
    ranked = rank_entries([_entry(1, "Zofia", 50), _entry(2, "Adam", 50), _entry(3, "Ewa", 90)])
    assert [(e.rank, e.name) for e in ranked] == [(1, "Ewa"), (2, "Adam"), (3, "Zofia")]


def test_higher_score_ranks_first(db_session, add_week):
    add_week("B Person", "TAC", WEEK_2, interviews=5)            # 50 points
    add_week("A Person", "TAC", WEEK_2, placements=1)            # 100 points

    ranking = get_champions_league(db_session, 2025, 1)

    assert [e.name for e in ranking] == ["A Person", "B Person"]
    assert [e.rank for e in ranking] == [1, 2]
    assert ranking[0].total_points == 100
    assert ranking[1].total_points == 50


def test_points_breakdown_sums_the_month(db_session, add_week):
    add_week("Anna Kowalska", "Sourcer", WEEK_2, verifications=4, recommendations=3, interviews=2, placements=1)
    add_week("Anna Kowalska", "Sourcer", WEEK_3, verifications=6, cv_added=5)

    entry = get_champions_league(db_session, 2025, 1)[0]

    assert entry.verifications == 10
    assert entry.placement_points == 100
    assert entry.interview_points == 20
    assert entry.recommendation_points == 6
    assert entry.verification_points == 10
    assert entry.cv_points == 5
    assert entry.total_points == 141


def test_ties_are_broken_by_name(db_session, add_week):
    add_week("Zenon", "Sourcer", WEEK_2, verifications=30)
    add_week("Adam", "Sourcer", WEEK_2, verifications=30)

    ranking = get_champions_league(db_session, 2025, 1)

    assert [e.name for e in ranking] == ["Adam", "Zenon"]
    assert [e.rank for e in ranking] == [1, 2]


def test_only_active_employees_with_records_in_month(db_session, add_week):
    add_week("In January", "Sourcer", WEEK_2, verifications=1)
    add_week("In February", "Sourcer", date(2025, 2, 3), verifications=100)
    add_week("Gone", "Sourcer", WEEK_2, verifications=500, is_active=False)

    ranking = get_champions_league(db_session, 2025, 1)

    assert [e.name for e in ranking] == ["In January"]


def test_empty_month_is_empty_list(db_session):
    assert get_champions_league(db_session, 2025, 1) == []
