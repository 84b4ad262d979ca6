"""
Seed a development database with sample employees and two weeks of KPIs.
Existing employees and weeks are left untouched.
"""
import sys
import os
import logging
from datetime import date

# Ensure we can import kpi_dashboard modules
sys.path.append(os.getcwd())

from kpi_dashboard.database import SessionLocal, init_db
from kpi_dashboard.models.employee import Employee, Position
from kpi_dashboard.models.weekly_kpi import WeeklyKPI

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)

EMPLOYEES = [
    ("Anna Kowalska", Position.SOURCER),
    ("Jan Nowak", Position.SOURCER),
    ("Michał Lewandowski", Position.SOURCER),
    ("Maria Wiśniewska", Position.REKRUTER),
    ("Piotr Zieliński", Position.REKRUTER),
    ("Karolina Wójcik", Position.REKRUTER),
    ("Katarzyna Dąbrowska", Position.TAC),
    ("Tomasz Kamiński", Position.TAC),
]

# name, week_start, week_end, days, verifications, cv_added, recommendations, interviews, placements
SAMPLE_WEEKS = [
    ("Anna Kowalska", date(2025, 1, 6), date(2025, 1, 12), 5, 19, 0, 4, 1, 0),
    ("Jan Nowak", date(2025, 1, 6), date(2025, 1, 12), 5, 21, 0, 4, 2, 0),
    ("Michał Lewandowski", date(2025, 1, 6), date(2025, 1, 12), 4, 16, 0, 3, 1, 0),
    ("Maria Wiśniewska", date(2025, 1, 6), date(2025, 1, 12), 5, 0, 26, 6, 3, 0),
    ("Piotr Zieliński", date(2025, 1, 6), date(2025, 1, 12), 5, 0, 27, 5, 2, 1),
    ("Karolina Wójcik", date(2025, 1, 6), date(2025, 1, 12), 5, 0, 24, 4, 2, 0),
    ("Katarzyna Dąbrowska", date(2025, 1, 6), date(2025, 1, 12), 5, 0, 0, 7, 4, 0),
    ("Tomasz Kamiński", date(2025, 1, 6), date(2025, 1, 12), 5, 0, 0, 5, 4, 1),
    ("Anna Kowalska", date(2025, 1, 13), date(2025, 1, 19), 5, 22, 0, 5, 2, 0),
    ("Jan Nowak", date(2025, 1, 13), date(2025, 1, 19), 4, 18, 0, 3, 1, 0),
    ("Michał Lewandowski", date(2025, 1, 13), date(2025, 1, 19), 5, 20, 0, 4, 2, 1),
    ("Maria Wiśniewska", date(2025, 1, 13), date(2025, 1, 19), 5, 0, 28, 7, 4, 1),
    ("Piotr Zieliński", date(2025, 1, 13), date(2025, 1, 19), 5, 0, 25, 4, 2, 0),
    ("Karolina Wójcik", date(2025, 1, 13), date(2025, 1, 19), 4, 0, 22, 5, 3, 0),
    ("Katarzyna Dąbrowska", date(2025, 1, 13), date(2025, 1, 19), 5, 0, 0, 8, 5, 1),
    ("Tomasz Kamiński", date(2025, 1, 13), date(2025, 1, 19), 4, 0, 0, 6, 3, 0),
]


def seed():
    init_db()
    db = SessionLocal()
    try:
        by_name = {e.name: e for e in db.query(Employee).all()}
        for name, position in EMPLOYEES:
            if name not in by_name:
                by_name[name] = Employee(name=name, position=position, is_active=True)
                db.add(by_name[name])
        db.flush()

        added = 0
        for name, start, end, days, verif, cv, recs, interviews, placements in SAMPLE_WEEKS:
            employee = by_name[name]
            exists = db.query(WeeklyKPI.id).filter(
                WeeklyKPI.employee_id == employee.id, WeeklyKPI.week_start == start
            ).first()
            if exists:
                continue
            db.add(WeeklyKPI(
                employee_id=employee.id,
                week_start=start,
                week_end=end,
                year=start.year,
                month=start.month,
                week_number=start.isocalendar()[1],
                verifications=verif,
                cv_added=cv,
                recommendations=recs,
                interviews=interviews,
                placements=placements,
                days_worked=days,
            ))
            added += 1

        db.commit()
        logger.info(f"Seeded {len(EMPLOYEES)} employees and {added} weekly records.")
    except Exception as e:
        logger.error(f"Seeding failed: {e}")
        db.rollback()
        raise
    finally:
        db.close()

if __name__ == "__main__":
    seed()
