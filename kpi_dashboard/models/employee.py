from sqlalchemy import Column, Integer, String, Enum, DateTime, Boolean
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
from kpi_dashboard.database import Base


class Position(str, enum.Enum):
    SOURCER = "Sourcer"
    REKRUTER = "Rekruter"
    TAC = "TAC"


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)
    # Stored by value ("Sourcer"), so ORDER BY position sorts alphabetically
    position = Column(
        Enum(Position, values_callable=lambda positions: [p.value for p in positions], name="position"),
        nullable=False,
    )
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    weekly_records = relationship(
        "WeeklyKPI",
        back_populates="employee",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Employee {self.name} ({self.position.value})>"
