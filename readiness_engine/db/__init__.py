# SQLAlchemy models and engine holder
from .base import Base
from .database import Database
from .models import (
    Assessment,
    PracticeSessionRow,
    ReadinessCheckConfigRow,
    ReadinessPredictionRow,
    StudentMastery,
)

__all__ = [
    "Base",
    "Database",
    "Assessment",
    "StudentMastery",
    "PracticeSessionRow",
    "ReadinessPredictionRow",
    "ReadinessCheckConfigRow",
]
