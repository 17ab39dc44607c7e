"""Goals that tasks log their focus time against - pure logic."""

from dataclasses import dataclass
from enum import Enum


class GoalType(Enum):
    MONTHLY = "MONTHLY"
    FORECAST = "FORECAST"


@dataclass
class Goal:
    """A larger target measured in hours, fed by the sessions of linked tasks."""

    id: str
    title: str
    target_hours: float
    logged_hours: float = 0.0
    type: GoalType = GoalType.MONTHLY
    deadline: str = ""  # ISO date
    description: str = ""

    @property
    def progress(self) -> float:
        """Fraction of the target logged, capped at 1."""
        if self.target_hours <= 0:
            return 1.0
        return min(1.0, self.logged_hours / self.target_hours)

    @property
    def remaining_hours(self) -> float:
        return max(0.0, round(self.target_hours - self.logged_hours, 2))

    def log_minutes(self, minutes: int) -> float:
        """Add session minutes as hours, kept to two decimals. Returns the new total."""
        if minutes < 0:
            raise ValueError("minutes must be non-negative")
        self.logged_hours = round(self.logged_hours + minutes / 60, 2)
        return self.logged_hours

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "type": self.type.value,
            "deadline": self.deadline,
            "targetHours": self.target_hours,
            "loggedHours": self.logged_hours,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Goal":
        try:
            goal_type = GoalType(data.get("type", "MONTHLY"))
        except ValueError:
            goal_type = GoalType.MONTHLY
        return cls(
            id=data["id"],
            title=data["title"],
            target_hours=max(0.0, float(data.get("targetHours") or 0)),
            logged_hours=max(0.0, float(data.get("loggedHours") or 0)),
            type=goal_type,
            deadline=data.get("deadline", "") or "",
            description=data.get("description", "") or "",
        )
