from typing import List, Set

from pydantic import BaseModel, ConfigDict, Field

from .attributes import TeamAttribute


class BaseballTeam(BaseModel):
    """Represents a baseball team with its batting order and reserve players."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field("", alias=TeamAttribute.ID.value, description="Primary key.")
    name: str = Field("", alias=TeamAttribute.TEAM_NAME.value)
    # Order matters, duplicates allowed
    batting_order: List[int] = Field(
        default_factory=list, alias=TeamAttribute.BATTING_ORDER.value
    )
    # Unordered, no duplicates
    reserve: Set[int] = Field(default_factory=set, alias=TeamAttribute.RESERVE.value)

    @property
    def is_empty(self) -> bool:
        """True for the zero-valued record returned when no item exists."""
        return (
            not self.id
            and not self.name
            and not self.batting_order
            and not self.reserve
        )
