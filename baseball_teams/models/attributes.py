from enum import Enum


class TeamAttribute(str, Enum):
    """Attribute names persisted in the teams table.

    These names are the stored schema; renaming one requires a data migration.
    """

    ID = "id"  # Partition key
    TEAM_NAME = "team_name"  # String
    BATTING_ORDER = "batting_order"  # List of numbers
    RESERVE = "reserve"  # Number set
