# baseball_teams/storage/marshaling.py
"""Conversion between BaseballTeam and DynamoDB low-level attribute values.

Numbers travel as canonical decimal strings (``str(int)``) in both directions.
Number sets must be sent as a list of such strings under the ``NS`` type, so
the conversion is done here explicitly instead of relying on implicit
serialization.
"""
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Set

from boto3.dynamodb.types import TypeDeserializer
from pydantic import ValidationError

from baseball_teams.models.attributes import TeamAttribute
from baseball_teams.models.team import BaseballTeam

from .errors import DecodingError, EncodingError

AttributeValue = Dict[str, Any]
Item = Dict[str, AttributeValue]

# DynamoDB numbers carry at most 38 significant digits
MAX_NUMBER_DIGITS = 38

_deserializer = TypeDeserializer()


def encode_number(value: int) -> str:
    """Encodes an integer as the decimal string DynamoDB expects."""
    # bool is an int subclass but never a valid member
    if isinstance(value, bool) or not isinstance(value, int):
        raise EncodingError(f"Expected an integer, got {type(value).__name__}: {value!r}")
    encoded = str(value)
    if len(encoded.lstrip("-")) > MAX_NUMBER_DIGITS:
        raise EncodingError(f"Integer {encoded} exceeds {MAX_NUMBER_DIGITS} digits")
    return encoded


def encode_key(team_id: str) -> Item:
    """Builds the primary key map for a team id."""
    if not isinstance(team_id, str) or not team_id:
        raise EncodingError(f"Team id must be a non-empty string, got {team_id!r}")
    return {TeamAttribute.ID.value: {"S": team_id}}


def encode_string(value: str) -> AttributeValue:
    if not isinstance(value, str):
        raise EncodingError(f"Expected a string, got {type(value).__name__}: {value!r}")
    return {"S": value}


def encode_number_list(numbers: Iterable[int]) -> AttributeValue:
    """Encodes integers as a list attribute, keeping order and duplicates."""
    return {"L": [{"N": encode_number(n)} for n in numbers]}


def encode_number_set(numbers: Iterable[int]) -> AttributeValue:
    """Encodes integers as a number set attribute.

    Duplicates are dropped (first occurrence wins). DynamoDB rejects empty sets,
    so callers must not pass an empty collection.
    """
    members: List[str] = []
    seen: Set[str] = set()
    for n in numbers:
        encoded = encode_number(n)
        if encoded not in seen:
            seen.add(encoded)
            members.append(encoded)
    if not members:
        raise EncodingError("Number sets cannot be empty")
    return {"NS": members}


def encode_team(team: BaseballTeam) -> Item:
    """Converts a team into a full item suitable for PutItem."""
    item = encode_key(team.id)
    item[TeamAttribute.TEAM_NAME.value] = encode_string(team.name)
    item[TeamAttribute.BATTING_ORDER.value] = encode_number_list(team.batting_order)
    # An empty set cannot be stored; the attribute is left out instead
    if team.reserve:
        item[TeamAttribute.RESERVE.value] = encode_number_set(sorted(team.reserve))
    return item


def _decode_int(value: Any, attribute: str) -> int:
    if not isinstance(value, Decimal) or value != value.to_integral_value():
        raise DecodingError(f"Attribute '{attribute}' holds a non-integer value {value!r}")
    return int(value)


def decode_team(item: Optional[Item]) -> BaseballTeam:
    """Maps a GetItem response item back to a team.

    A missing or empty item yields the zero-valued team.
    """
    if not item:
        return BaseballTeam()

    try:
        raw = {name: _deserializer.deserialize(value) for name, value in item.items()}
    except (TypeError, ValueError, KeyError, ArithmeticError) as e:
        raise DecodingError(f"Malformed attribute value in item: {e}") from e

    data: Dict[str, Any] = {}
    for attribute in (TeamAttribute.ID, TeamAttribute.TEAM_NAME):
        if raw.get(attribute.value) is not None:
            data[attribute.value] = raw[attribute.value]

    batting_order = raw.get(TeamAttribute.BATTING_ORDER.value)
    if batting_order is not None:
        if not isinstance(batting_order, list):
            raise DecodingError(
                f"Attribute '{TeamAttribute.BATTING_ORDER.value}' must be a list, "
                f"got {type(batting_order).__name__}"
            )
        data[TeamAttribute.BATTING_ORDER.value] = [
            _decode_int(n, TeamAttribute.BATTING_ORDER.value) for n in batting_order
        ]

    reserve = raw.get(TeamAttribute.RESERVE.value)
    if reserve is not None:
        if not isinstance(reserve, set):
            raise DecodingError(
                f"Attribute '{TeamAttribute.RESERVE.value}' must be a number set, "
                f"got {type(reserve).__name__}"
            )
        data[TeamAttribute.RESERVE.value] = {
            _decode_int(n, TeamAttribute.RESERVE.value) for n in reserve
        }

    try:
        return BaseballTeam.model_validate(data)
    except ValidationError as e:
        raise DecodingError(f"Item does not match the team shape: {e}") from e
