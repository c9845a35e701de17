# baseball_teams/storage/team_repository.py
import asyncio
from typing import Any, Callable, Dict, Iterable, List, Optional

from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from baseball_teams.config.settings import AppSettings, settings as default_settings
from baseball_teams.models.attributes import TeamAttribute
from baseball_teams.models.team import BaseballTeam

from .dynamodb_client import create_dynamodb_client
from .errors import CancellationError, EncodingError, StoreError, TeamRepositoryError
from .expressions import UpdateExpressionBuilder
from .marshaling import (
    Item,
    decode_team,
    encode_key,
    encode_number_list,
    encode_number_set,
    encode_string,
    encode_team,
)


class BaseballTeamRepository:
    """Reads and partially updates baseball team items in a DynamoDB table.

    The repository keeps no state besides the injected client and the table
    name, so one instance can be shared by concurrent tasks. Every update is a
    single UpdateItem request and therefore atomic for the item; no ordering
    is guaranteed between separate requests.
    """

    def __init__(
        self,
        client: Any,
        table_name: str,
        *,
        timeout: Optional[float] = None,
        consistent_read: bool = True,
    ):
        self.client = client
        self.table_name = table_name
        self.timeout = timeout
        self.consistent_read = consistent_read

    @classmethod
    def from_settings(
        cls, settings: Optional[AppSettings] = None, client: Any = None
    ) -> "BaseballTeamRepository":
        settings = settings or default_settings
        return cls(
            client or create_dynamodb_client(settings),
            settings.dynamodb_table_name,
            timeout=settings.operation_timeout,
            consistent_read=settings.consistent_read,
        )

    async def _call(
        self,
        operation: str,
        key: Optional[str],
        method: Callable[..., Dict[str, Any]],
        timeout: Optional[float],
        **request: Any,
    ) -> Dict[str, Any]:
        """Runs one blocking client call off the event loop under an optional deadline."""
        deadline = timeout if timeout is not None else self.timeout
        logger.debug(f"{operation} on {self.table_name}", team_id=key, request=request)
        call = asyncio.to_thread(method, TableName=self.table_name, **request)
        try:
            if deadline is not None:
                return await asyncio.wait_for(call, deadline)
            return await call
        except asyncio.TimeoutError as e:
            logger.warning(f"{operation} for key {key!r} exceeded deadline of {deadline}s")
            raise CancellationError(
                f"{operation} did not complete within {deadline}s; "
                "the change may or may not have been applied",
                operation=operation,
                key=key,
            ) from e
        except ClientError as e:
            error = e.response.get("Error", {})
            code = error.get("Code")
            logger.error(f"{operation} failed for key {key!r}: {code} - {error.get('Message')}")
            raise StoreError(
                f"{operation} failed: {code}", operation=operation, key=key, code=code
            ) from e
        except BotoCoreError as e:
            logger.error(f"{operation} failed for key {key!r}: {e}")
            raise StoreError(f"{operation} failed: {e}", operation=operation, key=key) from e

    async def _update(
        self,
        operation: str,
        team_id: str,
        build: Callable[[UpdateExpressionBuilder], UpdateExpressionBuilder],
        timeout: Optional[float],
    ) -> None:
        try:
            key = encode_key(team_id)
            expression = build(UpdateExpressionBuilder()).build()
        except TeamRepositoryError as e:
            # Local failures surface with the same context as store failures
            logger.error(f"{operation} could not be prepared for key {team_id!r}: {e}")
            raise type(e)(str(e), operation=operation, key=team_id) from e

        await self._call(
            operation,
            team_id,
            self.client.update_item,
            timeout,
            Key=key,
            **expression.as_request(),
        )
        logger.debug(f"{operation} applied", team_id=team_id, expression=expression.expression)

    async def create(self, team: BaseballTeam, timeout: Optional[float] = None) -> None:
        """Writes the whole team, overwriting any item with the same id."""
        try:
            item = encode_team(team)
        except EncodingError as e:
            logger.error(f"create could not encode team {team.id!r}: {e}")
            raise EncodingError(str(e), operation="create", key=team.id) from e

        await self._call("create", team.id, self.client.put_item, timeout, Item=item)
        logger.info(f"Created team {team.id!r} ({team.name})")

    async def find(
        self, team_id: str, timeout: Optional[float] = None
    ) -> Optional[BaseballTeam]:
        """Returns the team with the given id, or None when no item exists."""
        item = await self._get_item("find", team_id, timeout)
        if item is None:
            return None
        return self._decode("find", team_id, item)

    async def get(self, team_id: str, timeout: Optional[float] = None) -> BaseballTeam:
        """Returns the team with the given id.

        A missing item yields the zero-valued team instead of an error; use
        find() when absence has to be told apart from an empty record.
        """
        item = await self._get_item("get", team_id, timeout)
        if item is None:
            logger.debug(f"No team stored under {team_id!r}, returning empty record")
        return self._decode("get", team_id, item)

    async def _get_item(
        self, operation: str, team_id: str, timeout: Optional[float]
    ) -> Optional[Item]:
        try:
            key = encode_key(team_id)
        except EncodingError as e:
            raise EncodingError(str(e), operation=operation, key=team_id) from e

        response = await self._call(
            operation,
            team_id,
            self.client.get_item,
            timeout,
            Key=key,
            ConsistentRead=self.consistent_read,
        )
        return response.get("Item")

    def _decode(self, operation: str, team_id: str, item: Optional[Item]) -> BaseballTeam:
        try:
            return decode_team(item)
        except TeamRepositoryError as e:
            logger.error(f"{operation} could not decode team {team_id!r}: {e}")
            raise type(e)(str(e), operation=operation, key=team_id) from e

    async def update(self, team: BaseballTeam, timeout: Optional[float] = None) -> None:
        """Replaces every non-key attribute of the team in one request."""

        def build(builder: UpdateExpressionBuilder) -> UpdateExpressionBuilder:
            builder.set(TeamAttribute.TEAM_NAME.value, encode_string(team.name))
            builder.set(
                TeamAttribute.BATTING_ORDER.value, encode_number_list(team.batting_order)
            )
            if team.reserve:
                builder.set(TeamAttribute.RESERVE.value, encode_number_set(sorted(team.reserve)))
            else:
                builder.remove(TeamAttribute.RESERVE.value)
            return builder

        await self._update("update", team.id, build, timeout)

    async def rename(self, team_id: str, name: str, timeout: Optional[float] = None) -> None:
        """Sets the scalar team_name attribute."""
        await self._update(
            "rename",
            team_id,
            lambda b: b.set(TeamAttribute.TEAM_NAME.value, encode_string(name)),
            timeout,
        )

    async def add_reserve(
        self, team_id: str, numbers: Iterable[int], timeout: Optional[float] = None
    ) -> None:
        """Adds numbers to the reserve set. Numbers already present are left alone."""
        numbers = list(numbers)
        if not numbers:
            logger.debug(f"add_reserve called with no numbers for {team_id!r}. Skipping.")
            return
        await self._update(
            "add_reserve",
            team_id,
            lambda b: b.add(TeamAttribute.RESERVE.value, encode_number_set(numbers)),
            timeout,
        )

    async def delete_reserve(
        self, team_id: str, numbers: Iterable[int], timeout: Optional[float] = None
    ) -> None:
        """Removes numbers from the reserve set. Absent numbers are ignored."""
        numbers = list(numbers)
        if not numbers:
            logger.debug(f"delete_reserve called with no numbers for {team_id!r}. Skipping.")
            return
        await self._update(
            "delete_reserve",
            team_id,
            lambda b: b.delete(TeamAttribute.RESERVE.value, encode_number_set(numbers)),
            timeout,
        )

    async def add_batting_order(
        self, team_id: str, numbers: Iterable[int], timeout: Optional[float] = None
    ) -> None:
        """Appends numbers, in order, to the end of the batting order.

        Not idempotent: calling twice appends twice.
        """
        numbers = list(numbers)
        if not numbers:
            logger.debug(f"add_batting_order called with no numbers for {team_id!r}. Skipping.")
            return
        await self._update(
            "add_batting_order",
            team_id,
            lambda b: b.list_append(
                TeamAttribute.BATTING_ORDER.value, encode_number_list(numbers)
            ),
            timeout,
        )

    async def remove_batting_order(
        self, team_id: str, indices: Iterable[int], timeout: Optional[float] = None
    ) -> None:
        """Removes the batting order entries at the given zero-based positions.

        Positions refer to the list as stored when the request is applied. All
        of them go out in one request, highest position first, so removing one
        entry never shifts another target.
        """
        indices = list(indices)
        if not indices:
            logger.debug(f"remove_batting_order called with no indices for {team_id!r}. Skipping.")
            return

        def build(builder: UpdateExpressionBuilder) -> UpdateExpressionBuilder:
            for index in _removal_order(indices):
                builder.remove(TeamAttribute.BATTING_ORDER.value, index)
            return builder

        await self._update("remove_batting_order", team_id, build, timeout)


def _removal_order(indices: List[Any]) -> List[Any]:
    """Distinct indices, highest first. Invalid entries are kept for the builder to reject."""

    def is_position(i: Any) -> bool:
        return isinstance(i, int) and not isinstance(i, bool) and i >= 0

    valid = {i for i in indices if is_position(i)}
    invalid = [i for i in indices if not is_position(i)]
    return sorted(valid, reverse=True) + invalid
