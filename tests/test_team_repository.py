"""
Tests for BaseballTeamRepository against a moto DynamoDB table.

Each test seeds the table through the raw client where the starting state
matters, runs one repository operation and reads the item back.
"""

import pytest

from baseball_teams.models.team import BaseballTeam
from baseball_teams.storage.errors import (
    DecodingError,
    EncodingError,
    StoreError,
    UpdateExpressionError,
)
from baseball_teams.storage.marshaling import encode_team
from baseball_teams.storage.team_repository import BaseballTeamRepository

TABLE_NAME = "BaseballTeams"


def seed(client, team: BaseballTeam) -> None:
    client.put_item(TableName=TABLE_NAME, Item=encode_team(team))


def raw_item(client, team_id: str) -> dict:
    return client.get_item(TableName=TABLE_NAME, Key={"id": {"S": team_id}}).get("Item")


class TestCreateAndGet:
    @pytest.mark.asyncio
    async def test_create_writes_every_attribute(self, repository, dynamodb_client, team):
        await repository.create(team)

        item = raw_item(dynamodb_client, team.id)
        assert item["id"] == {"S": "test001"}
        assert item["team_name"] == {"S": "Team 1"}
        assert item["batting_order"] == {"L": [{"N": "1"}, {"N": "2"}, {"N": "3"}]}
        assert sorted(item["reserve"]["NS"]) == ["4", "5", "6"]

    @pytest.mark.asyncio
    async def test_create_then_get_round_trips(self, repository, team):
        await repository.create(team)

        got = await repository.get(team.id)

        assert got == team

    @pytest.mark.asyncio
    async def test_create_overwrites_existing_item(self, repository, team):
        await repository.create(team)
        replacement = BaseballTeam(id=team.id, name="Renamed", batting_order=[9])

        await repository.create(replacement)

        got = await repository.get(team.id)
        assert got.name == "Renamed"
        assert got.batting_order == [9]
        assert got.reserve == set()

    @pytest.mark.asyncio
    async def test_get_absent_returns_zero_valued_team(self, repository):
        got = await repository.get("invalid")

        assert got == BaseballTeam()
        assert got.is_empty

    @pytest.mark.asyncio
    async def test_find_absent_returns_none(self, repository):
        assert await repository.find("invalid") is None

    @pytest.mark.asyncio
    async def test_find_existing_returns_team(self, repository, team):
        await repository.create(team)

        assert await repository.find(team.id) == team

    @pytest.mark.asyncio
    async def test_create_rejects_empty_id(self, repository):
        with pytest.raises(EncodingError) as exc_info:
            await repository.create(BaseballTeam(name="No id"))

        assert exc_info.value.operation == "create"

    @pytest.mark.asyncio
    async def test_get_rejects_empty_id(self, repository):
        with pytest.raises(EncodingError):
            await repository.get("")

    @pytest.mark.asyncio
    async def test_get_malformed_item_raises_decoding_error(self, repository, dynamodb_client):
        dynamodb_client.put_item(
            TableName=TABLE_NAME,
            Item={"id": {"S": "broken"}, "batting_order": {"S": "1,2,3"}},
        )

        with pytest.raises(DecodingError) as exc_info:
            await repository.get("broken")

        assert exc_info.value.key == "broken"


class TestReserve:
    @pytest.mark.asyncio
    async def test_add_reserve_unions_new_numbers(self, repository, dynamodb_client, team):
        seed(dynamodb_client, team)

        await repository.add_reserve(team.id, [7, 8, 9])

        got = await repository.get(team.id)
        assert got.reserve == {4, 5, 6, 7, 8, 9}

    @pytest.mark.asyncio
    async def test_add_reserve_twice_keeps_single_member(self, repository, dynamodb_client, team):
        seed(dynamodb_client, team)

        await repository.add_reserve(team.id, [10])
        await repository.add_reserve(team.id, [10])

        got = await repository.get(team.id)
        assert got.reserve == {4, 5, 6, 10}
        assert sorted(raw_item(dynamodb_client, team.id)["reserve"]["NS"]).count("10") == 1

    @pytest.mark.asyncio
    async def test_add_reserve_overlapping_numbers(self, repository, dynamodb_client, team):
        seed(dynamodb_client, team)

        await repository.add_reserve(team.id, [5, 6, 7, 7])

        got = await repository.get(team.id)
        assert got.reserve == {4, 5, 6, 7}

    @pytest.mark.asyncio
    async def test_delete_reserve_removes_number(self, repository, dynamodb_client, team):
        seed(dynamodb_client, team)

        await repository.delete_reserve(team.id, [4])

        got = await repository.get(team.id)
        assert got.reserve == {5, 6}

    @pytest.mark.asyncio
    async def test_delete_reserve_absent_number_is_noop(self, repository, dynamodb_client, team):
        seed(dynamodb_client, team)

        await repository.delete_reserve(team.id, [99])

        got = await repository.get(team.id)
        assert got.reserve == {4, 5, 6}

    @pytest.mark.asyncio
    async def test_delete_reserve_all_numbers_leaves_empty_set(
        self, repository, dynamodb_client, team
    ):
        seed(dynamodb_client, team)

        await repository.delete_reserve(team.id, [4, 5, 6])

        got = await repository.get(team.id)
        assert got.reserve == set()
        assert got.batting_order == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_add_reserve_rejects_non_integers(self, repository, dynamodb_client, team):
        seed(dynamodb_client, team)

        with pytest.raises(EncodingError) as exc_info:
            await repository.add_reserve(team.id, [1, "2"])

        assert exc_info.value.operation == "add_reserve"
        assert exc_info.value.key == team.id


class TestBattingOrder:
    @pytest.mark.asyncio
    async def test_add_batting_order_appends_in_order(self, repository, dynamodb_client, team):
        seed(dynamodb_client, team)

        await repository.add_batting_order(team.id, [10, 11])

        got = await repository.get(team.id)
        assert got.batting_order == [1, 2, 3, 10, 11]

    @pytest.mark.asyncio
    async def test_add_batting_order_is_not_idempotent(self, repository, dynamodb_client, team):
        seed(dynamodb_client, team)

        await repository.add_batting_order(team.id, [1])
        await repository.add_batting_order(team.id, [1])

        got = await repository.get(team.id)
        assert got.batting_order == [1, 2, 3, 1, 1]

    @pytest.mark.asyncio
    async def test_remove_batting_order_multiple_indices(self, repository, dynamodb_client, team):
        seed(dynamodb_client, team)

        await repository.remove_batting_order(team.id, [1, 2])

        got = await repository.get(team.id)
        assert got.batting_order == [1]

    @pytest.mark.asyncio
    async def test_remove_batting_order_ascending_indices_do_not_shift(
        self, repository, dynamodb_client
    ):
        seed(
            dynamodb_client,
            BaseballTeam(id="test003", name="Team 3", batting_order=[10, 20, 30, 40, 50]),
        )

        await repository.remove_batting_order("test003", [0, 2, 4])

        got = await repository.get("test003")
        assert got.batting_order == [20, 40]

    @pytest.mark.asyncio
    async def test_remove_batting_order_duplicate_indices(self, repository, dynamodb_client, team):
        seed(dynamodb_client, team)

        await repository.remove_batting_order(team.id, [0, 0])

        got = await repository.get(team.id)
        assert got.batting_order == [2, 3]

    @pytest.mark.asyncio
    async def test_remove_batting_order_negative_index(self, repository, dynamodb_client, team):
        seed(dynamodb_client, team)

        with pytest.raises(UpdateExpressionError) as exc_info:
            await repository.remove_batting_order(team.id, [-1])

        assert exc_info.value.operation == "remove_batting_order"
        got = await repository.get(team.id)
        assert got.batting_order == [1, 2, 3]


class TestWholeRecordUpdates:
    @pytest.mark.asyncio
    async def test_rename_sets_only_team_name(self, repository, dynamodb_client, team):
        seed(dynamodb_client, team)

        await repository.rename(team.id, "Tigers")

        got = await repository.get(team.id)
        assert got == team.model_copy(update={"name": "Tigers"})

    @pytest.mark.asyncio
    async def test_update_replaces_non_key_attributes(self, repository, dynamodb_client, team):
        seed(dynamodb_client, team)
        changed = BaseballTeam(
            id=team.id, name="Swallows", batting_order=[7, 7], reserve={1}
        )

        await repository.update(changed)

        assert await repository.get(team.id) == changed

    @pytest.mark.asyncio
    async def test_update_with_empty_reserve_drops_attribute(
        self, repository, dynamodb_client, team
    ):
        seed(dynamodb_client, team)

        await repository.update(BaseballTeam(id=team.id, name="Team 1", batting_order=[1]))

        assert "reserve" not in raw_item(dynamodb_client, team.id)


class TestStoreFailures:
    @pytest.mark.asyncio
    async def test_missing_table_raises_store_error(self, dynamodb_client, team):
        repository = BaseballTeamRepository(dynamodb_client, "NoSuchTable")

        with pytest.raises(StoreError) as exc_info:
            await repository.add_reserve(team.id, [1])

        assert exc_info.value.code == "ResourceNotFoundException"
        assert exc_info.value.operation == "add_reserve"
        assert exc_info.value.key == team.id

    @pytest.mark.asyncio
    async def test_get_from_missing_table_raises_store_error(self, dynamodb_client):
        repository = BaseballTeamRepository(dynamodb_client, "NoSuchTable")

        with pytest.raises(StoreError):
            await repository.get("test001")
