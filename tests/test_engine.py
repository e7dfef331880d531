import logging

import pytest
from graphql import parse

from dyngraph.core.defs import CollectionDef, FieldDef, PermissionDef, SchemaOverview
from dyngraph.core.errors import ServiceError, ValidationError
from dyngraph.engine import GraphQLService, SnapshotStore
from dyngraph.runtime.context import Accountability


@pytest.fixture
def store(overview):
    store = SnapshotStore()
    store.swap(overview)
    return store


def test_store_requires_a_snapshot():
    with pytest.raises(RuntimeError):
        SnapshotStore().current


def test_swap_replaces_snapshot(store, caplog):
    old = store.current
    overview = SchemaOverview(
        collections={"notes": CollectionDef("notes", {"id": FieldDef("id")})},
        version="8",
    )

    with caplog.at_level(logging.INFO):
        new = store.swap(overview)

    assert store.current is new
    assert old.version == "7"
    assert new.version == "8"
    assert "articles" in old.object_types
    assert "Schema snapshot 8 active" in caplog.text


@pytest.mark.asyncio
async def test_execute_items(store, data_layer):
    service = GraphQLService(store, data_layer.registry())

    result = await service.execute(parse("{ articles { id title author { name } } }"))

    assert result == {
        "data": {
            "articles": [
                {"id": "1", "title": "Hello", "author": {"name": "Ann"}},
                {"id": "2", "title": "Draft", "author": None},
            ]
        }
    }


@pytest.mark.asyncio
async def test_execute_system_singleton(store, data_layer):
    service = GraphQLService(store, data_layer.registry())

    result = await service.execute(parse("{ settings { project_name } users { email } }"), scope="system")

    assert result["data"] == {
        "settings": {"project_name": "Demo"},
        "users": [{"email": "a@example.com"}],
    }
    methods = {collection: method for collection, method, _, _ in data_layer.calls}
    assert methods == {"system_settings": "read_singleton", "system_users": "read_by_query"}


@pytest.mark.asyncio
async def test_variables_and_operation_name(store, data_layer):
    service = GraphQLService(store, data_layer.registry())

    await service.execute(
        parse("""
            query One($n: Int) { articles(limit: $n) { id } }
            query Two { authors { id } }
        """),
        variables={"n": 1},
        operation_name="One",
    )

    assert [call[0] for call in data_layer.calls] == ["articles"]
    assert data_layer.calls[0][2].limit == 1


@pytest.mark.asyncio
async def test_validation_failure_reads_nothing(store, data_layer):
    service = GraphQLService(store, data_layer.registry())

    with pytest.raises(ValidationError) as exc_info:
        await service.execute(parse("{ articles { id nope } }"))

    assert data_layer.calls == []
    assert "nope" in exc_info.value.formatted[0]["message"]


@pytest.mark.asyncio
async def test_system_collections_are_not_queryable_from_items(store, data_layer):
    service = GraphQLService(store, data_layer.registry())

    with pytest.raises(ValidationError):
        await service.execute(parse("{ settings { project_name } }"))


@pytest.mark.asyncio
async def test_accessor_error_gives_partial_data(store, data_layer):
    data_layer.errors["authors"] = ServiceError("data", 500, "boom")
    service = GraphQLService(store, data_layer.registry())

    result = await service.execute(parse("{ articles { id } authors { id } }"))

    assert result["data"]["articles"] == [{"id": "1"}, {"id": "2"}]
    assert result["data"]["authors"] is None
    assert len(result["errors"]) == 1
    assert result["errors"][0]["path"] == ["authors"]
    assert "boom" in result["errors"][0]["message"]


@pytest.mark.asyncio
async def test_non_admin_gets_reduced_schema(store, data_layer):
    accountability = Accountability(
        user=1,
        permissions=[PermissionDef(collection="articles", fields=("title",))],
    )
    service = GraphQLService(store, data_layer.registry(), accountability=accountability)

    assert set(service.get_schema("items").query_type.fields) == {"articles"}
    with pytest.raises(ValidationError):
        await service.execute(parse("{ articles { status } }"))

    result = await service.execute(parse("{ articles { id title } }"))
    assert result["data"]["articles"][0] == {"id": "1", "title": "Hello"}


def test_admin_uses_shared_snapshot(store, data_layer):
    service = GraphQLService(store, data_layer.registry(), accountability=Accountability(admin=True))

    assert service.get_snapshot() is store.current


@pytest.mark.asyncio
async def test_empty_scope_is_a_validation_error(data_layer):
    store = SnapshotStore()
    store.swap(SchemaOverview(collections={"notes": CollectionDef("notes", {"id": FieldDef("id")})}))
    service = GraphQLService(store, data_layer.registry())

    with pytest.raises(ValidationError):
        await service.execute(parse("{ __typename }"), scope="system")
