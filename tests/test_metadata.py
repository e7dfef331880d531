import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from dyngraph.core.schema_graph import SchemaGraph
from dyngraph.runtime.accessors import AccessorRegistry
from dyngraph.runtime.executor import QueryExecutor
from dyngraph.runtime.metadata import SchemaCollectionMeta, SqlCollectionMeta
from dyngraph.service.database import CollectionRow, close_db, create_engine, init_db


@pytest.mark.asyncio
async def test_schema_backed_lookup(overview):
    meta = SchemaCollectionMeta(SchemaGraph(overview))

    assert (await meta.get_collection("system_settings"))["singleton"] is True
    assert (await meta.get_collection("articles"))["note"] == "Blog posts"
    assert await meta.get_collection("missing") is None


@pytest.mark.asyncio
async def test_sql_backed_lookup(tmp_path):
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'meta.db'}")
    await init_db(engine)
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        session.add_all([
            CollectionRow(collection="homepage", singleton=True, note="Landing page"),
            CollectionRow(collection="articles", singleton=False),
        ])
        await session.commit()

    meta = SqlCollectionMeta(engine)

    assert await meta.get_collection("homepage") == {
        "collection": "homepage",
        "singleton": True,
        "note": "Landing page",
    }
    assert await meta.get_collection("missing") is None

    executor = QueryExecutor(AccessorRegistry(default=lambda collection, accountability: None), metadata=meta)
    assert await executor.is_singleton("homepage")
    assert not await executor.is_singleton("articles")
    # unknown to the table, answered by the static system rows
    assert await executor.is_singleton("system_settings")

    await close_db(engine)
