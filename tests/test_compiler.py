import logging

from graphql import (
    GraphQLID,
    GraphQLList,
    GraphQLObjectType,
    GraphQLString,
    GraphQLUnionType,
    print_schema,
    validate_schema,
)

from dyngraph.core.compiler import TypeCompiler, compile_schema
from dyngraph.core.defs import CollectionDef, FieldDef, RelationDef, SchemaOverview
from dyngraph.core.scalars import GraphQLJSON
from dyngraph.core.schema_graph import SchemaGraph


def test_compiled_schemas_are_valid(overview):
    compiled = compile_schema(overview)

    assert compiled.version == "7"
    assert validate_schema(compiled.get_schema("items")) == []
    assert validate_schema(compiled.get_schema("system")) == []


def test_items_scope_excludes_system_collections(overview):
    query = compile_schema(overview).get_schema("items").query_type

    assert set(query.fields) == {"articles", "authors", "article_blocks", "headings", "images"}


def test_system_scope_strips_prefix(overview):
    query = compile_schema(overview).get_schema("system").query_type

    assert set(query.fields) == {"settings", "users"}


def test_singleton_root_field_is_not_a_list(overview):
    compiled = compile_schema(overview)
    system = compiled.get_schema("system").query_type
    items = compiled.get_schema("items").query_type

    assert isinstance(system.fields["settings"].type, GraphQLObjectType)
    assert system.fields["settings"].type.name == "system_settings"
    assert isinstance(items.fields["articles"].type, GraphQLList)
    assert items.fields["articles"].type.of_type.name == "articles"


def test_root_fields_take_shared_arguments(overview):
    field = compile_schema(overview).get_schema("items").query_type.fields["articles"]

    assert set(field.args) == {"sort", "limit", "offset", "page", "search", "filter"}
    assert field.args["filter"].type.name == "articles_filter"
    assert field.description == "Blog posts"


def test_scalar_field_types(overview):
    articles = compile_schema(overview).object_types["articles"]

    assert articles.fields["id"].type is GraphQLID
    assert articles.fields["title"].type is GraphQLString
    assert articles.fields["rating"].type.name == "Float"
    assert articles.fields["meta"].type is GraphQLJSON
    assert isinstance(articles.fields["tags"].type, GraphQLList)


def test_reserved_field_is_skipped_with_warning(overview, caplog):
    with caplog.at_level(logging.WARNING):
        articles = compile_schema(overview).object_types["articles"]

    assert "__secret" not in articles.fields
    assert "__secret" in caplog.text


def test_empty_collection_is_omitted(overview):
    compiled = compile_schema(overview)

    assert "empty_things" not in compiled.object_types
    assert "empty_things" not in compiled.get_schema("items").query_type.fields


def test_relation_fields(overview):
    types = compile_schema(overview).object_types

    assert types["articles"].fields["author"].type is types["authors"]
    assert types["authors"].fields["mentor"].type is types["authors"]

    reverse = types["authors"].fields["articles"]
    assert isinstance(reverse.type, GraphQLList)
    assert reverse.type.of_type is types["articles"]
    assert reverse.args["filter"].type.name == "articles_filter"
    assert "limit" in reverse.args


def test_many_to_any_field_is_union(overview):
    types = compile_schema(overview).object_types
    item = types["article_blocks"].fields["item"].type

    assert isinstance(item, GraphQLUnionType)
    assert item.name == "article_blocks__item"
    assert [t.name for t in item.types] == ["headings", "images"]


def test_relation_to_unknown_collection_is_skipped(caplog):
    overview = SchemaOverview(
        collections={
            "posts": CollectionDef("posts", {"id": FieldDef("id"), "owner": FieldDef("owner", "integer")}),
        },
        relations=(RelationDef(many_collection="posts", many_field="owner", one_collection="ghosts"),),
    )

    with caplog.at_level(logging.WARNING):
        compiled = compile_schema(overview)

    assert "owner" not in compiled.object_types["posts"].fields
    assert "owner" not in compiled.filter_types["posts"].fields
    assert "ghosts" in caplog.text


def test_union_drops_unknown_members(caplog):
    overview = SchemaOverview(
        collections={
            "blocks": CollectionDef("blocks", {"id": FieldDef("id"), "kind": FieldDef("kind"), "item": FieldDef("item")}),
            "texts": CollectionDef("texts", {"id": FieldDef("id")}),
        },
        relations=(
            RelationDef(
                many_collection="blocks",
                many_field="item",
                one_collection_field="kind",
                one_allowed_collections=("texts", "videos"),
            ),
        ),
    )

    with caplog.at_level(logging.WARNING):
        item = compile_schema(overview).object_types["blocks"].fields["item"].type

    assert [t.name for t in item.types] == ["texts"]
    assert "videos" in caplog.text


def test_empty_scope_has_no_query_fields(caplog):
    overview = SchemaOverview(collections={"notes": CollectionDef("notes", {"id": FieldDef("id")})})

    with caplog.at_level(logging.WARNING):
        schema = compile_schema(overview).get_schema("system")

    assert schema.query_type.fields == {}
    assert validate_schema(schema)
    assert "No collections are exposed in the system scope" in caplog.text


def test_custom_system_prefix(overview):
    overview = SchemaOverview(
        collections={
            "sys_roles": CollectionDef("sys_roles", {"id": FieldDef("id")}),
            "system_users": CollectionDef("system_users", {"id": FieldDef("id")}),
        },
    )

    compiled = TypeCompiler(SchemaGraph(overview), system_prefix="sys_").compile()

    assert set(compiled.get_schema("system").query_type.fields) == {"roles"}
    assert set(compiled.get_schema("items").query_type.fields) == {"system_users"}


def test_printed_schema_mentions_filter_and_union(overview):
    sdl = print_schema(compile_schema(overview).get_schema("items"))

    assert "union article_blocks__item = headings | images" in sdl
    assert "input articles_filter" in sdl
    assert "articles(sort: [String], limit: Int, offset: Int, page: Int, search: String, filter: articles_filter): [articles]" in sdl


def test_clashing_operator_type_names_leave_the_field_unfilterable(caplog):
    overview = SchemaOverview(
        collections={
            "user": CollectionDef("user", {"id": FieldDef("id"), "roles_id": FieldDef("roles_id")}),
            "user_roles": CollectionDef("user_roles", {"id": FieldDef("id")}),
        },
    )

    with caplog.at_level(logging.WARNING):
        compiled = compile_schema(overview)

    assert validate_schema(compiled.get_schema("items")) == []
    assert compiled.filter_types["user"].fields["roles_id"].type.name == "user_roles_id_filter_operators"
    assert "id" not in compiled.filter_types["user_roles"].fields
    assert "id" in compiled.object_types["user_roles"].fields
    assert "user_roles_id_filter_operators" in caplog.text


def test_collections_shadowing_type_names_are_skipped(caplog):
    overview = SchemaOverview(
        collections={
            "String": CollectionDef("String", {"id": FieldDef("id")}),
            "Query": CollectionDef("Query", {"id": FieldDef("id")}),
            "JSON": CollectionDef("JSON", {"id": FieldDef("id")}),
            "posts": CollectionDef("posts", {"id": FieldDef("id")}),
            "posts_filter": CollectionDef("posts_filter", {"id": FieldDef("id")}),
        },
    )

    with caplog.at_level(logging.WARNING):
        compiled = compile_schema(overview)

    assert set(compiled.object_types) == {"posts"}
    assert validate_schema(compiled.get_schema("items")) == []
    assert set(compiled.get_schema("items").query_type.fields) == {"posts"}
    assert "'posts_filter'" in caplog.text
    assert "'String'" in caplog.text


def test_clashing_union_name_drops_the_field():
    overview = SchemaOverview(
        collections={
            "blocks__item": CollectionDef("blocks__item", {"id": FieldDef("id")}),
            "blocks": CollectionDef("blocks", {"id": FieldDef("id"), "kind": FieldDef("kind"), "item": FieldDef("item")}),
            "texts": CollectionDef("texts", {"id": FieldDef("id")}),
        },
        relations=(
            RelationDef(
                many_collection="blocks",
                many_field="item",
                one_collection_field="kind",
                one_allowed_collections=("texts",),
            ),
        ),
    )

    compiled = compile_schema(overview)

    assert "item" not in compiled.object_types["blocks"].fields
    assert validate_schema(compiled.get_schema("items")) == []


def test_collection_with_only_unresolved_relations_is_dropped(caplog):
    overview = SchemaOverview(
        collections={
            "articles": CollectionDef("articles", {"id": FieldDef("id")}),
            "links": CollectionDef("links", {"target": FieldDef("target", "integer")}),
            "backlinks": CollectionDef("backlinks", {"link": FieldDef("link", "integer")}),
        },
        relations=(
            RelationDef(many_collection="links", many_field="target", one_collection="gone"),
            RelationDef(many_collection="backlinks", many_field="link", one_collection="links"),
        ),
    )

    with caplog.at_level(logging.WARNING):
        compiled = compile_schema(overview)

    assert set(compiled.object_types) == {"articles"}
    assert validate_schema(compiled.get_schema("items")) == []
    assert set(compiled.get_schema("items").query_type.fields) == {"articles"}
    assert "gone" in caplog.text
    assert "'links'" in caplog.text
