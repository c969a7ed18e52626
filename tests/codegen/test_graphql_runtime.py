# Copyright 2026 sdlgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the GraphQL runtime emitter."""

from sdlgen.codegen.graphql_runtime import emit_graphql
from sdlgen.codegen.writer import GENERATED_BANNER, EmitOptions, GeneratedFile
from sdlgen.compiler.classifier import classify
from sdlgen.compiler.parser import parse
from sdlgen.compiler.type_graph import build_type_graph
from sdlgen.compiler.type_mapper import ScalarMapping, TypeMapper

# ###############
# Test Helpers
# ###############


def _emit(
    source: str,
    type_name: str,
    *,
    file: str = "schema.graphql",
    options: EmitOptions | None = None,
    scalars: dict[str, ScalarMapping] | None = None,
) -> GeneratedFile:
    staged = parse(source, file).then(lambda d: build_type_graph(d, custom_scalars=scalars or {})).then(classify)
    assert staged.diagnostics == [], staged.diagnostics
    type_def = staged.value.get(type_name)
    assert type_def is not None
    return emit_graphql(type_def, TypeMapper(staged.value, scalars), options or EmitOptions())


def _body(source: str, type_name: str, **kwargs: object) -> str:
    content = _emit(source, type_name, **kwargs).content  # type: ignore[arg-type]
    assert content.startswith(f"{GENERATED_BANNER}\n\n")
    return content[len(GENERATED_BANNER) + 2 :]


# ###############
# Enums
# ###############


class TestEnums:
    def test_plain_enum(self) -> None:
        generated = _emit("enum MyEnum { Value1 Value2 }", "MyEnum")
        assert generated.path == "graphql/MyEnum.ts"
        assert generated.type_name == "MyEnum"
        assert _body("enum MyEnum { Value1 Value2 }", "MyEnum") == (
            "import { GraphQLEnumType } from 'graphql';\n"
            "\n"
            "export const MyEnumType: GraphQLEnumType = new GraphQLEnumType({\n"
            "  name: 'MyEnum',\n"
            "  values: {\n"
            "    Value1: { value: 'Value1' },\n"
            "    Value2: { value: 'Value2' },\n"
            "  },\n"
            "});\n"
        )

    def test_server_values_descriptions_and_deprecation(self) -> None:
        source = (
            '"Access level."\n'
            "enum Role {\n"
            '  "Everything." ADMIN @server(value: "admin")\n'
            "  OLD @deprecated\n"
            '  LEGACY @deprecated(reason: "Use ADMIN")\n'
            "}"
        )
        body = _body(source, "Role")
        assert body.startswith(
            "import { GraphQLEnumType } from 'graphql';\n"
            "\n"
            "/** Access level. */\n"
            "export const RoleType: GraphQLEnumType = new GraphQLEnumType({\n"
            "  name: 'Role',\n"
            "  description: 'Access level.',\n"
        )
        assert "    ADMIN: { value: 'admin', description: 'Everything.' },\n" in body
        assert "    OLD: { value: 'OLD', deprecationReason: 'No longer supported' },\n" in body
        assert "    LEGACY: { value: 'LEGACY', deprecationReason: 'Use ADMIN' },\n" in body


# ###############
# Objects and Interfaces
# ###############


class TestObjects:
    def test_plain_object(self) -> None:
        generated = _emit("type MyType { myField: String }", "MyType")
        assert generated.path == "graphql/MyType.ts"
        assert _body("type MyType { myField: String }", "MyType") == (
            "import { GraphQLObjectType, GraphQLString } from 'graphql';\n"
            "\n"
            "export const MyTypeType: GraphQLObjectType = new GraphQLObjectType({\n"
            "  name: 'MyType',\n"
            "  fields: () => ({\n"
            "    myField: { type: GraphQLString },\n"
            "  }),\n"
            "});\n"
        )

    def test_interface_and_references(self) -> None:
        source = (
            "interface Node { id: ID! }\n"
            "type User implements Node { id: ID!, best: User, friends: [User!]!, role: Role }\n"
            "enum Role { ADMIN }"
        )
        assert _body(source, "User") == (
            "import { GraphQLID, GraphQLList, GraphQLNonNull, GraphQLObjectType } from 'graphql';\n"
            "import { NodeType } from './Node';\n"
            "import { RoleType } from './Role';\n"
            "\n"
            "export const UserType: GraphQLObjectType = new GraphQLObjectType({\n"
            "  name: 'User',\n"
            "  interfaces: () => [NodeType],\n"
            "  fields: () => ({\n"
            "    id: { type: new GraphQLNonNull(GraphQLID) },\n"
            "    best: { type: UserType },\n"
            "    friends: { type: new GraphQLNonNull(new GraphQLList(new GraphQLNonNull(UserType))) },\n"
            "    role: { type: RoleType },\n"
            "  }),\n"
            "});\n"
        )

    def test_interface_type(self) -> None:
        body = _body('"Has an id."\ninterface Node { id: ID! }', "Node")
        assert "import { GraphQLID, GraphQLInterfaceType, GraphQLNonNull } from 'graphql';\n" in body
        assert "export const NodeType: GraphQLInterfaceType = new GraphQLInterfaceType({\n" in body
        assert "  description: 'Has an id.',\n" in body

    def test_field_description_and_deprecation(self) -> None:
        source = 'type User {\n  "Display name."\n  name: String @deprecated\n}'
        assert (
            "    name: {\n"
            "      type: GraphQLString,\n"
            "      description: 'Display name.',\n"
            "      deprecationReason: 'No longer supported',\n"
            "    },\n"
        ) in _body(source, "User")

    def test_server_only_fields_are_left_out(self) -> None:
        body = _body("type User { id: ID!, hash: String @generate(for: Server) }", "User")
        assert "id: {" in body
        assert "hash" not in body
        assert "GraphQLString" not in body

    def test_type_without_graphql_fields(self) -> None:
        body = _body("type Secret @generate(for: Server) { hash: String }", "Secret")
        assert "  fields: () => ({}),\n" in body

    def test_custom_scalar(self) -> None:
        scalars = {"DateTime": ScalarMapping("DateTime", "Date", "GraphQLDateTime", "graphql-scalars")}
        body = _body("type Event { at: DateTime! }", "Event", scalars=scalars)
        assert body.startswith(
            "import { GraphQLNonNull, GraphQLObjectType } from 'graphql';\n"
            "import { GraphQLDateTime } from 'graphql-scalars';\n"
        )
        assert "    at: { type: new GraphQLNonNull(GraphQLDateTime) },\n" in body


# ###############
# Resolver Wiring
# ###############


class TestResolverWiring:
    def test_resolved_field(self) -> None:
        source = (
            'type MyType @resolvers(file: "f.ts") { myResolvedField: String @resolve(function: "myResolvedField") }'
        )
        assert _body(source, "MyType") == (
            "import { GraphQLObjectType, GraphQLString } from 'graphql';\n"
            "import * as MyTypeResolversModule from '../../f';\n"
            "import type { MyTypeResolvers } from '../resolvers/MyType';\n"
            "\n"
            "const myTypeResolvers: MyTypeResolvers = MyTypeResolversModule;\n"
            "\n"
            "export const MyTypeType: GraphQLObjectType = new GraphQLObjectType({\n"
            "  name: 'MyType',\n"
            "  fields: () => ({\n"
            "    myResolvedField: {\n"
            "      type: GraphQLString,\n"
            "      resolve: (root, _args, context) => myTypeResolvers.myResolvedField(root, context),\n"
            "    },\n"
            "  }),\n"
            "});\n"
        )

    def test_arguments_and_defaults(self) -> None:
        source = (
            'enum Order { ASC @server(value: "asc") DESC }\n'
            "type User { id: ID! }\n"
            'type Query @resolvers(file: "query.ts") {\n'
            '  users(first: Int! = 10, order: Order = ASC, "Name filter" name: String): [User!]!'
            ' @resolve(function: "users")\n'
            "}"
        )
        body = _body(source, "Query")
        assert body.startswith(
            "import { GraphQLInt, GraphQLList, GraphQLNonNull, GraphQLObjectType, GraphQLString } from 'graphql';\n"
            "import * as QueryResolversModule from '../../query';\n"
            "import type { QueryResolvers } from '../resolvers/Query';\n"
            "import { OrderType } from './Order';\n"
            "import { UserType } from './User';\n"
        )
        assert (
            "    users: {\n"
            "      type: new GraphQLNonNull(new GraphQLList(new GraphQLNonNull(UserType))),\n"
            "      args: {\n"
            "        first: { type: new GraphQLNonNull(GraphQLInt), defaultValue: 10 },\n"
            "        order: { type: OrderType, defaultValue: 'asc' },\n"
            "        name: { type: GraphQLString, description: 'Name filter' },\n"
            "      },\n"
            "      resolve: (root, args, context) => queryResolvers.users(root, context, args),\n"
            "    },\n"
        ) in body

    def test_list_and_object_defaults(self) -> None:
        source = (
            "enum E { A @server(value: \"a\") B }\n"
            "type T { f(xs: [E] = [A, B], s: [String] = [\"x\"], n: Float = null): Int }"
        )
        body = _body(source, "T")
        assert "xs: { type: new GraphQLList(EType), defaultValue: ['a', 'B'] }" in body
        assert "s: { type: new GraphQLList(GraphQLString), defaultValue: ['x'] }" in body
        assert "n: { type: GraphQLFloat, defaultValue: null }" in body

    def test_resolver_module_path_follows_output_directory(self) -> None:
        source = 'type T @resolvers(file: "../src/t.ts") { a: Int @resolve(function: "getA") }'
        options = EmitOptions(output_directory="web/generated")
        body = _body(source, "T", file="schema/t.graphql", options=options)
        assert "import * as TResolversModule from '../../../src/t';\n" in body

    def test_unused_module_is_not_imported(self) -> None:
        source = (
            'type T @resolvers(file: "t.ts") { a: Int @resolve(function: "a") }\n'
            'extend type T @resolvers(file: "unused.ts") { b: Int @generate(for: Both) }'
        )
        body = _body(source, "T")
        assert "unused" not in body
        assert "const tTResolvers: TTResolvers = TTResolversModule;\n" in body

    def test_two_modules(self) -> None:
        source = (
            'type T @resolvers(file: "base.ts") { a: Int @resolve(function: "a") }\n'
            'extend type T @resolvers(file: "extra.ts") { b: Int @resolve(function: "b") }'
        )
        body = _body(source, "T")
        assert "import type { TBaseResolvers, TExtraResolvers } from '../resolvers/T';\n" in body
        assert "const tBaseResolvers: TBaseResolvers = TBaseResolversModule;\n" in body
        assert "const tExtraResolvers: TExtraResolvers = TExtraResolversModule;\n" in body
        assert "resolve: (root, _args, context) => tExtraResolvers.b(root, context)," in body
