import pytest

from lcu_schema.catalog.base import Argument, Endpoint, NamedType, StructField
from lcu_schema.catalog.types import OpaqueObject, Primitive, Reference, Void
from lcu_schema.diagnostics import Diagnostics
from lcu_schema.generator.operations import classify, strip_marker

STRING = Primitive(type="string")
INT = Primitive(type="integer", format="int32")

COMPONENTS = {
    "Query": NamedType(name="Query", fields=[
        StructField(name="begIndex", field_schema=INT, optional=True),
        StructField(name="endIndex", field_schema=INT),
    ]),
    "Status": NamedType(name="Status", values=[]),
}


def _arg(name, schema=STRING, optional=False) -> Argument:
    return Argument(name=name, arg_schema=schema, optional=optional)


def _make_endpoint(**overrides) -> Endpoint:
    defaults = dict(
        name="Thing",
        method="GET",
        path="/lol-thing/v1/thing",
        path_params=[],
        arguments=[],
        return_schema=Void(),
    )
    defaults.update(overrides)
    return Endpoint(**defaults)


class TestPathParameters:
    def test_get_summoner(self):
        ep = _make_endpoint(
            name="GetSummoner",
            path="/lol-summoner/v1/summoners/{summonerId}",
            path_params=["summonerId"],
            arguments=[_arg("summonerId+", Primitive(type="integer", format="uint64", minimum=0))],
            return_schema=Reference(target_name="SummonerObj"),
        )
        op = classify(ep, COMPONENTS)
        assert [p.name for p in op.path_parameters] == ["summonerId"]
        assert op.path_parameters[0].param_schema.type == "integer"
        assert op.path_parameters[0].required is True
        assert op.query_parameters == []
        assert op.request_body is None
        assert op.response == Reference(target_name="SummonerObj")
        assert op.tags == ["Plugin lol-summoner"]

    def test_unmatched_placeholder_defaults_to_string(self):
        ep = _make_endpoint(path="/a/{id}", path_params=["id"], arguments=[_arg("other", INT)])
        op = classify(ep, COMPONENTS)
        assert op.path_parameters[0].param_schema == STRING

    def test_consumes_leading_arguments(self):
        ep = _make_endpoint(
            method="GET",
            path="/a/{x}/{y}",
            path_params=["x", "y"],
            arguments=[_arg("x"), _arg("y"), _arg("z")],
        )
        op = classify(ep, COMPONENTS)
        assert [p.name for p in op.path_parameters] == ["x", "y"]
        assert [p.name for p in op.query_parameters] == ["z"]

    def test_marker_is_ignored_on_both_sides(self):
        ep = _make_endpoint(path="/{path+}", path_params=["path+"], arguments=[_arg("path", INT)])
        op = classify(ep, COMPONENTS)
        assert op.path_parameters[0].name == "path+"
        assert op.path_parameters[0].param_schema == INT


class TestQueryParameters:
    def test_flattens_struct_reference(self):
        ep = _make_endpoint(arguments=[_arg("query", Reference(target_name="Query"))])
        op = classify(ep, COMPONENTS)
        assert [p.name for p in op.query_parameters] == ["begIndex", "endIndex"]
        assert all(p.required is False for p in op.query_parameters)
        assert op.request_body is None

    def test_reference_without_properties_is_single_param(self):
        ep = _make_endpoint(method="DELETE", arguments=[_arg("status", Reference(target_name="Status"))])
        op = classify(ep, COMPONENTS)
        assert [p.name for p in op.query_parameters] == ["status"]
        assert op.query_parameters[0].param_schema == Reference(target_name="Status")

    def test_dangling_reference_is_single_param_with_notice(self):
        diagnostics = Diagnostics()
        ep = _make_endpoint(arguments=[_arg("q", Reference(target_name="Missing"))])
        op = classify(ep, COMPONENTS, diagnostics)
        assert [p.name for p in op.query_parameters] == ["q"]
        assert len(diagnostics) == 1

    def test_primitive_leftover_is_query(self):
        ep = _make_endpoint(method="HEAD", arguments=[_arg("name", optional=True)])
        op = classify(ep, COMPONENTS)
        assert op.query_parameters[0].name == "name"
        assert op.query_parameters[0].required is False

    def test_many_leftovers_on_mutating_verb_are_query(self):
        ep = _make_endpoint(
            method="PUT",
            path="/riotclient/v1/settings/{key}",
            path_params=["key"],
            arguments=[_arg("key"), _arg("value", OpaqueObject()), _arg("persist", optional=True)],
        )
        op = classify(ep, COMPONENTS)
        assert [p.name for p in op.query_parameters] == ["value", "persist"]
        assert [p.required for p in op.query_parameters] == [True, False]
        assert op.request_body is None

    def test_many_leftovers_are_not_flattened(self):
        ep = _make_endpoint(arguments=[_arg("a", Reference(target_name="Query")), _arg("b")])
        op = classify(ep, COMPONENTS)
        assert [p.name for p in op.query_parameters] == ["a", "b"]


class TestRequestBody:
    @pytest.mark.parametrize("method", ["POST", "PUT", "PATCH", "post"])
    def test_single_leftover_is_body(self, method):
        ep = _make_endpoint(method=method, arguments=[_arg("config", Reference(target_name="Query"))])
        op = classify(ep, COMPONENTS)
        assert op.request_body == Reference(target_name="Query")
        assert op.parameters == []
        assert op.method == method.lower()

    def test_no_leftover_no_body(self):
        op = classify(_make_endpoint(method="POST"), COMPONENTS)
        assert op.request_body is None


class TestResponse:
    def test_void_response_has_no_content(self):
        op = classify(_make_endpoint(), COMPONENTS)
        assert op.to_openapi()["responses"] == {"2XX": {"description": "Success response"}}

    def test_response_content(self):
        op = classify(_make_endpoint(return_schema=Reference(target_name="Query")), COMPONENTS)
        content = op.to_openapi()["responses"]["2XX"]["content"]
        assert content == {"application/json": {"schema": {"$ref": "#/components/schemas/Query"}}}


class TestClassify:
    def test_is_idempotent(self):
        ep = _make_endpoint(arguments=[_arg("query", Reference(target_name="Query"))])
        assert classify(ep, COMPONENTS) == classify(ep, COMPONENTS)

    def test_unroutable_endpoint_rejected(self):
        with pytest.raises(ValueError):
            classify(_make_endpoint(method=None), COMPONENTS)

    def test_openapi_shape(self):
        ep = _make_endpoint(
            name="PostLobby",
            method="POST",
            path="/lol-lobby/v2/lobby/{id}",
            path_params=["id"],
            arguments=[_arg("id"), _arg("config", Reference(target_name="Query"))],
            description="Create a lobby",
        )
        data = classify(ep, COMPONENTS).to_openapi()
        assert data["operationId"] == "PostLobby"
        assert data["description"] == "Create a lobby"
        assert data["parameters"] == [{"in": "path", "name": "id", "required": True, "schema": {"type": "string"}}]
        assert data["requestBody"]["content"]["application/json"]["schema"] == {"$ref": "#/components/schemas/Query"}


class TestStripMarker:
    def test_strips_trailing_plus(self):
        assert strip_marker("path+") == "path"
        assert strip_marker("path") == "path"
