from lcu_schema.catalog.base import (
    Argument,
    Endpoint,
    EnumValue,
    NamedType,
    NormalizedCatalog,
    StructField,
)
from lcu_schema.catalog.types import Primitive, Reference
from lcu_schema.diagnostics import Diagnostics
from lcu_schema.generator.document import (
    OPENAPI_VERSION,
    assemble,
    build_document,
    describe,
    named_type_schema,
)

STRING = Primitive(type="string")


class TestNamedTypeSchema:
    def test_enum_sorted_by_value(self):
        status = NamedType(name="Status", values=[
            EnumValue(name="FAIL", value=1),
            EnumValue(name="OK", value=0),
        ])
        assert named_type_schema(status) == {"type": "string", "enum": ["FAIL", "OK"]}

    def test_struct_required_list(self):
        obj = NamedType(name="Obj", description="An object", fields=[
            StructField(name="id", field_schema=STRING),
            StructField(name="note", field_schema=STRING, optional=True, description="free text"),
        ])
        assert named_type_schema(obj) == {
            "type": "object",
            "description": "An object",
            "properties": {
                "id": {"type": "string"},
                "note": {"type": "string", "description": "free text"},
            },
            "required": ["id"],
        }

    def test_all_optional_has_no_required(self):
        obj = NamedType(name="Obj", fields=[StructField(name="id", field_schema=STRING, optional=True)])
        assert "required" not in named_type_schema(obj)

    def test_ref_property_has_no_siblings(self):
        obj = NamedType(name="Obj", fields=[
            StructField(name="child", field_schema=Reference(target_name="Obj"), description="self"),
        ])
        assert named_type_schema(obj)["properties"]["child"] == {"$ref": "#/components/schemas/Obj"}

    def test_open_map(self):
        assert named_type_schema(NamedType(name="Map")) == {"type": "object", "additionalProperties": True}


class TestDescribe:
    def test_lists_overridden_numbered(self):
        text = describe(["Help", "Subscribe"], [])
        assert "1.\tHelp" in text
        assert "2.\tSubscribe" in text

    def test_diagnostics_section(self):
        text = describe([], ["something odd"])
        assert "- something odd" in text


class TestAssemble:
    def test_openapi_top_level(self):
        doc = assemble([NamedType(name="Map")], [], [], tags=["a"], version="1.2.3")
        data = doc.to_openapi()
        assert data["openapi"] == OPENAPI_VERSION
        assert data["info"]["title"] == "LCU SCHEMA"
        assert data["info"]["version"] == "1.2.3"
        assert data["components"]["schemas"] == {"Map": {"type": "object", "additionalProperties": True}}
        assert data["paths"] == {}
        assert data["tags"] == [{"name": "a"}]

    def test_default_version(self):
        assert assemble([], [], []).info.version == "0.0.0"


class TestBuildDocument:
    def _catalog(self, functions) -> NormalizedCatalog:
        return NormalizedCatalog(
            types=[NamedType(name="Obj", fields=[StructField(name="id", field_schema=STRING)])],
            functions=functions,
        )

    def test_unroutable_function_omitted_with_notice(self):
        catalog = self._catalog([
            Endpoint(name="GetObj", method="GET", path="/lol-obj/v1/obj", return_schema=Reference(target_name="Obj")),
            Endpoint(name="ProcessControlQuit"),
        ])
        doc = build_document(catalog)
        assert list(doc.paths) == ["/lol-obj/v1/obj"]
        assert any("ProcessControlQuit" in d for d in doc.diagnostics)
        assert "ProcessControlQuit" in doc.info.description

    def test_methods_keyed_lower_case(self):
        catalog = self._catalog([
            Endpoint(name="GetObj", method="GET", path="/lol-obj/v1/obj"),
            Endpoint(name="PutObj", method="PUT", path="/lol-obj/v1/obj",
                     arguments=[Argument(name="body", arg_schema=Reference(target_name="Obj"))]),
        ])
        data = build_document(catalog).to_openapi()
        assert list(data["paths"]["/lol-obj/v1/obj"]) == ["get", "put"]

    def test_later_duplicate_route_replaces_earlier(self):
        diagnostics = Diagnostics()
        catalog = self._catalog([
            Endpoint(name="First", method="GET", path="/x/y"),
            Endpoint(name="Second", method="GET", path="/x/y"),
        ])
        doc = build_document(catalog, diagnostics)
        assert doc.paths["/x/y"]["get"].operation_id == "Second"
        assert len(doc.operations) == 1
        assert len(diagnostics) == 1

    def test_overridden_listed(self):
        catalog = self._catalog([
            Endpoint(name="Subscribe", method="post", path="/Subscribe", overridden=True),
        ])
        doc = build_document(catalog)
        assert doc.overridden == ["Subscribe"]
        assert "1.\tSubscribe" in doc.info.description

    def test_dangling_reference_left_alone(self):
        catalog = self._catalog([
            Endpoint(name="GetGhost", method="GET", path="/ghost", return_schema=Reference(target_name="Ghost")),
        ])
        doc = build_document(catalog)
        schema = doc.to_openapi()["paths"]["/ghost"]["get"]["responses"]["2XX"]["content"]["application/json"]["schema"]
        assert schema == {"$ref": "#/components/schemas/Ghost"}
        assert doc.component("Ghost") is None
        assert doc.component("Obj") is not None

    def test_tags_converged(self):
        catalog = self._catalog([
            Endpoint(name="A", method="GET", path="/lol-a/v1/one"),
            Endpoint(name="B", method="GET", path="/misc/v1/b"),
        ])
        doc = build_document(catalog)
        assert doc.tags == ["Plugin lol-a", "other"]
