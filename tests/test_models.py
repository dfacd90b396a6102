from controller_stub_gen.parser.base import (
    ArgumentModel,
    ControllerModel,
    HttpMethod,
    Model,
    ResourceModel,
    capitalize,
    clean_response_type,
    select_sub_resource,
)


class TestGetOrCreate:
    def test_controller_model_is_reused(self):
        model = Model()
        first = model.get_controller_model("com.example.X")
        second = model.get_controller_model("com.example.X")
        assert first is second
        assert list(model.controllers) == ["com.example.X"]

    def test_resource_model_is_reused(self):
        controller = ControllerModel()
        first = controller.get_resource_model("com.example.X.list()")
        assert controller.get_resource_model("com.example.X.list()") is first
        assert controller.get_resource_model("com.example.X.list(String)") is not first

    def test_argument_and_path_variable_models_are_reused(self):
        resource = ResourceModel()
        assert resource.get_argument_model("q") is resource.get_argument_model("q")
        assert resource.get_path_variable_model("id") is resource.get_path_variable_model("id")
        assert "q" not in resource.path_variables

    def test_separate_models_do_not_share_registries(self):
        a, b = ResourceModel(), ResourceModel()
        a.get_argument_model("q")
        assert b.arguments == {}
        assert Model().controllers == {}


class TestResourceModelDefaults:
    def test_new_resource_is_empty(self):
        resource = ResourceModel()
        assert resource.method_name is None
        assert resource.http_method is None
        assert resource.sub_resource is None
        assert resource.response_type is None
        assert resource.url_has_path_variable is False
        assert resource.arguments == {}
        assert resource.path_variables == {}
        assert resource.request_body is None
        assert resource.path_variable_order == []

    def test_model_dump_serializes_enum_value(self):
        resource = ResourceModel(http_method=HttpMethod.GET, request_body=ArgumentModel(name="b", type="Body"))
        data = resource.model_dump(mode="json")
        assert data["http_method"] == "GET"
        assert data["request_body"] == {"name": "b", "type": "Body", "alias": None}


class TestSelectSubResource:
    def test_prefers_path_attribute(self):
        assert select_sub_resource(["/a"], ["/b"]) == "/a"

    def test_falls_back_to_value_attribute(self):
        assert select_sub_resource([], ["/b"]) == "/b"

    def test_unset_when_both_empty(self):
        assert select_sub_resource([], []) is None

    def test_only_first_alias_is_used(self):
        assert select_sub_resource(["/a", "/a2"], []) == "/a"


class TestCleanResponseType:
    def test_strips_parenthesized_suffix(self):
        assert clean_response_type("Foo(bar)") == "Foo"

    def test_strips_signature_prefix(self):
        assert clean_response_type("(java.lang.Long)java.util.List<Item>") == "java.util.List<Item>"

    def test_plain_type_unchanged(self):
        assert clean_response_type("List<Item>") == "List<Item>"


class TestCapitalize:
    def test_first_letter_only(self):
        assert capitalize("getItem") == "GetItem"

    def test_already_capitalized(self):
        assert capitalize("List") == "List"

    def test_empty(self):
        assert capitalize("") == ""
