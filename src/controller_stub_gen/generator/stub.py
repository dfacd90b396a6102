"""Stub writer: renders WireMock stub classes from a normalized Model.

Each controller gets two files: ``<Name>Stub.java`` with one stubbing method
per endpoint, and ``<Name>StubBase.java`` with the URL templates and the
shared response helpers. Output depends only on the Model, so re-rendering an
unchanged Model gives identical text.
"""

import logging
import re
from pathlib import Path

from controller_stub_gen.config import StubConfig
from controller_stub_gen.parser.base import ControllerModel, HttpMethod, Model, ResourceModel

logger = logging.getLogger(__name__)

RESPONSE_ENTITY = re.compile(r"^(?:[\w.]+\.)?ResponseEntity(?:<(?P<inner>.*)>)?$")

VOID_TYPES = ("void", "Void", "java.lang.Void")

SKIPPED_IMPORTS = ("org.springframework.web.bind.annotation.", "org.springframework.stereotype.")

WIREMOCK_VERBS = {
    HttpMethod.GET: "get",
    HttpMethod.POST: "post",
}


class StubWriter:
    """Renders and writes the stub and stub base files for every controller."""

    def __init__(self, config: StubConfig | None = None):
        self.config = config or StubConfig()
        self.written: list[Path] = []

    def write_stub_file(self, model: Model) -> list[Path]:
        return self._write(self.render_stub_files(model))

    def write_stub_base_file(self, model: Model) -> list[Path]:
        return self._write(self.render_stub_base_files(model))

    def render_stub_files(self, model: Model) -> dict[str, str]:
        """Return {relative path: source} for the stub classes."""
        files = {}
        for key in sorted(model.controllers):
            package, simple_name = controller_name(key, model.controllers[key])
            files[self._relative_path(package, simple_name + self.config.stub_suffix)] = self._render_stub(
                package, simple_name, model.controllers[key]
            )
        return files

    def render_stub_base_files(self, model: Model) -> dict[str, str]:
        """Return {relative path: source} for the stub base classes."""
        files = {}
        for key in sorted(model.controllers):
            package, simple_name = controller_name(key, model.controllers[key])
            files[self._relative_path(package, simple_name + self.config.base_suffix)] = self._render_base(
                package, simple_name, model.controllers[key]
            )
        return files

    def _write(self, files: dict[str, str]) -> list[Path]:
        paths = []
        for relative, content in files.items():
            path = self.config.output_dir / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
            logger.info("Wrote %s", path)
            paths.append(path)
        self.written.extend(paths)
        return paths

    def _relative_path(self, package: str, class_name: str) -> str:
        parts = package.split(".") if package else []
        return "/".join(parts + [f"{class_name}.java"])

    def _render_stub(self, package: str, simple_name: str, controller: ControllerModel) -> str:
        stub_name = simple_name + self.config.stub_suffix
        base_name = simple_name + self.config.base_suffix
        imports = sorted({"com.fasterxml.jackson.databind.ObjectMapper", *stub_imports(controller)})
        lines = _package_lines(package) + [f"import {name};" for name in imports] + [
            "",
            "import java.util.*;",
            "",
            "import static com.github.tomakehurst.wiremock.client.WireMock.*;",
            "",
            f"public class {stub_name} extends {base_name} {{",
            "",
            f"    public {stub_name}(ObjectMapper objectMapper) {{",
            "        super(objectMapper);",
            "    }",
        ]
        for method_name, constant, key, resource in _stubbable(controller, warn=True):
            lines.append("")
            lines.extend(self._render_stub_method(method_name, constant, resource))
        lines.append("}")
        return "\n".join(lines) + "\n"

    def _render_stub_method(self, method_name: str, constant: str, resource: ResourceModel) -> list[str]:
        params = []
        path_args = []
        for name in resource.path_variable_order:
            variable = resource.path_variables[name]
            if name not in path_args:
                params.append(f"final {variable.type} {name}")
            path_args.append(name)
        for name in sorted(resource.arguments):
            params.append(f"final {resource.arguments[name].type} {name}")
        if resource.request_body is not None:
            params.append(f"final {resource.request_body.type} {resource.request_body.name}")
        body_type = response_body_type(resource.response_type)
        if body_type is not None:
            params.append(f"final {body_type} response")

        url = f"String.format({constant}, {', '.join(path_args)})" if path_args else constant
        verb = WIREMOCK_VERBS[resource.http_method]
        lines = [
            f"    public void {method_name}({', '.join(params)}) {{",
            f"        stubFor({verb}(urlPathEqualTo({url}))",
        ]
        for name in sorted(resource.arguments):
            query_name = java_string(resource.arguments[name].alias or name)
            lines.append(f'                .withQueryParam("{query_name}", equalTo(String.valueOf({name})))')
        if resource.request_body is not None:
            lines.append(f"                .withRequestBody(equalToJson(buildBody({resource.request_body.name})))")
        if body_type is not None:
            lines.append("                .willReturn(aJsonResponse(response)));")
        else:
            lines.append("                .willReturn(aResponse().withStatus(200)));")
        lines.append("    }")
        return lines

    def _render_base(self, package: str, simple_name: str, controller: ControllerModel) -> str:
        base_name = simple_name + self.config.base_suffix
        lines = _package_lines(package) + [
            "import com.fasterxml.jackson.core.JsonProcessingException;",
            "import com.fasterxml.jackson.databind.ObjectMapper;",
            "import com.github.tomakehurst.wiremock.client.ResponseDefinitionBuilder;",
            "",
            "import static com.github.tomakehurst.wiremock.client.WireMock.aResponse;",
            "",
            f"public class {base_name} {{",
            "",
        ]
        constants = _stubbable(controller)
        for _, constant, key, resource in constants:
            lines.append(f'    protected static final String {constant} = "{java_string(resource.sub_resource or "")}";')
        if constants:
            lines.append("")
        lines.extend([
            "    protected final ObjectMapper objectMapper;",
            "",
            f"    public {base_name}(ObjectMapper objectMapper) {{",
            "        this.objectMapper = objectMapper;",
            "    }",
            "",
            "    protected String buildBody(Object object) {",
            "        try {",
            "            return objectMapper.writeValueAsString(object);",
            "        } catch (JsonProcessingException e) {",
            "            throw new IllegalArgumentException(e);",
            "        }",
            "    }",
            "",
            "    protected ResponseDefinitionBuilder aJsonResponse(Object response) {",
            "        return aResponse()",
            "                .withStatus(200)",
            '                .withHeader("Content-Type", "application/json")',
            "                .withBody(buildBody(response));",
            "    }",
            "}",
        ])
        return "\n".join(lines) + "\n"


def controller_name(key: str, controller: ControllerModel) -> tuple[str, str]:
    """(package, simple name) of a controller, using the package it was declared in when known."""
    package = controller.package
    if package is None:
        return split_controller_name(key)
    remainder = key[len(package) + 1:] if package and key.startswith(package + ".") else key
    return package, remainder.replace(".", "")


def stub_imports(controller: ControllerModel) -> list[str]:
    """Source imports the stub class needs: everything but the web annotations."""
    return [name for name in controller.imports if not name.startswith(SKIPPED_IMPORTS) and name != "java.util.*"]


def split_controller_name(key: str) -> tuple[str, str]:
    """Split ``com.example.Outer.Inner`` into ("com.example", "OuterInner").

    Fallback for controllers whose package was never reported: lowercase
    leading segments are taken as the package.
    """
    parts = key.split(".")
    package = []
    while len(parts) > 1 and parts[0][:1].islower():
        package.append(parts.pop(0))
    return ".".join(package), "".join(parts)


def response_body_type(response_type: str | None) -> str | None:
    """The stub argument type for a response, or None for ``void``."""
    if response_type is None:
        return "Object"
    text = response_type.strip()
    if text in VOID_TYPES:
        return None
    match = RESPONSE_ENTITY.match(text)
    if match:
        inner = (match.group("inner") or "").strip()
        if inner in VOID_TYPES:
            return None
        return inner if inner not in ("", "?") else "Object"
    return text


def constant_name(method_name: str) -> str:
    """``GetItemById`` -> ``GET_ITEM_BY_ID_URL``."""
    snake = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", method_name)
    return f"{snake.upper()}_URL"


def java_string(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


def _package_lines(package: str) -> list[str]:
    return [f"package {package};", ""] if package else []


def _stubbable(controller: ControllerModel, warn: bool = False) -> list[tuple[str, str, str, ResourceModel]]:
    """Resources that can be stubbed, sorted, as (stub method name, URL constant, key, resource).

    Overloads share a method name, so the second ``List`` becomes ``List2``
    with ``LIST2_URL``.
    """
    result = []
    used: set[str] = set()
    ordered = sorted(controller.resources.items(), key=lambda item: (item[1].method_name or "", item[0]))
    for key, resource in ordered:
        if resource.http_method is None or resource.method_name is None:
            if warn:
                logger.warning("Skipping %s: no GET or POST mapping", key)
            continue
        candidate, n = resource.method_name, 2
        while candidate in used:
            candidate = f"{resource.method_name}{n}"
            n += 1
        used.add(candidate)
        result.append((candidate, constant_name(candidate), key, resource))
    return result
