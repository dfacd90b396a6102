"""Endpoint model built from controller declarations.

The scanner reports facts, the processor folds them into this tree
(Model -> ControllerModel -> ResourceModel -> ArgumentModel), and the
stub writer renders it.
"""

import re
from enum import Enum

from pydantic import BaseModel

PARENTHESIZED = re.compile(r"\(.*\)")


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"


class ArgumentModel(BaseModel):
    """A named query parameter, path variable or request body."""

    name: str | None = None
    type: str | None = None
    alias: str | None = None  # name given in the annotation, e.g. @RequestParam("q")


class ResourceModel(BaseModel):
    """A single endpoint (one controller method)."""

    method_name: str | None = None  # GetItem
    http_method: HttpMethod | None = None
    sub_resource: str | None = None  # /items/{id} until normalized
    response_type: str | None = None
    url_has_path_variable: bool = False  # path variable or request body seen
    arguments: dict[str, ArgumentModel] = {}
    path_variables: dict[str, ArgumentModel] = {}
    request_body: ArgumentModel | None = None
    path_variable_order: list[str] = []  # format argument order after normalizing

    def get_argument_model(self, name: str) -> ArgumentModel:
        return self.arguments.setdefault(name, ArgumentModel())

    def get_path_variable_model(self, name: str) -> ArgumentModel:
        return self.path_variables.setdefault(name, ArgumentModel())


class ControllerModel(BaseModel):
    """All endpoints of one controller, keyed by method declaration."""

    package: str | None = None
    imports: list[str] = []  # single-type imports of the controller source
    resources: dict[str, ResourceModel] = {}

    def get_resource_model(self, key: str) -> ResourceModel:
        if key not in self.resources:
            self.resources[key] = ResourceModel()
        return self.resources[key]


class Model(BaseModel):
    """Root of one generation round, keyed by fully-qualified controller name."""

    controllers: dict[str, ControllerModel] = {}

    def get_controller_model(self, key: str) -> ControllerModel:
        if key not in self.controllers:
            self.controllers[key] = ControllerModel()
        return self.controllers[key]


def select_sub_resource(path: list[str], value: list[str]) -> str | None:
    """Pick the route template: first ``path`` entry, else first ``value`` entry."""
    if path:
        return path[0]
    if value:
        return value[0]
    return None


def clean_response_type(type_text: str) -> str:
    """Strip parenthesized groups, e.g. ``(java.lang.Long)Item`` -> ``Item``."""
    return PARENTHESIZED.sub("", type_text)


def capitalize(name: str) -> str:
    """Upper-case the first character only: ``getItem`` -> ``GetItem``."""
    return name[:1].upper() + name[1:]
