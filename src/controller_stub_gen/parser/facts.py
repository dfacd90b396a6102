"""Facts reported by the declaration scanner.

A fact is one (annotation, declaration) pair. The processor folds facts into
a Model in whatever order they arrive.
"""

from enum import Enum

from pydantic import BaseModel


class FactKind(str, Enum):
    CONTROLLER = "controller"
    GET_ROUTE = "get_route"
    POST_ROUTE = "post_route"
    REQUEST_PARAM = "request_param"
    PATH_VARIABLE = "path_variable"
    REQUEST_BODY = "request_body"
    UNKNOWN = "unknown"


ANNOTATION_KINDS = {
    "RestController": FactKind.CONTROLLER,
    "GetMapping": FactKind.GET_ROUTE,
    "PostMapping": FactKind.POST_ROUTE,
    "RequestParam": FactKind.REQUEST_PARAM,
    "PathVariable": FactKind.PATH_VARIABLE,
    "RequestBody": FactKind.REQUEST_BODY,
}

# Reported but carry nothing the model uses.
PASSIVE_ANNOTATIONS = ("Controller", "ResponseBody")

SUPPORTED_ANNOTATIONS = tuple(ANNOTATION_KINDS) + PASSIVE_ANNOTATIONS


class Fact(BaseModel):
    """One discovered piece of metadata about a declaration."""

    kind: FactKind
    annotation: str
    element: str  # textual identity of the annotated declaration
    controller: str  # fully-qualified controller name
    method_key: str | None = None
    method_name: str | None = None
    path: list[str] = []
    value: list[str] = []
    type_text: str | None = None  # return type for routes, declared type for parameters
    name: str | None = None  # parameter simple name
    alias: str | None = None  # value/name attribute of a parameter annotation
    package: str | None = None
    imports: list[str] = []


def kind_for(annotation: str) -> FactKind:
    return ANNOTATION_KINDS.get(annotation, FactKind.UNKNOWN)
