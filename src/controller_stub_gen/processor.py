"""Fold scanned facts into a Model and hand it to the stub writer.

One call to process_round is one generation round: a fresh Model is built,
every fact is folded in, path templates are normalized once, and the writer
is invoked for the stub and the stub base files.
"""

import logging
import re
from typing import Iterable, Protocol

from controller_stub_gen.parser.base import (
    ArgumentModel,
    HttpMethod,
    Model,
    ResourceModel,
    capitalize,
    clean_response_type,
    select_sub_resource,
)
from controller_stub_gen.parser.facts import Fact, FactKind

logger = logging.getLogger(__name__)

PLACEHOLDER = re.compile(r"\{([^{}]+)\}")

ROUTE_METHODS = {
    FactKind.GET_ROUTE: HttpMethod.GET,
    FactKind.POST_ROUTE: HttpMethod.POST,
}

ORDERS = ("textual", "declaration")


class StubSink(Protocol):
    def write_stub_file(self, model: Model): ...

    def write_stub_base_file(self, model: Model): ...


def process_round(facts: Iterable[Fact], writer: StubSink | None = None, order: str = "textual") -> Model:
    """Build the Model for one round and, if anything was found, write the stubs."""
    facts = list(facts)
    model = Model()

    logger.debug("Processing %d facts", len(facts))
    for fact in facts:
        fold_fact(model, fact)

    normalize_paths(model, order=order)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Model after normalization:\n%s", model.model_dump_json(indent=2))

    if facts and writer is not None:
        writer.write_stub_file(model)
        writer.write_stub_base_file(model)
    return model


def fold_fact(model: Model, fact: Fact) -> None:
    """Apply a single fact to the model. Unknown facts leave it untouched."""
    logger.debug("Processing %s on %s", fact.annotation, fact.element)

    if fact.kind == FactKind.CONTROLLER:
        controller_model = model.get_controller_model(fact.controller)
        if fact.package is not None:
            controller_model.package = fact.package
        for name in fact.imports:
            if name not in controller_model.imports:
                controller_model.imports.append(name)
    elif fact.kind != FactKind.UNKNOWN and fact.method_key is None:
        logger.warning("Ignoring %s on %s: no enclosing method", fact.annotation, fact.element)
    elif fact.kind in ROUTE_METHODS:
        resource = model.get_controller_model(fact.controller).get_resource_model(fact.method_key)
        sub_resource = select_sub_resource(fact.path, fact.value)
        if sub_resource is not None:
            _assign(resource, "sub_resource", sub_resource, fact)
        _assign(resource, "http_method", ROUTE_METHODS[fact.kind], fact)
        if fact.method_name is not None:
            _assign(resource, "method_name", capitalize(fact.method_name), fact)
        if fact.type_text is not None:
            _assign(resource, "response_type", clean_response_type(fact.type_text), fact)
    elif fact.kind == FactKind.REQUEST_PARAM:
        resource = model.get_controller_model(fact.controller).get_resource_model(fact.method_key)
        argument = resource.get_argument_model(fact.name)
        _set_argument(argument, fact)
    elif fact.kind == FactKind.PATH_VARIABLE:
        resource = model.get_controller_model(fact.controller).get_resource_model(fact.method_key)
        resource.url_has_path_variable = True
        _set_argument(resource.get_path_variable_model(fact.name), fact)
    elif fact.kind == FactKind.REQUEST_BODY:
        resource = model.get_controller_model(fact.controller).get_resource_model(fact.method_key)
        resource.url_has_path_variable = True
        body = ArgumentModel(name=fact.name, type=fact.type_text)
        if resource.request_body is not None and resource.request_body != body:
            logger.warning(
                "%s: request body %s replaced by %s",
                fact.method_key, resource.request_body.name, body.name,
            )
        resource.request_body = body
    else:
        logger.info("Unknown annotation %s on %s", fact.annotation, fact.element)


def normalize_paths(model: Model, order: str = "textual") -> None:
    """Replace every {name} placeholder of a path variable with %s.

    ``order`` decides the recorded format-argument order: "textual" follows
    the placeholders left to right, "declaration" follows the path-variable
    registry. A placeholder used twice is listed twice either way.

    A variable declared as ``@PathVariable("id") Long itemId`` fills the
    ``{id}`` placeholder and is recorded as ``itemId``.
    """
    if order not in ORDERS:
        raise ValueError(f"order must be one of {ORDERS}, got {order!r}")

    for controller_model in model.controllers.values():
        for resource in controller_model.resources.values():
            if not resource.path_variables or resource.sub_resource is None:
                continue
            template = resource.sub_resource
            placeholders = {v.alias or v.name: v.name for v in resource.path_variables.values()}
            if order == "textual":
                resource.path_variable_order = [
                    placeholders[m.group(1)] for m in PLACEHOLDER.finditer(template) if m.group(1) in placeholders
                ]
            else:
                resource.path_variable_order = [
                    name
                    for placeholder, name in placeholders.items()
                    for _ in range(template.count(f"{{{placeholder}}}"))
                ]
            for placeholder in placeholders:
                template = template.replace(f"{{{placeholder}}}", "%s")
            resource.sub_resource = template


def _set_argument(argument: ArgumentModel, fact: Fact) -> None:
    if argument.type is not None and argument.type != fact.type_text:
        logger.warning(
            "%s: argument %s retyped from %s to %s",
            fact.method_key, fact.name, argument.type, fact.type_text,
        )
    argument.type = fact.type_text
    argument.name = fact.name
    argument.alias = fact.alias


def _assign(resource: ResourceModel, field: str, value, fact: Fact) -> None:
    current = getattr(resource, field)
    if current is not None and current != value:
        logger.warning("%s: %s changed from %r to %r", fact.method_key, field, current, value)
    setattr(resource, field, value)
