"""Checks a normalized Model for endpoints that cannot be stubbed faithfully."""

import re

from controller_stub_gen.parser.base import Model, ResourceModel

UNRESOLVED = re.compile(r"\{[^{}]*\}")


def validate_resource(resource: ResourceModel) -> list[str]:
    """Return the problems found on one endpoint (empty when it is fine)."""
    problems = []
    if resource.http_method is None:
        problems.append("no GET or POST mapping")
    template = resource.sub_resource
    if template is not None:
        unresolved = UNRESOLVED.findall(template)
        if unresolved:
            problems.append(f"unresolved placeholders {', '.join(unresolved)}")
        missing = sorted(name for name in resource.path_variables if name not in resource.path_variable_order)
        if missing:
            problems.append(f"path variables not in template: {', '.join(missing)}")
    elif resource.path_variables:
        problems.append("path variables declared but no path template")
    return problems


def validate_model(model: Model) -> dict[str, str]:
    """Validate every endpoint of the model.

    Returns dict of {endpoint key: error message} for endpoints with problems.
    """
    errors = {}
    for controller_model in model.controllers.values():
        for key, resource in controller_model.resources.items():
            problems = validate_resource(resource)
            if problems:
                errors[key] = "; ".join(problems)
    return errors
