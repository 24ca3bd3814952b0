"""
Utilities for manifest value expressions.
Supports ``{resource.connectionString}``, ``{resource.value}``,
``{resource.bindings.<binding>.<property>}`` and ``{resource.inputs.<input>}``.
"""
import re
from dataclasses import dataclass
from typing import Callable, List, Optional

# Group 1: resource name, group 2: dotted property path
EXPRESSION_PATTERN = re.compile(r'\{([A-Za-z][A-Za-z0-9-]*)\.([A-Za-z0-9_.-]+)\}')


@dataclass(frozen=True)
class Reference:
    """
    A single ``{resource.path}`` reference found in an expression.
    """
    resource: str
    path: str

    @property
    def parts(self) -> List[str]:
        return self.path.split('.')

    def __str__(self) -> str:
        return "{%s.%s}" % (self.resource, self.path)


class ExpressionInterpolator:
    """
    Utility for finding and substituting references in manifest expressions.
    """
    @staticmethod
    def references(template: Optional[str]) -> List[Reference]:
        """
        Returns every reference in the template, in order of appearance.

        :param template: The expression, e.g. ``{db.connectionString};Timeout=5``.
        :return: A list of references.
        """
        if not template:
            return []
        return [Reference(m.group(1), m.group(2)) for m in EXPRESSION_PATTERN.finditer(template)]

    @staticmethod
    def interpolate(template: str, resolve: Callable[[Reference], str]) -> str:
        """
        Replaces every reference in the template with the value returned by resolve.

        :param template: The expression containing references.
        :param resolve: Called once per reference; its result is substituted.
        :return: The interpolated string.
        """
        def replace(match):
            return resolve(Reference(match.group(1), match.group(2)))

        return EXPRESSION_PATTERN.sub(replace, template)


def binding_expression(resource_name: str, binding: str, prop: str) -> str:
    return "{%s.bindings.%s.%s}" % (resource_name, binding, prop)


def connection_string_expression(resource_name: str) -> str:
    return "{%s.connectionString}" % resource_name


def value_expression(resource_name: str) -> str:
    return "{%s.value}" % resource_name
