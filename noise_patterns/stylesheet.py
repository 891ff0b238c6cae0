"""CSS rendering for noise utility declarations."""
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from jinja2 import Template

TEMPLATE = """/* Generated by noise-patterns. Do not edit. */
{% for rule in rules %}
{{ rule.selector }} {
{% for prop, value in rule.declarations %}
  {{ prop }}: {{ value }};
{% endfor %}
}
{% endfor %}
"""

_template = Template(TEMPLATE, trim_blocks=True, lstrip_blocks=True)


def _nested_selector(parent: str, key: str) -> str:
    if "&" in key:
        return key.replace("&", parent)
    return f"{parent} {key}"


def flatten_rules(selector: str, declarations: Mapping[str, Any]) -> List[Dict[str, Any]]:
    """Expand nested declaration mappings into flat ``{selector, declarations}`` rules.

    ``&::before`` style keys substitute the parent selector; any other nested
    key is treated as a descendant/child selector (``> *``). The parent rule
    comes first, nested rules follow in declaration order.
    """
    own: List[Tuple[str, str]] = []
    nested: List[Dict[str, Any]] = []
    for key, value in declarations.items():
        if isinstance(value, Mapping):
            nested.extend(flatten_rules(_nested_selector(selector, key), value))
        else:
            own.append((key, str(value)))
    rules = [{"selector": selector, "declarations": own}] if own else []
    return rules + nested


def render_stylesheet(rules: Iterable[Tuple[str, Mapping[str, Any]]]) -> str:
    """Render ``(selector, declarations)`` pairs as CSS text."""
    flat: List[Dict[str, Any]] = []
    for selector, declarations in rules:
        flat.extend(flatten_rules(selector, declarations))
    return _template.render(rules=flat)
