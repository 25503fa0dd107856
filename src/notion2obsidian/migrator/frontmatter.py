"""YAML frontmatter from Notion database properties.

Selected properties of a database row are written as ``key: value`` lines
between two ``---`` markers, keys in sorted order. Relations become a list
of quoted links, which resolves (and migrates) the related pages.
"""

import logging
from typing import TYPE_CHECKING, Any, Collection, Dict, List, Optional

import yaml

from .errors import UnsupportedPropertyError
from .models import PageNode
from .rich_text import plain_text
from .titles import parse_notion_date

if TYPE_CHECKING:
    from .resolver import PageResolver

logger = logging.getLogger(__name__)

FRONTMATTER_MARKER = "---\n"
SELECT_ALL = "all"

# Known property types with no frontmatter representation
SKIPPED_PROPERTY_TYPES = {
    "people",
    "files",
    "formula",
    "unique_id",
    "verification",
    "button",
}


def format_number(value: Optional[float]) -> str:
    """Six-decimal rendering of a number ("" for null)."""
    return "" if value is None else f"{value:f}"


def format_date(value: str) -> str:
    """ISO-8601 date, with the time of day only when the value carries one."""
    parsed = parse_notion_date(value)
    if "T" in value:
        return parsed.strftime("%Y-%m-%dT%H:%M:%S")
    return parsed.strftime("%Y-%m-%d")


def yaml_scalar(text: str, in_flow: bool = False) -> str:
    """Text as a YAML scalar, double-quoted only when it would not load back as itself.

    Args:
        text: String value
        in_flow: The scalar is an item of a ``[a,b]`` flow sequence

    Examples:
        >>> yaml_scalar("Done")
        'Done'
        >>> yaml_scalar("Meeting: Q3")
        '"Meeting: Q3"'
    """
    if not text:
        return text
    document = f"[{text}]" if in_flow else text
    try:
        loaded = yaml.safe_load(document)
    except yaml.YAMLError:
        loaded = None
    if loaded == ([text] if in_flow else text):
        return text
    dumped = yaml.safe_dump(text, default_style='"', allow_unicode=True, width=float("inf"))
    return dumped.rstrip("\n")


def is_selected(name: str, selected: Collection[str]) -> bool:
    return SELECT_ALL in selected or name.lower() in selected


class FrontmatterBuilder:
    """Writes the frontmatter section of a database row."""

    def __init__(self, resolver: "PageResolver"):
        self._resolver = resolver

    def render(
        self,
        node: PageNode,
        properties: Dict[str, Any],
        selected: Collection[str]
    ) -> None:
        """Append the frontmatter section for the selected properties.

        Args:
            node: Page being rendered
            properties: The page's property values
            selected: Lowercased property names, or {"all"}

        Raises:
            UnsupportedPropertyError: For a selected property of unknown type
        """
        node.write(FRONTMATTER_MARKER)
        for key in sorted(properties):
            if is_selected(key, selected):
                line = self._format_property(node, key, properties[key])
                if line is not None:
                    node.write(line)
        node.write(FRONTMATTER_MARKER)

    def _format_property(self, node: PageNode, key: str, value: Dict[str, Any]) -> Optional[str]:
        prop_type = value.get("type")
        name = yaml_scalar(key)
        raw = value.get(prop_type)

        if prop_type in ("title", "rich_text"):
            return f"{name}: {yaml_scalar(plain_text(raw))}\n"
        if prop_type == "number":
            return f"{name}: {format_number(raw)}\n"
        if prop_type in ("select", "status"):
            return f"{name}: {yaml_scalar(raw['name'])}\n" if raw else None
        if prop_type == "multi_select":
            names = ",".join(
                yaml_scalar(option.get("name", ""), in_flow=True) for option in raw or []
            )
            return f"{name}: [{names}]\n"
        if prop_type in ("date", "created_time", "last_edited_time"):
            start = raw.get("start") if isinstance(raw, dict) else raw
            return f"{name}: {format_date(start)}\n" if start else None
        if prop_type == "checkbox":
            return f"{name}: {'true' if raw else 'false'}\n"
        if prop_type in ("url", "email", "phone_number"):
            return f"{name}: {yaml_scalar(raw or '')}\n"
        if prop_type in ("created_by", "last_edited_by"):
            return f"{name}: {yaml_scalar((raw or {}).get('name', ''))}\n"
        if prop_type == "relation":
            return self._format_relation(node, name, raw or [])
        if prop_type == "rollup":
            return self._format_rollup(name, raw or {})
        if prop_type in SKIPPED_PROPERTY_TYPES:
            return None
        raise UnsupportedPropertyError(str(prop_type), key)

    def _format_relation(self, node: PageNode, name: str, relations: List[Dict[str, Any]]) -> str:
        links = []
        for relation in relations:
            link = self._resolver.resolve(node, relation["id"], quotes=True)
            if link:
                links.append(f"  - {link}\n")
        if not links:
            return f"{name}: \n"
        return f"{name}:\n" + "".join(links)

    def _format_rollup(self, name: str, rollup: Dict[str, Any]) -> Optional[str]:
        rollup_type = rollup.get("type")
        if rollup_type == "number":
            return f"{name}: {format_number(rollup.get('number'))}\n"
        if rollup_type == "date":
            start = (rollup.get("date") or {}).get("start")
            return f"{name}: {format_date(start)}\n" if start else None
        if rollup_type == "array":
            numbers = [
                format_number(item.get("number"))
                for item in rollup.get("array") or []
                if item.get("type") == "number" and item.get("number") is not None
            ]
            return f"{name}: [{','.join(numbers)}]\n"
        logger.debug(f"Skipping rollup '{name}' of type {rollup_type}")
        return None
