"""Notion rich text to Obsidian markdown.

Notion stores formatted text as a list of runs, each with its own
annotations. Markdown delimiters of adjacent runs have to be merged so that
"**hello **" followed by "**world**" becomes "**hello world**".
"""

from typing import Any, Dict, List, Sequence

from .models import StyledRun


def annotations_to_style(annotations: Dict[str, Any]) -> str:
    """Opening delimiters for a run's annotations.

    Underline has no markdown equivalent and is dropped.

    Examples:
        >>> annotations_to_style({"bold": True, "italic": True, "code": True})
        '***`'
    """
    if not annotations:
        return ""

    style = ""
    if annotations.get("bold"):
        style += "***" if annotations.get("italic") else "**"
    elif annotations.get("italic"):
        style += "_"

    if annotations.get("strikethrough"):
        style += "~~"
    if annotations.get("color", "default") != "default":
        style += "=="
    if annotations.get("code"):
        style += "`"
    return style


def closing_style(style: str) -> str:
    """Closing delimiters matching an opening style."""
    return style[::-1]


def make_run(body: str, annotations: Dict[str, Any]) -> StyledRun:
    """Wrap a rendered body in the delimiters of its annotations."""
    style = annotations_to_style(annotations)
    annotations = annotations or {}
    return StyledRun(
        text=f"{style}{body}{closing_style(style)}",
        style=style,
        bold=bool(annotations.get("bold")),
        italic=bool(annotations.get("italic")),
    )


def merge_runs(runs: Sequence[StyledRun]) -> str:
    """Concatenate styled runs into one markdown string.

    When two styled runs touch, the closing delimiters of the first and the
    opening delimiters of the second are trimmed once, which joins runs that
    share a style. Bold followed by bold+italic is the one nesting Obsidian
    accepts ("**hello _world_**") and is rewritten explicitly. Other nested
    annotations are not handled.

    Examples:
        >>> merge_runs([make_run("hello ", {"bold": True}),
        ...             make_run("world", {"bold": True, "italic": True})])
        '**hello _world_**'
    """
    result = ""
    for i, run in enumerate(runs):
        previous = runs[i - 1] if i > 0 else None
        if previous is None or not (run.is_styled and previous.is_styled):
            result += run.text
            continue

        if previous.bold and not previous.italic and run.bold and run.italic:
            result = result.rstrip("*")
            result += "_" + run.text.strip("*") + "_**"
        else:
            # Character-set trimming, not suffix/prefix removal
            result = result.rstrip(closing_style(run.style))
            result += run.text.lstrip(previous.style)
    return result


def plain_text(rich_text: List[Dict[str, Any]]) -> str:
    """Concatenated plain text of a rich text array, ignoring formatting."""
    return "".join(item.get("plain_text", "") for item in rich_text or [])
