"""Atlassian Document Format (ADF) to plain text converter.

Jira Cloud returns rich-text fields (descriptions, comments) as ADF JSON trees;
Jira Server/Data Center returns plain strings. This module flattens the tree
form so both deployments yield comparable text.

Reference: https://developer.atlassian.com/cloud/jira/platform/apis/document/structure/
"""

import logging
from typing import Any

logger = logging.getLogger("jira_import.adf")

__all__ = ["BLOCK_NODE_TYPES", "adf_to_text"]

# Node types that start on a fresh line
BLOCK_NODE_TYPES = frozenset(
    {
        "paragraph",
        "heading",
        "bulletList",
        "orderedList",
        "listItem",
        "codeBlock",
    }
)


def adf_to_text(adf_content: dict[str, Any] | None) -> str:
    """Convert an ADF document to plain text.

    Walks the tree depth-first, pre-order. Text nodes contribute their text
    verbatim; block nodes are separated by a single newline (empty blocks never
    produce blank lines); any other node type is a transparent container.

    Args:
        adf_content: ADF JSON dict (can be None or empty)

    Returns:
        Plain text with surrounding whitespace stripped. Empty string for
        None/empty input.

    Example:
        >>> adf_to_text({
        ...     "type": "doc",
        ...     "content": [
        ...         {"type": "paragraph", "content": [
        ...             {"type": "text", "text": "Hello "},
        ...             {"type": "text", "text": "World"},
        ...         ]},
        ...     ],
        ... })
        'Hello World'
    """
    if not adf_content:
        return ""

    output: list[str] = []
    _walk_node(adf_content, output)
    return "".join(output).strip()


def _walk_node(node: dict[str, Any], output: list[str]) -> None:
    """Append the text of ``node`` and its descendants to ``output``.

    ``output`` only ever holds non-empty strings, so its last element carries
    the last character written so far.
    """
    node_type = node.get("type")

    if node_type == "text":
        text = node.get("text")
        if isinstance(text, str) and text:
            output.append(text)
        return

    if node_type in BLOCK_NODE_TYPES:
        if output and not output[-1].endswith("\n"):
            output.append("\n")
    elif node_type not in (None, "doc"):
        logger.debug("adf_transparent_node", extra={"node_type": node_type})

    content = node.get("content")
    if not isinstance(content, list):
        return

    for child in content:
        # Malformed ADF: skip anything that is not a node object
        if isinstance(child, dict):
            _walk_node(child, output)
