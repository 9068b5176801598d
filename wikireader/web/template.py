"""Single-level ``{{name}}`` placeholder substitution for page shells."""

import re
from collections.abc import Mapping

PLACEHOLDER_RE = re.compile(r"\{\{([^}]*)\}\}")


def render_template(template: str, variables: Mapping[str, str]) -> str:
    """Replace recognized ``{{name}}`` placeholders in a page shell.

    Names are trimmed and lower-cased before lookup; unknown placeholders
    are left as they are. Matches are replaced from last to first so that
    earlier replacements never shift the positions of pending ones.

    Args:
        template: Page shell text
        variables: Placeholder name (lower case) to replacement value

    Returns:
        Rendered text
    """
    output = template
    for match in reversed(list(PLACEHOLDER_RE.finditer(template))):
        name = match.group(1).strip().lower()
        value = variables.get(name)
        if value is not None:
            output = output[: match.start()] + value + output[match.end() :]
    return output
