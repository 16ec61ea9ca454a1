"""
Prompt construction shared by every vendor.

The page parser expects ``## Title`` / ``## Content`` pages separated by
``---`` lines. The format rules are appended to any system prompt that does not
already mention both markers, so a stale configured prompt cannot break parsing.
"""

import re

FORMAT_RULES = (
    "FORMAT:\n"
    "## Title\n"
    "Your Title Here\n\n"
    "## Content\n"
    "Your content here...\n\n"
    "---\n\n"
    "RULES:\n"
    "- Each page MUST start with '## Title'\n"
    "- Then MUST have '## Content'\n"
    "- Separate pages with '---'\n"
    "- Start immediately with '## Title'"
)

DEFAULT_SYSTEM_PROMPT = "Generate learning module pages in markdown format.\n\n" + FORMAT_RULES

_TITLE = re.compile(r"##\s*Title", re.IGNORECASE)
_CONTENT = re.compile(r"##\s*Content", re.IGNORECASE)


def build_prompt(user_prompt: str, system_prompt: str | None = None) -> str:
    system_prompt = (system_prompt or "").strip() or DEFAULT_SYSTEM_PROMPT
    if not (_TITLE.search(system_prompt) and _CONTENT.search(system_prompt)):
        system_prompt = f"{system_prompt}\n\n{FORMAT_RULES}"
    return f"{system_prompt}\n\n{user_prompt}"
