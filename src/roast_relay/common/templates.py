"""Prompt templating helpers.

Templates hold a system section and a user section:

    <|system|>
    You are ...
    <|user|>
    Critique ... {{input}}
"""
from __future__ import annotations
from pathlib import Path

SYSTEM_TAG = "<|system|>"
USER_TAG = "<|user|>"

DEFAULT_SYSTEM_PROMPT = (
    "You are 'Sound Roast Bot,' a sarcastic, hyper-cynical, and brutally judgmental AI. "
    "Your humor is dark, slightly absurd, and targets the user's predictable, beige, and "
    "often embarrassing music choices. Focus specifically on the artists, genres, and track "
    "titles provided. Your response must be a single, short, contemptuous paragraph "
    "(4-6 sentences max). Do not use markdown formatting like bullet points or bold text "
    "in the final output."
)
DEFAULT_USER_TEMPLATE = "Critique this user's music taste based on the following data: {{input}}"


def load_template(path: str = "configs/roast_prompt.txt") -> str:
    """
    Load a prompt template file.

    Args:
        path: Path to template.
    """
    return Path(path).read_text(encoding="utf-8")


def render_prompt(template: str, user_input: str) -> str:
    """
    Render user input into the template.

    Args:
        template: Template content containing {{input}}.
        user_input: Input string.

    Returns:
        Rendered prompt.
    """
    return template.replace("{{input}}", user_input)


def extract_system(template: str) -> str:
    """Extract the system prompt between <|system|> and <|user|>; fallback to default."""
    if SYSTEM_TAG in template and USER_TAG in template:
        start = template.index(SYSTEM_TAG) + len(SYSTEM_TAG)
        end = template.find(USER_TAG, start)
        if end != -1:
            section = template[start:end].strip()
            if section:
                return section
    return DEFAULT_SYSTEM_PROMPT


def extract_user(template: str) -> str:
    """Extract the user section after <|user|>; fallback to default."""
    if USER_TAG in template:
        section = template[template.index(USER_TAG) + len(USER_TAG):].strip()
        if "{{input}}" in section:
            return section
    return DEFAULT_USER_TEMPLATE
