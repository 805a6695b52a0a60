# shellmend/ai/fallbacks.py
"""
Cheap local suggestions used when the assistant cannot be reached.
"""
from typing import List

from shellmend.ai.parser import CommandSuggestion
from shellmend.utils.logging import get_logger

logger = get_logger(__name__)


def fallback_suggestions(command: str, error_line: str) -> List[CommandSuggestion]:
    """
    Build suggestions from simple heuristics on the failed command.

    Args:
        command: The command that failed
        error_line: The evidence line of the failure

    Returns:
        Heuristic suggestions, possibly empty
    """
    suggestions: List[CommandSuggestion] = []

    if "-ver" in command:
        suggestions.append(CommandSuggestion(
            command=command.replace("-ver", "-v"),
            description="Use -v instead of -ver for version flag",
        ))

    elif "node" in command and "bad option" in error_line.lower():
        suggestions.append(CommandSuggestion(command="node -v", description="Show Node.js version"))
        suggestions.append(CommandSuggestion(command="node -h", description="Show Node.js help"))

    if suggestions:
        logger.debug(f"Generated {len(suggestions)} fallback suggestions for: {command}")
    return suggestions
