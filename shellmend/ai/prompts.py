# shellmend/ai/prompts.py
"""
Prompt construction for command correction requests.

The reply format requested here is the one the suggestion parser treats as
primary: a numbered list with an arrow between command and description.
"""
from shellmend.utils.logging import get_logger

logger = get_logger(__name__)

SEPARATOR = "→"

FIX_COMMAND_PROMPT = """You are an AI assistant that helps users correct invalid shell commands.
Given the user's original command and the shell error message, suggest valid alternative shell commands.

User command: {command}
Error message: {error_line}
{related_hint}
Respond with multiple corrected shell command suggestions, each followed by a short description. Use this format exactly:
1. <command> {sep} <description>
2. <command> {sep} <description>

Only use the arrow ({sep}) as the separator between command and description. Do not use any other formats.
If the command is actually valid, respond with: Command is valid. No suggestions needed.
Do not add any explanation or markdown."""

# Typo prefixes of programs whose names are short enough to mistype
_EXACT_ALIASES = {
    "mk": "mkdir",
    "mkd": "mkdir",
    "mkdi": "mkdir",
}


def identify_related_command(command_name: str) -> str:
    """
    Map a program name to a well-known tool it probably refers to.

    Args:
        command_name: First word of the failed command

    Returns:
        The related tool name, or the input unchanged when nothing matches
    """
    if command_name in _EXACT_ALIASES:
        return _EXACT_ALIASES[command_name]
    if "py" in command_name:
        return "python"
    if "node" in command_name or "npm" in command_name:
        return "node"
    if "kube" in command_name or "k8s" in command_name:
        return "kubernetes"
    return command_name


def build_fix_prompt(command: str, error_line: str) -> str:
    """
    Build the instruction sent to the assistant for a failed command.

    Args:
        command: The command that failed
        error_line: The evidence line from the shell output

    Returns:
        The prompt text
    """
    program = command.split()[0] if command.split() else command
    related = identify_related_command(program)
    related_hint = ""
    if related != program:
        related_hint = f"Possible related command: {related}\n"
        logger.debug(f"Identified common pattern: '{program}' might be related to '{related}'")

    return FIX_COMMAND_PROMPT.format(
        command=command,
        error_line=error_line,
        related_hint=related_hint,
        sep=SEPARATOR,
    )
