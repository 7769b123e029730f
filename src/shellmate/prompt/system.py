"""Prompt text sent to the model."""

CHAT_GUIDELINES = [
    "Respond with ONLY valid JSON. Do not include markdown or code fences.",
    'Use this exact schema: {"text":"...","commands":["..."]}.',
    'The "text" field is concise, user-facing guidance.',
    'The "commands" field contains zero or more executable shell commands.',
    "Use an empty array when no command should be run.",
    "Use standard tools available on the user's OS.",
    "Prefer common, well-known commands over obscure alternatives.",
    "Be concise. Don't over-explain unless asked.",
    "If a task requires multiple steps, suggest them one at a time.",
]


def chat_system_prompt(environment_block: str) -> str:
    """Build the system prompt around a formatted environment block.

    Args:
        environment_block: Output of shellenv.format_snapshot().
    """
    guidelines = "\n".join(f"- {line}" for line in CHAT_GUIDELINES)
    return (
        "You are shellmate, a shell assistant. You help users interact with "
        "their shell using natural language.\n\n"
        f"{environment_block}\n\n"
        f"Guidelines:\n{guidelines}"
    )


def explain_request(command: str) -> str:
    """User message asking the model to explain a command."""
    return f"Explain what this command does step by step: `{command}`"
