"""shellmate: a natural-language shell assistant.

Turns a plain-language request into shell commands suggested by a language
model, classifies each command for destructive potential and runs it only
after the user confirms.
"""

__version__ = "0.1.0"
