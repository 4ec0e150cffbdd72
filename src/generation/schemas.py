"""
JSON Schema for controlled puzzle generation.

Passed to Gemini as response_schema together with
response_mime_type=application/json so the reply is machine-parsable.
"""

from __future__ import annotations

PUZZLE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "question": {
            "type": "STRING",
            "description": "The visual representation or instruction for the user.",
        },
        "answer": {
            "type": "STRING",
            "description": "The correct sequence or result.",
        },
        "sequence": {
            "type": "ARRAY",
            "items": {"type": "NUMBER"},
            "description": "The numbers to display in the UI.",
        },
        "explanation": {
            "type": "STRING",
            "description": "The logic behind the pattern.",
        },
        "hints": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "max_items": 2,
            "description": "Up to 2 hints.",
        },
    },
    "required": ["question", "answer", "sequence", "explanation", "hints"],
}


def get_generation_config(temperature: float = 1.0) -> dict:
    """
    Gemini generation config (SDK naming) with the puzzle response schema.

    Args:
        temperature: Generation temperature

    Returns:
        Config dict for GenerativeModel.generate_content
    """
    return {
        "temperature": temperature,
        "response_mime_type": "application/json",
        "response_schema": PUZZLE_SCHEMA,
    }


def to_rest_generation_config(config: dict) -> dict:
    """Same config with the camelCase keys the REST endpoint expects."""
    renamed = {
        "response_mime_type": "responseMimeType",
        "response_schema": "responseSchema",
        "max_output_tokens": "maxOutputTokens",
        "top_p": "topP",
    }
    return {renamed.get(key, key): value for key, value in config.items()}
