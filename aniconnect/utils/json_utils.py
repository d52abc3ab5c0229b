"""
JSON utilities for LLM-backed backend responses.
"""

import json
from typing import Any, List


def clean_json_response(response: str) -> str:
    """Clean an LLM response by removing code block markers.

    Args:
        response: Raw LLM response

    Returns:
        Cleaned JSON string
    """
    response = response.strip()

    if response.startswith('```json'):
        response = response[7:]
    elif response.startswith('```'):
        response = response[3:]

    if response.endswith('```'):
        response = response[:-3]

    return response.strip()


def parse_title_list(payload: Any) -> List[str]:
    """Normalize a recommendation payload into a list of movie titles.

    The recommend endpoint returns a JSON array of strings, but the model behind it
    occasionally answers with the array serialized as text inside a code fence.

    Args:
        payload: Decoded JSON body (a list, or a string holding a JSON list)

    Returns:
        Non-empty, stripped titles in the order they were returned

    Raises:
        ValueError: If the payload is not a list of strings
    """
    if isinstance(payload, str):
        payload = json.loads(clean_json_response(payload))

    if not isinstance(payload, list):
        raise ValueError(f'Expected a list of titles, got {type(payload).__name__}')

    titles = []
    for item in payload:
        if not isinstance(item, str):
            raise ValueError(f'Expected a title string, got {type(item).__name__}')
        if item.strip():
            titles.append(item.strip())
    return titles
