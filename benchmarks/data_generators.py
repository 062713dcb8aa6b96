"""
Test data generators for repair benchmarks.

Creates JSON documents shaped like the payloads that arrive in pieces:
- Model responses carrying tool calls with string-heavy arguments
- Paginated API listings (wide, shallow arrays of records)
- Deep configuration trees
and cuts them short the way a stream would.
"""

import json
import random
import string
from typing import Any

# Fixed seed keeps timings comparable between runs
_RANDOM = random.Random(1234)
_ESCAPES = ['\\"', "\\\\", "\\n", "\\t", "\\u00e9", "\\ud83d\\ude00"]
_ESCAPE_PROBABILITY = 0.2


def generate_test_data(data_type: str) -> str:
    """Generates a complete JSON document of the given shape."""
    generators = {
        "tool_call": _generate_tool_call,
        "listing": _generate_listing,
        "config_tree": _generate_config_tree,
    }

    if data_type not in generators:
        raise ValueError(f"Unknown data type: {data_type}")

    return generators[data_type]()


def truncate(document: str, fraction: float) -> str:
    """Cuts a document after the given fraction of its characters."""
    if not 0.0 <= fraction <= 1.0:
        raise ValueError(f"fraction must be within [0, 1], got {fraction}")
    return document[: int(len(document) * fraction)]


def stream_prefixes(document: str, chunk_size: int) -> list[str]:
    """Returns the cumulative buffers a reader sees chunk by chunk."""
    return [
        document[:end]
        for end in range(chunk_size, len(document) + chunk_size, chunk_size)
    ]


def _generate_tool_call() -> str:
    """A model response whose tool-call arguments are long escaped text."""
    data = {
        "id": f"resp_{_random_word(16)}",
        "model": "text-model",
        "choices": [
            {
                "index": i,
                "finish_reason": None,
                "message": {
                    "role": "assistant",
                    "content": _escaped_text(400),
                    "tool_calls": [
                        {
                            "name": _random_word(12),
                            "arguments": {
                                "query": _escaped_text(120),
                                "limit": _RANDOM.randint(1, 100),
                                "strict": _RANDOM.choice([True, False]),
                                "cursor": None,
                            },
                        }
                        for _ in range(3)
                    ],
                },
            }
            for i in range(4)
        ],
        "usage": {"prompt_tokens": 812, "completion_tokens": 2048},
    }
    return json.dumps(data)


def _generate_listing() -> str:
    """A wide page of flat records with mixed scalar types."""
    data = {
        "page": 1,
        "has_more": True,
        "items": [
            {
                "id": i,
                "sku": _random_word(10).upper(),
                "price": round(_RANDOM.uniform(0.5, 999.0), 2),
                "ratio": _RANDOM.uniform(-1.0, 1.0) * 1e-5,
                "in_stock": _RANDOM.choice([True, False]),
                "discontinued_at": None,
                "tags": [_random_word(6) for _ in range(3)],
            }
            for i in range(250)
        ],
    }
    return json.dumps(data)


def _generate_config_tree() -> str:
    """A deeply nested tree of objects and arrays."""

    def build(depth: int) -> dict[str, Any]:
        if depth <= 0:
            return {"value": _random_word(10), "enabled": True}

        return {
            "level": depth,
            "children": [build(depth - 1) for _ in range(2)],
            "overrides": {"weight": depth / 10, "next": build(depth - 1)},
        }

    return json.dumps(build(7))


def _escaped_text(length: int) -> str:
    """Builds text whose JSON encoding is dense with escape sequences."""
    pieces = []
    for _ in range(length):
        if _RANDOM.random() < _ESCAPE_PROBABILITY:
            pieces.append(json.loads(f'"{_RANDOM.choice(_ESCAPES)}"'))
        else:
            pieces.append(
                _RANDOM.choice(string.ascii_letters + string.digits + " ")
            )
    return "".join(pieces)


def _random_word(length: int) -> str:
    return "".join(_RANDOM.choices(string.ascii_letters, k=length))
