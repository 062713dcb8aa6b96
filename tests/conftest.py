"""
Pytest configuration and shared fixtures for jmend tests.

Provides immutable fragment/expectation pairs and a corpus of complete
documents whose every prefix must repair into parseable JSON.
"""

import json
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import orjson
import pytest
import ujson  # type: ignore[import-untyped]


@dataclass(frozen=True)
class RepairCase:
    """
    Immutable container for a repair test case.

    Holds a truncated fragment and the document it must be closed into.
    """

    description: str
    fragment: str
    expected: str


@dataclass(frozen=True)
class JsonTestCase:
    """
    Immutable container for JSON checker documents.

    A document flagged as a truncation is a prefix of valid JSON and must
    not be reported as invalid.
    """

    description: str
    input_data: str
    is_truncation: bool = False
    skip_reason: str = ""


# Downstream parsers the repaired output is handed to
PARSERS: dict[str, Callable[[str], Any]] = {
    "stdlib_json": json.loads,
    "orjson": orjson.loads,
    "ujson": ujson.loads,
}


PASS1 = """[
    "JSON Test Pattern pass1",
    {"object with 1 member":["array with 1 element"]},
    {},
    [],
    -42,
    true,
    false,
    null,
    {
        "integer": 1234567890,
        "real": -9876.543210,
        "e": 0.123456789e-12,
        "E": 1.234567890E+34,
        "":  23456789012E66,
        "zero": 0,
        "one": 1,
        "space": " ",
        "quote": "\\"",
        "backslash": "\\\\",
        "controls": "\\b\\f\\n\\r\\t",
        "slash": "/ & \\/",
        "alpha": "abcdefghijklmnopqrstuvwyz",
        "ALPHA": "ABCDEFGHIJKLMNOPQRSTUVWYZ",
        "digit": "0123456789",
        "0123456789": "digit",
        "special": "`1~!@#$%^&*()_+-={':[,]}|;.</>?",
        "hex": "\\u0123\\u4567\\u89AB\\uCDEF\\uabcd\\uef4A",
        "true": true,
        "false": false,
        "null": null,
        "array":[  ],
        "object":{  },
        "address": "50 St. James Street",
        "url": "https://www.JSON.org/",
        "comment": "// /* <!-- --",
        "# -- --> */": " ",
        " s p a c e d " :[1,2 , 3

,

4 , 5        ,          6           ,7        ],"compact":[1,2,3,4,5,6,7],
        "jsontext": "{\\"object with 1 member\\":[\\"array with 1 element\\"]}"
    }
]"""


@pytest.fixture
def complete_documents() -> list[str]:
    """
    Provides valid JSON documents covering every token kind.

    Includes json.org's pass1-3 documents, surrogate pairs, nesting and
    scalar roots.
    """
    return [
        PASS1,
        '[[[[[[[[[[[[[[[[[[["Not too deep"]]]]]]]]]]]]]]]]]]]',
        '{"JSON Test Pattern pass3": {"The outermost value": '
        '"must be an object or array.", "In this test": "It is an object."}}',
        '{ "users": [{ "id": 1, "name": "Miguel", "verified_at": null }, '
        '{ "id": 2, "name": "Anne", "verified_at": 1234 }] }',
        '{"emoji": "\\ud83d\\ude00 and \\u00e9", "raw": "café ☃"}',
        '{"escapes": ["\\\\", "\\"", "a\\\\\\"b", "\\/"], "empty": ""}',
        '[-0.5e-10, 0, -1, 1E+2, 3.25, {"deep": [[{"x": [false]}]]}]',
        '  {"padded" : [ true , null ] }  ',
        '"just a string"',
        "-12.5e3",
        "null",
    ]


@pytest.fixture
def truncation_cases() -> list[RepairCase]:
    """
    Provides fragments cut at every kind of position inside a document.

    Mirrors the positions a strict parser reports for truncated input.
    """
    return [
        RepairCase("nothing", "", ""),
        RepairCase("open array", "[", "[]"),
        RepairCase("array element", "[42", "[42]"),
        RepairCase("array comma", "[42,", "[42]"),
        RepairCase("array open string", '["', '[""]'),
        RepairCase("array partial string", '["spam', '["spam"]'),
        RepairCase("array full string", '["spam"', '["spam"]'),
        RepairCase("array string comma", '["spam",', '["spam"]'),
        RepairCase("open object", "{", "{}"),
        RepairCase("open key", '{"', "{}"),
        RepairCase("partial key", '{"spam', "{}"),
        RepairCase("full key", '{"spam"', "{}"),
        RepairCase("key colon", '{"spam":', "{}"),
        RepairCase("member value", '{"spam":42', '{"spam":42}'),
        RepairCase("member comma", '{"spam":42,', '{"spam":42}'),
        RepairCase("root open string", '"', '""'),
        RepairCase("root partial string", '"spam', '"spam"'),
    ]


@pytest.fixture
def json_fail_cases() -> list[JsonTestCase]:
    """
    Provides json.org JSON_checker documents that a strict parser rejects.

    Two of them are merely truncated and stay repairable; the rest diverge
    from JSON in ways no amount of further input could fix.
    """
    fail_docs = [
        # https://json.org/JSON_checker/test/fail1.json
        '"A JSON payload should be an object or array, not a string."',
        # https://json.org/JSON_checker/test/fail2.json
        '["Unclosed array"',
        # https://json.org/JSON_checker/test/fail3.json
        '{unquoted_key: "keys must be quoted"}',
        # https://json.org/JSON_checker/test/fail4.json
        '["extra comma",]',
        # https://json.org/JSON_checker/test/fail5.json
        '["double extra comma",,]',
        # https://json.org/JSON_checker/test/fail6.json
        '[   , "<-- missing value"]',
        # https://json.org/JSON_checker/test/fail7.json
        '["Comma after the close"],',
        # https://json.org/JSON_checker/test/fail8.json
        '["Extra close"]]',
        # https://json.org/JSON_checker/test/fail9.json
        '{"Extra comma": true,}',
        # https://json.org/JSON_checker/test/fail10.json
        '{"Extra value after close": true} "misplaced quoted value"',
        # https://json.org/JSON_checker/test/fail11.json
        '{"Illegal expression": 1 + 2}',
        # https://json.org/JSON_checker/test/fail12.json
        '{"Illegal invocation": alert()}',
        # https://json.org/JSON_checker/test/fail13.json
        '{"Numbers cannot have leading zeroes": 013}',
        # https://json.org/JSON_checker/test/fail14.json
        '{"Numbers cannot be hex": 0x14}',
        # https://json.org/JSON_checker/test/fail15.json
        '["Illegal backslash escape: \\x15"]',
        # https://json.org/JSON_checker/test/fail16.json
        "[\\naked]",
        # https://json.org/JSON_checker/test/fail17.json
        '["Illegal backslash escape: \\017"]',
        # https://json.org/JSON_checker/test/fail18.json
        '[[[[[[[[[[[[[[[[[[["Too deep"]]]]]]]]]]]]]]]]]]',
        # https://json.org/JSON_checker/test/fail19.json
        '{"Missing colon" null}',
        # https://json.org/JSON_checker/test/fail20.json
        '{"Double colon":: null}',
        # https://json.org/JSON_checker/test/fail21.json
        '{"Comma instead of colon", null}',
        # https://json.org/JSON_checker/test/fail22.json
        '["Colon instead of comma": false]',
        # https://json.org/JSON_checker/test/fail23.json
        '["Bad value", truth]',
        # https://json.org/JSON_checker/test/fail24.json
        "['single quote']",
        # https://json.org/JSON_checker/test/fail25.json
        '["\ttab\tcharacter\tin\tstring\t"]',
        # https://json.org/JSON_checker/test/fail26.json
        '["tab\\   character\\   in\\  string\\  "]',
        # https://json.org/JSON_checker/test/fail27.json
        '["line\nbreak"]',
        # https://json.org/JSON_checker/test/fail28.json
        '["line\\\nbreak"]',
        # https://json.org/JSON_checker/test/fail29.json
        "[0e]",
        # https://json.org/JSON_checker/test/fail30.json
        "[0e+]",
        # https://json.org/JSON_checker/test/fail31.json
        "[0e+-1]",
        # https://json.org/JSON_checker/test/fail32.json
        '{"Comma instead if closing brace": true,',
        # https://json.org/JSON_checker/test/fail33.json
        '["mismatch"}',
        # https://code.google.com/archive/p/simplejson/issues/3
        '["A\u001fZ control characters in string"]',
    ]

    truncations = {2, 32}
    skips = {
        1: "a string root is a complete document",
        18: "nesting depth is not limited",
    }

    return [
        JsonTestCase(
            description=f"fail{idx + 1}.json",
            input_data=doc,
            is_truncation=idx + 1 in truncations,
            skip_reason=skips.get(idx + 1, ""),
        )
        for idx, doc in enumerate(fail_docs)
    ]
