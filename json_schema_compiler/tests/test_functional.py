"""
Functional tests for the compiler.

Each case in test_data/functional/*_tests.json lists the schema documents of
one compilation and the snippets the generated module must (or must not)
contain.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from json_schema_compiler import compile_schemas


def load_all_test_cases():
    """Load all test cases from all JSON files in test_data/functional directory."""
    functional_dir = Path(__file__).parent / "test_data" / "functional"
    test_cases = []

    for json_file in sorted(functional_dir.glob("*_tests.json")):
        with open(json_file) as f:
            data = json.load(f)

        for test_case in data:
            test_case["_source_file"] = json_file.name
            test_cases.append(pytest.param(test_case, id=test_case["name"]))

    return test_cases


@pytest.mark.parametrize("test_case", load_all_test_cases())
def test_functional_generation(test_case, load_generated):
    """Unified test for all JSON test cases using a single pattern."""
    name = test_case["name"]
    source_file = test_case["_source_file"]

    print(f"\nTesting: {name} (from {source_file})")
    print(f"Description: {test_case['description']}")

    generated_code = compile_schemas(test_case["schemas"])

    for expected in test_case.get("expected_contains", []):
        assert expected in generated_code, f"Expected pattern '{expected}' not found in output"

    for unexpected in test_case.get("expected_not_contains", []):
        assert unexpected not in generated_code, f"Unexpected pattern '{unexpected}' found in output"

    positions = [generated_code.index(snippet) for snippet in test_case.get("expected_order", [])]
    assert positions == sorted(positions), f"Declarations out of order: {test_case['expected_order']}"

    # Every generated module must import and run
    load_generated(generated_code)
