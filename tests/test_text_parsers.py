import os, sys
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest

from models.problem import ProblemExample
from utils.text_parsers import (
    build_example, extract_clean_description, first_image_source, normalize_difficulty,
    parse_constraints, parse_examples, split_labelled_fields, strip_problem_number
)

SAMPLE = ("Example 1:\n\nInput: a=1\nOutput: b=2\n\n"
          "Example 2:\n\nInput: a=3\nOutput: b=4\nConstraints:\n1<=a<=9")

TWO_SUM = """Given an array of integers nums and an integer target, return indices of the two numbers such that they add up to target.

You may assume that each input would have exactly one solution.



Example 1:

Input: nums = [2,7,11,15], target = 9
Output: [0,1]
Explanation: Because nums[0] + nums[1] == 9, we return [0, 1].

Example 2:

Input: nums = [3,2,4], target = 6
Output: [1,2]

Constraints:

2 <= nums.length <= 10^4
-10^9 <= nums[i] <= 10^9

Follow-up: Can you come up with an algorithm that is less than O(n^2) time complexity?
"""


def test_sample_yields_two_examples_and_one_constraint():
    examples = parse_examples(SAMPLE)
    assert [e.example_number for e in examples] == [1, 2]
    assert examples[0].input == "a=1"
    assert examples[0].output == "b=2"
    assert examples[1].input == "a=3"
    assert examples[1].output == "b=4"

    constraints = parse_constraints(SAMPLE)
    assert [c.constraint for c in constraints] == ["1<=a<=9"]


def test_example_with_empty_output_is_discarded():
    text = ("Example 1:\nInput: x = 1\nOutput:\n\n"
            "Example 2:\nInput: x = 2\nOutput: 4\n")
    examples = parse_examples(text)
    assert len(examples) == 1
    assert examples[0].example_number == 2
    assert examples[0].output == "4"


def test_non_positive_example_number_is_discarded():
    text = "Example 0:\nInput: a\nOutput: b\nExample -1:\nInput: c\nOutput: d\n"
    assert parse_examples(text) == []


def test_explanation_is_optional():
    examples = parse_examples(TWO_SUM)
    assert len(examples) == 2
    assert examples[0].explanation.startswith("Because nums[0]")
    assert examples[1].explanation is None


def test_examples_stop_at_constraints():
    examples = parse_examples(TWO_SUM)
    assert "Constraints" not in examples[-1].output
    assert examples[-1].output == "[1,2]"


def test_images_are_stripped_and_hoisted():
    text = ('Example 1:\nInput: <img alt="tree" src="https://assets.example.com/tree.png" /> '
            'root = [1,2]\nOutput: 2\n')
    example = parse_examples(text)[0]
    assert example.image_url == "https://assets.example.com/tree.png"
    assert "<img" not in example.input
    assert example.input == "root = [1,2]"


def test_constraints_stop_at_follow_up():
    constraints = [c.constraint for c in parse_constraints(TWO_SUM)]
    assert constraints == ["2 <= nums.length <= 10^4", "-10^9 <= nums[i] <= 10^9"]


def test_overlong_constraint_lines_are_skipped():
    text = "Constraints:\n" + "x" * 600 + "\n1 <= n <= 5\n"
    assert [c.constraint for c in parse_constraints(text)] == ["1 <= n <= 5"]


def test_no_constraints_section():
    assert parse_constraints("Just prose") == []
    assert parse_constraints("") == []


def test_clean_description_removes_examples_and_constraints():
    description = extract_clean_description(TWO_SUM)
    assert description.startswith("Given an array of integers")
    assert "Example 1" not in description
    assert "Constraints" not in description
    assert "\n\n\n" not in description


def test_clean_description_is_idempotent_for_examples():
    cleaned = extract_clean_description(TWO_SUM)
    assert parse_examples(cleaned) == []
    assert extract_clean_description(cleaned) == cleaned


def test_clean_description_collapses_whitespace():
    assert extract_clean_description("a    b\t\tc\n\n\n\nd") == "a b c\n\nd"


def test_split_labelled_fields_first_label_wins():
    fields = split_labelled_fields("Input: 1 2\nOutput: 3\nExplanation: sum\nOutput: ignored")
    assert fields == {"input": "1 2", "output": "3", "explanation": "sum"}


def test_build_example_prefers_given_image():
    example = build_example(3, {"input": "a", "output": "b"}, "https://img/x.png")
    assert example == ProblemExample(3, "a", "b", None, "https://img/x.png")
    assert build_example(1, {"input": "a"}) is None


def test_first_image_source():
    assert first_image_source(None, "<img src='a.png'>", '<img src="b.png">') == "a.png"
    assert first_image_source("no images") is None


@pytest.mark.parametrize("raw,expected", [
    ("Easy", "Easy"),
    (" medium ", "Medium"),
    ("HARD", "Hard"),
    ("Basic", "Basic"),
    ("School", "School"),
    ("Expert", "Expert"),
    ("", "Unknown"),
    (None, "Unknown"),
])
def test_normalize_difficulty(raw, expected):
    assert normalize_difficulty(raw) == expected


def test_strip_problem_number():
    assert strip_problem_number("1. Two Sum") == "Two Sum"
    assert strip_problem_number("  3312. Sorted GCD Pair Queries ") == "Sorted GCD Pair Queries"
    assert strip_problem_number("Two Sum") == "Two Sum"
