"""
Text parsers for scraped problem descriptions.

These helpers work on plain text (or text with stray ``<img>`` tags) and know
nothing about any provider, so a new provider only needs a new adapter.

The description layout they understand::

    Given an array ...

    Example 1:

    Input: nums = [2,7,11,15], target = 9
    Output: [0,1]
    Explanation: Because nums[0] + nums[1] == 9, we return [0, 1].

    Constraints:

    2 <= nums.length <= 10^4
"""

import logging
import re
from typing import Dict, Iterator, List, Optional, Tuple

from models.problem import MAX_CONSTRAINT_LENGTH, ProblemConstraint, ProblemExample

logger = logging.getLogger(__name__)

EXAMPLE_HEADER = re.compile(r"Example\s+(-?\d+)\s*:")
CONSTRAINTS_HEADER = re.compile(r"Constraints\s*:")
FOLLOW_UP_HEADER = re.compile(r"^\s*Follow[\s-]?up\s*:", re.IGNORECASE | re.MULTILINE)
FIELD_LABEL = re.compile(r"\b(Input|Output|Explanation)\s*:")
IMAGE_TAG = re.compile(r"<img[^>]*>", re.IGNORECASE)
IMAGE_SOURCE = re.compile(r"<img[^>]+src=[\"']([^\"']+)[\"'][^>]*>", re.IGNORECASE)

DIFFICULTY_LEVELS = (
    ("easy", "Easy"),
    ("med", "Medium"),
    ("hard", "Hard"),
    ("basic", "Basic"),
    ("school", "School"),
)


def _example_blocks(text: str) -> Iterator[Tuple[re.Match, int, int]]:
    """
    Yield ``(header_match, body_start, body_end)`` for every example block.

    A block runs from its ``Example N:`` header to the next header, the
    ``Constraints:`` section or the end of the text, whichever comes first.
    """
    constraints = CONSTRAINTS_HEADER.search(text)
    limit = constraints.start() if constraints else len(text)

    position = 0
    while position < limit:
        header = EXAMPLE_HEADER.search(text, position, limit)
        if header is None:
            break
        if header.end() <= position:
            logger.warning(f"Example scan stopped: no progress at offset {position}")
            break

        following = EXAMPLE_HEADER.search(text, header.end(), limit)
        body_end = following.start() if following else limit
        yield header, header.end(), body_end
        position = body_end


def split_labelled_fields(text: str) -> Dict[str, str]:
    """
    Split ``Input: ... Output: ... Explanation: ...`` text into its fields.

    Keys are lower-case labels. The first occurrence of each label wins and a
    field runs until the next label.
    """
    fields: Dict[str, str] = {}
    labels = list(FIELD_LABEL.finditer(text))
    for index, label in enumerate(labels):
        end = labels[index + 1].start() if index + 1 < len(labels) else len(text)
        name = label.group(1).lower()
        if name not in fields:
            fields[name] = text[label.end():end].strip()
    return fields


def strip_images(value: str) -> str:
    return IMAGE_TAG.sub("", value).strip()


def first_image_source(*values: Optional[str]) -> Optional[str]:
    """Return the ``src`` of the first ``<img>`` tag found across ``values``."""
    match = IMAGE_SOURCE.search(" ".join(v for v in values if v))
    return match.group(1) if match else None


def build_example(example_number: int, fields: Dict[str, str],
                  image_url: Optional[str] = None) -> Optional[ProblemExample]:
    """
    Build a ProblemExample from split fields, or None when it is not valid.

    Image tags are removed from every field; the first image source found is
    kept as the example image unless ``image_url`` is given.
    """
    raw_input = fields.get("input", "")
    raw_output = fields.get("output", "")
    raw_explanation = fields.get("explanation")

    image_url = image_url or first_image_source(raw_input, raw_output, raw_explanation)
    input_text = strip_images(raw_input)
    output_text = strip_images(raw_output)
    explanation = strip_images(raw_explanation) if raw_explanation else ""

    if example_number < 1 or not input_text or not output_text:
        return None

    return ProblemExample(
        example_number=example_number,
        input=input_text,
        output=output_text,
        explanation=explanation or None,
        image_url=image_url,
    )


def parse_examples(description: str) -> List[ProblemExample]:
    """
    Parse ``Example N:`` blocks into ProblemExample records.

    Blocks with a non-positive number, or with an empty input or output, are
    dropped rather than returned half-filled.

    Args:
        description (str): Full description text

    Returns:
        List[ProblemExample]: Valid examples in document order
    """
    if not description or not isinstance(description, str):
        return []

    examples: List[ProblemExample] = []
    for header, start, end in _example_blocks(description):
        fields = split_labelled_fields(description[start:end])
        example = build_example(int(header.group(1)), fields)
        if example is None:
            logger.debug(f"Discarding incomplete example block: {header.group(0)}")
            continue
        examples.append(example)

    return examples


def parse_constraints(description: str) -> List[ProblemConstraint]:
    """
    Parse the ``Constraints:`` section into one ProblemConstraint per line.

    The section ends at a ``Follow-up:`` line or at the end of the text.
    Blank lines and lines of ``MAX_CONSTRAINT_LENGTH`` characters or more
    are skipped; an overlong line means the section boundary was missed.
    """
    if not description or not isinstance(description, str):
        return []

    header = CONSTRAINTS_HEADER.search(description)
    if header is None:
        return []

    body = description[header.end():]
    follow_up = FOLLOW_UP_HEADER.search(body)
    if follow_up:
        body = body[:follow_up.start()]

    constraints: List[ProblemConstraint] = []
    for line in body.split("\n"):
        line = line.strip()
        if not line:
            continue
        if len(line) >= MAX_CONSTRAINT_LENGTH:
            logger.warning(f"Skipping overlong constraint line ({len(line)} characters)")
            continue
        constraints.append(ProblemConstraint(constraint=line))

    return constraints


def extract_clean_description(description: str) -> str:
    """
    Return the prose part of a description.

    Example blocks and everything from ``Constraints:`` onwards are removed,
    then runs of blank lines and horizontal whitespace are collapsed.
    """
    if not description or not isinstance(description, str):
        return ""

    pieces = []
    position = 0
    for header, _, end in _example_blocks(description):
        pieces.append(description[position:header.start()])
        position = end

    constraints = CONSTRAINTS_HEADER.search(description, position)
    pieces.append(description[position:constraints.start() if constraints else len(description)])

    text = "".join(pieces).strip()
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r" *\n *", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def normalize_difficulty(raw: Optional[str]) -> str:
    """Map a provider difficulty label onto Easy/Medium/Hard/Basic/School."""
    value = (raw or "").strip()
    if not value:
        return "Unknown"

    lowered = value.lower()
    for marker, label in DIFFICULTY_LEVELS:
        if marker in lowered:
            return label
    return value


def strip_problem_number(title: str) -> str:
    """Remove a leading ``123. `` from a problem title."""
    return re.sub(r"^\d+\.\s*", "", (title or "").strip())
