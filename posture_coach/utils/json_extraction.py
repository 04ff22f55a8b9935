"""
Tolerant JSON extraction from LLM output.

Even in JSON-object mode, chat models wrap their answer in markdown fences,
prepend a sentence of prose, or (reasoning models such as DeepSeek R1) emit
a <think>...</think> block first. Each heuristic below is a pure strategy:
it takes the raw text and returns a ParseOutcome. extract_json_object()
runs them in order and keeps the first success.

A JSON array is unwrapped to its first element until an object is reached,
because some models answer `[{"selected_exercises": [...]}]`.
"""

import json
import re
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Sequence

FENCED_BLOCK_PATTERN = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)
BRACE_SPAN_PATTERN = re.compile(r"\{[\s\S]*\}")
REASONING_END_PATTERN = re.compile(r"</think>\s*([\s\S]*)", re.IGNORECASE)


class ParseOutcome(NamedTuple):
    """Result of one extraction strategy: either `value` or `error` is set."""
    value: Optional[Dict[str, Any]]
    error: Optional[str]

    @property
    def ok(self) -> bool:
        return self.value is not None


ExtractionStrategy = Callable[[str], ParseOutcome]


class JSONExtractionError(ValueError):
    """Raised when no strategy could extract a JSON object."""

    def __init__(self, content: str, attempts: List[str]):
        self.content = content
        self.attempts = attempts
        # The direct-parse error is the most informative one for callers
        self.parse_error = attempts[0] if attempts else "empty content"
        super().__init__(f"Failed to parse JSON from LLM response: {self.parse_error}")


def _unwrap(value: Any) -> Optional[Dict[str, Any]]:
    """Descend into first elements of arrays until an object (or nothing) is found."""
    while isinstance(value, list) and value:
        value = value[0]
    return value if isinstance(value, dict) else None


def _loads_object(text: str, strategy: str) -> ParseOutcome:
    try:
        parsed = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        return ParseOutcome(None, f"{strategy}: {e}")

    obj = _unwrap(parsed)
    if obj is None:
        return ParseOutcome(None, f"{strategy}: parsed value is not a JSON object")
    return ParseOutcome(obj, None)


def parse_direct(text: str) -> ParseOutcome:
    """(a) The whole content is JSON."""
    return _loads_object(text, "direct")


def parse_fenced_block(text: str) -> ParseOutcome:
    """(b) Content of the first ``` or ```json fenced block."""
    match = FENCED_BLOCK_PATTERN.search(text)
    if not match:
        return ParseOutcome(None, "fenced_block: no fenced code block found")
    return _loads_object(match.group(1).strip(), "fenced_block")


def parse_brace_span(text: str) -> ParseOutcome:
    """(c) Greedy span from the first '{' to the last '}'."""
    match = BRACE_SPAN_PATTERN.search(text)
    if not match:
        return ParseOutcome(None, "brace_span: no {...} substring found")
    return _loads_object(match.group(0), "brace_span")


def parse_after_reasoning(text: str) -> ParseOutcome:
    """(d) Brace span searched only in the text after a </think> delimiter."""
    match = REASONING_END_PATTERN.search(text)
    if not match:
        return ParseOutcome(None, "after_reasoning: no </think> delimiter found")

    outcome = parse_brace_span(match.group(1).strip())
    if outcome.ok:
        return outcome
    return ParseOutcome(None, f"after_reasoning: {outcome.error}")


EXTRACTION_STRATEGIES: Sequence[ExtractionStrategy] = (
    parse_direct,
    parse_fenced_block,
    parse_brace_span,
    parse_after_reasoning,
)


def extract_json_object(
    text: str,
    strategies: Sequence[ExtractionStrategy] = EXTRACTION_STRATEGIES,
) -> Dict[str, Any]:
    """
    Extract a JSON object from raw model text.

    Args:
        text: Raw `choices[0].message.content`
        strategies: Ordered strategies to try (defaults to EXTRACTION_STRATEGIES)

    Returns:
        The first JSON object any strategy produced.

    Raises:
        JSONExtractionError: If every strategy failed.
    """
    attempts: List[str] = []
    for strategy in strategies:
        outcome = strategy(text)
        if outcome.ok:
            return outcome.value  # type: ignore[return-value]
        attempts.append(outcome.error or strategy.__name__)

    raise JSONExtractionError(text, attempts)
