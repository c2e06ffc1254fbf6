"""Base reviewer implementing the Template Method pattern.

All providers share the same review algorithm:
    review() → _build_system_prompt() + _build_user_prompt()
             → _call_with_retry() → _call_api()   ← only this differs per provider
             → _parse()

Subclasses implement two things only:
  - __init__: validate and store the SDK client
  - _call_api: make one raw API call and return the text response

Prompt construction, JSON parsing and retry logic live here so every
provider produces the same review structure.
"""

from __future__ import annotations

import json
import logging
import re
import time
from abc import ABC, abstractmethod

from sherlockqa_core.exceptions import ProviderError
from sherlockqa_core.render import ReviewData

logger = logging.getLogger(__name__)

# Shared defaults; subclasses may override as class attributes.
_MAX_RETRIES = 3
_MAX_TOKENS = 4096
_MAX_DIFF_CHARS = 50000

_FENCED_JSON_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")


class BaseReviewer(ABC):
    MAX_RETRIES: int = _MAX_RETRIES
    TEMPERATURE: float = 0.3

    def __init__(
        self,
        model: str,
        max_tokens: int = _MAX_TOKENS,
        persona: str = "",
        domain_knowledge: str = "",
        code_quality: bool = False,
        max_diff_chars: int = _MAX_DIFF_CHARS,
    ):
        self.model = model
        self.max_tokens = max_tokens
        self.persona = persona
        self.domain_knowledge = domain_knowledge
        self.code_quality = code_quality
        self.max_diff_chars = max_diff_chars

    # ------------------------------------------------------------------ #
    # Public interface                                                     #
    # ------------------------------------------------------------------ #

    def review(self, diff: str, changed_files: list[str], author: str) -> ReviewData:
        """Review a whole PR diff and return the structured result.

        Raises ProviderError when the API keeps failing; a response that
        arrives but cannot be parsed yields ReviewData.fallback() instead.
        """
        system = self._build_system_prompt()
        user = self._build_user_prompt(diff, changed_files, author)
        raw = self._call_with_retry(system, user)
        return self._parse(raw)

    # ------------------------------------------------------------------ #
    # Abstract: implement in each provider                                #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def _call_api(self, system_prompt: str, user_prompt: str) -> str:
        """Make a single API call and return the raw text response.

        This is the only method subclasses must implement. It should raise
        on failure — _call_with_retry handles retries and logging.
        """

    # ------------------------------------------------------------------ #
    # Shared implementations                                               #
    # ------------------------------------------------------------------ #

    def _call_with_retry(self, system_prompt: str, user_prompt: str) -> str:
        """Retry _call_api up to MAX_RETRIES times with exponential backoff."""
        for attempt in range(self.MAX_RETRIES):
            try:
                return self._call_api(system_prompt, user_prompt)
            except Exception as e:
                if attempt == self.MAX_RETRIES - 1:
                    logger.error(
                        "%s API failed after %d attempts: %s",
                        self.__class__.__name__,
                        self.MAX_RETRIES,
                        e,
                    )
                    raise ProviderError(f"{self.__class__.__name__} API failed: {e}") from e
                delay = 2**attempt
                logger.warning(
                    "%s API error (attempt %d/%d): %s. Retrying in %ds...",
                    self.__class__.__name__,
                    attempt + 1,
                    self.MAX_RETRIES,
                    e,
                    delay,
                )
                time.sleep(delay)
        raise ProviderError(f"{self.__class__.__name__}: MAX_RETRIES must be at least 1")

    def _build_system_prompt(self) -> str:
        prompt = f"{self.persona}\n\n" if self.persona else ""

        prompt += """You are SherlockQA, an AI code reviewer with two roles:

1. **Senior Software Engineer** - Review code quality, bugs, security
2. **QA Tester** - Think like someone trying to break things. What inputs would crash this? What edge cases are missed?"""  # noqa: E501

        if self.domain_knowledge:
            prompt += f"\n\n## Domain Knowledge\n{self.domain_knowledge}"

        prompt += """

## Review Focus:
- **Bugs** - Null checks, edge cases, off-by-one errors, division by zero
- **Breaking Changes** - API/schema changes, backward compatibility
- **Security** - Injection, credentials, input validation
- **Test Scenarios** - How can this fail? What would a user try?
- **Orphaned/Incomplete** - Missing pairs (create without delete, open without close, etc.)"""

        if self.code_quality:
            prompt += """
- **Code Quality** - Analyze for repetitive/duplicated code, code smells, maintainability issues, overly complex functions"""  # noqa: E501

        prompt += """

## Output Format:
You MUST respond with a JSON object in this exact format:
```json
{
  "summary": "One sentence describing what this PR does",
  "analysis": "Optional short paragraph on the riskiest parts of the change",
  "line_comments": [
    {"file": "path/to/file.py", "line": 42, "severity": "error|warning|suggestion", "comment": "Issue description"}
  ],
  "tests_required": true|false,
  "test_suggestion": "If tests_required is true, explain what tests to write",
  "qa_scenarios": ["Scenario 1", "Scenario 2"],
  "questions": ["Question for author"],"""

        if self.code_quality:
            prompt += """
  "code_quality": {
    "summary": "Brief assessment of code quality",
    "issues": ["List of code quality issues like repetitive code, complex functions, etc."]
  },"""

        prompt += """
  "verdict": "approved|needs_changes|do_not_merge"
}
```

## Guidelines:
- ONLY comment on actual issues, not style preferences
- "line" is the line number in the NEW version of the file and must be an added or context line of the diff
- Use severity "error" for bugs/security, "warning" for potential problems, "suggestion" for improvements
- **tests_required**: Set to true ONLY when the change introduces significant new business logic, complex algorithms, or critical functionality that genuinely needs test coverage. Do NOT require tests for: simple refactors, config changes, minor bug fixes, documentation, or straightforward CRUD operations. Be pragmatic - not every change needs tests.
- Keep comments concise and actionable"""  # noqa: E501

        if self.code_quality:
            prompt += """
- For code_quality, identify repetitive patterns, duplicated logic, overly complex functions (high cyclomatic complexity), and maintainability concerns"""  # noqa: E501

        return prompt

    def _build_user_prompt(self, diff: str, changed_files: list[str], author: str) -> str:
        if len(diff) > self.max_diff_chars:
            diff = diff[: self.max_diff_chars] + "\n\n... [diff truncated]"
        files = "\n".join(changed_files)
        return f"""Please review the following pull request changes:

## PR Author: @{author}

## Changed Files:
{files}

## Diff:
```diff
{diff}
```

Respond with ONLY the JSON object as specified. No additional text."""

    def _parse(self, raw: str) -> ReviewData:
        """Parse the model's text into ReviewData, falling back on any malformed payload.

        The first fenced block is used when present; otherwise the whole
        response is treated as JSON.
        """
        content = (raw or "").strip()
        match = _FENCED_JSON_RE.search(content)
        if match:
            content = match.group(1)
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            logger.warning("%s: failed to parse response as JSON: %s", self.__class__.__name__, e)
            logger.warning("Raw response: %s", (raw or "")[:500])
            return ReviewData.fallback()
        if not isinstance(data, dict):
            logger.warning(
                "%s: expected a JSON object, got %s",
                self.__class__.__name__,
                type(data).__name__,
            )
            return ReviewData.fallback()

        review = ReviewData.from_dict(data)
        if review.dropped_comments:
            logger.debug("Ignored %d malformed line comment(s)", review.dropped_comments)
        return review
