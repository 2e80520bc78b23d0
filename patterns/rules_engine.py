"""Pure-function rules engine pattern.

Rules are stateless functions: (entity, context) -> RuleResult.
No database, no side effects. This makes them:
- Trivially testable (pure input/output)
- Composable (chain multiple rules)
- Auditable (deterministic, explainable)

The task vertical builds its authorization guard on these result types.
"""

from dataclasses import dataclass, field
from typing import Any


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class RuleResult:
    """Outcome of a single rule evaluation."""

    passed: bool
    rule_name: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class RuleSetResult:
    """Aggregate outcome of multiple rules."""

    all_passed: bool
    results: list[RuleResult]
    failed: list[RuleResult] = field(default_factory=list)

    def __post_init__(self):
        self.failed = [r for r in self.results if not r.passed]
        self.all_passed = len(self.failed) == 0

    @property
    def first_failure(self) -> RuleResult | None:
        return self.failed[0] if self.failed else None


# ---------------------------------------------------------------------------
# Rule composition
# ---------------------------------------------------------------------------

def evaluate_rules(*rules: RuleResult) -> RuleSetResult:
    """Compose multiple rule results into a single aggregate.

    Example::

        result = evaluate_rules(
            check_title(payload),
            check_checklist(payload),
        )
        if not result.all_passed:
            raise InvalidInput(result.first_failure.message)
    """
    return RuleSetResult(
        all_passed=all(r.passed for r in rules),
        results=list(rules),
    )
