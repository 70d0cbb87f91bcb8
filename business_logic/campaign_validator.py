"""
Campaign brief validation.

Checks the brief the user submits with a profile handle before any external
service is called, and checks the extra requirements for ad generation.
"""

import logging
from typing import List, Optional
from dataclasses import dataclass, field
from enum import Enum

from models.data_models import AdGoal, CampaignBrief

logger = logging.getLogger(__name__)


class ValidationSeverity(Enum):
    """Severity levels for validation issues."""
    ERROR = "error"
    WARNING = "warning"


@dataclass
class ValidationIssue:
    """A problem found in one field of the brief."""
    severity: ValidationSeverity
    message: str
    field: Optional[str] = None


@dataclass
class ValidationResult:
    """Outcome of validating a brief."""
    is_valid: bool
    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def errors(self) -> List[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == ValidationSeverity.ERROR]

    def messages_by_field(self) -> dict:
        """First error message per field, for inline form display."""
        messages = {}
        for issue in self.errors:
            messages.setdefault(issue.field or 'form', issue.message)
        return messages


class CampaignValidator:
    """Validates campaign briefs."""

    valid_goals = [goal.value for goal in AdGoal]

    def validate_brief(self, brief: CampaignBrief) -> ValidationResult:
        """
        Validate the fields needed to analyze a profile.

        Args:
            brief: Submitted campaign brief

        Returns:
            ValidationResult with per-field issues
        """
        issues = []

        if not brief.username or not brief.username.strip():
            issues.append(ValidationIssue(ValidationSeverity.ERROR,
                                          "Instagram username or URL is required.", "username"))

        if brief.ad_goal not in self.valid_goals:
            issues.append(ValidationIssue(ValidationSeverity.ERROR,
                                          f"Ad goal must be one of: {', '.join(self.valid_goals)}.", "ad_goal"))
        elif brief.ad_goal == AdGoal.OTHER.value and not (brief.custom_ad_goal or "").strip():
            issues.append(ValidationIssue(ValidationSeverity.ERROR,
                                          "Please specify your custom goal.", "custom_ad_goal"))

        if brief.start_date and brief.end_date and brief.end_date < brief.start_date:
            issues.append(ValidationIssue(ValidationSeverity.ERROR,
                                          "End date cannot be before start date.", "end_date"))

        if not (brief.business_snapshot or "").strip():
            issues.append(ValidationIssue(ValidationSeverity.WARNING,
                                          "Without a business snapshot the analysis relies on scraped content only.",
                                          "business_snapshot"))

        result = ValidationResult(
            is_valid=not any(issue.severity == ValidationSeverity.ERROR for issue in issues),
            issues=issues,
        )
        if not result.is_valid:
            logger.info(f"Brief validation failed: {result.messages_by_field()}")
        return result

    def validate_for_generation(self, brief: CampaignBrief) -> ValidationResult:
        """Brief checks plus the campaign dates that ad generation needs."""
        result = self.validate_brief(brief)
        if not brief.start_date or not brief.end_date:
            result.issues.append(ValidationIssue(
                ValidationSeverity.ERROR,
                "Please select a start and end date for your campaign before generating ads.",
                "start_date",
            ))
            result.is_valid = False
        return result
