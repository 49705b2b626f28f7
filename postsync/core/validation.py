"""Input validation for local record edits."""

from typing import Any, Dict, Mapping, Optional

from postsync.protocols import ValidationError

EDITABLE_FIELDS = ("title", "summary", "body")

MAX_TITLE_LENGTH = 100
MAX_SUMMARY_LENGTH = 250

_MAX_LENGTHS: Dict[str, Optional[int]] = {
    "title": MAX_TITLE_LENGTH,
    "summary": MAX_SUMMARY_LENGTH,
    "body": None,
}


class ValidationMixin:
    """Field validation shared by the create and update paths."""

    def _validate_string_input(
        self, value: Any, field_name: str, max_length: Optional[int] = 1000
    ) -> str:
        """Validate and sanitize string inputs.

        Args:
            value: String to validate
            field_name: Name of the field (for error messages)
            max_length: Maximum length, or None to skip length check

        Returns:
            Sanitized string
        """
        if not isinstance(value, str):
            raise ValidationError(f"{field_name} must be a string")

        if max_length is not None and len(value) > max_length:
            raise ValidationError(f"{field_name} too long (max {max_length} characters)")

        return value.replace("\x00", "").replace("\r\n", "\n")

    def _validate_fields(self, fields: Mapping[str, Any]) -> Dict[str, str]:
        """Validate a full set of editable fields.

        Title, summary and body are all required and must be non-blank.
        """
        unknown = set(fields) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")

        cleaned = {}
        missing = []
        for name in EDITABLE_FIELDS:
            value = fields.get(name)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(name)
                continue
            cleaned[name] = self._validate_string_input(value, name, _MAX_LENGTHS[name])

        if missing:
            raise ValidationError(f"Please fill in: {', '.join(missing)}")
        return cleaned
