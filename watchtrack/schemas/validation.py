"""Input validation helpers with XSS protection"""

import re
import bleach

# Allowed HTML tags for user notes
ALLOWED_TAGS = ['b', 'i', 'u', 'em', 'strong', 'p', 'br']

DANGEROUS_PATTERNS = [
    r'<script[^>]*>',
    r'javascript:',
    r'<[^>]*\bon\w+\s*=',
    r'<iframe',
]

# Something that opens a tag, closes one, or starts a comment
TAG_PATTERN = re.compile(r'<[a-zA-Z/!]')


class SafeStringMixin:
    """Mixin for XSS-safe string validation"""

    @staticmethod
    def sanitize_html(value: str) -> str:
        """
        Remove dangerous HTML/JavaScript.
        Text without markup is returned untouched so '&' and '<' survive as typed.
        """
        if not value or not TAG_PATTERN.search(value):
            return value
        return bleach.clean(value, tags=ALLOWED_TAGS, strip=True)

    @staticmethod
    def validate_no_script(value: str) -> str:
        """Block common XSS patterns"""
        if not value:
            return value

        for pattern in DANGEROUS_PATTERNS:
            if re.search(pattern, value, re.IGNORECASE):
                raise ValueError("Invalid characters detected")

        return value


def parse_id(raw: str, field: str = "id") -> int:
    """Parse a positive integer id coming from a query string"""
    if raw is None or not str(raw).strip().isdigit():
        raise ValueError(f"Invalid {field}")
    value = int(str(raw).strip())
    if value < 1:
        raise ValueError(f"Invalid {field}")
    return value
