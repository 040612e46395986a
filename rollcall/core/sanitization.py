"""Input sanitization utilities."""
import re
from typing import Optional


# Maximum length constraints for security
MAX_CLASS_CODE_LENGTH = 50
MAX_NAME_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 2000
MAX_TOKEN_LENGTH = 100        # Tokens should be ~43 chars for URL-safe base64

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


def sanitize_text(text: str, max_length: Optional[int] = None, strip_html: bool = True) -> str:
    """
    Sanitize free text input (class names, session titles, descriptions).

    Strips HTML tags and normalizes whitespace. Output is not HTML-escaped
    because the mobile client renders plain text.

    Args:
        text: The input text to sanitize
        max_length: Optional maximum length to enforce
        strip_html: Whether to strip HTML tags (default True)

    Returns:
        Sanitized text with HTML tags removed and whitespace normalized

    Raises:
        ValueError: If text exceeds max_length or contains dangerous patterns
    """
    if not isinstance(text, str):
        raise ValueError("Input must be a string")

    sanitized = text.strip()

    if max_length and len(sanitized) > max_length:
        raise ValueError(f"Input exceeds maximum length of {max_length} characters")

    if strip_html:
        sanitized = re.sub(r'<[^>]*>', '', sanitized)

    # Reject inputs that still contain HTML-like patterns after stripping
    if '<' in sanitized or '>' in sanitized:
        raise ValueError("Input contains invalid HTML-like patterns")

    sanitized = re.sub(r'\s+', ' ', sanitized)

    return sanitized


def sanitize_name(name: str) -> str:
    """Sanitize a required short name (person, class or session title)."""
    sanitized = sanitize_text(name, max_length=MAX_NAME_LENGTH)

    if not sanitized:
        raise ValueError("Name cannot be empty")

    return sanitized


def sanitize_class_code(class_code: str) -> str:
    """
    Sanitize class join code input.

    Class codes are alphanumeric; they are matched case-insensitively by
    upper-casing before lookup.

    Raises:
        ValueError: If class code is invalid or too long
    """
    if not isinstance(class_code, str):
        raise ValueError("Class code must be a string")

    sanitized = class_code.strip().upper()

    if not sanitized:
        raise ValueError("Class code cannot be empty")

    if len(sanitized) > MAX_CLASS_CODE_LENGTH:
        raise ValueError(f"Class code exceeds maximum length of {MAX_CLASS_CODE_LENGTH} characters")

    if not re.match(r'^[A-Z0-9-]+$', sanitized):
        raise ValueError("Class code can only contain letters, numbers, and hyphens")

    return sanitized


def normalize_email(email: str) -> str:
    """Lower-case and validate an email address."""
    if not isinstance(email, str):
        raise ValueError("Email must be a string")

    normalized = email.strip().lower()
    if not EMAIL_PATTERN.match(normalized):
        raise ValueError("Email address is invalid")
    return normalized


def validate_token_format(token: str) -> str:
    """
    Validate QR token format before processing.

    Tokens should be URL-safe base64 strings.
    This prevents malformed tokens from causing unnecessary database queries.

    Raises:
        ValueError: If token format is invalid
    """
    if not isinstance(token, str):
        raise ValueError("Token must be a string")

    token = token.strip()

    if not token:
        raise ValueError("Token cannot be empty")

    if len(token) > MAX_TOKEN_LENGTH:
        raise ValueError(f"Token exceeds maximum length of {MAX_TOKEN_LENGTH} characters")

    # URL-safe base64 uses: A-Z, a-z, 0-9, -, _
    if not re.match(r'^[A-Za-z0-9_-]+$', token):
        raise ValueError("Token format is invalid (must be URL-safe base64)")

    return token
