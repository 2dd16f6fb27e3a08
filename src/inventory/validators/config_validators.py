def to_uppercase(value: str | None) -> str | None:
    """
    Converts a string to uppercase if it's not None.
    """
    if value is None:
        return None
    return value.upper()

def to_lowercase(value: str | None) -> str | None:
    """
    Converts a string to lowercase if it's not None.
    """
    if value is None:
        return None
    return value.lower()

def blank_to_none(value):
    """
    Treat empty / whitespace-only strings coming from the environment as unset.
    Non-string values pass through untouched.
    """
    if isinstance(value, str) and not value.strip():
        return None
    return value
