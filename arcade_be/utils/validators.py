from arcade_be.exceptions import InvalidArgumentException


def validate_positive_int(value, name):
    """Returns value unchanged if it is a strictly positive int, raises InvalidArgumentException otherwise."""
    if value is None:
        raise InvalidArgumentException(f"{name} is required.", details={'field': name})
    # bool is an int subclass; True must not pass as 1
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentException(
            f"{name} must be an integer, got {type(value).__name__}.",
            details={'field': name, 'value': repr(value)}
        )
    if value <= 0:
        raise InvalidArgumentException(
            f"{name} must be a positive integer, got {value}.",
            details={'field': name, 'value': value}
        )
    return value
