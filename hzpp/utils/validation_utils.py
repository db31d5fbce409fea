from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from hzpp.utils.exceptions import ParseException

T = TypeVar('T')


class ParseResult(BaseModel, Generic[T]):
    success: bool
    data: Optional[T] = None
    errors: List[str] = []


def format_schema_path(loc) -> str:
    return 'Schema' if not loc else 'Schema.' + '.'.join(str(x) for x in loc)


def format_validation_error(error: ValidationError) -> List[str]:
    """One line per violation, e.g. `Schema.trains.0.index input should be a valid integer (int_parsing).`"""
    errors = []
    for issue in error.errors():
        msg = issue.get('msg', '')
        msg = msg[:1].lower() + msg[1:]
        errors.append(f"{format_schema_path(issue.get('loc'))} {msg} ({issue.get('type')}).")
    return errors


def safe_parse(schema, data: Any) -> ParseResult:
    try:
        value = TypeAdapter(schema).validate_python(data)
    except ValidationError as e:
        return ParseResult(success=False, errors=format_validation_error(e))
    return ParseResult(success=True, data=value)


def parse_or_raise(schema, data: Any, what: str):
    result = safe_parse(schema, data)
    if not result.success:
        raise ParseException(f"Failed to parse {what} data: {', '.join(result.errors)}", result.errors)
    return result.data
