"""Field rules for video game records and parsing of raw form input."""
import datetime
import re
from typing import Dict, Optional

from .exceptions import ValidationError
from .models import GameRecord

TITLE_MAX_LENGTH = 100
PLATFORM_MAX_LENGTH = 50
PUBLISHER_MAX_LENGTH = 50
MAX_PRICE = 10000
MAX_PLAYTIME = 10000

# Up to five integer digits, optionally followed by exactly two decimals.
_PRICE_PATTERN = re.compile(r'^[0-9]{1,5}(\.[0-9]{2})?$')


def validate_record(record: GameRecord) -> None:
    """Check every field of *record* and raise one error listing all problems.

    Raises:
        ValidationError: ``errors`` holds one message per offending field.
    """
    errors: Dict[str, str] = {}

    for field, limit in (('title', TITLE_MAX_LENGTH),
                         ('platform', PLATFORM_MAX_LENGTH),
                         ('publisher', PUBLISHER_MAX_LENGTH)):
        value = getattr(record, field)
        if not isinstance(value, str) or not value.strip():
            errors[field] = 'This field is required'
        elif len(value.strip()) > limit:
            errors[field] = f'Must be at most {limit} characters'

    if not isinstance(record.release_date, datetime.date):
        errors['release_date'] = 'This field is required'
    if record.completion_date is not None:
        if not isinstance(record.completion_date, datetime.date):
            errors['completion_date'] = 'Must be a calendar date'
        elif (isinstance(record.release_date, datetime.date)
              and record.completion_date < record.release_date):
            errors['completion_date'] = 'Completion date cannot precede the release date'

    if record.playtime is not None:
        if isinstance(record.playtime, bool) or not isinstance(record.playtime, int):
            errors['playtime'] = 'Must be a whole number of hours'
        elif record.playtime < 0 or record.playtime > MAX_PLAYTIME:
            errors['playtime'] = f'Must be between 0 and {MAX_PLAYTIME}'

    if isinstance(record.price, bool) or not isinstance(record.price, (int, float)):
        errors['price'] = 'This field is required'
    elif record.price < 0 or record.price > MAX_PRICE:
        errors['price'] = f'Must be between 0 and {MAX_PRICE}'
    elif round(record.price, 2) != record.price:
        errors['price'] = 'Invalid price format (e.g. 59.99)'

    if not record.categories:
        errors['categories'] = 'Select at least one category'

    if record.image_path is not None and not isinstance(record.image_path, str):
        errors['image_path'] = 'Must be a path or URI'

    if errors:
        raise ValidationError(errors)


def parse_price(text: str) -> float:
    """Parse a price typed by the user; ``,`` is accepted as decimal separator."""
    cleaned = (text or '').strip().replace(',', '.')
    if not cleaned:
        raise ValidationError({'price': 'This field is required'})
    if not _PRICE_PATTERN.match(cleaned):
        raise ValidationError({'price': 'Invalid price format (e.g. 59.99)'})
    price = float(cleaned)
    if price > MAX_PRICE:
        raise ValidationError({'price': f'Must be between 0 and {MAX_PRICE}'})
    return price


def parse_playtime(text: Optional[str]) -> Optional[int]:
    """Parse an optional playtime in hours; blank input means "not provided"."""
    cleaned = (text or '').strip()
    if not cleaned:
        return None
    if not re.match(r'^[0-9]+$', cleaned):
        raise ValidationError({'playtime': 'Must be a whole number of hours'})
    return int(cleaned)


def parse_date(text: Optional[str], field: str = 'date') -> Optional[datetime.date]:
    """Parse an optional ``yyyy-MM-dd`` date; blank input gives ``None``."""
    cleaned = (text or '').strip()
    if not cleaned:
        return None
    try:
        return datetime.date.fromisoformat(cleaned)
    except ValueError:
        raise ValidationError({field: 'Expected a date as yyyy-MM-dd'}) from None
