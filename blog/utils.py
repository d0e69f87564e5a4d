import json

from .errors import InvalidInput


def read_json(request):
    """Request body as a dict; form posts fall back to request.POST."""
    if request.content_type and request.content_type.startswith('multipart/'):
        return request.POST
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (ValueError, UnicodeDecodeError):
        raise InvalidInput("Request body must be valid JSON")
    if not isinstance(data, dict):
        raise InvalidInput("Request body must be a JSON object")
    return data


def parse_json_field(value, message):
    """Multipart forms carry lists and documents as JSON strings."""
    if isinstance(value, str):
        try:
            return json.loads(value)
        except ValueError:
            raise InvalidInput(message)
    return value


def parse_id(value, label='ID'):
    if isinstance(value, bool):
        raise InvalidInput(f"Invalid {label}")
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        raise InvalidInput(f"Invalid {label}")
    if parsed <= 0:
        raise InvalidInput(f"Invalid {label}")
    return parsed


def parse_id_list(values, label='ID'):
    if not isinstance(values, (list, tuple)):
        raise InvalidInput(f"Invalid {label} list")
    ids = []
    for value in values:
        parsed = parse_id(value, label)
        if parsed not in ids:
            ids.append(parsed)
    return ids


def parse_bool(value):
    if isinstance(value, bool):
        return value
    if value is None:
        return None
    return str(value).strip().lower() in ('1', 'true', 'yes', 'on')


def parse_positive_int(value, message):
    if isinstance(value, bool):
        raise InvalidInput(message)
    if isinstance(value, float) and not value.is_integer():
        raise InvalidInput(message)
    try:
        parsed = int(str(value).strip()) if not isinstance(value, (int, float)) else int(value)
    except (TypeError, ValueError):
        raise InvalidInput(message)
    if parsed <= 0:
        raise InvalidInput(message)
    return parsed
