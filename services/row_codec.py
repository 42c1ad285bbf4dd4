import json

from config import JSON_COLUMN
from utils.errors import RowEncodeError, RowDecodeError

def serialize_record(record):
    """
    Canonical JSON for a record: sorted keys, compact, non-ASCII kept.
    """
    try:
        return json.dumps(record, sort_keys=True, separators=(',', ':'), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise RowEncodeError(f"record is not JSON serializable: {e}") from e

def resolve_path(document, path):
    """
    Walks a dot-separated path through nested mappings.
    Returns None when a segment is missing or crosses a non-mapping value.
    """
    current = document
    for segment in path.split('.'):
        if not isinstance(current, dict) or segment not in current:
            return None
        current = current[segment]
    return current

def format_cell(value):
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return json.dumps(value)
    return json.dumps(value, sort_keys=True, separators=(',', ':'), ensure_ascii=False)

def encode_row(record, header, json_column=JSON_COLUMN):
    """
    Flattens a record into one cell per header column.

    The json column receives the serialized record verbatim; every other
    column is looked up as a dot path into it. Unknown columns are empty.
    """
    raw_json = serialize_record(record)
    # Lookups run on the decoded copy so cells reflect exactly what is stored.
    document = json.loads(raw_json)

    row = []
    for column in header:
        if column == json_column:
            row.append(raw_json)
        else:
            row.append(format_cell(resolve_path(document, column)))
    return row

def decode_row(raw_json):
    try:
        record = json.loads(raw_json)
    except (TypeError, ValueError) as e:
        raise RowDecodeError(f"stored json is not parseable: {e}") from e
    if not isinstance(record, dict):
        raise RowDecodeError(f"stored json is a {type(record).__name__}, expected an object")
    return record
