from dataclasses import asdict, dataclass

from api.sheets_client import SheetsClient
from services.derived_fields import tweet_fields
from services.last_known_state import json_column_number
from services.poller import load_spreadsheet_id
from services.row_codec import decode_row, encode_row
from utils.errors import RebuildMismatchError, RowDecodeError, RowEncodeError
from utils.logger import logger

@dataclass
class RebuildSummary:
    total: int = 0
    rebuilt: int = 0
    kept: int = 0

def rebuild_row(row, row_number, header, json_column):
    """
    Re-derives one row from the tweet stored in its json cell.
    Returns (row, rebuilt). A row that cannot be rebuilt comes back unchanged.
    Cells to the right of the header are carried over.
    """
    json_index = json_column_number(header, json_column) - 1
    raw_json = row[json_index] if json_index < len(row) else ''
    try:
        record = decode_row(raw_json)
        tweet = record.get('tweet')
        if not isinstance(tweet, dict):
            raise RowDecodeError("no stored tweet")
        record.update(tweet_fields(tweet))
        encoded = encode_row(record, header, json_column)
    except (RowDecodeError, RowEncodeError) as e:
        logger.error(f"Failed to rebuild row {row_number}, keeping it as is: {e}")
        return row, False
    return encoded + row[len(header):], True

def rebuild_rows(rows, header, json_column):
    rebuilt_rows = []
    summary = RebuildSummary(total=len(rows))
    for index, row in enumerate(rows):
        new_row, rebuilt = rebuild_row(row, index + 1, header, json_column)
        rebuilt_rows.append(new_row)
        if rebuilt:
            summary.rebuilt += 1
        else:
            summary.kept += 1
    return rebuilt_rows, summary

async def rebuild_all(app_config, repository, store_factory=SheetsClient.open):
    """
    Recomputes derived columns for every stored row and rewrites the data
    region in one request. Nothing is written if the row count changed.
    """
    logger.log("Rebuilding all rows")

    spreadsheet_id = load_spreadsheet_id(repository)
    store = store_factory(app_config, spreadsheet_id)

    header = store.get_header()
    # Fail before touching rows if the json column is gone.
    json_column_number(header, app_config.json_column)
    rows = store.get_data_rows()
    if not rows:
        logger.log("No rows to rebuild")
        return RebuildSummary()

    rebuilt_rows, summary = rebuild_rows(rows, header, app_config.json_column)
    # The overwrite addresses rows by position, so the row count must still match the read.
    current_count = len(store.get_data_rows())
    if current_count != len(rebuilt_rows):
        raise RebuildMismatchError(f"sheet now has {current_count} data rows, rebuilt {len(rebuilt_rows)}")

    store.overwrite_data_rows(rebuilt_rows)
    logger.summary("Rebuild complete", asdict(summary))
    return summary
