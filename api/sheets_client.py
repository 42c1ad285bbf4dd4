import gspread
import requests
from gspread.utils import rowcol_to_a1
from google.oauth2.service_account import Credentials
from utils.logger import logger
from utils.errors import ConfigurationError, StoreWriteError

SHEET_SCOPES = [
    'https://www.googleapis.com/auth/spreadsheets',
]

# RAW keeps the json column byte-identical; USER_ENTERED would parse "=..." or numbers.
VALUE_INPUT_OPTION = 'RAW'

def open_worksheet(app_config, spreadsheet_id):
    """
    Authorizes with the service account and opens the configured worksheet.
    """
    if not spreadsheet_id:
        raise ConfigurationError("spreadsheet_id is not set.")
    creds = Credentials.from_service_account_file(app_config.service_account_file, scopes=SHEET_SCOPES)
    gc = gspread.authorize(creds)
    spreadsheet = gc.open_by_key(spreadsheet_id)
    try:
        return spreadsheet.worksheet(app_config.sheet_name)
    except gspread.exceptions.WorksheetNotFound as e:
        raise ConfigurationError(f"Worksheet '{app_config.sheet_name}' not found in spreadsheet {spreadsheet_id}") from e

class SheetsClient:
    """
    Row-level access to one worksheet whose first row is the header.
    Row numbers passed to and returned from this class count data rows
    only: data row 1 is sheet row 2.
    """

    def __init__(self, worksheet):
        self.worksheet = worksheet

    @classmethod
    def open(cls, app_config, spreadsheet_id):
        return cls(open_worksheet(app_config, spreadsheet_id))

    def get_header(self):
        header = [str(v) for v in self.worksheet.row_values(1)]
        if not header:
            raise ConfigurationError("Header row in the spreadsheet is empty")
        return header

    def get_column_values(self, column_number):
        """
        Values of one column (1-based) below the header, up to its last non-empty cell.
        """
        return [str(v) for v in self.worksheet.col_values(column_number)[1:]]

    def get_data_rows(self):
        return [[str(v) for v in row] for row in self.worksheet.get_all_values()[1:]]

    def update_row(self, row_number, values):
        if row_number < 1:
            raise ValueError(f"Invalid data row number {row_number}")
        sheet_row = row_number + 1
        range_name = f"{rowcol_to_a1(sheet_row, 1)}:{rowcol_to_a1(sheet_row, len(values))}"
        try:
            self.worksheet.update(range_name=range_name, values=[values], value_input_option=VALUE_INPUT_OPTION)
        except (gspread.exceptions.GSpreadException, requests.exceptions.RequestException) as e:
            raise StoreWriteError(f"updating row {row_number} ({range_name}): {e}") from e
        logger.debug(f"Updated {range_name}")

    def append_row(self, values):
        try:
            self.worksheet.append_row(values, value_input_option=VALUE_INPUT_OPTION, table_range='A1')
        except (gspread.exceptions.GSpreadException, requests.exceptions.RequestException) as e:
            raise StoreWriteError(f"appending row: {e}") from e

    def overwrite_data_rows(self, rows):
        """
        Writes `rows` over the data region in a single request.
        """
        if not rows:
            return
        width = max(len(row) for row in rows)
        range_name = f"{rowcol_to_a1(2, 1)}:{rowcol_to_a1(len(rows) + 1, width)}"
        try:
            self.worksheet.update(range_name=range_name, values=rows, value_input_option=VALUE_INPUT_OPTION)
        except (gspread.exceptions.GSpreadException, requests.exceptions.RequestException) as e:
            raise StoreWriteError(f"overwriting {range_name}: {e}") from e
        logger.debug(f"Overwrote {range_name}")
