"""
feedsheets is a library for reading from and writing to Google Sheets through the spreadsheets
GData feeds, the Atom/XML API found under https://spreadsheets.google.com/feeds/. It covers
worksheets, rows (the list feed) and individual cells (the cells feed). HTTP is handled by
httplib2 and service account authentication by oauth2client. Further details on these libraries
and the API can be found here:

    httplib2: https://github.com/httplib2/httplib2
    oauth2client: https://github.com/google/oauth2client
    Sheets API v3: https://developers.google.com/sheets/api/v3/
"""
import logging

from feedsheets import exceptions
from feedsheets.auth import AuthToken
from feedsheets.cell import Cell
from feedsheets.client import Client
from feedsheets.convenience import append_data_to_worksheet, open_worksheet
from feedsheets.helpers import convert_cell_index_to_label, convert_cell_label_to_index
from feedsheets.row import Row
from feedsheets.spreadsheet import Spreadsheet
from feedsheets.worksheet import Worksheet

__all__ = (
    'AuthToken',
    'Cell',
    'Client',
    'Row',
    'Spreadsheet',
    'Worksheet',
    '__version__',
    'append_data_to_worksheet',
    'convert_cell_index_to_label',
    'convert_cell_label_to_index',
    'exceptions',
    'open_worksheet',
)

__version__ = '0.1.0'

logging.getLogger(__name__).addHandler(logging.NullHandler())
