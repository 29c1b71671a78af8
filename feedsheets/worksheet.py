import logging

import pandas as pd

from feedsheets import exceptions, helpers
from feedsheets.cell import Cell
from feedsheets.row import Row


logger = logging.getLogger(__name__)

_BATCH_FEED_TEMPLATE = (
    '<feed xmlns="http://www.w3.org/2005/Atom" '
    'xmlns:batch="http://schemas.google.com/gdata/batch" '
    'xmlns:gs="http://schemas.google.com/spreadsheets/2006">'
    '<id>{id}</id>{entries}</feed>'
)


class Worksheet(object):
    def __init__(self, client, spreadsheet, entry):
        """Create a feedsheets.Worksheet instance from one entry of the worksheets feed

        This class in not intended to be directly instantiated; it is created by
        feedsheets.Spreadsheet and feedsheets.Client.fetch_worksheet().

        Args:
            client (feedsheets.Client): The client used to talk to the feeds
            spreadsheet (feedsheets.Spreadsheet): The spreadsheet this worksheet belongs to
            entry (xml.etree.ElementTree.Element): The parsed worksheet entry
        """
        self._client = client
        self._spreadsheet = spreadsheet
        self.cells = []
        self._load(entry)

    def __repr__(self):
        msg = "<{module}.{name}(spreadsheet='{spreadsheet}', title='{title}')>"
        return msg.format(module=self.__class__.__module__,
                          name=self.__class__.__name__,
                          spreadsheet=self.spreadsheet.title,
                          title=self.title)

    @property
    def client(self):
        """ Property for the client used to talk to the feeds """
        return self._client

    @property
    def spreadsheet(self):
        """ Property for the spreadsheet instance that this worksheet belongs to """
        return self._spreadsheet

    def _load(self, entry):
        entry_id = helpers._findtext(entry, 'atom:id')
        self.id = entry_id[entry_id.rfind('/') + 1:]
        self.title = helpers._findtext(entry, 'atom:title')
        self.row_count = int(helpers._findtext(entry, 'gs:rowCount'))
        self.col_count = int(helpers._findtext(entry, 'gs:colCount'))
        self.links = helpers._parse_links(entry)

    def _update_cells_from_batch(self, feed, dirty_cells):
        """Apply a batch response to the cells that were sent

        Returns:
            list: (batch_id, code, reason) for every entry the service rejected
        """
        cells_by_batch_id = {'R{}C{}'.format(cell.row, cell.col): cell for cell in dirty_cells}
        failures = []
        for entry in helpers._findall(feed, 'atom:entry'):
            batch_id = helpers._findtext(entry, 'batch:id')
            status = helpers._find(entry, 'batch:status')
            code = int(status.get('code')) if status is not None else 200
            if code >= 400:
                failures.append((batch_id, code, status.get('reason')))
                continue

            cell = cells_by_batch_id.get(batch_id)
            if cell is not None and helpers._find(entry, 'gs:cell') is not None:
                cell._load(entry)
            elif cell is not None:
                cell.dirty = False
        return failures

    def add_row(self, data):
        """Add a row to the end of the worksheet

        The keys 'id', 'title', 'content' and 'links' are entry metadata and are skipped. Other
        keys are matched to columns by their list feed name, so 'First Name' and 'firstname'
        refer to the same column.

        Args:
            data (dict): Column name -> value

        Returns:
            feedsheets.Row: The row as stored by the service
        """
        xml = ('<entry xmlns="http://www.w3.org/2005/Atom" '
               'xmlns:gsx="http://schemas.google.com/spreadsheets/2006/extended">\n')
        for key, value in data.items():
            if key in helpers._RESERVED_ROW_KEYS:
                continue
            name = helpers._encode_col_name(key)
            value = helpers._convert_nan_and_datelike_value(value)
            xml += '<gsx:{0}>{1}</gsx:{0}>\n'.format(name, helpers._encode_xml(value))
        xml += '</entry>'

        entry, response_xml = self.client.add_list_entry(self.id, xml)
        if entry is None:
            raise exceptions.NoResponse('No response to add_row call')
        return Row(self, entry, helpers._extract_entries_xml(response_xml)[0])

    def append_data(self, data):
        """Append rows to the worksheet, one request per row

        Args:
            data (pandas.DataFrame or list): The rows to add, as a pandas.DataFrame (the index is
                not uploaded) or as a list of dicts

        Returns:
            list: The added feedsheets.Row instances
        """
        return [self.add_row(record) for record in helpers._make_records(data)]

    def delete(self):
        """Delete this worksheet from its spreadsheet

        Returns:
            list: The remaining worksheets of the spreadsheet
        """
        return self.spreadsheet.delete_worksheet(self)

    def fetch_cell(self, label):
        """Fetch a single cell, including it if it is empty

        Args:
            label (str): The A1-style label of the cell, e.g. 'B6'

        Returns:
            feedsheets.Cell: The requested cell
        """
        row, col = helpers.convert_cell_label_to_index(label)
        query = {'min-row': row, 'max-row': row, 'min-col': col, 'max-col': col,
                 'return-empty': 'true'}
        feed, _ = self.client.fetch_cells_feed(self.id, query)
        entries = helpers._findall(feed, 'atom:entry')
        if not entries:
            raise ValueError('Cell {} lies outside of worksheet {}'.format(label, self.title))
        return Cell(self, entries[0])

    def fetch_cells(self, min_row=None, max_row=None, min_col=None, max_col=None,
                    return_empty=False):
        """Fetch the cells of this worksheet

        The fetched cells are also kept on the worksheet so that changes made to them can be
        written in one request with save().

        Args:
            min_row (int): First row to include, starting from 1
            max_row (int): Last row to include
            min_col (int): First column to include, starting from 1
            max_col (int): Last column to include
            return_empty (bool): If True, empty cells within the range are included as well

        Returns:
            list: One feedsheets.Cell per cell
        """
        query = {}
        for key, value in (('min-row', min_row), ('max-row', max_row),
                           ('min-col', min_col), ('max-col', max_col)):
            if value is not None:
                query[key] = value
        if return_empty:
            query['return-empty'] = 'true'

        feed, _ = self.client.fetch_cells_feed(self.id, query)
        self.cells = [Cell(self, entry) for entry in helpers._findall(feed, 'atom:entry')]
        return self.cells

    def fetch_data(self, fmt='df', **kwargs):
        """Retrieve the rows of this worksheet as plain data

        Args:
            fmt (str): The format in which to return the data. Accepted values: 'df', 'dict', 'list'
            **kwargs: Passed on to fetch_rows() to filter or sort the rows

        Returns:
            When fmt='df' --> pandas.DataFrame

            When fmt='dict' --> list of OrderedDicts, e.g.::

                [{header1: row1cell1, header2: row1cell2},
                 {header1: row2cell1, header2: row2cell2},
                 ...]

            When fmt='list' --> tuple of header names, list of lists with row data, e.g.::

                ([header1, header2, ...],
                 [[row1cell1, row1cell2, ...], [row2cell1, row2cell2, ...], ...])
        """
        if fmt not in ('df', 'dict', 'list'):
            raise ValueError("Unexpected value '{}' for parameter `fmt`. "
                             "Accepted values are 'df', 'dict', and 'list'".format(fmt))

        records = [row.to_dict() for row in self.fetch_rows(**kwargs)]
        header_names = list(records[0].keys()) if records else []

        if fmt == 'df':
            return pd.DataFrame(data=records, columns=header_names)
        elif fmt == 'dict':
            return records
        else:
            return header_names, [list(record.values()) for record in records]

    def fetch_rows(self, start_index=None, max_results=None, orderby=None, reverse=None,
                   query=None):
        """Fetch the rows of this worksheet

        The first row of the worksheet holds the column names and is not returned.

        Args:
            start_index (int): Index of the first row to return, starting from 1
            max_results (int): Maximum number of rows to return
            orderby (str): Column to sort by. 'position' (the default order) and already
                qualified 'column:<name>' values are passed through as they are
            reverse (bool): Whether to sort in reverse order
            query (str): A structured query such as 'age > 25 and name = "Ann"'

        Returns:
            list: One feedsheets.Row per row
        """
        params = {}
        if start_index is not None:
            params['start-index'] = start_index
        if max_results is not None:
            params['max-results'] = max_results
        if orderby:
            if orderby != 'position' and not orderby.startswith('column:'):
                orderby = 'column:' + helpers._encode_col_name(orderby)
            params['orderby'] = orderby
        if reverse is not None:
            params['reverse'] = 'true' if reverse else 'false'
        if query:
            params['sq'] = query

        feed, xml = self.client.fetch_list_feed(self.id, params)
        # Raw entries are matched to parsed entries by position
        entries_xml = helpers._extract_entries_xml(xml)
        entries = helpers._findall(feed, 'atom:entry')
        return [Row(self, entry, entry_xml) for entry, entry_xml in zip(entries, entries_xml)]

    def resize(self, row_count=None, col_count=None):
        """Alter the dimensions of this worksheet

        If either dimension is left to None, that dimension will not be altered. Shrinking the
        worksheet drops the data outside of the new dimensions.

        Args:
            row_count (int): The number of rows for the worksheet to have
            col_count (int): The number of columns for the worksheet to have

        Returns:
            feedsheets.Worksheet: This worksheet
        """
        return self.update_metadata(row_count=row_count, col_count=col_count)

    def save(self):
        """Write every changed cell of this worksheet in a single batch request

        Only cells fetched with fetch_cells() whose value has been changed are sent.

        Returns:
            None
        """
        dirty_cells = [cell for cell in self.cells if cell.dirty]
        if not dirty_cells:
            return

        entries = ''.join(cell.batch_entry() for cell in dirty_cells)
        xml = _BATCH_FEED_TEMPLATE.format(id=helpers._encode_xml(self.links['cellsfeed']),
                                          entries=entries)
        logger.debug('Saving %d cells of worksheet %s', len(dirty_cells), self.id)

        feed, _ = self.client.post_cells_batch(self.id, xml)
        if feed is None:
            for cell in dirty_cells:
                cell.dirty = False
            return

        failures = self._update_cells_from_batch(feed, dirty_cells)
        if failures:
            raise exceptions.BatchUpdateFailed(failures)

    def update_metadata(self, title=None, row_count=None, col_count=None):
        """Change the title and/or dimensions of this worksheet

        Values left to None keep their current value.

        Args:
            title (str): The new title
            row_count (int): The number of rows for the worksheet to have
            col_count (int): The number of columns for the worksheet to have

        Returns:
            feedsheets.Worksheet: This worksheet
        """
        title = self.title if title is None else title
        row_count = self.row_count if row_count is None else row_count
        col_count = self.col_count if col_count is None else col_count

        xml = helpers._worksheet_entry_xml(title, row_count, col_count)
        entry, _ = self.client.update_worksheet_entry(self.links['edit'], xml)
        if entry is not None:
            self._load(entry)
        else:
            self.title = title
            self.row_count = int(row_count)
            self.col_count = int(col_count)
        return self
