from feedsheets import exceptions, helpers
from feedsheets.worksheet import Worksheet


class Spreadsheet(object):
    def __init__(self, client, feed):
        """Create a feedsheets.Spreadsheet instance from a worksheets feed

        This class in not intended to be directly instantiated; it is created by
        feedsheets.Client.fetch_spreadsheet().

        Args:
            client (feedsheets.Client): The client instance that fetched this spreadsheet
            feed (xml.etree.ElementTree.Element): The parsed worksheets feed
        """
        self._client = client
        self.title = helpers._findtext(feed, 'atom:title')
        self.updated = helpers._findtext(feed, 'atom:updated')

        author = helpers._find(feed, 'atom:author')
        if author is not None:
            self.author = {'name': helpers._findtext(author, 'atom:name'),
                           'email': helpers._findtext(author, 'atom:email')}
        else:
            self.author = None

        self.worksheets = [Worksheet(client, self, entry)
                           for entry in helpers._findall(feed, 'atom:entry')]

    def __repr__(self):
        msg = "<{module}.{name}(title='{title}')>"
        return msg.format(module=self.__class__.__module__,
                          name=self.__class__.__name__,
                          title=self.title)

    @property
    def client(self):
        """ Property for the client instance that fetched this spreadsheet """
        return self._client

    def add_worksheet(self, title, row_count=1000, col_count=26):
        """Create a new worksheet in this spreadsheet

        Args:
            title (str): The title for the worksheet

            row_count (int): An integer number of rows for the worksheet to have. The Google
                Sheets default is 1000

            col_count (int): An integer number of columns for the worksheet to have. The Google
                Sheets default is 26

        Returns:
            feedsheets.Worksheet: An instance of the newly created worksheet
        """
        xml = helpers._worksheet_entry_xml(title, row_count, col_count)
        entry, _ = self.client.add_worksheet_entry(xml)
        if entry is None:
            raise exceptions.NoResponse('No response to add_worksheet call')

        worksheet = Worksheet(self.client, self, entry)
        self.worksheets.append(worksheet)
        return worksheet

    def delete_worksheet(self, worksheet):
        """Delete a worksheet from this spreadsheet

        Args:
            worksheet (feedsheets.Worksheet): The worksheet to delete

        Returns:
            list: The remaining worksheets
        """
        self.client.delete_entry(worksheet.links['edit'])
        self.worksheets = [ws for ws in self.worksheets if ws is not worksheet]
        return self.worksheets

    def fetch_worksheet(self, title=None, index=None):
        """Return one of the worksheets of this spreadsheet

        Either title or index should be provided, but not both.

        Args:
            title (str): The title of the worksheet
            index (int): The zero-based position of the worksheet

        Returns:
            feedsheets.Worksheet: The requested worksheet
        """
        if (title is None) == (index is None):
            raise ValueError('Either title or index must be provided, but not both.')

        if index is not None:
            if 0 <= index < len(self.worksheets):
                return self.worksheets[index]
            raise exceptions.WorksheetNotFound('No worksheet at index {}'.format(index))

        for worksheet in self.worksheets:
            if worksheet.title == title:
                return worksheet
        raise exceptions.WorksheetNotFound("Worksheet '{}' not found in '{}'".format(title, self.title))
