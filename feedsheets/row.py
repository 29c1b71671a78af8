from collections import OrderedDict

from feedsheets import helpers


class Row(object):
    def __init__(self, worksheet, entry, xml):
        """Create a feedsheets.Row instance from one entry of a worksheet's list feed

        This class in not intended to be directly instantiated; it is created by
        feedsheets.Worksheet.fetch_rows() and feedsheets.Worksheet.add_row().

        A row behaves like a mapping from column name to value. Column names are the names the
        list feed derives from the header row: lower-cased with spaces, underscores and
        punctuation removed. Lookups by the original header text work as well.

        Args:
            worksheet (feedsheets.Worksheet): The worksheet this row belongs to
            entry (xml.etree.ElementTree.Element): The parsed entry
            xml (str): The raw entry exactly as the service issued it
        """
        self._worksheet = worksheet
        self._load(entry, xml)

    def __contains__(self, column):
        return self._column_key(column) in self._values

    def __getitem__(self, column):
        return self._values[self._column_key(column)]

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def __repr__(self):
        msg = "<{module}.{name}(worksheet='{worksheet}', title='{title}')>"
        return msg.format(module=self.__class__.__module__,
                          name=self.__class__.__name__,
                          worksheet=self.worksheet.title,
                          title=self.title)

    def __setitem__(self, column, value):
        key = self._column_key(column)
        if key not in self._values:
            raise KeyError("Column '{}' does not exist in this row".format(column))
        self._values[key] = value

    @property
    def worksheet(self):
        """ Property for the worksheet this row belongs to """
        return self._worksheet

    @property
    def xml(self):
        """ Property for the raw entry XML that edits are patched into """
        return self._xml

    def _column_key(self, column):
        if column in self._values:
            return column
        return helpers._encode_col_name(column)

    def _load(self, entry, xml):
        self._xml = xml
        self.id = helpers._findtext(entry, 'atom:id')
        self.title = helpers._findtext(entry, 'atom:title')
        self.content = helpers._findtext(entry, 'atom:content')
        self.links = helpers._parse_links(entry)

        self._values = OrderedDict()
        for element in entry:
            if helpers._namespace(element.tag) == helpers.GSX_NS:
                # Empty cells come back as empty elements
                self._values[helpers._local_name(element.tag)] = element.text or None

    def delete(self):
        """Delete this row from the worksheet

        Returns:
            None
        """
        self.worksheet.client.delete_entry(self.links['edit'])

    def get(self, column, default=None):
        """ Return the value of a column, or default if the row has no such column """
        try:
            return self[column]
        except KeyError:
            return default

    def items(self):
        return self._values.items()

    def keys(self):
        return self._values.keys()

    def save(self):
        """Write the current values of this row back to the worksheet

        The service is very strict about the XML it accepts for edits, so rather than building a
        new entry the current values are patched into the entry it originally issued. Anything
        in that entry other than the column values is sent back untouched.

        Returns:
            None
        """
        xml = helpers._declare_namespaces(self._xml)
        for column, value in self._values.items():
            xml = helpers._replace_column_value(xml, column, value)

        entry, response_xml = self.worksheet.client.update_entry(self.links['edit'], xml)
        if entry is not None:
            # The updated entry carries a new edit link; later edits must be made against it
            self._load(entry, helpers._extract_entries_xml(response_xml)[0])
        else:
            self._xml = xml

    def to_dict(self):
        """ Return the values of this row as an OrderedDict of column name -> value """
        return OrderedDict(self._values)

    def values(self):
        return self._values.values()
