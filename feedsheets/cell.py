import re

from feedsheets import helpers


_CELL_ENTRY_TEMPLATE = (
    '<entry{namespaces}>{batch}'
    '<id>{id}</id>'
    '<link rel="edit" type="application/atom+xml" href="{edit}"/>'
    '<gs:cell row="{row}" col="{col}" inputValue="{value}"/>'
    '</entry>'
)


class Cell(object):
    def __init__(self, worksheet, entry):
        """Create a feedsheets.Cell instance from one entry of a worksheet's cells feed

        This class in not intended to be directly instantiated; it is created by
        feedsheets.Worksheet.fetch_cells().

        Args:
            worksheet (feedsheets.Worksheet): The worksheet this cell belongs to
            entry (xml.etree.ElementTree.Element): The parsed entry
        """
        self._worksheet = worksheet
        self._load(entry)

    def __repr__(self):
        msg = "<{module}.{name}(label='{label}', value='{value}')>"
        return msg.format(module=self.__class__.__module__,
                          name=self.__class__.__name__,
                          label=self.label,
                          value=self.value)

    @property
    def label(self):
        """ Property for the A1-style label of this cell, e.g. 'B6' """
        return helpers.convert_cell_index_to_label(self.row, self.col)

    @property
    def value(self):
        """ Property for the value of this cell. Setting it marks the cell as dirty """
        return self._value

    @value.setter
    def value(self, new_value):
        self._value = new_value
        self.dirty = True

    @property
    def value_as_col_name(self):
        """ Property for the value of this cell in the form the list feed uses for column names """
        if not self.value:
            return ''
        name = re.sub(r'\s+', '_', str(self.value))
        return re.sub(r'[^\w]+', '', name).lower()

    @property
    def worksheet(self):
        """ Property for the worksheet this cell belongs to """
        return self._worksheet

    def _entry_xml(self, batch=''):
        return _CELL_ENTRY_TEMPLATE.format(
            namespaces='' if batch else " xmlns='{}' xmlns:gs='{}'".format(helpers.ATOM_NS,
                                                                          helpers.GS_NS),
            batch=batch,
            id=helpers._encode_xml(self.id),
            edit=helpers._encode_xml(self.links['edit']),
            row=self.row,
            col=self.col,
            value=helpers._encode_xml(helpers._convert_nan_and_datelike_value(self.value)),
        )

    def _load(self, entry):
        cell = helpers._find(entry, 'gs:cell')
        self.id = helpers._findtext(entry, 'atom:id')
        self.row = int(cell.get('row'))
        self.col = int(cell.get('col'))
        self._value = cell.text
        self.input_value = cell.get('inputValue')
        self.numeric_value = cell.get('numericValue')
        self.links = helpers._parse_links(entry)
        self.dirty = False

    def batch_entry(self, operation='update'):
        """Return the entry for this cell within a batch feed

        Args:
            operation (str): The batch operation to perform on the cell

        Returns:
            str: The entry XML, or '' if the cell has not been changed
        """
        if not self.dirty:
            return ''
        batch = ('<batch:id>R{row}C{col}</batch:id>'
                 '<batch:operation type="{operation}"/>').format(row=self.row, col=self.col,
                                                                 operation=operation)
        return self._entry_xml(batch=batch)

    def save(self):
        """Write the value of this cell to the worksheet right away

        To write many cells in one request, change them and call feedsheets.Worksheet.save()
        instead.

        Returns:
            None
        """
        entry, _ = self.worksheet.client.update_entry(self.links['edit'], self._entry_xml())
        if entry is not None:
            self._load(entry)
        else:
            self.dirty = False

    def set_value(self, new_value):
        """ Change the value of this cell; it is written on the next save """
        self.value = new_value
