"""
Functionality used elsewhere. Almost all of these functions are not intended to be utilized by
the end-user and are not exposed in the external API.
"""
import collections.abc
import datetime as dt
import re

import numpy as np
import pandas as pd


ATOM_NS = 'http://www.w3.org/2005/Atom'
GS_NS = 'http://schemas.google.com/spreadsheets/2006'
GSX_NS = 'http://schemas.google.com/spreadsheets/2006/extended'
BATCH_NS = 'http://schemas.google.com/gdata/batch'
GD_NS = 'http://schemas.google.com/g/2005'

NAMESPACES = {
    'atom': ATOM_NS,
    'gs': GS_NS,
    'gsx': GSX_NS,
    'batch': BATCH_NS,
    'gd': GD_NS,
}

# Declarations a raw entry needs to stand on its own; '' is the default namespace
ENTRY_NAMESPACES = {
    '': ATOM_NS,
    'gs': GS_NS,
    'gsx': GSX_NS,
    'gd': GD_NS,
    'batch': BATCH_NS,
}

ASCII_CHAR_OFFSET = ord('A') - 1
NUMBER_OF_LETTERS_IN_ALPHABET = 26

# Keys of row data that are entry metadata rather than columns
_RESERVED_ROW_KEYS = ('id', 'title', 'content', 'links')

_ENTRY_PATTERN = re.compile(r'<entry[^>]*>[\s\S]*?</entry>')
_ENTRY_OPEN_TAG_PATTERN = re.compile(r'<entry([^>]*)>')

_WORKSHEET_ENTRY_TEMPLATE = (
    '<entry xmlns="http://www.w3.org/2005/Atom" xmlns:gs="http://schemas.google.com/spreadsheets/2006">'
    '<title>{title}</title>'
    '<gs:rowCount>{row_count}</gs:rowCount>'
    '<gs:colCount>{col_count}</gs:colCount>'
    '</entry>'
)


def _convert_nan_and_datelike_value(item):
    """Make a single value safe to write as cell or row text

    Args:
        item: Any value provided by the user

    Returns:
        The value with datelike-objects converted to strings and None / np.nan converted to ''
    """
    if item is None:
        return ''
    elif isinstance(item, (float, np.floating)) and np.isnan(item):
        return ''
    elif isinstance(item, (dt.date, dt.datetime, dt.time)):
        return str(item)
    return item


def _declare_namespaces(entry_xml, namespaces=ENTRY_NAMESPACES):
    """Make sure the opening <entry> tag of a raw fragment declares the namespaces it uses

    Entries cut out of a feed rely on the declarations of the enclosing <feed>, which the service
    requires to be present again when the fragment is sent back on its own. The default namespace
    is always declared; prefixed ones only when the fragment uses the prefix.

    Args:
        entry_xml (str): A raw <entry>...</entry> fragment
        namespaces (dict): Prefix to URI; a prefix of '' stands for the default namespace

    Returns:
        str: The fragment with any missing declarations added to its opening tag
    """
    match = _ENTRY_OPEN_TAG_PATTERN.search(entry_xml)
    if not match:
        raise ValueError('Unable to find an <entry> tag in the given XML')

    attributes = match.group(1)
    declarations = ''
    for prefix, uri in namespaces.items():
        if prefix and '{}:'.format(prefix) not in entry_xml:
            continue
        name = 'xmlns:{}'.format(prefix) if prefix else 'xmlns'
        if re.search(r'\s{}\s*='.format(re.escape(name)), attributes):
            continue
        declarations += " {}='{}'".format(name, uri)

    open_tag = '<entry{}{}>'.format(declarations, attributes)
    return entry_xml[:match.start()] + open_tag + entry_xml[match.end():]


def _encode_col_name(name):
    """ Convert a column header to the element name the list feed uses for it """
    if not name:
        return ''
    name = re.sub(r'[\s_]+', '', str(name))
    return re.sub(r'[^\w]+', '', name).lower()


def _encode_xml(value):
    """ Escape a value for use as XML text or as a double-quoted attribute """
    if value is None:
        return ''
    return (str(value).replace('&', '&amp;')
                      .replace('<', '&lt;')
                      .replace('>', '&gt;')
                      .replace('"', '&quot;'))


def _extract_entries_xml(xml):
    """Cut every raw <entry>...</entry> fragment out of a feed body, in document order

    The fragments are kept verbatim so that later edits can be patched into exactly the markup the
    service issued.
    """
    if not xml:
        return []
    return _ENTRY_PATTERN.findall(xml)


def _find(element, path):
    return element.find(path, NAMESPACES)


def _findall(element, path):
    return element.findall(path, NAMESPACES)


def _findtext(element, path, default=None):
    return element.findtext(path, default=default, namespaces=NAMESPACES)


def _get_column_letter(col_idx):
    """ Convert a column number into a label, e.g. 3 -> C, 27 -> AA, 53 -> BA, etc. """
    quotient, remainder = divmod(col_idx, NUMBER_OF_LETTERS_IN_ALPHABET)
    if remainder == 0:
        quotient -= 1
        remainder = NUMBER_OF_LETTERS_IN_ALPHABET
    suffix = chr(remainder + ASCII_CHAR_OFFSET)
    if quotient == 0:
        return suffix

    return _get_column_letter(quotient) + suffix


def _local_name(tag):
    """ Strip the '{namespace}' part ElementTree puts in front of a tag """
    return tag.rsplit('}', 1)[-1]


def _make_records(data):
    """Convert the input data to a list of dicts, one dict per row to add

    Args:
        data (pandas.DataFrame or list): A DataFrame (its index is ignored) or a list of dicts

    Returns:
        list: A list of dicts mapping column name to value
    """
    if isinstance(data, pd.DataFrame):
        return data.to_dict(orient='records')
    elif isinstance(data, collections.abc.Sequence) and data \
            and isinstance(data[0], collections.abc.Mapping):
        return [dict(row) for row in data]
    elif isinstance(data, collections.abc.Sequence) and not data:
        return []

    raise ValueError('Input data must be a pandas.DataFrame or a list of dicts')


def _namespace(tag):
    """ Return the namespace URI of an ElementTree tag, or '' if it has none """
    if tag.startswith('{'):
        return tag[1:].split('}', 1)[0]
    return ''


def _parse_links(entry):
    """Build the link map of an entry

    The key of each link is the part of its rel after the last '#', so that for example
    'http://schemas.google.com/spreadsheets/2006#cellsfeed' becomes 'cellsfeed' and 'edit' stays
    'edit'.

    Returns:
        dict: rel suffix -> href
    """
    links = {}
    for link in _findall(entry, 'atom:link'):
        rel = link.get('rel', '')
        links[rel[rel.rfind('#') + 1:]] = link.get('href')
    return links


def _replace_column_value(entry_xml, column, value):
    """Patch the value of one gsx column inside a raw row entry

    Only the first occurrence of the column element is touched, whether it is written out in full
    (<gsx:name>...</gsx:name>) or self-closing (<gsx:name/>). Everything else in the fragment is
    left byte for byte as it was.

    Args:
        entry_xml (str): A raw <entry>...</entry> fragment from the list feed
        column (str): The element name exactly as the list feed issued it, e.g. 'price' or
            '_cokwr' for a column without a header
        value: The new value; None and NaN write an empty element, dates are written as strings

    Returns:
        str: The patched fragment
    """
    escaped_name = re.escape(column)
    pattern = r'<gsx:{0}\s*/>|<gsx:{0}>[\s\S]*?</gsx:{0}>'.format(escaped_name)
    value = _encode_xml(_convert_nan_and_datelike_value(value))
    replacement = '<gsx:{0}>{1}</gsx:{0}>'.format(column, value)
    return re.sub(pattern, lambda _: replacement, entry_xml, count=1)


def convert_cell_index_to_label(row, col):
    """Convert two cell indexes to a string address

    Args:
        row (int): The cell row number, starting from 1
        col (int): The cell column number, starting from 1

    Note that Google Sheets starts both the row and col indexes at 1.

    Example:
        >>> feedsheets.convert_cell_index_to_label(1, 1)
        A1
        >>> feedsheets.convert_cell_index_to_label(10, 40)
        AN10

    Returns:
        str: The cell reference as an address (e.g. 'B6')
    """
    row = int(row)
    col = int(col)

    if row < 1 or col < 1:
        raise ValueError('Row and column values must be >= 1')

    column_label = _get_column_letter(col)
    return '{}{}'.format(column_label, row)


def convert_cell_label_to_index(label):
    """Convert a cell label in string form into one based cell indexes of the form (row, col).

    Args:
        label (str): The cell label in string form

    Example:
        >>> feedsheets.convert_cell_label_to_index('A1')
        (1, 1)
        >>> feedsheets.convert_cell_label_to_index('AN10')
        (10, 40)

    Returns:
        tuple: The cell reference in (row_int, col_int) form
    """
    if not isinstance(label, str):
        raise ValueError('Input must be a string')

    # Split out the letters from the numbers
    match = re.match(r'^([A-Za-z]+)([1-9]\d*)$', label)
    if not match:
        raise ValueError('Unable to parse user-provided label')

    column_label = match.group(1).upper()
    row = int(match.group(2))

    col = 0
    for c in column_label:
        col = col * NUMBER_OF_LETTERS_IN_ALPHABET + (ord(c) - ASCII_CHAR_OFFSET)

    return (row, col)


def _worksheet_entry_xml(title, row_count, col_count):
    """ Build the entry used both to create a worksheet and to change its metadata """
    return _WORKSHEET_ENTRY_TEMPLATE.format(title=_encode_xml(title),
                                            row_count=int(row_count),
                                            col_count=int(col_count))
