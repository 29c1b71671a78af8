from collections import OrderedDict
from urllib.parse import parse_qs, urlparse
import xml.etree.ElementTree as ET

import numpy as np
import pandas as pd
import pytest

import feedsheets
from conftest import make_response, read_resource, sent_request


def sent_query(mock_http, call_index=-1):
    url = sent_request(mock_http, call_index)[0]
    parsed = urlparse(url)
    return parsed.path, {key: value[0] for key, value in parse_qs(parsed.query).items()}


def test_init(mock_worksheet, mock_spreadsheet, mock_client):
    assert isinstance(mock_worksheet, feedsheets.Worksheet)
    assert mock_worksheet.client is mock_client
    assert mock_worksheet.spreadsheet is mock_spreadsheet
    assert mock_worksheet.id == 'od6'
    assert mock_worksheet.title == 'Products'
    assert mock_worksheet.row_count == 100
    assert mock_worksheet.col_count == 20
    assert mock_worksheet.cells == []
    assert set(mock_worksheet.links) == {'listfeed', 'cellsfeed', 'self', 'edit'}
    assert mock_worksheet.links['cellsfeed'] == \
        'https://spreadsheets.google.com/feeds/cells/key123/od6/private/full'

    repr_start = "<feedsheets.worksheet.Worksheet(spreadsheet='Inventory', title='Products')>"
    assert repr(mock_worksheet) == repr_start


def test_fetch_rows(mock_worksheet, mock_http):
    mock_http.request.return_value = make_response(read_resource('list_feed.xml'))
    rows = mock_worksheet.fetch_rows()

    path, query = sent_query(mock_http)
    assert path == '/feeds/list/key123/od6/private/full'
    assert query == {}

    assert len(rows) == 2
    assert all(isinstance(row, feedsheets.Row) for row in rows)
    assert rows[0]['name'] == 'Widget'
    assert rows[1]['name'] == 'Gadget & Co'
    assert '<gsx:name>Widget</gsx:name>' in rows[0].xml
    assert '<gsx:notes>back order</gsx:notes>' in rows[1].xml


def test_fetch_rows_options(mock_worksheet, mock_http):
    mock_http.request.return_value = make_response(read_resource('list_feed.xml'))
    mock_worksheet.fetch_rows(start_index=2, max_results=10, orderby='In Stock', reverse=True,
                              query='price > 5')

    _, query = sent_query(mock_http)
    assert query == {'start-index': '2', 'max-results': '10', 'orderby': 'column:instock',
                     'reverse': 'true', 'sq': 'price > 5'}


@pytest.mark.parametrize("orderby", ['position', 'column:price'])
def test_fetch_rows_qualified_orderby(mock_worksheet, mock_http, orderby):
    mock_http.request.return_value = make_response(read_resource('list_feed.xml'))
    mock_worksheet.fetch_rows(orderby=orderby, reverse=False)

    _, query = sent_query(mock_http)
    assert query == {'orderby': orderby, 'reverse': 'false'}


def test_fetch_cells(mock_worksheet, mock_http):
    mock_http.request.return_value = make_response(read_resource('cells_feed.xml'))
    cells = mock_worksheet.fetch_cells(min_row=1, max_row=2, max_col=3, return_empty=True)

    path, query = sent_query(mock_http)
    assert path == '/feeds/cells/key123/od6/private/full'
    assert query == {'min-row': '1', 'max-row': '2', 'max-col': '3', 'return-empty': 'true'}
    assert [cell.label for cell in cells] == ['A1', 'B2']
    assert mock_worksheet.cells is cells


def test_fetch_cell(mock_worksheet, mock_http):
    mock_http.request.return_value = make_response(read_resource('cells_feed.xml'))
    cell = mock_worksheet.fetch_cell('C7')

    _, query = sent_query(mock_http)
    assert query == {'min-row': '7', 'max-row': '7', 'min-col': '3', 'max-col': '3',
                     'return-empty': 'true'}
    assert isinstance(cell, feedsheets.Cell)


def test_fetch_cell_outside_worksheet(mock_worksheet, mock_http):
    mock_http.request.return_value = make_response(
        b"<feed xmlns='http://www.w3.org/2005/Atom'><id>x</id></feed>"
    )
    with pytest.raises(ValueError) as err:
        mock_worksheet.fetch_cell('ZZ999')
    assert err.match('Cell ZZ999 lies outside of worksheet Products')


def test_add_row(mock_worksheet, mock_http):
    mock_http.request.return_value = make_response(read_resource('row_entry.xml'), status=201)
    row = mock_worksheet.add_row(OrderedDict([
        ('id', 'ignored'),
        ('Name', 'Doohickey'),
        ('Price', 4.25),
        ('In Stock', 'TRUE'),
        ('Notes', None),
        ('links', 'ignored'),
    ]))

    url, method, body, _ = sent_request(mock_http)
    assert url == 'https://spreadsheets.google.com/feeds/list/key123/od6/private/full'
    assert method == 'POST'
    assert body.decode('utf-8') == (
        '<entry xmlns="http://www.w3.org/2005/Atom" '
        'xmlns:gsx="http://schemas.google.com/spreadsheets/2006/extended">\n'
        '<gsx:name>Doohickey</gsx:name>\n'
        '<gsx:price>4.25</gsx:price>\n'
        '<gsx:instock>TRUE</gsx:instock>\n'
        '<gsx:notes></gsx:notes>\n'
        '</entry>'
    )
    ET.fromstring(body)

    assert isinstance(row, feedsheets.Row)
    assert row.to_dict() == OrderedDict([('name', 'Doohickey'), ('price', '4.25'),
                                         ('instock', 'TRUE'), ('notes', None)])
    assert row.links['edit'].endswith('/chk2m/5e6f')


def test_add_row_escapes_values(mock_worksheet, mock_http):
    mock_http.request.return_value = make_response(read_resource('row_entry.xml'))
    mock_worksheet.add_row({'name': 'Fish & <Chips>'})

    _, _, body, _ = sent_request(mock_http)
    assert b'<gsx:name>Fish &amp; &lt;Chips&gt;</gsx:name>' in body


def test_add_row_no_response(mock_worksheet):
    with pytest.raises(feedsheets.exceptions.NoResponse):
        mock_worksheet.add_row({'name': 'Doohickey'})


def test_append_data(mock_worksheet, mock_http):
    mock_http.request.return_value = make_response(read_resource('row_entry.xml'))
    data = pd.DataFrame({'name': ['Doohickey', 'Thingamajig'], 'price': [4.25, np.nan]})
    rows = mock_worksheet.append_data(data)

    assert len(rows) == 2
    assert mock_http.request.call_count == 2
    _, _, body, _ = sent_request(mock_http, 1)
    assert b'<gsx:name>Thingamajig</gsx:name>' in body
    assert b'<gsx:price></gsx:price>' in body


def test_fetch_data_df(mock_worksheet, mock_http):
    mock_http.request.return_value = make_response(read_resource('list_feed.xml'))
    df = mock_worksheet.fetch_data()

    assert isinstance(df, pd.DataFrame)
    assert list(df.columns) == ['name', 'price', 'instock', 'notes']
    assert df.shape == (2, 4)
    assert list(df['price']) == ['9.99', '19.50']


def test_fetch_data_dict(mock_worksheet, mock_http):
    mock_http.request.return_value = make_response(read_resource('list_feed.xml'))
    records = mock_worksheet.fetch_data(fmt='dict', max_results=2)

    _, query = sent_query(mock_http)
    assert query == {'max-results': '2'}
    assert records[0] == OrderedDict([('name', 'Widget'), ('price', '9.99'), ('instock', 'TRUE'),
                                      ('notes', None)])


def test_fetch_data_list(mock_worksheet, mock_http):
    mock_http.request.return_value = make_response(read_resource('list_feed.xml'))
    headers, rows = mock_worksheet.fetch_data(fmt='list')

    assert headers == ['name', 'price', 'instock', 'notes']
    assert rows[1] == ['Gadget & Co', '19.50', 'FALSE', 'back order']


def test_fetch_data_empty(mock_worksheet, mock_http):
    mock_http.request.return_value = make_response(
        b"<feed xmlns='http://www.w3.org/2005/Atom'><id>x</id></feed>"
    )
    assert mock_worksheet.fetch_data(fmt='list') == ([], [])


def test_fetch_data_bad_fmt(mock_worksheet):
    with pytest.raises(ValueError) as err:
        mock_worksheet.fetch_data(fmt='xlsx')
    assert err.match("Unexpected value 'xlsx' for parameter `fmt`")


def test_update_metadata(mock_worksheet, mock_http):
    result = mock_worksheet.update_metadata(title='All products', row_count=200)

    url, method, body, _ = sent_request(mock_http)
    assert url == 'https://spreadsheets.google.com/feeds/worksheets/key123/private/full/od6/4ac5'
    assert method == 'PUT'
    assert body.decode('utf-8') == (
        '<entry xmlns="http://www.w3.org/2005/Atom" '
        'xmlns:gs="http://schemas.google.com/spreadsheets/2006">'
        '<title>All products</title><gs:rowCount>200</gs:rowCount><gs:colCount>20</gs:colCount>'
        '</entry>'
    )
    assert result is mock_worksheet
    assert (mock_worksheet.title, mock_worksheet.row_count, mock_worksheet.col_count) == \
        ('All products', 200, 20)


def test_update_metadata_reloads_from_response(mock_worksheet, mock_http):
    mock_http.request.return_value = make_response(read_resource('worksheet_entry.xml'))
    mock_worksheet.update_metadata(title='Returns', row_count=50, col_count=10)

    assert mock_worksheet.links['edit'].endswith('/od8/0')
    assert (mock_worksheet.title, mock_worksheet.row_count, mock_worksheet.col_count) == \
        ('Returns', 50, 10)


def test_resize(mock_worksheet, mock_http):
    mock_worksheet.resize(col_count=30)

    _, _, body, _ = sent_request(mock_http)
    assert b'<title>Products</title>' in body
    assert b'<gs:rowCount>100</gs:rowCount><gs:colCount>30</gs:colCount>' in body
    assert mock_worksheet.col_count == 30


def test_save_without_changes_sends_nothing(mock_worksheet, mock_cells, mock_http):
    mock_worksheet.save()
    assert mock_http.request.call_count == 0


def test_save(mock_worksheet, mock_cells, mock_http):
    name, price = mock_cells
    name.value = 'Product'
    price.value = 12.5
    mock_http.request.return_value = make_response(read_resource('batch_response.xml'))

    mock_worksheet.save()

    url, method, body, _ = sent_request(mock_http)
    assert url == 'https://spreadsheets.google.com/feeds/cells/key123/od6/private/full/batch'
    assert method == 'POST'
    feed = ET.fromstring(body)
    ns = {'atom': 'http://www.w3.org/2005/Atom', 'batch': 'http://schemas.google.com/gdata/batch',
          'gs': 'http://schemas.google.com/spreadsheets/2006'}
    assert feed.findtext('atom:id', namespaces=ns) == \
        'https://spreadsheets.google.com/feeds/cells/key123/od6/private/full'
    entries = feed.findall('atom:entry', ns)
    assert [e.findtext('batch:id', namespaces=ns) for e in entries] == ['R1C1', 'R2C2']
    assert [e.find('gs:cell', ns).get('inputValue') for e in entries] == ['Product', '12.5']

    # Values re-read from the service match what was written
    assert (name.value, price.value) == ('Product', '12.5')
    assert not name.dirty and not price.dirty
    assert name.links['edit'].endswith('/R1C1/gh78')
    assert price.links['edit'].endswith('/R2C2/ij90')


def test_save_only_sends_changed_cells(mock_worksheet, mock_cells, mock_http):
    mock_cells[1].value = 12.5
    mock_worksheet.save()

    _, _, body, _ = sent_request(mock_http)
    assert b'<batch:id>R2C2</batch:id>' in body
    assert b'R1C1</batch:id>' not in body
    assert not mock_cells[1].dirty


def test_save_reports_failed_cells(mock_worksheet, mock_cells, mock_http):
    name, price = mock_cells
    name.value = 'Product'
    price.value = 12.5
    mock_http.request.return_value = make_response(read_resource('batch_response_failed.xml'))

    with pytest.raises(feedsheets.exceptions.BatchUpdateFailed) as err:
        mock_worksheet.save()

    assert err.value.failures == [('R2C2', 409, 'Version conflict')]
    assert err.match('R2C2')
    assert not name.dirty
    assert price.dirty


def test_delete(mock_worksheet, mock_spreadsheet, mock_http):
    mock_worksheet.delete()

    url, method, _, _ = sent_request(mock_http)
    assert url == mock_worksheet.links['edit']
    assert method == 'DELETE'
    assert mock_worksheet not in mock_spreadsheet.worksheets


def test_update_metadata_explicit_zero(mock_worksheet, mock_http):
    mock_worksheet.update_metadata(row_count=0)

    _, _, body, _ = sent_request(mock_http)
    assert b'<gs:rowCount>0</gs:rowCount><gs:colCount>20</gs:colCount>' in body
    assert (mock_worksheet.row_count, mock_worksheet.col_count) == (0, 20)
