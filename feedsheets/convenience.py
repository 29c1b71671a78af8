"""
Convenience functions to simplify common end-user tasks like opening a worksheet or adding rows
to it

These can be imported accessed directly from the feedsheets module, e.g.::

    import feedsheets
    worksheet = feedsheets.open_worksheet(myspreadsheetkey, myworksheettitle)
"""
from feedsheets.client import Client


def _make_client(spreadsheet_key, service):
    client = Client(spreadsheet_key)
    if service:
        client.use_service_account_auth()
    return client


def append_data_to_worksheet(spreadsheet_key, title, data, service=True):
    """Append rows to an existing worksheet


    Args:
        spreadsheet_key (str): The key of the spreadsheet holding the worksheet

        title (str): The title of the worksheet

        data (pandas.DataFrame or list): The rows to add, as a pandas.DataFrame or a list of dicts

        service (bool): If True, authenticate with the service account key stored at
            ``$FEEDSHEETS_SERVICE_PATH`` (default: ``~/.feedsheets/service_key.json``). Writing
            requires authentication, hence the default


    Returns:
        list: The added feedsheets.Row instances
    """
    return (
        _make_client(spreadsheet_key, service)
        .fetch_worksheet(title=title)
        .append_data(data)
    )


def open_worksheet(spreadsheet_key, title, service=False):
    """Open a worksheet of a spreadsheet by its title


    Args:
        spreadsheet_key (str): The key of the spreadsheet holding the worksheet

        title (str): The title of the worksheet

        service (bool): If True, authenticate with the service account key stored at
            ``$FEEDSHEETS_SERVICE_PATH`` (default: ``~/.feedsheets/service_key.json``).
            Otherwise the spreadsheet must be public


    Returns:
        feedsheets.Worksheet: An instance of the requested worksheet
    """
    return (
        _make_client(spreadsheet_key, service)
        .fetch_worksheet(title=title)
    )
