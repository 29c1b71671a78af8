import json
import logging
import os
from urllib.parse import urlencode
import xml.etree.ElementTree as ET

import httplib2

from feedsheets import exceptions
from feedsheets.auth import CredentialManager
from feedsheets.spreadsheet import Spreadsheet


logger = logging.getLogger(__name__)

FEED_URL = 'https://spreadsheets.google.com/feeds/'


class Client(object):
    def __init__(self, spreadsheet_key, auth_token=None, visibility=None, projection=None,
                 http=None):
        """Create a client for the feeds of a single Google Sheets spreadsheet

        Args:
            spreadsheet_key (str): The key of the spreadsheet, as found in its URL

            auth_token (str or feedsheets.auth.AuthToken): An optional static token. A bare
                string is sent using the legacy ``GoogleLogin auth=`` header; use an
                AuthToken with token_type='Bearer' for OAuth2 access tokens. Service account
                authentication is set up afterwards with use_service_account_auth().

            visibility (str): Either 'public' or 'private'. By default 'private' is used once the
                client is authenticated and 'public' otherwise

            projection (str): Either 'values' or 'full'. By default 'full' is used once the
                client is authenticated and 'values' otherwise

            http (httplib2.Http): The transport to issue requests with. A new one is created if
                none is given
        """
        if not spreadsheet_key:
            raise ValueError('Spreadsheet key not provided.')

        self.spreadsheet_key = spreadsheet_key
        self.http = http or httplib2.Http()
        self._requested_visibility = visibility
        self._requested_projection = projection
        self.credentials = CredentialManager()
        self.email = None

        if auth_token is not None:
            self.credentials.set_auth_token(auth_token)

    def __repr__(self):
        msg = "<{module}.{name}(spreadsheet_key='{key}', email='{email}')>"
        return msg.format(module=self.__class__.__module__,
                          name=self.__class__.__name__,
                          key=self.spreadsheet_key,
                          email=self.email)

    @property
    def projection(self):
        """ Property for the projection ('values' or 'full') used in feed URLs """
        if self._requested_projection:
            return self._requested_projection
        return 'full' if self.credentials.is_authenticated else 'values'

    @property
    def visibility(self):
        """ Property for the visibility ('public' or 'private') used in feed URLs """
        if self._requested_visibility:
            return self._requested_visibility
        return 'private' if self.credentials.is_authenticated else 'public'

    def _build_url(self, url_params, extra_params=None):
        """Turn request parameters into a feed URL

        Args:
            url_params (str or list): Either a complete URL (used for edit and delete links) or
                the path segments that precede visibility and projection, e.g.
                ['list', spreadsheet_key, worksheet_id]
            extra_params (list): Path segments that follow visibility and projection

        Returns:
            str: The URL to request
        """
        if isinstance(url_params, str):
            return url_params

        segments = list(url_params) + [self.visibility, self.projection]
        if extra_params:
            segments += list(extra_params)
        return FEED_URL + '/'.join(str(segment) for segment in segments)

    @staticmethod
    def _check_response(response, body):
        """ Raise the matching feedsheets exception for a failed response """
        if response.status == 401:
            raise exceptions.InvalidCredentials(body)
        elif response.status >= 400:
            raise exceptions.HttpError(response.status, body)
        elif response.status == 200 and 'text/html' in response.get('content-type', ''):
            raise exceptions.PrivateSheet(
                'Sheet is private. Use authentication or make it public.\n{}'.format(body)
            )

    def _get_service_key(self):
        """Read the service account key

        Uses the key stored at ``$FEEDSHEETS_SERVICE_PATH``
        (default: ``~/.feedsheets/service_key.json``).

        Returns:
            dict: The contents of the key file
        """
        unexpanded_service_key_path = os.environ.get('FEEDSHEETS_SERVICE_PATH',
                                                     '~/.feedsheets/service_key.json')
        service_key_path = os.path.expanduser(unexpanded_service_key_path)
        with open(service_key_path) as f:
            return json.load(f)

    def _make_feed_request(self, url_params, extra_params=None, method='GET', query_or_data=None):
        """Issue a request against the spreadsheets feed

        This is the only place that talks to the service. Expired service account tokens are
        renewed before the request goes out.

        Args:
            url_params (str or list): See _build_url
            extra_params (list): See _build_url
            method (str): The HTTP method
            query_or_data (dict or str): For GET, a dict of query parameters; for POST and PUT,
                the XML body

        Returns:
            tuple: (xml.etree.ElementTree.Element, str) holding the parsed and the raw response
            body, or (None, None) if the body is empty
        """
        url = self._build_url(url_params, extra_params)
        self.credentials.refresh_if_needed(self.http)

        headers = self.credentials.authorization_header()
        body = None
        if method in ('POST', 'PUT'):
            headers['content-type'] = 'application/atom+xml'
            body = query_or_data.encode('utf-8')
        elif method == 'GET' and query_or_data:
            url += '?' + urlencode(query_or_data)

        response, content = self.http.request(url, method=method, body=body, headers=headers)
        logger.debug('%s %s -> %s', method, url, response.status)

        xml = content.decode('utf-8') if isinstance(content, bytes) else content
        self._check_response(response, xml)

        if not xml or not xml.strip():
            return None, None
        return ET.fromstring(xml), xml

    def _require_feed(self, url_params, action, extra_params=None, query=None):
        element, xml = self._make_feed_request(url_params, extra_params, 'GET', query)
        if element is None:
            raise exceptions.NoResponse('No response to {} call'.format(action))
        return element, xml

    def add_list_entry(self, worksheet_id, xml):
        """ POST a new row entry to the list feed of a worksheet """
        return self._make_feed_request(['list', self.spreadsheet_key, worksheet_id],
                                       method='POST', query_or_data=xml)

    def add_worksheet_entry(self, xml):
        """ POST a new worksheet entry to the worksheets feed. Worksheet IDs start at 1 """
        return self._make_feed_request(['worksheets', self.spreadsheet_key],
                                       method='POST', query_or_data=xml)

    def delete_entry(self, url):
        """ DELETE the entry (worksheet or row) behind the given edit link """
        return self._make_feed_request(url, method='DELETE')

    def fetch_cells_feed(self, worksheet_id, query=None):
        """ GET the cells feed of a worksheet; see feedsheets.Worksheet.fetch_cells """
        return self._require_feed(['cells', self.spreadsheet_key, worksheet_id], 'fetch_cells',
                                  query=query or {})

    def fetch_list_feed(self, worksheet_id, query=None):
        """ GET the list (rows) feed of a worksheet; see feedsheets.Worksheet.fetch_rows """
        return self._require_feed(['list', self.spreadsheet_key, worksheet_id], 'fetch_rows',
                                  query=query or {})

    def fetch_spreadsheet(self):
        """Fetch the spreadsheet along with the metadata of all of its worksheets

        Returns:
            feedsheets.Spreadsheet: The spreadsheet this client points at
        """
        feed, _ = self._require_feed(['worksheets', self.spreadsheet_key], 'fetch_spreadsheet')
        return Spreadsheet(self, feed)

    def fetch_worksheet(self, title=None, index=None):
        """Fetch one worksheet of the spreadsheet

        Either title or index should be provided.

        Args:
            title (str): The title of the worksheet
            index (int): The zero-based position of the worksheet within the spreadsheet

        Returns:
            feedsheets.Worksheet: The requested worksheet
        """
        return self.fetch_spreadsheet().fetch_worksheet(title=title, index=index)

    def post_cells_batch(self, worksheet_id, xml):
        """ POST a batch feed of cell updates for a worksheet """
        return self._make_feed_request(['cells', self.spreadsheet_key, worksheet_id], ['batch'],
                                       method='POST', query_or_data=xml)

    def set_auth_token(self, token):
        """Authenticate with a static token

        Args:
            token (str or feedsheets.auth.AuthToken): The token to send with every request

        Returns:
            None
        """
        self.credentials.set_auth_token(token)

    def update_entry(self, url, xml):
        """ PUT an edited row or cell entry to its edit link """
        return self._make_feed_request(url, method='PUT', query_or_data=xml)

    def update_worksheet_entry(self, url, xml):
        """ PUT edited worksheet metadata to the worksheet's edit link """
        return self._make_feed_request(url, method='PUT', query_or_data=xml)

    def use_service_account_auth(self, creds=None):
        """Authenticate as a service account

        Args:
            creds (dict or str): The contents of a service account JSON key file, or the path to
                one. If not provided, the key stored at ``$FEEDSHEETS_SERVICE_PATH``
                (default: ``~/.feedsheets/service_key.json``) is used

        Returns:
            None
        """
        if creds is None:
            keyfile_dict = self._get_service_key()
        elif isinstance(creds, str):
            with open(os.path.expanduser(creds)) as f:
                keyfile_dict = json.load(f)
        else:
            keyfile_dict = creds

        self.email = keyfile_dict['client_email']  # used in __repr__
        self.credentials.use_service_account(keyfile_dict, self.http)
