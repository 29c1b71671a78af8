"""
Credential state for the spreadsheets feed.

A feed client is always in one of three modes:

    anonymous
        No credential; only public sheets can be read.

    token
        A static token supplied by the caller, sent as-is until replaced.

    jwt
        A service account whose signed JWT is exchanged for a short-lived bearer token. The token
        is renewed before a request whenever its expiry has passed.
"""
import datetime as dt
import logging

from oauth2client.service_account import ServiceAccountCredentials


logger = logging.getLogger(__name__)

FEEDS_SCOPE = ('https://spreadsheets.google.com/feeds',)

ANONYMOUS = 'anonymous'
TOKEN = 'token'
JWT = 'jwt'


class AuthToken(object):
    def __init__(self, value, token_type=None, expires=None):
        """A token to attach to feed requests

        Args:
            value (str): The token itself
            token_type (str): 'Bearer' for OAuth2 access tokens. Anything else is sent using the
                legacy ClientLogin header
            expires (datetime.datetime): Naive UTC expiry time, if the token expires
        """
        self.value = value
        self.token_type = token_type
        self.expires = expires

    def __repr__(self):
        msg = "<{module}.{name}(token_type='{token_type}', expires='{expires}')>"
        return msg.format(module=self.__class__.__module__,
                          name=self.__class__.__name__,
                          token_type=self.token_type,
                          expires=self.expires)

    @property
    def header(self):
        """ The value of the Authorization header for this token """
        if self.token_type == 'Bearer':
            return 'Bearer {}'.format(self.value)
        return 'GoogleLogin auth={}'.format(self.value)

    def is_expired(self, now=None):
        """Whether the expiry of this token lies in the past

        Tokens without an expiry never expire.
        """
        if self.expires is None:
            return False
        now = now or dt.datetime.utcnow()
        return self.expires < now


class CredentialManager(object):
    def __init__(self, token=None):
        """Hold the credential used by a feed client and keep it fresh

        Args:
            token (str or feedsheets.auth.AuthToken): An optional static token to start with
        """
        self.mode = ANONYMOUS
        self.token = None
        self.service_credentials = None
        if token is not None:
            self.set_auth_token(token)

    def __repr__(self):
        msg = "<{module}.{name}(mode='{mode}')>"
        return msg.format(module=self.__class__.__module__,
                          name=self.__class__.__name__,
                          mode=self.mode)

    @property
    def is_authenticated(self):
        """ True when a token is held, whatever its origin """
        return self.token is not None

    def authorization_header(self):
        """ Return the headers to add to a request for the current credential """
        if self.token is None:
            return {}
        return {'Authorization': self.token.header}

    def refresh_if_needed(self, http):
        """Renew the bearer token of a service account if it has expired

        Static tokens are never renewed; the service rejects them once they are stale.

        Args:
            http (httplib2.Http): Transport used to exchange the JWT for a token
        """
        if self.mode != JWT:
            return
        if self.token is not None and not self.token.is_expired():
            return
        self._renew_jwt_auth(http)

    def set_auth_token(self, token):
        """Use a static token from now on

        Args:
            token (str or feedsheets.auth.AuthToken): A bare string is treated as a legacy
                ClientLogin token
        """
        if not isinstance(token, AuthToken):
            token = AuthToken(token)
        if self.mode == ANONYMOUS:
            self.mode = TOKEN
        self.token = token

    def use_service_account(self, keyfile_dict, http):
        """Authenticate as a service account

        Args:
            keyfile_dict (dict): The contents of a service account JSON key file
            http (httplib2.Http): Transport used to exchange the JWT for a token
        """
        self.service_credentials = ServiceAccountCredentials.from_json_keyfile_dict(
            keyfile_dict=keyfile_dict,
            scopes=FEEDS_SCOPE
        )
        self._renew_jwt_auth(http)

    def _renew_jwt_auth(self, http):
        self.mode = JWT
        logger.debug('Renewing service account token for %s',
                     self.service_credentials.service_account_email)
        self.service_credentials.refresh(http)
        self.set_auth_token(AuthToken(self.service_credentials.access_token,
                                      token_type='Bearer',
                                      expires=self.service_credentials.token_expiry))
