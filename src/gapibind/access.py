from collections.abc import Iterable
from pathlib import Path
import json
import copy
import logging

import google.auth
import google.auth.exceptions
from google.auth.transport.requests import AuthorizedSession, Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from .call import ApiService
from .fitness.service import FitnessService
from .mapsengine.service import MapsEngineService

logger = logging.getLogger(__name__)

class __GoogleApiAccess():
    """
    Class encapsulating authenticated access to the Google APIs bound here.
    See https://developers.google.com/workspace/guides/create-credentials#choose_the_access_credential_that_is_right_for_you
    for an overview of what you'll need.  Once you've obtained a secrets file you can refer the object to it
    for authentication.  For OAuth it will trigger the confirmation screens.  Sessions will be preserved
    and refreshed to confirmation does not need to happen repeatedly.
    Scopes are expected to be added by clients as needed and may trigger a refresh.

    It makes no sense to have multiple authenticated sessions per application so do this as a module singleton
    and then service retrieval (which is what most clients are really after) is a partial of get_service.
    Services are built on an AuthorizedSession so the bindings themselves never see the credentials.
    """

    __SCOPES = {
        "fitness-activity": "https://www.googleapis.com/auth/fitness.activity.write",
        "fitness-activity-ro": "https://www.googleapis.com/auth/fitness.activity.read",
        "fitness-body": "https://www.googleapis.com/auth/fitness.body.write",
        "fitness-body-ro": "https://www.googleapis.com/auth/fitness.body.read",
        "fitness-location": "https://www.googleapis.com/auth/fitness.location.write",
        "fitness-location-ro": "https://www.googleapis.com/auth/fitness.location.read",
        "mapsengine": "https://www.googleapis.com/auth/mapsengine",
        "mapsengine-ro": "https://www.googleapis.com/auth/mapsengine.readonly",
        "openid": "openid",
        "email": "email",
        "profile": "profile",
        "userinfo-email": "https://www.googleapis.com/auth/userinfo.email",
        "userinfo-profile": "https://www.googleapis.com/auth/userinfo.profile"
    }
    __SCOPE_URL_PREFIX = "https://www.googleapis.com/"

    __SERVICES = {
        "fitness:v1": FitnessService,
        "mapsengine:v1": MapsEngineService,
    }

    __DEFAULT_AUTH_PROMPT_MSG = "Please visit this URL to authorize this application: {url}"
    __DEFAULT_AUTH_FLOW_SUCCESS_MSG = "The authentication flow has completed. You may close this window."
    __DEFAULT_SECRETS = str((Path.home() / "gapibind_client_secrets.json").absolute())
    __DEFAULT_CACHE = str((Path.home() / "gapibind_tokens.json").absolute())

    def __init__(self) -> None:
        """
        config and scopes can be specified here but as this is a global singleton
        its more expected to add them later.
        """
        self.reset()

    def __bool__(self) -> bool:
        """True is we are connected and authenticated"""
        return self.connected

    def __str__(self) -> str:
        if self.connected:
            return f"Connected:{str(self.session_scopes)}"
        return f"Disconnected:{str(self.__scopes)}"

    def __repr__(self) -> str:
        return f"{str(self.__class__)}:{str(self)}"

    @classmethod
    def get_scope(cls, scope: str) -> str:
        """
        Get a scope based on simplified label.
        A raw URL will also be expected.
        """
        s = str(scope)
        sc = cls.__SCOPES.get(s, "")
        if not sc and s.startswith(cls.__SCOPE_URL_PREFIX):
            sc = s
        return sc

    @classmethod
    def service_class(cls, name: str, version: str) -> type[ApiService]|None:
        """The binding for an API name and version, None if there is none."""
        return cls.__SERVICES.get(f'{name}:{version}', None)

    @property
    def client_secrets(self) -> Path:
        """
        Path to client secrets file as provided by Google when generating access credentials.
        """
        return self.__secrets

    @client_secrets.setter
    def client_secrets(self, value: Path|str) -> None:
        """
        Set path to client secrets.
        If this changes we need to reconnect as we have new credentials.
        """
        val = value if isinstance(value, Path) else Path(str(value))
        if val != self.__secrets:
            self.__secrets = val
            if self.connected:
                self.connect()

    @property
    def cred_cache(self) -> Path:
        """
        Path to local credential cache to not have to do full authentication each time.
        """
        return self.__cache

    @cred_cache.setter
    def cred_cache(self, value: Path|str):
        """
        Set path to credential cache.
        If this changes we need to reconnect as the cache is now invalid.
        """
        val = value if isinstance(value, Path) else Path(str(value))
        if val != self.__cache:
            self.__cache = val
            if self.connected:
                self.connect()

    def clear(self):
        """Reset the access state."""
        self.__creds = None
        self.__scopes = []
        self.__services = {}

    @property
    def connected(self) -> bool:
        """
        Are we authenticated with Google?
        """
        return bool(self.__creds) and bool(self.__creds.valid)

    @property
    def session_scopes(self) -> list[str]:
        """
        Scopes authenticated by Google for this session.
        This differs to self.scopes as that is what is requested or to be requested.
        """
        if self.connected:
            return self.__creds.scopes
        return []

    @property
    def scopes(self) -> list[str]:
        """
        The scopes requested or to be requested on next authentication sequence.
        """
        return self.__scopes

    @scopes.setter
    def scopes(self, value: None|list[str]|str) -> None:
        """
        Override a new list of session scopes.
        This will trigger a reconnect if the new list contains scopes
        that are not part of the current authenticate list.
        """
        slist = []
        if value is not None:
            if isinstance(value,str) or not isinstance(value,Iterable):
                s = self.get_scope(str(value))
                if s:
                    slist.append(s)
            else:
                for v in value:
                    s = self.get_scope(str(v))
                    if s:
                        slist.append(s)
        self.__scopes = slist
        if self.__scopes and self.connected:
            self.refresh()
        else:
            self.__creds = None
            self.__services = {}

    def append_scopes(self, *args) -> bool:
        """
        Adding to the current scope list.
        Typically it is intended that client dependent modules will add the specific
        scopes they require on init.
        """
        for a in args:
            b = [a] if isinstance(a,str) or not isinstance(a, Iterable) else a
            for i in b:
                s = self.get_scope(str(i))
                if s and s not in self.__scopes:
                    self.__scopes.append(s)
        return self.refresh()

    def scope_in_session(self, scope: str) -> bool:
        """
        Is the specified scope in the currently authenicated session?
        """
        s = self.get_scope(scope)
        return bool(s) and self.connected and (s in self.session_scopes)

    @property
    def creds(self) -> Credentials|None:
        """
        Current active access credentials or None
        """
        return self.__creds

    @property
    def services(self) -> dict[str,ApiService]:
        """
        Current active services.  Can be empty.
        """
        return self.__services

    @property
    def user_agent(self) -> str|None:
        """Appended to the library User-Agent of every service handed out."""
        return self.__user_agent

    @user_agent.setter
    def user_agent(self, value: str|None) -> None:
        v = value if value is None else str(value)
        if v != self.__user_agent:
            self.__services = {}
            self.__user_agent = v

    @property
    def config(self) -> dict:
        """
        Get all configuration state as a dict.
        Convenience for getting it all at once for pushing into a json, toml, ini, etc, file.
        """
        config = {
            'secrets': self.__secrets,
            'cache': self.__cache,
            'scopes': self.__scopes,
            'server': self.auth_server,
            'port': self.auth_port,
            'user_agent': self.__user_agent
        }
        return config

    @config.setter
    def config(self, config: dict) -> None:
        """
        Set configuration state from a dict.
        Convenience method for inserting state pulled from a config file or equivalent.
        """
        reconnect = False
        v = config.get('port', None)
        if v is not None:
            self.auth_port = int(v)
        v = config.get('server', None)
        if v is not None:
            self.auth_server = str(v)
        v = config.get('scopes', [])
        if v:
            self.__scopes = [s for s in (self.get_scope(i) for i in v) if s]
            reconnect = True
        v = config.get('cache', None)
        if v is not None:
            self.__cache = Path(v)
            reconnect = True
        v = config.get('secrets', None)
        if v is not None:
            self.__secrets = Path(v)
            reconnect = True
        v = config.get('user_agent', None)
        if v is not None:
            self.user_agent = v
        v = config.get('auth_prompt_msg', None)
        if v is not None:
            self.auth_prompt_msg = str(v)
        v = config.get('flow_success_msg', None)
        if v is not None:
            self.auth_flow_success_msg = str(v)
        if reconnect and self.connected:
            self.connect()

    def reset(self) -> None:
        """
        Reset all connection state to defaults.
        """
        self.__secrets = Path(self.__DEFAULT_SECRETS)
        self.__cache = Path(self.__DEFAULT_CACHE)
        self.__creds = None
        self.__scopes = []
        self.__services = {}
        self.__user_agent = None
        self.auth_server = 'localhost'
        self.auth_port = 0
        self.auth_prompt_msg = self.__DEFAULT_AUTH_PROMPT_MSG
        self.auth_flow_success_msg = self.__DEFAULT_AUTH_FLOW_SUCCESS_MSG

    def refresh(self) -> bool:
        """
        Check the current scopes and if new requested ones are not present
        in the current session_scopes, refresh the access.
        """
        scopes_accounted = all(s in self.session_scopes for s in self.__scopes)
        if self.connected and not scopes_accounted:
            return self.connect()
        return True

    def connect(self) -> bool:
        """
        Establish a new authentication session.
        If successful will save the credentials in the cache file to reuse
        on subsequent invocations.
        """
        self.__creds = None
        self.__services = {}
        if not self.__scopes:
            return False
        requested_scopes = copy.copy(self.__scopes)
        if (self.__cache.exists() and self.__cache.is_file()):
            # the cache doesn't know about scope changes, a cache without
            # all of the requested ones is useless
            cf = self.__cache.resolve()
            with open(cf, 'r', encoding='utf-8') as f:
                j = json.load(f)
            scopes = j.get('scopes',[])
            if not all(s in scopes for s in requested_scopes):
                self.__cache.unlink()
            else:
                self.__creds = Credentials.from_authorized_user_file(cf, requested_scopes)
        if not self.connected:
            if self.__creds and self.__creds.refresh_token:
                try:
                    self.__creds.refresh(Request())
                except google.auth.exceptions.RefreshError as e:
                    logger.warning("failed to refresh stored creds: %s...deleting cred cache and re-authorizing", e)
                finally:
                    if not self.connected:
                        self.__cache.unlink(missing_ok=True)

            if not self.connected:
                if self.__secrets.exists() and self.__secrets.is_file():
                    flow = InstalledAppFlow.from_client_secrets_file(self.__secrets, requested_scopes)
                    self.__creds = flow.run_local_server(host=self.auth_server, port=self.auth_port,
                                                         authorization_prompt_message=self.auth_prompt_msg,
                                                         success_message=self.auth_flow_success_msg
                                                         )
                else:
                    # final hail mary
                    try:
                        # this will look at the GOOGLE_APPLICATION_CREDENTIALS envvar and
                        # other cloud default locations
                        self.__creds, _ = google.auth.default(requested_scopes)
                        if not self.connected:
                            self.__creds.refresh(Request())
                    except google.auth.exceptions.GoogleAuthError as e:
                        logger.warning("no default credentials available: %s", e)
                        self.__creds = None

            if self.connected and getattr(self.__creds, 'refresh_token', None):
                # only user credentials are worth caching, default ones are found again anyway
                user_info = {'refresh_token': self.__creds.refresh_token, 'client_id': self.__creds.client_id,
                            'client_secret': self.__creds.client_secret, 'scopes': requested_scopes}
                with open(self.__cache.resolve(), 'w', encoding='utf-8') as f:
                    json.dump(user_info, f, ensure_ascii=False, indent=2)
        return self.connected

    def get_service(self, name: str, version: str) -> ApiService|None:
        """
        Build the requested service if not already available, connecting if required.
        Can return None if no connection present.
        """
        cls = self.service_class(name, version)
        if cls is None:
            raise ValueError(f"no bindings for {name} {version}")
        if not self.connected:
            self.connect()
        if not self.connected:
            return None
        id = f'{name}:{version}'
        s = self.__services.get(id, None)
        if s is None:
            s = cls(AuthorizedSession(self.__creds), user_agent=self.__user_agent)
            self.__services[id] = s
        return s

gws = __GoogleApiAccess()
