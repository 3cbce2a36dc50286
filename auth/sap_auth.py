# ================================================================
#  SAP ODATA AUTH MODULE
#  ---------------------------------------------------------------
#  - Technical-user HTTP Basic credentials for the portal service
#  - Session factory with configurable certificate validation
#  - Vendor credentials are NOT handled here (see services/gateway.py)
# ================================================================

import logging

import requests
import urllib3
from requests.auth import HTTPBasicAuth

from config import SapSettings

logger = logging.getLogger("sap_auth")

JSON_ACCEPT = "application/json"
XML_ACCEPT = "application/xml"


class SapAuth:
    def __init__(self, settings: SapSettings):
        self.settings = settings

    def basic_auth(self) -> HTTPBasicAuth:
        return HTTPBasicAuth(self.settings.username, self.settings.password)

    def new_session(self) -> requests.Session:
        """
        One session per inbound request; nothing is shared across requests.
        """
        session = requests.Session()
        session.auth = self.basic_auth()
        session.verify = self.settings.verify
        session.headers.update({"Accept": JSON_ACCEPT})
        if session.verify is False:
            # Self-signed SAP dev systems; the operator opted out via SAP_VERIFY_TLS.
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
            logger.debug("[Auth] TLS certificate validation disabled for %s", self.settings.base_url)
        return session
