import json
import logging
import os
from dotenv import load_dotenv

# Load environment variables from .env file if it exists
load_dotenv()

class Config:
    """
    Configuration class for commute routing.
    This class loads configuration values from environment variables or uses default values.
    """
    # General configuration
    DEBUG = os.environ.get('DEBUG', 'False') == 'True'

    # Timezone used when the provider does not report one
    TIMEZONE = os.environ.get('TIMEZONE', 'America/Los_Angeles')

    # Per-request timeout for every network call, in seconds
    HTTP_TIMEOUT = float(os.environ.get('HTTP_TIMEOUT', 10))

    DIRECTIONS_URL = os.environ.get('DIRECTIONS_URL', 'https://maps.googleapis.com/maps/api/directions/json')
    IP_API_URL = os.environ.get('IP_API_URL', 'http://ip-api.com/json/')
    IPINFO_URL = os.environ.get('IPINFO_URL', 'https://ipinfo.io/json')

    # Center of the Seattle metro area, used when nothing else resolves
    DEFAULT_LOCATION = os.environ.get('DEFAULT_LOCATION', '47.6062,-122.3321')

    CONFIG_PATH = os.environ.get(
        'COMMUTE_CONFIG_PATH',
        os.path.join(os.path.expanduser('~'), '.seattle-commute', 'config.json')
    )


class UserConfig:
    """
    Persisted user settings: home address, optional work address and the
    Google Maps API key. Read-only here; missing fields are filled from the
    environment.
    """

    def __init__(self, home_address="", work_address="", google_api_key=""):
        self.home_address = home_address or os.environ.get('COMMUTE_HOME_ADDRESS', '')
        self.work_address = work_address or os.environ.get('COMMUTE_WORK_ADDRESS', '')
        self.google_api_key = google_api_key or os.environ.get('GOOGLE_MAPS_API_KEY', '')

    @classmethod
    def load(cls, path=None):
        """
        Load the config file. A missing file yields an empty config;
        unreadable or invalid JSON raises.
        """
        path = path or Config.CONFIG_PATH
        if not os.path.exists(path):
            logging.debug(f"No config file at {path}, using environment only")
            return cls()

        with open(path, 'r') as f:
            data = json.load(f)

        return cls(
            home_address=data.get('home_address', ''),
            work_address=data.get('work_address', ''),
            google_api_key=data.get('google_api_key', ''),
        )

    def is_valid(self):
        return bool(self.home_address and self.google_api_key)

    def __repr__(self):
        return f"UserConfig(home={self.home_address!r}, work={self.work_address!r})"
