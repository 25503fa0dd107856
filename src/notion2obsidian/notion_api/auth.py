"""Authentication module for loading the Notion integration token.

The token is taken from the command line when given, otherwise from the
NOTION_TOKEN environment variable (a .env file is honoured through
python-dotenv).
"""

import os
from typing import NamedTuple, Optional

from dotenv import load_dotenv

from .errors import InvalidTokenError

TOKEN_ENV_VAR = 'NOTION_TOKEN'


class Credentials(NamedTuple):
    """Notion API credentials."""
    token: str


class Authenticator:
    """Loads and validates the Notion integration token.

    The token is never logged.

    Environment variables:
        NOTION_TOKEN: Internal integration secret (used when no explicit
            token is passed)

    Raises:
        InvalidTokenError: If no token is available

    Example:
        >>> auth = Authenticator()
        >>> creds = auth.get_credentials()
    """

    def __init__(self, token: Optional[str] = None):
        """Initialize the authenticator by loading environment variables from .env file.

        Args:
            token: Explicit token that takes precedence over the environment
        """
        load_dotenv()
        self._token = token

    def get_credentials(self) -> Credentials:
        """Get the Notion credentials.

        Returns:
            Credentials: A named tuple containing the token

        Raises:
            InvalidTokenError: If the token is missing
        """
        token = self._token or os.getenv(TOKEN_ENV_VAR)
        if not token or not token.strip():
            raise InvalidTokenError(
                reason=f"no token given and {TOKEN_ENV_VAR} is not set"
            )
        return Credentials(token=token.strip())
