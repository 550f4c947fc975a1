# This project was developed with assistance from AI tools.
"""Third-party integrations -- comparable sales, geocoding, e-signature.

Each client is a thin httpx proxy. When its credentials are not configured
it returns clearly labelled mock data (``is_mock=True``) instead of calling
out; when a configured provider fails it raises ``IntegrationError``.
"""


class IntegrationError(Exception):
    """A configured provider rejected the request or could not be reached."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        self.message = message
        super().__init__(f"{provider}: {message}")
