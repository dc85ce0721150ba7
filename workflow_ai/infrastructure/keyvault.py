"""Azure Key Vault access for the provider key and other startup secrets."""

import os
import logging
from typing import Optional

from azure.core.exceptions import AzureError
from azure.identity import DefaultAzureCredential
from azure.keyvault.secrets import SecretClient

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)


class AKV:
    """Azure Key Vault client with pre-loaded secrets.

    Secrets are read once at startup and kept in memory for the lifetime of
    the process. Rotating the Anthropic key means restarting the app.

    Authenticates with DefaultAzureCredential (Azure CLI locally, Managed
    Identity in App Service).
    """

    def __init__(self, vault_name: Optional[str] = None, client: Optional[SecretClient] = None):
        """Initialize Key Vault client.

        Args:
            vault_name: Key Vault name. Defaults to AZURE_KEYVAULT_NAME env var.
            client: Pre-built SecretClient, mainly for tests

        Raises:
            ConfigurationError: If no vault name is available
        """
        self.vault_name = vault_name or os.getenv("AZURE_KEYVAULT_NAME")
        if not self.vault_name:
            raise ConfigurationError("vault_name required or set AZURE_KEYVAULT_NAME")

        self.vault_url = f"https://{self.vault_name}.vault.azure.net/"
        self._client = client or SecretClient(vault_url=self.vault_url, credential=DefaultAzureCredential())
        self._secrets: dict[str, str] = {}

    def load_secrets(self, names: list[str]) -> None:
        """Pre-load secrets at startup, failing fast on the first missing one.

        Raises:
            ConfigurationError: If any secret is not found or has no value
        """
        for name in names:
            try:
                secret = self._client.get_secret(name)
            except AzureError as e:
                raise ConfigurationError(f"Failed to load secret '{name}': {e}", cause=e) from e
            if secret.value is None:
                raise ConfigurationError(f"Secret '{name}' has no value")
            self._secrets[name] = secret.value
            logger.info(f"Loaded secret: {name}")

    def get_secret(self, name: str) -> str:
        """Get a pre-loaded secret by name.

        Raises:
            KeyError: If secret was not pre-loaded
        """
        if name not in self._secrets:
            raise KeyError(f"Secret '{name}' not pre-loaded. Add it to the lifespan secret list.")
        return self._secrets[name]
