"""
Boto client creation for the Lambda API.

Clients are created through a ``ClientFactory``, which caches them per set of creation parameters, so that
the connection pool of a client is shared by all invocations.
"""
import logging
import threading
from functools import lru_cache
from typing import Optional

from boto3.session import Session
from botocore.client import BaseClient
from botocore.config import Config

from sidecar import config as sidecar_config

LOG = logging.getLogger(__name__)


class ClientFactory:
    """
    Factory to build the AWS client.

    Boto client creation is resource intensive. This class caches all Boto
    clients it creates and must be used instead of directly using boto lib.
    """

    def __init__(self, session: Session = None, config: Config = None):
        """
        :param session: Session to be used for client creation. Will create a new session if not provided.
            Please note that sessions are not generally thread safe.
            The factory itself has a lock for the session, so as long as you only use the session in one factory,
            it should be fine using the factory in a multithreaded context.
        :param config: Config used as default for client creation.
        """
        self._config: Config = config or Config(
            max_pool_connections=sidecar_config.SIDECAR_MAX_WORKERS
        )
        self._session: Session = session or Session()
        self._create_client_lock = threading.RLock()

    def get_client(
        self,
        service_name: str,
        region_name: Optional[str] = None,
        aws_access_key_id: Optional[str] = None,
        aws_secret_access_key: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        config: Optional[Config] = None,
    ) -> BaseClient:
        """
        Build and return a client for the given service.

        If either of the access keys or region are set to None, they are loaded from following
        locations:
        - AWS environment variables
        - Credentials file `~/.aws/credentials`
        - Config file `~/.aws/config`

        :param service_name: Service to build the client for, eg. `lambda`
        :param region_name: Name of the AWS region to be associated with the client
        :param aws_access_key_id: Access key to use for the client.
        :param aws_secret_access_key: Secret key to use for the client.
        :param endpoint_url: Full endpoint URL to be used by the client.
            Defaults to appropriate AWS endpoint.
        :param config: Boto config for advanced use.
        """
        if config is None:
            config = self._config
        else:
            config = self._config.merge(config)

        return self._get_client(
            service_name=service_name,
            region_name=region_name or self._session.region_name,
            endpoint_url=endpoint_url,
            aws_access_key_id=aws_access_key_id,
            aws_secret_access_key=aws_secret_access_key,
            config=config,
        )

    def lambda_client(self) -> BaseClient:
        """Return the Lambda client as configured by the SIDECAR_* environment variables."""
        return self.get_client(
            "lambda",
            region_name=sidecar_config.SIDECAR_REGION,
            aws_access_key_id=sidecar_config.SIDECAR_ACCESS_KEY_ID,
            aws_secret_access_key=sidecar_config.SIDECAR_SECRET_ACCESS_KEY,
            endpoint_url=sidecar_config.SIDECAR_ENDPOINT_URL,
        )

    # TODO @lru_cache here keeps a reference to `self`, a weakref based cache would allow factories to be collected
    @lru_cache(maxsize=64)
    def _get_client(
        self,
        service_name: str,
        region_name: str,
        endpoint_url: Optional[str],
        aws_access_key_id: Optional[str],
        aws_secret_access_key: Optional[str],
        config: Config,
    ) -> BaseClient:
        """
        Returns a boto3 client with the given configuration.
        This is a cached call, so modifications to the used client will affect others.
        Client creation is behind a lock as it is not generally thread safe.
        """
        with self._create_client_lock:
            default_config = (
                Config(retries={"max_attempts": 0})
                if sidecar_config.SIDECAR_DISABLE_BOTO_RETRIES
                else Config()
            )
            LOG.debug("Creating %s client for region %s", service_name, region_name)

            return self._session.client(
                service_name=service_name,
                region_name=region_name,
                endpoint_url=endpoint_url,
                aws_access_key_id=aws_access_key_id,
                aws_secret_access_key=aws_secret_access_key,
                config=config.merge(default_config),
            )


connect_to = ClientFactory()
