import json
import boto3
import os
import time
from typing import Dict, Any
import logging

logger = logging.getLogger(__name__)

class SecretsManager:
    """
    Retrieves and caches PixSoul credentials from AWS Secrets Manager.

    Values are cached with a TTL so rotated database and SMTP credentials
    are picked up without a restart.
    """

    def __init__(self, region_name: str = None):
        """
        Initialize the secrets manager.

        Args:
            region_name: AWS region name, defaults to the AWS_REGION env variable
        """
        self.region_name = region_name or os.environ.get('AWS_REGION', 'us-east-1')
        self._client = None
        self._cache = {}
        self._cache_timestamps = {}
        self._cache_ttl = 300  # seconds

    @property
    def client(self):
        """Lazy-loaded Secrets Manager client"""
        if self._client is None:
            session = boto3.session.Session()
            self._client = session.client(
                service_name='secretsmanager',
                region_name=self.region_name
            )
        return self._client

    def _cached(self, secret_id: str, fetch) -> str:
        now = time.time()
        if (secret_id in self._cache and
                now - self._cache_timestamps[secret_id] < self._cache_ttl):
            logger.debug(f"Returning cached secret for {secret_id}")
            return self._cache[secret_id]

        logger.info(f"Fetching fresh secret for {secret_id}")
        try:
            value = fetch(secret_id)
        except Exception as e:
            # Stale cache beats no credentials at all
            if secret_id in self._cache:
                logger.warning(f"Fresh secret fetch failed for {secret_id}, using stale cache: {e}")
                return self._cache[secret_id]
            raise
        self._cache[secret_id] = value
        self._cache_timestamps[secret_id] = now
        return value

    def _fetch_secret(self, secret_id: str) -> str:
        try:
            response = self.client.get_secret_value(SecretId=secret_id)
        except Exception as e:
            logger.error(f"Failed to get secret {secret_id}: {e}")
            raise
        if 'SecretBinary' in response:
            return response['SecretBinary']
        return response['SecretString']

    def get_secret(self, secret_id: str) -> str:
        """
        Get a secret value from Secrets Manager with TTL-based caching.

        Args:
            secret_id: The secret ID or ARN

        Returns:
            The secret value as a string
        """
        return self._cached(secret_id, self._fetch_secret)

    def get_json_secret(self, secret_id: str) -> Dict[str, Any]:
        """Get a JSON secret and parse it."""
        return json.loads(self.get_secret(secret_id))

    def get_db_credentials(self) -> Dict[str, str]:
        """
        Get PostgreSQL credentials. RDS-managed secrets carry username,
        password, host, port and dbname.
        """
        return self.get_json_secret(os.environ.get('DATABASE_SECRETS_NAME', 'pixsoul/rds'))

    def get_smtp_password(self) -> str:
        """Get the password of the SMTP account used for OTP mail."""
        return self.get_secret(os.environ.get('SMTP_SECRET_NAME', 'pixsoul/smtp-password'))
