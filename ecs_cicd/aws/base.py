"""Shared base for the per-service call mixins."""

from typing import Any


class ClientSource:
    """Anything that can hand out boto3 clients by service name."""

    def _client(self, service: str) -> Any:
        raise NotImplementedError
