"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

from dataclasses import dataclass
from datetime import UTC, datetime

from .interfaces.identity import Identity


@dataclass(frozen=True, kw_only=True)
class Credentials(Identity):
    access_key_id: str
    secret_access_key: str
    session_token: str | None = None
    expiration: datetime | None = None

    def __post_init__(self) -> None:
        # Naive expirations are taken to be UTC.
        if self.expiration is not None:
            if self.expiration.tzinfo is None:
                expiration = self.expiration.replace(tzinfo=UTC)
            else:
                expiration = self.expiration.astimezone(UTC)
            object.__setattr__(self, "expiration", expiration)

    @property
    def is_expired(self) -> bool:
        """Whether the identity is expired."""
        if self.expiration is None:
            return False
        return self.expiration < datetime.now(UTC)

    def __repr__(self) -> str:
        return (
            f"Credentials(access_key_id={self.access_key_id!r}, "
            f"secret_access_key='***', "
            f"session_token={('***' if self.session_token else None)!r}, "
            f"expiration={self.expiration!r})"
        )
