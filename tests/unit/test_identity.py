"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

from dataclasses import FrozenInstanceError
from datetime import UTC, datetime, timedelta, timezone

import pytest
from freezegun import freeze_time

from sigv4_client import Credentials


class TestCredentials:
    @freeze_time("2024-06-01 00:00:00")
    @pytest.mark.parametrize(
        "expiration, expired",
        [
            (None, False),
            (datetime(2024, 6, 1, tzinfo=UTC) + timedelta(minutes=5), False),
            (datetime(2024, 6, 1, tzinfo=UTC) - timedelta(seconds=1), True),
        ],
    )
    def test_is_expired(self, expiration: datetime | None, expired: bool):
        credentials = Credentials(
            access_key_id="AKID", secret_access_key="secret", expiration=expiration
        )
        assert credentials.is_expired is expired

    def test_naive_expiration_is_utc(self):
        credentials = Credentials(
            access_key_id="AKID",
            secret_access_key="secret",
            expiration=datetime(2000, 1, 1),
        )
        assert credentials.expiration == datetime(2000, 1, 1, tzinfo=UTC)
        assert credentials.is_expired is True

    def test_aware_expiration_converted_to_utc(self):
        credentials = Credentials(
            access_key_id="AKID",
            secret_access_key="secret",
            expiration=datetime(2000, 1, 1, 2, tzinfo=timezone(timedelta(hours=2))),
        )
        assert credentials.expiration == datetime(2000, 1, 1, tzinfo=UTC)
        assert credentials.expiration.tzinfo is UTC

    def test_immutable(self):
        credentials = Credentials(access_key_id="AKID", secret_access_key="secret")
        with pytest.raises(FrozenInstanceError):
            credentials.secret_access_key = "other"  # type: ignore[misc]

    def test_repr_hides_secrets(self):
        credentials = Credentials(
            access_key_id="AKID", secret_access_key="secret", session_token="token"
        )
        assert "secret'" not in repr(credentials)
        assert "'token'" not in repr(credentials)
        assert "AKID" in repr(credentials)
