"""Tests for arauth.auth.providers -- credential source selection."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import google.auth.exceptions
import pytest

from arauth.auth import DefaultCredentialProvider, GcloudCredentials, create_credential_provider
from arauth.models import CLOUD_PLATFORM_SCOPE, CredentialsConfig, CredentialSource


class TestDefaultCredentialProvider:
    def test_prefers_application_default_credentials(self) -> None:
        adc = MagicMock()
        provider = DefaultCredentialProvider()
        with patch("arauth.auth.providers.google.auth.default", return_value=(adc, "proj")) as default:
            assert provider.get_credential() is adc
        default.assert_called_once_with(scopes=[CLOUD_PLATFORM_SCOPE])

    def test_falls_back_to_gcloud(self) -> None:
        provider = DefaultCredentialProvider(gcloud_command="my-gcloud")
        with patch(
            "arauth.auth.providers.google.auth.default",
            side_effect=google.auth.exceptions.DefaultCredentialsError("none"),
        ):
            creds = provider.get_credential()
        assert isinstance(creds, GcloudCredentials)
        assert creds.command == "my-gcloud"

    def test_adc_only_does_not_fall_back(self) -> None:
        provider = DefaultCredentialProvider(source=CredentialSource.ADC)
        with patch(
            "arauth.auth.providers.google.auth.default",
            side_effect=google.auth.exceptions.DefaultCredentialsError("none"),
        ):
            with pytest.raises(google.auth.exceptions.DefaultCredentialsError):
                provider.get_credential()

    def test_gcloud_only_skips_adc(self) -> None:
        provider = DefaultCredentialProvider(source=CredentialSource.GCLOUD)
        with patch("arauth.auth.providers.google.auth.default") as default:
            creds = provider.get_credential()
        default.assert_not_called()
        assert isinstance(creds, GcloudCredentials)

    def test_custom_scopes(self) -> None:
        provider = DefaultCredentialProvider(scopes=["scope-a"])
        with patch(
            "arauth.auth.providers.google.auth.default", return_value=(MagicMock(), None)
        ) as default:
            provider.get_credential()
        default.assert_called_once_with(scopes=["scope-a"])


class TestCreateCredentialProvider:
    def test_from_config(self) -> None:
        config = CredentialsConfig(source="gcloud", gcloud_command="/usr/bin/gcloud")
        provider = create_credential_provider(config)
        assert isinstance(provider, DefaultCredentialProvider)
        assert provider.source is CredentialSource.GCLOUD
        creds = provider.get_credential()
        assert isinstance(creds, GcloudCredentials)
        assert creds.command == "/usr/bin/gcloud"
