"""Tests for configuration models."""

import pytest
from pydantic import ValidationError

from atlonaconnect.models.config import MODEL_CAPABILITIES, Capabilities, MatrixConfig


class TestMatrixConfig:
    """Tests for MatrixConfig model."""

    def test_defaults(self):
        config = MatrixConfig()
        assert config.host is None
        assert config.port == 23
        assert config.login_timeout == 5.0
        assert config.has_username is False
        assert config.has_password is False

    def test_credentials(self):
        config = MatrixConfig(host="10.0.0.5", username="admin", password="secret")
        assert config.has_username
        assert config.has_password

    def test_blank_credentials_not_set(self):
        config = MatrixConfig(username="  ", password="")
        assert config.has_username is False
        assert config.has_password is False

    def test_repr_hides_password(self):
        config = MatrixConfig(host="10.0.0.5", username="admin", password="secret")
        assert "secret" not in repr(config)
        assert "admin" in repr(config)

    def test_immutable(self):
        """Test that config is frozen."""
        config = MatrixConfig(host="10.0.0.5")
        with pytest.raises(ValidationError):
            config.host = "10.0.0.6"

    @pytest.mark.parametrize("port", [0, 65536])
    def test_invalid_port(self, port):
        with pytest.raises(ValidationError):
            MatrixConfig(port=port)

    def test_invalid_timeout(self):
        with pytest.raises(ValidationError):
            MatrixConfig(login_timeout=0)

    @pytest.mark.parametrize(
        "credentials",
        [
            {"username": "admin\r\nPWOFF"},
            {"username": "adm\tin"},
            {"password": "secret\n"},
            {"password": "s\u00e9cret"},
            {"username": "\u7ba1\u7406"},
        ],
    )
    def test_credentials_must_be_printable_ascii(self, credentials):
        with pytest.raises(ValidationError, match="printable ASCII"):
            MatrixConfig(**credentials)

    def test_invalid_password_not_in_error(self):
        with pytest.raises(ValidationError) as exc_info:
            MatrixConfig(username="admin", password="top\nsecret")
        assert "secret" not in str(exc_info.value)

    def test_printable_credentials_accepted(self):
        config = MatrixConfig(username="admin user", password="p@ss~w0rd!")
        assert config.password == "p@ss~w0rd!"


class TestCapabilities:
    """Tests for Capabilities model."""

    @pytest.mark.parametrize(
        "model, power, audio, hdmi",
        [
            ("AT-UHD-PRO3-44M", 5, 3, {5}),
            ("AT-UHD-PRO3-66M", 8, 4, {6, 7, 8}),
            ("AT-UHD-PRO3-88M", 10, 6, {8, 9, 10}),
            ("AT-UHD-PRO3-1616M", 5, 3, {17, 18, 19, 20}),
        ],
    )
    def test_known_models(self, model, power, audio, hdmi):
        caps = Capabilities.for_model(model)
        assert caps.nbr_power_ports == power
        assert caps.nbr_audio_ports == audio
        assert caps.hdmi_ports == frozenset(hdmi)

    def test_short_model_name(self):
        assert Capabilities.for_model("66m") is MODEL_CAPABILITIES["66M"]

    def test_unknown_model(self):
        with pytest.raises(KeyError, match="Unknown PRO3 model"):
            Capabilities.for_model("AT-UHD-PRO3-1010M")

    def test_is_hdmi_port(self):
        caps = Capabilities.for_model("88M")
        assert caps.is_hdmi_port(9)
        assert not caps.is_hdmi_port(1)

    def test_custom_capabilities(self):
        caps = Capabilities(nbr_power_ports=2, nbr_audio_ports=0, hdmi_ports={3})
        assert caps.hdmi_ports == frozenset({3})

    def test_invalid_hdmi_port(self):
        with pytest.raises(ValidationError):
            Capabilities(nbr_power_ports=2, nbr_audio_ports=1, hdmi_ports={0})

    def test_negative_port_count(self):
        with pytest.raises(ValidationError):
            Capabilities(nbr_power_ports=-1, nbr_audio_ports=1)
