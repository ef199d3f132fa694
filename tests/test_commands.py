"""Tests for command formatting."""

import math

import pytest

from atlonaconnect.protocol import commands


class TestCommandFormatting:
    """Tests for the command builders."""

    def test_literals(self):
        assert commands.power(True) == "PWON"
        assert commands.power(False) == "PWOFF"
        assert commands.power_status() == "PWSTA"
        assert commands.panel_lock(True) == "Lock"
        assert commands.panel_lock(False) == "Unlock"
        assert commands.reset_all_ports() == "All#"
        assert commands.ir(True) == "IRON"
        assert commands.ir(False) == "IROFF"
        assert commands.matrix_reset() == "Mreset"
        assert commands.broadcast_on() == "Broadcast on"
        assert commands.ping() == "ping"

    def test_port_commands(self):
        assert commands.port_power(3, True) == "x3$ on"
        assert commands.port_power(3, False) == "x3$ off"
        assert commands.port_power_status(3) == "x3$ sta"
        assert commands.port_all(2) == "x2All"
        assert commands.switch_port(2, 4) == "x2AVx4"

    def test_mirror_commands(self):
        assert commands.mirror(5, 1) == "MirrorHdmi5 Out1"
        assert commands.mirror_status(5) == "MirrorHdmi5 sta"
        assert commands.unmirror(5) == "UnMirror5"

    def test_volume_commands(self):
        assert commands.volume(1, -20) == "VOUT1 -20"
        assert commands.volume(1, -20.0) == "VOUT1 -20"
        assert commands.volume(2, 2.5) == "VOUT2 2.5"
        assert commands.volume_status(1) == "VOUT1 sta"
        assert commands.volume_mute(1, True) == "VOUTMute1 on"
        assert commands.volume_mute_status(1) == "VOUTMute1 sta"

    def test_status_commands(self):
        assert commands.port_status() == "Status"
        assert commands.port_status(8) == "Statusx8"

    def test_preset_commands(self):
        assert commands.save_preset(1) == "Save1"
        assert commands.recall_preset(2) == "Recall2"
        assert commands.clear_preset(3) == "Clear3"


class TestCommandValidation:
    """Tests for argument validation."""

    @pytest.mark.parametrize(
        "build",
        [
            lambda n: commands.port_power(n, True),
            lambda n: commands.port_power_status(n),
            lambda n: commands.port_all(n),
            lambda n: commands.switch_port(n, 1),
            lambda n: commands.switch_port(1, n),
            lambda n: commands.mirror(n, 1),
            lambda n: commands.mirror(5, n),
            lambda n: commands.unmirror(n),
            lambda n: commands.volume(n, 0),
            lambda n: commands.volume_mute(n, True),
            lambda n: commands.port_status(n),
            lambda n: commands.save_preset(n),
            lambda n: commands.recall_preset(n),
            lambda n: commands.clear_preset(n),
        ],
    )
    @pytest.mark.parametrize("number", [0, -1])
    def test_non_positive_numbers_rejected(self, build, number):
        with pytest.raises(ValueError, match="greater than 0"):
            build(number)

    @pytest.mark.parametrize("level", [-79, 15, 0, -78.5])
    def test_volume_in_range_accepted(self, level):
        assert commands.volume(1, level).startswith("VOUT1 ")

    @pytest.mark.parametrize("level", [-80, 16, -79.5, 15.1, math.nan, math.inf, -math.inf])
    def test_volume_out_of_range_rejected(self, level):
        with pytest.raises(ValueError, match="between -79"):
            commands.volume(1, level)

    @pytest.mark.parametrize("command", ["", "   ", "\r\n", None])
    def test_blank_command_rejected(self, command):
        with pytest.raises(ValueError):
            commands.validate_command(command)

    def test_valid_command_returned(self):
        assert commands.validate_command("PWON") == "PWON"
