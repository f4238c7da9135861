#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""Tests for `pytplinklan` CLI interface."""
import json
import unittest

from click.testing import CliRunner

from pytplinklan import cli
from tests.tplink_mock import start_device, stop_device


class TestCLI(unittest.TestCase):
    """Tests for pytplinklan CLI interface."""

    def setUp(self):
        """Set up test fixtures, if any."""
        self.runner = CliRunner()

    def invoke_device(self, device, *args):
        return self.runner.invoke(
            cli.cli, ['--host', '127.0.0.1', '--port', str(device.port),
                      '--timeout', '1'] + list(args))

    def test_cli_no_args(self):
        result = self.runner.invoke(cli.cli)
        assert 'No host name given, see usage below' in result.output
        assert 'Commands:' in result.output
        assert result.exit_code == 1

    def test_cli_invalid_arg(self):
        result = self.runner.invoke(cli.cli, ['hello'])
        assert 'No such command' in result.output

    def test_cli_help(self):
        result = self.runner.invoke(cli.cli, ['--help'])
        assert result.exit_code == 0
        assert 'Show this message and exit.' in result.output

    def test_cli_version(self):
        result = self.runner.invoke(cli.cli, ['--version'])
        assert result.exit_code == 0
        assert ', version' in result.output

    def test_cli_no_host_id(self):
        result = self.runner.invoke(cli.cli, ['--host'])
        assert '--host' in result.output
        assert 'requires an argument' in result.output

    def test_cli_state_no_host(self):
        result = self.runner.invoke(cli.cli, ['state'])
        assert 'No host name given, see usage below' in result.output

    def test_cli_state(self):
        device = start_device("State", "plug")

        try:
            result = self.invoke_device(device, 'state')
        finally:
            stop_device(device)

        assert result.exit_code == 0
        assert '== Device: StateMock (127.0.0.1) ==' in result.output
        assert 'Model: HS100(UK)' in result.output
        assert 'State: OFF' in result.output

    def test_cli_state_strip(self):
        device = start_device("Strip", "strip")

        try:
            result = self.invoke_device(device, 'state')
        finally:
            stop_device(device)

        assert result.exit_code == 0
        assert '== Device: StripMock (127.0.0.1) ==' in result.output
        assert 'Model: HS300(US)' in result.output
        assert 'State: n/a' in result.output

    def test_cli_on(self):
        device = start_device("PlugOn", "plug")

        try:
            result = self.invoke_device(device, 'on')
        finally:
            stop_device(device)

        assert 'State: ON' in result.output.split('New state:')[1]
        assert device.sys_info['relay_state'] == 1

    def test_cli_off_bulb(self):
        device = start_device("BulbOff", "bulb")
        device.sys_info['light_state']['on_off'] = 1

        try:
            result = self.invoke_device(device, 'off')
        finally:
            stop_device(device)

        assert 'Initial state:' in result.output
        assert 'State: OFF' in result.output.split('New state:')[1]

    def test_cli_raw(self):
        device = start_device("Raw", "plug")

        try:
            result = self.invoke_device(device, 'raw', 'system', 'set_relay_state',
                                        '{"state": 1}')
        finally:
            stop_device(device)

        assert result.exit_code == 0
        assert json.loads(result.output) == {"err_code": 0}
        assert device.requests == [{"system": {"set_relay_state": {"state": 1}}}]

    def test_cli_raw_bad_json(self):
        result = self.runner.invoke(cli.cli, ['--host', '127.0.0.1', 'raw', 'system',
                                              'get_sysinfo', '{nope'])
        assert result.exit_code == 2
        assert 'not valid JSON' in result.output

    def test_unconnectable_host_state(self):
        device = start_device("Silent", "plug", mode="silent")

        try:
            result = self.runner.invoke(
                cli.cli, ['--host', '127.0.0.1', '--port', str(device.port),
                          '--timeout', '0.3', 'state'])
        finally:
            stop_device(device)

        assert 'Unable to connect' in result.output
        assert result.exit_code == 1

    def test_cli_discover(self):
        device = start_device("DiscoverDevice", "plug")

        try:
            result = self.runner.invoke(
                cli.cli, ['--port', str(device.port), '--timeout', '0.5',
                          'discover', '--target', '127.0.0.1'])
        finally:
            stop_device(device)

        assert "Attempting to discover TP-Link devices on the local " \
               "network" in result.output
        assert "Found TP-Link plug at IP 127.0.0.1 with alias: DiscoverDeviceMock" in \
            result.output


if __name__ == '__main__':
    unittest.main()
