import json
import logging
import sys

import click

from pytplinklan import (Discover, TPLinkDevice, TPLinkDeviceException,
                         TPLinkTransportException, TPLinkUnsupportedOperation,
                         TransportConfig, __version__)
from pytplinklan.client import DEFAULT_PORT, DEFAULT_TIMEOUT, BROADCAST_ADDRESS
from pytplinklan.discover import DiscoveredDevice, classify

pass_config = click.make_pass_decorator(dict, ensure=True)


@click.group(invoke_without_command=True)
@click.option('--host', envvar="PYTPLINKLAN_HOST", required=False,
              help='The host name or IP address of the device to connect to.')
@click.option('--port', envvar="PYTPLINKLAN_PORT", default=DEFAULT_PORT,
              type=int, show_default=True,
              help='The UDP port the device listens on.')
@click.option('--timeout', envvar="PYTPLINKLAN_TIMEOUT", default=DEFAULT_TIMEOUT,
              type=float, show_default=True,
              help='Seconds to wait for the device to answer.')
@click.option('--debug/--normal', default=False)
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx, host, port, timeout, debug):
    """A cli tool for controlling TP-Link Smart Home plugs, strips and
    bulbs on the local network."""
    if debug:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.INFO)

    ctx.obj = {"host": host, "port": port, "timeout": timeout}

    if ctx.invoked_subcommand == "discover":
        return

    if host is None:
        click.echo("No host name given, see usage below:")
        click.echo(ctx.get_help())
        sys.exit(1)


@cli.command()
@click.option('--target', default=BROADCAST_ADDRESS, show_default=True,
              help='Address the discovery probe is sent to.')
@pass_config
def discover(config: dict, target):
    """Discover devices in the network."""
    click.echo(
        "Attempting to discover TP-Link devices "
        "on the local network, please wait..."
    )
    transport_config = TransportConfig(
        host=target,
        port=config['port'],
        read_timeout=config['timeout'],
        write_timeout=config['timeout'],
        broadcast=True
    )

    try:
        found_devices = Discover.discover(config=transport_config)
    except TPLinkDeviceException as ex:
        click.echo("Discovery failed: %s" % ex)
        sys.exit(1)

    for ip, device in found_devices.items():
        click.echo("Found TP-Link %s at IP %s with alias: %s" % (
            device.kind.value, ip, device.sys_info.get('alias')))

    return found_devices


def connect(config: dict) -> TPLinkDevice:
    """Ask the device for its sysinfo and build the matching handle."""
    device = TPLinkDevice(config['host'], port=config['port'],
                          timeout=config['timeout'])
    sys_info = device.sys_info

    discovered = DiscoveredDevice(config['host'], classify(sys_info), sys_info)

    return TPLinkDevice.from_discovery(discovered, port=config['port'],
                                       timeout=config['timeout'])


def print_device_details(device: TPLinkDevice):
    click.echo(
        click.style("== Device: %s (%s) ==" % (device.alias, device.host),
                    bold=True)
    )
    click.echo("Model: %s" % device.model)

    try:
        is_on = device.is_on
    except TPLinkUnsupportedOperation:
        # power strips and unrecognised devices have no single on/off state
        click.echo("State: n/a")
        return

    click.echo("State: " + click.style(
        "ON" if is_on else "OFF",
        fg="green" if is_on else "red")
               )


def run_device_command(config: dict, action, detect_kind=True):

    try:
        if detect_kind:
            device = connect(config)
        else:
            device = TPLinkDevice(config['host'], port=config['port'],
                                  timeout=config['timeout'], cache_ttl=None)

        action(device)

    except TPLinkTransportException as ex:
        click.echo("Unable to connect to %s: %s" % (config['host'], ex))
        sys.exit(1)

    except TPLinkDeviceException as ex:
        click.echo("Error from %s: %s" % (config['host'], ex))
        sys.exit(1)


@cli.command()
@pass_config
def state(config: dict):
    """Connect to device, print out alias, model and state."""
    run_device_command(config, print_device_details)


def switch_device(config: dict, new_state):

    def switch(device: TPLinkDevice):
        click.echo("Initial state:")
        print_device_details(device)

        if new_state == "on":
            device.turn_on()
        else:
            device.turn_off()

        click.echo("New state:")
        print_device_details(device)

    run_device_command(config, switch)


@cli.command()
@pass_config
def on(config: dict):
    """Turn the device on."""
    switch_device(config, 'on')


@cli.command()
@pass_config
def off(config: dict):
    """Turn the device off."""
    switch_device(config, 'off')


@cli.command()
@click.argument('namespace')
@click.argument('command')
@click.argument('argument', required=False)
@pass_config
def raw(config: dict, namespace, command, argument):
    """Run COMMAND in NAMESPACE, with an optional JSON ARGUMENT."""
    if argument is not None:
        try:
            argument = json.loads(argument)
        except ValueError as ex:
            raise click.BadParameter("not valid JSON: %s" % ex,
                                     param_hint='ARGUMENT')

    def execute(device: TPLinkDevice):
        result = device.client.execute(namespace, command, argument)
        click.echo(json.dumps(result, indent=2, sort_keys=True))

    run_device_command(config, execute, detect_kind=False)


if __name__ == "__main__":
    cli()
