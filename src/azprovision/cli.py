"""Command line interface for azprovision.

Commands:
    create     Create a VM and wait for it to finish provisioning
    parse-id   Parse an ARM resource identifier
    images     List well-known image aliases
    sizes      List common VM sizes
    config     Show or write the configuration file
"""

import json
import logging
import os
import sys
import tomllib
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.table import Table

from azprovision import __version__
from azprovision.auth_models import AuthMethod
from azprovision.azure_provider import AzureProvider
from azprovision.config_manager import ConfigError, ConfigManager, ProvisionerConfig
from azprovision.credential_factory import CredentialFactoryError
from azprovision.exceptions import ContractViolationError, ProvisioningError
from azprovision.long_running import OperationContext
from azprovision.resource_id import parse_resource_id
from azprovision.vm_creator import VMCreator
from azprovision.vm_request import (
    COMMON_VM_SIZES,
    IMAGE_FIELD_KEYS,
    CreationRequest,
    CreationResult,
    OSDiskType,
    list_well_known_images,
)

logger = logging.getLogger(__name__)

ADMIN_PASSWORD_ENV_VAR = "AZPROVISION_ADMIN_PASSWORD"  # noqa: S105 - env var name


def _load_request_file(path: str) -> dict[str, Any]:
    """Read a request mapping from a TOML or JSON file."""
    file_path = Path(path)
    try:
        if file_path.suffix.lower() == ".json":
            data = json.loads(file_path.read_text())
        elif file_path.suffix.lower() == ".toml":
            with open(file_path, "rb") as f:
                data = tomllib.load(f)
        else:
            raise click.BadParameter(
                f"unsupported request file type '{file_path.suffix}' (use .toml or .json)",
                param_hint="--request-file",
            )
    except (OSError, json.JSONDecodeError, tomllib.TOMLDecodeError) as e:
        raise click.BadParameter(f"cannot read {path}: {e}", param_hint="--request-file") from e

    if not isinstance(data, dict):
        raise click.BadParameter(f"{path} must contain a mapping", param_hint="--request-file")
    return data


def _parse_tags(values: tuple[str, ...]) -> dict[str, str]:
    tags = {}
    for value in values:
        key, sep, tag_value = value.partition("=")
        if not sep or not key.strip():
            raise click.BadParameter(f"expected KEY=VALUE, got '{value}'", param_hint="--tag")
        tags[key.strip()] = tag_value.strip()
    return tags


def _print_result(console: Console, result: CreationResult) -> None:
    table = Table(title=f"VM {result.name}", show_header=True)
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value", style="green")
    for key, value in result.to_dict().items():
        table.add_row(key, value or "-")
    console.print(table)


def _run_with_cancellation(
    creator: VMCreator, request: CreationRequest, context: OperationContext
) -> CreationResult:
    """Run the creation on a worker thread so Ctrl-C can cancel the wait."""
    with ThreadPoolExecutor(max_workers=1) as executor:
        future = executor.submit(creator.create_vm, request, context)
        try:
            return future.result()
        except KeyboardInterrupt:
            click.echo("\nCancelling wait (the Azure operation keeps running)...", err=True)
            context.cancel()
            return future.result()


@click.group(context_settings={"help_option_names": ["--help", "-h"]})
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    help="Config file path (default: ~/.azprovision/config.toml)",
)
@click.version_option(version=__version__)
@click.pass_context
def main(ctx: click.Context, verbose: bool, config_path: str | None) -> None:
    """azprovision - Azure VM provisioning orchestrator.

    Creates a VM from a declarative request: resolves or creates its network
    interface and public IP, submits the create and waits for it, then
    reports the VM's addresses.

    \b
    Examples:
        azprovision create --request-file vm.toml
        azprovision create -g rg1 -n vm1 -l eastus -s Standard_B1s \\
            -u azureuser --vnet vnet1 --subnet default --public-ip vm1-ip
        azprovision parse-id /subscriptions/.../networkInterfaces/nic1
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO, format="%(message)s"
    )
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@main.command()
@click.option("--request-file", type=click.Path(exists=True, dir_okay=False), help="TOML or JSON request")
@click.option("--resource-group", "-g", help="Resource group")
@click.option("--name", "-n", help="VM name")
@click.option("--location", "-l", help="Azure region (default: from config)")
@click.option("--size", "-s", help="VM size, e.g. Standard_B1s")
@click.option("--admin-username", "-u", help="Administrator user name")
@click.option("--admin-password", help=f"Administrator password (or set {ADMIN_PASSWORD_ENV_VAR})")
@click.option("--image", help="Image alias or publisher:offer:sku[:version] URN")
@click.option("--nic-id", help="Existing network interface id")
@click.option("--vnet", help="Virtual network name (with --subnet)")
@click.option("--subnet", help="Subnet name (with --vnet)")
@click.option("--public-ip", help="Public IP name to reuse or create")
@click.option(
    "--os-disk-type",
    type=click.Choice([t.value for t in OSDiskType]),
    help="OS disk storage tier (default: StandardSSD_LRS)",
)
@click.option("--os-disk-size", type=int, help="OS disk size in GB")
@click.option(
    "--custom-data-file",
    type=click.Path(exists=True, dir_okay=False),
    help="cloud-init file passed as custom data",
)
@click.option("--tag", "tags", multiple=True, help="KEY=VALUE tag (repeatable)")
@click.option("--timeout", type=float, help="Seconds to wait before giving up (default: from config)")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
@click.pass_context
def create(
    ctx: click.Context,
    request_file: str | None,
    resource_group: str | None,
    name: str | None,
    location: str | None,
    size: str | None,
    admin_username: str | None,
    admin_password: str | None,
    image: str | None,
    nic_id: str | None,
    vnet: str | None,
    subnet: str | None,
    public_ip: str | None,
    os_disk_type: str | None,
    os_disk_size: int | None,
    custom_data_file: str | None,
    tags: tuple[str, ...],
    timeout: float | None,
    as_json: bool,
) -> None:
    """Create a VM and wait until Azure finishes provisioning it.

    Options override values from --request-file.
    """
    try:
        config = ConfigManager.load_effective_config(ctx.obj.get("config_path"))

        data: dict[str, Any] = _load_request_file(request_file) if request_file else {}
        overrides = {
            "resource_group": resource_group,
            "name": name,
            "location": location,
            "size": size,
            "admin_username": admin_username,
            "admin_password": admin_password,
            "image": image,
            "network_interface_id": nic_id,
            "virtual_network_name": vnet,
            "subnet_name": subnet,
            "public_ip_name": public_ip,
            "os_disk_type": os_disk_type,
            "os_disk_size_gb": os_disk_size,
        }
        if image is not None:
            # --image replaces the whole image, including per-field keys from the file
            for key in IMAGE_FIELD_KEYS:
                data.pop(key, None)
        data.update({key: value for key, value in overrides.items() if value is not None})
        if custom_data_file:
            data["custom_data"] = Path(custom_data_file).read_text()
        if tags:
            data["tags"] = _parse_tags(tags)

        try:
            request = CreationRequest.from_dict(data)
        except ValueError as e:
            raise click.BadParameter(str(e)) from e

        if not request.location.strip():
            request.location = config.default_location
        if not request.admin_password:
            request.admin_password = os.getenv(ADMIN_PASSWORD_ENV_VAR) or click.prompt(
                "Admin password", hide_input=True, confirmation_prompt=True
            )

        provider = AzureProvider.from_config(config)
        context = OperationContext(timeout=timeout or config.operation_timeout)
        result = _run_with_cancellation(VMCreator(provider), request, context)

    except ProvisioningError as e:
        click.echo(f"Error [{e.kind}]: {e}", err=True)
        sys.exit(1)
    except (ConfigError, CredentialFactoryError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        _print_result(Console(), result)


@main.command("parse-id")
@click.argument("resource_id")
@click.option("--type", "expected_type", help="Required resource type, e.g. networkInterfaces")
@click.option("--json", "as_json", is_flag=True, help="Print as JSON")
def parse_id(resource_id: str, expected_type: str | None, as_json: bool) -> None:
    """Parse an ARM resource identifier."""
    try:
        parsed = parse_resource_id(resource_id, expected_type)
    except ContractViolationError as e:
        click.echo(f"Error [{e.kind}]: {e}", err=True)
        sys.exit(1)

    fields = {
        "name": parsed.name,
        "resource_group": parsed.resource_group,
        "subscription_id": parsed.subscription_id,
        "provider_namespace": parsed.provider_namespace,
        "resource_type": parsed.resource_type,
    }
    if as_json:
        click.echo(json.dumps(fields, indent=2))
        return

    table = Table(show_header=False)
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value")
    for key, value in fields.items():
        table.add_row(key, value or "-")
    Console().print(table)


@main.command()
def images() -> None:
    """List well-known image aliases."""
    table = Table(title="Well-known images", show_header=True)
    table.add_column("Alias", style="cyan", no_wrap=True)
    table.add_column("URN", style="green")
    for alias, image in list_well_known_images().items():
        table.add_row(alias, image.urn)
    Console().print(table)


@main.command()
def sizes() -> None:
    """List common VM sizes."""
    for size in COMMON_VM_SIZES:
        click.echo(size)


@main.group("config")
def config_group() -> None:
    """Show or write the configuration file."""


@config_group.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Show the effective configuration (file + environment)."""
    try:
        config = ConfigManager.load_effective_config(ctx.obj.get("config_path"))
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    table = Table(title="azprovision configuration", show_header=True)
    table.add_column("Setting", style="cyan", no_wrap=True)
    table.add_column("Value", style="green")
    for key in ProvisionerConfig.__dataclass_fields__:
        value = getattr(config, key)
        table.add_row(key, "-" if value is None else str(value))
    Console().print(table)


@config_group.command("init")
@click.option("--subscription-id", prompt="Subscription ID", help="Azure subscription id")
@click.option("--location", default="eastus", show_default=True, help="Default region")
@click.option(
    "--auth-method",
    type=click.Choice([m.value for m in AuthMethod]),
    default=AuthMethod.AZURE_CLI.value,
    show_default=True,
)
@click.option("--tenant-id", help="Tenant id (sp_secret)")
@click.option("--client-id", help="Client id (sp_secret)")
@click.option("--managed-identity-client-id", help="User-assigned identity client id")
@click.option("--poll-interval", type=float, help="Seconds between operation polls")
@click.option("--timeout", type=float, default=1800.0, show_default=True, help="Operation timeout")
@click.pass_context
def config_init(
    ctx: click.Context,
    subscription_id: str,
    location: str,
    auth_method: str,
    tenant_id: str | None,
    client_id: str | None,
    managed_identity_client_id: str | None,
    poll_interval: float | None,
    timeout: float,
) -> None:
    """Write the configuration file."""
    config = ProvisionerConfig(
        subscription_id=subscription_id,
        default_location=location,
        auth_method=auth_method,
        tenant_id=tenant_id,
        client_id=client_id,
        managed_identity_client_id=managed_identity_client_id,
        poll_interval=poll_interval,
        operation_timeout=timeout,
    )
    try:
        config.to_auth_config()
        path = ConfigManager.save_config(config, ctx.obj.get("config_path"))
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Configuration saved to {path}")


if __name__ == "__main__":
    main()
