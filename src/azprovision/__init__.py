"""azprovision - Azure VM provisioning orchestrator

Philosophy:
- Ruthless simplicity
- Brick architecture (self-contained modules)
- Ensure-or-create: only create what is confirmed absent
- Fail fast with classified errors

Creates an Azure VM from a declarative request, resolving or creating its
network interface and public IP, waiting for the create to finish and
reporting the VM's addresses.

Entry points:
    azprovision.vm_creator.VMCreator: Library orchestrator
    azprovision.cli.main: Command line interface
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
