"""Installer hooks: register the layer after install, unregister after uninstall."""
import argparse
import logging
import sys
from pathlib import PureWindowsPath

from core import config
from core.errors import ConfigToolError
from core.layer_registration import LayerRegistrar
from core.logging_setup import setup_logging


def manifest_path(install_dir):
    """Absolute manifest path inside the install directory."""
    return str(PureWindowsPath(install_dir) / config.MANIFEST_NAME)


def after_install(install_dir, registrar=None):
    registrar = registrar or LayerRegistrar()
    path = manifest_path(install_dir)
    registrar.install(path)
    return path


def after_uninstall(install_dir, registrar=None):
    """Best-effort cleanup; never raises so the uninstall can complete."""
    try:
        registrar = registrar or LayerRegistrar()
        return registrar.uninstall(manifest_path(install_dir))
    except Exception:
        logging.error("Layer unregistration failed during uninstall", exc_info=True)
        return False


def main(argv=None):
    """Installer entry point: ``python -m core.setup_actions install|uninstall DIR``."""
    parser = argparse.ArgumentParser(prog="setup_actions")
    parser.add_argument("action", choices=("install", "uninstall"))
    parser.add_argument("install_dir")
    args = parser.parse_args(argv)

    setup_logging()
    if args.action == "install":
        try:
            after_install(args.install_dir)
        except ConfigToolError as exc:
            logging.error("Layer registration failed: %s", exc)
            return 1
        return 0
    after_uninstall(args.install_dir)
    return 0


if __name__ == "__main__":
    sys.exit(main())
