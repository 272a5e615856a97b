# Path and File Name : /home/datastack/rebuild/datastack_installer/services/supervisor_writer.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Emits the standalone supervisor launcher script for the operator

"""
Supervisor launcher writer.

The launcher is a small executable Python script carrying the run's resolved
settings as JSON. It keeps working after the provisioning run has exited.
"""

import json
import os
import sys
from pathlib import Path
from typing import Optional

from ..settings import InstallerSettings
from ..shell import chown_tree

PACKAGE_ROOT = Path(__file__).resolve().parent.parent.parent


def render_launcher(settings: InstallerSettings, interpreter: Optional[str] = None,
                    package_root: Optional[Path] = None) -> str:
    """Launcher source text. Deterministic for the same settings."""
    interpreter = interpreter or sys.executable or "/usr/bin/env python3"
    package_root = package_root or PACKAGE_ROOT
    settings_json = json.dumps(settings.to_dict(), indent=4, sort_keys=True)
    return f"""#!{interpreter}
# Path and File Name : {settings.supervisor_script}
# Details of functionality of this file: Starts, stops and reports the Hadoop and Hive services

\"\"\"
Hadoop & Hive service manager.

Usage: {settings.supervisor_script.name} [start|stop|restart|status|help]
\"\"\"

import json
import sys

# Fallback import location when the installer package is not installed
sys.path.append({str(package_root)!r})

SETTINGS_JSON = {settings_json!r}

if __name__ == '__main__':
    from datastack_installer.services.supervisor_cli import main
    sys.exit(main(sys.argv[1:], json.loads(SETTINGS_JSON)))
"""


def write_launcher(settings: InstallerSettings, interpreter: Optional[str] = None) -> Path:
    """
    Write the launcher to settings.supervisor_script (mode 0755, owned by the target user).

    Raises:
        RuntimeError: If the file cannot be written or its ownership set
    """
    path = settings.supervisor_script
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            f.write(render_launcher(settings, interpreter))
        os.chmod(path, 0o755)
    except OSError as e:
        raise RuntimeError(f"Failed to write supervisor script {path}: {e}")
    chown_tree(path, settings.user)
    return path
