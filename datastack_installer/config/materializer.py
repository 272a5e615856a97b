# Path and File Name : /home/datastack/rebuild/datastack_installer/config/materializer.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Renders property sets into component configuration files with timestamped backup-then-write

"""
Configuration Materializer.

Renders a PropertySet into the Hadoop-style XML configuration format and edits
shell env files (hadoop-env.sh). Every overwrite of an existing file is preceded
by a timestamped backup copy. Rendered content never embeds timestamps, so the
same input always yields byte-identical output.

A target that already holds exactly the rendered content is not an overwrite:
it is neither rewritten nor backed up. Re-running with unchanged settings
therefore leaves the installed trees byte-for-byte as they were, backups
included.
"""

import logging
import os
import re
import shutil
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional
from xml.sax.saxutils import escape

from ..errors import ConfigError
from ..run_log import get_logger
from ..shell import chown_tree
from .property_sets import PropertySet

BACKUP_SUFFIX = ".bak"


@dataclass(frozen=True)
class RenderResult:
    target: Path
    changed: bool
    backup: Optional[Path] = None


def backup_file(path: Path, now: Optional[datetime] = None) -> Optional[Path]:
    """
    Copy path to path.bak.YYYYmmdd_HHMMSS (metadata preserved).

    Returns the backup path, or None when path does not exist.
    """
    path = Path(path)
    if not path.is_file():
        return None
    stamp = (now or datetime.now()).strftime('%Y%m%d_%H%M%S')
    backup = path.with_name(f"{path.name}{BACKUP_SUFFIX}.{stamp}")
    counter = 1
    while backup.exists():
        backup = path.with_name(f"{path.name}{BACKUP_SUFFIX}.{stamp}.{counter}")
        counter += 1
    shutil.copy2(path, backup)
    return backup


def render_xml(property_set: PropertySet) -> str:
    """Deterministic XML text for a property set."""
    declaration = '<?xml version="1.0" encoding="UTF-8"'
    if property_set.standalone:
        declaration += f' standalone="{property_set.standalone}"'
    lines = [
        declaration + '?>',
        '<?xml-stylesheet type="text/xsl" href="configuration.xsl"?>',
        '<configuration>',
    ]
    for prop in property_set.properties:
        lines.append('    <property>')
        lines.append(f'        <name>{escape(prop.name)}</name>')
        lines.append(f'        <value>{escape(prop.value)}</value>')
        if prop.description:
            lines.append(f'        <description>{escape(prop.description)}</description>')
        lines.append('    </property>')
    lines.append('</configuration>')
    return "\n".join(lines) + "\n"


def apply_env_exports(content: str, java_home: Path, exports: Dict[str, str]) -> str:
    """
    Set JAVA_HOME and append missing `export NAME="value"` lines.

    A commented-out or existing JAVA_HOME export is replaced in place. Other
    variables that are already exported are left alone.
    """
    java_line = f"export JAVA_HOME={java_home}"
    pattern = re.compile(r'^[ \t]*#?[ \t]*export JAVA_HOME=.*$', re.MULTILINE)
    if pattern.search(content):
        content = pattern.sub(lambda _: java_line, content, count=1)
    else:
        content = _append_line(content, java_line)

    for name, value in exports.items():
        if re.search(rf'^export {re.escape(name)}=', content, re.MULTILINE):
            continue
        content = _append_line(content, f'export {name}="{value}"')
    return content


def _append_line(content: str, line: str) -> str:
    if content and not content.endswith("\n"):
        content += "\n"
    return content + line + "\n"


class ConfigMaterializer:
    """Writes configuration files for the target user."""

    def __init__(
        self,
        owner: Optional[str] = None,
        clock: Callable[[], datetime] = datetime.now,
        logger: Optional[logging.Logger] = None,
    ):
        self.owner = owner
        self.clock = clock
        self.logger = logger or get_logger()
        self.backups: List[Path] = []

    def render(self, component_name: str, property_set: PropertySet, target_file: Path) -> RenderResult:
        """
        Render property_set into target_file.

        Raises:
            ConfigError: If the file cannot be written
        """
        return self._write(component_name, Path(target_file), render_xml(property_set))

    def edit_env_file(self, component_name: str, target_file: Path, java_home: Path,
                      exports: Dict[str, str]) -> RenderResult:
        """
        Apply JAVA_HOME and daemon-user exports to an env script.

        Raises:
            ConfigError: If the file cannot be read or written
        """
        target_file = Path(target_file)
        try:
            current = target_file.read_text() if target_file.exists() else ""
        except OSError as e:
            raise ConfigError(f"Cannot read {target_file}: {e}")
        return self._write(component_name, target_file, apply_env_exports(current, java_home, exports))

    def _write(self, component_name: str, target: Path, content: str) -> RenderResult:
        try:
            if target.is_file() and target.read_text() == content:
                self.logger.info(f"{component_name}: {target.name} already up to date")
                return RenderResult(target=target, changed=False)

            backup = backup_file(target, self.clock())
            if backup is not None:
                self.backups.append(backup)
                self.logger.info(f"Backup created: {backup}")

            target.parent.mkdir(parents=True, exist_ok=True)
            tmp = target.with_name(f".{target.name}.tmp")
            with open(tmp, 'w') as f:
                f.write(content)
            os.replace(tmp, target)
            if self.owner:
                chown_tree(target, self.owner)
        except (OSError, RuntimeError) as e:
            raise ConfigError(f"Failed to write {component_name} configuration {target}: {e}")

        self.logger.info(f"{component_name}: wrote {target}")
        return RenderResult(target=target, changed=True, backup=backup)
