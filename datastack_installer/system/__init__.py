# Path and File Name : /home/datastack/rebuild/datastack_installer/system/__init__.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Host checks package initialization

"""
Host checks: environment probing, runtime dependency, local SSH.
"""

from .env_probe import EnvironmentProber, EnvironmentReport
from .runtime_check import RuntimeChecker, RuntimeReport
from .ssh_setup import SSHSetup

__all__ = ['EnvironmentProber', 'EnvironmentReport', 'RuntimeChecker', 'RuntimeReport', 'SSHSetup']
