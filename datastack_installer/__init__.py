# Path and File Name : /home/datastack/rebuild/datastack_installer/__init__.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Datastack installer package initialization

"""
Datastack Installer: single-host Hadoop, Hive and Pig provisioning,
the generated service supervisor, and uninstall.
"""

__version__ = "1.0.0"
