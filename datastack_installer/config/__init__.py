# Path and File Name : /home/datastack/rebuild/datastack_installer/config/__init__.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Configuration materialization package initialization

from .materializer import ConfigMaterializer, RenderResult, backup_file
from .profile_editor import ProfileEditor
from .property_sets import Property, PropertySet, hadoop_env_exports, hadoop_property_sets, hive_property_sets

__all__ = [
    'ConfigMaterializer', 'RenderResult', 'backup_file', 'ProfileEditor',
    'Property', 'PropertySet', 'hadoop_env_exports', 'hadoop_property_sets', 'hive_property_sets',
]
