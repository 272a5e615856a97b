# Path and File Name : /home/datastack/rebuild/datastack_installer/services/__init__.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Service lifecycle package initialization

from .liveness import LivenessChecker, ProcessInfo, ProcessTableLiveness
from .roles import ExecutionContext, ProcessRole, build_roles
from .supervisor import ServiceSupervisor, StatusReport, build_supervisor
from .supervisor_writer import write_launcher

__all__ = [
    'LivenessChecker', 'ProcessInfo', 'ProcessTableLiveness',
    'ExecutionContext', 'ProcessRole', 'build_roles',
    'ServiceSupervisor', 'StatusReport', 'build_supervisor', 'write_launcher',
]
