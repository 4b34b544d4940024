"""
Cluster Module - Black Box Interface

Purpose: Resolve platform pods and run commands inside them
Interface: PodLocator.locate_pod(), RemoteCommandExecutor.exec_in_pod()
Hidden: kubectl invocation, output parsing, failure classification

Can be replaced with a direct Kubernetes API client.
"""

from .exec import ExecResult, RemoteCommandExecutor
from .kubectl import KubectlRunner
from .pods import PodLocator, RemotePod

__all__ = [
    "ExecResult",
    "KubectlRunner",
    "PodLocator",
    "RemoteCommandExecutor",
    "RemotePod",
]
