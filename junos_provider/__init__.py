"""
junos-provider - declarative management of Junos device configuration objects.

Provides Terraform-provider style resources with:
- Translation of structured models into Junos set/delete statements
- NETCONF (PyEZ) sessions with candidate lock, commit and discard
- Read-back of `display set relative` output into the same models
- A plan/apply engine driven by a YAML manifest and a JSON state file
"""

__version__ = "0.1.0"
__author__ = "junos-provider Project"
