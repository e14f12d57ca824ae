"""
CLI Output - Plain-text formatting for command results.
"""

import sys

from ..models import ServiceDescriptor
from ..observers.tree import ICONS, MARKERS, mask

__all__ = ["print_error", "print_service", "print_services"]


def print_error(message: str) -> None:
    print(f"Error: {message}", file=sys.stderr)


def _marker(service: ServiceDescriptor) -> str:
    return MARKERS[ICONS[service.status]]


def print_services(services: list[ServiceDescriptor]) -> None:
    if not services:
        print("No services registered")
        return
    width = max(len(s.id) for s in services)
    for s in services:
        print(f"{_marker(s)} {s.id.ljust(width)}  {s.name} [{s.status.value}]")


def print_service(service: ServiceDescriptor, secret_keys: set[str]) -> None:
    print(f"{service.name} ({service.id})")
    print(f"  Kind:   {service.kind.value}")
    print(f"  Status: {service.status.value}")
    if service.last_connected_at:
        print(f"  Last connected: {service.last_connected_at.isoformat()}")
    if service.last_error:
        print(f"  Error:  {service.last_error}")
    if service.config:
        print("  Config:")
        for key in sorted(service.config):
            value = service.config[key]
            print(f"    {key} = {mask(value) if key in secret_keys else value}")
