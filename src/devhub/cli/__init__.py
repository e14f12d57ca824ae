"""
CLI - Command-line interface for DevHub.

Example:
    $ devhub list
    + github      GitHub [connected]
    - mongodb     MongoDB [disconnected]

    $ devhub connect stripe --set api_key=sk_test_...
    Connecting to Stripe...
    Connected to Stripe

    $ devhub cline sync
    Synced 2 connected service(s) to ~/.config/Code/User/...
"""

from .main import main

__all__ = ["main"]
