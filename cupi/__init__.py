"""Client library for Cisco Unity Connection: configuration, credentials, REST access and log download."""

__version__ = "0.1.0"