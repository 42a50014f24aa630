"""Relay server injecting the provider credential into chat requests."""

from crispe.relay.app import RelaySettings, create_app

__all__ = ["RelaySettings", "create_app"]
