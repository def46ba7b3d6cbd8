"""Provisioning state machine, components and orchestration."""
