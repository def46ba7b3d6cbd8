"""
Settings package for the KRaft provisioner.

Static constants live in ``settings.config``; runtime configuration is modelled
with pydantic-settings in ``settings.config_models`` and assembled by
``settings.config_loader``.
"""
