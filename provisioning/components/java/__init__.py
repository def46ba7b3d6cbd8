"""OpenJDK runtime provisioner."""
