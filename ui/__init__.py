"""
Terminal UI components for the provisioner.
"""
