"""
Component provisioners.

Each subpackage registers its provisioner with the ProvisionerRegistry when
imported; the orchestrator imports every module found here.
"""
