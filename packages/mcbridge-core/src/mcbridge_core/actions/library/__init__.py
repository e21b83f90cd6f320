"""
General-purpose actions shipped with mcbridge.

Each module in this package is scanned by ActionDiscovery when
"mcbridge_core.actions.library" is one of the discovery locations
(the default). Game-specific actions are supplied by the host as plugin
directories or packages.
"""
