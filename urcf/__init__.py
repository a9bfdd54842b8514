"""Service building blocks: versions, configuration, plugin manifests, netfilter control, process watching and log forwarding."""

__version__ = "0.1.0"