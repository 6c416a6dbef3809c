"""Open Sound Control messages, bundles, time tags, client and server over UDP."""

__version__ = "0.1.0"