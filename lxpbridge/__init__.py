"""Frame codec, input register decoding and MQTT message mapping for LuxPower inverters."""

__version__ = "0.1.0"