"""Socket.IO gateways. Namespaces are registered by ``create_app``."""
