"""Local-network chat client core: discovery, port scanning, framing, image settings and chat text."""

__version__ = "0.1.0"
__all__ = ["network", "host_info", "discovery", "image_settings", "chat_text"]