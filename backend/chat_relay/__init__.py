"""
Chat relay between live browser clients and a webhook-driven automation backend.

Run with ``chat-relay --host 127.0.0.1 --port 8000`` or build the app
yourself::

    from chat_relay.main import create_app
    app = create_app()
"""

__version__ = "0.1.0"
