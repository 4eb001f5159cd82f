"""
Messenger backend.

Users, chats and messages live in three denormalized document collections:
users hold chat-id lists, chats hold user-id and message-id lists. The
'MessengerController' is the single entry point that keeps those references
consistent across non-transactional, multi-step writes.
"""

__version__ = "0.1.0"
