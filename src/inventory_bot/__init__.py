"""
LINE Inventory Request Bot (Lambda)

Where: AWS Lambda via Function URL (LINE Messaging API webhook target).
What:  Normalize chat text, parse "5NN 2本 欲しい" style reorder requests, reply via LINE.
Why:   Minimal, stateless intake for salon stock reorders from a LINE group.
"""

__all__ = [
    "config",
    "credentials",
    "handler",
    "line",
    "messages",
    "parser",
]
