"""
Chat package for DataBot.

Google Chat messenger and message rendering.
"""

from databot.chat.messenger import ChatMessenger
from databot.chat.rendering import render_turn

__all__ = ["ChatMessenger", "render_turn"]
