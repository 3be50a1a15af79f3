"""
transport/ - Bot API Layer
==========================
Everything that talks to Telegram: turning updates into events for the
dispatcher and delivering the resulting replies.
"""
