"""
core/ - Update Dispatch Layer
=============================
Decides which single handler owns each incoming event.
Knows nothing about SQL or the Bot API; talks to storage only through
the UserDirectory protocol and to handlers only through their predicates.
"""
