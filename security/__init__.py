"""
security/ - Access Control
==========================
Decorators applied to every Telegram handler: user whitelist and
per-user rate limiting.
"""
