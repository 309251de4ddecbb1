"""
services/ - Business Logic Layer
================================
Services sit between the Telegram handlers and the repositories and
produce the reply text the handlers send back.
"""
