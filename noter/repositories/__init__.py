# Repositories package init
"""
Noter Backend: Repositories Layer
===================================

What:  Translates domain operations into SQL through the shared Database.

Repository Inventory:
    - NoteRepository: insert, list newest-first, get by id
"""
