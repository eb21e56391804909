# Services package init
"""
NoteDesk Backend — Services Layer
===================================

Service Inventory:
    - SupabaseAuthClient (auth_service): REST client for the hosted auth provider
    - SessionResolver (session_service): request cookies → optional verified identity
"""
