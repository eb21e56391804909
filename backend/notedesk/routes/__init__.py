# Routes package init
"""
NoteDesk Backend — HTTP Routes Package
========================================

Route Inventory:
    - rpc.py:     GET  /api/rpc/{path}   (queries: profile.get, note.list, note.get)
                  POST /api/rpc/{path}   (mutations: profile.update, note.create/update/delete)
    - auth.py:    POST /api/auth/signin | signup | signout | forgot-password
    - pages.py:   GET  /, /signin, /signup, /forgot-password, /reset-password,
                       /dashboard, /notes, /profile
    - health.py:  GET  /health

Routes stay thin: they decode HTTP, build the RequestContext and hand off
to routers or the auth client.
"""
