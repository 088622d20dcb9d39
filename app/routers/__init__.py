"""
Routers module - API endpoint handlers organized by feature.

- google_auth: sign in with Google (code or ID token → session)
- auth: session inspection and logout
- notes: notes CRUD
- ask: questions answered from the user's notes
"""
