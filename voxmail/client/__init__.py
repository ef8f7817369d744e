"""VoxMail client - the browser client's state and behaviour, headless.

Components:
    errors.py: Client error taxonomy
    api.py: REST client over httpx
    auth.py: Session/auth controller and token persistence
    email_store.py: Client-side email cache with optimistic mutations
    navigation.py: Current route and per-navigation state
    display.py: Font scale and contrast display variables
    pages/: Page controllers (inbox, compose, email view, settings, login, register)
    app.py: Mounts pages per route and guards private routes
"""
