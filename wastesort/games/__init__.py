"""
Games module - Game content for the engine.

Each game has its own subpackage with:
- Bin definitions (rules shown to the player)
- Item catalog (display names per category)
- A factory for a ready-to-use session configuration
"""
