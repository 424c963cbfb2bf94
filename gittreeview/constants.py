"""Glyphs used when composing tree item labels."""


class GlyphChars:
    """Characters shared by node labels."""
    ArrowLeftRight = '⇆'
    Check = '✔'
    Dash = '—'
    Dot = '•'
    Space = ' '


# Suffix appended to "show all" pagers, which can trigger an uncapped query
SHOW_ALL_SUFFIX = f" {GlyphChars.Dash} this may take a while"

# All-zero sha used for working tree (uncommitted) changes
UNCOMMITTED_SHA = '0' * 40
