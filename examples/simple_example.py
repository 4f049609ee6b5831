#!/usr/bin/env python3
"""
Simple Example: Profile Card with the DrawSurface API

Builds a small card by hand: a solid background, a round avatar, a name
wrapped to two lines and a vertical caption down the right edge.
"""

from pathlib import Path

from postergen import DrawStatus, DrawSurface, ResourceNotFoundError

AVATAR = "avatar.jpg"  # Replace with your own image path or URL; drawn only if it exists

with DrawSurface() as surface:
    surface.create_bg_with_color(600, 300, "#FDF6E3")

    # Avatar clipped to a circle
    try:
        status = surface.add_round_image(AVATAR, 30, 50, 200, 200)
    except ResourceNotFoundError:
        print(f"{AVATAR} not found, drawing text only")
    else:
        if status == DrawStatus.DECODE_FAILED:
            print(f"Could not decode {AVATAR}, drawing text only")

    # Name, wrapped into the space right of the avatar
    surface.set_size(36).set_color("#073642")
    surface.add_text("Ada Lovelace, Countess of Lovelace", 260, 110, width=300, max_lines=2)

    # Caption, one character per line, centered on the card height
    surface.set_text_params(size=18, color="#93A1A1")
    surface.add_vertical_text("POSTER", 570, 0, height=300)

    Path("card.png").write_bytes(surface.to_png())

print("✓ Card saved to: card.png")
