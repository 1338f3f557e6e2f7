"""Item acquisition engine: rarity table, catalog generation, item rolling."""
