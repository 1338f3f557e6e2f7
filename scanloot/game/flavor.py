from __future__ import annotations

from typing import Sequence

from .rng import RandomSource

_ADJECTIVES = (
    "Ancient", "Gilded", "Whispering", "Shattered", "Radiant", "Hollow", "Frosted",
    "Crimson", "Verdant", "Sunken", "Forgotten", "Humming", "Obsidian", "Silver",
    "Twisted", "Wandering", "Glass", "Ember", "Lunar", "Rusted", "Velvet", "Storm",
)

_NOUNS = (
    "Compass", "Lantern", "Chalice", "Key", "Amulet", "Feather", "Crown", "Dagger",
    "Locket", "Mask", "Orb", "Quill", "Relic", "Scroll", "Sigil", "Talisman",
    "Idol", "Mirror", "Horn", "Bell", "Shell", "Pinecone", "Donut", "Teapot",
)

_DESCRIPTIONS = (
    "A {r} artifact discovered in the depths of forgotten dungeons.",
    "This {r} item pulses with mysterious energy.",
    "Legends speak of this {r} treasure's incredible power.",
    "A {r} relic from a bygone era of heroes and magic.",
    "This {r} piece was forged by master craftsmen of old.",
    "Once lost to myth, this {r} item has resurfaced against all odds.",
    "Said to be touched by the gods, this {r} item reflects fate itself.",
    "Whispered tales attribute incredible feats to owners of this {r} item.",
    "The runes on this {r} piece shift and glow in moonlight.",
    "Scholars debate whether this {r} item is truly of this world.",
    "This {r} object is rumored to choose its wielder.",
    "Hidden for centuries, this {r} artifact now emerges to the world.",
)

_CONSONANTS = "bcdfghjklmnpqrstvwxyz"
_VOWELS = "aeiou"


def choice(options: Sequence[str], rng: RandomSource) -> str:
    return options[min(len(options) - 1, int(rng.random() * len(options)))]


def collectable_name(rng: RandomSource) -> str:
    return f"{choice(_ADJECTIVES, rng)} {choice(_NOUNS, rng)}"


def collectable_description(rarity_name: str, rng: RandomSource) -> str:
    return choice(_DESCRIPTIONS, rng).format(r=(rarity_name or "curious").lower())


def pronounceable_word(min_len: int, max_len: int, rng: RandomSource) -> str:
    """Alternating consonant/vowel word, e.g. 'kolatu'."""
    length = min_len + min(max_len - min_len, int(rng.random() * (max_len - min_len + 1)))
    chars: list[str] = []
    for i in range(length):
        pool = _CONSONANTS if i % 2 == 0 else _VOWELS
        chars.append(choice(pool, rng))
    return "".join(chars)
