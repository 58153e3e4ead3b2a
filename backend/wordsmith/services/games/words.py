import random

from .errors import ValidationError

# Curated vocabulary for poetry challenges
POOL = (
    # Nature
    "ocean", "mountain", "forest", "river", "sky",
    "moon", "star", "sun", "cloud", "rain",
    "flower", "tree", "leaf", "thunder", "wind",
    "dawn", "dusk", "twilight", "sunrise", "sunset",

    # Time
    "morning", "evening", "night", "day", "moment",
    "eternity", "forever", "instant", "season", "autumn",
    "winter", "spring", "summer", "time", "hour",
    "midnight", "memory", "yesterday", "tomorrow", "today",

    # Emotions
    "love", "hope", "dream", "joy", "sorrow",
    "anger", "peace", "fear", "wonder", "desire",
    "passion", "longing", "grief", "delight", "despair",
    "courage", "faith", "trust", "loneliness", "serenity",

    # Abstract
    "freedom", "truth", "beauty", "silence", "whisper",
    "shadow", "light", "darkness", "echo", "journey",
    "mirror", "reflection", "spirit", "soul", "destiny",
    "fate", "wisdom", "infinity", "mystery", "secret",

    # Objects
    "feather", "glass", "stone", "crystal", "candle",
    "flame", "door", "window", "bridge", "path",
    "treasure", "veil", "key", "crown", "sword",
    "book", "page", "letter", "portrait", "melody",

    # Descriptive
    "ancient", "eternal", "fragile", "broken", "golden",
    "silver", "velvet", "crimson", "azure", "emerald",
    "silent", "hollow", "sacred", "wild", "gentle",
    "fierce", "luminous", "hidden", "forgotten", "distant",
)


def draw(count: int, rng: random.Random = None) -> list:
    """Return `count` distinct words from the pool, sampled without replacement."""
    if count < 0:
        raise ValidationError(f"Cannot draw a negative number of words ({count})")
    if count > len(POOL):
        raise ValidationError(f"Cannot draw {count} words from a pool of {len(POOL)}")
    return (rng or random).sample(POOL, count)
