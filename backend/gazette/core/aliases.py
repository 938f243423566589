from slugify import slugify

MAX_ALIAS_LENGTH = 200


def make_alias(text: str) -> str:
    """Turn a name or title into a lowercase, accent-free, hyphenated URL token.

    >>> make_alias("Écologie et Société")
    'ecologie-et-societe'
    """
    return slugify(text or "", max_length=MAX_ALIAS_LENGTH, word_boundary=True)
