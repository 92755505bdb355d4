"""Turning file names into human-readable titles and identifiers."""

import re

# Acronyms kept upper-case whatever their casing in the file name
ACRONYMS = (
    "API", "CSS", "HTML", "SQL", "REST", "JSON", "XML", "HTTP", "HTTPS",
    "URL", "URI", "CLI", "GUI", "IDE", "SDK", "JWT",
)  # fmt: skip

_ACRONYM_PATTERN = re.compile(r"\b(" + "|".join(ACRONYMS) + r")\b", re.IGNORECASE)


def _restore_acronyms(text: str) -> str:
    return _ACRONYM_PATTERN.sub(lambda m: m.group(1).upper(), text)


def humanize_filename(filename: str, capitalize: bool = False) -> str:
    """Convert a (possibly nested) document name into readable words.

    Examples:
        >>> humanize_filename("api-design.md")
        'API design'
        >>> humanize_filename("frontend/css.md")
        'frontend CSS'
        >>> humanize_filename("rest-api-conventions.md", capitalize=True)
        'REST API Conventions'
    """
    name = re.sub(r"\.md$", "", filename)
    name = re.sub(r"[-_/]", " ", name)

    if capitalize:
        name = " ".join(word[:1].upper() + word[1:] for word in name.split(" "))
    else:
        name = name.lower()

    return _restore_acronyms(name)


def phase_title(basename: str) -> str:
    """Heading text for an embedded phase document.

    Examples:
        >>> phase_title("1-product-concept")
        'Product Concept'
        >>> phase_title("3-api-design.md")
        'API Design'
    """
    name = re.sub(r"\.md$", "", basename)
    name = re.sub(r"^[0-9]*-", "", name)
    name = re.sub(r"[-_]", " ", name)
    words = [word[:1].upper() + word[1:].lower() for word in name.split()]
    return _restore_acronyms(" ".join(words))


def skill_name(standards_path: str) -> str:
    """Directory name for the skill generated from a standards document.

    Examples:
        >>> skill_name("standards/frontend/css.md")
        'frontend-css'
    """
    name = re.sub(r"^standards/", "", standards_path)
    name = re.sub(r"\.md$", "", name)
    return name.replace("/", "-")


def normalize_name(text: str) -> str:
    """Lower-case, turn spaces and underscores into hyphens, drop other punctuation.

    Examples:
        >>> normalize_name("My Rails_Profile!")
        'my-rails-profile'
    """
    name = text.lower()
    name = re.sub(r"[ _]", "-", name)
    return re.sub(r"[^a-z0-9-]", "", name)
