import pytest

from pronoun_fixer.models import CharacterEntry, GlossaryView


def make_view(characters: dict, **options) -> GlossaryView:
    """Build a view from ``{name: gender}`` or ``{name: (gender, [aliases])}``."""
    entries = {}
    for name, value in characters.items():
        if isinstance(value, tuple):
            gender, aliases = value
        else:
            gender, aliases = value, []
        entries[name] = CharacterEntry(name=name, gender=gender, aliases=tuple(aliases))
    return GlossaryView(characters=entries, **options)


@pytest.fixture
def view_factory():
    return make_view


@pytest.fixture
def glossary_doc():
    return {
        "default": {
            "characters": {
                "Mary": {"gender": "female", "aliases": ["Miss Li"]},
                "John": {"gender": "male", "aliases": []},
            },
        },
        "novel/123": {
            "characters": {
                "John": {"gender": "female", "aliases": ["Young Master"]},
                "Elder Wu": {"gender": "male", "aliases": ["Wu"]},
            },
            "primaryCharacter": "Mary",
            "carryParagraphs": 1,
        },
    }
