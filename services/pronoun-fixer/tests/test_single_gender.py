"""Tests for the single-gender replacer."""

import pytest

from pronoun_fixer.nodes.single_gender import replace_pronouns


def test_adjectival_possessive_and_sentence_start():
    text = "Mary lifted his blade. He smiled."
    assert replace_pronouns(text, "toFemale") == "Mary lifted her blade. She smiled."


def test_to_male_full_family():
    text = "She took her sword and hid it herself."
    assert replace_pronouns(text, "toMale") == "He took his sword and hid it himself."


@pytest.mark.parametrize("text,direction,expected", [
    ("He gave it to her.", "toMale", "He gave it to him."),
    ("The blade was his.", "toFemale", "The blade was hers."),
    ("The blade was hers.", "toMale", "The blade was his."),
    ("They praised him.", "toFemale", "They praised her."),
])
def test_pronominal_forms(text, direction, expected):
    assert replace_pronouns(text, direction) == expected


def test_split_reflexive_is_joined():
    assert replace_pronouns("He hurt him - self.", "toFemale") == "She hurt herself."
    assert replace_pronouns("She blamed her-self.", "toMale") == "He blamed himself."


def test_sentence_initial_is_capitalised():
    assert replace_pronouns("he ran. she fell.", "toMale") == "he ran. He fell."
    assert replace_pronouns('It ended. "he is here."', "toFemale") == 'It ended. "She is here."'


def test_upper_case_is_preserved():
    assert replace_pronouns("HE SAW HIM", "toFemale") == "SHE SAW HER"


def test_weird_spaces_are_normalised_before_matching():
    assert replace_pronouns("her\u00a0sword", "toMale") == "his sword"


def test_words_containing_pronouns_are_untouched():
    text = "The hero held the helmet in the shed."
    assert replace_pronouns(text, "toFemale") == text


def test_target_gender_text_is_unchanged():
    text = "He nodded at him and smiled to himself."
    assert replace_pronouns(text, "toMale") == text


def test_unknown_direction_raises():
    with pytest.raises(ValueError):
        replace_pronouns("He left.", "sideways")


def test_sentence_initial_reflexive_is_capitalised():
    assert replace_pronouns("He sighed. herself he blamed.", "toMale") == "He sighed. Himself he blamed."
    assert replace_pronouns("She sighed. himself she blamed.", "toFemale") == "She sighed. Herself she blamed."


def test_leading_whitespace_counts_as_sentence_start():
    assert replace_pronouns("  she ran.", "toMale") == "  He ran."
    assert replace_pronouns("\the ran.", "toFemale") == "\tShe ran."
